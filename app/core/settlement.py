"""
Balance engine.

Turns a list of expenses into net balances per user, then into the list of
debtor -> creditor transfers that settles them.

Settlement is greedy: on every round the largest outstanding debtor pays the
largest outstanding creditor ``min(debt, credit)``. Each round retires at
least one party, so N participants with a non-zero balance need at most
N - 1 transfers. Ties are broken by ``user_id`` ascending so the output is
deterministic for a given input.
"""

import logging
from decimal import Decimal
from typing import Callable, Dict, Iterable, List, Mapping, Optional, Tuple
from app.core.exceptions import InvalidExpenseError
from app.core.utils import to_decimal
from app.models.debt_summary import DebtSummary
from app.models.expense import Expense
from app.models.user import User

logger = logging.getLogger(__name__)

# Remaining balances smaller than this are treated as settled
SETTLEMENT_EPSILON = Decimal("0.005")

ZERO = Decimal("0")

def settlement_sort_key(entry: Tuple[str, Decimal]):
    """Largest magnitude first, then ``user_id`` ascending."""
    uid, amount = entry
    return (-amount, uid)

def _checked_amount(value, field: str, index: int) -> Decimal:
    try:
        amount = to_decimal(value)
    except (TypeError, ValueError) as e:
        raise InvalidExpenseError(f"Expense #{index}: {field} is invalid ({e})", field=field, index=index)

    if not amount.is_finite():
        raise InvalidExpenseError(f"Expense #{index}: {field} must be a finite number", field=field, index=index)
    if amount < 0:
        raise InvalidExpenseError(f"Expense #{index}: {field} must not be negative, got {amount}", field=field, index=index)
    return amount

def compute_net_balances(expenses: Iterable[Expense]) -> Dict[str, Decimal]:
    """Net balance per ``user_id``: positive is owed money, negative owes money.

    Each split share moves ``amount`` from the split user to the payer. A
    payer's own share is skipped. Split totals are trusted as recorded, even
    when they don't add up to the expense price.

    Raises InvalidExpenseError on a negative or non-finite price or share.
    """
    net: Dict[str, Decimal] = {}
    count = 0

    for index, expense in enumerate(expenses):
        count += 1
        _checked_amount(expense.price, "price", index)
        payer_id = expense.paid_by.user_id
        net.setdefault(payer_id, ZERO)

        for split in expense.split_details:
            amount = _checked_amount(split.amount, "split_details.amount", index)
            uid = split.user.user_id
            net.setdefault(uid, ZERO)

            if uid == payer_id:
                continue

            net[uid] -= amount
            net[payer_id] += amount

    logger.debug("Computed net balances for %d users from %d expenses", len(net), count)
    return net

def settle_balances(
    net_balances: Mapping[str, Decimal],
    users: Optional[Mapping[str, User]] = None,
    epsilon: Decimal = SETTLEMENT_EPSILON,
    sort_key: Callable[[Tuple[str, Decimal]], object] = settlement_sort_key,
) -> List[DebtSummary]:
    """Greedy largest-debtor vs largest-creditor matching.

    ``users`` resolves ids to full identities for the summaries; ids missing
    from it become ``User(user_id=uid)``. Results are in emission order.
    """
    users = users or {}
    epsilon = to_decimal(epsilon)
    if epsilon < 0:
        raise ValueError("epsilon must not be negative")

    creditors: List[Tuple[str, Decimal]] = []
    debtors: List[Tuple[str, Decimal]] = []

    for uid, bal in net_balances.items():
        bal = to_decimal(bal)
        if bal == ZERO or abs(bal) < epsilon:
            continue
        if bal > 0:
            creditors.append((uid, bal))
        else:
            debtors.append((uid, -bal))

    participants = len(creditors) + len(debtors)
    transfers: List[DebtSummary] = []

    while creditors and debtors:
        creditors.sort(key=sort_key)
        debtors.sort(key=sort_key)

        cred_id, cred_amt = creditors[0]
        debt_id, debt_amt = debtors[0]

        pay_amt = min(cred_amt, debt_amt)

        transfers.append(DebtSummary(
            from_user=users.get(debt_id) or User(user_id=debt_id),
            to_user=users.get(cred_id) or User(user_id=cred_id),
            amount=pay_amt,
        ))

        new_cred = cred_amt - pay_amt
        new_debt = debt_amt - pay_amt

        if new_cred == ZERO or new_cred < epsilon:
            creditors.pop(0)
        else:
            creditors[0] = (cred_id, new_cred)

        if new_debt == ZERO or new_debt < epsilon:
            debtors.pop(0)
        else:
            debtors[0] = (debt_id, new_debt)

    logger.debug("Settled %d participants with %d transfers", participants, len(transfers))
    return transfers

def collect_users(expenses: Iterable[Expense]) -> Dict[str, User]:
    """Map ``user_id`` to the first ``User`` seen for it across the expenses."""
    users: Dict[str, User] = {}
    for expense in expenses:
        for user in expense.participants():
            users.setdefault(user.user_id, user)
    return users

def calculate_debts(
    expenses: Iterable[Expense],
    epsilon: Decimal = SETTLEMENT_EPSILON,
    sort_key: Callable[[Tuple[str, Decimal]], object] = settlement_sort_key,
) -> List[DebtSummary]:
    expenses = list(expenses)
    if not expenses:
        return []

    net = compute_net_balances(expenses)
    return settle_balances(net, users=collect_users(expenses), epsilon=epsilon, sort_key=sort_key)
