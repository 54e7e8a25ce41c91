import logging
from decimal import Decimal
from typing import List
from app.core.config import Settings
from app.core.settlement import collect_users, compute_net_balances, settle_balances
from app.core.utils import qround, to_decimal
from app.models.expense import Expense
from app.repositories.expense_repository import ExpenseRepository
from app.services.expense_services import get_expense_list_or_404

logger = logging.getLogger(__name__)

async def get_overall_balances(repo: ExpenseRepository, list_id: str, config: Settings):
    await get_expense_list_or_404(repo, list_id)
    net = compute_net_balances(await repo.fetch_expenses(list_id))

    # Same cut-off as settlement, so a settled user never shows up as 0.00
    return {
        uid: str(qround(amount))
        for uid, amount in net.items()
        if abs(amount) >= config.SETTLEMENT_EPSILON
    }

async def get_user_balance(
    repo: ExpenseRepository,
    list_id: str,
    user_id: str
):
    await get_expense_list_or_404(repo, list_id)
    expenses = await repo.fetch_expenses(list_id)

    paid = Decimal("0")
    share = Decimal("0")

    for expense in expenses:
        for split in expense.split_details:
            amount = to_decimal(split.amount)
            if expense.paid_by.user_id == user_id:
                paid += amount
            if split.user.user_id == user_id:
                share += amount

    net = compute_net_balances(expenses)

    return {
        "user_id": user_id,
        "total_paid": str(qround(paid)),
        "total_share": str(qround(share)),
        "net_balance": str(qround(net.get(user_id, Decimal("0"))))
    }

def settle_expenses(expenses: List[Expense], config: Settings):
    net = compute_net_balances(expenses)
    transfers = settle_balances(net, users=collect_users(expenses), epsilon=config.SETTLEMENT_EPSILON)

    # Drop near-zero balances
    net = {
        uid: amt
        for uid, amt in net.items()
        if abs(amt) >= config.SETTLEMENT_EPSILON
    }

    logger.debug("Settling %d expenses: %d transfers", len(expenses), len(transfers))

    return {
        "net": {
            uid: str(qround(amt))
            for uid, amt in net.items()
        },
        "settlements": [
            {
                "from_id": t.from_user.user_id,
                "from_name": t.from_user.name,
                "to_id": t.to_user.user_id,
                "to_name": t.to_user.name,
                "amount": str(qround(t.amount)),
                "display": t.to_display_string(config.CURRENCY_SYMBOL),
            }
            for t in transfers
        ]
    }

async def get_simplified_balances(repo: ExpenseRepository, list_id: str, config: Settings):
    await get_expense_list_or_404(repo, list_id)
    return settle_expenses(await repo.fetch_expenses(list_id), config)
