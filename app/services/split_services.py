"""
Builders for the per-user shares of an expense.

All builders work in cents so the shares always add up to the price exactly.
Leftover cents from an uneven division go one each to the first users in
order, e.g. 100.00 split three ways is 33.34, 33.33, 33.33.
"""

from decimal import Decimal, ROUND_DOWN
from typing import Dict, List, Mapping, Optional, Sequence
from app.core.exceptions import InvalidSplitError
from app.core.utils import CENTS, qround, to_decimal
from app.models.expense import SplitDetail
from app.models.split_method import SplitMethod
from app.models.user import User

HUNDRED = Decimal("100")
# percentages and amounts may be off by this much after rounding in a form
SPLIT_TOLERANCE = Decimal("0.01")

def _check_price(price) -> Decimal:
    price = to_decimal(price)
    if price < 0:
        raise InvalidSplitError("Price must not be negative")
    if price != qround(price):
        raise InvalidSplitError(f"Price {price} has more than two decimal places")
    return price

def _check_users(users: Sequence[User]):
    if not users:
        raise InvalidSplitError("At least one user is required to split an expense")
    ids = [u.user_id for u in users]
    if len(ids) != len(set(ids)):
        raise InvalidSplitError("Duplicate users found in splits")

def _distribute(total_cents: int, weights: List[Decimal]) -> List[int]:
    """Split ``total_cents`` in proportion to ``weights``, rounding down.

    The cents lost to rounding go one each to the first users with a
    non-zero weight.
    """
    weight_sum = sum(weights)
    if weight_sum == 0:
        return [0] * len(weights)

    shares = [
        int((Decimal(total_cents) * w / weight_sum).to_integral_value(rounding=ROUND_DOWN))
        for w in weights
    ]
    weighted = [i for i, w in enumerate(weights) if w > 0]
    remainder = total_cents - sum(shares)
    for i in range(remainder):
        shares[weighted[i % len(weighted)]] += 1
    return shares

def _to_cents(amount: Decimal) -> int:
    return int(amount / CENTS)

def split_equally(price, users: Sequence[User]) -> List[SplitDetail]:
    price = _check_price(price)
    _check_users(users)

    cents = _distribute(_to_cents(price), [Decimal(1)] * len(users))
    return [SplitDetail(user=u, amount=Decimal(c) * CENTS) for u, c in zip(users, cents)]

def split_by_percentage(price, percentages: Mapping[str, object], users: Sequence[User]) -> List[SplitDetail]:
    price = _check_price(price)
    _check_users(users)

    pcts = [to_decimal(percentages.get(u.user_id, 0)) for u in users]
    if any(p < 0 for p in pcts):
        raise InvalidSplitError("Percentages must not be negative")

    total = sum(pcts)
    if abs(total - HUNDRED) > SPLIT_TOLERANCE:
        raise InvalidSplitError(f"Percentages must add up to 100, got {total}")

    cents = _distribute(_to_cents(price), pcts)
    return [SplitDetail(user=u, amount=Decimal(c) * CENTS) for u, c in zip(users, cents)]

def split_by_amounts(price, amounts: Mapping[str, object], users: Sequence[User]) -> List[SplitDetail]:
    price = _check_price(price)
    _check_users(users)

    shares = [to_decimal(amounts.get(u.user_id, 0)) for u in users]
    if any(s < 0 for s in shares):
        raise InvalidSplitError("Split amounts must not be negative")
    if any(s != qround(s) for s in shares):
        raise InvalidSplitError("Split amounts must not have more than two decimal places")

    total = sum(shares)
    if abs(total - price) > SPLIT_TOLERANCE:
        raise InvalidSplitError(f"Sum of split amounts ({total}) must equal total amount ({price})")

    return [SplitDetail(user=u, amount=qround(s)) for u, s in zip(users, shares)]

def build_split_details(
    method: SplitMethod,
    price,
    users: Sequence[User],
    values: Optional[Mapping[str, object]] = None,
) -> List[SplitDetail]:
    method = SplitMethod(method)
    if method is SplitMethod.EQUAL:
        return split_equally(price, users)

    if values is None:
        raise InvalidSplitError(f"Split method '{method.value}' needs a value per user")

    if method is SplitMethod.PERCENTAGE:
        return split_by_percentage(price, values, users)
    return split_by_amounts(price, values, users)

def percentages_from_details(split_details: Sequence[SplitDetail], price) -> Dict[str, Decimal]:
    """Each user's share of ``price`` in percent, rounded to two places."""
    price = to_decimal(price)
    if price == 0:
        return {s.user.user_id: Decimal("0") for s in split_details}
    return {s.user.user_id: qround(to_decimal(s.amount) / price * HUNDRED) for s in split_details}
