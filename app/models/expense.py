from dataclasses import dataclass
from decimal import Decimal
from typing import Optional, Tuple
from app.models.user import User
from app.models.category import Category

@dataclass(frozen=True)
class SplitDetail:
    """One participant's share of a single expense."""
    user: User
    amount: Decimal


@dataclass(frozen=True)
class Expense:
    price: Decimal
    paid_by: User
    split_details: Tuple[SplitDetail, ...] = ()
    expense_id: str = ""
    name: str = ""
    description: str = ""
    date: str = ""
    category: Optional[Category] = None

    def participants(self) -> Tuple[User, ...]:
        """Payer first, then split users in order, without repeats."""
        seen = {self.paid_by.user_id}
        users = [self.paid_by]
        for split in self.split_details:
            if split.user.user_id not in seen:
                seen.add(split.user.user_id)
                users.append(split.user)
        return tuple(users)
