from dataclasses import dataclass
from typing import Tuple
from app.models.user import User
from app.models.category import Category

@dataclass(frozen=True)
class ExpenseList:
    """A shared list of expenses; the scope balances are computed over."""
    list_id: str
    name: str = ""
    created_by: str = ""
    members: Tuple[User, ...] = ()
    categories: Tuple[Category, ...] = ()
    created_at: str = ""
    # code other users join the list with
    share_code: str = ""

    def is_member(self, user_id: str) -> bool:
        return any(m.user_id == user_id for m in self.members)
