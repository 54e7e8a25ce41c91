from pydantic import BaseModel
from typing import List
from app.models.expense_list import ExpenseList
from app.schemas.expense import CategoryIn, UserIn

class ExpenseListCreate(BaseModel):
    name: str
    created_by: str = ""
    members: List[UserIn] = []
    categories: List[CategoryIn] = []

    def to_model(self, created_at: str = "", share_code: str = "") -> ExpenseList:
        return ExpenseList(
            list_id="",
            name=self.name,
            created_by=self.created_by,
            members=tuple(m.to_model() for m in self.members),
            categories=tuple(c.to_model() for c in self.categories),
            created_at=created_at,
            share_code=share_code,
        )

class ExpenseListUpdate(BaseModel):
    # fields left out keep their current value
    name: str | None = None
    members: List[UserIn] | None = None
    categories: List[CategoryIn] | None = None

class ExpenseListJoin(BaseModel):
    share_code: str
    user: UserIn
