from decimal import Decimal
from pydantic import BaseModel, Field
from typing import List
from app.models.category import Category
from app.models.expense import Expense, SplitDetail
from app.models.user import User

# two decimal places and 13 integer digits keep cent rounding inside the Decimal context
MAX_DIGITS = 15

class UserIn(BaseModel):
    user_id: str
    name: str = ""
    profile_image: str = ""

    def to_model(self) -> User:
        return User(user_id=self.user_id, name=self.name, profile_image=self.profile_image)

class CategoryIn(BaseModel):
    category_id: str
    name: str = ""
    icon: str = ""
    color: str = ""

    def to_model(self) -> Category:
        return Category(category_id=self.category_id, name=self.name, icon=self.icon, color=self.color)

class SplitInput(BaseModel):
    user: UserIn
    amount: Decimal = Field(ge=0, max_digits=MAX_DIGITS, decimal_places=2)

class ExpenseCreate(BaseModel):
    name: str = ""
    description: str | None = None
    price: Decimal = Field(ge=0, max_digits=MAX_DIGITS, decimal_places=2)
    date: str = ""
    category: CategoryIn | None = None
    paid_by: UserIn
    splits: List[SplitInput] = []

    def to_model(self, expense_id: str = "") -> Expense:
        return Expense(
            expense_id=expense_id,
            name=self.name,
            description=self.description or "",
            price=self.price,
            date=self.date,
            category=self.category.to_model() if self.category else None,
            paid_by=self.paid_by.to_model(),
            split_details=tuple(
                SplitDetail(user=s.user.to_model(), amount=s.amount) for s in self.splits
            ),
        )
