from decimal import Decimal
from pydantic import BaseModel, Field
from typing import Dict, List
from app.models.split_method import SplitMethod
from app.schemas.expense import MAX_DIGITS, ExpenseCreate, UserIn

class SettleRequest(BaseModel):
    expenses: List[ExpenseCreate]

class SplitPreviewRequest(BaseModel):
    price: Decimal = Field(ge=0, max_digits=MAX_DIGITS, decimal_places=2)
    method: SplitMethod = SplitMethod.EQUAL
    users: List[UserIn]
    # user_id -> percentage or amount, unused for equal splits
    values: Dict[str, Decimal] | None = None
