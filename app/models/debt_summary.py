from dataclasses import dataclass
from decimal import Decimal
from app.models.user import User
from app.core.utils import format_amount

@dataclass(frozen=True)
class DebtSummary:
    """A single settlement: ``from_user`` owes ``to_user`` a positive ``amount``."""
    from_user: User
    to_user: User
    amount: Decimal

    def to_display_string(self, currency_symbol: str = "$") -> str:
        # e.g. "Sarah owes $50 to Alex"
        return f"{self.from_user.name or self.from_user.user_id} owes {format_amount(self.amount, currency_symbol)} to {self.to_user.name or self.to_user.user_id}"
