class ExpenseError(Exception):
    """Base class for expense domain errors."""


class InvalidExpenseError(ExpenseError, ValueError):
    """Raised when an expense carries amounts the balance engine can't trust."""

    def __init__(self, message: str, field: str | None = None, index: int | None = None):
        super().__init__(message)
        self.field = field
        self.index = index


class InvalidSplitError(ExpenseError, ValueError):
    """Raised when split inputs don't add up to the expense price."""
