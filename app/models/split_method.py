from enum import Enum

class SplitMethod(str, Enum):
    """How an expense's price is divided between its users."""
    EQUAL = "equal"
    PERCENTAGE = "percentage"
    NUMBER = "number"
