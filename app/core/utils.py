from decimal import Decimal, ROUND_HALF_UP, InvalidOperation, getcontext

getcontext().prec = 28
CENTS = Decimal("0.01")

def qround(d: Decimal) -> Decimal:
    return d.quantize(CENTS, rounding=ROUND_HALF_UP)

def to_decimal(value) -> Decimal:
    """Convert a monetary value to Decimal without binary float drift.

    Floats go through ``str`` first so ``0.1`` becomes ``Decimal("0.1")``
    rather than its exact binary expansion.
    """
    if isinstance(value, Decimal):
        return value
    if isinstance(value, bool):
        raise TypeError("bool is not a monetary amount")
    if isinstance(value, (int, float, str)):
        try:
            return Decimal(str(value))
        except InvalidOperation:
            raise ValueError(f"Not a monetary amount: {value!r}")
    raise TypeError(f"Unsupported amount type: {type(value).__name__}")

def format_amount(amount, currency_symbol: str = "$") -> str:
    # 50 -> "$50", 33.333 -> "$33.33", 12.5 -> "$12.50"
    rounded = qround(to_decimal(amount))
    if rounded == rounded.to_integral_value():
        return f"{currency_symbol}{int(rounded)}"
    return f"{currency_symbol}{rounded}"
