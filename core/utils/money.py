"""
Money utilities

Conversion between the external decimal contract and integer minor units.
Inputs are rounded half-up to the cent once, at the boundary.
"""

from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Union

from core.constants import Money

Amount = Union[Decimal, int, float, str]


def to_decimal(amount: Amount | None) -> Decimal:
    """Convert an input amount to a Decimal rounded to the cent

    Args:
        amount: Decimal, int, float or numeric string (None counts as zero)

    Returns:
        Decimal quantized to two places

    Raises:
        ValueError: not a finite number
    """
    if amount is None:
        return Decimal("0.00")

    if isinstance(amount, bool):
        raise ValueError(f"Invalid amount: {amount!r}")

    try:
        # str() first so floats keep their shortest repr (0.1 -> "0.1")
        value = amount if isinstance(amount, Decimal) else Decimal(str(amount).strip())
        return value.quantize(Money.QUANTUM, rounding=ROUND_HALF_UP)
    except (InvalidOperation, ValueError) as e:
        raise ValueError(f"Invalid amount: {amount!r}") from e


def to_minor(amount: Amount | None) -> int:
    """Convert an input amount to integer minor units

    Example:
        >>> to_minor("12.345")
        1235
    """
    return int(to_decimal(amount) * Money.MINOR_PER_MAJOR)


def from_minor(value: int | None) -> Decimal:
    """Convert integer minor units back to a two-place Decimal

    Example:
        >>> from_minor(1235)
        Decimal('12.35')
    """
    if value is None:
        return Decimal("0.00")
    return (Decimal(int(value)) / Money.MINOR_PER_MAJOR).quantize(Money.QUANTUM)


def format_amount(value: Decimal) -> str:
    """Format a Decimal for messages ($1,234.50)"""
    sign = "-" if value < 0 else ""
    return f"{sign}${abs(value):,.2f}"
