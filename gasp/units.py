"""
GASP Game Engine - Token Units

Amounts inside the engine are integers in the token's base unit.
These helpers convert from and to human-readable decimal amounts.

Examples:
    >>> parse_units("100", 18)
    100000000000000000000

    >>> format_units(125 * 10**18, 18)
    '125'

    >>> parse_units("0.05", 6)
    50000
"""

from decimal import Decimal, InvalidOperation, localcontext
from typing import Union

from .game_types import UINT256_MAX


def parse_units(amount: Union[str, int, Decimal], decimals: int = 18) -> int:
    """
    Convert a decimal amount to base units.

    Raises:
        ValueError: If amount is negative, not a number, or has more
                    fractional digits than the token supports
    """
    try:
        value = Decimal(str(amount))
    except InvalidOperation:
        raise ValueError(f"Not a number: {amount!r}")

    if not value.is_finite() or value < 0:
        raise ValueError(f"Amount must be a finite non-negative number: {amount!r}")

    with localcontext() as ctx:
        # uint256 needs 78 digits; default precision is 28
        ctx.prec = 100
        scaled = value.scaleb(decimals)
    if scaled != scaled.to_integral_value():
        raise ValueError(f"{amount} has more than {decimals} decimals")

    units = int(scaled)
    if units > UINT256_MAX:
        raise ValueError(f"{amount} overflows uint256")
    return units


def format_units(units: int, decimals: int = 18) -> str:
    """Convert base units to a decimal string without trailing zeros."""
    if units < 0:
        raise ValueError(f"Units must be non-negative: {units}")
    with localcontext() as ctx:
        ctx.prec = 100
        value = Decimal(units).scaleb(-decimals)
    text = format(value, "f")
    if "." in text:
        text = text.rstrip("0").rstrip(".")
    return text
