"""
Currency helpers for storing prices in the smallest currency unit.

Zero-decimal currencies (JPY, KRW, ...) are stored as whole units;
everything else is stored in hundredths (cents).
"""

from decimal import Decimal, ROUND_HALF_UP
from typing import Optional, Union

# ISO 4217 codes with no minor unit
ZERO_DECIMAL_CURRENCIES = frozenset({
    "BIF", "CLP", "DJF", "GNF", "JPY", "KMF", "KRW", "MGA",
    "PYG", "RWF", "UGX", "VND", "VUV", "XAF", "XOF", "XPF",
})

DEFAULT_CURRENCY = "USD"


def is_zero_decimal(currency: Optional[str]) -> bool:
    """True if the currency has no minor unit."""
    return (currency or DEFAULT_CURRENCY).upper() in ZERO_DECIMAL_CURRENCIES


def to_smallest_unit(amount: Union[Decimal, int, str], currency: Optional[str] = None) -> int:
    """
    Convert a display amount to the integer smallest unit.

    Rounds half up so 19.995 USD becomes 2000.

    Examples:
        to_smallest_unit(Decimal("19.99"), "USD") -> 1999
        to_smallest_unit(Decimal("1500"), "JPY") -> 1500
    """
    value = amount if isinstance(amount, Decimal) else Decimal(str(amount))
    multiplier = 1 if is_zero_decimal(currency) else 100
    return int((value * multiplier).quantize(Decimal("1"), rounding=ROUND_HALF_UP))

