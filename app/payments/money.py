"""
Conversions between major currency units and provider minor units.

Prices and order totals are Decimals in major units (25.00). Stripe amounts
are integers in minor units (2500). Conversion to minor units truncates any
fraction of a cent.

Usage:
    from payments.money import major_to_minor, minor_to_major

    major_to_minor(Decimal("25.00"))  # 2500
    minor_to_major(2500)  # Decimal("25.00")
"""

from __future__ import annotations

from decimal import ROUND_DOWN, Decimal

MINOR_UNITS_PER_MAJOR = 100
CENT = Decimal("0.01")


def D(value) -> Decimal:
    return value if isinstance(value, Decimal) else Decimal(str(value or "0"))


def major_to_minor(amount) -> int:
    """Convert a major-unit amount to minor units, truncating fractions."""
    minor = (D(amount) * MINOR_UNITS_PER_MAJOR).to_integral_value(rounding=ROUND_DOWN)
    return int(minor)


def minor_to_major(amount: int) -> Decimal:
    """Convert a minor-unit amount to a two-place major-unit Decimal."""
    return (Decimal(amount) / MINOR_UNITS_PER_MAJOR).quantize(CENT)


def format_major(amount: int) -> str:
    """Render a minor-unit amount as a major-unit string, e.g. "15.00"."""
    return str(minor_to_major(amount))
