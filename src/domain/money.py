"""
Amount conversion between major currency units and gateway minor units.

Gateways take integer amounts in the smallest denomination (pesewas for
cedis, kobo for naira) to keep floating point out of the charge path.
"""

from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

from .exceptions import InvalidAmount

MINOR_UNITS_PER_MAJOR = 100

_CENT = Decimal("0.01")


def _as_decimal(amount: Decimal | int | str) -> Decimal:
    if isinstance(amount, float):
        # repr() keeps the shortest round-tripping form, so 0.1 stays 0.1
        amount = repr(amount)
    try:
        value = Decimal(amount)
    except (InvalidOperation, TypeError, ValueError) as e:
        raise InvalidAmount(f"Not a monetary amount: {amount!r}") from e
    if not value.is_finite():
        raise InvalidAmount(f"Not a monetary amount: {amount!r}")
    return value


def to_minor_units(amount: Decimal | int | str) -> int:
    """
    Convert a major-unit amount to an integer count of minor units.

    Rounds half-up to the nearest minor unit, so 10.005 becomes 1001.

    Raises:
        InvalidAmount: If amount is negative or not a finite number
    """
    value = _as_decimal(amount)
    if value < 0:
        raise InvalidAmount(f"Amount must not be negative: {value}")
    scaled = value * MINOR_UNITS_PER_MAJOR
    return int(scaled.quantize(Decimal(1), rounding=ROUND_HALF_UP))


def from_minor_units(amount_minor: int) -> Decimal:
    """Convert minor units back to a two-decimal-place major-unit amount."""
    return (Decimal(amount_minor) / MINOR_UNITS_PER_MAJOR).quantize(_CENT)
