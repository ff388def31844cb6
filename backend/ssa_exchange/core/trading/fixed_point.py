"""
SSA Exchange - Fixed-Point Units

Ledger amounts are integers carrying 6 implied decimal digits
(1 INR == 1_000_000 micro-units). Everything user-facing or stored in the
accounting tables is a Decimal. FixedPoint is a separate type so the two
representations cannot be mixed without an explicit conversion.
"""
from dataclasses import dataclass
from decimal import Decimal, ROUND_FLOOR
from typing import Union

DECIMALS = 6
SCALE = 10 ** DECIMALS
QUANTUM = Decimal(1).scaleb(-DECIMALS)  # Decimal("0.000001")


@dataclass(frozen=True, order=True)
class FixedPoint:
    """Integer amount in micro-units, as passed to the ledger."""
    units: int

    def __post_init__(self):
        if isinstance(self.units, bool) or not isinstance(self.units, int):
            raise TypeError(f"FixedPoint units must be int, got {type(self.units).__name__}")

    def __add__(self, other: "FixedPoint") -> "FixedPoint":
        if not isinstance(other, FixedPoint):
            return NotImplemented
        return FixedPoint(self.units + other.units)

    def __sub__(self, other: "FixedPoint") -> "FixedPoint":
        if not isinstance(other, FixedPoint):
            return NotImplemented
        return FixedPoint(self.units - other.units)

    def __int__(self) -> int:
        return self.units

    def __str__(self) -> str:
        return str(self.units)

    def is_positive(self) -> bool:
        return self.units > 0

    @classmethod
    def zero(cls) -> "FixedPoint":
        return cls(0)


def _as_decimal(amount: Union[Decimal, int, str]) -> Decimal:
    if isinstance(amount, float):
        raise TypeError("Binary floats are not accepted for monetary amounts; pass a Decimal or str")
    if isinstance(amount, Decimal):
        return amount
    return Decimal(amount)


def to_fixed_point(amount: Union[Decimal, int, str]) -> FixedPoint:
    """
    Convert a decimal amount to micro-units, always flooring.

    Sign is not checked here; callers validate positivity first.
    """
    scaled = (_as_decimal(amount) * SCALE).to_integral_value(rounding=ROUND_FLOOR)
    return FixedPoint(int(scaled))


def from_fixed_point(value: FixedPoint) -> Decimal:
    """Convert micro-units back to a Decimal amount."""
    if not isinstance(value, FixedPoint):
        raise TypeError(f"Expected FixedPoint, got {type(value).__name__}")
    return Decimal(value.units).scaleb(-DECIMALS)


def floor_to_quantum(amount: Decimal) -> Decimal:
    """Truncate a Decimal to the ledger's 6-decimal resolution."""
    return _as_decimal(amount).quantize(QUANTUM, rounding=ROUND_FLOOR)
