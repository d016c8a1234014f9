"""
Target band policy.

The main balance is priced against a piecewise-linear "nominal" curve:

    BELOW   real < lower            nominal = real - fee * (lower - real)
    WITHIN  lower <= real <= upper  nominal = real
    ABOVE   real > upper            nominal = real - fee * (real - upper)

Inside the band main and wrapped trade 1:1 in nominal terms. Outside it every
unit of main moved away from the band is worth `fee` less (ABOVE) or costs
`fee` more to remove (BELOW). The curve is continuous at both targets, so the
marginal price jumps by at most one fee step when crossing a target.

`to_nominal` walks from the nearest target along the region slope and rounds
the nominal value down, so fees round up. `from_nominal` rounds the real
balance down unless asked to round up.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, unique
from typing import Tuple

from . import fixed_point as fp
from .errors import InsufficientLiquidityError, InvalidTargetsError


MAX_UPPER_TARGET = (2**96 - 1) * fp.ONE


@unique
class Region(Enum):
    BELOW = "below"
    WITHIN = "within"
    ABOVE = "above"


@dataclass(frozen=True)
class Targets:
    lower: int
    upper: int

    def __post_init__(self) -> None:
        fp.require_uint256("lower", self.lower)
        fp.require_uint256("upper", self.upper)
        if self.lower > self.upper:
            raise InvalidTargetsError(f"lower target above upper target: {self.lower} > {self.upper}")
        if self.upper > MAX_UPPER_TARGET:
            raise InvalidTargetsError(f"upper target too high: {self.upper}")


def validate_fee(fee: int) -> int:
    """Swap fee percentage must be in [0, ONE)."""
    fp.require_uint256("swap_fee_percentage", fee)
    if fee >= fp.ONE:
        raise ValueError(f"swap_fee_percentage must be below {fp.ONE}: {fee}")
    return fee


def classify(balance: int, targets: Targets) -> Region:
    if balance < targets.lower:
        return Region.BELOW
    if balance <= targets.upper:
        return Region.WITHIN
    return Region.ABOVE


def slope(region: Region, fee: int) -> Tuple[int, int]:
    """Nominal-per-real slope of `region` as a (numerator, ONE) pair."""
    if region is Region.BELOW:
        return fp.ONE + fee, fp.ONE
    if region is Region.ABOVE:
        return fp.ONE - fee, fp.ONE
    return fp.ONE, fp.ONE


def is_within(balance: int, targets: Targets) -> bool:
    return classify(balance, targets) is Region.WITHIN


def to_nominal(real: int, targets: Targets, fee: int) -> int:
    """
    Convert a real main balance into its nominal value.

    The result is a signed int: far enough below the lower target the BELOW
    penalty exceeds the balance itself.
    """
    region = classify(real, targets)
    if region is Region.WITHIN:
        return real
    num, _ = slope(region, fee)
    if region is Region.BELOW:
        return targets.lower - fp.mul_up(targets.lower - real, num)
    return targets.upper + fp.mul_down(real - targets.upper, num)


def from_nominal(nominal: int, targets: Targets, fee: int, *, round_up: bool = False) -> int:
    """
    Inverse of `to_nominal`: the real balance for a nominal value.

    With `round_up` the result is a real balance whose nominal value is at
    least `nominal`; otherwise it is rounded down.

    Raises InsufficientLiquidityError when no non-negative real balance maps
    to `nominal`.
    """
    div = fp.divide_up if round_up else fp.divide_down
    if nominal < targets.lower:
        numerator = nominal * fp.ONE + fee * targets.lower
        if numerator < 0:
            raise InsufficientLiquidityError("main balance would be negative")
        return div(numerator, fp.ONE + fee)
    if nominal <= targets.upper:
        return nominal
    return div(nominal * fp.ONE - fee * targets.upper, fp.ONE - fee)
