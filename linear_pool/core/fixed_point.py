"""
18-decimal fixed-point arithmetic over uint256-ranged Python ints.

Python ints never overflow, so the 256-bit width is enforced explicitly:
every result is range-checked and anything outside `[0, MAX_UINT256]` raises.
Rounding is always explicit (`*_down` floors, `*_up` ceils).
"""

from __future__ import annotations

from .errors import DivisionByZeroError, FixedPointOverflowError


ONE = 10**18
MAX_UINT256 = 2**256 - 1
DECIMALS = 18


def _require_int(name: str, value: int) -> None:
    if not isinstance(value, int) or isinstance(value, bool):
        raise TypeError(f"{name} must be an int")


def _check(value: int) -> int:
    if value < 0:
        raise FixedPointOverflowError(f"fixed-point underflow: {value}")
    if value > MAX_UINT256:
        raise FixedPointOverflowError("fixed-point result exceeds uint256")
    return value


def require_uint256(name: str, value: int) -> int:
    """Validate a non-negative uint256 int and return it."""
    _require_int(name, value)
    if value < 0:
        raise ValueError(f"{name} must be non-negative: {value}")
    if value > MAX_UINT256:
        raise FixedPointOverflowError(f"{name} exceeds uint256")
    return value


def add(a: int, b: int) -> int:
    return _check(a + b)


def mul(a: int, b: int) -> int:
    """Plain (unscaled) checked multiplication."""
    return _check(a * b)


def mul_down(a: int, b: int) -> int:
    return _check(a * b) // ONE


def mul_up(a: int, b: int) -> int:
    product = _check(a * b)
    if product == 0:
        return 0
    return (product - 1) // ONE + 1


def div_down(a: int, b: int) -> int:
    if b == 0:
        raise DivisionByZeroError("fixed-point division by zero")
    return _check(a * ONE) // b


def div_up(a: int, b: int) -> int:
    if b == 0:
        raise DivisionByZeroError("fixed-point division by zero")
    if a == 0:
        return 0
    return (_check(a * ONE) - 1) // b + 1


def divide_down(a: int, b: int) -> int:
    """Plain (unscaled) floor division."""
    if b == 0:
        raise DivisionByZeroError("division by zero")
    return a // b


def divide_up(a: int, b: int) -> int:
    """Plain (unscaled) ceil division."""
    if b == 0:
        raise DivisionByZeroError("division by zero")
    if a == 0:
        return 0
    return (a - 1) // b + 1


def pow10(exponent: int) -> int:
    _require_int("exponent", exponent)
    if not (0 <= exponent <= DECIMALS):
        raise ValueError(f"exponent must be in [0, {DECIMALS}]: {exponent}")
    return 10**exponent
