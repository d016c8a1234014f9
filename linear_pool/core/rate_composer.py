"""
Composed wrapped-token rate.

Both pool tokens wrap the same rebasing underlying. Each wrapper reports
"underlying per wrapper unit" at its own precision; the underlying cancels
out of the quotient, leaving the value of one wrapped-token unit in
main-token units as an 18-decimal fixed-point integer:

    rate = normalize(second) * 1e18 // normalize(main)

The functional core never talks to a wrapper. The shell queries the source
once per wrapper per operation and hands the result in; nothing is cached.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol, runtime_checkable

from . import fixed_point as fp
from .errors import LinearPoolError, RateUnavailableError


@dataclass(frozen=True)
class WrapperRate:
    """Underlying units per one wrapper unit, scaled by `10**fraction_digits`."""

    raw_rate: int
    fraction_digits: int

    def __post_init__(self) -> None:
        for name, v in (("raw_rate", self.raw_rate), ("fraction_digits", self.fraction_digits)):
            if not isinstance(v, int) or isinstance(v, bool):
                raise TypeError(f"{name} must be an int")
        if self.raw_rate < 0:
            raise ValueError(f"raw_rate must be non-negative: {self.raw_rate}")
        if not (0 <= self.fraction_digits <= fp.DECIMALS):
            raise ValueError(f"fraction_digits must be in [0, {fp.DECIMALS}]: {self.fraction_digits}")


@runtime_checkable
class RateSource(Protocol):
    def query_rate(self, wrapper: str) -> WrapperRate: ...


def normalize_rate(rate: WrapperRate) -> int:
    """Scale `rate.raw_rate` to 18 fraction digits (exact, no rounding)."""
    return fp.mul(rate.raw_rate, fp.pow10(fp.DECIMALS - rate.fraction_digits))


def compose_rate(main_rate: WrapperRate, second_rate: WrapperRate) -> int:
    """
    Value of one wrapped-token unit in main-token units (18 decimals).

    Raises:
        DivisionByZeroError: the main wrapper's rate is zero.
        FixedPointOverflowError: normalization leaves the uint256 range.
        RateUnavailableError: the composed rate truncates to zero.
    """
    normalized_main = normalize_rate(main_rate)
    normalized_second = normalize_rate(second_rate)
    composed = fp.div_down(normalized_second, normalized_main)
    if composed == 0:
        raise RateUnavailableError("composed wrapped-token rate is zero")
    return composed


def _query(source: RateSource, wrapper: str) -> WrapperRate:
    try:
        rate = source.query_rate(wrapper)
    except LinearPoolError:
        raise
    except Exception as exc:
        raise RateUnavailableError(f"rate query failed for {wrapper}: {exc}") from exc
    if not isinstance(rate, WrapperRate):
        raise RateUnavailableError(f"rate source returned {type(rate).__name__} for {wrapper}")
    return rate


def query_composed_rate(source: RateSource, main_wrapper: str, wrapped_wrapper: str) -> int:
    """Query both wrappers once, then compose. No fallback rate on failure."""
    main_rate = _query(source, main_wrapper)
    wrapped_rate = _query(source, wrapped_wrapper)
    return compose_rate(main_rate, wrapped_rate)
