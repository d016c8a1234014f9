"""Tests for linear_pool/core/rate_composer.py: composing two wrapper rates."""

from __future__ import annotations

import pytest

from linear_pool.core.errors import (
    DivisionByZeroError,
    FixedPointOverflowError,
    RateUnavailableError,
    ReentrancyError,
)
from linear_pool.core.fixed_point import MAX_UINT256, ONE
from linear_pool.core.rate_composer import (
    WrapperRate,
    compose_rate,
    normalize_rate,
    query_composed_rate,
)


def _ampl(raw: int) -> WrapperRate:
    return WrapperRate(raw_rate=raw, fraction_digits=9)


@pytest.mark.parametrize(
    ("main_raw", "second_raw", "expected"),
    [
        (1_000_000_000, 2_000_000_000, 2 * ONE),
        (2_000_000_000, 1_000_000_000, ONE // 2),
        (1_000_000_000, 10_000_000_000, 10 * ONE),
        (10_000_000_000, 1_000_000_000, ONE // 10),
    ],
)
def test_compose_rate_known_values(main_raw: int, second_raw: int, expected: int) -> None:
    assert compose_rate(_ampl(main_raw), _ampl(second_raw)) == expected


def test_zero_main_rate_is_division_by_zero() -> None:
    with pytest.raises(DivisionByZeroError):
        compose_rate(_ampl(0), _ampl(1_000_000_000))


def test_zero_second_rate_is_unavailable() -> None:
    with pytest.raises(RateUnavailableError):
        compose_rate(_ampl(1_000_000_000), _ampl(0))


def test_exact_multiple_has_no_rounding_loss() -> None:
    main = _ampl(1_234_567_891)
    for k in (1, 2, 7, 1_000, 123_456):
        assert compose_rate(main, _ampl(main.raw_rate * k)) == k * ONE


def test_mixed_precisions_normalize_before_dividing() -> None:
    # 1.5 at 6 digits vs 3.0 at 18 digits.
    main = WrapperRate(raw_rate=1_500_000, fraction_digits=6)
    second = WrapperRate(raw_rate=3 * ONE, fraction_digits=18)
    assert normalize_rate(main) == 1_500_000_000_000_000_000
    assert compose_rate(main, second) == 2 * ONE
    assert compose_rate(second, main) == ONE // 2


def test_zero_fraction_digits() -> None:
    assert normalize_rate(WrapperRate(raw_rate=3, fraction_digits=0)) == 3 * ONE


def test_normalization_overflow() -> None:
    huge = WrapperRate(raw_rate=MAX_UINT256 // 10, fraction_digits=9)
    with pytest.raises(FixedPointOverflowError):
        normalize_rate(huge)


def test_wrapper_rate_validation() -> None:
    with pytest.raises(ValueError):
        WrapperRate(raw_rate=-1, fraction_digits=9)
    with pytest.raises(ValueError):
        WrapperRate(raw_rate=1, fraction_digits=19)
    with pytest.raises(TypeError):
        WrapperRate(raw_rate=1.0, fraction_digits=9)  # type: ignore[arg-type]
    with pytest.raises(TypeError):
        WrapperRate(raw_rate=True, fraction_digits=9)  # type: ignore[arg-type]


class _Source:
    def __init__(self, rates: dict[str, object]) -> None:
        self.rates = rates
        self.calls: list[str] = []

    def query_rate(self, wrapper: str):
        self.calls.append(wrapper)
        value = self.rates[wrapper]
        if isinstance(value, Exception):
            raise value
        return value


def test_query_composed_rate_queries_each_wrapper_once() -> None:
    src = _Source({"wAMPL": _ampl(1_000_000_000), "wAaveAMPL": _ampl(2_000_000_000)})
    assert query_composed_rate(src, "wAMPL", "wAaveAMPL") == 2 * ONE
    assert src.calls == ["wAMPL", "wAaveAMPL"]


def test_query_failure_becomes_rate_unavailable() -> None:
    src = _Source({"wAMPL": _ampl(1_000_000_000), "wAaveAMPL": RuntimeError("rpc down")})
    with pytest.raises(RateUnavailableError) as exc_info:
        query_composed_rate(src, "wAMPL", "wAaveAMPL")
    assert isinstance(exc_info.value.__cause__, RuntimeError)


def test_pool_errors_from_source_propagate_unchanged() -> None:
    src = _Source({"wAMPL": ReentrancyError("nested"), "wAaveAMPL": _ampl(1)})
    with pytest.raises(ReentrancyError):
        query_composed_rate(src, "wAMPL", "wAaveAMPL")


def test_non_rate_result_is_unavailable() -> None:
    src = _Source({"wAMPL": 1_000_000_000, "wAaveAMPL": _ampl(1)})
    with pytest.raises(RateUnavailableError):
        query_composed_rate(src, "wAMPL", "wAaveAMPL")

