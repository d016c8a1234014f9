"""Tests for linear_pool/core/bounds.py: target band classification and the nominal curve."""

from __future__ import annotations

import pytest

from linear_pool.core.bounds import (
    MAX_UPPER_TARGET,
    Region,
    Targets,
    classify,
    from_nominal,
    slope,
    to_nominal,
    validate_fee,
)
from linear_pool.core.errors import InsufficientLiquidityError, InvalidTargetsError
from linear_pool.core.fixed_point import ONE

FEE = ONE // 100
T = Targets(lower=100 * ONE, upper=200 * ONE)


class TestTargets:
    def test_lower_above_upper_is_invalid(self):
        with pytest.raises(InvalidTargetsError):
            Targets(lower=2 * ONE, upper=ONE)

    def test_equal_targets_are_allowed(self):
        t = Targets(lower=ONE, upper=ONE)
        assert classify(ONE, t) is Region.WITHIN

    def test_upper_cap(self):
        Targets(lower=0, upper=MAX_UPPER_TARGET)
        with pytest.raises(InvalidTargetsError):
            Targets(lower=0, upper=MAX_UPPER_TARGET + 1)

    def test_negative_target_rejected(self):
        with pytest.raises(ValueError):
            Targets(lower=-1, upper=ONE)


class TestClassify:
    @pytest.mark.parametrize(
        ("balance", "region"),
        [
            (0, Region.BELOW),
            (100 * ONE - 1, Region.BELOW),
            (100 * ONE, Region.WITHIN),
            (150 * ONE, Region.WITHIN),
            (200 * ONE, Region.WITHIN),
            (200 * ONE + 1, Region.ABOVE),
        ],
    )
    def test_regions(self, balance, region):
        assert classify(balance, T) is region

    def test_slopes(self):
        assert slope(Region.BELOW, FEE) == (ONE + FEE, ONE)
        assert slope(Region.WITHIN, FEE) == (ONE, ONE)
        assert slope(Region.ABOVE, FEE) == (ONE - FEE, ONE)


class TestNominalCurve:
    def test_within_band_is_identity(self):
        assert to_nominal(150 * ONE, T, FEE) == 150 * ONE
        assert from_nominal(150 * ONE, T, FEE) == 150 * ONE

    def test_above_band(self):
        assert to_nominal(250 * ONE, T, FEE) == 2495 * ONE // 10
        assert from_nominal(2495 * ONE // 10, T, FEE) == 250 * ONE

    def test_below_band(self):
        assert to_nominal(50 * ONE, T, FEE) == 495 * ONE // 10
        assert from_nominal(495 * ONE // 10, T, FEE) == 50 * ONE

    def test_zero_balance_has_negative_nominal(self):
        assert to_nominal(0, T, FEE) == -ONE
        assert from_nominal(-ONE, T, FEE) == 0

    def test_nominal_below_floor_is_insufficient(self):
        with pytest.raises(InsufficientLiquidityError):
            from_nominal(-2 * ONE, T, FEE)

    def test_curve_follows_region_slope_with_penalty_rounded_up(self):
        assert to_nominal(T.upper + 1, T, FEE) == T.upper
        assert to_nominal(T.lower - 1, T, FEE) == T.lower - 2
        num, den = slope(Region.ABOVE, FEE)
        assert to_nominal(T.upper + 10 * ONE, T, FEE) == T.upper + 10 * ONE * num // den

    def test_zero_fee_is_identity_everywhere(self):
        for real in (0, 50 * ONE, 150 * ONE, 250 * ONE):
            assert to_nominal(real, T, 0) == real
            assert from_nominal(real, T, 0) == real

    def test_curve_is_continuous_at_targets(self):
        for target in (T.lower, T.upper):
            assert to_nominal(target, T, FEE) == target
            assert 0 <= to_nominal(target + 1, T, FEE) - to_nominal(target, T, FEE) <= 1
            assert 0 <= to_nominal(target, T, FEE) - to_nominal(target - 1, T, FEE) <= 2

    def test_price_step_at_upper_target_is_one_fee_step(self):
        step = ONE
        left = to_nominal(T.upper, T, FEE) - to_nominal(T.upper - step, T, FEE)
        right = to_nominal(T.upper + step, T, FEE) - to_nominal(T.upper, T, FEE)
        assert left == step
        assert left - right == step * FEE // ONE

    def test_price_step_at_lower_target_is_one_fee_step(self):
        step = ONE
        left = to_nominal(T.lower, T, FEE) - to_nominal(T.lower - step, T, FEE)
        right = to_nominal(T.lower + step, T, FEE) - to_nominal(T.lower, T, FEE)
        assert right == step
        assert left - right == step * FEE // ONE

    def test_round_up_covers_nominal(self):
        nominal = 2495 * ONE // 10 + 7
        real = from_nominal(nominal, T, FEE, round_up=True)
        assert to_nominal(real, T, FEE) >= nominal
        assert real >= from_nominal(nominal, T, FEE)


def test_fee_must_be_below_one():
    assert validate_fee(0) == 0
    assert validate_fee(ONE - 1) == ONE - 1
    with pytest.raises(ValueError):
        validate_fee(ONE)
