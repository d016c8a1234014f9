"""
Linear invariant math (integer-only).

All quantities are upscaled to 18 decimals:
- `main` is the real main balance,
- `wrapped` is the wrapped balance already converted into main units with the
  composed rate,
- `bpt_supply` is the virtual supply of pool shares.

The invariant is `nominal(main) + wrapped`. Main and wrapped are exchanged 1:1
in nominal terms, so every main <-> wrapped swap is a walk along the
`bounds.to_nominal` curve. Pool shares track the invariant proportionally; the
first join mints shares equal to the nominal value deposited.

Rounding always favours the pool: amounts out round down, amounts in round up.
"""

from __future__ import annotations

from dataclasses import dataclass

from . import fixed_point as fp
from .bounds import Targets, from_nominal as _from_nominal, to_nominal as _to_nominal, validate_fee
from .errors import InsufficientLiquidityError, TargetsViolatedError


@dataclass(frozen=True)
class LinearParams:
    fee: int
    targets: Targets

    def __post_init__(self) -> None:
        validate_fee(self.fee)


def to_nominal(real: int, params: LinearParams) -> int:
    return _to_nominal(real, params.targets, params.fee)


def _from_nominal_up(nominal: int, params: LinearParams) -> int:
    return _from_nominal(nominal, params.targets, params.fee, round_up=True)


def calc_invariant(nominal_main: int, wrapped: int) -> int:
    invariant = nominal_main + wrapped
    if invariant <= 0:
        raise TargetsViolatedError(f"pool invariant must be positive: {invariant}")
    return invariant


def _require_available(name: str, amount: int, available: int) -> None:
    if amount > available:
        raise InsufficientLiquidityError(f"{name} {amount} exceeds available {available}")


# -- main <-> wrapped ---------------------------------------------------------

def calc_wrapped_out_per_main_in(main_in: int, main: int, params: LinearParams) -> int:
    return to_nominal(main + main_in, params) - to_nominal(main, params)


def calc_wrapped_in_per_main_out(main_out: int, main: int, params: LinearParams) -> int:
    _require_available("main_out", main_out, main)
    return to_nominal(main, params) - to_nominal(main - main_out, params)


def calc_main_out_per_wrapped_in(wrapped_in: int, main: int, params: LinearParams) -> int:
    after_nominal = to_nominal(main, params) - wrapped_in
    new_main = _from_nominal_up(after_nominal, params)
    return max(main - new_main, 0)


def calc_main_in_per_wrapped_out(wrapped_out: int, main: int, params: LinearParams) -> int:
    after_nominal = to_nominal(main, params) + wrapped_out
    new_main = _from_nominal_up(after_nominal, params)
    return new_main - main


# -- main <-> BPT -------------------------------------------------------------

def calc_bpt_out_per_main_in(
    main_in: int, main: int, wrapped: int, bpt_supply: int, params: LinearParams
) -> int:
    if bpt_supply == 0:
        # First join: shares start out equal to the invariant.
        return max(to_nominal(main + main_in, params) + wrapped, 0)
    previous_nominal = to_nominal(main, params)
    delta_nominal = to_nominal(main + main_in, params) - previous_nominal
    invariant = calc_invariant(previous_nominal, wrapped)
    return fp.divide_down(fp.mul(bpt_supply, delta_nominal), invariant)


def calc_bpt_in_per_main_out(
    main_out: int, main: int, wrapped: int, bpt_supply: int, params: LinearParams
) -> int:
    _require_available("main_out", main_out, main)
    previous_nominal = to_nominal(main, params)
    delta_nominal = previous_nominal - to_nominal(main - main_out, params)
    invariant = calc_invariant(previous_nominal, wrapped)
    return fp.divide_up(fp.mul(bpt_supply, delta_nominal), invariant)


def calc_main_in_per_bpt_out(
    bpt_out: int, main: int, wrapped: int, bpt_supply: int, params: LinearParams
) -> int:
    if bpt_supply == 0:
        return max(_from_nominal_up(bpt_out - wrapped, params) - main, 0)
    previous_nominal = to_nominal(main, params)
    invariant = calc_invariant(previous_nominal, wrapped)
    delta_nominal = fp.divide_up(fp.mul(invariant, bpt_out), bpt_supply)
    new_main = _from_nominal_up(previous_nominal + delta_nominal, params)
    return new_main - main


def calc_main_out_per_bpt_in(
    bpt_in: int, main: int, wrapped: int, bpt_supply: int, params: LinearParams
) -> int:
    _require_available("bpt_in", bpt_in, bpt_supply)
    previous_nominal = to_nominal(main, params)
    invariant = calc_invariant(previous_nominal, wrapped)
    delta_nominal = fp.divide_down(fp.mul(invariant, bpt_in), bpt_supply)
    new_main = _from_nominal_up(previous_nominal - delta_nominal, params)
    return max(main - new_main, 0)


# -- wrapped <-> BPT ----------------------------------------------------------

def calc_bpt_out_per_wrapped_in(
    wrapped_in: int, main: int, wrapped: int, bpt_supply: int, params: LinearParams
) -> int:
    nominal_main = to_nominal(main, params)
    if bpt_supply == 0:
        return max(nominal_main + wrapped + wrapped_in, 0)
    previous_invariant = calc_invariant(nominal_main, wrapped)
    new_invariant = nominal_main + wrapped + wrapped_in
    new_bpt_supply = fp.divide_down(fp.mul(bpt_supply, new_invariant), previous_invariant)
    return new_bpt_supply - bpt_supply


def calc_bpt_in_per_wrapped_out(
    wrapped_out: int, main: int, wrapped: int, bpt_supply: int, params: LinearParams
) -> int:
    _require_available("wrapped_out", wrapped_out, wrapped)
    nominal_main = to_nominal(main, params)
    previous_invariant = calc_invariant(nominal_main, wrapped)
    new_invariant = max(nominal_main + wrapped - wrapped_out, 0)
    new_bpt_supply = fp.divide_down(fp.mul(bpt_supply, new_invariant), previous_invariant)
    return bpt_supply - new_bpt_supply


def calc_wrapped_in_per_bpt_out(
    bpt_out: int, main: int, wrapped: int, bpt_supply: int, params: LinearParams
) -> int:
    nominal_main = to_nominal(main, params)
    if bpt_supply == 0:
        return max(bpt_out - nominal_main - wrapped, 0)
    previous_invariant = calc_invariant(nominal_main, wrapped)
    new_bpt_supply = bpt_supply + bpt_out
    new_wrapped = fp.divide_up(fp.mul(new_bpt_supply, previous_invariant), bpt_supply) - nominal_main
    return new_wrapped - wrapped


def calc_wrapped_out_per_bpt_in(
    bpt_in: int, main: int, wrapped: int, bpt_supply: int, params: LinearParams
) -> int:
    _require_available("bpt_in", bpt_in, bpt_supply)
    nominal_main = to_nominal(main, params)
    previous_invariant = calc_invariant(nominal_main, wrapped)
    new_bpt_supply = bpt_supply - bpt_in
    new_wrapped = fp.divide_up(fp.mul(new_bpt_supply, previous_invariant), bpt_supply) - nominal_main
    if new_wrapped < 0:
        raise InsufficientLiquidityError("wrapped balance cannot cover the nominal main deficit")
    return wrapped - new_wrapped


# -- fees ---------------------------------------------------------------------

def calc_main_fee(main_before: int, main_after: int, params: LinearParams) -> int:
    """
    Fee retained by the pool on a main-balance move, in upscaled main units.

    Moving away from the band costs the trader the gap between the real and
    the nominal change; moving toward it earns a bonus, which is not a fee and
    reports as zero.
    """
    real_delta = main_after - main_before
    nominal_delta = to_nominal(main_after, params) - to_nominal(main_before, params)
    # Never more than the fee share of the main amount moved.
    cap = fp.mul_down(abs(real_delta), params.fee)
    return min(max(real_delta - nominal_delta, 0), cap)
