"""
Pool state for a main/wrapped linear pool.

`PoolState` is an immutable value: operations return a new state and the
caller that owns the pool decides whether to commit it.

Units:
- `main_balance` / `wrapped_balance` are raw token amounts (token decimals),
- `bpt_supply` is the virtual pool-share supply (18 decimals),
- `lower_target` / `upper_target` are upscaled main amounts (18 decimals),
- `swap_fee_percentage` is a fraction of `ONE`.

Round-trip property (tested): `state_from_dict(state_to_dict(s)) == s`.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Any, Mapping

from . import fixed_point as fp
from .bounds import Targets, validate_fee
from .canonical import STATE_ENCODING_VERSION, canonical_json_bytes, sha256_hex


@dataclass(frozen=True)
class PoolState:
    main_balance: int = 0
    wrapped_balance: int = 0
    bpt_supply: int = 0
    lower_target: int = 0
    upper_target: int = 0
    swap_fee_percentage: int = 0

    def __post_init__(self) -> None:
        for name in ("main_balance", "wrapped_balance", "bpt_supply"):
            fp.require_uint256(name, getattr(self, name))
        # Raises InvalidTargetsError on a bad band.
        Targets(self.lower_target, self.upper_target)
        validate_fee(self.swap_fee_percentage)

    @property
    def targets(self) -> Targets:
        return Targets(self.lower_target, self.upper_target)

    @property
    def is_empty(self) -> bool:
        return self.main_balance == 0 and self.wrapped_balance == 0 and self.bpt_supply == 0


STATE_VAR_NAMES: tuple[str, ...] = tuple(PoolState.__dataclass_fields__)


def initial_state(lower_target: int, upper_target: int, swap_fee_percentage: int) -> PoolState:
    """Fresh pool: zero balances and supply, configured band and fee."""
    return PoolState(
        lower_target=lower_target,
        upper_target=upper_target,
        swap_fee_percentage=swap_fee_percentage,
    )


def with_balances(state: PoolState, *, main: int, wrapped: int, bpt_supply: int) -> PoolState:
    return replace(state, main_balance=main, wrapped_balance=wrapped, bpt_supply=bpt_supply)


def state_to_dict(state: PoolState) -> dict[str, int]:
    return {name: getattr(state, name) for name in STATE_VAR_NAMES}


def state_from_dict(d: Mapping[str, Any]) -> PoolState:
    """Deserialize a dict to a PoolState. Raises KeyError on missing fields."""
    kwargs: dict[str, int] = {}
    for name in STATE_VAR_NAMES:
        val = d[name]
        if isinstance(val, bool) or not isinstance(val, int):
            raise TypeError(f"state var {name!r} must be int, got {type(val).__name__}")
        kwargs[name] = int(val)
    return PoolState(**kwargs)


def state_fingerprint(state: PoolState) -> str:
    payload = {"v": STATE_ENCODING_VERSION, "state": state_to_dict(state)}
    return sha256_hex(canonical_json_bytes(payload))
