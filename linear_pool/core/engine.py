"""
Linear pool engine: swaps, joins and exits as pure functions.

Every operation takes `(state, config, rate, ...)` and returns a result that
carries the post-state. Nothing is mutated; on any error the caller still
holds the untouched pre-state.

Scaling (the only place token decimals and the composed rate enter):
- main:    `10**(18 - main_decimals) * ONE`
- wrapped: `10**(18 - wrapped_decimals) * ONE * rate / ONE`, so upscaled
  wrapped amounts are already in main-equivalent units
- BPT:     `ONE`

Given amounts and balances upscale rounding down. Calculated amounts out
downscale rounding down, calculated amounts in downscale rounding up. A
given-out amount too small to cost anything is refused.

`fee_amount` is in units of the token paid in and never exceeds
`amount_in * swap_fee_percentage`.

Joins and exits are swaps against the pool-share token: BPT out is minted,
BPT in is burned.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, unique
from typing import Callable, Dict, Optional, Tuple, Union

from . import fixed_point as fp
from . import linear_math as lm
from .config import LinearPoolConfig
from .errors import (
    InsufficientLiquidityError,
    LinearPoolError,
    RateUnavailableError,
    TargetsViolatedError,
)
from .state import PoolState, with_balances


@unique
class Token(Enum):
    MAIN = "main"
    WRAPPED = "wrapped"
    BPT = "bpt"


@unique
class SwapKind(Enum):
    GIVEN_IN = "given_in"
    GIVEN_OUT = "given_out"


@dataclass(frozen=True)
class SwapResult:
    amount_in: int
    amount_out: int
    amount_calculated: int
    fee_amount: int
    state: PoolState


@dataclass(frozen=True)
class JoinExitResult:
    """`bpt_delta` is BPT minted on joins and BPT burned on exits; amounts are unsigned."""

    bpt_delta: int
    main_amount: int
    wrapped_amount: int
    fee_amount: int
    state: PoolState


MathFn = Callable[[int, int, int, int, lm.LinearParams], int]

# (token_in, token_out) -> f(amount_in, main, wrapped, bpt_supply, params) = amount_out
_GIVEN_IN: Dict[Tuple[Token, Token], MathFn] = {
    (Token.MAIN, Token.WRAPPED): lambda a, m, w, s, p: lm.calc_wrapped_out_per_main_in(a, m, p),
    (Token.WRAPPED, Token.MAIN): lambda a, m, w, s, p: lm.calc_main_out_per_wrapped_in(a, m, p),
    (Token.MAIN, Token.BPT): lm.calc_bpt_out_per_main_in,
    (Token.WRAPPED, Token.BPT): lm.calc_bpt_out_per_wrapped_in,
    (Token.BPT, Token.MAIN): lm.calc_main_out_per_bpt_in,
    (Token.BPT, Token.WRAPPED): lm.calc_wrapped_out_per_bpt_in,
}

# (token_in, token_out) -> f(amount_out, main, wrapped, bpt_supply, params) = amount_in
_GIVEN_OUT: Dict[Tuple[Token, Token], MathFn] = {
    (Token.WRAPPED, Token.MAIN): lambda a, m, w, s, p: lm.calc_wrapped_in_per_main_out(a, m, p),
    (Token.MAIN, Token.WRAPPED): lambda a, m, w, s, p: lm.calc_main_in_per_wrapped_out(a, m, p),
    (Token.BPT, Token.MAIN): lm.calc_bpt_in_per_main_out,
    (Token.BPT, Token.WRAPPED): lm.calc_bpt_in_per_wrapped_out,
    (Token.MAIN, Token.BPT): lm.calc_main_in_per_bpt_out,
    (Token.WRAPPED, Token.BPT): lm.calc_wrapped_in_per_bpt_out,
}


def _require_amount(name: str, amount: int) -> None:
    fp.require_uint256(name, amount)
    if amount == 0:
        raise ValueError(f"{name} must be positive")


def _require_rate(rate: int) -> None:
    if not isinstance(rate, int) or isinstance(rate, bool) or rate <= 0:
        raise RateUnavailableError(f"wrapped token rate must be a positive int: {rate!r}")


def scaling_factors(config: LinearPoolConfig, rate: int) -> Dict[Token, int]:
    _require_rate(rate)
    return {
        Token.MAIN: config.main_scaling_factor,
        Token.WRAPPED: fp.mul_down(config.wrapped_scaling_factor, rate),
        Token.BPT: fp.ONE,
    }


def linear_params(state: PoolState) -> lm.LinearParams:
    return lm.LinearParams(fee=state.swap_fee_percentage, targets=state.targets)


def _apply_swap(
    state: PoolState, token_in: Token, amount_in: int, token_out: Token, amount_out: int
) -> PoolState:
    balances = {
        Token.MAIN: state.main_balance,
        Token.WRAPPED: state.wrapped_balance,
        Token.BPT: state.bpt_supply,
    }
    if amount_out > balances[token_out] and token_out is not Token.BPT:
        raise InsufficientLiquidityError(
            f"{token_out.value} out {amount_out} exceeds balance {balances[token_out]}"
        )
    if token_in is Token.BPT and amount_in > balances[Token.BPT]:
        raise InsufficientLiquidityError(f"bpt in {amount_in} exceeds supply {balances[Token.BPT]}")

    # BPT in is burned, BPT out is minted.
    balances[token_in] += -amount_in if token_in is Token.BPT else amount_in
    balances[token_out] += amount_out if token_out is Token.BPT else -amount_out

    new_state = with_balances(
        state,
        main=balances[Token.MAIN],
        wrapped=balances[Token.WRAPPED],
        bpt_supply=balances[Token.BPT],
    )
    check_post_state(new_state)
    return new_state


def check_post_state(state: PoolState) -> None:
    """Shares may only run out together with the balances they claim."""
    if state.bpt_supply == 0 and (state.main_balance != 0 or state.wrapped_balance != 0):
        raise TargetsViolatedError("bpt supply would reach zero while balances remain")


def on_swap(
    state: PoolState,
    config: LinearPoolConfig,
    rate: int,
    kind: SwapKind,
    token_in: Token,
    token_out: Token,
    amount: int,
) -> SwapResult:
    """
    Quote and apply one swap.

    `amount` is the amount in for GIVEN_IN and the amount out for GIVEN_OUT;
    `amount_calculated` is the other side.

    Raises:
        InsufficientLiquidityError: the output exceeds the pool's balance.
        TargetsViolatedError: the post-state would be out of range.
        RateUnavailableError: `rate` is not a positive int.
    """
    if token_in is token_out:
        raise ValueError(f"token_in and token_out must differ: {token_in.value}")
    _require_amount("amount", amount)

    sf = scaling_factors(config, rate)
    params = linear_params(state)
    main = fp.mul_down(state.main_balance, sf[Token.MAIN])
    wrapped = fp.mul_down(state.wrapped_balance, sf[Token.WRAPPED])
    supply = state.bpt_supply

    if kind is SwapKind.GIVEN_IN:
        fn = _GIVEN_IN[(token_in, token_out)]
        out_up = fn(fp.mul_down(amount, sf[token_in]), main, wrapped, supply, params)
        amount_in, amount_out = amount, fp.div_down(out_up, sf[token_out])
        calculated = amount_out
    else:
        fn = _GIVEN_OUT[(token_in, token_out)]
        in_up = fn(fp.mul_down(amount, sf[token_out]), main, wrapped, supply, params)
        amount_in, amount_out = fp.div_up(in_up, sf[token_in]), amount
        if amount_in == 0:
            raise ValueError(f"{token_out.value} out {amount} rounds to a zero amount in")
        calculated = amount_in

    new_state = _apply_swap(state, token_in, amount_in, token_out, amount_out)

    fee = 0
    if Token.MAIN in (token_in, token_out):
        main_after = fp.mul_down(new_state.main_balance, sf[Token.MAIN])
        # Reported in units of the token paid in.
        fee = fp.div_down(lm.calc_main_fee(main, main_after, params), sf[token_in])
        fee = min(fee, fp.mul_down(amount_in, params.fee))

    return SwapResult(
        amount_in=amount_in,
        amount_out=amount_out,
        amount_calculated=calculated,
        fee_amount=fee,
        state=new_state,
    )


def _require_pool_token(token: Token) -> None:
    if token is Token.BPT:
        raise ValueError("joins and exits take main or wrapped, not bpt")


def _join_exit_result(token: Token, bpt_delta: int, token_amount: int, swap: SwapResult) -> JoinExitResult:
    return JoinExitResult(
        bpt_delta=bpt_delta,
        main_amount=token_amount if token is Token.MAIN else 0,
        wrapped_amount=token_amount if token is Token.WRAPPED else 0,
        fee_amount=swap.fee_amount,
        state=swap.state,
    )


def on_join(
    state: PoolState,
    config: LinearPoolConfig,
    rate: int,
    token: Token,
    amount: int,
    kind: SwapKind = SwapKind.GIVEN_IN,
) -> JoinExitResult:
    """Single-token join. GIVEN_IN: `amount` of `token` in; GIVEN_OUT: `amount` of BPT out."""
    _require_pool_token(token)
    swap = on_swap(state, config, rate, kind, token, Token.BPT, amount)
    return _join_exit_result(token, swap.amount_out, swap.amount_in, swap)


def on_exit(
    state: PoolState,
    config: LinearPoolConfig,
    rate: int,
    token: Token,
    amount: int,
    kind: SwapKind = SwapKind.GIVEN_IN,
) -> JoinExitResult:
    """Single-token exit. GIVEN_IN: `amount` of BPT in; GIVEN_OUT: `amount` of `token` out."""
    _require_pool_token(token)
    swap = on_swap(state, config, rate, kind, Token.BPT, token, amount)
    return _join_exit_result(token, swap.amount_in, swap.amount_out, swap)


def on_join_proportional(state: PoolState, bpt_out: int) -> JoinExitResult:
    """Mint `bpt_out` against a pro-rata deposit of both tokens (rounded up)."""
    _require_amount("bpt_out", bpt_out)
    if state.bpt_supply == 0:
        raise TargetsViolatedError("proportional join needs an initialized pool")
    main_in = fp.divide_up(fp.mul(state.main_balance, bpt_out), state.bpt_supply)
    wrapped_in = fp.divide_up(fp.mul(state.wrapped_balance, bpt_out), state.bpt_supply)
    new_state = with_balances(
        state,
        main=fp.add(state.main_balance, main_in),
        wrapped=fp.add(state.wrapped_balance, wrapped_in),
        bpt_supply=fp.add(state.bpt_supply, bpt_out),
    )
    return JoinExitResult(
        bpt_delta=bpt_out, main_amount=main_in, wrapped_amount=wrapped_in, fee_amount=0, state=new_state
    )


def on_exit_proportional(state: PoolState, bpt_in: int) -> JoinExitResult:
    """Burn `bpt_in` for a pro-rata share of both balances (rounded down). Needs no rate."""
    _require_amount("bpt_in", bpt_in)
    if bpt_in > state.bpt_supply:
        raise InsufficientLiquidityError(f"bpt in {bpt_in} exceeds supply {state.bpt_supply}")
    main_out = fp.divide_down(state.main_balance * bpt_in, state.bpt_supply)
    wrapped_out = fp.divide_down(state.wrapped_balance * bpt_in, state.bpt_supply)
    new_state = with_balances(
        state,
        main=state.main_balance - main_out,
        wrapped=state.wrapped_balance - wrapped_out,
        bpt_supply=state.bpt_supply - bpt_in,
    )
    check_post_state(new_state)
    return JoinExitResult(
        bpt_delta=bpt_in, main_amount=main_out, wrapped_amount=wrapped_out, fee_amount=0, state=new_state
    )


# -- command dispatch ---------------------------------------------------------

@unique
class Operation(Enum):
    SWAP = "swap"
    JOIN = "join"
    EXIT = "exit"
    JOIN_PROPORTIONAL = "join_proportional"
    EXIT_PROPORTIONAL = "exit_proportional"


@dataclass(frozen=True)
class OperationParams:
    """Parameters for an operation. Unused fields keep their defaults."""

    operation: Operation
    amount: int = 0
    kind: SwapKind = SwapKind.GIVEN_IN
    token: Optional[Token] = None       # join / exit
    token_in: Optional[Token] = None    # swap
    token_out: Optional[Token] = None   # swap


OperationResult = Union[SwapResult, JoinExitResult]


@dataclass(frozen=True)
class StepResult:
    accepted: bool
    result: Optional[OperationResult] = None
    rejection: Optional[str] = None
    error: Optional[Exception] = None

    @property
    def state(self) -> Optional[PoolState]:
        return self.result.state if self.result is not None else None


def _run(state: PoolState, config: LinearPoolConfig, rate: int, params: OperationParams) -> OperationResult:
    op = params.operation
    if op is Operation.SWAP:
        if params.token_in is None or params.token_out is None:
            raise ValueError("swap needs token_in and token_out")
        return on_swap(state, config, rate, params.kind, params.token_in, params.token_out, params.amount)
    if op is Operation.JOIN or op is Operation.EXIT:
        if params.token is None:
            raise ValueError(f"{op.value} needs a token")
        fn = on_join if op is Operation.JOIN else on_exit
        return fn(state, config, rate, params.token, params.amount, params.kind)
    if op is Operation.JOIN_PROPORTIONAL:
        return on_join_proportional(state, params.amount)
    return on_exit_proportional(state, params.amount)


def step(state: PoolState, config: LinearPoolConfig, rate: int, params: OperationParams) -> StepResult:
    """
    Execute one operation against `state`.

    Returns ``StepResult`` with ``accepted=True`` on success, or
    ``accepted=False`` with the rejection reason and the typed error.
    """
    try:
        result = _run(state, config, rate, params)
    except LinearPoolError as exc:
        return StepResult(accepted=False, rejection=f"{type(exc).__name__}:{exc}", error=exc)
    except (TypeError, ValueError) as exc:
        return StepResult(accepted=False, rejection=f"invalid_params:{exc}", error=exc)
    return StepResult(accepted=True, result=result)


def step_or_raise(state: PoolState, config: LinearPoolConfig, rate: int, params: OperationParams) -> OperationResult:
    """Like ``step()`` but re-raises the rejection's error."""
    result = step(state, config, rate, params)
    if result.accepted and result.result is not None:
        return result.result
    if result.error is None:
        raise RuntimeError(f"rejected without error: {result.rejection}")
    raise result.error
