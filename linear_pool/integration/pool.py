"""
Imperative shell around the pool engine.

`LinearPool` owns one `PoolState` and is the only thing that replaces it. Each
operation:

1. takes the per-pool operation guard (nested or concurrent calls are
   rejected with `ReentrancyError`, never queued),
2. queries both wrapper rates fresh and composes them,
3. runs the pure engine on the current state,
4. commits the returned state only if everything above succeeded.

A failure at any step leaves the committed state untouched.
"""

from __future__ import annotations

import logging
import threading
from contextlib import contextmanager
from dataclasses import replace
from typing import Callable, Iterator, Optional, TypeVar

from ..core import engine
from ..core import fixed_point as fp
from ..core.bounds import Targets, is_within, validate_fee
from ..core.config import LinearPoolConfig
from ..core.engine import JoinExitResult, Operation, OperationParams, StepResult, SwapKind, SwapResult, Token
from ..core.errors import LinearPoolError, ReentrancyError, TargetsViolatedError, UnauthorizedError
from ..core.rate_composer import RateSource, query_composed_rate
from ..core.state import PoolState, initial_state, state_fingerprint


logger = logging.getLogger(__name__)

T = TypeVar("T")

_RATE_FREE = frozenset({Operation.JOIN_PROPORTIONAL, Operation.EXIT_PROPORTIONAL})


class LinearPool:
    def __init__(
        self,
        config: LinearPoolConfig,
        rate_source: RateSource,
        state: Optional[PoolState] = None,
    ) -> None:
        self.config = config
        self._rate_source = rate_source
        self._state = state if state is not None else initial_state(
            config.lower_target, config.upper_target, config.swap_fee_percentage
        )
        engine.check_post_state(self._state)
        self._lock = threading.Lock()
        self._in_progress: Optional[str] = None

    @property
    def state(self) -> PoolState:
        return self._state

    @property
    def owner(self) -> str:
        return self.config.owner

    # -- guard ----------------------------------------------------------------

    @contextmanager
    def _operation(self, name: str) -> Iterator[None]:
        with self._lock:
            if self._in_progress is not None:
                logger.warning("rejected %s: %s already in progress", name, self._in_progress)
                raise ReentrancyError(f"{name} entered while {self._in_progress} is in progress")
            self._in_progress = name
        try:
            yield
        finally:
            with self._lock:
                self._in_progress = None

    def _query_rate(self) -> int:
        rate = query_composed_rate(self._rate_source, self.config.main_token, self.config.wrapped_token)
        logger.debug("wrapped token rate %s (%s / %s)", rate, self.config.wrapped_token, self.config.main_token)
        return rate

    def _run(self, name: str, fn: Callable[[Optional[int]], T], *, needs_rate: bool = True) -> T:
        with self._operation(name):
            try:
                result = fn(self._query_rate() if needs_rate else None)
            except LinearPoolError as exc:
                logger.warning("%s rejected: %s: %s", name, type(exc).__name__, exc)
                raise
            self._state = result.state  # type: ignore[attr-defined]
            logger.info("%s committed, state %s", name, state_fingerprint(self._state))
            return result

    # -- reads ----------------------------------------------------------------

    def get_wrapped_token_rate(self) -> int:
        """Value of one wrapped token in main tokens (18 decimals), queried fresh."""
        with self._operation("get_wrapped_token_rate"):
            return self._query_rate()

    # -- operations -------------------------------------------------------------

    def on_swap(self, kind: SwapKind, token_in: Token, token_out: Token, amount: int) -> SwapResult:
        return self._run(
            "swap",
            lambda rate: engine.on_swap(self._state, self.config, rate, kind, token_in, token_out, amount),
        )

    def on_join(self, token: Token, amount: int, kind: SwapKind = SwapKind.GIVEN_IN) -> JoinExitResult:
        return self._run(
            "join",
            lambda rate: engine.on_join(self._state, self.config, rate, token, amount, kind),
        )

    def on_exit(self, token: Token, amount: int, kind: SwapKind = SwapKind.GIVEN_IN) -> JoinExitResult:
        return self._run(
            "exit",
            lambda rate: engine.on_exit(self._state, self.config, rate, token, amount, kind),
        )

    def on_join_proportional(self, bpt_out: int) -> JoinExitResult:
        return self._run(
            "join_proportional",
            lambda _: engine.on_join_proportional(self._state, bpt_out),
            needs_rate=False,
        )

    def on_exit_proportional(self, bpt_in: int) -> JoinExitResult:
        return self._run(
            "exit_proportional",
            lambda _: engine.on_exit_proportional(self._state, bpt_in),
            needs_rate=False,
        )

    def execute(self, params: OperationParams) -> StepResult:
        """Run one operation and report the outcome as a `StepResult` instead of raising."""
        try:
            return StepResult(
                accepted=True,
                result=self._run(
                    params.operation.value,
                    lambda rate: engine.step_or_raise(self._state, self.config, rate or 0, params),
                    needs_rate=params.operation not in _RATE_FREE,
                ),
            )
        except LinearPoolError as exc:
            return StepResult(accepted=False, rejection=f"{type(exc).__name__}:{exc}", error=exc)
        except (TypeError, ValueError) as exc:
            return StepResult(accepted=False, rejection=f"invalid_params:{exc}", error=exc)

    # -- governance -------------------------------------------------------------

    def _require_owner(self, caller: str) -> None:
        if caller != self.config.owner:
            raise UnauthorizedError(f"{caller} is not the pool owner")

    def _upscaled_main(self) -> int:
        return fp.mul_down(self._state.main_balance, self.config.main_scaling_factor)

    def set_targets(self, caller: str, lower_target: int, upper_target: int) -> None:
        """Move the target band. The main balance must sit inside both the old and the new band."""
        with self._operation("set_targets"):
            self._require_owner(caller)
            new_targets = Targets(lower_target, upper_target)
            main = self._upscaled_main()
            if not (is_within(main, self._state.targets) and is_within(main, new_targets)):
                raise TargetsViolatedError(f"main balance {main} outside the current or new target band")
            self._state = replace(self._state, lower_target=lower_target, upper_target=upper_target)
            logger.info("targets set to [%s, %s] by %s", lower_target, upper_target, caller)

    def set_swap_fee_percentage(self, caller: str, swap_fee_percentage: int) -> None:
        """Change the fee. Only allowed while the main balance is inside the band."""
        with self._operation("set_swap_fee_percentage"):
            self._require_owner(caller)
            validate_fee(swap_fee_percentage)
            main = self._upscaled_main()
            if not is_within(main, self._state.targets):
                raise TargetsViolatedError(f"main balance {main} outside the target band")
            self._state = replace(self._state, swap_fee_percentage=swap_fee_percentage)
            logger.info("swap fee set to %s by %s", swap_fee_percentage, caller)
