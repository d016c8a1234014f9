"""
Functional core of the linear pool: pure, integer-only, no I/O.
"""

from .bounds import Region, Targets, classify, from_nominal, slope, to_nominal
from .config import LinearPoolConfig, config_from_mapping, load_config
from .engine import (
    JoinExitResult,
    Operation,
    OperationParams,
    StepResult,
    SwapKind,
    SwapResult,
    Token,
    on_exit,
    on_exit_proportional,
    on_join,
    on_join_proportional,
    on_swap,
    step,
    step_or_raise,
)
from .errors import (
    ConfigError,
    DivisionByZeroError,
    FixedPointOverflowError,
    InsufficientLiquidityError,
    InvalidTargetsError,
    LinearPoolError,
    RateUnavailableError,
    ReentrancyError,
    TargetsViolatedError,
    UnauthorizedError,
)
from .fixed_point import ONE
from .rate_composer import RateSource, WrapperRate, compose_rate, query_composed_rate
from .state import PoolState, initial_state, state_from_dict, state_to_dict

__all__ = [
    "Region",
    "Targets",
    "classify",
    "from_nominal",
    "slope",
    "to_nominal",
    "LinearPoolConfig",
    "config_from_mapping",
    "load_config",
    "JoinExitResult",
    "Operation",
    "OperationParams",
    "StepResult",
    "SwapKind",
    "SwapResult",
    "Token",
    "on_exit",
    "on_exit_proportional",
    "on_join",
    "on_join_proportional",
    "on_swap",
    "step",
    "step_or_raise",
    "ConfigError",
    "DivisionByZeroError",
    "FixedPointOverflowError",
    "InsufficientLiquidityError",
    "InvalidTargetsError",
    "LinearPoolError",
    "RateUnavailableError",
    "ReentrancyError",
    "TargetsViolatedError",
    "UnauthorizedError",
    "ONE",
    "RateSource",
    "WrapperRate",
    "compose_rate",
    "query_composed_rate",
    "PoolState",
    "initial_state",
    "state_from_dict",
    "state_to_dict",
]
