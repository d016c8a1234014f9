"""Exception types for the linear pool.

Every failure aborts the whole operation. ``engine.step()`` turns these into a
``StepResult`` for callers that prefer inspecting results over catching.
"""

from __future__ import annotations


class LinearPoolError(Exception):
    """Base class for all pool failures."""


class RateUnavailableError(LinearPoolError):
    """Raised when a wrapper rate source fails or reports a non-positive rate."""


class FixedPointOverflowError(LinearPoolError):
    """Raised when fixed-point arithmetic leaves the uint256 range."""


class DivisionByZeroError(LinearPoolError):
    """Raised when a fixed-point division (or a zero main-wrapper rate) divides by zero."""


class InsufficientLiquidityError(LinearPoolError):
    """Raised when a swap or exit asks for more than the pool holds."""


class TargetsViolatedError(LinearPoolError):
    """Raised when an operation would leave the pool in an out-of-range state."""


class InvalidTargetsError(LinearPoolError):
    """Raised when the target band is misconfigured (lower > upper, upper too high)."""


class ReentrancyError(LinearPoolError):
    """Raised when a pool operation is entered while another one is in progress."""


class UnauthorizedError(LinearPoolError):
    """Raised when a governance call does not come from the pool owner."""


class ConfigError(LinearPoolError):
    """Raised when a pool configuration file or mapping is malformed."""
