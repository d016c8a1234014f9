"""
Imperative shell: the stateful pool object, rate sources, logging setup.
"""

from .logging_conf import setup_logging
from .pool import LinearPool
from .rate_sources import RebasingWrapper, StaticRateSource, WrapperRateSource

__all__ = [
    "LinearPool",
    "RebasingWrapper",
    "StaticRateSource",
    "WrapperRateSource",
    "setup_logging",
]
