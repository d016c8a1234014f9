"""
Rate sources for the pool shell.

The pool only needs `query_rate(wrapper) -> WrapperRate`. Two sources live
here:
- `StaticRateSource`: fixed rates keyed by wrapper identity (tests, replay).
- `WrapperRateSource`: forwards to registered wrapper objects exposing
  `rate()`, e.g. `RebasingWrapper`, an in-memory model of a share token over
  an elastic-supply underlying.
"""

from __future__ import annotations

from typing import Dict, Protocol

from ..core import fixed_point as fp
from ..core.rate_composer import WrapperRate


class Wrapper(Protocol):
    def rate(self) -> WrapperRate: ...


class StaticRateSource:
    def __init__(self, rates: Dict[str, WrapperRate] | None = None) -> None:
        self._rates: Dict[str, WrapperRate] = dict(rates or {})

    def set_rate(self, wrapper: str, raw_rate: int, fraction_digits: int) -> None:
        self._rates[wrapper] = WrapperRate(raw_rate=raw_rate, fraction_digits=fraction_digits)

    def query_rate(self, wrapper: str) -> WrapperRate:
        try:
            return self._rates[wrapper]
        except KeyError:
            raise LookupError(f"no rate registered for wrapper {wrapper}") from None


class RebasingWrapper:
    """
    Non-rebasing share token over a rebasing underlying.

    The wrapper holds `underlying_balance` underlying base units against
    `supply` wrapper base units (18 decimals). A rebase changes what it holds
    without touching its supply, so the rate drifts while share balances stay
    put.
    """

    WRAPPER_DECIMALS = 18

    def __init__(self, underlying_decimals: int = 9) -> None:
        if not (0 <= underlying_decimals <= fp.DECIMALS):
            raise ValueError(f"underlying_decimals must be in [0, {fp.DECIMALS}]: {underlying_decimals}")
        self.underlying_decimals = underlying_decimals
        self.underlying_balance = 0
        self.supply = 0

    @classmethod
    def with_rate(cls, raw_rate: int, underlying_decimals: int = 9) -> "RebasingWrapper":
        """Seed one whole wrapper unit backed by `raw_rate` underlying base units."""
        wrapper = cls(underlying_decimals)
        wrapper.underlying_balance = raw_rate
        wrapper.supply = 10**cls.WRAPPER_DECIMALS
        return wrapper

    def deposit(self, underlying_amount: int) -> int:
        """Deposit underlying, mint shares at the current rate. Returns shares minted."""
        if underlying_amount <= 0:
            raise ValueError(f"underlying_amount must be positive: {underlying_amount}")
        if self.supply == 0:
            minted = underlying_amount * 10 ** (self.WRAPPER_DECIMALS - self.underlying_decimals)
        else:
            minted = underlying_amount * self.supply // self.underlying_balance
        self.underlying_balance += underlying_amount
        self.supply += minted
        return minted

    def withdraw(self, shares: int) -> int:
        """Burn shares for underlying (rounded down). Returns underlying paid out."""
        if not (0 < shares <= self.supply):
            raise ValueError(f"shares must be in (0, {self.supply}]: {shares}")
        paid = shares * self.underlying_balance // self.supply
        self.underlying_balance -= paid
        self.supply -= shares
        return paid

    def rebase(self, new_underlying_balance: int) -> None:
        if new_underlying_balance < 0:
            raise ValueError(f"underlying balance must be non-negative: {new_underlying_balance}")
        self.underlying_balance = new_underlying_balance

    def rate(self) -> WrapperRate:
        if self.supply == 0:
            return WrapperRate(raw_rate=0, fraction_digits=self.underlying_decimals)
        raw = self.underlying_balance * 10**self.WRAPPER_DECIMALS // self.supply
        return WrapperRate(raw_rate=raw, fraction_digits=self.underlying_decimals)


class WrapperRateSource:
    def __init__(self) -> None:
        self._wrappers: Dict[str, Wrapper] = {}

    def register(self, wrapper_id: str, wrapper: Wrapper) -> None:
        if wrapper_id in self._wrappers:
            raise ValueError(f"wrapper already registered: {wrapper_id}")
        self._wrappers[wrapper_id] = wrapper

    def query_rate(self, wrapper: str) -> WrapperRate:
        try:
            target = self._wrappers[wrapper]
        except KeyError:
            raise LookupError(f"unknown wrapper {wrapper}") from None
        return target.rate()
