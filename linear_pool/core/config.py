"""
Pool construction config.

A pool is configured once, at construction: token identities, target band,
swap fee, owner, and token decimals. Targets and fee may later change through
owner-only governance calls; nothing else is persisted.

Configs load from a mapping, from a YAML file, and take optional environment
overrides:

    LINEAR_POOL_LOWER_TARGET, LINEAR_POOL_UPPER_TARGET,
    LINEAR_POOL_SWAP_FEE, LINEAR_POOL_OWNER
"""

from __future__ import annotations

import os
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Any, Mapping, Optional

import yaml

from . import fixed_point as fp
from .bounds import Targets, validate_fee
from .errors import ConfigError


CONFIG_SCHEMA = "linear-pool/config/v1"


@dataclass(frozen=True)
class LinearPoolConfig:
    main_token: str
    wrapped_token: str
    lower_target: int
    upper_target: int
    swap_fee_percentage: int
    owner: str
    main_decimals: int = 18
    wrapped_decimals: int = 18

    def __post_init__(self) -> None:
        for name in ("main_token", "wrapped_token", "owner"):
            v = getattr(self, name)
            if not isinstance(v, str) or not v.strip():
                raise ValueError(f"{name} must be a non-empty string")
        if self.main_token == self.wrapped_token:
            raise ValueError("main_token and wrapped_token must differ")
        for name in ("main_decimals", "wrapped_decimals"):
            v = getattr(self, name)
            if not isinstance(v, int) or isinstance(v, bool):
                raise TypeError(f"{name} must be an int")
            if not (0 <= v <= fp.DECIMALS):
                raise ValueError(f"{name} must be in [0, {fp.DECIMALS}]: {v}")
        Targets(self.lower_target, self.upper_target)
        validate_fee(self.swap_fee_percentage)

    @property
    def main_scaling_factor(self) -> int:
        return fp.pow10(fp.DECIMALS - self.main_decimals) * fp.ONE

    @property
    def wrapped_scaling_factor(self) -> int:
        """Decimals-only factor; the engine multiplies in the composed rate per call."""
        return fp.pow10(fp.DECIMALS - self.wrapped_decimals) * fp.ONE


def _require_str(obj: Any, *, name: str) -> str:
    if not isinstance(obj, str) or not obj.strip():
        raise ConfigError(f"{name} must be a non-empty string")
    return obj.strip()


def _require_int(obj: Any, *, name: str, default: Optional[int] = None) -> int:
    if obj is None and default is not None:
        return default
    # YAML users write big fixed-point numbers as strings ("1000000000000000000").
    if isinstance(obj, str) and obj.strip().isdigit():
        return int(obj.strip())
    if not isinstance(obj, int) or isinstance(obj, bool):
        raise ConfigError(f"{name} must be an int")
    return obj


def config_from_mapping(obj: Any) -> LinearPoolConfig:
    if not isinstance(obj, Mapping):
        raise ConfigError("pool config must be a mapping")
    schema = obj.get("schema", CONFIG_SCHEMA)
    if schema != CONFIG_SCHEMA:
        raise ConfigError(f"unsupported config schema: {schema}")
    try:
        return LinearPoolConfig(
            main_token=_require_str(obj.get("main_token"), name="main_token"),
            wrapped_token=_require_str(obj.get("wrapped_token"), name="wrapped_token"),
            lower_target=_require_int(obj.get("lower_target"), name="lower_target", default=0),
            upper_target=_require_int(obj.get("upper_target"), name="upper_target", default=0),
            swap_fee_percentage=_require_int(obj.get("swap_fee_percentage"), name="swap_fee_percentage"),
            owner=_require_str(obj.get("owner"), name="owner"),
            main_decimals=_require_int(obj.get("main_decimals"), name="main_decimals", default=18),
            wrapped_decimals=_require_int(obj.get("wrapped_decimals"), name="wrapped_decimals", default=18),
        )
    except (TypeError, ValueError) as exc:
        raise ConfigError(str(exc)) from exc


def _env_int(name: str) -> Optional[int]:
    raw = os.environ.get(name)
    if raw is None or not raw.strip():
        return None
    try:
        return int(raw.strip())
    except ValueError as exc:
        raise ConfigError(f"{name} must be an int: {raw!r}") from exc


def _env_str(name: str) -> Optional[str]:
    raw = os.environ.get(name)
    if raw is None:
        return None
    v = raw.strip()
    return v if v else None


def apply_env_overrides(config: LinearPoolConfig) -> LinearPoolConfig:
    overrides: dict[str, Any] = {}
    for field, env in (
        ("lower_target", "LINEAR_POOL_LOWER_TARGET"),
        ("upper_target", "LINEAR_POOL_UPPER_TARGET"),
        ("swap_fee_percentage", "LINEAR_POOL_SWAP_FEE"),
    ):
        v = _env_int(env)
        if v is not None:
            overrides[field] = v
    owner = _env_str("LINEAR_POOL_OWNER")
    if owner is not None:
        overrides["owner"] = owner
    if not overrides:
        return config
    return replace(config, **overrides)


def load_config(path: Path, *, use_env: bool = True) -> LinearPoolConfig:
    """Load a pool config from YAML, then apply environment overrides."""
    try:
        raw = yaml.safe_load(Path(path).read_text(encoding="utf-8"))
    except yaml.YAMLError as exc:
        raise ConfigError(f"invalid YAML in {path}: {exc}") from exc
    config = config_from_mapping(raw)
    return apply_env_overrides(config) if use_env else config
