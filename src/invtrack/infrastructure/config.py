"""Runtime settings.

Every setting has a default and can be overridden through an
``INVTRACK_*`` environment variable; the CLI can override the data
directory and log level once more on top of that.
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass, replace
from pathlib import Path

ENV_PREFIX = "INVTRACK_"

DEFAULT_LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


@dataclass(frozen=True)
class Settings:
    data_dir: Path = Path("data")
    log_level: str = "WARNING"
    log_format: str = DEFAULT_LOG_FORMAT
    default_warehouse: str = "MAIN"
    low_stock_threshold: int = 10
    expiry_window_days: int = 30
    max_attempts: int = 5
    currency: str = "USD"

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> Settings:
        env = os.environ if environ is None else environ
        defaults = cls()
        return cls(
            data_dir=Path(env.get(f"{ENV_PREFIX}DATA_DIR", str(defaults.data_dir))),
            log_level=env.get(f"{ENV_PREFIX}LOG_LEVEL", defaults.log_level).upper(),
            log_format=env.get(f"{ENV_PREFIX}LOG_FORMAT", defaults.log_format),
            default_warehouse=env.get(
                f"{ENV_PREFIX}DEFAULT_WAREHOUSE", defaults.default_warehouse
            ),
            low_stock_threshold=_int(env, "LOW_STOCK_THRESHOLD", defaults.low_stock_threshold),
            expiry_window_days=_int(env, "EXPIRY_WINDOW_DAYS", defaults.expiry_window_days),
            max_attempts=_int(env, "MAX_ATTEMPTS", defaults.max_attempts, minimum=1),
            currency=env.get(f"{ENV_PREFIX}CURRENCY", defaults.currency).upper(),
        )

    def with_overrides(
        self, data_dir: Path | None = None, log_level: str | None = None
    ) -> Settings:
        changes: dict = {}
        if data_dir is not None:
            changes["data_dir"] = data_dir
        if log_level is not None:
            changes["log_level"] = log_level.upper()
        return replace(self, **changes)


def _int(env: Mapping[str, str], name: str, default: int, minimum: int = 0) -> int:
    raw = env.get(f"{ENV_PREFIX}{name}")
    if raw is None:
        return default
    try:
        value = int(raw)
    except ValueError:
        raise ValueError(f"{ENV_PREFIX}{name} must be an integer, got {raw!r}") from None
    if value < minimum:
        raise ValueError(f"{ENV_PREFIX}{name} must be at least {minimum}, got {value}")
    return value
