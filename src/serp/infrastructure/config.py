"""Process configuration.

Settings are read once at start-up, from ``SERP_*`` environment
variables with CLI overrides, and handed to the composition root.
Nothing below the composition root reads the environment.
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path

from serp.domain.exceptions import ValidationError

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")
LOG_FORMATS = ("console", "json")


def _int(env: Mapping[str, str], name: str, default: int) -> int:
    raw = env.get(name)
    if raw is None:
        return default
    try:
        return int(raw)
    except ValueError:
        raise ValidationError(f"{name} must be an integer, got {raw!r}") from None


def _float(env: Mapping[str, str], name: str, default: float) -> float:
    raw = env.get(name)
    if raw is None:
        return default
    try:
        return float(raw)
    except ValueError:
        raise ValidationError(f"{name} must be a number, got {raw!r}") from None


@dataclass(frozen=True)
class Settings:
    data_dir: Path = field(default_factory=lambda: Path("data"))
    table_name: str = "serp"
    event_bus_name: str = "serp-event-bus"
    max_delivery_attempts: int = 3
    store_timeout: float = 5.0
    log_level: str = "WARNING"
    log_format: str = "console"

    def __post_init__(self) -> None:
        if not self.table_name.strip():
            raise ValidationError("Table name cannot be blank")
        if self.max_delivery_attempts < 1:
            raise ValidationError("max_delivery_attempts must be at least 1")
        if self.store_timeout <= 0:
            raise ValidationError("store_timeout must be positive")
        if self.log_level not in LOG_LEVELS:
            raise ValidationError(
                f"Invalid log level {self.log_level!r}; expected one of {', '.join(LOG_LEVELS)}"
            )
        if self.log_format not in LOG_FORMATS:
            raise ValidationError(
                f"Invalid log format {self.log_format!r}; expected one of {', '.join(LOG_FORMATS)}"
            )

    @property
    def table_file(self) -> Path:
        return self.data_dir / f"{self.table_name}.json"

    @staticmethod
    def from_env(environ: Mapping[str, str] | None = None) -> Settings:
        env = os.environ if environ is None else environ
        return Settings(
            data_dir=Path(env.get("SERP_DATA_DIR", "data")),
            table_name=env.get("SERP_TABLE_NAME", "serp"),
            event_bus_name=env.get("SERP_EVENT_BUS_NAME", "serp-event-bus"),
            max_delivery_attempts=_int(env, "SERP_MAX_DELIVERY_ATTEMPTS", 3),
            store_timeout=_float(env, "SERP_STORE_TIMEOUT", 5.0),
            log_level=env.get("SERP_LOG_LEVEL", "WARNING").upper(),
            log_format=env.get("SERP_LOG_FORMAT", "console").lower(),
        )
