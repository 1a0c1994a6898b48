from __future__ import annotations

import math
import os
from dataclasses import dataclass
from datetime import timedelta
from typing import Literal

AppEnv = Literal["dev", "test", "prod"]
LogLevel = Literal["debug", "info", "warning", "error"]


def _getenv(name: str, default: str) -> str:
    return os.environ.get(name, default).strip()


@dataclass(frozen=True)
class Settings:
    app_env: AppEnv
    log_level: LogLevel
    log_json: bool
    # Identity of the replica being reported on.  Emptiness is checked by
    # the reporter, not here.
    serving_namespace: str
    serving_configuration: str
    serving_revision: str
    serving_pod: str
    reporting_period_seconds: float

    @property
    def is_dev(self) -> bool:
        return self.app_env == "dev"

    @property
    def is_test(self) -> bool:
        return self.app_env == "test"

    @property
    def is_prod(self) -> bool:
        return self.app_env == "prod"

    @property
    def reporting_period(self) -> timedelta:
        return timedelta(seconds=self.reporting_period_seconds)


def load_settings() -> Settings:
    app_env_raw = _getenv("APP_ENV", "dev").lower()
    log_level_raw = _getenv("LOG_LEVEL", "info").lower()
    log_json_raw = _getenv("LOG_JSON", "false").lower()
    period_raw = _getenv("REPORTING_PERIOD_SECONDS", "1")

    if app_env_raw not in ("dev", "test", "prod"):
        raise ValueError(f"APP_ENV must be dev|test|prod (got {app_env_raw!r})")

    if log_level_raw not in ("debug", "info", "warning", "error"):
        raise ValueError(
            f"LOG_LEVEL must be debug|info|warning|error (got {log_level_raw!r})"
        )

    if log_json_raw not in ("true", "false", "1", "0"):
        raise ValueError(f"LOG_JSON must be true|false (got {log_json_raw!r})")

    try:
        reporting_period_seconds = float(period_raw)
    except ValueError:
        raise ValueError(
            f"REPORTING_PERIOD_SECONDS must be a number (got {period_raw!r})"
        ) from None

    # inf, nan and values past timedelta's range parse as floats but
    # can't become a reporting period.
    try:
        if not math.isfinite(reporting_period_seconds):
            raise OverflowError
        timedelta(seconds=reporting_period_seconds)
    except OverflowError:
        raise ValueError(
            f"REPORTING_PERIOD_SECONDS must be a finite number (got {period_raw!r})"
        ) from None

    return Settings(  # type: ignore[arg-type]
        app_env=app_env_raw,
        log_level=log_level_raw,
        log_json=log_json_raw in ("true", "1"),
        serving_namespace=_getenv("SERVING_NAMESPACE", ""),
        serving_configuration=_getenv("SERVING_CONFIGURATION", ""),
        serving_revision=_getenv("SERVING_REVISION", ""),
        serving_pod=_getenv("SERVING_POD", ""),
        reporting_period_seconds=reporting_period_seconds,
    )
