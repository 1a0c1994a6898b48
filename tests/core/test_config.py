from __future__ import annotations

from datetime import timedelta

import pytest

from queue_stats.core.config import AppEnv, Settings, load_settings

# ---- valid values ----


def test_load_settings_defaults(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in (
        "APP_ENV",
        "LOG_LEVEL",
        "LOG_JSON",
        "SERVING_NAMESPACE",
        "SERVING_POD",
        "REPORTING_PERIOD_SECONDS",
    ):
        monkeypatch.delenv(name, raising=False)
    settings = load_settings()
    assert settings.app_env == "dev"
    assert settings.log_level == "info"
    assert settings.log_json is False
    assert settings.serving_namespace == ""
    assert settings.serving_pod == ""
    assert settings.reporting_period == timedelta(seconds=1)


def test_load_settings_respects_env_vars(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("APP_ENV", "prod")
    monkeypatch.setenv("LOG_LEVEL", "error")
    monkeypatch.setenv("LOG_JSON", "true")
    monkeypatch.setenv("SERVING_NAMESPACE", "default")
    monkeypatch.setenv("SERVING_CONFIGURATION", "helloworld-go")
    monkeypatch.setenv("SERVING_REVISION", "helloworld-go-00001")
    monkeypatch.setenv("SERVING_POD", "helloworld-go-00001-abc")
    monkeypatch.setenv("REPORTING_PERIOD_SECONDS", "2.5")
    settings = load_settings()
    assert settings.app_env == "prod"
    assert settings.log_level == "error"
    assert settings.log_json is True
    assert settings.serving_namespace == "default"
    assert settings.serving_configuration == "helloworld-go"
    assert settings.serving_revision == "helloworld-go-00001"
    assert settings.serving_pod == "helloworld-go-00001-abc"
    assert settings.reporting_period == timedelta(milliseconds=2500)


def test_load_settings_normalizes_case(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("APP_ENV", "PROD")
    monkeypatch.setenv("LOG_LEVEL", "DEBUG")
    monkeypatch.setenv("LOG_JSON", "TRUE")
    settings = load_settings()
    assert settings.app_env == "prod"
    assert settings.log_level == "debug"
    assert settings.log_json is True


def test_load_settings_strips_whitespace(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("APP_ENV", "  test  ")
    monkeypatch.setenv("SERVING_POD", "  pod-1  ")
    settings = load_settings()
    assert settings.app_env == "test"
    assert settings.serving_pod == "pod-1"


# ---- invalid values ----


def test_load_settings_rejects_invalid_app_env(
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    monkeypatch.setenv("APP_ENV", "staging")
    with pytest.raises(ValueError, match="APP_ENV must be dev|test|prod"):
        load_settings()


def test_load_settings_rejects_invalid_log_level(
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    monkeypatch.setenv("APP_ENV", "dev")
    monkeypatch.setenv("LOG_LEVEL", "verbose")
    with pytest.raises(ValueError, match="LOG_LEVEL must be debug|info|warning|error"):
        load_settings()


def test_load_settings_rejects_invalid_log_json(
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    monkeypatch.setenv("APP_ENV", "dev")
    monkeypatch.setenv("LOG_LEVEL", "info")
    monkeypatch.setenv("LOG_JSON", "maybe")
    with pytest.raises(ValueError, match="LOG_JSON must be true|false"):
        load_settings()


def test_load_settings_rejects_non_numeric_period(
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    monkeypatch.setenv("APP_ENV", "dev")
    monkeypatch.setenv("LOG_LEVEL", "info")
    monkeypatch.setenv("LOG_JSON", "false")
    monkeypatch.setenv("REPORTING_PERIOD_SECONDS", "1s")
    with pytest.raises(ValueError, match="REPORTING_PERIOD_SECONDS must be a number"):
        load_settings()


def test_load_settings_leaves_period_sign_to_reporter(
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    monkeypatch.setenv("APP_ENV", "dev")
    monkeypatch.setenv("LOG_LEVEL", "info")
    monkeypatch.setenv("LOG_JSON", "false")
    monkeypatch.setenv("REPORTING_PERIOD_SECONDS", "0")
    assert load_settings().reporting_period == timedelta(0)


# ---- Settings properties ----


def _make_settings(app_env: AppEnv = "dev") -> Settings:
    return Settings(  # type: ignore[arg-type]
        app_env=app_env,
        log_level="info",
        log_json=False,
        serving_namespace="default",
        serving_configuration="helloworld-go",
        serving_revision="helloworld-go-00001",
        serving_pod="helloworld-go-00001-abc",
        reporting_period_seconds=1.0,
    )


def test_settings_env_flags() -> None:
    assert _make_settings("dev").is_dev is True
    assert _make_settings("test").is_test is True
    assert _make_settings("prod").is_prod is True
    assert _make_settings("prod").is_dev is False


def test_settings_is_frozen() -> None:
    s = _make_settings()
    with pytest.raises(AttributeError):
        s.app_env = "prod"  # type: ignore[misc]


@pytest.mark.parametrize("raw", ["inf", "-inf", "nan", "1e300", "-1e300"])
def test_load_settings_rejects_unrepresentable_period(
    monkeypatch: pytest.MonkeyPatch, raw: str
) -> None:
    monkeypatch.setenv("APP_ENV", "dev")
    monkeypatch.setenv("LOG_LEVEL", "info")
    monkeypatch.setenv("LOG_JSON", "false")
    monkeypatch.setenv("REPORTING_PERIOD_SECONDS", raw)
    with pytest.raises(
        ValueError, match="REPORTING_PERIOD_SECONDS must be a finite number"
    ):
        load_settings()


def test_load_settings_accepts_large_finite_period(
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    monkeypatch.setenv("APP_ENV", "dev")
    monkeypatch.setenv("LOG_LEVEL", "info")
    monkeypatch.setenv("LOG_JSON", "false")
    monkeypatch.setenv("REPORTING_PERIOD_SECONDS", "86400")
    assert load_settings().reporting_period == timedelta(days=1)
