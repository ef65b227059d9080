from __future__ import annotations

import json
import logging
import sys
from pathlib import Path

import pytest

sys.path.append(str(Path(__file__).resolve().parents[1]))

from stylist_app.config import EngineConfig
from stylist_app.logging_config import (
    JsonFormatter,
    correlation_context,
    ensure_correlation_id,
    log_event,
    redact_for_log,
)
from tools.observability import instrument_operation

ENV_KEYS = [
    "APP_ENV",
    "APP_CONFIG_PATH",
    "ENGINE_CONFIG_DIR",
    "MAX_OUTFITS",
    "FORECAST_MAX_OUTFITS",
    "SUGGESTION_LIMIT",
    "FORECAST_DAYS",
    "FORECAST_TOP_N",
    "RANDOM_SEED",
    "LOG_LEVEL",
    "PREFERENCE_STORE_PATH",
    "OPENWEATHER_API_KEY",
    "DEFAULT_LOCATION",
]


@pytest.fixture
def clean_env(monkeypatch):
    for key in ENV_KEYS:
        monkeypatch.delenv(key, raising=False)
    return monkeypatch


def test_defaults_without_environment(clean_env) -> None:
    config = EngineConfig.from_env()

    assert config.max_outfits == 50
    assert config.forecast_max_outfits == 10
    assert config.suggestion_limit == 10
    assert config.random_seed == 42
    assert config.preference_store_path is None


def test_environment_file_is_overridden_by_variables(clean_env, tmp_path) -> None:
    env_dir = tmp_path / "environments"
    env_dir.mkdir()
    (env_dir / "staging.yaml").write_text(
        "# staging\nmax_outfits: 20\nrandom_seed: 7\npreference_store_path: \"data/prefs\"\n"
    )
    clean_env.setenv("APP_ENV", "staging")
    clean_env.setenv("ENGINE_CONFIG_DIR", str(env_dir))
    clean_env.setenv("RANDOM_SEED", "99")

    config = EngineConfig.from_env()

    assert config.environment == "staging"
    assert config.max_outfits == 20
    assert config.random_seed == 99
    assert config.preference_store_path == "data/prefs"


def test_invalid_integer_is_reported(clean_env) -> None:
    clean_env.setenv("MAX_OUTFITS", "lots")

    with pytest.raises(ValueError, match="max_outfits"):
        EngineConfig.from_env()


def test_string_settings_and_bounds(clean_env) -> None:
    clean_env.setenv("OPENWEATHER_API_KEY", "secret")
    clean_env.setenv("DEFAULT_LOCATION", "Lisbon")
    clean_env.setenv("FORECAST_DAYS", "3")

    config = EngineConfig.from_env()

    assert config.openweather_api_key == "secret"
    assert config.default_location == "Lisbon"
    assert config.forecast_days == 3
    with pytest.raises(ValueError, match="forecast_days"):
        EngineConfig(forecast_days=9)
    with pytest.raises(ValueError, match="suggestion_limit"):
        EngineConfig(suggestion_limit=-1)


def test_redaction_scrubs_identifiers_and_emails() -> None:
    scrubbed = redact_for_log(
        {"user_id": "u-1", "note": "contact me at jane@example.com", "nested": [{"location": "Paris"}], "count": 3}
    )

    assert scrubbed == {
        "user_id": "[redacted]",
        "note": "contact me at [redacted-email]",
        "nested": [{"location": "[redacted]"}],
        "count": 3,
    }


def test_json_formatter_includes_event_fields() -> None:
    record = logging.LogRecord("engine", logging.INFO, __file__, 1, "outfits_suggested", None, None)
    record.event = "outfits_suggested"
    record.correlation_id = "abc"
    record.returned = 3

    payload = json.loads(JsonFormatter().format(record))

    assert payload["event"] == "outfits_suggested"
    assert payload["correlation_id"] == "abc"
    assert payload["returned"] == 3
    assert payload["level"] == "INFO"


def test_log_event_redacts_fields(caplog) -> None:
    logger = logging.getLogger("tests.log_event")
    caplog.set_level(logging.INFO, logger="tests.log_event")

    with correlation_context("fixed-id"):
        log_event(logger, logging.INFO, "outfit_rated", user_id="user-1", rating=5.0)

    record = caplog.records[-1]
    assert record.event == "outfit_rated"
    assert record.user_id == "[redacted]"
    assert record.rating == 5.0
    assert record.correlation_id == "fixed-id"


def test_correlation_context_restores_previous_id() -> None:
    outer = ensure_correlation_id("outer-id")

    with correlation_context("inner-id") as inner:
        assert inner == "inner-id"

    assert ensure_correlation_id() == outer


def test_instrumented_operation_logs_lifecycle(caplog) -> None:
    caplog.set_level(logging.INFO)

    @instrument_operation("demo")
    def succeed(value: int) -> int:
        return value * 2

    @instrument_operation("demo_failure")
    def fail() -> None:
        raise RuntimeError("boom")

    assert succeed(value=2) == 4
    with pytest.raises(RuntimeError):
        fail()

    events = [(getattr(r, "event", None), getattr(r, "operation", None)) for r in caplog.records]
    assert ("operation_started", "demo") in events
    assert ("operation_completed", "demo") in events
    assert ("operation_failed", "demo_failure") in events
