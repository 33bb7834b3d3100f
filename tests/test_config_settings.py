"""Tests for environment-driven settings loading and logging setup."""

from __future__ import annotations

import logging

import pytest
import structlog

from hsndb_blast.config import AppSettings, SettingsLoadError, config_configure_logging, config_load_settings


@pytest.fixture(autouse=True)
def _isolate_dotenv(tmp_path, monkeypatch: pytest.MonkeyPatch) -> None:
    """Run every test from an empty directory so no local `.env` leaks in."""

    monkeypatch.chdir(tmp_path)


def test_config_load_settings_reads_environment_variables(monkeypatch: pytest.MonkeyPatch) -> None:
    """Map uppercase environment variables onto typed settings fields.

    Args:
        monkeypatch: Pytest environment patch helper.

    Returns:
        None: Assertions validate parsed values.

    Raises:
        AssertionError: Raised when values are not parsed.
    """

    monkeypatch.setenv("BLAST_API_URL", " http://compute.internal:3001/api ")
    monkeypatch.setenv("BLAST_POLL_INTERVAL_SECONDS", "0.5")
    monkeypatch.setenv("BLAST_POLL_MAX_ATTEMPTS", "20")
    monkeypatch.setenv("API_PREFIX", "/api/")
    monkeypatch.setenv("LOG_LEVEL", "debug")
    monkeypatch.setenv("CORS_ALLOW_ORIGINS", '["https://hsndb.example"]')
    monkeypatch.setenv("RECORD_STORE_URL", "   ")

    settings = config_load_settings()

    assert settings.blast_api_url == "http://compute.internal:3001/api"
    assert settings.blast_poll_interval_seconds == 0.5
    assert settings.blast_poll_max_attempts == 20
    assert settings.api_prefix == "/api"
    assert settings.log_level == "DEBUG"
    assert settings.cors_allow_origins == ["https://hsndb.example"]
    assert settings.record_store_url is None


def test_config_defaults_match_compute_service_contract() -> None:
    settings = AppSettings()

    assert settings.application_port == 3001
    assert settings.blast_poll_interval_seconds == 2.0
    assert settings.blast_poll_max_attempts == 150
    assert settings.blast_poll_max_consecutive_failures == 3
    assert settings.blast_check_health_before_submit is True
    assert settings.blast_default_max_target_seqs == 500
    assert settings.job_max_age_seconds == 3600.0


@pytest.mark.parametrize(
    ("variable", "value"),
    [
        ("BLAST_POLL_MAX_ATTEMPTS", "0"),
        ("BLAST_REQUEST_TIMEOUT_SECONDS", "0"),
        ("API_PREFIX", "api"),
        ("LOG_LEVEL", "verbose"),
        ("BLAST_DB_PATH", "   "),
    ],
)
def test_config_load_settings_wraps_validation_errors(
    monkeypatch: pytest.MonkeyPatch,
    variable: str,
    value: str,
) -> None:
    """Raise SettingsLoadError with guidance for invalid configuration.

    Args:
        monkeypatch: Pytest environment patch helper.
        variable: Environment variable under test.
        value: Invalid value.

    Returns:
        None: Assertions validate wrapped failure.

    Raises:
        AssertionError: Raised when invalid config is accepted.
    """

    monkeypatch.setenv(variable, value)

    with pytest.raises(SettingsLoadError, match="Startup configuration validation failed"):
        config_load_settings()


def test_config_configure_logging_sets_root_level_and_handler() -> None:
    config_configure_logging(level="warning", json_format=True)

    root_logger = logging.getLogger()
    assert root_logger.level == logging.WARNING
    assert len(root_logger.handlers) == 1
    assert isinstance(root_logger.handlers[0].formatter, structlog.stdlib.ProcessorFormatter)

    config_configure_logging(level="INFO")


def test_config_configure_logging_rejects_unknown_level() -> None:
    with pytest.raises(ValueError, match="unsupported log level"):
        config_configure_logging(level="chatty")
