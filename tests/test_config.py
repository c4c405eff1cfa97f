import pytest

from ingestion.config import Settings


def test_defaults_match_service_limits(monkeypatch):
    for name in ("BATCH_SIZE", "RATE_LIMIT_SECONDS", "IDLE_POLL_SECONDS", "CORS_ORIGINS", "LOG_LEVEL"):
        monkeypatch.delenv(name, raising=False)

    settings = Settings.from_env()

    assert settings.batch_size == 3
    assert settings.rate_limit_seconds == 5.0
    assert settings.idle_poll_seconds == 1.0
    assert settings.cors_origins == ["*"]
    assert settings.log_level == "INFO"


def test_environment_overrides(monkeypatch):
    monkeypatch.setenv("RATE_LIMIT_SECONDS", "0.5")
    monkeypatch.setenv("BATCH_SIZE", "4")
    monkeypatch.setenv("CORS_ORIGINS", "http://a.test, http://b.test,")
    monkeypatch.setenv("LOG_LEVEL", "debug")

    settings = Settings.from_env()

    assert settings.rate_limit_seconds == 0.5
    assert settings.batch_size == 4
    assert settings.cors_origins == ["http://a.test", "http://b.test"]
    assert settings.log_level == "DEBUG"


@pytest.mark.parametrize(
    "kwargs",
    [
        {"batch_size": 0},
        {"rate_limit_seconds": -1},
        {"min_work_latency_seconds": 0.5, "max_work_latency_seconds": 0.1},
    ],
)
def test_invalid_settings_are_rejected(kwargs):
    with pytest.raises(ValueError):
        Settings(**kwargs)
