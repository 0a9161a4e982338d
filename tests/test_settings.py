"""Tests for settings loading."""

from hawkauth.common.settings import Settings


def test_defaults() -> None:
    settings = Settings()
    assert settings.timestamp_skew_seconds == 60
    assert settings.nonce_storage == "memory"
    assert "/health" in settings.auth_exempt_paths


def test_environment_overrides(monkeypatch) -> None:
    monkeypatch.setenv("HAWK_TIMESTAMP_SKEW_SECONDS", "120")
    monkeypatch.setenv("HAWK_CREDENTIALS", '{"svc": {"key": "k", "algorithm": "sha256"}}')
    settings = Settings()
    assert settings.timestamp_skew_seconds == 120
    assert settings.credentials == {"svc": {"key": "k", "algorithm": "sha256"}}
