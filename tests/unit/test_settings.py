"""Tests for application settings."""

import pytest
from pydantic import ValidationError

from talentwatch.config.settings import Settings, StorageBackend, get_settings


class TestSettings:
    """Tests for Settings defaults and environment loading."""

    def test_defaults(self, monkeypatch):
        monkeypatch.delenv("STORAGE_BACKEND", raising=False)
        settings = Settings(_env_file=None)

        assert settings.storage_backend == StorageBackend.MEMORY
        assert settings.analytics_fail_open is False
        assert settings.benchmark_jitter_enabled is False
        assert settings.retention.audit_log_max_entries == 1000
        assert settings.retention.alert_max_entries == 1000
        assert settings.retention.report_max_entries == 100
        assert settings.batching.batch_size == 10

    def test_environment_overrides(self, monkeypatch):
        monkeypatch.setenv("STORAGE_BACKEND", "redis")
        monkeypatch.setenv("ANALYTICS_FAIL_OPEN", "true")
        monkeypatch.setenv("ANONYMIZER_HASH_SALT", "pepper")

        settings = get_settings()

        assert settings.storage_backend == StorageBackend.REDIS
        assert settings.analytics_fail_open is True
        assert settings.anonymizer_hash_salt.get_secret_value() == "pepper"

    def test_get_settings_is_cached(self):
        assert get_settings() is get_settings()

    def test_secrets_are_masked(self):
        settings = Settings(registry_api_key="top-secret")

        assert "top-secret" not in repr(settings)

    def test_invalid_batch_size_rejected(self):
        with pytest.raises(ValidationError):
            Settings(batching={"batch_size": 0})

    def test_benchmark_jitter_bounded(self):
        assert Settings(benchmark_jitter=3.0).benchmark_jitter == 3.0
        with pytest.raises(ValidationError):
            Settings(benchmark_jitter=5)
