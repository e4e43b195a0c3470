# =============================================================================
# tests/unit/test_config.py
# Unit Tests for settings loading
# =============================================================================

import pytest

from tracker_core.config import load_settings
from tracker_core.errors import ConfigurationError

ENV_VARS = (
    "SUPABASE_URL",
    "SUPABASE_KEY",
    "ADMIN_EMAIL",
    "TIME_TRACKER_DATA_DIR",
    "TIME_TRACKER_LOG_LEVEL",
    "TIME_TRACKER_SECRETS",
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Keep the developer's environment out of these tests"""
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)


class TestLoadSettings:
    """Test secrets.toml and environment handling"""

    def test_reads_secrets_file(self, tmp_path):
        secrets = tmp_path / "secrets.toml"
        secrets.write_text(
            '[supabase]\n'
            'url = "https://demo.supabase.co"\n'
            'key = "anon-key"\n'
            '\n'
            '[app]\n'
            'admin_email = "boss@example.com"\n'
            f'data_dir = "{(tmp_path / "data").as_posix()}"\n'
            'monitor_connection = true\n'
            'log_to_file = true\n'
        )

        settings = load_settings(secrets)

        assert settings.supabase_configured
        assert settings.supabase_url == "https://demo.supabase.co"
        assert settings.admin_email == "boss@example.com"
        assert settings.monitor_connection is True
        assert settings.cache_db_path == tmp_path / "data" / "time-tracker.db"
        assert settings.log_dir == tmp_path / "data" / "logs"

    def test_falls_back_to_environment(self, tmp_path, monkeypatch):
        monkeypatch.setenv("SUPABASE_URL", "https://env.supabase.co")
        monkeypatch.setenv("SUPABASE_KEY", "env-key")
        monkeypatch.setenv("ADMIN_EMAIL", "env-admin@example.com")
        monkeypatch.setenv("TIME_TRACKER_LOG_LEVEL", "DEBUG")

        settings = load_settings(tmp_path / "missing.toml")

        assert settings.supabase_url == "https://env.supabase.co"
        assert settings.supabase_key == "env-key"
        assert settings.admin_email == "env-admin@example.com"
        assert settings.log_level == "DEBUG"

    def test_no_credentials_means_local_only(self, tmp_path):
        settings = load_settings(tmp_path / "missing.toml")

        assert not settings.supabase_configured
        assert settings.log_level == "INFO"

    def test_url_without_key_is_rejected(self, tmp_path, monkeypatch):
        monkeypatch.setenv("SUPABASE_URL", "https://env.supabase.co")

        with pytest.raises(ConfigurationError) as exc_info:
            load_settings(tmp_path / "missing.toml")

        assert exc_info.value.details["config_key"] == "supabase.key"
        assert exc_info.value.recoverable is False

    def test_invalid_toml_is_rejected(self, tmp_path):
        secrets = tmp_path / "secrets.toml"
        secrets.write_text("[supabase\nurl = ")

        with pytest.raises(ConfigurationError) as exc_info:
            load_settings(secrets)

        assert exc_info.value.code == "CONFIG_001"

    def test_secrets_path_from_environment(self, tmp_path, monkeypatch):
        secrets = tmp_path / "elsewhere.toml"
        secrets.write_text('[app]\nadmin_email = "x@example.com"\n')
        monkeypatch.setenv("TIME_TRACKER_SECRETS", str(secrets))

        assert load_settings().admin_email == "x@example.com"
