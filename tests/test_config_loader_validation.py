"""
Config Loader Validation Tests

Tests for config loading, validation, defaults, and error handling.
Uses temp config files to test various scenarios.
"""

import pytest

from config.config_loader import ClientSettings, ConfigLoader
from tests.factories.config_factories import make_config, temp_config_file
from utils.errors import ConfigError


class TestConfigLoaderBasics:
    """Test basic config loading functionality."""

    def test_load_valid_config(self):
        with temp_config_file(make_config(base_url="http://api.example")) as path:
            config = ConfigLoader.load_config(path)

        assert config["api"]["base_url"] == "http://api.example"
        status = ConfigLoader.get_config_status()
        assert status["config_status"] == "ok"
        assert status["config_path"] == path
        assert status["config_loaded"] is True

    def test_config_is_loaded_once(self):
        with temp_config_file(make_config(logging_level="DEBUG")) as path:
            ConfigLoader.load_config(path)
        with temp_config_file(make_config(logging_level="ERROR")) as other:
            config = ConfigLoader.load_config(other)

        assert config["logging"]["level"] == "DEBUG"

    def test_config_path_env_var(self, monkeypatch):
        with temp_config_file(make_config(concurrency=2)) as path:
            monkeypatch.setenv("CONFIG_PATH", path)
            config = ConfigLoader.load_config()

        assert config["api"]["concurrency"] == 2

    def test_get_top_level_key(self):
        with temp_config_file(make_config()) as path:
            ConfigLoader.load_config(path)

        assert ConfigLoader.get("api")["timeout_seconds"] == 5
        assert ConfigLoader.get("missing", "fallback") == "fallback"


class TestConfigLoaderDegraded:
    """Missing and broken files fall back to an empty config."""

    def test_missing_file(self, tmp_path):
        config = ConfigLoader.load_config(str(tmp_path / "nope.yaml"))

        assert config == {}
        assert ConfigLoader.get_config_status()["config_status"] == "degraded"

    def test_invalid_yaml(self):
        with temp_config_file(content="api: [unclosed") as path:
            config = ConfigLoader.load_config(path)

        assert config == {}
        assert ConfigLoader.get_config_status()["config_status"] == "error"

    def test_non_mapping_yaml(self):
        with temp_config_file(content="- just\n- a list\n") as path:
            config = ConfigLoader.load_config(path)

        assert config == {}
        assert ConfigLoader.get_config_status()["config_status"] == "degraded"

    def test_invalid_logging_level_defaults_to_info(self):
        with temp_config_file(make_config(logging_level="LOUD")) as path:
            config = ConfigLoader.load_config(path)

        assert config["logging"]["level"] == "INFO"


class TestClientSettings:
    """Typed settings built from the loaded mapping."""

    def test_defaults_from_empty_config(self, monkeypatch):
        monkeypatch.delenv("SENADB_API_URL", raising=False)

        settings = ClientSettings.from_config({})

        assert settings == ClientSettings()
        assert settings.base_url == "http://localhost:3000"
        assert settings.renewal_path == "/auth/refresh"

    def test_reads_api_and_session_sections(self, monkeypatch):
        monkeypatch.delenv("SENADB_API_URL", raising=False)
        config = make_config(
            base_url="http://api.test/",
            timeout_seconds=2.5,
            concurrency=3,
            session={"entry_path": "/home", "renewal_path": "/auth/renew"},
        )

        settings = ClientSettings.from_config(config)

        assert settings.base_url == "http://api.test"
        assert settings.timeout_seconds == 2.5
        assert settings.concurrency == 3
        assert settings.entry_path == "/home"
        assert settings.registration_path == "/register"
        assert settings.renewal_path == "/auth/renew"

    def test_env_overrides_base_url(self, monkeypatch):
        monkeypatch.setenv("SENADB_API_URL", "https://sena.example/")

        settings = ClientSettings.from_config(make_config())

        assert settings.base_url == "https://sena.example"

    @pytest.mark.parametrize(
        ("key", "value"),
        [
            ("timeout_seconds", 0),
            ("timeout_seconds", -1),
            ("timeout_seconds", "soon"),
            ("concurrency", 0),
            ("concurrency", None),
        ],
    )
    def test_rejects_bad_numbers(self, key, value):
        config = make_config()
        config["api"][key] = value

        with pytest.raises(ConfigError, match=f"api.{key}"):
            ClientSettings.from_config(config)

    def test_from_loaded_file(self, monkeypatch):
        monkeypatch.delenv("SENADB_API_URL", raising=False)
        with temp_config_file(make_config(base_url="http://file.test")) as path:
            settings = ClientSettings.from_config(ConfigLoader.load_config(path))

        assert settings.base_url == "http://file.test"
