"""Tests for settings resolution and validation."""

from pathlib import Path

import pytest
from pydantic import ValidationError

from random_employee.config import (
    DEFAULT_READINESS_FILE,
    ConfigError,
    Settings,
    load_config,
)
from random_employee.errors import StartupError


def _write_toml(path: Path, body: str) -> Path:
    path.write_text(body, encoding="utf-8")
    return path


@pytest.mark.unit
class TestDefaults:
    """Settings resolved without any file or environment."""

    def test_builtin_defaults(self):
        settings = load_config()
        assert settings.startup_delay_ms == 0
        assert settings.listen_port == 3000
        assert settings.listen_host == "0.0.0.0"
        assert settings.api_prefix == ""
        assert settings.log_format == "json"
        assert settings.graceful_shutdown_timeout_s is None

    def test_readiness_file_lives_next_to_package(self):
        settings = load_config()
        assert settings.readiness_file == DEFAULT_READINESS_FILE
        assert settings.readiness_file.name == "service-ready"
        assert (settings.readiness_file.parent / "__init__.py").exists()

    def test_delay_in_seconds(self):
        assert Settings(startup_delay_ms=1500).startup_delay_seconds == 1.5

    def test_settings_are_immutable(self):
        settings = Settings()
        with pytest.raises(ValidationError):
            settings.listen_port = 9999


@pytest.mark.unit
class TestEnvironment:
    """Environment variables override file values and defaults."""

    def test_env_values(self, monkeypatch):
        monkeypatch.setenv("RANDOM_EMPLOYEE_STARTUP_DELAY_MS", "250")
        monkeypatch.setenv("RANDOM_EMPLOYEE_HTTP_PORT", "8081")
        monkeypatch.setenv("RANDOM_EMPLOYEE_HTTP_HOST", "127.0.0.1")
        monkeypatch.setenv("RANDOM_EMPLOYEE_API_PREFIX", "api/v1/")
        monkeypatch.setenv("RANDOM_EMPLOYEE_READINESS_FILE", "/tmp/ready")
        monkeypatch.setenv("RANDOM_EMPLOYEE_LOG_LEVEL", "debug")
        monkeypatch.setenv("RANDOM_EMPLOYEE_GRACEFUL_SHUTDOWN_TIMEOUT_S", "5")

        settings = load_config()

        assert settings.startup_delay_ms == 250
        assert settings.listen_port == 8081
        assert settings.listen_host == "127.0.0.1"
        assert settings.api_prefix == "/api/v1"
        assert settings.readiness_file == Path("/tmp/ready")
        assert settings.log_level == "DEBUG"
        assert settings.graceful_shutdown_timeout_s == 5.0

    def test_env_beats_file(self, monkeypatch, tmp_path):
        config_file = _write_toml(
            tmp_path / "custom.toml", "[http]\nport = 8000\n"
        )
        monkeypatch.setenv("RANDOM_EMPLOYEE_HTTP_PORT", "9000")
        assert load_config(config_file).listen_port == 9000

    def test_whitespace_around_integer_is_accepted(self, monkeypatch):
        monkeypatch.setenv("RANDOM_EMPLOYEE_STARTUP_DELAY_MS", " 10 ")
        assert load_config().startup_delay_ms == 10


@pytest.mark.unit
class TestFile:
    """TOML file resolution."""

    def test_explicit_file(self, tmp_path):
        config_file = _write_toml(
            tmp_path / "custom.toml",
            "[system]\nstartup_delay_ms = 750\n"
            "[http]\nport = 8082\napi_prefix = \"/v2\"\n"
            "[readiness]\nfile = \"/var/run/app/service-ready\"\n"
            "[logging]\nlevel = \"WARNING\"\nformat = \"console\"\n",
        )
        settings = load_config(config_file)
        assert settings.startup_delay_ms == 750
        assert settings.listen_port == 8082
        assert settings.api_prefix == "/v2"
        assert settings.readiness_file == Path("/var/run/app/service-ready")
        assert settings.log_level == "WARNING"
        assert settings.log_format == "console"

    def test_default_file_in_working_directory(self, tmp_path):
        _write_toml(tmp_path / "random_employee.toml", "[http]\nport = 8083\n")
        assert load_config().listen_port == 8083

    def test_file_from_environment(self, monkeypatch, tmp_path):
        config_file = _write_toml(
            tmp_path / "elsewhere.toml", "[system]\nstartup_delay_ms = 5\n"
        )
        monkeypatch.setenv("RANDOM_EMPLOYEE_CONFIG_FILE", str(config_file))
        assert load_config().startup_delay_ms == 5

    def test_missing_explicit_file(self, tmp_path):
        with pytest.raises(ConfigError, match="not found"):
            load_config(tmp_path / "nope.toml")

    def test_malformed_file(self, tmp_path):
        config_file = _write_toml(tmp_path / "broken.toml", "[http\nport = ")
        with pytest.raises(ConfigError, match="Cannot read"):
            load_config(config_file)


@pytest.mark.unit
class TestValidation:
    """Invalid values fail fast instead of falling back to defaults."""

    @pytest.mark.parametrize("value", ["abc", "1.5", "", "10ms"])
    def test_non_numeric_delay(self, monkeypatch, value):
        monkeypatch.setenv("RANDOM_EMPLOYEE_STARTUP_DELAY_MS", value)
        with pytest.raises(ConfigError, match="startup_delay_ms"):
            load_config()

    def test_non_integer_delay_in_file(self, tmp_path):
        config_file = _write_toml(
            tmp_path / "custom.toml", "[system]\nstartup_delay_ms = 2.5\n"
        )
        with pytest.raises(ConfigError):
            load_config(config_file)

    def test_negative_delay(self, monkeypatch):
        monkeypatch.setenv("RANDOM_EMPLOYEE_STARTUP_DELAY_MS", "-1")
        with pytest.raises(ConfigError):
            load_config()

    @pytest.mark.parametrize("port", ["0", "65536", "-80"])
    def test_port_out_of_range(self, monkeypatch, port):
        monkeypatch.setenv("RANDOM_EMPLOYEE_HTTP_PORT", port)
        with pytest.raises(ConfigError):
            load_config()

    def test_non_numeric_port(self, monkeypatch):
        monkeypatch.setenv("RANDOM_EMPLOYEE_HTTP_PORT", "http")
        with pytest.raises(ConfigError, match="listen_port"):
            load_config()

    def test_unknown_log_format(self, monkeypatch):
        monkeypatch.setenv("RANDOM_EMPLOYEE_LOG_FORMAT", "xml")
        with pytest.raises(ConfigError):
            load_config()

    def test_unknown_log_level(self, monkeypatch):
        monkeypatch.setenv("RANDOM_EMPLOYEE_LOG_LEVEL", "chatty")
        with pytest.raises(ConfigError):
            load_config()

    def test_bad_shutdown_timeout(self, monkeypatch):
        monkeypatch.setenv("RANDOM_EMPLOYEE_GRACEFUL_SHUTDOWN_TIMEOUT_S", "soon")
        with pytest.raises(ConfigError):
            load_config()

    def test_config_error_is_startup_error(self):
        assert issubclass(ConfigError, StartupError)
