"""
Configuration loading for the random-employee service.

Configuration values are resolved using the following precedence:

1. An explicit path passed to `load_config` (or `RANDOM_EMPLOYEE_CONFIG_FILE`)
   selects the TOML file
2. Environment variables (e.g., RANDOM_EMPLOYEE_HTTP_PORT)
3. `random_employee.toml` if present in the working directory
4. Built-in defaults

The resulting `Settings` object is immutable. It is built once at process
entry and handed to each component that needs it.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Dict, Literal, Optional

import tomllib
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from random_employee.errors import ConfigError

__all__ = [
    "ConfigError",
    "Settings",
    "load_config",
    "DEFAULT_READINESS_FILE",
]


ENV_PREFIX = "RANDOM_EMPLOYEE_"
DEFAULT_CONFIG_FILE = Path("random_employee.toml")
DEFAULT_READINESS_FILE = Path(__file__).resolve().parent.parent / "service-ready"
DEFAULT_PORT = 3000


class Settings(BaseModel):
    """Typed, immutable service settings."""

    startup_delay_ms: int = Field(
        0, description="Delay before the listener is bound", ge=0
    )
    listen_port: int = Field(
        DEFAULT_PORT, description="HTTP listen port", ge=1, le=65535
    )
    listen_host: str = Field("0.0.0.0", description="HTTP listen interface", min_length=1)
    api_prefix: str = Field("", description="Mount point for the employee router")
    readiness_file: Path = Field(
        DEFAULT_READINESS_FILE, description="Readiness marker file path"
    )
    log_level: str = Field("INFO", description="Log level")
    log_format: Literal["json", "console"] = Field("json", description="Log renderer")
    graceful_shutdown_timeout_s: Optional[float] = Field(
        None,
        description="Upper bound on connection draining at shutdown",
        gt=0,
    )

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    @field_validator("readiness_file", mode="before")
    @classmethod
    def _coerce_path(cls, value: Any) -> Path:
        return Path(value) if not isinstance(value, Path) else value

    @field_validator("api_prefix")
    @classmethod
    def _normalize_prefix(cls, value: str) -> str:
        value = value.strip().rstrip("/")
        if value and not value.startswith("/"):
            value = f"/{value}"
        return value

    @field_validator("log_level")
    @classmethod
    def _check_level(cls, value: str) -> str:
        normalized = value.strip().upper()
        if normalized not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"unknown log level: {value}")
        return normalized

    @property
    def startup_delay_seconds(self) -> float:
        """Startup delay expressed in seconds."""

        return self.startup_delay_ms / 1000


def load_config(config_path: Optional[Path | str] = None) -> Settings:
    """
    Load service settings from file/environment/defaults.

    Args:
        config_path: Optional explicit path to a `random_employee.toml` file.

    Returns:
        Settings populated with the resolved values.

    Raises:
        ConfigError: if the config path does not exist, the file cannot be
            parsed, a numeric setting is not numeric, or validation fails.
    """

    raw_data = _load_toml_data(config_path)
    system = raw_data.get("system", {})
    http = raw_data.get("http", {})
    readiness = raw_data.get("readiness", {})
    logging_data = raw_data.get("logging", {})

    startup_delay_ms = _parse_int(
        "startup_delay_ms",
        _env_or_value(
            "STARTUP_DELAY_MS",
            system.get("startup_delay_ms"),
            Settings.model_fields["startup_delay_ms"].default,
        ),
    )
    listen_port = _parse_int(
        "listen_port",
        _env_or_value("HTTP_PORT", http.get("port"), DEFAULT_PORT),
    )
    graceful_timeout = _parse_optional_float(
        "graceful_shutdown_timeout_s",
        _env_or_value(
            "GRACEFUL_SHUTDOWN_TIMEOUT_S",
            raw_data.get("shutdown", {}).get("graceful_timeout_s"),
            None,
        ),
    )

    try:
        return Settings(
            startup_delay_ms=startup_delay_ms,
            listen_port=listen_port,
            listen_host=_env_or_value("HTTP_HOST", http.get("host"), "0.0.0.0"),
            api_prefix=_env_or_value("API_PREFIX", http.get("api_prefix"), ""),
            readiness_file=_env_or_value(
                "READINESS_FILE", readiness.get("file"), DEFAULT_READINESS_FILE
            ),
            log_level=_env_or_value("LOG_LEVEL", logging_data.get("level"), "INFO"),
            log_format=_env_or_value("LOG_FORMAT", logging_data.get("format"), "json"),
            graceful_shutdown_timeout_s=graceful_timeout,
        )
    except ValidationError as exc:
        raise ConfigError(f"Invalid configuration: {exc}") from exc


def _load_toml_data(config_path: Optional[Path | str]) -> Dict[str, Any]:
    """Load data from a TOML file if one can be resolved."""

    resolved = _resolve_config_path(config_path)
    if resolved is None:
        return {}

    if not resolved.exists():
        raise ConfigError(f"Configuration file not found: {resolved}")

    try:
        with resolved.open("rb") as fh:
            return tomllib.load(fh)
    except (OSError, tomllib.TOMLDecodeError) as exc:
        raise ConfigError(f"Cannot read configuration file {resolved}: {exc}") from exc


def _resolve_config_path(config_path: Optional[Path | str]) -> Optional[Path]:
    """Resolve configuration path with environment fallback."""

    if config_path:
        return Path(config_path)

    env_path = os.getenv(f"{ENV_PREFIX}CONFIG_FILE")
    if env_path:
        return Path(env_path)

    return DEFAULT_CONFIG_FILE if DEFAULT_CONFIG_FILE.exists() else None


def _parse_int(name: str, raw_value: Optional[str]) -> int:
    """Parse an integer setting; never fall back to a default on bad input."""

    if raw_value is None:
        raise ConfigError(f"Missing required setting: {name}")
    try:
        return int(raw_value.strip())
    except ValueError as exc:
        raise ConfigError(f"Invalid integer for {name}: {raw_value!r}") from exc


def _parse_optional_float(name: str, raw_value: Optional[str]) -> Optional[float]:
    if raw_value is None or not raw_value.strip():
        return None
    try:
        return float(raw_value)
    except ValueError as exc:
        raise ConfigError(f"Invalid number for {name}: {raw_value!r}") from exc


def _env_or_value(env_var: str, value: Any, default: Any) -> Optional[str]:
    """Return environment variable value if set, otherwise fallback to provided/default values."""

    env_value = os.getenv(f"{ENV_PREFIX}{env_var}")
    if env_value is not None:
        return env_value
    if value is not None:
        return str(value)
    if default is None:
        return None
    return str(default)
