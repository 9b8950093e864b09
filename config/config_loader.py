"""
Configuration loading.

``ConfigLoader`` reads one YAML file per process and keeps it at class level;
``ClientSettings`` turns the ``api`` and ``session`` sections into typed
values. A missing or unreadable file never stops the client: it runs on
defaults and reports the problem through ``get_config_status()``.
"""

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, ClassVar

import yaml

from utils.errors import ConfigError

VALID_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


def _get_project_root() -> Path:
    """config/config_loader.py -> project root."""
    return Path(__file__).resolve().parent.parent


class ConfigLoader:
    """
    Process-wide configuration holder.

    Status values reported by ``get_config_status``:
        not_loaded  nothing read yet
        ok          file parsed into a mapping
        degraded    file missing or not a mapping; defaults in use
        error       file unreadable or invalid YAML; defaults in use
    """

    _config: ClassVar[dict[str, Any]] = {}
    _config_status: ClassVar[str] = "not_loaded"
    _config_path: ClassVar[str | None] = None

    @classmethod
    def load_config(cls, config_path: str | None = None) -> dict[str, Any]:
        """
        Load the configuration once and return it.

        Path resolution: ``config_path`` argument, then ``CONFIG_PATH`` in the
        environment, then ``config/config.yaml`` under the project root.
        Later calls return the cached mapping regardless of their argument;
        use ``reset()`` to reload.
        """
        if cls._config_status != "not_loaded":
            return cls._config

        path = cls._resolve_path(config_path)
        cls._config_path = path
        cls._config, cls._config_status = cls._read(path)
        if cls._config_status == "ok":
            cls._validate_logging_level()
        return cls._config

    @staticmethod
    def _resolve_path(explicit: str | None) -> str:
        if explicit:
            return explicit
        from_env = os.environ.get("CONFIG_PATH")
        if from_env:
            logging.info("Using config from CONFIG_PATH: %s", from_env)
            return from_env
        return str(_get_project_root() / "config" / "config.yaml")

    @staticmethod
    def _read(path: str) -> tuple[dict[str, Any], str]:
        try:
            with Path(path).open(encoding="utf-8") as fh:
                loaded = yaml.safe_load(fh)
        except FileNotFoundError:
            logging.warning("No config file at %s; running on defaults", path)
            return {}, "degraded"
        except (yaml.YAMLError, UnicodeDecodeError) as e:
            logging.exception("Unreadable config file %s: %s; running on defaults", path, e)
            return {}, "error"

        if loaded is None:
            loaded = {}
        if not isinstance(loaded, dict):
            logging.warning("Config file %s is not a mapping; running on defaults", path)
            return {}, "degraded"

        logging.info("Configuration loaded from %s", path)
        return loaded, "ok"

    @classmethod
    def _validate_logging_level(cls) -> None:
        section = cls._config.get("logging")
        if not isinstance(section, dict):
            return
        level = str(section.get("level", "INFO")).upper()
        if level not in VALID_LOG_LEVELS:
            logging.warning("Invalid logging level %r in config; using INFO", level)
            section["level"] = "INFO"

    @classmethod
    def get_config_status(cls) -> dict[str, Any]:
        """Config health for the client health report."""
        return {
            "config_status": cls._config_status,
            "config_path": cls._config_path,
            "config_loaded": bool(cls._config),
        }

    @classmethod
    def get(cls, key: str, default: Any = None) -> Any:
        """Top-level config value, or ``default``."""
        return cls._config.get(key, default)

    @classmethod
    def reset(cls) -> None:
        """Forget the loaded config (tests)."""
        cls._config = {}
        cls._config_status = "not_loaded"
        cls._config_path = None

# ---------------------------------------------------------------------------
# Typed client settings
# ---------------------------------------------------------------------------

DEFAULT_BASE_URL = "http://localhost:3000"


def _section(config: dict[str, Any], name: str) -> dict[str, Any]:
    value = config.get(name)
    return value if isinstance(value, dict) else {}


def _positive_number(raw: Any, key: str, cast: type) -> Any:
    try:
        value = cast(raw)
    except (TypeError, ValueError) as e:
        raise ConfigError(f"{key} must be a number, got {raw!r}") from e
    if value <= 0:
        raise ConfigError(f"{key} must be positive, got {value!r}")
    return value


@dataclass(frozen=True)
class ClientSettings:
    """Resolved connection and session settings."""

    base_url: str = DEFAULT_BASE_URL
    timeout_seconds: float = 15.0
    concurrency: int = 8
    allow_ip_cookies: bool = True
    renewal_path: str = "/auth/refresh"
    entry_path: str = "/"
    registration_path: str = "/register"

    @classmethod
    def from_config(cls, config: dict[str, Any] | None) -> "ClientSettings":
        """
        Build settings from the loaded YAML mapping.

        Reads the ``api`` and ``session`` sections. ``SENADB_API_URL`` in the
        environment overrides ``api.base_url``.

        Raises:
            ConfigError: if a numeric setting is not a positive number.
        """
        if not config or not isinstance(config, dict):
            config = {}

        api_cfg = _section(config, "api")
        session_cfg = _section(config, "session")

        base_url = os.environ.get("SENADB_API_URL") or api_cfg.get(
            "base_url", DEFAULT_BASE_URL
        )

        return cls(
            base_url=str(base_url).rstrip("/"),
            timeout_seconds=_positive_number(
                api_cfg.get("timeout_seconds", 15), "api.timeout_seconds", float
            ),
            concurrency=_positive_number(
                api_cfg.get("concurrency", 8), "api.concurrency", int
            ),
            allow_ip_cookies=bool(api_cfg.get("allow_ip_cookies", True)),
            renewal_path=str(session_cfg.get("renewal_path", "/auth/refresh")),
            entry_path=str(session_cfg.get("entry_path", "/")),
            registration_path=str(session_cfg.get("registration_path", "/register")),
        )
