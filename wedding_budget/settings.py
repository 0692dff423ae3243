"""Runtime configuration for the wedding budget service.

Settings are resolved in three layers: built-in defaults, an optional YAML
file, then ``WEDDING_BUDGET_*`` environment variables.
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass, field, fields, replace
from pathlib import Path
from typing import Any, Final

import yaml

CONFIG_ENV_FLAG: Final[str] = "WEDDING_BUDGET_CONFIG"
ENV_PREFIX: Final[str] = "WEDDING_BUDGET_"
DEFAULT_DB_PATH: Final[Path] = Path("wedding_budget.db")


class ConfigError(ValueError):
    """Raised when a configuration file or variable cannot be interpreted."""


@dataclass(frozen=True, slots=True)
class Settings:
    """Resolved configuration values.

    Attributes:
      database_url: SQLAlchemy URL of the expense database.
      host: Interface the HTTP server binds to.
      port: TCP port of the HTTP server.
      cors_origins: Origins allowed to call the API from a browser.
    """

    database_url: str = f"sqlite:///{DEFAULT_DB_PATH}"
    host: str = "127.0.0.1"
    port: int = 8000
    cors_origins: tuple[str, ...] = field(default_factory=lambda: ("*",))


def read_yaml(path: Path | str) -> object:
    """Load a YAML document and return the corresponding Python object."""

    with Path(path).open("r", encoding="utf-8") as handle:
        return yaml.safe_load(handle)


def _as_port(value: Any, *, source: str) -> int:
    if isinstance(value, bool):
        raise ConfigError(f"{source}: port must be an integer")
    try:
        port = int(value)
    except (TypeError, ValueError) as exc:
        raise ConfigError(f"{source}: port must be an integer, got {value!r}") from exc
    if not 0 < port < 65536:
        raise ConfigError(f"{source}: port {port} outside 1-65535")
    return port


def _as_origins(value: Any, *, source: str) -> tuple[str, ...]:
    if isinstance(value, str):
        items = [item.strip() for item in value.split(",")]
    elif isinstance(value, list | tuple):
        items = [str(item).strip() for item in value]
    else:
        raise ConfigError(f"{source}: cors_origins must be a list or comma separated string")
    return tuple(item for item in items if item)


def _coerce(name: str, value: Any, *, source: str) -> Any:
    if name == "port":
        return _as_port(value, source=source)
    if name == "cors_origins":
        return _as_origins(value, source=source)
    if not isinstance(value, str) or not value.strip():
        raise ConfigError(f"{source}: {name} must be a non-empty string")
    return value.strip()


def _from_mapping(base: Settings, payload: Mapping[str, Any], *, source: str) -> Settings:
    known = {item.name for item in fields(Settings)}
    unknown = sorted(set(payload) - known)
    if unknown:
        raise ConfigError(f"{source}: unknown settings {', '.join(unknown)}")
    updates = {name: _coerce(name, value, source=source) for name, value in payload.items()}
    return replace(base, **updates)


def _from_environ(base: Settings, environ: Mapping[str, str]) -> Settings:
    payload: dict[str, str] = {}
    for item in fields(Settings):
        key = f"{ENV_PREFIX}{item.name.upper()}"
        if key in environ:
            payload[item.name] = environ[key]
    return _from_mapping(base, payload, source="environment")


def load_settings(
    path: Path | str | None = None,
    environ: Mapping[str, str] | None = None,
) -> Settings:
    """Return the effective settings for the current process.

    Args:
      path: Optional YAML file. Falls back to ``WEDDING_BUDGET_CONFIG``.
      environ: Environment mapping, ``os.environ`` when omitted.

    Raises:
      ConfigError: If the file is not a mapping, holds unknown keys or any
        value cannot be coerced.
    """

    env = os.environ if environ is None else environ
    settings = Settings()
    config_path = path if path is not None else env.get(CONFIG_ENV_FLAG)
    if config_path:
        payload = read_yaml(config_path)
        if payload is None:
            payload = {}
        if not isinstance(payload, Mapping):
            raise ConfigError(f"{config_path}: expected a mapping at the top level")
        settings = _from_mapping(settings, payload, source=str(config_path))
    return _from_environ(settings, env)


__all__ = ["ConfigError", "Settings", "load_settings", "read_yaml"]
