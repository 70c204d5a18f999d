"""Runtime settings for the user registry service."""
from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Mapping, Optional

DEFAULT_HOST = "0.0.0.0"
DEFAULT_PORT = 8080
DEFAULT_LOG_LEVEL = "info"

_LOG_LEVELS = {"critical", "error", "warning", "info", "debug", "trace"}


@dataclass(frozen=True)
class ServiceSettings:
    """Settings used to build and serve the registry application."""

    host: str = DEFAULT_HOST
    port: int = DEFAULT_PORT
    log_level: str = DEFAULT_LOG_LEVEL
    uniform_not_found: bool = False


def _env_flag(value: Optional[str], default: bool = False) -> bool:
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


def _parse_port(value: Optional[str]) -> int:
    if value is None or not value.strip():
        return DEFAULT_PORT
    try:
        port = int(value.strip())
    except ValueError as exc:
        raise ValueError(f"Invalid port value: {value!r}") from exc
    if not 1 <= port <= 65535:
        raise ValueError(f"Port must be between 1 and 65535, got {port}")
    return port


def _parse_log_level(value: Optional[str]) -> str:
    if value is None or not value.strip():
        return DEFAULT_LOG_LEVEL
    level = value.strip().lower()
    if level not in _LOG_LEVELS:
        raise ValueError(f"Unknown log level: {value!r}")
    return level


def load_settings(environ: Optional[Mapping[str, str]] = None) -> ServiceSettings:
    """Read service settings from ``REGISTRY_*`` environment variables."""
    env = os.environ if environ is None else environ
    host = (env.get("REGISTRY_HOST") or "").strip() or DEFAULT_HOST
    return ServiceSettings(
        host=host,
        port=_parse_port(env.get("REGISTRY_PORT")),
        log_level=_parse_log_level(env.get("REGISTRY_LOG_LEVEL")),
        uniform_not_found=_env_flag(env.get("REGISTRY_UNIFORM_NOT_FOUND")),
    )


__all__ = [
    "DEFAULT_HOST",
    "DEFAULT_PORT",
    "DEFAULT_LOG_LEVEL",
    "ServiceSettings",
    "load_settings",
]
