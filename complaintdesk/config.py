"""Configuration management for the complaint desk service."""
from __future__ import annotations

import os
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Dict, Mapping, Optional

import yaml

from .store import DEFAULT_ADMIN_SECRET

DEFAULT_HOST = "0.0.0.0"
DEFAULT_PORT = 8080
DEFAULT_LOG_LEVEL = "info"

_ALLOWED_KEYS = {"admin_secret", "host", "port", "log_level"}
_LOG_LEVELS = {"critical", "error", "warning", "info", "debug", "trace"}


@dataclass(frozen=True)
class ServiceConfig:
    """Runtime settings for a single service process."""

    admin_secret: str = DEFAULT_ADMIN_SECRET
    host: str = DEFAULT_HOST
    port: int = DEFAULT_PORT
    log_level: str = DEFAULT_LOG_LEVEL

    @staticmethod
    def from_dict(data: Mapping[str, object]) -> "ServiceConfig":
        """Create a :class:`ServiceConfig` from raw dictionary data."""
        unknown = set(data.keys()) - _ALLOWED_KEYS
        if unknown:
            raise ValueError(f"Unknown configuration fields: {', '.join(sorted(unknown))}")

        admin_secret = str(data.get("admin_secret", DEFAULT_ADMIN_SECRET)).strip()
        if not admin_secret:
            raise ValueError("admin_secret must not be empty")

        port = int(data.get("port", DEFAULT_PORT))  # type: ignore[arg-type]
        if port < 1 or port > 65535:
            raise ValueError("port must be between 1 and 65535")

        log_level = str(data.get("log_level", DEFAULT_LOG_LEVEL)).strip().lower()
        if log_level not in _LOG_LEVELS:
            raise ValueError(f"Unsupported log_level '{log_level}'")

        return ServiceConfig(
            admin_secret=admin_secret,
            host=str(data.get("host", DEFAULT_HOST)).strip() or DEFAULT_HOST,
            port=port,
            log_level=log_level,
        )


def load_service_config(config_path: Path) -> ServiceConfig:
    """Load service settings from a YAML file."""
    with config_path.open("r", encoding="utf-8") as handle:
        raw = yaml.safe_load(handle) or {}

    if not isinstance(raw, dict):
        raise ValueError("Configuration file must contain a mapping at the top level")
    return ServiceConfig.from_dict(raw)


def resolve_config_path(env_value: Optional[str]) -> Path:
    """Resolve the path to the configuration file."""
    if env_value:
        candidate = Path(env_value).expanduser().resolve(strict=False)
    else:
        candidate = (Path(__file__).resolve().parent.parent / "config" / "complaintdesk.yaml").resolve(strict=False)
    return candidate


def load_config_from_env(environ: Optional[Mapping[str, str]] = None) -> ServiceConfig:
    """Build the effective configuration from the config file and environment."""
    env = os.environ if environ is None else environ

    path = resolve_config_path(env.get("COMPLAINTDESK_CONFIG"))
    config = load_service_config(path) if path.is_file() else ServiceConfig()

    overrides: Dict[str, object] = {}
    admin_secret = env.get("COMPLAINTDESK_ADMIN_SECRET", "").strip()
    if admin_secret:
        overrides["admin_secret"] = admin_secret
    host = env.get("COMPLAINTDESK_HOST", "").strip()
    if host:
        overrides["host"] = host
    port = env.get("COMPLAINTDESK_PORT", "").strip()
    if port:
        try:
            overrides["port"] = int(port)
        except ValueError as exc:
            raise ValueError("COMPLAINTDESK_PORT must be an integer") from exc

    return replace(config, **overrides) if overrides else config


__all__ = [
    "DEFAULT_HOST",
    "DEFAULT_LOG_LEVEL",
    "DEFAULT_PORT",
    "ServiceConfig",
    "load_config_from_env",
    "load_service_config",
    "resolve_config_path",
]
