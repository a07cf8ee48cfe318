"""
Infrastructure layer - configuration.

Defaults come from ``config/console.yaml``; ``config/.env.local`` (or the real
environment) can override the deployment-specific values:

- HOUSING_API_BASE_URL
- HOUSING_STORAGE_DIR
- HOUSING_LOG_LEVEL
- HOUSING_REQUEST_TIMEOUT
"""
from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional, Union

import yaml
from dotenv import load_dotenv

from ..adapters.http.api import DEFAULT_AUTH_PATH, DEFAULT_ENDPOINTS
from ..domain.models import EntityKind
from .exceptions import ConfigError

# housing_console/infra/config.py -> housing_console/infra -> housing_console -> root
PROJECT_ROOT = Path(__file__).resolve().parent.parent.parent
CONFIG_DIR = PROJECT_ROOT / "config"
DEFAULT_CONFIG_FILE = CONFIG_DIR / "console.yaml"
DEFAULT_ENV_FILE = CONFIG_DIR / ".env.local"
DATA_DIR = PROJECT_ROOT / "data"


@dataclass
class OfficeSettings:
    """Housing office preferences edited on the Settings page."""
    housing_fee: float = 5000.0
    applications_open: bool = True
    email_notifications: bool = True
    sms_notifications: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {
            "housing_fee": float(self.housing_fee),
            "applications_open": bool(self.applications_open),
            "email_notifications": bool(self.email_notifications),
            "sms_notifications": bool(self.sms_notifications),
        }

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "OfficeSettings":
        base = cls()
        try:
            return cls(
                housing_fee=float(d.get("housing_fee", base.housing_fee)),
                applications_open=bool(d.get("applications_open", base.applications_open)),
                email_notifications=bool(d.get("email_notifications", base.email_notifications)),
                sms_notifications=bool(d.get("sms_notifications", base.sms_notifications)),
            )
        except (TypeError, ValueError) as e:
            raise ConfigError(f"Invalid office settings: {e}", config_key="office") from e


@dataclass
class ConsoleConfig:
    api_base_url: str = "http://localhost:5000"
    auth_path: str = DEFAULT_AUTH_PATH
    endpoints: Dict[EntityKind, str] = field(default_factory=lambda: dict(DEFAULT_ENDPOINTS))
    request_timeout: Optional[float] = None  # None: no timeout, slow calls stay "loading"
    stale_seconds: float = 300.0
    storage_dir: Path = DATA_DIR / "session"
    log_level: str = "INFO"
    log_file: Optional[Path] = None
    office: OfficeSettings = field(default_factory=OfficeSettings)
    source_path: Optional[Path] = None

    def endpoint(self, kind: Union[EntityKind, str]) -> str:
        return self.endpoints[EntityKind.parse(kind)]


def _resolve_path(value: Union[str, Path]) -> Path:
    p = Path(value).expanduser()
    return p if p.is_absolute() else PROJECT_ROOT / p


def _parse_timeout(value: Any) -> Optional[float]:
    if value in (None, "", "none", "null"):
        return None
    try:
        timeout = float(value)
    except (TypeError, ValueError) as e:
        raise ConfigError(f"request_timeout must be a number, got {value!r}", config_key="request_timeout") from e
    return timeout if timeout > 0 else None


def _parse_endpoints(raw: Any) -> Dict[EntityKind, str]:
    endpoints = dict(DEFAULT_ENDPOINTS)
    if raw is None:
        return endpoints
    if not isinstance(raw, dict):
        raise ConfigError("endpoints must be a mapping", config_key="endpoints")
    for key, path in raw.items():
        try:
            kind = EntityKind.parse(key)
        except ValueError as e:
            raise ConfigError(f"Unknown entity kind in endpoints: {key!r}", config_key="endpoints") from e
        if not isinstance(path, str) or not path.strip():
            raise ConfigError(f"Endpoint for {key!r} must be a non-empty string", config_key="endpoints")
        endpoints[kind] = path.strip()
    return endpoints


def read_config_file(path: Path) -> Dict[str, Any]:
    if not path.exists():
        return {}
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
    except yaml.YAMLError as e:
        raise ConfigError(f"Malformed YAML in {path}: {e}", config_key=str(path)) from e
    if not isinstance(data, dict):
        raise ConfigError(f"{path} must contain a mapping at top level", config_key=str(path))
    return data


def load_config(
    path: Optional[Union[str, Path]] = None,
    env_file: Optional[Union[str, Path]] = None,
) -> ConsoleConfig:
    """
    Load the console configuration.

    Raises:
        ConfigError: malformed file or invalid values
    """
    config_path = Path(path) if path else DEFAULT_CONFIG_FILE
    load_dotenv(Path(env_file) if env_file else DEFAULT_ENV_FILE)
    data = read_config_file(config_path)
    api = data.get("api") or {}
    if not isinstance(api, dict):
        raise ConfigError("api must be a mapping", config_key="api")

    cfg = ConsoleConfig(source_path=config_path)
    cfg.api_base_url = str(os.getenv("HOUSING_API_BASE_URL") or api.get("base_url") or cfg.api_base_url)
    cfg.auth_path = str(api.get("auth_path") or cfg.auth_path)
    cfg.endpoints = _parse_endpoints(api.get("endpoints"))
    cfg.request_timeout = _parse_timeout(os.getenv("HOUSING_REQUEST_TIMEOUT", api.get("request_timeout")))

    try:
        cfg.stale_seconds = float(data.get("cache", {}).get("stale_seconds", cfg.stale_seconds))
    except (AttributeError, TypeError, ValueError) as e:
        raise ConfigError(f"cache.stale_seconds is invalid: {e}", config_key="cache.stale_seconds") from e

    storage_dir = os.getenv("HOUSING_STORAGE_DIR") or (data.get("session") or {}).get("storage_dir")
    if storage_dir:
        cfg.storage_dir = _resolve_path(storage_dir)

    logging_cfg = data.get("logging") or {}
    cfg.log_level = str(os.getenv("HOUSING_LOG_LEVEL") or logging_cfg.get("level") or cfg.log_level).upper()
    if logging_cfg.get("file"):
        cfg.log_file = _resolve_path(logging_cfg["file"])

    cfg.office = OfficeSettings.from_dict(data.get("office") or {})
    return cfg


def save_office_settings(office: OfficeSettings, path: Optional[Union[str, Path]] = None) -> Path:
    """Write the ``office`` section back, leaving the rest of the file untouched."""
    config_path = Path(path) if path else DEFAULT_CONFIG_FILE
    data = read_config_file(config_path)
    data["office"] = office.to_dict()
    config_path.parent.mkdir(parents=True, exist_ok=True)
    with open(config_path, "w", encoding="utf-8") as f:
        yaml.safe_dump(data, f, allow_unicode=True, sort_keys=False)
    return config_path
