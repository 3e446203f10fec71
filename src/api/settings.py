"""Load service settings: optional YAML file, overridden by environment variables."""

import logging
import os
from dataclasses import dataclass, fields, replace
from pathlib import Path

import yaml

logger = logging.getLogger(__name__)


def _repo_root() -> Path:
    """Return repo root (parent of src)."""
    return Path(__file__).resolve().parent.parent.parent


@dataclass(frozen=True)
class Settings:
    api_base_url: str = "http://localhost:3000"
    storage_dir: str | None = None
    default_region: str = "GH"
    rate_limit_ms: int = 2000
    retry_delay_ms: int = 2000
    max_attempts: int = 3
    http_timeout: float = 10.0
    max_sessions: int = 1000


_ENV_VARS = {
    "api_base_url": "DISCLOSURE_API_BASE_URL",
    "storage_dir": "DISCLOSURE_STORAGE_DIR",
    "default_region": "DISCLOSURE_DEFAULT_REGION",
    "rate_limit_ms": "DISCLOSURE_RATE_LIMIT_MS",
    "retry_delay_ms": "DISCLOSURE_RETRY_DELAY_MS",
    "max_attempts": "DISCLOSURE_MAX_ATTEMPTS",
    "http_timeout": "DISCLOSURE_HTTP_TIMEOUT",
    "max_sessions": "DISCLOSURE_MAX_SESSIONS",
}

_FIELD_TYPES = {
    "rate_limit_ms": int,
    "retry_delay_ms": int,
    "max_attempts": int,
    "http_timeout": float,
    "max_sessions": int,
}


def get_settings_path() -> Path | None:
    """Return DISCLOSURE_SETTINGS_PATH, or config/disclosure.yaml when it exists."""
    path = os.environ.get("DISCLOSURE_SETTINGS_PATH", "").strip()
    if path:
        return Path(path).resolve()
    default = _repo_root() / "config" / "disclosure.yaml"
    return default if default.exists() else None


def _coerce(name: str, value):
    cast = _FIELD_TYPES.get(name)
    if cast is None:
        text = str(value).strip()
        if name == "storage_dir":
            return text or None
        return text
    try:
        return cast(value)
    except (TypeError, ValueError) as exc:
        raise ValueError(f"Setting '{name}' must be {cast.__name__}, got {value!r}") from exc


def load_settings_file(path: Path) -> dict:
    """Load settings YAML and return known keys. Validates minimal structure."""
    raw = path.read_text(encoding="utf-8")
    data = yaml.safe_load(raw) or {}
    if not isinstance(data, dict):
        raise ValueError("Settings YAML must be a mapping")
    known = {f.name for f in fields(Settings)}
    unknown = sorted(set(data) - known)
    if unknown:
        raise ValueError(f"Unknown settings: {', '.join(unknown)}")
    return {k: _coerce(k, v) for k, v in data.items() if v is not None}


def load_settings(path: Path | None = None) -> Settings:
    settings = Settings()
    if path is None:
        path = get_settings_path()
    if path is not None:
        logger.info("Loading settings from %s", path)
        settings = replace(settings, **load_settings_file(path))
    overrides = {}
    for name, env_var in _ENV_VARS.items():
        value = os.environ.get(env_var)
        if value is not None and value.strip() != "":
            overrides[name] = _coerce(name, value)
    settings = replace(settings, **overrides)
    if settings.max_attempts < 1:
        raise ValueError("max_attempts must be at least 1")
    if settings.max_sessions < 1:
        raise ValueError("max_sessions must be at least 1")
    return settings
