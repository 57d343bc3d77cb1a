"""Configuration loading."""

from __future__ import annotations

import copy
import json
import os
from pathlib import Path
from typing import Any, Dict, Optional

try:  # Python 3.11+
    import tomllib  # type: ignore[attr-defined]
except ModuleNotFoundError:  # Python 3.9-3.10
    import tomli as tomllib  # type: ignore[no-redef]

from acure_cli.core.constants import API_BASE, COMPRESS_THRESHOLD_CHARS, DEFAULT_STORAGE_CAPACITY

DEFAULT_ALLOWED_ORIGINS = [
    "http://localhost:9000",
    "https://elaborate-duckanoo-4121a7.netlify.app",
    "https://mabduls.github.io/acure-scan",
    "https://mabduls.github.io",
    "http://127.0.0.1:8080",
]


class ConfigError(RuntimeError):
    """Raised when config file parsing fails."""


def _deep_merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    merged = copy.deepcopy(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _deep_merge(merged[key], value)
        else:
            merged[key] = value
    return merged


def expand_path(path_str: str) -> Path:
    """Expand user/env vars and return absolute path."""
    return Path(os.path.expandvars(path_str)).expanduser().resolve()


def default_data_dir() -> Path:
    """Resolve XDG-style data directory with env override."""
    raw = os.getenv("ACURE_DATA_DIR", "~/.local/share/acure")
    return expand_path(raw)


def default_config_path() -> Path:
    """Get default config file path."""
    raw = os.getenv("ACURE_CONFIG_FILE", "~/.config/acure/config.toml")
    return expand_path(raw)


def _default_config() -> Dict[str, Any]:
    data_dir = default_data_dir()
    return {
        "api": {
            "base_url": API_BASE,
            "timeout_seconds": 15,
        },
        "storage": {
            "file": str(data_dir / "storage.json"),
            "capacity_chars": DEFAULT_STORAGE_CAPACITY,
        },
        "scan": {
            "classifier": "",
            "timeout_seconds": 30,
            "compress_threshold": COMPRESS_THRESHOLD_CHARS,
            "compress_quality": 0.6,
            "compress_max_width": 600,
        },
        "history": {
            "per_page": 9,
        },
        "proxy": {
            "firebase_api_key": "",
            "project_id": "acurescan",
            "allowed_origins": list(DEFAULT_ALLOWED_ORIGINS),
            "strict_cors": False,
            "host": "127.0.0.1",
            "port": 8787,
            "timeout_seconds": 15,
        },
        "logging": {
            "level": "WARNING",
        },
    }


def _read_config(path: Path) -> Dict[str, Any]:
    suffix = path.suffix.lower()
    text = path.read_text()
    try:
        if suffix in {".toml", ""}:
            loaded = tomllib.loads(text)
        else:
            loaded = json.loads(text)
    except json.JSONDecodeError as exc:
        raise ConfigError(f"Invalid JSON in config file {path}: {exc}") from exc
    except Exception as exc:
        if suffix in {".toml", ""}:
            raise ConfigError(f"Invalid TOML in config file {path}: {exc}") from exc
        raise ConfigError(f"Failed to parse config file {path}: {exc}") from exc

    if not isinstance(loaded, dict):
        raise ConfigError(f"Config file {path} must contain an object/table at the root")
    return loaded


def load_config(path: Optional[Path] = None) -> Dict[str, Any]:
    """Load configuration from disk, merged with defaults."""
    cfg_path = path or default_config_path()
    cfg = _default_config()

    if cfg_path.exists():
        cfg = _deep_merge(cfg, _read_config(cfg_path))

    return cfg


def resolve_storage_file(config: Dict[str, Any]) -> Path:
    """Resolve client storage file from env/config."""
    raw = os.getenv("ACURE_STORAGE_FILE") or config.get("storage", {}).get("file")
    if not raw:
        raw = str(default_data_dir() / "storage.json")
    return expand_path(raw)


def resolve_api_base(config: Dict[str, Any]) -> str:
    """Resolve the edge API base URL with env override first."""
    return os.getenv("ACURE_API_BASE") or str(config.get("api", {}).get("base_url") or API_BASE)


def resolve_firebase_api_key(config: Dict[str, Any]) -> str:
    return os.getenv("FIREBASE_API_KEY") or str(config.get("proxy", {}).get("firebase_api_key") or "")
