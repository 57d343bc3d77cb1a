from __future__ import annotations

from pathlib import Path

import pytest

from acure_cli.core.config import (
    DEFAULT_ALLOWED_ORIGINS,
    ConfigError,
    _deep_merge,
    default_config_path,
    default_data_dir,
    expand_path,
    load_config,
    resolve_api_base,
    resolve_firebase_api_key,
    resolve_storage_file,
)
from acure_cli.core.constants import API_BASE


def test_deep_merge_nested_dicts() -> None:
    base = {"a": {"b": 1, "c": 2}, "x": 3}
    override = {"a": {"b": 9}, "y": 4}
    merged = _deep_merge(base, override)
    assert merged == {"a": {"b": 9, "c": 2}, "x": 3, "y": 4}
    assert base["a"]["b"] == 1


def test_expand_path_expands_home_and_env(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    monkeypatch.setenv("ACURE_TMP_PATH", str(tmp_path))
    expanded = expand_path("$ACURE_TMP_PATH/config.toml")
    assert expanded == (tmp_path / "config.toml").resolve()


def test_default_config_path_uses_env(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    path = tmp_path / "custom.toml"
    monkeypatch.setenv("ACURE_CONFIG_FILE", str(path))
    assert default_config_path() == path.resolve()


def test_default_data_dir_uses_env(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    path = tmp_path / "acure-data"
    monkeypatch.setenv("ACURE_DATA_DIR", str(path))
    assert default_data_dir() == path.resolve()


def test_load_config_missing_file_returns_defaults(tmp_path: Path) -> None:
    cfg = load_config(tmp_path / "missing.toml")
    assert cfg["api"]["base_url"] == API_BASE
    assert cfg["api"]["timeout_seconds"] == 15
    assert cfg["storage"]["file"].endswith("storage.json")
    assert cfg["history"]["per_page"] == 9
    assert cfg["proxy"]["allowed_origins"] == DEFAULT_ALLOWED_ORIGINS
    assert cfg["proxy"]["strict_cors"] is False
    assert cfg["logging"]["level"] == "WARNING"


def test_load_config_from_json(write_temp_json) -> None:
    path = write_temp_json("config.json", {"api": {"timeout_seconds": 9}, "history": {"per_page": 3}})
    cfg = load_config(path)
    assert cfg["api"]["timeout_seconds"] == 9
    assert cfg["api"]["base_url"] == API_BASE
    assert cfg["history"]["per_page"] == 3


def test_load_config_from_toml(write_temp_toml) -> None:
    path = write_temp_toml(
        "config.toml",
        """
[scan]
classifier = "acne_model:predict"

[proxy]
strict_cors = true
allowed_origins = ["https://app.example.com"]
""",
    )
    cfg = load_config(path)
    assert cfg["scan"]["classifier"] == "acne_model:predict"
    assert cfg["scan"]["timeout_seconds"] == 30
    assert cfg["proxy"]["strict_cors"] is True
    assert cfg["proxy"]["allowed_origins"] == ["https://app.example.com"]


def test_load_config_invalid_json_raises(tmp_path: Path) -> None:
    path = tmp_path / "broken.json"
    path.write_text("{broken")
    with pytest.raises(ConfigError):
        load_config(path)


def test_load_config_invalid_toml_raises(tmp_path: Path) -> None:
    path = tmp_path / "broken.toml"
    path.write_text("[api\ntimeout_seconds = 3")
    with pytest.raises(ConfigError):
        load_config(path)


def test_load_config_non_table_root_raises(tmp_path: Path) -> None:
    path = tmp_path / "list.json"
    path.write_text("[1, 2]")
    with pytest.raises(ConfigError, match="object/table"):
        load_config(path)


def test_resolve_storage_file_env_override(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    monkeypatch.setenv("ACURE_STORAGE_FILE", str(tmp_path / "s.json"))
    assert resolve_storage_file({"storage": {"file": "/nope"}}) == (tmp_path / "s.json").resolve()


def test_resolve_storage_file_default_uses_data_dir(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    monkeypatch.setenv("ACURE_DATA_DIR", str(tmp_path / "xdg"))
    assert resolve_storage_file({"storage": {}}) == (tmp_path / "xdg" / "storage.json").resolve()


def test_resolve_api_base(monkeypatch: pytest.MonkeyPatch) -> None:
    assert resolve_api_base({}) == API_BASE
    assert resolve_api_base({"api": {"base_url": "https://cfg.example"}}) == "https://cfg.example"
    monkeypatch.setenv("ACURE_API_BASE", "https://env.example")
    assert resolve_api_base({"api": {"base_url": "https://cfg.example"}}) == "https://env.example"


def test_resolve_firebase_api_key(monkeypatch: pytest.MonkeyPatch) -> None:
    assert resolve_firebase_api_key({"proxy": {"firebase_api_key": "cfg-key"}}) == "cfg-key"
    monkeypatch.setenv("FIREBASE_API_KEY", "env-key")
    assert resolve_firebase_api_key({"proxy": {"firebase_api_key": "cfg-key"}}) == "env-key"
