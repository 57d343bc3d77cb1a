from __future__ import annotations

import base64
import io
import json
from pathlib import Path
from typing import Any, Dict

import pytest
from PIL import Image
from typer.testing import CliRunner

from acure_cli.core.cache import ScanCache
from acure_cli.core.models import Prediction, Recommendations, ScanRecord, Session
from acure_cli.core.session import StorageSessionStore
from acure_cli.core.storage import LocalStorage


@pytest.fixture()
def runner() -> CliRunner:
    return CliRunner()


@pytest.fixture(autouse=True)
def isolated_env(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> Path:
    data_dir = tmp_path / "data"
    monkeypatch.setenv("ACURE_DATA_DIR", str(data_dir))
    monkeypatch.setenv("ACURE_CONFIG_FILE", str(tmp_path / "config.toml"))
    for name in ("ACURE_STORAGE_FILE", "ACURE_API_BASE", "FIREBASE_API_KEY", "ACURE_EMAIL", "ACURE_PASSWORD"):
        monkeypatch.delenv(name, raising=False)
    return data_dir


@pytest.fixture()
def storage(tmp_path: Path) -> LocalStorage:
    return LocalStorage(tmp_path / "storage.json")


@pytest.fixture()
def cache(storage: LocalStorage) -> ScanCache:
    return ScanCache(storage)


@pytest.fixture()
def session_store(storage: LocalStorage) -> StorageSessionStore:
    return StorageSessionStore(storage)


@pytest.fixture()
def session() -> Session:
    return Session(token="tok-123", user_id="user-1", email="rina@example.com", name="rina")


@pytest.fixture()
def sample_record() -> ScanRecord:
    return ScanRecord(
        dominant_label="Papules (Jerawat Padat)",
        confidence=0.62,
        timestamp="2026-03-01T10:00:00.000Z",
        predictions=[
            Prediction("Papules (Jerawat Padat)", 0.62),
            Prediction("Pustules (Jerawat Bernanah)", 0.21),
        ],
        recommendations=Recommendations(
            ingredients=["Benzoyl Peroxide", "Niacinamide"],
            treatment=["Gunakan benzoyl peroxide 2.5-5%"],
            severity="Sedang",
        ),
        image="data:image/jpeg;base64,AAAA",
    )


@pytest.fixture()
def sample_scan_item() -> Dict[str, Any]:
    return {
        "id": "srv-1",
        "dominantAcne": "Cyst (Kista)",
        "confidence": 0.91,
        "image": "data:image/jpeg;base64,BBBB",
        "timestamp": "2026-03-02T08:30:00.000Z",
        "predictions": [{"label": "Cyst (Kista)", "confidence": 0.91}],
        "recommendations": {"ingredients": ["Gentle Cleanser"], "treatment": ["Konsultasi"], "severity": "Berat"},
        "isMockResult": False,
    }


def make_image_uri(width: int = 32, height: int = 24, fmt: str = "PNG") -> str:
    image = Image.new("RGB", (width, height), color=(200, 120, 90))
    buffer = io.BytesIO()
    image.save(buffer, format=fmt)
    mime = "image/png" if fmt == "PNG" else "image/jpeg"
    return f"data:{mime};base64,{base64.b64encode(buffer.getvalue()).decode('ascii')}"


@pytest.fixture()
def make_image():
    return make_image_uri


@pytest.fixture()
def image_uri() -> str:
    return make_image_uri()


@pytest.fixture()
def image_file(tmp_path: Path) -> Path:
    path = tmp_path / "face.png"
    Image.new("RGB", (40, 30), color=(180, 140, 120)).save(path)
    return path


@pytest.fixture()
def write_temp_json(tmp_path: Path):
    def _write(name: str, payload: Any) -> Path:
        path = tmp_path / name
        path.write_text(json.dumps(payload, indent=2) + "\n")
        return path

    return _write


@pytest.fixture()
def write_temp_toml(tmp_path: Path):
    def _write(name: str, content: str) -> Path:
        path = tmp_path / name
        path.write_text(content.strip() + "\n")
        return path

    return _write
