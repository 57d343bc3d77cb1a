from __future__ import annotations

from typing import Any, Dict

from acure_cli.core.models import ScanRecord
from acure_cli.core.normalize import normalize_recommendations, normalize_scan

EMPTY = {"ingredients": [], "treatment": [], "severity": "Unknown"}


def test_recommendations_object_passes_through() -> None:
    value = {"ingredients": ["Zinc"], "treatment": ["Rest"], "severity": "Ringan"}
    assert normalize_recommendations(value) is value


def test_recommendations_partial_object_keeps_supplied_fields() -> None:
    assert normalize_recommendations({"ingredients": [], "treatment": []}) == EMPTY
    assert normalize_recommendations({"ingredients": ["x"]}) == {
        "ingredients": ["x"],
        "treatment": [],
        "severity": "Unknown",
    }
    assert normalize_recommendations({"severity": "Berat", "treatment": None}) == {
        "ingredients": [],
        "treatment": [],
        "severity": "Berat",
    }


def test_recommendations_list_keeps_first_five() -> None:
    assert normalize_recommendations(["a", "b", "c", "d", "e", "f"]) == {
        "ingredients": ["a", "b", "c", "d", "e"],
        "treatment": [],
        "severity": "Unknown",
    }


def test_recommendations_fallbacks() -> None:
    assert normalize_recommendations(None) == EMPTY
    assert normalize_recommendations([]) == EMPTY
    assert normalize_recommendations("text") == EMPTY
    assert normalize_recommendations({}) == EMPTY


def test_normalize_scan_full_item(sample_scan_item: Dict[str, Any]) -> None:
    record = normalize_scan(sample_scan_item, user_id="user-1")

    assert isinstance(record, ScanRecord)
    assert record.id == "srv-1"
    assert record.dominant_label == "Cyst (Kista)"
    assert record.confidence == 0.91
    assert record.recommendations.severity == "Berat"
    assert record.predictions[0].label == "Cyst (Kista)"
    assert record.user_id == "user-1"
    assert record.is_mock_result is False


def test_normalize_scan_defaults() -> None:
    record = normalize_scan({"scanId": "legacy", "createdAt": "2026-01-01T00:00:00Z"}, index=3)

    assert record.id == "legacy"
    assert record.dominant_label == "Unknown"
    assert record.confidence == 0
    assert record.timestamp == "2026-01-01T00:00:00Z"
    assert record.predictions == []
    assert record.recommendations.severity == "Unknown"
    assert record.user_id is None


def test_normalize_scan_generates_fallback_id() -> None:
    record = normalize_scan({"recommendations": ["Zinc"]}, index=2)
    assert record.id.startswith("scan-2-")
    assert record.recommendations.ingredients == ["Zinc"]
    assert record.timestamp
