"""Firestore REST typed-field encoding and decoding for scan documents."""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from acure_cli.core.constants import UNKNOWN_SEVERITY


def _string(fields: Dict[str, Any], key: str, default: str = "") -> str:
    return str((fields.get(key) or {}).get("stringValue") or default)


def _number(fields: Dict[str, Any], key: str) -> float:
    raw = fields.get(key) or {}
    value = raw.get("doubleValue", raw.get("integerValue", 0))
    try:
        return float(value or 0)
    except (TypeError, ValueError):
        return 0.0


def _string_array(field: Optional[Dict[str, Any]]) -> List[str]:
    values = ((field or {}).get("arrayValue") or {}).get("values") or []
    return [str(item.get("stringValue") or "") for item in values if isinstance(item, dict)]


def parse_recommendations(field: Optional[Dict[str, Any]]) -> Dict[str, Any]:
    fields = ((field or {}).get("mapValue") or {}).get("fields")
    if not fields:
        return {"ingredients": [], "treatment": [], "severity": UNKNOWN_SEVERITY}
    return {
        "ingredients": _string_array(fields.get("ingredients")),
        "treatment": _string_array(fields.get("treatment")),
        "severity": _string(fields, "severity", UNKNOWN_SEVERITY),
    }


def parse_predictions(field: Optional[Dict[str, Any]]) -> List[Dict[str, Any]]:
    values = ((field or {}).get("arrayValue") or {}).get("values") or []
    predictions = []
    for item in values:
        fields = ((item or {}).get("mapValue") or {}).get("fields")
        if not fields:
            predictions.append({"label": "", "confidence": 0})
            continue
        predictions.append({"label": _string(fields, "label"), "confidence": _number(fields, "confidence")})
    return predictions


def document_id(name: str) -> str:
    return name.rsplit("/", 1)[-1]


def document_to_scan(document: Dict[str, Any], user_id: str, now: str) -> Dict[str, Any]:
    """Flatten a scan document into the API's scan shape."""
    fields = document.get("fields") or {}
    scan_id = document_id(str(document.get("name") or "")) or _string(fields, "scanId")
    timestamp = (
        (fields.get("timestamp") or {}).get("timestampValue")
        or (fields.get("createdAt") or {}).get("timestampValue")
        or now
    )
    return {
        "id": scan_id,
        "scanId": scan_id,
        "dominantAcne": _string(fields, "dominantAcne", "Unknown"),
        "confidence": _number(fields, "confidence"),
        "image": _string(fields, "image"),
        "timestamp": timestamp,
        "recommendations": parse_recommendations(fields.get("recommendations")),
        "predictions": parse_predictions(fields.get("predictions")),
        "isMockResult": bool((fields.get("isMockResult") or {}).get("booleanValue", False)),
        "userId": user_id,
    }


def _string_values(items: Any) -> Dict[str, Any]:
    return {"arrayValue": {"values": [{"stringValue": str(item)} for item in items or []]}}


def encode_recommendations(recommendations: Any) -> Dict[str, Any]:
    recs = recommendations if isinstance(recommendations, dict) else {}
    return {
        "mapValue": {
            "fields": {
                "ingredients": _string_values(recs.get("ingredients")),
                "treatment": _string_values(recs.get("treatment")),
                "severity": {"stringValue": str(recs.get("severity") or UNKNOWN_SEVERITY)},
            }
        }
    }


def scan_to_fields(scan_id: str, user_id: str, scan: Dict[str, Any], now: str) -> Dict[str, Any]:
    """Encode an incoming scan payload as Firestore document fields."""
    predictions = [
        {
            "mapValue": {
                "fields": {
                    "label": {"stringValue": str(item.get("label") or "")},
                    "confidence": {"doubleValue": float(item.get("confidence") or 0)},
                }
            }
        }
        for item in scan.get("predictions") or []
        if isinstance(item, dict)
    ]
    return {
        "scanId": {"stringValue": scan_id},
        "dominantAcne": {"stringValue": str(scan.get("dominantAcne") or "Unknown")},
        "confidence": {"doubleValue": float(scan.get("confidence") or 0)},
        "image": {"stringValue": str(scan.get("image") or "")},
        "timestamp": {"timestampValue": now},
        "createdAt": {"timestampValue": now},
        "userEmail": {"stringValue": str(scan.get("userEmail") or "")},
        "userName": {"stringValue": str(scan.get("userName") or "")},
        "userId": {"stringValue": user_id},
        "isMockResult": {"booleanValue": bool(scan.get("isMockResult", False))},
        "predictions": {"arrayValue": {"values": predictions}},
        "recommendations": encode_recommendations(scan.get("recommendations")),
    }
