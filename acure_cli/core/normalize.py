"""Normalization of heterogeneous scan payloads into canonical records."""

from __future__ import annotations

import time
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from acure_cli.core.constants import UNKNOWN_SEVERITY
from acure_cli.core.models import Prediction, Recommendations, ScanRecord


def _default_recommendations() -> Dict[str, Any]:
    return {"ingredients": [], "treatment": [], "severity": UNKNOWN_SEVERITY}


def normalize_recommendations(value: Any) -> Dict[str, Any]:
    """Coerce a recommendations value into ``{ingredients, treatment, severity}``.

    A complete object is returned as-is; a partial one gets defaults for the
    keys it lacks. A flat list becomes the ingredient list (first five
    entries). Anything else yields empty lists and an ``Unknown`` severity.
    """
    if not value:
        return _default_recommendations()

    if isinstance(value, dict):
        if all(value.get(key) is not None for key in ("ingredients", "treatment", "severity")):
            return value
        filled = _default_recommendations()
        filled.update((key, item) for key, item in value.items() if item is not None)
        return filled

    if isinstance(value, list):
        return {
            "ingredients": list(value[:5]),
            "treatment": [],
            "severity": UNKNOWN_SEVERITY,
        }

    return _default_recommendations()


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")


def normalize_scan(item: Dict[str, Any], user_id: Optional[str] = None, index: int = 0) -> ScanRecord:
    """Map one server scan item onto a :class:`ScanRecord`."""
    fallback_id = f"scan-{index}-{int(time.time() * 1000)}"
    scan_id = item.get("id") or item.get("scanId") or fallback_id

    predictions = []
    for entry in item.get("predictions") or []:
        if not isinstance(entry, dict):
            continue
        predictions.append(
            Prediction(
                label=str(entry.get("label") or ""),
                confidence=float(entry.get("confidence") or 0),
            )
        )

    recommendations = Recommendations.from_dict(normalize_recommendations(item.get("recommendations")))
    owner = user_id or item.get("userId")

    return ScanRecord(
        id=str(scan_id),
        dominant_label=str(item.get("dominantAcne") or "Unknown"),
        confidence=float(item.get("confidence") or 0),
        image=str(item.get("image") or ""),
        timestamp=str(item.get("timestamp") or item.get("createdAt") or _now_iso()),
        predictions=predictions,
        recommendations=recommendations,
        is_mock_result=bool(item.get("isMockResult", False)),
        user_id=str(owner) if owner else None,
    )
