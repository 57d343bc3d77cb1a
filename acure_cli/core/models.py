"""Lightweight data models used across commands."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Any, Dict, List, Optional

from acure_cli.core.constants import UNKNOWN_SEVERITY


@dataclass(frozen=True)
class Route:
    """Static route table entry."""

    path: str
    template: str
    title: str
    requires_auth: bool = False


@dataclass(frozen=True)
class ParsedLocation:
    """Hash location split into path and query map."""

    path: str = "/"
    query: Dict[str, str] = field(default_factory=dict)


@dataclass
class Session:
    """Authenticated user session persisted in client storage."""

    token: str
    user_id: str
    email: str = ""
    name: str = ""

    def to_user_data(self) -> Dict[str, Any]:
        return {"uid": self.user_id, "email": self.email, "name": self.name, "token": self.token}

    @classmethod
    def from_user_data(cls, data: Dict[str, Any], token: Optional[str] = None) -> "Session":
        return cls(
            token=str(token or data.get("token") or ""),
            user_id=str(data.get("uid") or data.get("userId") or ""),
            email=str(data.get("email") or ""),
            name=str(data.get("name") or ""),
        )


@dataclass(frozen=True)
class Prediction:
    label: str
    confidence: float

    def to_dict(self) -> Dict[str, Any]:
        return {"label": self.label, "confidence": self.confidence}


@dataclass(frozen=True)
class Recommendations:
    ingredients: List[str] = field(default_factory=list)
    treatment: List[str] = field(default_factory=list)
    severity: str = UNKNOWN_SEVERITY

    def to_dict(self) -> Dict[str, Any]:
        return {
            "ingredients": list(self.ingredients),
            "treatment": list(self.treatment),
            "severity": self.severity,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Recommendations":
        return cls(
            ingredients=[str(item) for item in data.get("ingredients") or []],
            treatment=[str(item) for item in data.get("treatment") or []],
            severity=str(data.get("severity") or UNKNOWN_SEVERITY),
        )


@dataclass(frozen=True)
class ScanRecord:
    """One inference run over a user-submitted image.

    Records are immutable; use :meth:`with_id` to attach a server-assigned id.
    The dictionary form uses the field names the web client and API exchange
    (``dominantAcne``, ``scanId``, ``isMockResult``...).
    """

    dominant_label: str
    confidence: float
    timestamp: str
    predictions: List[Prediction] = field(default_factory=list)
    recommendations: Recommendations = field(default_factory=Recommendations)
    image: str = ""
    id: Optional[str] = None
    is_mock_result: bool = False
    user_id: Optional[str] = None

    def with_id(self, scan_id: str) -> "ScanRecord":
        return replace(self, id=scan_id)

    def without_image(self) -> "ScanRecord":
        return replace(self, image="")

    def to_dict(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "dominantAcne": self.dominant_label,
            "confidence": self.confidence,
            "image": self.image,
            "timestamp": self.timestamp,
            "predictions": [prediction.to_dict() for prediction in self.predictions],
            "recommendations": self.recommendations.to_dict(),
            "isMockResult": self.is_mock_result,
        }
        if self.id is not None:
            payload["id"] = self.id
            payload["scanId"] = self.id
        if self.user_id is not None:
            payload["userId"] = self.user_id
        return payload

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ScanRecord":
        predictions = [
            Prediction(label=str(item.get("label", "")), confidence=float(item.get("confidence") or 0))
            for item in data.get("predictions") or []
            if isinstance(item, dict)
        ]
        raw_recs = data.get("recommendations")
        recs = Recommendations.from_dict(raw_recs) if isinstance(raw_recs, dict) else Recommendations()
        scan_id = data.get("id") or data.get("scanId")
        user_id = data.get("userId")
        return cls(
            dominant_label=str(data.get("dominantAcne") or "Unknown"),
            confidence=float(data.get("confidence") or 0),
            timestamp=str(data.get("timestamp") or data.get("createdAt") or ""),
            predictions=predictions,
            recommendations=recs,
            image=str(data.get("image") or ""),
            id=str(scan_id) if scan_id else None,
            is_mock_result=bool(data.get("isMockResult", False)),
            user_id=str(user_id) if user_id else None,
        )
