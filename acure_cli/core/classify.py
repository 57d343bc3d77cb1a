"""Acne-type classification: score post-processing and classifier invocation."""

from __future__ import annotations

import importlib
import logging
import math
import random
import threading
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Optional, Sequence

from PIL import Image

from acure_cli.core.constants import DEFAULT_RECOMMENDATION, LABEL_DISPLAY, LABELS, RECOMMENDATIONS
from acure_cli.core.images import open_image
from acure_cli.core.models import Prediction, Recommendations, ScanRecord

logger = logging.getLogger(__name__)

INPUT_SIZE = (224, 224)

Classifier = Callable[[Image.Image], Sequence[float]]


class ClassifierError(RuntimeError):
    """Raised when a classifier cannot be loaded."""


class ClassifierTimeout(ClassifierError):
    """Raised when inference exceeds its deadline."""


def format_label(label: str) -> str:
    return LABEL_DISPLAY.get(label, label)


def recommendations_for(display_label: str) -> Recommendations:
    table = RECOMMENDATIONS.get(display_label, DEFAULT_RECOMMENDATION)
    return Recommendations.from_dict(table)


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")


def round_confidence(value: float) -> float:
    """Round half up to two decimals."""
    return math.floor(value * 100 + 0.5) / 100


def rank_scores(scores: Sequence[float]) -> List[Prediction]:
    """Pair scores with labels, round to two decimals and sort descending.

    Missing scores count as zero and extra scores are ignored.
    """
    values = [float(score or 0) for score in list(scores)[: len(LABELS)]]
    if len(values) != len(LABELS):
        logger.warning("Expected %d scores, got %d", len(LABELS), len(values))
        values.extend([0.0] * (len(LABELS) - len(values)))

    predictions = [
        Prediction(label=format_label(label), confidence=round_confidence(value))
        for label, value in zip(LABELS, values)
    ]
    # Stable sort keeps label order for ties.
    predictions.sort(key=lambda item: item.confidence, reverse=True)
    return predictions


def build_scan_record(
    scores: Sequence[float],
    image: str = "",
    is_mock_result: bool = False,
    timestamp: Optional[str] = None,
) -> ScanRecord:
    """Turn raw classifier scores into a :class:`ScanRecord`."""
    predictions = rank_scores(scores)
    dominant = predictions[0]
    return ScanRecord(
        dominant_label=dominant.label,
        confidence=dominant.confidence,
        image=image,
        timestamp=timestamp or _now_iso(),
        predictions=predictions,
        recommendations=recommendations_for(dominant.label),
        is_mock_result=is_mock_result,
    )


def mock_scores(rng: Optional[random.Random] = None) -> List[float]:
    """Plausible random scores used when no classifier is available."""
    rng = rng or random.Random()
    return [
        rng.random() * 0.4 + 0.1,
        rng.random() * 0.3 + 0.05,
        rng.random() * 0.4 + 0.1,
        rng.random() * 0.3 + 0.05,
        rng.random() * 0.4 + 0.1,
    ]


def load_classifier(spec: Optional[str]) -> Optional[Classifier]:
    """Resolve a ``module:callable`` reference from configuration."""
    if not spec:
        return None
    module_name, _, attr = spec.partition(":")
    if not module_name or not attr:
        raise ClassifierError(f"Classifier must look like 'module:function', got {spec!r}")
    try:
        module = importlib.import_module(module_name)
    except ImportError as exc:
        raise ClassifierError(f"Cannot import classifier module {module_name!r}: {exc}") from exc
    target = getattr(module, attr, None)
    if not callable(target):
        raise ClassifierError(f"{spec!r} is not callable")
    return target


def preprocess(image: Image.Image) -> Image.Image:
    """RGB, resized to the model input size."""
    return image.convert("RGB").resize(INPUT_SIZE)


def _run_with_deadline(classifier: Classifier, image: Image.Image, timeout: float) -> Sequence[float]:
    """Call ``classifier`` on a daemon thread so an overrun cannot hold the process open."""
    outcome: Dict[str, Any] = {}

    def target() -> None:
        try:
            outcome["scores"] = classifier(image)
        except BaseException as exc:
            outcome["error"] = exc

    worker = threading.Thread(target=target, name="acure-classifier", daemon=True)
    worker.start()
    worker.join(timeout)
    if worker.is_alive():
        raise ClassifierTimeout(f"Prediction timed out after {timeout}s")
    if "error" in outcome:
        raise outcome["error"]
    return outcome["scores"]


def detect_acne(
    image_uri: str,
    classifier: Optional[Classifier] = None,
    timeout: float = 30.0,
    rng: Optional[random.Random] = None,
) -> ScanRecord:
    """Classify an image data URI.

    Undecodable images raise :class:`~acure_cli.core.images.ImageError` and a
    classifier that misses the deadline raises :class:`ClassifierTimeout`.
    Without a classifier, or when the classifier itself fails, mock scores are
    used and the record is flagged ``is_mock_result``.
    """
    image = preprocess(open_image(image_uri))

    if classifier is None:
        logger.warning("No classifier configured; using mock detection results")
        return build_scan_record(mock_scores(rng), image=image_uri, is_mock_result=True)

    try:
        scores = _run_with_deadline(classifier, image, timeout)
    except ClassifierTimeout:
        raise
    except Exception as exc:
        logger.warning("Classifier failed, using mock detection results: %s", exc)
        return build_scan_record(mock_scores(rng), image=image_uri, is_mock_result=True)

    return build_scan_record(scores, image=image_uri)


def scan_summary(record: ScanRecord) -> Dict[str, Any]:
    return {
        "id": record.id,
        "dominantAcne": record.dominant_label,
        "confidence": record.confidence,
        "severity": record.recommendations.severity,
        "timestamp": record.timestamp,
        "isMockResult": record.is_mock_result,
    }
