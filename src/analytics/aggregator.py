"""
Batch aggregation: turns a list of detected objects into the summary
fields stored alongside each detection event.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal, ROUND_HALF_UP
from typing import Any, Dict, Mapping, Optional, Sequence

from models.errors import ValidationError

EMPTY_BATCH_MESSAGE = "No objects to save"


@dataclass(frozen=True)
class DetectionSummary:
    total_objects: int
    unique_objects: int
    avg_confidence: float
    detected_objects: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "total_objects": self.total_objects,
            "unique_objects": self.unique_objects,
            "avg_confidence": self.avg_confidence,
            "detected_objects": self.detected_objects,
        }


def round_half_up(value: float, places: int = 2) -> float:
    """Round like a calculator does (0.125 -> 0.13), not banker's rounding."""
    quantum = Decimal(1).scaleb(-places)
    return float(Decimal(str(value)).quantize(quantum, rounding=ROUND_HALF_UP))


def count_classes(objects: Sequence[Mapping[str, Any]]) -> Dict[str, int]:
    """Occurrences per class label, in first-appearance order."""
    counts: Dict[str, int] = {}
    for obj in objects:
        label = obj["class"]
        counts[label] = counts.get(label, 0) + 1
    return counts


def format_class_counts(counts: Mapping[str, int]) -> str:
    """Render {"person": 2, "car": 1} as "person (2), car (1)"."""
    return ", ".join(f"{label} ({count})" for label, count in counts.items())


def summarize_objects(objects: Optional[Sequence[Mapping[str, Any]]]) -> DetectionSummary:
    """
    Compute the summary fields for one detection batch.

    Args:
        objects: Detected objects, each with at least "class" and "score".

    Returns:
        DetectionSummary with counts, mean confidence (percent) and label text.

    Raises:
        ValidationError: if the batch is missing or empty.
    """
    if not objects:
        raise ValidationError(EMPTY_BATCH_MESSAGE)

    total = len(objects)
    counts = count_classes(objects)
    score_sum = sum(float(obj["score"]) for obj in objects)

    return DetectionSummary(
        total_objects=total,
        unique_objects=len(counts),
        avg_confidence=round_half_up(score_sum / total * 100),
        detected_objects=format_class_counts(counts),
    )
