"""
DetectionEvent model: one stored row per ingested detection batch.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Mapping, Optional


def _iso(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value is not None else None


@dataclass(frozen=True)
class DetectionEvent:
    """
    A stored detection batch.

    Attributes:
        id: Primary key assigned by the store.
        timestamp: When the batch was detected (defaults to write time).
        source: Origin feed tag, e.g. "camera" or "video".
        total_objects: Number of objects in the batch.
        unique_objects: Number of distinct class labels.
        avg_confidence: Mean score as a 0-100 percentage, 2 decimals.
        detected_objects: Summary string, e.g. "person (2), car (1)".
        objects: The submitted objects, verbatim.
        created_at: When the row was written.
    """
    id: int
    timestamp: Optional[datetime]
    source: str
    total_objects: int
    unique_objects: int
    avg_confidence: float
    detected_objects: str
    objects: List[Dict[str, Any]] = field(default_factory=list)
    created_at: Optional[datetime] = None

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> "DetectionEvent":
        """Adapter: build from a `detections` result row mapping."""
        return cls(
            id=int(row["id"]),
            timestamp=row["timestamp"],
            source=row["source"],
            total_objects=int(row["total_objects"]),
            unique_objects=int(row["unique_objects"]),
            avg_confidence=float(row["avg_confidence"]),
            detected_objects=row["detected_objects"],
            objects=list(row["objects_data"] or []),
            created_at=row["created_at"],
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "id": self.id,
            "timestamp": _iso(self.timestamp),
            "source": self.source,
            "total_objects": self.total_objects,
            "unique_objects": self.unique_objects,
            "avg_confidence": self.avg_confidence,
            "detected_objects": self.detected_objects,
            "objects": self.objects,
            "created_at": _iso(self.created_at),
        }
