from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Optional

import pydantic

from analytics.aggregator import EMPTY_BATCH_MESSAGE, summarize_objects
from models.detection_event import DetectionEvent
from models.errors import ValidationError
from storage.database import Database

from ..api_models import DetectionCreateRequest, DetectionStats, HealthResponse


def _field_errors(exc: pydantic.ValidationError) -> List[Dict[str, Any]]:
    return [
        {"loc": ".".join(str(p) for p in err["loc"]), "msg": err["msg"]}
        for err in exc.errors()
    ]


@dataclass
class DetectionService:
    """The five detection operations, independent of how requests arrive."""

    db: Database

    def health(self) -> Dict[str, Any]:
        now = self.db.ping()
        return HealthResponse(status="ok", database="connected", timestamp=now).model_dump()

    def ingest(self, payload: Optional[Mapping[str, Any]]) -> DetectionEvent:
        if not isinstance(payload, Mapping):
            raise ValidationError(EMPTY_BATCH_MESSAGE)

        raw_objects = payload.get("objects")
        if not raw_objects:
            raise ValidationError(EMPTY_BATCH_MESSAGE)

        try:
            req = DetectionCreateRequest.model_validate(payload)
        except pydantic.ValidationError as e:
            raise ValidationError("Invalid detection batch", details=_field_errors(e)) from e

        # Summaries come from the validated objects; storage keeps the raw ones
        summary = summarize_objects([obj.model_dump(by_alias=True) for obj in req.objects or []])
        event = self.db.insert(
            source=req.source,
            objects=raw_objects,
            summary=summary,
            timestamp=req.timestamp,
        )
        logging.info(
            f"Detection {event.id} stored: {event.detected_objects} "
            f"(avg {event.avg_confidence}%, source={event.source})"
        )
        return event

    def history(self, limit: Optional[int] = None) -> List[DetectionEvent]:
        return self.db.list_recent(limit)

    def stats(self) -> Dict[str, Any]:
        return DetectionStats(**self.db.aggregate_stats()).model_dump()

    def purge(self) -> None:
        self.db.delete_all()
        logging.warning("All detections deleted")
