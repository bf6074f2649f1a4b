from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field


class DetectedObjectIn(BaseModel):
    """
    One object reported by the browser detector.

    Only class and score are interpreted; bbox and any other metadata are
    kept as extra fields and stored untouched.
    """
    model_config = ConfigDict(extra="allow", populate_by_name=True)

    class_: str = Field(..., alias="class", min_length=1)
    score: float = Field(..., ge=0.0, le=1.0)


class DetectionCreateRequest(BaseModel):
    source: Optional[str] = Field(None, max_length=50, description="camera|video|...")
    timestamp: Optional[datetime] = Field(None, description="Detection time; defaults to write time")
    objects: Optional[List[DetectedObjectIn]] = None


class HealthResponse(BaseModel):
    status: str
    database: str
    timestamp: str


class DetectionStats(BaseModel):
    total_detections: int
    total_objects_detected: int
    overall_avg_confidence: Optional[float]
    max_objects_in_detection: Optional[int]


class ErrorResponse(BaseModel):
    error: str
    details: Optional[Any] = None


class HistoryResponse(BaseModel):
    success: bool = True
    count: int
    data: List[Dict[str, Any]]
