"""
Tests for typed models and request schemas.
"""

from datetime import datetime

import pydantic
import pytest

from models.detection_event import DetectionEvent
from web.api_models import DetectedObjectIn, DetectionCreateRequest


class TestDetectionEvent:

    def _row(self, **overrides):
        row = {
            "id": 7,
            "timestamp": datetime(2024, 1, 2, 3, 4, 5),
            "source": "video",
            "total_objects": 2,
            "unique_objects": 1,
            "avg_confidence": 91.5,
            "detected_objects": "person (2)",
            "objects_data": [{"class": "person", "score": 0.9}, {"class": "person", "score": 0.93}],
            "created_at": datetime(2024, 1, 2, 3, 4, 6),
        }
        row.update(overrides)
        return row

    def test_from_row(self):
        event = DetectionEvent.from_row(self._row())

        assert event.id == 7
        assert event.total_objects == len(event.objects)
        assert event.objects[0]["class"] == "person"

    def test_to_dict_serializes_datetimes(self):
        data = DetectionEvent.from_row(self._row()).to_dict()

        assert data["timestamp"] == "2024-01-02T03:04:05"
        assert data["created_at"] == "2024-01-02T03:04:06"
        assert data["objects"] == self._row()["objects_data"]

    def test_null_objects_become_empty_list(self):
        event = DetectionEvent.from_row(self._row(objects_data=None))
        assert event.objects == []

    def test_frozen(self):
        event = DetectionEvent.from_row(self._row())
        with pytest.raises(Exception):
            event.source = "camera"


class TestRequestModels:

    def test_class_alias_and_extras(self):
        obj = DetectedObjectIn.model_validate({"class": "dog", "score": 0.8, "bbox": [1, 2, 3, 4]})

        assert obj.class_ == "dog"
        dumped = obj.model_dump(by_alias=True)
        assert dumped["class"] == "dog"
        assert dumped["bbox"] == [1, 2, 3, 4]

    @pytest.mark.parametrize("score", [-0.1, 1.01])
    def test_score_range(self, score):
        with pytest.raises(pydantic.ValidationError):
            DetectedObjectIn.model_validate({"class": "dog", "score": score})

    def test_source_length_limit(self):
        with pytest.raises(pydantic.ValidationError):
            DetectionCreateRequest.model_validate({"source": "x" * 51, "objects": []})

    def test_optional_timestamp(self):
        req = DetectionCreateRequest.model_validate({
            "timestamp": "2024-05-01T12:30:00Z",
            "objects": [{"class": "car", "score": 0.5}],
        })
        assert req.timestamp.year == 2024
        assert req.source is None
