from .aggregator import DetectionSummary, summarize_objects

__all__ = ["DetectionSummary", "summarize_objects"]
