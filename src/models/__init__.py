"""
Typed models for the detection log service.
"""

from .detection_event import DetectionEvent
from .errors import DetectionLogError, ValidationError, StorageError, RouteNotFoundError
from .config import Config, StorageConfig, ServerConfig

__all__ = [
    # Events
    "DetectionEvent",
    # Errors
    "DetectionLogError",
    "ValidationError",
    "StorageError",
    "RouteNotFoundError",
    # Config
    "Config",
    "StorageConfig",
    "ServerConfig",
]
