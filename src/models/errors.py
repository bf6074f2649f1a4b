"""
Error types raised by the aggregator, store and detection service.

They are translated into the JSON envelope at the router boundary.
"""

from __future__ import annotations

from typing import Any, Optional


class DetectionLogError(Exception):
    """Base class for errors reported back to API clients."""

    def __init__(self, message: str, details: Optional[Any] = None):
        super().__init__(message)
        self.message = message
        self.details = details


class ValidationError(DetectionLogError):
    """The client sent something we cannot store (e.g. an empty batch)."""


class StorageError(DetectionLogError):
    """The relational store is unreachable or a query failed."""


class RouteNotFoundError(DetectionLogError):
    """No operation is registered for the (method, path) pair."""
