"""
Transport-agnostic request router.

Both hosting models (the FastAPI listener in web.app and the per-invocation
handler in web.handler) translate their own request framing into an
ApiRequest, call Router.dispatch, and write the ApiResponse back out.

Routes (after any mount prefix such as /api is stripped):
- GET    /health      -> store connectivity check
- POST   /detections  -> ingest one batch
- GET    /detections  -> recent history (?limit=N)
- GET    /stats       -> aggregate statistics
- DELETE /detections  -> purge every row
- OPTIONS *           -> CORS preflight
"""

from __future__ import annotations

import base64
import binascii
import json
import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Iterable, Mapping, Optional, Tuple

from models.errors import RouteNotFoundError, StorageError, ValidationError

from .api_models import ErrorResponse, HistoryResponse
from .services.detection_service import DetectionService

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Headers": "Content-Type",
    "Access-Control-Allow-Methods": "GET, POST, PUT, DELETE, OPTIONS",
}

SAVED_MESSAGE = "Detection saved successfully"
PURGED_MESSAGE = "All detections have been deleted"


@dataclass
class ApiRequest:
    method: str
    path: str
    query: Mapping[str, str] = field(default_factory=dict)
    body: Any = None  # raw str/bytes, an already-decoded object, or None
    is_base64: bool = False


@dataclass
class ApiResponse:
    status_code: int
    body: Optional[Dict[str, Any]] = None
    headers: Dict[str, str] = field(default_factory=dict)

    def render(self) -> str:
        """JSON text of the body; empty string for bodiless responses."""
        if self.body is None:
            return ""
        return json.dumps(self.body, default=str)


def _headers() -> Dict[str, str]:
    headers = dict(CORS_HEADERS)
    headers["Content-Type"] = "application/json"
    return headers


def _json_response(status_code: int, body: Dict[str, Any]) -> ApiResponse:
    return ApiResponse(status_code=status_code, body=body, headers=_headers())


def error_response(status_code: int, message: str, details: Any = None) -> ApiResponse:
    return _json_response(status_code, ErrorResponse(error=message, details=details).model_dump(exclude_none=True))


def _decode_body(body: Any, is_base64: bool = False) -> Any:
    if body is None or isinstance(body, (dict, list)):
        return body
    try:
        if is_base64:
            body = base64.b64decode(body, validate=True)
        if isinstance(body, (bytes, bytearray)):
            body = body.decode("utf-8")
    except (binascii.Error, UnicodeDecodeError) as e:
        raise ValidationError("Request body must be UTF-8 encoded JSON", details=str(e)) from e
    if not body.strip():
        return None
    try:
        return json.loads(body)
    except ValueError as e:
        raise ValidationError("Request body must be valid JSON", details=str(e)) from e


def _parse_limit(query: Mapping[str, str]) -> Optional[int]:
    raw = query.get("limit")
    if raw is None or raw == "":
        return None
    try:
        limit = int(raw)
    except (TypeError, ValueError):
        raise ValidationError("limit must be a positive integer")
    if limit <= 0:
        raise ValidationError("limit must be a positive integer")
    return limit


class Router:
    """Dispatches (method, path) pairs to DetectionService operations."""

    def __init__(self, service: DetectionService, prefixes: Iterable[str] = ("/api",)):
        self.service = service
        # Longest first so "/.netlify/functions/api" wins over "/api"
        self.prefixes = sorted((p.rstrip("/") for p in prefixes if p), key=len, reverse=True)
        self._routes: Dict[Tuple[str, str], Callable[[ApiRequest], ApiResponse]] = {
            ("GET", "/health"): self._health,
            ("POST", "/detections"): self._ingest,
            ("GET", "/detections"): self._history,
            ("GET", "/stats"): self._stats,
            ("DELETE", "/detections"): self._purge,
        }

    def normalize_path(self, path: str) -> str:
        path = "/" + (path or "").split("?", 1)[0].strip("/")
        for prefix in self.prefixes:
            if path == prefix:
                return "/"
            if path.startswith(prefix + "/"):
                return path[len(prefix):]
        return path

    def resolve(self, method: str, path: str) -> Callable[[ApiRequest], ApiResponse]:
        handler = self._routes.get((method.upper(), self.normalize_path(path)))
        if handler is None:
            raise RouteNotFoundError("Route not found")
        return handler

    def dispatch(self, request: ApiRequest) -> ApiResponse:
        """Handle one request; never raises."""
        method = (request.method or "").upper()
        logging.info(f"{method} {request.path}")

        if method == "OPTIONS":
            return ApiResponse(status_code=200, body=None, headers=_headers())

        try:
            handler = self.resolve(method, request.path)
            return handler(request)
        except RouteNotFoundError as e:
            return error_response(404, e.message)
        except ValidationError as e:
            return error_response(400, e.message, e.details)
        except StorageError as e:
            return error_response(500, e.message, e.details)
        except Exception as e:
            logging.exception(f"Unhandled error for {method} {request.path}")
            return error_response(500, "Internal server error", str(e))

    # -------------------------------------------------------------------------
    # Operations
    # -------------------------------------------------------------------------

    def _health(self, request: ApiRequest) -> ApiResponse:
        try:
            return _json_response(200, self.service.health())
        except StorageError as e:
            return _json_response(500, {"status": "error", "message": e.message})

    def _ingest(self, request: ApiRequest) -> ApiResponse:
        payload = _decode_body(request.body, request.is_base64)
        event = self.service.ingest(payload)
        return _json_response(200, {
            "success": True,
            "message": SAVED_MESSAGE,
            "data": event.to_dict(),
        })

    def _history(self, request: ApiRequest) -> ApiResponse:
        events = self.service.history(_parse_limit(request.query or {}))
        body = HistoryResponse(count=len(events), data=[e.to_dict() for e in events])
        return _json_response(200, body.model_dump())

    def _stats(self, request: ApiRequest) -> ApiResponse:
        return _json_response(200, {"success": True, "stats": self.service.stats()})

    def _purge(self, request: ApiRequest) -> ApiResponse:
        self.service.purge()
        return _json_response(200, {"success": True, "message": PURGED_MESSAGE})
