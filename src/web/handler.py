"""
Per-invocation adapter for serverless hosting.

The platform calls handler(event, context) once per request with an event
shaped like {"httpMethod", "path", "queryStringParameters", "body"}. The
runtime (engine pool, schema check) is built on the first call of a
process and reused by later warm invocations.
"""

from __future__ import annotations

import logging
import threading
from typing import Any, Dict, Optional

from models.config import Config
from models.errors import DetectionLogError
from runtime.config import load_config
from runtime.context import RuntimeContext, build_context

from .router import ApiRequest, ApiResponse, error_response

_runtime: Optional[RuntimeContext] = None
_runtime_lock = threading.Lock()


def get_runtime() -> RuntimeContext:
    """Build the runtime context once per process."""
    global _runtime
    if _runtime is None:
        with _runtime_lock:
            if _runtime is None:
                _runtime = build_context(Config.from_dict(load_config()))
                logging.info("Runtime initialized for function handler")
    return _runtime


def set_runtime(runtime: Optional[RuntimeContext]) -> None:
    """Install a pre-built runtime (used by tests and custom hosts)."""
    global _runtime
    _runtime = runtime


def handler(event: Dict[str, Any], context: Any = None) -> Dict[str, Any]:
    """Entry point: translate the platform event and dispatch it."""
    try:
        router = get_runtime().router
    except DetectionLogError as e:
        logging.error(f"Runtime initialization failed: {e.message} ({e.details})")
        return _to_result(error_response(500, e.message, e.details))
    except Exception as e:
        logging.exception("Runtime initialization failed")
        return _to_result(error_response(500, "Service unavailable", str(e)))

    request = ApiRequest(
        method=event.get("httpMethod", "GET"),
        path=event.get("path", "/"),
        query=event.get("queryStringParameters") or {},
        body=event.get("body"),
        is_base64=bool(event.get("isBase64Encoded")),
    )
    return _to_result(router.dispatch(request))


def _to_result(response: ApiResponse) -> Dict[str, Any]:
    return {
        "statusCode": response.status_code,
        "headers": response.headers,
        "body": response.render(),
    }
