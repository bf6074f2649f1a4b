"""
FastAPI application factory: the persistent-listener adapter.

Every path and method is forwarded to web.router.Router, so routes exist
both at the root (/detections) and under the /api mount prefix
(/api/detections).

CORS headers, preflights included, come from the router rather than a
middleware so every response carries the same envelope.
"""

from __future__ import annotations

from fastapi import FastAPI, Request, Response
from starlette.concurrency import run_in_threadpool

from .router import ApiRequest, Router

FORWARDED_METHODS = ["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"]


def create_app(router: Router) -> FastAPI:
    """Create the FastAPI app and forward every request to the router."""
    app = FastAPI(
        title="Detection Log",
        version="1.0.0",
        description="Stores and summarizes browser object-detection batches",
    )

    @app.api_route("/{full_path:path}", methods=FORWARDED_METHODS, include_in_schema=False)
    async def forward(request: Request, full_path: str):
        api_request = ApiRequest(
            method=request.method,
            path="/" + full_path,
            query=dict(request.query_params),
            body=await request.body(),
        )
        # dispatch does blocking database I/O
        api_response = await run_in_threadpool(router.dispatch, api_request)
        return Response(
            content=api_response.render(),
            status_code=api_response.status_code,
            headers=api_response.headers,
        )

    return app
