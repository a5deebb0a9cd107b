"""
Stub server.

Serves canned responses from stub mappings over HTTP. Requests that no stub
matches get a 404 JSON body naming the closest stub, the way WireMock reports
near misses.

Admin endpoints:
- GET  /__admin/mappings  loaded stub mappings
- GET  /__admin/requests  request journal (most recent last)
- POST /__admin/reset     clear the request journal
- GET  /__admin/health
"""

from __future__ import annotations

import logging
from collections import deque
from datetime import datetime, timezone
from typing import Any, Deque, Dict, Iterable

from fastapi import APIRouter, FastAPI, Request
from fastapi.responses import JSONResponse, Response

from src.error_handler import ErrorHandler

from .mappings import StubMapping
from .matcher import NotFound, StubMatcher, StubRequest, StubResponse

logger = logging.getLogger(__name__)

ALL_METHODS = ["GET", "POST", "PUT", "PATCH", "DELETE", "HEAD", "OPTIONS"]
DEFAULT_JOURNAL_SIZE = 500


def _to_http_response(result: StubResponse) -> Response:
    if result.is_json:
        return JSONResponse(content=result.body, status_code=result.status, headers=result.headers)
    return Response(content=result.body or "", status_code=result.status, headers=result.headers)


def _not_found_response(result: NotFound) -> JSONResponse:
    return JSONResponse(
        status_code=404,
        content={
            "message": "Request was not matched",
            "request": result.request.to_dict(),
            "closest_stub": result.closest,
        },
    )


def _admin_router(matcher: StubMatcher, journal: Deque[Dict[str, Any]]) -> APIRouter:
    router = APIRouter(prefix="/__admin", tags=["Stub Admin"])

    @router.get("/mappings")
    async def list_mappings():
        return {
            "mappings": [m.to_json_dict() for m in matcher.mappings],
            "meta": {"total": len(matcher.mappings)},
        }

    @router.get("/requests")
    async def list_requests():
        return {"requests": list(journal), "meta": {"total": len(journal)}}

    @router.post("/reset")
    async def reset_journal():
        journal.clear()
        return {"status": "reset"}

    @router.get("/health")
    async def health():
        return {"status": "UP", "mappings": len(matcher.mappings)}

    return router


def create_stub_app(
    mappings: Iterable[StubMapping],
    title: str = "Contract Stub Server",
    journal_size: int = DEFAULT_JOURNAL_SIZE,
) -> FastAPI:
    """Build a FastAPI app that answers requests from the given stub mappings."""
    matcher = StubMatcher(mappings)
    journal: Deque[Dict[str, Any]] = deque(maxlen=journal_size)
    error_handler = ErrorHandler()

    app = FastAPI(title=title, description="Serves stubs generated from consumer-driven contracts")
    app.state.matcher = matcher
    app.state.journal = journal

    app.include_router(_admin_router(matcher, journal))

    @app.exception_handler(Exception)
    async def unhandled_exception(request: Request, exc: Exception):
        payload = error_handler.handle_exception(exc, context={"method": request.method, "url": str(request.url)})
        return JSONResponse(status_code=500, content=payload)

    @app.api_route("/{full_path:path}", methods=ALL_METHODS, include_in_schema=False)
    async def serve_stub(request: Request, full_path: str):
        # Match on the path as sent, so percent-escapes in contract urls compare literally.
        raw_path = request.scope.get("raw_path", b"").decode("latin-1").split("?", 1)[0]
        stub_request = StubRequest(
            method=request.method,
            path=raw_path or request.url.path,
            query_string=request.url.query,
            headers=dict(request.headers),
            body=(await request.body()).decode("utf-8", errors="replace"),
        )
        result = matcher.match(stub_request)

        journal.append(
            {
                "method": stub_request.method,
                "url": stub_request.url,
                "matched": not isinstance(result, NotFound),
                "stub": None if isinstance(result, NotFound) else result.mapping_name,
                "logged_at": datetime.now(timezone.utc).isoformat(),
            }
        )

        if isinstance(result, NotFound):
            return _not_found_response(result)
        return _to_http_response(result)

    logger.info("Stub server ready with %d mapping(s)", len(matcher.mappings))
    return app
