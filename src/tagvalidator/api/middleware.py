"""Middleware: request timing and body size limits."""

from __future__ import annotations

import time

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import JSONResponse, Response

_DOCUMENT_PATHS = ("/validate", "/fix", "/jobs")
_MAX_BODY_DOCUMENT = 10 * 1024 * 1024  # 10 MB for document uploads
_MAX_BODY_DEFAULT = 1 * 1024 * 1024  # 1 MB for everything else


class RequestTimingMiddleware(BaseHTTPMiddleware):
    """Add X-Request-Duration-Ms header with processing time."""

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        start = time.monotonic()
        response = await call_next(request)
        duration_ms = (time.monotonic() - start) * 1000
        response.headers["X-Request-Duration-Ms"] = f"{duration_ms:.1f}"
        return response


class RequestBodyLimitMiddleware(BaseHTTPMiddleware):
    """Reject request bodies that exceed size limits.

    Document endpoints (validate, fix, job submission) allow up to 10 MB;
    all other endpoints are capped at 1 MB.

    The Content-Length header is checked first; the body is then streamed
    and the request aborted as soon as the limit is exceeded.  Consumed
    bytes are cached on ``request._body`` so downstream handlers can still
    read the body.
    """

    def __init__(
        self,
        app: object,
        max_document_bytes: int = _MAX_BODY_DOCUMENT,
        max_default_bytes: int = _MAX_BODY_DEFAULT,
    ) -> None:
        super().__init__(app)  # type: ignore[arg-type]
        self.max_document_bytes = max_document_bytes
        self.max_default_bytes = max_default_bytes

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        path = request.url.path
        limit = (
            self.max_document_bytes if path.endswith(_DOCUMENT_PATHS) else self.max_default_bytes
        )
        detail = f"Request body too large (max {limit:,} bytes)"

        content_length = request.headers.get("content-length", "")
        if content_length.isdigit() and int(content_length) > limit:
            return JSONResponse(status_code=413, content={"detail": detail})

        if request.method in ("POST", "PUT", "PATCH"):
            chunks: list[bytes] = []
            total = 0
            async for chunk in request.stream():
                total += len(chunk)
                if total > limit:
                    return JSONResponse(status_code=413, content={"detail": detail})
                chunks.append(chunk)
            request._body = b"".join(chunks)  # noqa: SLF001

        return await call_next(request)
