"""Per-request context for the scene panel HTTP surface."""

from __future__ import annotations

from time import perf_counter
from typing import Awaitable, Callable

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

from project_utility.context import ContextBridge
from project_utility.telemetry import emit as telemetry_emit

REQUEST_ID_HEADER = "x-request-id"


class RequestContextMiddleware(BaseHTTPMiddleware):
    """Run each request under the caller's `x-request-id` (or a fresh one) and echo it back.

    Emits one `http.request` telemetry event with status and latency per request.
    """

    async def dispatch(
        self,
        request: Request,
        call_next: Callable[[Request], Awaitable[Response]],
    ) -> Response:
        started = perf_counter()
        status_code = 500
        with ContextBridge.scope(request.headers.get(REQUEST_ID_HEADER)) as request_id:
            try:
                response = await call_next(request)
                status_code = response.status_code
                response.headers[REQUEST_ID_HEADER] = request_id
                return response
            finally:
                telemetry_emit(
                    "http.request",
                    level="debug",
                    request_id=request_id,
                    path=request.url.path,
                    method=request.method,
                    payload={
                        "status_code": status_code,
                        "latency_ms": round((perf_counter() - started) * 1000, 3),
                    },
                )


__all__ = ["REQUEST_ID_HEADER", "RequestContextMiddleware"]
