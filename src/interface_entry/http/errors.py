from __future__ import annotations

"""Map HTTP and unexpected errors onto the response envelope."""

import logging
from typing import Any, Mapping

from fastapi import HTTPException, Request, status
from fastapi.responses import JSONResponse

from interface_entry.http.responses import ApiError, ApiMeta, ApiResponse

log = logging.getLogger("interface_entry.errors")


def error_response(status_code: int, error: ApiError) -> JSONResponse:
    body = ApiResponse[Any](data=None, meta=ApiMeta.current(), errors=[error])
    return JSONResponse(status_code=status_code, content=body.model_dump(by_alias=True))


def _as_error(detail: Any) -> ApiError:
    if isinstance(detail, Mapping):
        return ApiError(
            code=str(detail.get("code") or "HTTP_ERROR"),
            message=str(detail.get("message") or detail.get("detail") or "An error occurred"),
        )
    return ApiError(code="HTTP_ERROR", message=str(detail))


async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
    return error_response(exc.status_code, _as_error(exc.detail))


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    log.error(
        "http.unhandled_error",
        extra={"request_id": ApiMeta.current().request_id, "path": request.url.path, "error": repr(exc)},
    )
    return error_response(
        status.HTTP_500_INTERNAL_SERVER_ERROR,
        ApiError(code="INTERNAL_ERROR", message="Unexpected server error"),
    )


__all__ = ["error_response", "http_exception_handler", "unhandled_exception_handler"]
