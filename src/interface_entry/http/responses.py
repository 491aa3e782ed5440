from __future__ import annotations

"""`{data, meta, errors}` envelope returned by every JSON route."""

from typing import Generic, List, Optional, TypeVar

from pydantic import BaseModel, ConfigDict, Field

from project_utility.context import ContextBridge

T = TypeVar("T")


class ApiMeta(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    request_id: str = Field(alias="requestId")
    warnings: List[str] = Field(default_factory=list)

    @classmethod
    def current(cls) -> "ApiMeta":
        return cls(requestId=ContextBridge.request_id())  # type: ignore[call-arg]


class ApiError(BaseModel):
    code: str
    message: str


class ApiResponse(BaseModel, Generic[T]):
    model_config = ConfigDict(populate_by_name=True)

    data: Optional[T]
    meta: ApiMeta
    errors: List[ApiError] = Field(default_factory=list)


def ok(data: T) -> ApiResponse[T]:
    return ApiResponse(data=data, meta=ApiMeta.current())


__all__ = ["ApiError", "ApiMeta", "ApiResponse", "ok"]
