"""
Request identifiers carried across async boundaries.

Each HTTP request and each scene envelope taken off the transport runs under its own id, so the
log lines and telemetry events produced by one panel decision can be joined afterwards.
"""

from __future__ import annotations

import contextvars
import uuid
from contextlib import contextmanager
from typing import Iterator, Optional

_request_id: contextvars.ContextVar[str] = contextvars.ContextVar("scene_request_id", default="")


class ContextBridge:
    """Static accessors over the request-id context variable; an id is minted on first read."""

    @staticmethod
    def request_id() -> str:
        return _request_id.get() or ContextBridge.set_request_id()

    @staticmethod
    def set_request_id(value: Optional[str] = None) -> str:
        rid = value or uuid.uuid4().hex
        _request_id.set(rid)
        return rid

    @staticmethod
    @contextmanager
    def scope(value: Optional[str] = None) -> Iterator[str]:
        """Run a block under a fresh (or given) id and restore the previous one afterwards."""

        token = _request_id.set(value or uuid.uuid4().hex)
        try:
            yield _request_id.get()
        finally:
            _request_id.reset(token)

    @staticmethod
    def clear() -> None:
        _request_id.set("")


__all__ = ["ContextBridge"]
