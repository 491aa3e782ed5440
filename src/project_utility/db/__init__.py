"""Database client helpers."""

from __future__ import annotations

from .redis import get_async_redis

__all__ = ["get_async_redis"]
