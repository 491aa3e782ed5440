from __future__ import annotations

"""Redis client helpers."""

import os
from functools import lru_cache
from typing import Optional

from redis.asyncio import Redis

__all__ = [
    "get_async_redis",
]


@lru_cache(maxsize=1)
def get_async_redis(url: Optional[str] = None) -> Redis:
    """Return a cached asyncio Redis client."""

    url = url or os.getenv("REDIS_URL")
    if not url:
        raise RuntimeError("REDIS_URL not configured")
    return Redis.from_url(url, decode_responses=True)
