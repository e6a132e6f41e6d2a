"""TTL store holding the per-domain cool-down ledger."""

from typing import Any, Optional, Protocol

import redis.asyncio as redis


class TTLStore(Protocol):
    """The three operations the rate limiter needs, as exposed by ``redis.asyncio.Redis``."""

    async def get(self, name: str) -> Optional[str]:
        ...

    async def setex(self, name: str, time: int, value: str) -> Any:
        ...

    async def ttl(self, name: str) -> int:
        ...


def create_store(url: str) -> redis.Redis:
    """Open a Redis client for ``url``, e.g. ``redis://localhost:6379/0``."""
    return redis.Redis.from_url(url, decode_responses=True)
