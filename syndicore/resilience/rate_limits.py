"""Per-domain cool-downs and the derivation of their duration from response headers."""

import logging
import math
from email.utils import parsedate_to_datetime
from typing import Mapping, Optional, Union
from urllib.parse import urlparse

import httpx
import pendulum

from ..config import RateLimitConfig
from ..errors import InvalidUrlError, RateLimitError
from .store import TTLStore

logger = logging.getLogger(__name__)

RATE_LIMIT_PREFIX = "rate_limit:"
MAX_DELAY_SECONDS = 3600
DEFAULT_DELAY_MS = 60000
DELAY_BUFFER_SECONDS = 5

HeaderTypes = Union[httpx.Headers, Mapping[str, str]]


def domain_of(url: str) -> str:
    """
    Lower-cased hostname of ``url``.

    Raises:
        InvalidUrlError: The URL is relative or has no host.
    """
    try:
        hostname = urlparse(url).hostname
    except ValueError:
        hostname = None
    if not hostname:
        raise InvalidUrlError(url)
    return hostname


def _parse_int(value: str) -> Optional[int]:
    try:
        return int(value.strip())
    except ValueError:
        return None


def _seconds_until_http_date(value: str) -> Optional[int]:
    try:
        retry_at = parsedate_to_datetime(value)
    except (TypeError, ValueError):
        return None
    if retry_at is None:
        return None

    # Naive dates ("-0000" zone) are taken as UTC.
    seconds = (pendulum.instance(retry_at) - pendulum.now("UTC")).total_seconds()
    return max(0, math.floor(seconds))


def get_rate_limit_duration(
    headers: HeaderTypes,
    fallback_seconds: int,
    max_delay_seconds: int = MAX_DELAY_SECONDS,
) -> int:
    """
    Derive how long a domain should cool down from a rate-limited response.

    Precedence: ``retry-after`` (seconds or HTTP date), ``ratelimit-reset``
    (seconds), ``x-ratelimit-reset`` (Unix timestamp), then ``fallback_seconds``.
    A value that does not parse falls through to the next header. Every outcome
    is clamped to ``[0, max_delay_seconds]``.

    A negative ``retry-after`` counts as a date in the past and yields 0, while
    a negative ``ratelimit-reset`` is ignored and falls through.
    """
    headers = httpx.Headers(headers)

    def clamp(seconds: int) -> int:
        return min(max(0, seconds), max_delay_seconds)

    retry_after = headers.get("retry-after")
    if retry_after:
        seconds = _parse_int(retry_after)
        if seconds is not None:
            return clamp(seconds)

        seconds = _seconds_until_http_date(retry_after)
        if seconds is not None:
            return clamp(seconds)

    rate_limit_reset = headers.get("ratelimit-reset")
    if rate_limit_reset:
        seconds = _parse_int(rate_limit_reset)
        if seconds is not None and seconds >= 0:
            return clamp(seconds)

    reset_timestamp = headers.get("x-ratelimit-reset")
    if reset_timestamp:
        timestamp = _parse_int(reset_timestamp)
        if timestamp is not None:
            return clamp(timestamp - pendulum.now("UTC").int_timestamp)

    return clamp(fallback_seconds)


class RateLimiter:
    """Reads and writes domain cool-downs in a shared TTL store."""

    def __init__(
        self,
        store: TTLStore,
        key_prefix: str = RATE_LIMIT_PREFIX,
        max_delay_seconds: int = MAX_DELAY_SECONDS,
        default_delay_ms: int = DEFAULT_DELAY_MS,
        delay_buffer_seconds: int = DELAY_BUFFER_SECONDS,
    ) -> None:
        """Initialize rate limiter."""
        self.store = store
        self.key_prefix = key_prefix
        self.max_delay_seconds = max_delay_seconds
        self.default_delay_ms = default_delay_ms
        self.delay_buffer_seconds = delay_buffer_seconds

    @classmethod
    def from_config(cls, store: TTLStore, config: RateLimitConfig) -> "RateLimiter":
        """Create a rate limiter from the ``rate_limit`` config section."""
        return cls(
            store,
            key_prefix=config.key_prefix,
            max_delay_seconds=config.max_delay_seconds,
            default_delay_ms=config.default_delay_ms,
            delay_buffer_seconds=config.delay_buffer_seconds,
        )

    def key_for(self, url: str) -> str:
        """Store key of the domain ``url`` belongs to."""
        return f"{self.key_prefix}{domain_of(url)}"

    def get_rate_limit_duration(self, headers: HeaderTypes, fallback_seconds: int) -> int:
        """Header-derived cool-down, clamped to this limiter's maximum."""
        return get_rate_limit_duration(headers, fallback_seconds, self.max_delay_seconds)

    async def mark_rate_limited(self, url: str, duration_seconds: int) -> None:
        """Start a cool-down of ``duration_seconds`` for the domain of ``url``."""
        key = self.key_for(url)
        if duration_seconds <= 0:
            # Redis rejects a zero or negative expiry.
            logger.debug("Rate limit not stored for %s: duration %ss", key, duration_seconds)
            return

        logger.debug("Domain marked: %s for %ss (%s)", key, duration_seconds, url)
        await self.store.setex(key, int(duration_seconds), "1")

    async def check_rate_limit(self, url: str) -> None:
        """
        Raise if the domain of ``url`` is cooling down.

        Raises:
            RateLimitError: With reason ``"<domain> (cached)"``.
        """
        domain = domain_of(url)
        key = f"{self.key_prefix}{domain}"
        if await self.store.get(key):
            logger.debug(
                "Preflight blocked: %s, %ss remaining", url, await self.store.ttl(key)
            )
            raise RateLimitError(url, f"{domain} (cached)")

    async def remaining_seconds(self, url: str) -> int:
        """Seconds left on the domain's cool-down, 0 when there is none."""
        ttl = await self.store.ttl(self.key_for(url))
        return max(0, ttl)

    async def get_rate_limit_delay(self, url: str) -> int:
        """Milliseconds a retry of ``url`` should wait."""
        ttl = await self.store.ttl(self.key_for(url))
        if ttl > 0:
            return (ttl + self.delay_buffer_seconds) * 1000
        return self.default_delay_ms
