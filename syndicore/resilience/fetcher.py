"""Feed fetcher running every URL through the fetch pipeline."""

import asyncio
import logging
from typing import List, Optional

import httpx

from ..config import FetchConfig
from ..errors import RateLimitError, SyndicoreError, describe_error
from ..parsers import ParsedFeedDocument
from .models import FetchResult
from .pipeline import FetchContext
from .rate_limits import RateLimiter
from .steps import create_fetch_pipeline

logger = logging.getLogger(__name__)


class FeedFetcher:
    """Fetch and parse feeds behind rate-limit and guard checks."""

    def __init__(
        self,
        limiter: RateLimiter,
        config: Optional[FetchConfig] = None,
        max_concurrent: int = 5,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        """Initialize feed fetcher."""
        self.limiter = limiter
        self.config = config or FetchConfig()
        self.max_concurrent = max_concurrent
        self.transport = transport

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            timeout=self.config.timeout,
            follow_redirects=True,
            max_redirects=self.config.max_redirects,
            headers={"User-Agent": self.config.user_agent},
            transport=self.transport,
        )

    async def fetch_feed(self, url: str) -> ParsedFeedDocument:
        """
        Fetch and parse a single feed.

        Raises:
            RateLimitError: The domain is cooling down or just rate limited us.
            GuardedPageError, GuardedUrlError: A bot-defense wall answered.
            FeedParseError: The body is not a readable RSS or JSON feed.
            InvalidUrlError: The URL has no hostname.
            UnprocessedPipelineError: A non-2xx response nothing else explained.
            httpx.HTTPError: Transport failures, unchanged.
        """
        async with self._client() as client:
            pipeline = create_fetch_pipeline(self.limiter, client, self.config.max_redirects)
            return await pipeline.run(FetchContext(url))

    async def fetch_result(self, url: str) -> FetchResult:
        """Fetch a feed, reporting failures in the result instead of raising."""
        try:
            document = await self.fetch_feed(url)
        except RateLimitError as e:
            return FetchResult(
                url=url,
                success=False,
                error=describe_error(e),
                retryable=True,
                retry_delay_ms=await self.limiter.get_rate_limit_delay(url),
            )
        except SyndicoreError as e:
            return FetchResult(
                url=url, success=False, error=describe_error(e), retryable=e.is_retryable
            )
        except httpx.HTTPError as e:
            return FetchResult(url=url, success=False, error=describe_error(e), retryable=True)

        return FetchResult(url=url, success=True, document=document, item_count=document.item_count)

    async def fetch_all_feeds(self, urls: List[str]) -> List[FetchResult]:
        """Fetch all feeds concurrently."""
        if not urls:
            return []

        semaphore = asyncio.Semaphore(self.max_concurrent)

        async def fetch_with_semaphore(url: str) -> FetchResult:
            async with semaphore:
                return await self.fetch_result(url)

        return await asyncio.gather(*(fetch_with_semaphore(url) for url in urls))

    def fetch_feed_sync(self, url: str) -> ParsedFeedDocument:
        """Synchronous wrapper for fetch_feed."""
        return asyncio.run(self.fetch_feed(url))

    def fetch_feeds_sync(self, urls: List[str]) -> List[FetchResult]:
        """Synchronous wrapper for fetch_all_feeds."""
        return asyncio.run(self.fetch_all_feeds(urls))
