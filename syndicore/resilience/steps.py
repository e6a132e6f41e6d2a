"""Pipeline steps guarding an outbound feed fetch."""

import logging
from typing import Any, Awaitable, Callable
from urllib.parse import urljoin

import httpx

from ..content import extract_redirect_url
from ..errors import GuardedPageError, GuardedUrlError, RateLimitError
from ..parsers import detect_format
from ..parsers import parse_feed as parse_feed_body
from .guards import detect_guarded_page, detect_guarded_url, detect_rate_limited
from .models import FetchResponse
from .pipeline import FetchContext, Next, Pipeline, Step
from .rate_limits import RateLimiter, domain_of

logger = logging.getLogger(__name__)


def preflight_rate_limit(limiter: RateLimiter) -> Step:
    """Abort before fetching when the URL's domain is cooling down."""

    async def step(context: FetchContext, next_step: Next) -> None:
        if context.result is None:
            await limiter.check_rate_limit(context.url)
        await next_step()

    return step


def response_fetch(client: httpx.AsyncClient) -> Step:
    """
    GET the URL into ``context.response``.

    Transport failures are stored in ``context.error`` unchanged so later steps
    can run and the caller's retry policy sees the original exception.
    """

    async def step(context: FetchContext, next_step: Next) -> None:
        if context.result is None and context.response is None:
            try:
                response = await client.get(context.url)
                context.response = FetchResponse.from_httpx(response)
            except httpx.HTTPError as e:
                logger.debug("Fetch failed for %s: %s", context.url, e)
                context.error = e
        await next_step()

    return step


def guarded_page() -> Step:
    """Raise a terminal error when the URL or the page is a bot-defense wall."""

    async def step(context: FetchContext, next_step: Next) -> None:
        if context.result is None:
            signature = detect_guarded_url(context.url)
            if signature is None and context.response is not None:
                signature = detect_guarded_url(context.response.url)
            if signature is not None:
                raise GuardedUrlError(signature.name)

            if context.response is not None:
                signature = detect_guarded_page(context.response.text, context.response.status)
                if signature is not None:
                    raise GuardedPageError(signature.name)
        await next_step()

    return step


def rate_limited_page(limiter: RateLimiter) -> Step:
    """Record a cool-down and raise when the response says the domain is rate limited."""

    async def step(context: FetchContext, next_step: Next) -> None:
        response = context.response
        if context.result is None and response is not None:
            signature = detect_rate_limited(response.status, domain_of(response.url))
            if signature is not None:
                duration = limiter.get_rate_limit_duration(
                    response.headers, signature.fallback_seconds
                )
                await limiter.mark_rate_limited(response.url, duration)
                raise RateLimitError(response.url, signature.name)
        await next_step()

    return step


def redirect_page(
    follow: Callable[[FetchContext], Awaitable[Any]], max_redirects: int = 5
) -> Step:
    """
    Follow a ``<meta http-equiv="refresh">`` interstitial.

    A 2xx page that is not a feed but names a refresh target is fetched again
    by running ``follow`` on a fresh context for the target. Redirects back to
    the same URL, and chains longer than ``max_redirects``, are not followed.
    """

    async def step(context: FetchContext, next_step: Next) -> None:
        response = context.response
        if (
            context.result is None
            and response is not None
            and response.ok
            and detect_format(response.text) is None
        ):
            target = extract_redirect_url(response.text)
            if target is not None:
                target = urljoin(response.url, target)
                if target in (context.url, response.url):
                    logger.debug("Ignoring self redirect on %s", response.url)
                elif context.redirects >= max_redirects:
                    logger.debug("Too many page redirects, stopping at %s", response.url)
                else:
                    logger.debug("Page redirect: %s -> %s", response.url, target)
                    context.result = await follow(
                        FetchContext(target, redirects=context.redirects + 1)
                    )
        await next_step()

    return step


def parse_feed() -> Step:
    """Parse a successful response into ``context.result``."""

    async def step(context: FetchContext, next_step: Next) -> None:
        response = context.response
        if context.result is None and response is not None and response.ok:
            context.result = parse_feed_body(response.text, response.content_type)
        await next_step()

    return step


def create_fetch_pipeline(
    limiter: RateLimiter, client: httpx.AsyncClient, max_redirects: int = 5
) -> Pipeline:
    """Default step order for fetching a feed."""
    pipeline = Pipeline([])
    pipeline.steps.extend(
        [
            preflight_rate_limit(limiter),
            response_fetch(client),
            guarded_page(),
            rate_limited_page(limiter),
            redirect_page(pipeline.run, max_redirects),
            parse_feed(),
        ]
    )
    return pipeline
