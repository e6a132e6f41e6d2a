"""Fetch resilience: rate limits, guard detection and the fetch pipeline."""

from .fetcher import FeedFetcher
from .guards import (
    PAGE_SIGNATURES,
    RATE_LIMIT_SIGNATURES,
    URL_SIGNATURES,
    GuardSignature,
    RateLimitSignature,
    detect_guarded_page,
    detect_guarded_url,
)
from .models import FetchResponse, FetchResult
from .pipeline import FetchContext, Pipeline
from .rate_limits import RateLimiter, get_rate_limit_duration
from .steps import create_fetch_pipeline
from .store import TTLStore, create_store

__all__ = [
    "FeedFetcher",
    "FetchContext",
    "FetchResponse",
    "FetchResult",
    "GuardSignature",
    "PAGE_SIGNATURES",
    "Pipeline",
    "RATE_LIMIT_SIGNATURES",
    "RateLimitSignature",
    "RateLimiter",
    "TTLStore",
    "URL_SIGNATURES",
    "create_fetch_pipeline",
    "create_store",
    "detect_guarded_page",
    "detect_guarded_url",
    "get_rate_limit_duration",
]
