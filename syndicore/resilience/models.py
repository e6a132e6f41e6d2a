"""Data models for fetching."""

from typing import Dict, Optional

import httpx
from pydantic import BaseModel, Field

from ..parsers import ParsedFeedDocument


class FetchResponse(BaseModel):
    """HTTP response as seen by the pipeline steps."""

    url: str = Field(..., description="Final URL after redirects")
    status: int = Field(..., description="HTTP status code")
    headers: Dict[str, str] = Field(default_factory=dict, description="Response headers")
    text: str = Field("", description="Decoded response body")

    @classmethod
    def from_httpx(cls, response: httpx.Response) -> "FetchResponse":
        """Capture an httpx response."""
        return cls(
            url=str(response.url),
            status=response.status_code,
            headers=dict(response.headers),
            text=response.text,
        )

    @property
    def ok(self) -> bool:
        """Whether the status is 2xx."""
        return 200 <= self.status < 300

    @property
    def content_type(self) -> Optional[str]:
        return httpx.Headers(self.headers).get("content-type")


class FetchResult(BaseModel):
    """Result of fetching one feed."""

    url: str = Field(..., description="Requested feed URL")
    success: bool = Field(..., description="Whether fetch was successful")
    document: Optional[ParsedFeedDocument] = Field(None, description="Parsed feed")
    error: Optional[str] = Field(None, description="Error message if failed")
    retryable: bool = Field(False, description="Whether a scheduler should retry")
    retry_delay_ms: Optional[int] = Field(
        None, description="Suggested wait before retrying a rate-limited URL"
    )
    item_count: int = Field(0, description="Number of items fetched")
