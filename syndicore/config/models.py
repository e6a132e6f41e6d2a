"""Configuration models."""

from typing import Optional

from pydantic import BaseModel, Field


class RateLimitConfig(BaseModel):
    """Cool-down store configuration."""

    redis_url: str = Field("redis://localhost:6379/0", description="Redis connection URL")
    redis_url_env: Optional[str] = Field(
        "SYNDICORE_REDIS_URL", description="Environment variable overriding redis_url"
    )
    key_prefix: str = Field("rate_limit:", description="Prefix of per-domain cool-down keys")
    max_delay_seconds: int = Field(
        3600, description="Upper bound for any derived cool-down", ge=0
    )
    default_delay_ms: int = Field(
        60000, description="Retry delay when no cool-down is recorded", ge=0
    )
    delay_buffer_seconds: int = Field(
        5, description="Added to the remaining cool-down before retrying", ge=0
    )


class FetchConfig(BaseModel):
    """Outbound fetch configuration."""

    timeout: float = Field(20.0, description="Request timeout in seconds", gt=0)
    max_redirects: int = Field(5, description="Maximum redirects to follow", ge=0)
    user_agent: str = Field(
        "Mozilla/5.0 (compatible; syndicore/0.1; +https://github.com/syndicore)",
        description="User-Agent header sent with every request",
    )


class SanitizerConfig(BaseModel):
    """Which HTML ranges the sanitizer strips by default."""

    strip_scripts: bool = Field(True, description="Remove <script> blocks")
    strip_styles: bool = Field(True, description="Remove <style> blocks")
    strip_comments: bool = Field(True, description="Remove <!-- --> comments")


class ConfigModel(BaseModel):
    """Main configuration model."""

    rate_limit: RateLimitConfig = Field(default_factory=RateLimitConfig)
    fetch: FetchConfig = Field(default_factory=FetchConfig)
    sanitizer: SanitizerConfig = Field(default_factory=SanitizerConfig)
