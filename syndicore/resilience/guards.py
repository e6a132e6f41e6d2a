"""Signatures of bot-defense walls and rate-limited responses."""

from typing import Optional, Sequence, Tuple

from pydantic import BaseModel, ConfigDict, Field


class GuardSignature(BaseModel):
    """Text that identifies a bot-defense wall, optionally tied to a status code."""

    model_config = ConfigDict(frozen=True)

    name: str = Field(..., description="Name reported in the raised error")
    text: str = Field(..., description="Substring searched for in the body or URL")
    status: Optional[int] = Field(None, description="Required HTTP status, None for any")

    def matches(self, text: str, status: Optional[int] = None) -> bool:
        """Whether ``text`` contains the signature and ``status`` agrees."""
        if self.status is not None and self.status != status:
            return False
        return self.text in text


class RateLimitSignature(BaseModel):
    """Status code (and optionally domain) that marks a response as rate limited."""

    model_config = ConfigDict(frozen=True)

    name: str
    status: int
    domain: Optional[str] = Field(None, description="Hostname or parent domain, None for any")
    fallback_seconds: int = Field(..., description="Cool-down when no header says otherwise")

    def matches(self, status: int, hostname: str) -> bool:
        if status != self.status:
            return False
        if self.domain is None:
            return True
        return hostname == self.domain or hostname.endswith(f".{self.domain}")


PAGE_SIGNATURES: Tuple[GuardSignature, ...] = (
    # https://www.siteground.co.uk/kb/seeing-captcha-website/
    GuardSignature(name="SiteGround", text=".well-known/sgcaptcha", status=202),
    GuardSignature(name="SiteGround", text=".well-known/captcha", status=202),
    # Served with "server: cloudflare".
    GuardSignature(name="Cloudflare", text="<title>Just a moment...</title>", status=403),
    # LiteSpeed / Hostinger reCAPTCHA interstitial.
    GuardSignature(name="Unknown", text=".lsrecap/recaptcha", status=200),
    GuardSignature(name="Unknown", text="https://www.recaptcha.net", status=200),
    GuardSignature(name="Unknown", text="Verifying that you are not a robot...", status=200),
)

URL_SIGNATURES: Tuple[GuardSignature, ...] = (
    GuardSignature(name="SiteGround", text=".well-known/sgcaptcha"),
    GuardSignature(name="SiteGround", text=".well-known/captcha"),
    GuardSignature(name="Cloudflare", text="/cdn-cgi/challenge-platform"),
    GuardSignature(name="Unknown", text=".lsrecap/recaptcha"),
)

RATE_LIMIT_SIGNATURES: Tuple[RateLimitSignature, ...] = (
    RateLimitSignature(name="Rate limit", status=429, fallback_seconds=300),
    RateLimitSignature(name="GitHub", status=403, domain="github.com", fallback_seconds=600),
    RateLimitSignature(name="GitHub", status=403, domain="github.io", fallback_seconds=600),
)


def detect_guarded_page(
    text: str,
    status: int,
    signatures: Sequence[GuardSignature] = PAGE_SIGNATURES,
) -> Optional[GuardSignature]:
    """First signature matching a response body and status, if any."""
    for signature in signatures:
        if signature.matches(text, status):
            return signature
    return None


def detect_guarded_url(
    url: str,
    signatures: Sequence[GuardSignature] = URL_SIGNATURES,
) -> Optional[GuardSignature]:
    """First signature found in a URL, if any."""
    for signature in signatures:
        if signature.matches(url):
            return signature
    return None


def detect_rate_limited(
    status: int,
    hostname: str,
    signatures: Sequence[RateLimitSignature] = RATE_LIMIT_SIGNATURES,
) -> Optional[RateLimitSignature]:
    """First rate-limit signature matching a response, if any."""
    for signature in signatures:
        if signature.matches(status, hostname):
            return signature
    return None
