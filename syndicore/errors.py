"""Error taxonomy shared by the parsers and the fetch pipeline."""

from typing import Iterable, List, NamedTuple, Optional, Sequence, Union

from pydantic import ValidationError


class ValidationIssue(NamedTuple):
    """Single offending field in a strictly validated document."""

    path: str
    message: str


def format_path(loc: Sequence[Union[str, int]]) -> str:
    """Join a location tuple into a dotted path like ``items.0.id``."""
    return ".".join(str(part) for part in loc)


class SyndicoreError(Exception):
    """Base class for all errors raised by syndicore."""

    is_retryable = False


class FeedParseError(SyndicoreError):
    """Raised when a document cannot be read at all."""

    def __init__(self, message: str) -> None:
        super().__init__(f"Unreadable feed: {message}")


class FeedValidationError(SyndicoreError):
    """
    Raised by strict parsers when a document violates its format version.

    Never retryable: the same bytes fail the same way.
    """

    def __init__(self, issues: Iterable[ValidationIssue]) -> None:
        self.issues: List[ValidationIssue] = list(issues)
        details = "; ".join(
            f"{issue.path or '<root>'}: {issue.message}" for issue in self.issues
        )
        super().__init__(f"Invalid feed ({len(self.issues)} issues): {details}")

    @property
    def paths(self) -> List[str]:
        """Offending field paths in reporting order."""
        return [issue.path for issue in self.issues]

    @staticmethod
    def issues_from(
        error: ValidationError,
        prefix: Sequence[Union[str, int]] = (),
    ) -> List[ValidationIssue]:
        """Convert a pydantic error into issues rooted at ``prefix``."""
        return [
            ValidationIssue(format_path((*prefix, *item["loc"])), item["msg"])
            for item in error.errors()
        ]


class RateLimitError(SyndicoreError):
    """
    Raised when a domain is rate limited, either live or from the cool-down store.

    Should be retried after the backoff period.
    """

    is_retryable = True

    def __init__(self, url: str, reason: str = "Rate limited") -> None:
        self.url = url
        self.reason = reason
        super().__init__(f"{reason}: {url}")


class GuardedPageError(SyndicoreError):
    """Raised when a fetched page is a bot-defense wall (Cloudflare, reCAPTCHA...)."""

    def __init__(self, guard_type: str) -> None:
        self.guard_type = guard_type
        super().__init__(f"Guarded page, signature: {guard_type}")


class GuardedUrlError(SyndicoreError):
    """Raised when the requested URL itself points at a bot-defense challenge."""

    def __init__(self, guard_type: str) -> None:
        self.guard_type = guard_type
        super().__init__(f"Guarded URL, signature: {guard_type}")


class InvalidUrlError(SyndicoreError, ValueError):
    """Raised when a URL has no hostname to fetch or rate limit."""

    def __init__(self, url: str) -> None:
        self.url = url
        super().__init__(f"URL has no hostname: {url}")


class UnprocessedPipelineError(SyndicoreError):
    """Raised when no pipeline step produced a result or an error."""

    is_retryable = True

    def __init__(self, status: Optional[int] = None) -> None:
        self.status = status
        super().__init__(f"Unprocessed pipeline, HTTP code: {status or 'Unknown'}")


def describe_error(error: BaseException) -> str:
    """Render an error as ``Name: message`` for console output."""
    message = str(error)
    if not message:
        return type(error).__name__
    return f"{type(error).__name__}: {message}"


class ValidationResult(NamedTuple):
    """Outcome of a non-raising validation."""

    is_valid: bool
    error: Optional[FeedValidationError]
