"""
Error taxonomy for the link metadata pipeline.

Only InvalidUrl is meant to reach the user. Every other error is caught by
the stage that owns the fallback and recorded as a stage error:

    {'stage': 'fetch', 'message': 'HTTP error: 404', 'recoverable': False}

Recoverable means "worth retrying later": timeouts, connection problems,
rate limiting (429) and server errors (5xx).
"""

from typing import Optional


class LinkMetadataError(Exception):
    """Base class for all pipeline errors."""

    recoverable = True

    def to_record(self, stage: str) -> dict:
        return {
            'stage': stage,
            'message': str(self),
            'recoverable': self.recoverable,
        }


class InvalidUrl(LinkMetadataError, ValueError):
    """Malformed input or a scheme other than http/https."""

    recoverable = False


class FetchError(LinkMetadataError):
    """Transport-level failure (DNS, connection refused, TLS, redirects)."""


class FetchTimeout(FetchError):
    """A network call exceeded its own deadline."""

    def __init__(self, url: str, timeout: float):
        super().__init__(f'Request timed out after {timeout:g}s')
        self.url = url
        self.timeout = timeout


class HttpError(FetchError):
    """Non-success HTTP status from the target."""

    def __init__(self, status: int, reason: Optional[str] = None):
        message = f'HTTP error: {status}'
        if reason:
            message = f'{message} {reason}'
        super().__init__(message)
        self.status = status

    @property
    def recoverable(self) -> bool:
        return self.status == 429 or self.status >= 500


class UnsupportedContentType(FetchError):
    """Response is not an HTML document."""

    recoverable = False

    def __init__(self, content_type: str):
        super().__init__(f'Unsupported content type: {content_type or "missing"}')
        self.content_type = content_type


class SummarizerFailure(LinkMetadataError):
    """The reader service failed or returned an unexpected body."""


class ProbeFailure(LinkMetadataError):
    """A favicon candidate did not answer its HEAD probe."""
