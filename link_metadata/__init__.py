"""Link metadata extraction for the bookmarking service."""

from .errors import (
    LinkMetadataError,
    InvalidUrl,
    FetchError,
    FetchTimeout,
    HttpError,
    UnsupportedContentType,
    SummarizerFailure,
    ProbeFailure,
)

from .url_validation import validate_url, hostname_of

from .pipeline import (
    LinkMetadata,
    fetch_link_metadata,
    fetch_link_metadata_sync,
    fallback_metadata,
)

__all__ = [
    # Errors
    'LinkMetadataError',
    'InvalidUrl',
    'FetchError',
    'FetchTimeout',
    'HttpError',
    'UnsupportedContentType',
    'SummarizerFailure',
    'ProbeFailure',
    # Validation
    'validate_url',
    'hostname_of',
    # Pipeline
    'LinkMetadata',
    'fetch_link_metadata',
    'fetch_link_metadata_sync',
    'fallback_metadata',
]
