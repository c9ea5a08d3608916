"""URL validation: the single hard gate before any network call."""

from typing import Optional
from urllib.parse import urlparse

from .errors import InvalidUrl

ALLOWED_SCHEMES = ('http', 'https')


def validate_url(raw_url: str) -> str:
    """
    Validate a user-supplied URL and return it trimmed.

    Raises InvalidUrl for empty input, unparsable URLs, schemes other than
    http/https, or URLs without a host.

    Examples:
        >>> validate_url('  https://example.com/page ')
        'https://example.com/page'
    """
    if not isinstance(raw_url, str) or not raw_url.strip():
        raise InvalidUrl('URL is required')

    url = raw_url.strip()

    try:
        parsed = urlparse(url)
        # Accessing port validates it (raises ValueError for junk like :abc)
        parsed.port
    except ValueError:
        raise InvalidUrl('Please enter a valid URL')

    if not parsed.scheme:
        raise InvalidUrl('Please enter a valid URL')

    if parsed.scheme.lower() not in ALLOWED_SCHEMES:
        raise InvalidUrl('Please enter a valid HTTP or HTTPS URL')

    if not parsed.hostname:
        raise InvalidUrl('Please enter a valid URL')

    return url


def hostname_of(url: str) -> Optional[str]:
    """Best-effort hostname for fallbacks. Never raises."""
    try:
        return urlparse(url.strip()).hostname or None
    except (AttributeError, ValueError):
        return None
