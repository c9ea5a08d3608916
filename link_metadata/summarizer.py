"""
Summary generation.

Primary source is an external reader service that turns a page into clean
text. It is a third-party dependency, so any failure there drops to the
page's own meta description, and from there to a placeholder.
"""

import logging
import re
from typing import Optional
from urllib.parse import quote

from bs4 import BeautifulSoup

from . import config
from .errors import FetchError, SummarizerFailure
from .extractor import meta_content
from .fetcher import get_json
from .text_utils import MAX_DESCRIPTION_LENGTH, MAX_SUMMARY_LENGTH, clip, collapse_whitespace

logger = logging.getLogger(__name__)

NO_SUMMARY_PLACEHOLDER = 'No summary available'

# Reader content at or under this length is used as-is
VERBATIM_CONTENT_LENGTH = 400

# A sentence is a run of text closed by ., ! or ?
_SENTENCE = re.compile(r'[^.!?]+[.!?]+')

# Characters encodeURIComponent leaves alone besides alphanumerics and -_.~
_URI_COMPONENT_SAFE = "!*'()"


def reader_url(url: str) -> str:
    return config.READER_BASE_URL + quote(url, safe=_URI_COMPONENT_SAFE)


def reader_headers() -> dict:
    headers = {
        'Accept': 'application/json',
        'X-With-Generated-Alt': 'true',
        'X-Retain-Images': 'none',
    }
    if config.READER_API_KEY:
        headers['Authorization'] = f'Bearer {config.READER_API_KEY}'
    return headers


def condense_content(content: str, limit: int = MAX_SUMMARY_LENGTH) -> str:
    """
    Turn reader content into a short summary.

    Content up to 400 characters is returned as-is (whitespace collapsed).
    Longer content keeps as many leading whole sentences as fit in `limit`
    characters; if not even the first sentence fits, it is hard-cut to
    `limit` characters plus an ellipsis.
    """
    content = collapse_whitespace(content)
    if len(content) <= VERBATIM_CONTENT_LENGTH:
        return content

    summary = ''
    for match in _SENTENCE.finditer(content):
        sentence = match.group().strip()
        candidate = f'{summary} {sentence}' if summary else sentence
        if len(candidate) > limit:
            break
        summary = candidate

    return summary or clip(content, limit)


async def fetch_reader_content(url: str, timeout: Optional[float] = None) -> str:
    """Raw content for `url` from the reader service. Raises SummarizerFailure."""
    timeout = config.SUMMARIZER_TIMEOUT if timeout is None else timeout

    try:
        payload = await get_json(reader_url(url), reader_headers(), timeout)
    except FetchError as e:
        raise SummarizerFailure(f'Reader request failed: {e}') from e

    data = payload.get('data') if isinstance(payload, dict) else None
    content = data.get('content') if isinstance(data, dict) else None
    if not isinstance(content, str) or not content.strip():
        raise SummarizerFailure('Reader response has no data.content')

    return content


def description_fallback(soup: BeautifulSoup) -> Optional[str]:
    """og:description or description meta content, cut to 300 characters."""
    description = meta_content(soup, 'og:description') or meta_content(soup, 'description')
    description = collapse_whitespace(description)
    if not description:
        return None
    return clip(description, MAX_DESCRIPTION_LENGTH)


async def summarize(url: str, soup: BeautifulSoup, errors: Optional[list] = None) -> str:
    """
    Summary for `url`: reader service, then meta description, then placeholder.

    Never raises. When `errors` is given, a reader failure is appended to it
    as a stage error record.
    """
    try:
        content = await fetch_reader_content(url)
        return condense_content(content)
    except SummarizerFailure as e:
        logger.warning("Failed to generate summary with reader for %s: %s", url, e)
        if errors is not None:
            errors.append(e.to_record('summary'))

    return description_fallback(soup) or NO_SUMMARY_PLACEHOLDER
