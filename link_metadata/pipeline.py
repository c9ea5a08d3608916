"""
Link metadata pipeline.

    validate -> fetch -> parse -> {title, favicon, summary} -> LinkMetadata

fetch_link_metadata() is the entry point used when a bookmark is added. It
never raises: validation and fetch failures produce a hostname-only record,
and every later stage degrades on its own without affecting the others.
"""

import asyncio
import logging
from dataclasses import dataclass, field
from typing import List, Optional

from .errors import FetchError, InvalidUrl
from .extractor import extract_favicon, extract_title, parse_html
from .fetcher import fetch_page
from .summarizer import NO_SUMMARY_PLACEHOLDER, summarize
from .text_utils import truncate_title
from .url_validation import hostname_of, validate_url

logger = logging.getLogger(__name__)

UNABLE_TO_SUMMARIZE = 'Unable to generate summary for this link.'
FAILED_TO_PROCESS = 'Failed to process this link.'
INVALID_URL_TITLE = 'Invalid URL'


@dataclass
class LinkMetadata:
    title: str
    favicon: Optional[str]
    summary: str
    errors: List[dict] = field(default_factory=list)

    def to_dict(self) -> dict:
        data = {
            'title': self.title,
            'favicon': self.favicon,
            'summary': self.summary,
        }
        if self.errors:
            data['errors'] = list(self.errors)
        return data


def fallback_metadata(url: str, error: Optional[dict] = None) -> LinkMetadata:
    """Metadata derivable from the raw URL alone."""
    errors = [error] if error else []
    host = hostname_of(url) if isinstance(url, str) else None

    if not host:
        return LinkMetadata(INVALID_URL_TITLE, None, FAILED_TO_PROCESS, errors)

    title, _ = truncate_title(host)
    return LinkMetadata(title, None, UNABLE_TO_SUMMARIZE, errors)


async def _assemble(url: str) -> LinkMetadata:
    url = validate_url(url)
    page = await fetch_page(url)
    soup = parse_html(page.content, page.encoding)

    errors = []
    title = extract_title(soup, url)

    # Favicon probes and the reader call run side by side, each on its own timer
    favicon, summary = await asyncio.gather(
        extract_favicon(soup, page.url),
        summarize(url, soup, errors),
        return_exceptions=True,
    )

    if isinstance(favicon, Exception):
        logger.warning("Favicon extraction failed for %s: %s", url, favicon)
        errors.append({'stage': 'favicon', 'message': str(favicon), 'recoverable': True})
        favicon = None

    if isinstance(summary, Exception):
        logger.warning("Summary generation failed for %s: %s", url, summary)
        errors.append({'stage': 'summary', 'message': str(summary), 'recoverable': True})
        summary = NO_SUMMARY_PLACEHOLDER

    return LinkMetadata(title=title, favicon=favicon, summary=summary, errors=errors)


async def fetch_link_metadata(url: str) -> LinkMetadata:
    """
    Fetch a page and build its bookmark metadata.

    Always returns a LinkMetadata with a non-empty title and summary.
    """
    try:
        return await _assemble(url)
    except InvalidUrl as e:
        logger.info("Rejected URL %r: %s", url, e)
        return fallback_metadata(url, e.to_record('validation'))
    except FetchError as e:
        logger.warning("Error fetching bookmark metadata for %s: %s", url, e)
        return fallback_metadata(url, e.to_record('fetch'))
    except Exception as e:
        logger.exception("Unexpected error building metadata for %s", url)
        return fallback_metadata(url, {
            'stage': 'processing',
            'message': str(e),
            'recoverable': False,
        })


def fetch_link_metadata_sync(url: str) -> LinkMetadata:
    """Blocking wrapper for callers without an event loop."""
    return asyncio.run(fetch_link_metadata(url))
