"""
Title and favicon extraction.

Both are fallback chains: an ordered tuple of small strategies over the
parsed page, tried in sequence until one yields a usable value. The favicon
chain adds a HEAD probe so only reachable icons are returned.
"""

import logging
import re
from typing import Callable, List, Optional, Union
from urllib.parse import urljoin, urlparse

from bs4 import BeautifulSoup

from .fetcher import probe_url
from .text_utils import truncate_title
from .url_validation import ALLOWED_SCHEMES, hostname_of

logger = logging.getLogger(__name__)

# Precedence order for <link rel="..."> icons
ICON_RELS = ('icon', 'shortcut icon', 'apple-touch-icon')
DEFAULT_FAVICON_PATH = '/favicon.ico'


def parse_html(markup: Union[str, bytes], encoding: Optional[str] = None) -> BeautifulSoup:
    """
    Parse a page. Bytes with no `encoding` are decoded from the document's
    own <meta charset>, falling back to BeautifulSoup's detection.
    """
    if isinstance(markup, bytes) and encoding:
        return BeautifulSoup(markup, 'html.parser', from_encoding=encoding)
    return BeautifulSoup(markup or '', 'html.parser')


def meta_content(soup: BeautifulSoup, key: str) -> Optional[str]:
    """
    Content of the first <meta> whose property or name equals `key`
    (case-insensitive). Empty content counts as missing.
    """
    if soup is None:
        return None

    pattern = re.compile(rf'^\s*{re.escape(key)}\s*$', re.I)
    for attr in ('property', 'name'):
        for tag in soup.find_all('meta', attrs={attr: pattern, 'content': True}):
            content = tag.get('content', '').strip()
            if content:
                return content
    return None


# ============================================================================
# Title
# ============================================================================

def _og_title(soup: BeautifulSoup) -> Optional[str]:
    return meta_content(soup, 'og:title')


def _twitter_title(soup: BeautifulSoup) -> Optional[str]:
    return meta_content(soup, 'twitter:title')


def _is_document_title(tag) -> bool:
    # <svg><title> is an image caption, not the page title
    return tag.name == 'title' and tag.find_parent('svg') is None


def _title_tag(soup: BeautifulSoup) -> Optional[str]:
    tag = soup.head.title if soup.head else None
    if tag is None or not _is_document_title(tag):
        tag = soup.find(_is_document_title)
    return tag.get_text() if tag else None


TITLE_STRATEGIES: tuple = (_og_title, _twitter_title, _title_tag)


def extract_title(soup: BeautifulSoup, page_url: str) -> str:
    """
    Best title for the page: og:title, twitter:title, <title>, then hostname.

    Whitespace is collapsed and the result is cut to 200 characters.
    Never returns an empty string.
    """
    if soup is not None:
        for strategy in TITLE_STRATEGIES:
            title, was_truncated = truncate_title(strategy(soup))
            if title:
                if was_truncated:
                    logger.debug("Title truncated for %s", page_url)
                return title

    title, _ = truncate_title(hostname_of(page_url) or page_url)
    return title


# ============================================================================
# Favicon
# ============================================================================

def _rel_of(tag) -> str:
    rel = tag.get('rel')
    if isinstance(rel, list):
        rel = ' '.join(rel)
    return (rel or '').strip().lower()


def _icon_href(soup: BeautifulSoup, rel_value: str) -> Optional[str]:
    for link in soup.find_all('link', href=True):
        if _rel_of(link) == rel_value:
            href = link['href'].strip()
            if href:
                return href
    return None


def _absolute_http_url(href: str, page_url: str) -> Optional[str]:
    try:
        url = urljoin(page_url, href)
        scheme = urlparse(url).scheme.lower()
    except ValueError:
        # e.g. an unbalanced IPv6 bracket in the href
        logger.debug("Skipping malformed icon href %r", href)
        return None
    if scheme not in ALLOWED_SCHEMES:
        return None
    return url


def favicon_candidates(soup: BeautifulSoup, page_url: str) -> List[str]:
    """
    Absolute icon URLs in precedence order, /favicon.ico last.

    Non-http(s) references (data: URIs and the like) are dropped, and each
    URL appears at most once.
    """
    candidates = []

    if soup is not None:
        for rel_value in ICON_RELS:
            href = _icon_href(soup, rel_value)
            if href:
                url = _absolute_http_url(href, page_url)
                if url:
                    candidates.append(url)

    default_icon = _absolute_http_url(DEFAULT_FAVICON_PATH, page_url)
    if default_icon:
        candidates.append(default_icon)

    # Keep first occurrence only
    return list(dict.fromkeys(candidates))


async def extract_favicon(soup: BeautifulSoup, page_url: str,
                          probe: Callable = probe_url) -> Optional[str]:
    """
    Probe candidates in order and return the first that answers, or None.

    Any error while checking one candidate only rules out that candidate.
    """
    for candidate in favicon_candidates(soup, page_url):
        try:
            await probe(candidate)
            return candidate
        except Exception as e:
            logger.debug("Favicon check failed for %s: %s", candidate, e)

    return None
