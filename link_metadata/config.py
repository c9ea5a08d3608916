"""
Runtime configuration for the link metadata pipeline.

Values are read from the environment once, at import time. Timeouts are in
seconds and are independent of each other: a slow favicon probe never eats
into the page fetch budget.
"""

import logging
import os

logger = logging.getLogger(__name__)


def _env_float(name: str, default: float) -> float:
    raw = os.environ.get(name)
    if not raw:
        return default
    try:
        return float(raw)
    except ValueError:
        logger.warning("Ignoring non-numeric %s=%r, using %s", name, raw, default)
        return default


# Reader / summarization service
READER_BASE_URL = os.environ.get('READER_BASE_URL', 'https://r.jina.ai/')
READER_API_KEY = os.environ.get('READER_API_KEY')  # Optional: raises reader rate limits

# Timeouts
PAGE_FETCH_TIMEOUT = _env_float('PAGE_FETCH_TIMEOUT', 8.0)
FAVICON_PROBE_TIMEOUT = _env_float('FAVICON_PROBE_TIMEOUT', 3.0)
SUMMARIZER_TIMEOUT = _env_float('SUMMARIZER_TIMEOUT', 15.0)

USER_AGENT = os.environ.get(
    'USER_AGENT',
    'Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36 '
    '(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36'
)

BROWSER_HEADERS = {
    'User-Agent': USER_AGENT,
    'Accept': 'text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8',
    'Accept-Language': 'en-US,en;q=0.5',
    'Accept-Encoding': 'gzip, deflate',
    'DNT': '1',
    'Connection': 'keep-alive',
    'Upgrade-Insecure-Requests': '1',
}

if not READER_API_KEY:
    logger.info("READER_API_KEY not configured, using anonymous reader access")
