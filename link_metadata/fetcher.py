"""
Page fetcher and favicon liveness probe.

requests is blocking, so every call runs in a worker thread and is bounded
by its own asyncio.wait_for timer. requests' own timeout only limits a single
socket read, so the worker also streams the body against a total deadline
and closes the connection once it passes. Workers come from a module pool
rather than the loop's default executor, so asyncio.run() never waits on a
call that has already timed out. Timers are per call: nothing here is
shared between invocations.
"""

import asyncio
import functools
import json
import logging
import time
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import Optional, Tuple

import requests
import urllib3

from .config import BROWSER_HEADERS, FAVICON_PROBE_TIMEOUT, PAGE_FETCH_TIMEOUT, USER_AGENT
from .errors import FetchError, FetchTimeout, HttpError, ProbeFailure, UnsupportedContentType

logger = logging.getLogger(__name__)

HTML_CONTENT_TYPES = ('text/html', 'application/xhtml+xml')

# Upper bound for one socket read while streaming a body
READ_CHUNK_SIZE = 64 * 1024

_executor = ThreadPoolExecutor(max_workers=32, thread_name_prefix='link-metadata-http')


@dataclass
class FetchedPage:
    content: bytes
    content_type: str
    url: str  # Final URL after redirects
    encoding: Optional[str] = None  # Charset from the Content-Type header, if any


def is_html_content_type(content_type: str) -> bool:
    """True if a Content-Type header value denotes an HTML document."""
    if not content_type:
        return False
    media_type = content_type.split(';', 1)[0].strip().lower()
    return media_type in HTML_CONTENT_TYPES


def is_success_status(status_code: int) -> bool:
    return 200 <= status_code < 300


def header_charset(response: requests.Response) -> Optional[str]:
    """Charset declared in Content-Type, or None so the document can say."""
    content_type = response.headers.get('Content-Type', '')
    if 'charset=' not in content_type.lower():
        return None
    return response.encoding


def _request(method, url: str, timeout: float, **kwargs) -> Tuple[requests.Response, bytes]:
    """
    Blocking request with a total deadline of `timeout` seconds.

    The body is read one socket read at a time so a server that trickles
    bytes cannot hold the worker past the deadline.
    """
    deadline = time.monotonic() + timeout
    with method(url, timeout=timeout, stream=True, **kwargs) as response:
        chunks = []
        while True:
            if time.monotonic() > deadline:
                logger.debug("Deadline passed while reading %s, closing connection", url)
                raise FetchTimeout(url, timeout)
            chunk = response.raw.read1(READ_CHUNK_SIZE, decode_content=True)
            if not chunk:
                break
            chunks.append(chunk)
        return response, b''.join(chunks)


async def _send(method, url: str, timeout: float, **kwargs) -> Tuple[requests.Response, bytes]:
    """Run a blocking requests call in a worker thread under its own deadline."""
    loop = asyncio.get_running_loop()
    call = functools.partial(_request, method, url, timeout, **kwargs)
    try:
        return await asyncio.wait_for(loop.run_in_executor(_executor, call), timeout=timeout)
    except asyncio.TimeoutError:
        raise FetchTimeout(url, timeout)
    except (requests.exceptions.Timeout, urllib3.exceptions.TimeoutError):
        raise FetchTimeout(url, timeout)
    except (requests.exceptions.RequestException, urllib3.exceptions.HTTPError) as e:
        raise FetchError(f'Request failed: {e}') from e


async def fetch_page(url: str, headers: Optional[dict] = None,
                     timeout: float = PAGE_FETCH_TIMEOUT) -> FetchedPage:
    """
    GET an HTML page.

    The body is kept as bytes; `encoding` is only set when the server
    declared a charset, otherwise the parser reads it from the document.

    Raises:
        FetchTimeout: the request exceeded `timeout` seconds
        HttpError: non-2xx response
        UnsupportedContentType: response is not HTML
        FetchError: any other transport failure
    """
    response, content = await _send(
        requests.get, url, timeout,
        headers=headers or BROWSER_HEADERS,
        allow_redirects=True,
    )

    if not is_success_status(response.status_code):
        raise HttpError(response.status_code, response.reason)

    content_type = response.headers.get('Content-Type', '')
    if not is_html_content_type(content_type):
        raise UnsupportedContentType(content_type)

    return FetchedPage(
        content=content,
        content_type=content_type,
        url=response.url,
        encoding=header_charset(response),
    )


async def probe_url(url: str, timeout: float = FAVICON_PROBE_TIMEOUT) -> None:
    """HEAD a resource to confirm it is reachable. Raises ProbeFailure otherwise."""
    try:
        response, _ = await _send(
            requests.head, url, timeout,
            headers={'User-Agent': USER_AGENT},
            allow_redirects=True,
        )
    except FetchError as e:
        raise ProbeFailure(f'{url}: {e}') from e

    if not is_success_status(response.status_code):
        raise ProbeFailure(f'{url}: HTTP {response.status_code}')


async def get_json(url: str, headers: dict, timeout: float):
    """GET a JSON document. Raises FetchError subclasses on failure."""
    response, content = await _send(requests.get, url, timeout, headers=headers)

    if not is_success_status(response.status_code):
        raise HttpError(response.status_code, response.reason)

    try:
        return json.loads(content)
    except ValueError as e:
        raise FetchError(f'Malformed JSON body: {e}') from e
