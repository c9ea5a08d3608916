"""
Shared pytest fixtures for the link metadata tests.
"""

import pytest
import re
import sys
import threading
import time
import importlib.util
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer
from pathlib import Path
from bs4 import BeautifulSoup

# Project root for finding the Cloud Function module
PROJECT_ROOT = Path(__file__).parent.parent


def _load_module_from_path(module_name: str, file_path: Path):
    """Load a module from a specific file path."""
    spec = importlib.util.spec_from_file_location(module_name, file_path)
    module = importlib.util.module_from_spec(spec)
    sys.modules[module_name] = module
    spec.loader.exec_module(module)
    return module


# Load the Cloud Function module under an importable name
_link_enricher_module = _load_module_from_path(
    'link_enricher_main',
    PROJECT_ROOT / 'link-enricher' / 'main.py'
)


# ============================================================================
# Cloud Function Fixtures
# ============================================================================

@pytest.fixture
def link_enricher_module():
    """Returns the loaded link-enricher module (for patching)."""
    return _link_enricher_module


@pytest.fixture
def enrich_link():
    """Returns main entry point from link-enricher."""
    return _link_enricher_module.enrich_link


@pytest.fixture
def mock_flask_request():
    """Factory for creating mock Flask request objects."""
    class MockRequest:
        def __init__(self, json_data=None, method='POST'):
            self._json = json_data
            self.method = method
            self.data = b''

        def get_json(self, force=False, silent=False):
            return self._json

    return MockRequest


# ============================================================================
# HTML Fixtures
# ============================================================================

@pytest.fixture
def example_domain_html():
    """Minimal page with a <title> and a relative icon link."""
    return (
        '<html><head><title>Example Domain</title>'
        '<link rel="icon" href="/favicon.ico"></head></html>'
    )


@pytest.fixture
def article_html():
    """Article page with competing title sources and descriptions."""
    return """
    <!DOCTYPE html>
    <html>
    <head>
        <title>10 Python Tips | Example Blog</title>
        <meta property="og:title" content="10 Python Tips You Should Know">
        <meta name="twitter:title" content="Python Tips (Twitter)">
        <meta property="og:description" content="Learn essential Python tips for everyday work.">
        <meta name="description" content="Plain description of Python tips.">
        <link rel="apple-touch-icon" href="/apple-touch-icon.png">
        <link rel="shortcut icon" href="/static/favicon.ico">
        <link rel="icon" href="https://cdn.example.com/icon.png">
    </head>
    <body>
        <article><h1>10 Python Tips You Should Know</h1></article>
    </body>
    </html>
    """


@pytest.fixture
def article_soup(article_html):
    return BeautifulSoup(article_html, 'html.parser')


@pytest.fixture
def empty_soup():
    """Returns empty BeautifulSoup."""
    return BeautifulSoup("", 'html.parser')


@pytest.fixture
def reader_url_pattern():
    """Matches any request to the default reader service."""
    return re.compile(r'https://r\.jina\.ai/.*')


@pytest.fixture
def reader_payload():
    """Factory for reader service JSON bodies."""
    def _payload(content):
        return {'code': 200, 'status': 20000, 'data': {'content': content}}
    return _payload


# ============================================================================
# Live Server Fixtures
# ============================================================================

class _SlowDripHandler(BaseHTTPRequestHandler):
    """Sends HTML headers at once, then one body byte every DRIP_INTERVAL."""

    DRIP_INTERVAL = 0.2
    BODY = b'<html><head><title>Slow</title></head></html>' + b' ' * 200

    def do_GET(self):
        self.send_response(200)
        self.send_header('Content-Type', 'text/html')
        self.send_header('Content-Length', str(len(self.BODY)))
        self.end_headers()
        try:
            for i in range(len(self.BODY)):
                self.wfile.write(self.BODY[i:i + 1])
                self.wfile.flush()
                time.sleep(self.DRIP_INTERVAL)
        except (BrokenPipeError, ConnectionResetError):
            pass

    def log_message(self, format, *args):
        pass


@pytest.fixture
def slow_drip_server():
    """Real local HTTP server whose pages trickle in far slower than any deadline."""
    server = ThreadingHTTPServer(('127.0.0.1', 0), _SlowDripHandler)
    server.daemon_threads = True
    thread = threading.Thread(target=server.serve_forever, daemon=True)
    thread.start()
    try:
        yield f'http://127.0.0.1:{server.server_address[1]}'
    finally:
        server.shutdown()
        server.server_close()
