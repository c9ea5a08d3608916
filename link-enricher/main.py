"""
Link Enricher Cloud Function

Builds bookmark metadata (title, favicon, summary) for a user-supplied URL.

Responsibilities:
- Reject malformed or non-HTTP(S) URLs before any network call
- Fetch the page and extract title and favicon
- Summarize the page via the reader service, falling back to meta tags

Does NOT:
- Authenticate users (caller's job)
- Check for duplicate bookmarks or persist anything (caller's job)
"""

import functions_framework
import json
import os
import sys
import traceback
from datetime import datetime, timezone
from urllib.parse import urlparse

# Add shared package to path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))
from link_metadata import InvalidUrl, fetch_link_metadata_sync, validate_url


def _utc_timestamp() -> str:
    return datetime.now(timezone.utc).strftime('%Y-%m-%dT%H:%M:%S.%fZ')


@functions_framework.http
def enrich_link(request):
    """
    Main Cloud Function entry point.

    Expected JSON input:
    {
        "url": "https://example.com/article"
    }
    """
    # Handle CORS
    if request.method == 'OPTIONS':
        headers = {
            'Access-Control-Allow-Origin': '*',
            'Access-Control-Allow-Methods': 'POST',
            'Access-Control-Allow-Headers': 'Content-Type',
            'Access-Control-Max-Age': '3600'
        }
        return ('', 204, headers)

    headers = {'Access-Control-Allow-Origin': '*'}

    try:
        request_json = request.get_json(silent=True)
        if not isinstance(request_json, dict):
            request_json = {}
        raw_url = request_json.get('url')

        # Validation happens here so bad input is a 400, not a degraded record
        try:
            url = validate_url(raw_url)
        except InvalidUrl as e:
            return (json.dumps({'error': str(e)}), 400, headers)

        metadata = fetch_link_metadata_sync(url)

        response = {
            'url': url,
            'domain': urlparse(url).netloc.replace('www.', ''),
            'title': metadata.title,
            'favicon': metadata.favicon,
            'summary': metadata.summary,
            'processed_at': _utc_timestamp(),
        }

        # Degraded stages are reported but still a 200
        if metadata.errors:
            response['errors'] = metadata.errors

        return (json.dumps(response), 200, headers)

    except Exception as e:
        print(f"Error: {str(e)}\n{traceback.format_exc()}")
        return (json.dumps({
            'error': {
                'stage': 'processing',
                'message': str(e),
                'recoverable': False
            }
        }), 500, headers)
