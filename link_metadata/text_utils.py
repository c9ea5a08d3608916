"""
Text clean-up helpers shared by the title and summary chains.

Length limits:
- Titles: 200 characters maximum, ellipsis included.
- Reader summaries: 350 characters, plus the ellipsis when hard-cut.
- Meta descriptions: 300 characters, plus the ellipsis when cut.
"""

import re
from typing import Tuple

MAX_TITLE_LENGTH = 200
MAX_SUMMARY_LENGTH = 350
MAX_DESCRIPTION_LENGTH = 300
ELLIPSIS = '...'

_CONTROL_CHARS = re.compile(r'[\x00-\x08\x0b\x0c\x0e-\x1f\x7f-\x9f]')
_BLANK_LINES = re.compile(r'\n\s*\n')
_WHITESPACE = re.compile(r'\s+')


def collapse_whitespace(text: str) -> str:
    """Collapse blank lines and whitespace runs into single spaces, then trim."""
    if not text:
        return ''
    text = _BLANK_LINES.sub('\n', text)
    return _WHITESPACE.sub(' ', text).strip()


def clip(text: str, limit: int) -> str:
    """Cut text to `limit` characters and append an ellipsis if anything was dropped."""
    if len(text) <= limit:
        return text
    return text[:limit] + ELLIPSIS


def truncate_title(title: str, max_length: int = MAX_TITLE_LENGTH) -> Tuple[str, bool]:
    """
    Normalize a title and hard-cut it to `max_length` characters.

    Returns:
        Tuple of (title, was_truncated)

    Examples:
        >>> truncate_title("  Hello \\n  World  ")
        ('Hello World', False)

        >>> truncate_title("abcdefghij", 8)
        ('abcde...', True)
    """
    if not title:
        return ('', False)

    title = collapse_whitespace(_CONTROL_CHARS.sub('', title))

    if len(title) <= max_length:
        return (title, False)

    return (title[:max_length - len(ELLIPSIS)] + ELLIPSIS, True)
