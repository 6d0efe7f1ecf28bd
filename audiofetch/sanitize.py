"""
audiofetch.sanitize - Filesystem-safe names for scratch files and storage keys.
"""

from __future__ import annotations

import re

RESERVED_CHARS = '\\/:*?"<>|'

_UNSAFE_RE = re.compile(r'[\\/:*?"<>|\x00-\x1f\x7f]+')
_WHITESPACE_RE = re.compile(r"\s+")


def sanitize_filename(name: str, max_length: int = 200) -> str:
    """Replace path-unsafe and control characters with spaces and truncate.

    Args:
        name: Raw name, e.g. "{title}.{id}"
        max_length: Maximum length of the result

    Returns:
        Cleaned name, at most ``max_length`` characters
    """
    cleaned = _UNSAFE_RE.sub(" ", name)
    cleaned = _WHITESPACE_RE.sub(" ", cleaned).strip()
    return cleaned[:max_length]
