"""
audiofetch.binaries - Locating and provisioning external tools.

yt-dlp does the extraction and ffmpeg the transcoding; both are resolved
to filesystem paths before any request work starts.
"""

from __future__ import annotations

from audiofetch.binaries.provider import EXTRACTOR, TRANSCODER, BinaryProvider
from audiofetch.binaries.resolver import BinaryResolver

__all__ = ["EXTRACTOR", "TRANSCODER", "BinaryProvider", "BinaryResolver"]
