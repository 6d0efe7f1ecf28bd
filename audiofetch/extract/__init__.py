"""
audiofetch.extract - Metadata probing and audio conversion.

Both stages drive yt-dlp through the process runner:
- probe: metadata-only JSON dump of a locator
- audio: audio-only download transcoded by FFmpeg into the target format
"""

from __future__ import annotations
