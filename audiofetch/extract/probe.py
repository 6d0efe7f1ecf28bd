"""
audiofetch.extract.probe - Metadata probing with yt-dlp.

Asks yt-dlp for the JSON description of a locator without downloading any
media, and narrows it to the fields the pipeline needs.
"""

from __future__ import annotations

import json
import math
from pathlib import Path
from typing import Any

from audiofetch.exceptions import ProbeError
from audiofetch.logging import logger
from audiofetch.models import MediaMetadata
from audiofetch.process import run_process

PROBE_ARGS = ["--dump-single-json", "--no-warnings"]

DEFAULT_NAME = "audio"


def probe_document(tool_path: Path, locator: str) -> dict[str, Any]:
    """Run yt-dlp in metadata-only mode and return the parsed document.

    Args:
        tool_path: Path to the yt-dlp executable
        locator: URL or search expression (e.g. "ytsearch:artist song")

    Returns:
        The full JSON document as returned by yt-dlp

    Raises:
        ProbeError: On non-zero exit or output that is not a JSON object
    """
    result = run_process(tool_path, [*PROBE_ARGS, locator])
    if not result.ok:
        raise ProbeError("yt-dlp probe failed", result.diagnostics() or "yt-dlp probe failed")

    try:
        document = json.loads(result.stdout)
    except json.JSONDecodeError as e:
        raise ProbeError("yt-dlp returned invalid JSON", f"{e}: {result.stdout[:200]}") from e

    if not isinstance(document, dict):
        raise ProbeError(
            "yt-dlp returned unexpected JSON",
            f"expected an object, got {type(document).__name__}",
        )

    return document


def select_entry(document: dict[str, Any]) -> dict[str, Any]:
    """Pick the entry a download would use.

    Search and playlist results carry an ``entries`` list; only the first
    entry is used. Any other document describes a single item.
    """
    entries = document.get("entries")
    if isinstance(entries, list) and entries and isinstance(entries[0], dict):
        return entries[0]
    return document


def parse_metadata(document: dict[str, Any]) -> MediaMetadata:
    """Narrow a probe document to id, title, and duration."""
    entry = select_entry(document)

    duration = entry.get("duration")
    try:
        duration_seconds = float(duration) if duration is not None else 0.0
    except (TypeError, ValueError):
        duration_seconds = 0.0
    if not math.isfinite(duration_seconds) or duration_seconds < 0:
        duration_seconds = 0.0

    return MediaMetadata(
        id=str(entry.get("id") or DEFAULT_NAME),
        title=str(entry.get("title") or DEFAULT_NAME),
        duration_seconds=duration_seconds,
        raw=document,
    )


def probe_metadata(tool_path: Path, locator: str) -> MediaMetadata:
    """Probe a locator and return its narrowed metadata.

    Raises:
        ProbeError: If the probe fails
    """
    metadata = parse_metadata(probe_document(tool_path, locator))
    logger.info(
        "Probed %s: id=%s title=%r duration=%ss",
        locator,
        metadata.id,
        metadata.title,
        metadata.duration_seconds,
    )
    return metadata
