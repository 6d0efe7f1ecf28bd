"""
audiofetch.validation - Request validation, duration gate, dependency checks.

Validates request input and source duration before any conversion work is
spent, and checks that the external tools respond.
"""

from __future__ import annotations

from pathlib import Path
from typing import NamedTuple

from audiofetch.binaries import EXTRACTOR, TRANSCODER, BinaryResolver
from audiofetch.exceptions import InvalidInputError, MissingInputError
from audiofetch.models import AudioFormat
from audiofetch.process import run_process


class GateDecision(NamedTuple):
    """Outcome of the duration gate."""

    accepted: bool
    reason: str | None = None


def check_duration(
    duration_seconds: float,
    limit_seconds: float,
    reject_unknown: bool = False,
) -> GateDecision:
    """Decide whether a source is short enough to convert.

    A duration of 0 means unknown and is accepted unless ``reject_unknown``
    is set.

    Args:
        duration_seconds: Probed duration (0 when unknown)
        limit_seconds: Maximum allowed duration
        reject_unknown: Treat unknown duration as a rejection

    Returns:
        GateDecision with a human-readable reason when rejected
    """
    if duration_seconds <= 0:
        if reject_unknown:
            return GateDecision(False, "Duration unknown; refusing to convert")
        return GateDecision(True)

    if duration_seconds > limit_seconds:
        return GateDecision(
            False,
            f"Duration {duration_seconds:g}s exceeds the {limit_seconds:g}s limit",
        )
    return GateDecision(True)


def validate_locator(locator: str | None) -> str:
    """Return the stripped locator.

    Raises:
        MissingInputError: If the locator is missing or blank
    """
    if locator is None or not locator.strip():
        raise MissingInputError("Missing url", "A URL or search query is required")
    return locator.strip()


def parse_format(value: str | None, default: str = "flac") -> AudioFormat:
    """Parse a requested format name, case-insensitively.

    Raises:
        InvalidInputError: If the format is not supported
    """
    name = (value or default).strip().lower()
    try:
        return AudioFormat(name)
    except ValueError as e:
        supported = ", ".join(f.value for f in AudioFormat)
        raise InvalidInputError(
            f"Unsupported format: {name}", f"Supported formats: {supported}"
        ) from e


def _tool_version(tool_path: Path, version_flag: str) -> str:
    result = run_process(tool_path, [version_flag])
    if not result.ok:
        return "unknown"
    first_line = result.stdout.strip().split("\n")[0]
    if not first_line:
        return "unknown"
    # ffmpeg prints "ffmpeg version N ..."; yt-dlp prints just the version
    parts = first_line.split()
    if len(parts) >= 3 and parts[1] == "version":
        return parts[2]
    return first_line


def check_binaries(resolver: BinaryResolver) -> dict[str, dict[str, str]]:
    """Resolve both tools and report their paths and versions.

    Raises:
        BinaryUnavailableError: If a tool cannot be resolved
    """
    binaries = resolver.ensure()
    return {
        EXTRACTOR: {
            "path": str(binaries.extractor),
            "version": _tool_version(binaries.extractor, "--version"),
        },
        TRANSCODER: {
            "path": str(binaries.transcoder),
            "version": _tool_version(binaries.transcoder, "-version"),
        },
    }
