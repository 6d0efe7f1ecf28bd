"""
audiofetch.extract.audio - Audio extraction and transcoding via yt-dlp + FFmpeg.

yt-dlp downloads the best audio stream, hands it to FFmpeg for conversion
to the target format, and embeds the thumbnail and tags into the result.
"""

from __future__ import annotations

import tempfile
from pathlib import Path

from audiofetch.exceptions import ConversionError
from audiofetch.logging import logger
from audiofetch.models import AudioFormat, MediaMetadata
from audiofetch.process import run_process
from audiofetch.sanitize import sanitize_filename

# yt-dlp can only embed cover art in these containers
THUMBNAIL_FORMATS = frozenset({AudioFormat.FLAC, AudioFormat.MP3, AudioFormat.OPUS})


def artifact_base_name(metadata: MediaMetadata, max_length: int = 200) -> str:
    """Stable file stem for a source: sanitized "{title}.{id}"."""
    return sanitize_filename(f"{metadata.title}.{metadata.id}", max_length)


def request_scratch_dir(root: Path) -> Path:
    """Create a scratch directory private to one request under ``root``.

    Raises:
        ConversionError: If the directory cannot be created
    """
    try:
        root.mkdir(parents=True, exist_ok=True)
        return Path(tempfile.mkdtemp(prefix="audiofetch-", dir=root))
    except OSError as e:
        raise ConversionError("Scratch directory unavailable", f"{root}: {e}") from e


def build_convert_args(
    transcoder: Path,
    locator: str,
    target_format: AudioFormat,
    base_name: str,
) -> list[str]:
    """yt-dlp arguments for audio-only extraction into ``target_format``.

    Cover art is embedded only for formats in THUMBNAIL_FORMATS; tags are
    written for every format.
    """
    args = ["-x", "--audio-format", target_format.value]
    if target_format in THUMBNAIL_FORMATS:
        args.append("--embed-thumbnail")
    return [
        *args,
        "--add-metadata",
        "--ffmpeg-location",
        str(transcoder),
        "-o",
        f"{base_name}.%(ext)s",
        locator,
    ]


def convert_audio(
    extractor: Path,
    transcoder: Path,
    locator: str,
    target_format: AudioFormat,
    scratch_dir: Path,
    base_name: str,
) -> Path:
    """Extract and transcode the audio of ``locator`` into ``scratch_dir``.

    Args:
        extractor: Path to yt-dlp
        transcoder: Path to ffmpeg
        locator: URL or search expression
        target_format: Output container/codec
        scratch_dir: Working directory for the download
        base_name: Output file stem (already sanitized)

    Returns:
        Path to ``scratch_dir/{base_name}.{format}``

    Raises:
        ConversionError: If yt-dlp fails or the expected file is missing
    """
    try:
        scratch_dir.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise ConversionError("Scratch directory unavailable", f"{scratch_dir}: {e}") from e
    args = build_convert_args(transcoder, locator, target_format, base_name)

    logger.info("Converting %s to %s in %s", locator, target_format.value, scratch_dir)
    result = run_process(extractor, args, cwd=scratch_dir)
    if not result.ok:
        raise ConversionError("yt-dlp conversion failed", result.diagnostics())

    output_path = scratch_dir / f"{base_name}.{target_format.value}"
    if not output_path.is_file():
        raise ConversionError(
            "Converted file not found",
            f"yt-dlp exited cleanly but {output_path.name} was not produced\n"
            f"{result.diagnostics()}",
        )

    logger.info("Converted %s (%d bytes)", output_path.name, output_path.stat().st_size)
    return output_path
