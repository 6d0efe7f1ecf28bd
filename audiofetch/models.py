"""
audiofetch.models - Request, metadata, and result models.

Everything here lives for a single request; nothing is cached between
requests.
"""

from __future__ import annotations

from enum import Enum
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class AudioFormat(str, Enum):
    """Audio containers the pipeline can produce."""

    FLAC = "flac"
    MP3 = "mp3"
    OPUS = "opus"
    WAV = "wav"


class ProcessResult(BaseModel):
    """Completed external process invocation."""

    model_config = ConfigDict(frozen=True)

    stdout: str = ""
    stderr: str = ""
    exit_code: int = 0

    @property
    def ok(self) -> bool:
        return self.exit_code == 0

    def diagnostics(self) -> str:
        """Return the most useful diagnostic text (stderr, then stdout)."""
        return self.stderr or self.stdout


class MediaMetadata(BaseModel):
    """Narrowed view of the first probe entry."""

    id: str = "audio"
    title: str = "audio"
    duration_seconds: float = Field(default=0.0, ge=0.0)
    raw: dict[str, Any] = Field(default_factory=dict, exclude=True, repr=False)


class ConversionRequest(BaseModel):
    """Download request: what to fetch and what to produce."""

    locator: str
    target_format: AudioFormat = AudioFormat.FLAC


class ResolvedBinaries(BaseModel):
    """Executable paths for the extraction tool and the transcoder."""

    model_config = ConfigDict(frozen=True)

    extractor: Path
    transcoder: Path


class PublishedArtifact(BaseModel):
    """Location of an artifact committed to object storage."""

    public_url: str
    content_type: str
    key: str
