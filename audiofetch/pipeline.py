"""
audiofetch.pipeline - Request flows.

Info:     locator → binaries → probe
Download: locator → binaries → probe → duration gate → convert → publish

Every step depends on the one before it, so the steps run in order and
the first failure aborts the rest.
"""

from __future__ import annotations

from typing import Any

from audiofetch.binaries import BinaryResolver
from audiofetch.config import AudioFetchConfig
from audiofetch.exceptions import DurationExceededError
from audiofetch.extract.audio import artifact_base_name, convert_audio, request_scratch_dir
from audiofetch.extract.probe import probe_document, probe_metadata
from audiofetch.logging import logger
from audiofetch.models import ConversionRequest, PublishedArtifact
from audiofetch.storage import (
    MinioStorage,
    StorageClient,
    artifact_key,
    content_type_for_format,
    publish_artifact,
)
from audiofetch.validation import check_duration, parse_format, validate_locator


class Pipeline:
    """Runs Info and Download requests against shared binaries and storage."""

    def __init__(
        self,
        config: AudioFetchConfig,
        resolver: BinaryResolver,
        storage: StorageClient,
    ) -> None:
        self.config = config
        self.resolver = resolver
        self.storage = storage

    def build_request(self, locator: str | None, fmt: str | None = None) -> ConversionRequest:
        """Validate raw input into a ConversionRequest.

        Raises:
            MissingInputError: If the locator is blank
            InvalidInputError: If the format is unsupported
        """
        return ConversionRequest(
            locator=validate_locator(locator),
            target_format=parse_format(fmt, self.config.default_format),
        )

    def info(self, locator: str | None) -> dict[str, Any]:
        """Return the full yt-dlp metadata document for a locator."""
        locator = validate_locator(locator)
        binaries = self.resolver.ensure()
        return probe_document(binaries.extractor, locator)

    def download(self, request: ConversionRequest) -> PublishedArtifact:
        """Convert a locator to audio and publish it.

        Raises:
            MissingInputError: If the locator is blank
            BinaryUnavailableError: If yt-dlp or ffmpeg cannot be resolved
            ProbeError: If metadata cannot be read
            DurationExceededError: If the source is over the duration limit
            ConversionError: If extraction/transcoding fails
            UploadError: If the artifact cannot be stored
        """
        locator = validate_locator(request.locator)
        fmt = request.target_format
        binaries = self.resolver.ensure()

        metadata = probe_metadata(binaries.extractor, locator)

        decision = check_duration(
            metadata.duration_seconds,
            self.config.max_duration_seconds,
            reject_unknown=self.config.reject_unknown_duration,
        )
        if not decision.accepted:
            logger.warning("Rejected %s: %s", locator, decision.reason)
            raise DurationExceededError(
                metadata.duration_seconds, self.config.max_duration_seconds, decision.reason
            )

        scratch_dir = request_scratch_dir(self.config.scratch_root)
        base_name = artifact_base_name(metadata, self.config.filename_max_length)
        output_path = convert_audio(
            binaries.extractor,
            binaries.transcoder,
            locator,
            fmt,
            scratch_dir,
            base_name,
        )

        key = artifact_key(
            metadata,
            fmt.value,
            prefix=self.config.key_prefix,
            max_length=self.config.filename_max_length,
        )
        artifact = publish_artifact(
            self.storage, output_path, key, content_type_for_format(fmt.value)
        )
        logger.info("Published %s as %s", locator, artifact.public_url)
        return artifact


def build_pipeline(
    config: AudioFetchConfig,
    storage: StorageClient | None = None,
    resolver: BinaryResolver | None = None,
) -> Pipeline:
    """Wire the standard resolver and MinIO storage for ``config``."""
    return Pipeline(
        config,
        resolver or BinaryResolver.from_config(config),
        storage or MinioStorage.from_config(config.storage),
    )
