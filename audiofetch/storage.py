"""
audiofetch.storage - Artifact publishing to object storage.

Converted files are written under a deterministic key with no random
suffix, so repeating a request for the same source and format overwrites
the earlier object.
"""

from __future__ import annotations

import io
import threading
from abc import ABC, abstractmethod
from pathlib import Path

from minio import Minio

from audiofetch.config import StorageConfig
from audiofetch.exceptions import UploadError
from audiofetch.extract.audio import artifact_base_name
from audiofetch.logging import logger
from audiofetch.models import MediaMetadata, PublishedArtifact

CONTENT_TYPES = {
    "mp3": "audio/mpeg",
    "opus": "audio/opus",
    "wav": "audio/wav",
    "flac": "audio/flac",
}
DEFAULT_CONTENT_TYPE = "audio/flac"


def content_type_for_format(fmt: str) -> str:
    """MIME type for an output format; unknown formats map to FLAC."""
    return CONTENT_TYPES.get(str(fmt).lower(), DEFAULT_CONTENT_TYPE)


def artifact_key(
    metadata: MediaMetadata,
    fmt: str,
    prefix: str = "audio",
    max_length: int = 200,
) -> str:
    """Storage key for a converted source, e.g. ``audio/Song.abc.flac``."""
    name = f"{artifact_base_name(metadata, max_length)}.{fmt}"
    return f"{prefix}/{name}" if prefix else name


class StorageClient(ABC):
    """Abstract base class for object storage backends."""

    @abstractmethod
    def put(self, key: str, data: bytes, content_type: str) -> str:
        """Store ``data`` publicly under ``key``, replacing any existing object.

        Returns:
            Public URL of the stored object

        Raises:
            UploadError: If the write fails
        """


class MinioStorage(StorageClient):
    """S3-compatible storage through the MinIO client."""

    def __init__(self, client: Minio, config: StorageConfig) -> None:
        self._client = client
        self._config = config
        self._bucket_checked = False
        self._lock = threading.Lock()

    @classmethod
    def from_config(cls, config: StorageConfig) -> MinioStorage:
        client = Minio(
            endpoint=config.endpoint,
            access_key=config.access_key,
            secret_key=config.secret_key,
            secure=config.secure,
        )
        return cls(client, config)

    def _ensure_bucket(self) -> None:
        if self._bucket_checked or not self._config.create_bucket:
            return
        with self._lock:
            if self._bucket_checked:
                return
            if not self._client.bucket_exists(self._config.bucket):
                self._client.make_bucket(self._config.bucket)
                logger.info("Bucket created: %s", self._config.bucket)
            self._bucket_checked = True

    def put(self, key: str, data: bytes, content_type: str) -> str:
        try:
            self._ensure_bucket()
            self._client.put_object(
                bucket_name=self._config.bucket,
                object_name=key,
                data=io.BytesIO(data),
                length=len(data),
                content_type=content_type,
            )
        except Exception as e:
            logger.exception("Upload failed for %s", key)
            raise UploadError(key, str(e)) from e

        logger.info("Uploaded %s (%d bytes) to bucket %s", key, len(data), self._config.bucket)
        return self._config.public_url_for(key)


class MemoryStorage(StorageClient):
    """In-process storage; last write to a key wins."""

    def __init__(self, base_url: str = "memory://audiofetch") -> None:
        self.base_url = base_url.rstrip("/")
        self.objects: dict[str, tuple[bytes, str]] = {}
        self._lock = threading.Lock()

    def put(self, key: str, data: bytes, content_type: str) -> str:
        with self._lock:
            self.objects[key] = (data, content_type)
        return f"{self.base_url}/{key}"


def publish_artifact(
    storage: StorageClient,
    file_path: Path,
    key: str,
    content_type: str,
) -> PublishedArtifact:
    """Read a converted file and commit it to storage.

    Raises:
        UploadError: If the file cannot be read or the write fails
    """
    try:
        data = file_path.read_bytes()
    except OSError as e:
        raise UploadError(key, str(e)) from e

    public_url = storage.put(key, data, content_type)
    return PublishedArtifact(public_url=public_url, content_type=content_type, key=key)
