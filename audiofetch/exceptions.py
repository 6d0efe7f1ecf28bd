"""
audiofetch.exceptions - Custom exception classes.

All audiofetch exceptions inherit from AudioFetchError. Errors caused by the
request itself set ``client_error`` so the HTTP layer can answer with a 4xx.
"""

from __future__ import annotations


class AudioFetchError(Exception):
    """Base exception for all audiofetch errors."""

    client_error = False

    def __init__(self, message: str, details: str | None = None) -> None:
        self.message = message
        self.details = details or ""
        super().__init__(message)


class ConfigError(AudioFetchError):
    """Configuration loading or validation error."""

    pass


class MissingInputError(AudioFetchError):
    """Required request input is missing or empty."""

    client_error = True


class InvalidInputError(AudioFetchError):
    """Request input is present but not acceptable."""

    client_error = True


class DurationExceededError(AudioFetchError):
    """Source media is longer than the configured limit."""

    client_error = True

    def __init__(
        self, duration_seconds: float, limit_seconds: float, reason: str | None = None
    ) -> None:
        self.duration_seconds = duration_seconds
        self.limit_seconds = limit_seconds
        super().__init__(
            "Media too long" if duration_seconds > 0 else "Media duration unknown",
            reason or f"Duration {duration_seconds:g}s exceeds the {limit_seconds:g}s limit",
        )


class BinaryUnavailableError(AudioFetchError):
    """An external tool could not be located or provisioned."""

    def __init__(self, tool: str, message: str, install_hint: str | None = None):
        self.tool = tool
        self.install_hint = install_hint
        super().__init__(f"{tool}: {message}", install_hint)


class ProbeError(AudioFetchError):
    """Metadata probe failed or returned unparseable output."""

    pass


class ConversionError(AudioFetchError):
    """Audio extraction or transcoding failed."""

    pass


class UploadError(AudioFetchError):
    """The converted file could not be read or committed to storage."""

    def __init__(self, key: str, details: str | None = None) -> None:
        self.key = key
        super().__init__(f"Upload failed or file not found: {key}", details)
