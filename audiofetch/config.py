"""
audiofetch.config - YAML config loading, environment overrides, validation.

Handles loading audiofetch.yaml from the working directory (or an explicit
path), applying AUDIOFETCH_* environment overrides, and validating all
parameters.
"""

from __future__ import annotations

import os
import tempfile
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field, ValidationError, field_validator

from audiofetch.exceptions import ConfigError

CONFIG_FILENAME = "audiofetch.yaml"

DEFAULT_YTDLP_URL = "https://github.com/yt-dlp/yt-dlp/releases/latest/download/yt-dlp"
DEFAULT_FFMPEG_URL = "https://johnvansickle.com/ffmpeg/releases/ffmpeg-release-amd64-static.tar.xz"

SUPPORTED_FORMATS = ("flac", "mp3", "opus", "wav")

ENV_OVERRIDES: dict[str, tuple[str, ...]] = {
    "AUDIOFETCH_MAX_DURATION": ("max_duration_seconds",),
    "AUDIOFETCH_BIN_DIR": ("bin_dir",),
    "AUDIOFETCH_SCRATCH_DIR": ("scratch_root",),
    "AUDIOFETCH_DEFAULT_FORMAT": ("default_format",),
    "AUDIOFETCH_STORAGE_ENDPOINT": ("storage", "endpoint"),
    "AUDIOFETCH_STORAGE_ACCESS_KEY": ("storage", "access_key"),
    "AUDIOFETCH_STORAGE_SECRET_KEY": ("storage", "secret_key"),
    "AUDIOFETCH_STORAGE_BUCKET": ("storage", "bucket"),
    "AUDIOFETCH_STORAGE_PUBLIC_URL": ("storage", "public_base_url"),
}


def _default_scratch_root() -> Path:
    return Path(tempfile.gettempdir())


def _default_scratch_bin_dir() -> Path:
    return Path(tempfile.gettempdir()) / "audiofetch-bin"


class StorageConfig(BaseModel):
    """S3-compatible object storage settings."""

    endpoint: str = "localhost:9000"
    access_key: str = ""
    secret_key: str = ""
    bucket: str = "audiofetch"
    secure: bool = False
    public_base_url: str | None = None
    create_bucket: bool = True

    @field_validator("bucket")
    @classmethod
    def validate_bucket(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("bucket must not be empty")
        return v.strip()

    def public_url_for(self, key: str) -> str:
        """Build the public URL for an object key."""
        if self.public_base_url:
            base = self.public_base_url.rstrip("/")
        else:
            scheme = "https" if self.secure else "http"
            base = f"{scheme}://{self.endpoint}"
        return f"{base}/{self.bucket}/{key}"


class AudioFetchConfig(BaseModel):
    """Resolved configuration for the audiofetch service."""

    bin_dir: Path = Field(default_factory=lambda: Path.cwd() / "bin")
    scratch_bin_dir: Path = Field(default_factory=_default_scratch_bin_dir)
    scratch_root: Path = Field(default_factory=_default_scratch_root)
    use_system_path: bool = True

    max_duration_seconds: float = Field(default=600, gt=0)
    reject_unknown_duration: bool = False

    default_format: str = "flac"
    key_prefix: str = "audio"
    filename_max_length: int = Field(default=200, gt=0)
    diagnostics_max_chars: int = Field(default=4000, gt=0)

    ytdlp_url: str = DEFAULT_YTDLP_URL
    ffmpeg_url: str = DEFAULT_FFMPEG_URL

    storage: StorageConfig = Field(default_factory=StorageConfig)

    config_path: Path | None = None

    @field_validator("default_format")
    @classmethod
    def validate_default_format(cls, v: str) -> str:
        v = v.lower()
        if v not in SUPPORTED_FORMATS:
            raise ValueError(f"default_format must be one of: {SUPPORTED_FORMATS}")
        return v

    @field_validator("key_prefix")
    @classmethod
    def validate_key_prefix(cls, v: str) -> str:
        return v.strip("/")


def apply_env_overrides(
    raw_config: dict[str, Any], environ: dict[str, str] | None = None
) -> dict[str, Any]:
    """Overlay AUDIOFETCH_* environment variables onto a raw config dict."""
    env = os.environ if environ is None else environ
    merged = dict(raw_config)
    for var, path in ENV_OVERRIDES.items():
        value = env.get(var)
        if not value:
            continue
        if len(path) == 1:
            merged[path[0]] = value
        else:
            section = dict(merged.get(path[0]) or {})
            section[path[1]] = value
            merged[path[0]] = section
    return merged


def load_config(
    path: Path | None = None, environ: dict[str, str] | None = None
) -> AudioFetchConfig:
    """Load and validate configuration.

    Reads ``path`` when given, otherwise ``audiofetch.yaml`` in the current
    directory if present. Environment overrides take precedence over the file.

    Raises:
        ConfigError: If the file is missing, malformed, or fails validation
    """
    config_file = path or Path.cwd() / CONFIG_FILENAME
    raw_config: dict[str, Any] = {}

    if config_file.exists():
        try:
            with open(config_file) as f:
                raw_config = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ConfigError(f"Invalid YAML in {config_file}", str(e)) from e
        if not isinstance(raw_config, dict):
            raise ConfigError(f"Config root must be a mapping: {config_file}")
    elif path is not None:
        raise ConfigError(f"Config file not found: {path}")

    merged = apply_env_overrides(raw_config, environ)
    if config_file.exists():
        merged["config_path"] = config_file

    try:
        return AudioFetchConfig(**merged)
    except ValidationError as e:
        raise ConfigError("Invalid configuration", str(e)) from e


def create_default_config() -> dict[str, Any]:
    """Create a default config dict suitable for writing to YAML."""
    return {
        "bin_dir": "bin",
        "max_duration_seconds": 600,
        "reject_unknown_duration": False,
        "default_format": "flac",
        "key_prefix": "audio",
        "storage": {
            "endpoint": "localhost:9000",
            "access_key": "",
            "secret_key": "",
            "bucket": "audiofetch",
            "secure": False,
        },
    }


def write_config(config: dict[str, Any], path: Path) -> None:
    """Write configuration to a YAML file."""
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w") as f:
        yaml.dump(config, f, default_flow_style=False, sort_keys=False)
