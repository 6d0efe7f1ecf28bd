"""
audiofetch.binaries.resolver - Locate or provision yt-dlp and ffmpeg.

Resolution walks an ordered list of location strategies and returns the
first executable found:

1. KnownLocation - the bundled ./bin directory, then PATH
2. ScratchLocation - a copy provisioned earlier into the scratch bin dir
3. ProvisionedLocation - fetch into the scratch bin dir, then re-check,
   aliasing a versioned filename to the expected one if needed
"""

from __future__ import annotations

import os
import shutil
import threading
from abc import ABC, abstractmethod
from pathlib import Path

from audiofetch.binaries.provider import (
    EXTRACTOR,
    INSTALL_HINTS,
    TRANSCODER,
    BinaryProvider,
    make_executable,
)
from audiofetch.config import AudioFetchConfig
from audiofetch.exceptions import BinaryUnavailableError
from audiofetch.logging import logger
from audiofetch.models import ResolvedBinaries


def executable_name(tool_name: str) -> str:
    """Platform filename for a tool."""
    return f"{tool_name}.exe" if os.name == "nt" else tool_name


def _usable(path: Path) -> Path | None:
    if not path.is_file():
        return None
    if not os.access(path, os.X_OK):
        try:
            make_executable(path)
        except OSError as e:
            logger.debug("Could not mark %s executable: %s", path, e)
            return None
    return path


class LocationStrategy(ABC):
    """One way of producing an executable path for a tool."""

    name = "location"

    @abstractmethod
    def locate(self, tool_name: str) -> Path | None:
        """Return a usable path for ``tool_name`` or None."""


class KnownLocation(LocationStrategy):
    """Fixed install directories, optionally followed by PATH."""

    name = "known"

    def __init__(self, directories: list[Path], use_system_path: bool = True) -> None:
        self.directories = directories
        self.use_system_path = use_system_path

    def locate(self, tool_name: str) -> Path | None:
        for directory in self.directories:
            found = _usable(directory / executable_name(tool_name))
            if found:
                return found
        if self.use_system_path:
            which = shutil.which(tool_name)
            if which:
                return Path(which)
        return None


class ScratchLocation(LocationStrategy):
    """Writable scratch directory holding previously provisioned copies."""

    name = "scratch"

    def __init__(self, directory: Path) -> None:
        self.directory = directory

    def locate(self, tool_name: str) -> Path | None:
        return _usable(self.directory / executable_name(tool_name))


class ProvisionedLocation(ScratchLocation):
    """Fetch a tool into the scratch directory, then look for it there."""

    name = "provisioned"

    def __init__(self, directory: Path, provider: BinaryProvider) -> None:
        super().__init__(directory)
        self.provider = provider

    def locate(self, tool_name: str) -> Path | None:
        try:
            self.provider.fetch_and_install(tool_name, self.directory)
        except (BinaryUnavailableError, OSError) as e:
            logger.warning("Provisioning %s failed: %s", tool_name, e)

        found = super().locate(tool_name)
        if found:
            return found
        try:
            return self._alias_versioned(tool_name)
        except OSError as e:
            logger.warning("Could not alias a downloaded %s: %s", tool_name, e)
            return None

    def _alias_versioned(self, tool_name: str) -> Path | None:
        """Link a versioned/renamed download (e.g. yt-dlp_linux) to the expected name."""
        if not self.directory.is_dir():
            return None

        expected = self.directory / executable_name(tool_name)
        prefix = tool_name.lower()
        candidates = sorted(
            p
            for p in self.directory.iterdir()
            if p.is_file() and p.name.lower().startswith(prefix) and not p.name.endswith(".part")
        )
        if not candidates:
            return None

        source = candidates[0]
        logger.info("Aliasing %s to %s", source.name, expected.name)
        try:
            os.link(source, expected)
        except OSError:
            shutil.copy2(source, expected)
        return _usable(expected)


class BinaryResolver:
    """Ordered-fallback resolver with a once-per-process ``ensure()``."""

    def __init__(self, strategies: list[LocationStrategy]) -> None:
        self.strategies = strategies
        self._lock = threading.Lock()
        self._resolved: ResolvedBinaries | None = None

    @classmethod
    def from_config(
        cls, config: AudioFetchConfig, provider: BinaryProvider | None = None
    ) -> BinaryResolver:
        """Build the standard known → scratch → provisioned chain."""
        provider = provider or BinaryProvider(config.ytdlp_url, config.ffmpeg_url)
        return cls(
            [
                KnownLocation([config.bin_dir], use_system_path=config.use_system_path),
                ScratchLocation(config.scratch_bin_dir),
                ProvisionedLocation(config.scratch_bin_dir, provider),
            ]
        )

    def resolve(self, tool_name: str) -> Path:
        """Return an executable path for ``tool_name``.

        Raises:
            BinaryUnavailableError: If no strategy produced a path
        """
        for strategy in self.strategies:
            path = strategy.locate(tool_name)
            if path:
                logger.debug("Resolved %s via %s: %s", tool_name, strategy.name, path)
                return path
        raise BinaryUnavailableError(
            tool_name, "binary not found and could not be provisioned", INSTALL_HINTS.get(tool_name)
        )

    def ensure(self) -> ResolvedBinaries:
        """Resolve both tools once; concurrent callers share the result.

        Raises:
            BinaryUnavailableError: If either tool is unavailable. Failures
                are not remembered, so a later call tries again.
        """
        if self._resolved is not None:
            return self._resolved
        with self._lock:
            if self._resolved is None:
                self._resolved = ResolvedBinaries(
                    extractor=self.resolve(EXTRACTOR),
                    transcoder=self.resolve(TRANSCODER),
                )
            return self._resolved
