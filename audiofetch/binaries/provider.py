"""
audiofetch.binaries.provider - Fetch and install yt-dlp and ffmpeg.

Downloads a standalone yt-dlp binary and a static ffmpeg build into a
writable directory. Used by the resolver as a last resort and by the
``fetch-binaries`` command.
"""

from __future__ import annotations

import os
import shutil
import stat
import tarfile
import tempfile
import urllib.error
import urllib.request
from pathlib import Path

from audiofetch.exceptions import BinaryUnavailableError
from audiofetch.logging import logger

EXTRACTOR = "yt-dlp"
TRANSCODER = "ffmpeg"

INSTALL_HINTS = {
    EXTRACTOR: "Place a yt-dlp binary in ./bin or install with: pip install yt-dlp",
    TRANSCODER: "Place an ffmpeg binary in ./bin or install with: apt install ffmpeg",
}

# Members copied out of the ffmpeg static archive
FFMPEG_MEMBERS = ("ffmpeg", "ffprobe")


def make_executable(path: Path) -> None:
    """Add execute permission bits to a file (no-op on Windows)."""
    if os.name == "nt":
        return
    mode = path.stat().st_mode
    path.chmod(mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)


class BinaryProvider:
    """Downloads tool binaries from their release URLs."""

    def __init__(self, ytdlp_url: str, ffmpeg_url: str, timeout: int = 120) -> None:
        self.ytdlp_url = ytdlp_url
        self.ffmpeg_url = ffmpeg_url
        self.timeout = timeout

    def fetch_and_install(self, tool_name: str, dest_dir: Path) -> None:
        """Install ``tool_name`` into ``dest_dir``.

        Raises:
            BinaryUnavailableError: For unknown tools, failed downloads, or an
                unwritable destination
        """
        try:
            dest_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise BinaryUnavailableError(
                tool_name, f"cannot create {dest_dir}: {e}", INSTALL_HINTS.get(tool_name)
            ) from e

        if tool_name == EXTRACTOR:
            target = dest_dir / EXTRACTOR
            self._download(self.ytdlp_url, target, tool_name)
            try:
                make_executable(target)
            except OSError as e:
                raise BinaryUnavailableError(
                    tool_name, f"cannot mark {target} executable: {e}", INSTALL_HINTS[tool_name]
                ) from e
            logger.info("Installed %s at %s", tool_name, target)
        elif tool_name == TRANSCODER:
            with tempfile.TemporaryDirectory() as tmp:
                archive = Path(tmp) / "ffmpeg-static.tar.xz"
                self._download(self.ffmpeg_url, archive, tool_name)
                installed = extract_static_archive(archive, dest_dir, FFMPEG_MEMBERS)
            if not installed:
                raise BinaryUnavailableError(
                    tool_name, "archive did not contain an ffmpeg binary", INSTALL_HINTS[tool_name]
                )
            logger.info("Installed %s into %s", ", ".join(p.name for p in installed), dest_dir)
        else:
            raise BinaryUnavailableError(tool_name, "no download source known")

    def _download(self, url: str, dest: Path, tool_name: str) -> None:
        logger.info("Downloading %s from %s", tool_name, url)
        tmp_path = dest.with_suffix(dest.suffix + ".part")
        try:
            with urllib.request.urlopen(url, timeout=self.timeout) as response:
                with open(tmp_path, "wb") as f:
                    shutil.copyfileobj(response, f)
            tmp_path.replace(dest)
        except (urllib.error.URLError, OSError) as e:
            tmp_path.unlink(missing_ok=True)
            raise BinaryUnavailableError(
                tool_name, f"download failed: {e}", INSTALL_HINTS.get(tool_name)
            ) from e


def extract_static_archive(archive: Path, dest_dir: Path, names: tuple[str, ...]) -> list[Path]:
    """Copy the named executables out of a .tar.xz archive.

    Members are matched by basename regardless of the versioned top-level
    directory inside the archive.

    Returns:
        Paths of the installed files
    """
    installed = []
    try:
        with tarfile.open(archive, mode="r:*") as tar:
            for member in tar.getmembers():
                name = Path(member.name).name
                if not member.isfile() or name not in names:
                    continue
                source = tar.extractfile(member)
                if source is None:
                    continue
                target = dest_dir / name
                with source, open(target, "wb") as f:
                    shutil.copyfileobj(source, f)
                make_executable(target)
                installed.append(target)
    except tarfile.TarError as e:
        raise BinaryUnavailableError(TRANSCODER, f"could not read archive: {e}") from e
    except OSError as e:
        raise BinaryUnavailableError(
            TRANSCODER, f"could not install into {dest_dir}: {e}", INSTALL_HINTS[TRANSCODER]
        ) from e
    return installed
