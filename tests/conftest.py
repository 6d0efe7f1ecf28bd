"""
Test configuration and shared fixtures.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any
from unittest.mock import MagicMock

import pytest

from audiofetch.config import AudioFetchConfig
from audiofetch.models import ProcessResult, ResolvedBinaries
from audiofetch.pipeline import Pipeline
from audiofetch.storage import MemoryStorage


class FakeYtDlp:
    """Stands in for the process runner when it is asked to run yt-dlp.

    Probe calls (``--dump-single-json``) answer with ``probe_document``;
    conversion calls write ``<template with ext>`` into the working directory.
    """

    def __init__(self, probe_document: dict[str, Any] | None = None) -> None:
        self.probe_document = probe_document or {}
        self.probe_result: ProcessResult | None = None
        self.convert_result: ProcessResult | None = None
        self.write_output = True
        self.calls: list[dict[str, Any]] = []

    @property
    def convert_calls(self) -> list[dict[str, Any]]:
        return [c for c in self.calls if "-x" in c["args"]]

    @property
    def probe_calls(self) -> list[dict[str, Any]]:
        return [c for c in self.calls if "--dump-single-json" in c["args"]]

    def __call__(self, executable, args, cwd=None) -> ProcessResult:
        args = list(args)
        self.calls.append({"executable": executable, "args": args, "cwd": cwd})

        if "--dump-single-json" in args:
            if self.probe_result is not None:
                return self.probe_result
            return ProcessResult(stdout=json.dumps(self.probe_document), exit_code=0)

        if self.convert_result is not None and not self.convert_result.ok:
            return self.convert_result
        if self.write_output:
            fmt = args[args.index("--audio-format") + 1]
            template = args[args.index("-o") + 1]
            output = Path(cwd) / template.replace("%(ext)s", fmt)
            output.write_bytes(b"fLaC fake audio")
        return self.convert_result or ProcessResult(stderr="[ExtractAudio] done", exit_code=0)


@pytest.fixture
def config(tmp_path: Path) -> AudioFetchConfig:
    """Config isolated to a temporary directory, with PATH lookups disabled."""
    return AudioFetchConfig(
        bin_dir=tmp_path / "bin",
        scratch_bin_dir=tmp_path / "scratch-bin",
        scratch_root=tmp_path / "scratch",
        use_system_path=False,
        max_duration_seconds=600,
    )


@pytest.fixture
def binaries(tmp_path: Path) -> ResolvedBinaries:
    return ResolvedBinaries(
        extractor=tmp_path / "bin" / "yt-dlp",
        transcoder=tmp_path / "bin" / "ffmpeg",
    )


@pytest.fixture
def resolver(binaries: ResolvedBinaries) -> MagicMock:
    mock = MagicMock()
    mock.ensure.return_value = binaries
    return mock


@pytest.fixture
def storage() -> MemoryStorage:
    return MemoryStorage(base_url="https://blob.example")


@pytest.fixture
def sample_probe() -> dict[str, Any]:
    """A single-video yt-dlp document."""
    return {
        "id": "abc",
        "title": "Song",
        "duration": 120,
        "uploader": "Artist",
        "webpage_url": "https://example/video",
        "thumbnail": "https://example/thumb.jpg",
    }


@pytest.fixture
def sample_search_probe() -> dict[str, Any]:
    """A search/playlist yt-dlp document with several entries."""
    return {
        "_type": "playlist",
        "id": "artist song",
        "title": "artist song",
        "entries": [
            {"id": "first1", "title": "First Hit", "duration": 200},
            {"id": "second2", "title": "Second Hit", "duration": 5000},
        ],
    }


@pytest.fixture
def fake_ytdlp(monkeypatch: pytest.MonkeyPatch, sample_probe: dict[str, Any]) -> FakeYtDlp:
    """Patch the process runner used by probe and conversion."""
    fake = FakeYtDlp(sample_probe)
    monkeypatch.setattr("audiofetch.extract.probe.run_process", fake)
    monkeypatch.setattr("audiofetch.extract.audio.run_process", fake)
    return fake


@pytest.fixture
def pipeline(
    config: AudioFetchConfig, resolver: MagicMock, storage: MemoryStorage
) -> Pipeline:
    return Pipeline(config, resolver, storage)
