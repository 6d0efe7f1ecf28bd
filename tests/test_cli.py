"""Tests for audiofetch CLI commands."""

from __future__ import annotations

from pathlib import Path

import pytest
import yaml
from typer.testing import CliRunner

from audiofetch import __version__
from audiofetch.cli import app
from audiofetch.exceptions import BinaryUnavailableError
from audiofetch.models import ProcessResult

runner = CliRunner()


@pytest.fixture
def in_tmp(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    monkeypatch.chdir(tmp_path)
    return tmp_path


@pytest.fixture
def patched_pipeline(monkeypatch: pytest.MonkeyPatch, pipeline, in_tmp):
    monkeypatch.setattr(
        "audiofetch.pipeline.build_pipeline", lambda config, storage=None: pipeline
    )
    return pipeline


class TestVersion:
    def test_version_flag(self) -> None:
        result = runner.invoke(app, ["--version"])
        assert result.exit_code == 0
        assert __version__ in result.output


class TestInitConfigCommand:
    def test_writes_default_config(self, in_tmp: Path) -> None:
        result = runner.invoke(app, ["init-config"])

        assert result.exit_code == 0
        data = yaml.safe_load((in_tmp / "audiofetch.yaml").read_text())
        assert data["max_duration_seconds"] == 600
        assert data["storage"]["bucket"] == "audiofetch"

    def test_refuses_to_overwrite(self, in_tmp: Path) -> None:
        (in_tmp / "audiofetch.yaml").write_text("default_format: mp3\n")
        result = runner.invoke(app, ["init-config"])
        assert result.exit_code == 1
        assert "already exists" in result.output


class TestInfoCommand:
    def test_prints_table(self, patched_pipeline, fake_ytdlp) -> None:
        result = runner.invoke(app, ["info", "https://example/video"])

        assert result.exit_code == 0
        assert "Song" in result.output
        assert "2:00" in result.output

    def test_json_output(self, patched_pipeline, fake_ytdlp) -> None:
        result = runner.invoke(app, ["info", "https://example/video", "--json"])
        assert result.exit_code == 0
        assert '"uploader": "Artist"' in result.output

    def test_probe_failure_exits_1(self, patched_pipeline, fake_ytdlp) -> None:
        fake_ytdlp.probe_result = ProcessResult(stderr="ERROR: Unsupported URL", exit_code=1)
        result = runner.invoke(app, ["info", "bad"])
        assert result.exit_code == 1
        assert "yt-dlp probe failed" in result.output


class TestDownloadCommand:
    def test_publishes_and_prints_url(self, patched_pipeline, fake_ytdlp) -> None:
        result = runner.invoke(app, ["download", "https://example/video", "-f", "mp3"])

        assert result.exit_code == 0
        assert "Published audio/Song.abc.mp3" in result.output
        assert "https://blob.example/audio/Song.abc.mp3" in result.output

    def test_too_long_exits_1(self, patched_pipeline, fake_ytdlp) -> None:
        fake_ytdlp.probe_document = {"id": "long", "title": "Concert", "duration": 9999}
        result = runner.invoke(app, ["download", "https://example/long"])
        assert result.exit_code == 1
        assert "Media too long" in result.output
        assert fake_ytdlp.convert_calls == []

    def test_invalid_format_exits_1(self, patched_pipeline, fake_ytdlp) -> None:
        result = runner.invoke(app, ["download", "x", "--format", "aiff"])
        assert result.exit_code == 1
        assert "Unsupported format" in result.output


class TestConfigOption:
    def test_invalid_config_file_exits_1(self, in_tmp: Path) -> None:
        bad = in_tmp / "bad.yaml"
        bad.write_text("default_format: aiff\n")
        result = runner.invoke(app, ["--config", str(bad), "doctor"])
        assert result.exit_code == 1
        assert "Invalid configuration" in result.output

    def test_missing_config_file_exits_1(self, in_tmp: Path) -> None:
        result = runner.invoke(app, ["--config", str(in_tmp / "nope.yaml"), "doctor"])
        assert result.exit_code == 1
        assert "Config file not found" in result.output


class TestDoctorCommand:
    def test_all_found(self, in_tmp: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr(
            "audiofetch.validation.check_binaries",
            lambda resolver: {
                "yt-dlp": {"path": "/bin/yt-dlp", "version": "2024.08.06"},
                "ffmpeg": {"path": "/bin/ffmpeg", "version": "7.0.2"},
            },
        )
        result = runner.invoke(app, ["doctor"])
        assert result.exit_code == 0
        assert "All checks passed" in result.output

    def test_missing_tool(self, in_tmp: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        def missing(resolver):
            raise BinaryUnavailableError("ffmpeg", "not found", "apt install ffmpeg")

        monkeypatch.setattr("audiofetch.validation.check_binaries", missing)
        result = runner.invoke(app, ["doctor"])
        assert result.exit_code == 1
        assert "Some checks failed" in result.output
