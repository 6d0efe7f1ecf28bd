"""
audiofetch.process - External process runner.

Runs a program to completion and returns its captured output. Failures are
reported through the result, never raised.
"""

from __future__ import annotations

import subprocess
from collections.abc import Sequence
from pathlib import Path

from audiofetch.logging import logger
from audiofetch.models import ProcessResult

SPAWN_FAILURE_EXIT_CODE = 127


def run_process(
    executable: str | Path,
    args: Sequence[str],
    cwd: str | Path | None = None,
) -> ProcessResult:
    """Run an executable and capture stdout/stderr.

    Args:
        executable: Path to the program
        args: Arguments, in order
        cwd: Optional working directory

    Returns:
        ProcessResult. A program that cannot be started yields exit code 127
        with the system error message in stderr.
    """
    cmd = [str(executable), *args]
    logger.debug("Running: %s", " ".join(cmd))

    try:
        proc = subprocess.run(
            cmd,
            cwd=str(cwd) if cwd is not None else None,
            capture_output=True,
            text=True,
            encoding="utf-8",
            errors="replace",
        )
    except (OSError, ValueError) as e:
        logger.debug("Failed to start %s: %s", executable, e)
        return ProcessResult(
            stdout="",
            stderr=f"Failed to start {executable}: {e}",
            exit_code=SPAWN_FAILURE_EXIT_CODE,
        )

    logger.debug("%s exited with %d", Path(str(executable)).name, proc.returncode)
    return ProcessResult(
        stdout=proc.stdout or "",
        stderr=proc.stderr or "",
        exit_code=proc.returncode,
    )
