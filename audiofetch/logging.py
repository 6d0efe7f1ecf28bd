"""
audiofetch.logging - Logging setup for the CLI and the HTTP service.

Everything logs through the ``audiofetch`` logger. Chatty client libraries
(urllib3 under minio, httpx) stay at WARNING unless verbose mode is on.
"""

from __future__ import annotations

import logging

logger = logging.getLogger("audiofetch")

LOG_FORMAT = "%(levelname)s: %(message)s"
VERBOSE_LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"

QUIET_LIBRARIES = ("urllib3", "httpx")


def configure_logging(verbose: bool = False) -> None:
    """Configure logging for audiofetch.

    Args:
        verbose: If True, log subprocess command lines and resolver decisions
            at DEBUG level with timestamps; otherwise only warnings and errors
    """
    level = logging.DEBUG if verbose else logging.WARNING
    logging.basicConfig(
        level=level,
        format=VERBOSE_LOG_FORMAT if verbose else LOG_FORMAT,
    )
    logger.setLevel(level)
    for name in QUIET_LIBRARIES:
        logging.getLogger(name).setLevel(level if verbose else logging.WARNING)
