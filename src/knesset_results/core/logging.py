"""Loguru logging configuration.

Every line carries the round being processed (``-`` outside a round); the
pipeline binds it with ``logger.contextualize(round=...)``.  Optionally
writes to a rotating log file when a ``log_dir`` is provided.
"""

import sys
from pathlib import Path

from loguru import logger

LOG_FILENAME = "knesset-results.log"

_LOG_FORMAT = (
    "{time:YYYY-MM-DD HH:mm:ss.SSS} | {level:<8} | round {extra[round]:<3} | "
    "{name}:{function}:{line} | {message}"
)


def setup_logging(log_level: str = "INFO", log_dir: str | None = None) -> None:
    """Configure Loguru sinks for a pipeline run.

    Args:
        log_level: Minimum log level to emit.
        log_dir: Optional directory for log files.  When set, a rotating
            file sink is added (rotated every 24 hours, retained 7 days).
    """
    logger.remove()
    logger.configure(extra={"round": "-"})
    logger.add(sys.stderr, level=log_level.upper(), format=_LOG_FORMAT)

    if log_dir:
        log_path = Path(log_dir)
        log_path.mkdir(parents=True, exist_ok=True)
        logger.add(
            log_path / LOG_FILENAME,
            level=log_level.upper(),
            format=_LOG_FORMAT,
            rotation="24h",
            retention="7 days",
            encoding="utf-8",
        )
