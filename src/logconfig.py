"""Logging setup for processes that drive matching runs.

The engine modules only create module loggers; whoever runs them calls
`configure_logging` once, or passes `log_level` to
`graph.run_matching_pipeline`, which calls it.
"""

import json
import logging
import os
import sys
from typing import Optional, Union

LOG_LEVEL_ENV = "MATCHING_LOG_LEVEL"


class JsonFormatter(logging.Formatter):
    """Single-line JSON records for machine-ingested logs."""

    def format(self, record: logging.LogRecord) -> str:
        log_record = {
            "timestamp": self.formatTime(record, self.datefmt),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        if record.exc_info:
            log_record["exception"] = self.formatException(record.exc_info)
        return json.dumps(log_record, ensure_ascii=False)


def _env_level() -> str:
    return os.getenv(LOG_LEVEL_ENV, "INFO").upper()


def configure_logging(level: Optional[Union[int, str]] = None, json_logs: bool = False) -> logging.Logger:
    """
    Route root logging to stdout with a text or JSON formatter.

    Args:
        level: Explicit level; defaults to $MATCHING_LOG_LEVEL or INFO.
        json_logs: Emit JSON lines instead of human-readable text.

    Returns:
        The "matching" logger.
    """
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(
        JsonFormatter(datefmt="%Y-%m-%d %H:%M:%S")
        if json_logs
        else logging.Formatter(
            fmt="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
    )
    logging.basicConfig(level=level or _env_level(), handlers=[handler], force=True)
    return logging.getLogger("matching")
