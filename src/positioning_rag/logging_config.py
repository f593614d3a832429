"""Structured logging configuration."""

import logging
import sys


class KeyValueFormatter(logging.Formatter):
    """Render log records as key=value pairs on a single line."""

    def format(self, record: logging.LogRecord) -> str:
        log_data = {
            "timestamp": self.formatTime(record, self.datefmt),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        if hasattr(record, "extra_data"):
            log_data.update(record.extra_data)

        parts = [f"{k}={v}" for k, v in log_data.items()]
        line = " ".join(parts)
        if record.exc_info:
            line = f"{line}\n{self.formatException(record.exc_info)}"
        return line


def configure_logging(level: str | None = None) -> None:
    """Install the key=value handler on the package logger.

    Args:
        level: Log level name. Defaults to settings.log_level.
    """
    from positioning_rag.config import settings

    logger = logging.getLogger("positioning_rag")
    if not logger.handlers:
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(KeyValueFormatter())
        logger.addHandler(handler)

    logger.setLevel((level or settings.log_level).upper())
