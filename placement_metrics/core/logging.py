"""Structured logging for the placement metrics engine.

Records render as ``key=value`` pairs on stdout so batch jobs that recompute
streaks and scores can be grepped by ``student_id``.
"""

import logging
import sys
from typing import Any

# Context fields promoted to top-level keys when passed via log_with_context
CONTEXT_KEYS = ("student_id", "component")


class StructuredFormatter(logging.Formatter):
    """Key=value structured log formatter."""

    def format(self, record: logging.LogRecord) -> str:
        """Format log record as structured output."""
        log_data = {
            "timestamp": self.formatTime(record, self.datefmt),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        for key in CONTEXT_KEYS:
            if hasattr(record, key):
                log_data[key] = getattr(record, key)

        if hasattr(record, "extra_data"):
            log_data.update(record.extra_data)

        if record.exc_info:
            log_data["error"] = self.formatException(record.exc_info).splitlines()[-1]

        return " ".join(f"{k}={v}" for k, v in log_data.items())


def _resolve_level() -> int:
    """Pick the log level from settings, falling back to INFO."""
    try:
        from placement_metrics.core.config import get_settings

        settings = get_settings()
    except Exception:
        return logging.INFO

    if settings.LOG_LEVEL:
        level = logging.getLevelName(settings.LOG_LEVEL.upper())
        return level if isinstance(level, int) else logging.INFO
    return logging.DEBUG if settings.PLACEMENT_ENGINE_ENV == "dev" else logging.INFO


def get_logger(name: str) -> logging.Logger:
    """
    Get a configured logger instance.

    Args:
        name: Logger name (typically __name__)

    Returns:
        Logger with a single structured stdout handler
    """
    logger = logging.getLogger(name)

    # Only configure if not already configured
    if not logger.handlers:
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(StructuredFormatter())
        logger.addHandler(handler)
        logger.setLevel(_resolve_level())

    return logger


def log_with_context(logger: logging.Logger, level: int, msg: str, **kwargs: Any) -> None:
    """
    Log with additional context fields.

    Args:
        logger: Logger instance
        level: Log level (logging.INFO, etc.)
        msg: Log message
        **kwargs: Context fields; ``student_id`` and ``component`` become
            top-level keys, everything else is appended as-is
    """
    extra: dict[str, Any] = {key: kwargs.pop(key) for key in CONTEXT_KEYS if key in kwargs}
    extra["extra_data"] = kwargs
    logger.log(level, msg, extra=extra)
