"""Structured logging for pipeline steps and the alert hook."""

import json
import logging
import sys
from typing import Any, Dict, Optional
from datetime import datetime, timezone


class StructuredFormatter(logging.Formatter):
    """Formats log records as structured JSON."""

    def format(self, record: logging.LogRecord) -> str:
        """Format log record as JSON.

        Args:
            record: Log record.

        Returns:
            Formatted JSON string.
        """
        log_obj = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
        }

        # Add exception info if present
        if record.exc_info:
            log_obj["exception"] = {
                "type": record.exc_info[0].__name__,
                "message": str(record.exc_info[1]),
                "traceback": self.formatException(record.exc_info),
            }

        # Add custom fields from extra dict
        if hasattr(record, "extra_fields"):
            log_obj.update(record.extra_fields)

        return json.dumps(log_obj, default=str)


class StructuredLogger:
    """Provides structured logging interface.

    Keyword fields passed to the logging methods are stored on the record as
    ``extra_fields``. The alert hook reads the same attribute, so fields such
    as ``stepName`` or ``error`` end up as event tags.
    """

    def __init__(self, name: str, level: str = "INFO", log_file: Optional[str] = None):
        """Initialize structured logger.

        Args:
            name: Logger name.
            level: Logging level.
            log_file: Optional file to write logs to.
        """
        self.logger = logging.getLogger(name)
        self.logger.setLevel(getattr(logging, level.upper()))

        # Remove existing handlers
        self.logger.handlers = []

        # Console handler with structured formatter
        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setFormatter(StructuredFormatter())
        self.logger.addHandler(console_handler)

        # File handler if specified
        if log_file:
            file_handler = logging.FileHandler(log_file)
            file_handler.setFormatter(StructuredFormatter())
            self.logger.addHandler(file_handler)

    def add_handler(self, handler: logging.Handler) -> None:
        """Attach an additional handler, e.g. the alert hook.

        Args:
            handler: Handler to attach.
        """
        self.logger.addHandler(handler)

    def debug(self, message: str, **fields: Any) -> None:
        self._log(logging.DEBUG, message, fields)

    def info(self, message: str, **fields: Any) -> None:
        self._log(logging.INFO, message, fields)

    def warning(self, message: str, **fields: Any) -> None:
        """Log a warning; delivered as an alert when the hook is attached."""
        self._log(logging.WARNING, message, fields)

    def error(self, message: str, **fields: Any) -> None:
        self._log(logging.ERROR, message, fields)

    def critical(self, message: str, **fields: Any) -> None:
        self._log(logging.CRITICAL, message, fields)

    def exception(self, message: str, **fields: Any) -> None:
        """Log an error with the exception currently being handled."""
        self._log(logging.ERROR, message, fields, exc_info=sys.exc_info())

    def _log(self, level: int, message: str, fields: Dict[str, Any], exc_info=None) -> None:
        """Build and dispatch one record.

        Args:
            level: Log level.
            message: Log message, used verbatim (no %-formatting).
            fields: Structured fields stored as ``extra_fields``.
            exc_info: Optional exception triple.
        """
        if not self.logger.isEnabledFor(level):
            return
        record = self.logger.makeRecord(
            self.logger.name,
            level,
            "",
            0,
            message,
            (),
            exc_info,
        )
        if fields:
            record.extra_fields = fields
        self.logger.handle(record)
