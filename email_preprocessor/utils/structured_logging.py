"""
Structured Logging Module
Provides JSON-formatted logging for log aggregation tools
"""

import json
import logging
from typing import Any


class JSONFormatter(logging.Formatter):
    """
    Formatter that outputs each log record as one JSON object.

    Extra context goes in through ``extra={"extra_fields": {...}}``. Fields
    whose name mentions message content are replaced with a placeholder:
    bodies, markdown and context strings are personal data and must not end
    up in a log index.
    """

    REDACTED_FIELDS = {
        'body', 'html', 'plain', 'markdown', 'context', 'headers', 'raw'
    }

    def format(self, record: logging.LogRecord) -> str:
        """
        Format a log record as JSON.

        Args:
            record: Python logging.LogRecord to format

        Returns:
            JSON string with structured log data
        """
        log_data = {
            "timestamp": self.formatTime(record, self.datefmt),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
        }

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        if hasattr(record, "extra_fields"):
            log_data.update({
                k: self._redact_value(k, v)
                for k, v in record.extra_fields.items()
            })

        return json.dumps(log_data, default=str)

    def _redact_value(self, key: str, value: Any) -> Any:
        """Return "[REDACTED]" for fields carrying message content"""
        key_lower = key.lower()
        if any(field in key_lower for field in self.REDACTED_FIELDS):
            return "[REDACTED]"
        return value
