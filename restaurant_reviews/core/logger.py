"""
Centralized logging configuration for the Restaurant Review Service.

Provides a structured logger with:
- Correlation IDs pulled from the request context
- JSON output for files and production, colored console output for development
- Exception details attached to error entries
"""

import json
import logging
import os
import sys
from datetime import datetime, timezone
from typing import Any, Dict, Optional, Union

from restaurant_reviews.core.config import config
from restaurant_reviews.middleware.correlation_id import get_correlation_id


class StructuredLogger:
    """
    Logger that emits structured entries with service, environment and
    correlation metadata.
    """

    def __init__(self):
        self.service_name = config.service_name
        self.environment = config.environment
        self.log_level = config.log_level.upper()
        self.log_format = config.log_format
        self._logger = logging.getLogger(self.service_name)
        self._setup_logging()

    def _setup_logging(self):
        """Configure Python logging with handlers"""
        self._logger.handlers.clear()
        self._logger.setLevel(getattr(logging, self.log_level, logging.INFO))
        self._logger.propagate = False

        if config.log_to_console:
            console_handler = logging.StreamHandler(sys.stdout)
            if self.log_format == "json":
                console_handler.setFormatter(JSONFormatter())
            else:
                console_handler.setFormatter(ConsoleFormatter())
            self._logger.addHandler(console_handler)

        if config.log_to_file:
            directory = os.path.dirname(config.log_file_path)
            if directory:
                os.makedirs(directory, exist_ok=True)
            file_handler = logging.FileHandler(config.log_file_path)
            file_handler.setFormatter(JSONFormatter())  # Always JSON for files
            self._logger.addHandler(file_handler)

    def _build_log_entry(
        self,
        level: str,
        message: str,
        correlation_id: Optional[str] = None,
        user_id: Optional[Union[str, int]] = None,
        metadata: Optional[Dict[str, Any]] = None,
    ) -> Dict[str, Any]:
        """Build structured log entry"""
        entry = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": level,
            "service": self.service_name,
            "environment": self.environment,
            "message": message,
            "correlationId": correlation_id or get_correlation_id(),
        }

        if user_id is not None:
            entry["userId"] = user_id

        if metadata:
            entry["metadata"] = metadata

        return entry

    def _log(
        self,
        level: str,
        message: str,
        correlation_id: Optional[str] = None,
        user_id: Optional[Union[str, int]] = None,
        metadata: Optional[Dict[str, Any]] = None,
    ):
        entry = self._build_log_entry(level, message, correlation_id, user_id, metadata)
        # 'message' clashes with LogRecord attributes
        extra = {"structured": {k: v for k, v in entry.items() if k != "message"}}
        self._logger.log(getattr(logging, level), message, extra=extra)

    @staticmethod
    def _attach_error(metadata: Optional[Dict[str, Any]], error) -> Dict[str, Any]:
        metadata = dict(metadata or {})
        if isinstance(error, Exception):
            metadata["error"] = {"type": type(error).__name__, "message": str(error)}
        elif error:
            metadata["error"] = {"message": str(error)}
        return metadata

    def debug(self, message: str, correlation_id: Optional[str] = None,
              user_id: Optional[Union[str, int]] = None,
              metadata: Optional[Dict[str, Any]] = None):
        """Debug level logging"""
        self._log("DEBUG", message, correlation_id, user_id, metadata)

    def info(self, message: str, correlation_id: Optional[str] = None,
             user_id: Optional[Union[str, int]] = None,
             metadata: Optional[Dict[str, Any]] = None):
        """Info level logging"""
        self._log("INFO", message, correlation_id, user_id, metadata)

    def warning(self, message: str, correlation_id: Optional[str] = None,
                user_id: Optional[Union[str, int]] = None,
                metadata: Optional[Dict[str, Any]] = None):
        """Warning level logging"""
        self._log("WARNING", message, correlation_id, user_id, metadata)

    def error(self, message: str, correlation_id: Optional[str] = None,
              user_id: Optional[Union[str, int]] = None,
              error: Optional[Union[str, Exception]] = None,
              metadata: Optional[Dict[str, Any]] = None):
        """Error level logging"""
        if error is not None:
            metadata = self._attach_error(metadata, error)
        self._log("ERROR", message, correlation_id, user_id, metadata)

    def critical(self, message: str, correlation_id: Optional[str] = None,
                 user_id: Optional[Union[str, int]] = None,
                 error: Optional[Union[str, Exception]] = None,
                 metadata: Optional[Dict[str, Any]] = None):
        """Critical level logging"""
        if error is not None:
            metadata = self._attach_error(metadata, error)
        self._log("CRITICAL", message, correlation_id, user_id, metadata)

    def performance(self, operation: str, duration_ms: int,
                    threshold_ms: Optional[int] = None,
                    metadata: Optional[Dict[str, Any]] = None):
        """Log operation timing, escalating to WARNING above the threshold"""
        metadata = dict(metadata or {})
        metadata.update({
            "operation": operation,
            "durationMs": duration_ms,
            "thresholdMs": threshold_ms,
        })
        level = "WARNING" if threshold_ms and duration_ms > threshold_ms else "INFO"
        self._log(level, f"Operation completed: {operation}", metadata=metadata)


class JSONFormatter(logging.Formatter):
    """JSON formatter for structured logging"""

    def format(self, record):
        log_data = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "message": record.getMessage(),
        }
        log_data.update(getattr(record, "structured", {}))
        return json.dumps(log_data, default=str)


class ConsoleFormatter(logging.Formatter):
    """Colored console formatter for development"""

    COLORS = {
        'DEBUG': '\033[36m',      # Cyan
        'INFO': '\033[32m',       # Green
        'WARNING': '\033[33m',    # Yellow
        'ERROR': '\033[31m',      # Red
        'CRITICAL': '\033[35m',   # Magenta
        'RESET': '\033[0m'
    }

    def format(self, record):
        color = self.COLORS.get(record.levelname, self.COLORS['RESET'])
        reset = self.COLORS['RESET']
        timestamp = datetime.fromtimestamp(record.created).strftime('%Y-%m-%d %H:%M:%S')
        structured = getattr(record, "structured", {})
        correlation_id = structured.get("correlationId") or "no-correlation"
        line = f"{color}[{timestamp}] {record.levelname}{reset} [{correlation_id}] - {record.getMessage()}"
        if structured.get("metadata"):
            line += f" {json.dumps(structured['metadata'], default=str)}"
        return line


# Create and export the logger instance
logger = StructuredLogger()
