r"""
Logging configuration module for the Statcord stats client.

Provides an opt-in colored logging setup using the colorlog library plus
structured error logging with per-category aggregation.
"""

import logging
import os
import sys
import threading
import time
from collections import defaultdict
from typing import Any

import colorlog


class CredentialFilter(logging.Filter):
    """Filter that masks registered credentials in log messages.

    ``StatsClient`` attaches the shared instance to the root logger, which is
    where the client's own records are created, so masking does not depend on
    ``LoggerConfigurator``. Records from other loggers are only masked by
    handlers that carry the filter.
    """

    MASK = "***"

    def __init__(self) -> None:
        super().__init__()
        self._secrets: set[str] = set()

    def register(self, secret: str) -> None:
        if secret:
            self._secrets.add(secret)

    def filter(self, record: logging.LogRecord) -> bool:
        if not self._secrets:
            return True
        message = record.getMessage()
        masked = message
        for secret in self._secrets:
            masked = masked.replace(secret, self.MASK)
        if masked != message:
            record.msg = masked
            record.args = None
        return True


# Shared filter instance; StatsClient registers its key here.
credential_filter = CredentialFilter()


class ErrorAggregator:
    """Aggregates error occurrences per category for rate based alerting."""

    def __init__(self, max_per_type: int = 1000):
        self.errors: dict[str, list[dict[str, Any]]] = defaultdict(list)
        self.lock = threading.Lock()
        self.start_time = time.time()
        self.max_per_type = max_per_type

    def record_error(self, error_type: str, message: str, context: dict[str, Any] | None = None) -> None:
        """Record an error occurrence with context."""
        with self.lock:
            self.errors[error_type].append(
                {
                    "timestamp": time.time(),
                    "message": message,
                    "context": context or {},
                }
            )
            # Keep only recent errors per type
            if len(self.errors[error_type]) > self.max_per_type:
                self.errors[error_type] = self.errors[error_type][-self.max_per_type:]

    def get_error_summary(self) -> dict[str, Any]:
        """Get a summary of error patterns."""
        with self.lock:
            summary = {}
            current_time = time.time()
            runtime_hours = (current_time - self.start_time) / 3600

            for error_type, occurrences in self.errors.items():
                recent_count = len([e for e in occurrences if current_time - e["timestamp"] < 3600])  # last hour
                total_count = len(occurrences)
                summary[error_type] = {
                    "total_count": total_count,
                    "recent_count": recent_count,
                    "rate_per_hour": total_count / max(runtime_hours, 1),
                    "last_occurrence": occurrences[-1] if occurrences else None,
                }

            return summary

    def should_alert(self, error_type: str, threshold_rate: float = 10.0) -> bool:
        """Check if an error type should trigger an alert based on rate."""
        summary = self.get_error_summary()
        if error_type not in summary:
            return False
        return summary[error_type]["rate_per_hour"] > threshold_rate

    def clear(self) -> None:
        with self.lock:
            self.errors.clear()
            self.start_time = time.time()


# Global error aggregator instance
error_aggregator = ErrorAggregator()


def log_structured_error(
    error_type: str,
    message: str,
    exception: Exception | None = None,
    context: dict[str, Any] | None = None,
    level: int = logging.ERROR,
) -> None:
    """Log an error with structured context and aggregation.

    Args:
        error_type: Category of the error (e.g., 'network', 'remote', 'argument')
        message: Descriptive error message
        exception: The exception that occurred (optional)
        context: Additional context data for debugging
        level: Logging level (default: ERROR)
    """
    structured_message = f"[{error_type.upper()}] {message}"

    if exception:
        structured_message += f" | Exception: {type(exception).__name__}: {str(exception)}"

    if context:
        context_str = " | ".join(f"{k}={v}" for k, v in context.items())
        structured_message += f" | Context: {context_str}"

    logging.log(level, structured_message)

    error_aggregator.record_error(error_type, message, context)

    if error_aggregator.should_alert(error_type):
        logging.critical(
            f"🚨 HIGH ERROR RATE ALERT: {error_type} occurring at "
            f"{error_aggregator.get_error_summary()[error_type]['rate_per_hour']:.1f}/hour"
        )


class LoggerConfigurator:
    """Handles logging configuration using colorlog.

    Libraries should not configure logging on import; applications call
    ``configure()`` once at startup if they want the client's formatting.
    """

    def __init__(self, config=None):
        """Initialize the configurator.

        Args:
            config: Optional dict. Recognised key: ``stream`` (defaults to stderr).
        """
        self.config = config or {}

    def build_formatter(self) -> colorlog.ColoredFormatter:
        return colorlog.ColoredFormatter(
            "%(asctime)s %(log_color)s%(levelname)-8s%(reset)s %(message_log_color)s%(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
            log_colors={
                "DEBUG": "cyan",
                "INFO": "green",
                "WARNING": "yellow",
                "ERROR": "red",
                "CRITICAL": "magenta",
            },
            secondary_log_colors={
                "message": {
                    "ERROR": "red",
                    "CRITICAL": "magenta",
                }
            },
            reset=True,
        )

    def configure(self) -> logging.Handler:
        """Configure the root logger with colored output.

        Uses environment variables:
        - DEBUG: Set to 'true', '1', or 'yes' for DEBUG level, otherwise INFO

        Returns:
            The installed handler.
        """
        debug_env = os.environ.get("DEBUG", "").lower()
        log_level = logging.DEBUG if debug_env in ("true", "1", "yes") else logging.INFO

        handler = logging.StreamHandler(self.config.get("stream", sys.stderr))
        handler.setFormatter(self.build_formatter())
        handler.addFilter(credential_filter)

        root_logger = logging.getLogger()
        root_logger.addHandler(handler)
        root_logger.setLevel(log_level)

        # aiohttp access/client debug output is noisy at DEBUG
        logging.getLogger("aiohttp").setLevel(logging.INFO)
        return handler
