"""
Structured logging system for the company directory.

Provides centralized logging with console and file outputs, and tracks
storage metrics so that swallowed persistence failures stay observable.
"""

import logging
import sys
from pathlib import Path
from typing import Optional
from datetime import datetime
import json


class StructuredLogger:
    """
    Centralized logger with support for console and file outputs.
    Tracks metrics for storage health and mutation volume.
    """

    def __init__(
        self,
        name: str = "companydir",
        level: str = "INFO",
        log_dir: Optional[Path] = None,
        enable_file: bool = True,
        enable_console: bool = True,
    ):
        """
        Initialize the structured logger.

        Args:
            name: Logger name
            level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
            log_dir: Directory for log files (default: logs/)
            enable_file: Write logs to file
            enable_console: Output logs to console
        """
        self.logger = logging.getLogger(name)
        self.logger.setLevel(getattr(logging, level.upper()))
        self.logger.handlers.clear()  # Remove existing handlers

        self.metrics = {
            "storage_reads": 0,
            "storage_writes": 0,
            "storage_failures": 0,
            "validation_failures": 0,
            "errors_by_type": {},
            "mutations_by_collection": {},
        }

        if enable_console:
            console_handler = logging.StreamHandler(sys.stderr)
            console_handler.setLevel(getattr(logging, level.upper()))
            console_formatter = logging.Formatter(
                fmt='%(asctime)s | %(levelname)-8s | %(name)s | %(message)s',
                datefmt='%Y-%m-%d %H:%M:%S'
            )
            console_handler.setFormatter(console_formatter)
            self.logger.addHandler(console_handler)

        if enable_file:
            if log_dir is None:
                log_dir = Path("logs")
            log_dir.mkdir(parents=True, exist_ok=True)

            log_file = log_dir / f"companydir_{datetime.now().strftime('%Y%m%d')}.log"
            file_handler = logging.FileHandler(log_file, encoding='utf-8')
            file_handler.setLevel(logging.DEBUG)  # Always log everything to file
            file_formatter = logging.Formatter(
                fmt='%(asctime)s | %(levelname)-8s | %(name)s:%(lineno)d | %(message)s',
                datefmt='%Y-%m-%d %H:%M:%S'
            )
            file_handler.setFormatter(file_formatter)
            self.logger.addHandler(file_handler)

    def debug(self, message: str, **kwargs):
        """Log debug message with optional context."""
        self._log(logging.DEBUG, message, kwargs)

    def info(self, message: str, **kwargs):
        """Log info message with optional context."""
        self._log(logging.INFO, message, kwargs)

    def warning(self, message: str, **kwargs):
        """Log warning message with optional context."""
        self._log(logging.WARNING, message, kwargs)

    def error(self, message: str, **kwargs):
        """Log error message with optional context."""
        self._log(logging.ERROR, message, kwargs)

    def critical(self, message: str, **kwargs):
        """Log critical message with optional context."""
        self._log(logging.CRITICAL, message, kwargs)

    def _log(self, level: int, message: str, context: dict):
        """Internal logging method with context."""
        if context:
            message = f"{message} | Context: {json.dumps(context, default=str)}"
        self.logger.log(level, message)

    # Metric tracking methods

    def record_read(self):
        """Increment storage read counter."""
        self.metrics["storage_reads"] += 1

    def record_write(self, collection: str):
        """Record a successful collection write."""
        self.metrics["storage_writes"] += 1
        per_collection = self.metrics["mutations_by_collection"]
        per_collection[collection] = per_collection.get(collection, 0) + 1

    def record_storage_failure(self, error_type: str):
        """Record a read, write or parse failure that was degraded."""
        self.metrics["storage_failures"] += 1

        if error_type not in self.metrics["errors_by_type"]:
            self.metrics["errors_by_type"][error_type] = 0
        self.metrics["errors_by_type"][error_type] += 1

    def record_validation_failure(self):
        self.metrics["validation_failures"] += 1

    def get_metrics(self) -> dict:
        """Return a copy of the current metrics."""
        metrics_copy = self.metrics.copy()
        metrics_copy["errors_by_type"] = dict(self.metrics["errors_by_type"])
        metrics_copy["mutations_by_collection"] = dict(self.metrics["mutations_by_collection"])

        total = metrics_copy["storage_reads"] + metrics_copy["storage_writes"]
        metrics_copy["failure_rate"] = 0
        if total > 0:
            metrics_copy["failure_rate"] = round(
                metrics_copy["storage_failures"] / total, 3
            )
        return metrics_copy

    def log_metrics_summary(self):
        """Log a summary of current metrics."""
        metrics = self.get_metrics()

        self.info("=== Storage Session Metrics ===")
        self.info(f"Reads: {metrics['storage_reads']}  Writes: {metrics['storage_writes']}")
        self.info(
            f"Failures: {metrics['storage_failures']} "
            f"({metrics['failure_rate'] * 100:.1f}% of operations)"
        )
        self.info(f"Rejected inputs: {metrics['validation_failures']}")

        if metrics["mutations_by_collection"]:
            self.info("Writes by collection:")
            for collection, count in metrics["mutations_by_collection"].items():
                self.info(f"  {collection}: {count}")

        if metrics["errors_by_type"]:
            self.info("Error Types:")
            for error_type, count in metrics["errors_by_type"].items():
                self.info(f"  {error_type}: {count}")


# Global logger instance
_global_logger: Optional[StructuredLogger] = None


def get_logger(
    name: str = "companydir",
    level: Optional[str] = None,
    **kwargs
) -> StructuredLogger:
    """
    Get or create the global logger instance.

    On first creation, level and file output default to the values in
    ``get_settings()`` unless passed explicitly.

    Args:
        name: Logger name
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        **kwargs: Additional arguments passed to StructuredLogger

    Returns:
        StructuredLogger instance
    """
    global _global_logger

    if _global_logger is None:
        from .env import get_settings

        settings = get_settings()
        kwargs.setdefault("enable_file", settings.log_to_file)
        kwargs.setdefault("log_dir", Path(settings.log_dir))
        _global_logger = StructuredLogger(
            name=name, level=level or settings.log_level, **kwargs
        )

    return _global_logger


def reset_logger():
    """Reset the global logger (useful for testing)."""
    global _global_logger
    _global_logger = None
