"""
Structured Logging for Night Factory.

This module provides:
- Structured JSON or text logging with consistent fields
- Spend, rejection, threshold and reset records for the budget meter
- Context tracking (run, kind, step) for correlation across a nightly run
"""

from __future__ import annotations

import json
import logging
import sys
import uuid
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import asdict, dataclass, field
from datetime import datetime, timezone
from typing import Any

# =============================================================================
# Log Record Types
# =============================================================================


@dataclass
class LogContext:
    """Context information attached to log records."""

    run_id: str | None = None
    kind: str | None = None
    step: str | None = None
    operation: str | None = None
    extra: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        d = {k: v for k, v in asdict(self).items() if v is not None and k != "extra"}
        d.update(self.extra)
        return d

    def with_update(self, **kwargs) -> LogContext:
        """Create a new context with updated values."""
        return LogContext(
            run_id=kwargs.get("run_id", self.run_id),
            kind=kwargs.get("kind", self.kind),
            step=kwargs.get("step", self.step),
            operation=kwargs.get("operation", self.operation),
            extra={**self.extra, **kwargs.get("extra", {})},
        )


@dataclass
class SpendLog:
    """Log record for a committed or rejected charge."""

    kind: str
    step: str
    count: float
    cost: float
    total: float
    limit: float
    granted: bool = True
    reason: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {k: v for k, v in asdict(self).items() if v is not None}


@dataclass
class ThresholdLog:
    """Log record for a crossed warning threshold."""

    label: str
    percent: float
    total: float
    limit: float

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


# =============================================================================
# Structured Logger
# =============================================================================


class StructuredLogger:
    """
    Logger with structured output and context tracking.

    Example:
        ```python
        logger = StructuredLogger("night_factory")

        with logger.run_context(meter.run_id, kind="gemini_call", step="research"):
            logger.log_spend(SpendLog(...))
        ```
    """

    def __init__(
        self,
        name: str = "night_factory",
        level: str = "INFO",
        json_output: bool = False,
    ):
        self.name = name
        self.json_output = json_output

        self._logger = logging.getLogger(name)
        self._logger.setLevel(getattr(logging, level.upper()))

        self._context: LogContext = LogContext()

        if not self._logger.handlers:
            handler = logging.StreamHandler(sys.stderr)
            if json_output:
                handler.setFormatter(JSONFormatter())
            else:
                handler.setFormatter(TextFormatter())
            self._logger.addHandler(handler)

    @property
    def context(self) -> LogContext:
        return self._context

    @contextmanager
    def run_context(
        self,
        run_id: str | None = None,
        **kwargs,
    ) -> Iterator[str]:
        """
        Context manager for correlating all records of one nightly run.

        Yields:
            The run ID
        """
        run_id = run_id or generate_run_id()
        old_context = self._context

        try:
            self._context = old_context.with_update(run_id=run_id, **kwargs)
            yield run_id
        finally:
            self._context = old_context

    def _log(
        self,
        level: int,
        message: str,
        event_type: str | None = None,
        data: dict[str, Any] | None = None,
    ) -> None:
        record_data = {
            "message": message,
            **self._context.to_dict(),
        }

        if event_type:
            record_data["event_type"] = event_type

        if data:
            record_data.update(data)

        if self.json_output:
            self._logger.log(level, json.dumps(record_data))
        else:
            extras = " ".join(f"{k}={v}" for k, v in record_data.items() if k != "message")
            self._logger.log(level, f"{message} {extras}".rstrip())

    def warning(self, message: str, **kwargs) -> None:
        self._log(logging.WARNING, message, data=kwargs)

    # Typed logging methods

    def log_spend(self, spend: SpendLog) -> None:
        """Log a spend decision."""
        if spend.granted:
            self._log(
                logging.INFO,
                f"Charged {spend.cost:.2f} SEK for {spend.count} x {spend.kind}",
                event_type="budget_spend",
                data=spend.to_dict(),
            )
        else:
            self._log(
                logging.WARNING,
                f"Rejected {spend.cost:.2f} SEK for {spend.count} x {spend.kind}",
                event_type="budget_rejected",
                data=spend.to_dict(),
            )

    def log_threshold(self, threshold: ThresholdLog) -> None:
        """Log a crossed budget threshold."""
        self._log(
            logging.WARNING,
            f"Budget at {threshold.percent:.1f}% ({threshold.total:.2f}/{threshold.limit:g} SEK)",
            event_type="budget_threshold",
            data=threshold.to_dict(),
        )

    def log_reset(self, start_time: str) -> None:
        """Log a meter reset."""
        self._log(
            logging.INFO,
            "Budget meter reset",
            event_type="budget_reset",
            data={"start_time": start_time},
        )

    def log_error(
        self,
        error: Exception,
        message: str | None = None,
        **kwargs,
    ) -> None:
        """Log an error with context."""
        error_data = {
            "error_type": type(error).__name__,
            "error_message": str(error),
            **kwargs,
        }

        if hasattr(error, "code"):
            error_data["error_code"] = str(error.code.value)
        if hasattr(error, "context") and error.context:
            error_data["error_context"] = error.context.to_dict()

        self._log(
            logging.ERROR,
            message or f"Error: {error}",
            event_type="error",
            data=error_data,
        )


# =============================================================================
# Formatters
# =============================================================================


class JSONFormatter(logging.Formatter):
    """JSON log formatter."""

    def format(self, record: logging.LogRecord) -> str:
        log_data = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
        }

        try:
            message_data = json.loads(record.getMessage())
            log_data.update(message_data)
        except (json.JSONDecodeError, TypeError):
            log_data["message"] = record.getMessage()

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_data)


class TextFormatter(logging.Formatter):
    """Human-readable text formatter."""

    LEVEL_COLORS = {
        "DEBUG": "\033[36m",  # Cyan
        "INFO": "\033[32m",  # Green
        "WARNING": "\033[33m",  # Yellow
        "ERROR": "\033[31m",  # Red
        "CRITICAL": "\033[35m",  # Magenta
    }
    RESET = "\033[0m"

    def format(self, record: logging.LogRecord) -> str:
        timestamp = datetime.now().strftime("%H:%M:%S.%f")[:-3]
        color = self.LEVEL_COLORS.get(record.levelname, "")
        reset = self.RESET if color else ""

        return f"{timestamp} {color}{record.levelname:8}{reset} {record.getMessage()}"


# =============================================================================
# Utilities
# =============================================================================


def generate_run_id() -> str:
    """Generate a unique run ID."""
    return f"run_{uuid.uuid4().hex[:12]}"


# =============================================================================
# Global Logger
# =============================================================================

_default_logger: StructuredLogger | None = None


def get_logger(name: str = "night_factory") -> StructuredLogger:
    """Get or create a structured logger."""
    global _default_logger
    if _default_logger is None or _default_logger.name != name:
        _default_logger = StructuredLogger(name)
    return _default_logger


def configure_logging(
    level: str = "INFO",
    json_output: bool = False,
    **kwargs: Any,
) -> StructuredLogger:
    """Configure the default logger."""
    global _default_logger
    _default_logger = StructuredLogger(
        level=level,
        json_output=json_output,
        **kwargs,
    )
    return _default_logger


__all__ = [
    # Context
    "LogContext",
    # Log records
    "SpendLog",
    "ThresholdLog",
    # Logger
    "StructuredLogger",
    # Formatters
    "JSONFormatter",
    "TextFormatter",
    # Utilities
    "generate_run_id",
    # Global
    "get_logger",
    "configure_logging",
]
