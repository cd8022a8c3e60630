"""
Error taxonomy for night-factory.

This module provides a hierarchical exception system with:
- Error codes for programmatic handling
- Structured context for debugging
- A split between fatal configuration/ledger problems and budget rejections

Budget rejections are normally returned as a negative ``SpendResult``; only the
opt-in ``BudgetMeter.require_spend`` turns them into ``BudgetExceededError``.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any


class ErrorCode(str, Enum):
    """Standardized error codes for night-factory."""

    # Configuration errors (1xxx)
    CONFIG_ERROR = "ERR_1000"
    CONFIG_NOT_FOUND = "ERR_1001"
    INVALID_CONFIG = "ERR_1002"

    # Ledger errors (2xxx)
    LEDGER_ERROR = "ERR_2000"
    LEDGER_CORRUPTED = "ERR_2001"
    LEDGER_WRITE_ERROR = "ERR_2002"

    # Budget errors (3xxx)
    BUDGET_EXCEEDED = "ERR_3000"

    # Internal errors (9xxx)
    INTERNAL_ERROR = "ERR_9000"


@dataclass
class ErrorContext:
    """Structured context for error debugging."""

    path: str | None = None
    kind: str | None = None
    step: str | None = None
    operation: str | None = None
    extra: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {
            "path": self.path,
            "kind": self.kind,
            "step": self.step,
            "operation": self.operation,
            **self.extra,
        }


class NightFactoryError(Exception):
    """
    Base exception for all night-factory errors.

    Attributes:
        code: Standardized error code for programmatic handling
        message: Human-readable error message
        context: Structured debugging context
        cause: Original exception that caused this error
    """

    code: ErrorCode = ErrorCode.INTERNAL_ERROR

    def __init__(
        self,
        message: str,
        *,
        code: ErrorCode | None = None,
        context: ErrorContext | None = None,
        cause: Exception | None = None,
    ):
        super().__init__(message)
        self.message = message
        if code is not None:
            self.code = code
        self.context = context or ErrorContext()
        self.cause = cause

    def __str__(self) -> str:
        parts = [f"[{self.code.value}] {self.message}"]
        if self.context.path:
            parts.append(f"(path={self.context.path})")
        return " ".join(parts)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for logging/serialization."""
        return {
            "error_type": self.__class__.__name__,
            "code": self.code.value,
            "message": self.message,
            "context": self.context.to_dict(),
            "cause": str(self.cause) if self.cause else None,
        }


# =============================================================================
# Configuration Errors
# =============================================================================


class ConfigError(NightFactoryError):
    """Budget configuration could not be loaded. Always fatal."""

    code = ErrorCode.CONFIG_ERROR


class ConfigNotFoundError(ConfigError):
    """The budget configuration file does not exist."""

    code = ErrorCode.CONFIG_NOT_FOUND

    def __init__(self, path: str | Path, **kwargs):
        kwargs.setdefault("context", ErrorContext(path=str(path)))
        super().__init__(f"Failed to load budget config: {path} not found", **kwargs)
        self.path = Path(path)


class InvalidConfigError(ConfigError):
    """The budget configuration is unparseable or fails validation."""

    code = ErrorCode.INVALID_CONFIG


# =============================================================================
# Ledger Errors
# =============================================================================


class LedgerError(NightFactoryError):
    """Base class for meter store failures."""

    code = ErrorCode.LEDGER_ERROR


class LedgerCorruptedError(LedgerError):
    """A persisted meter exists but cannot be parsed."""

    code = ErrorCode.LEDGER_CORRUPTED


class LedgerWriteError(LedgerError):
    """Persisting the meter failed; the charge was not recorded."""

    code = ErrorCode.LEDGER_WRITE_ERROR


# =============================================================================
# Budget Errors
# =============================================================================


class BudgetExceededError(NightFactoryError):
    """Raised by ``require_spend`` when a spend check is rejected."""

    code = ErrorCode.BUDGET_EXCEEDED

    def __init__(
        self,
        message: str,
        *,
        kind: str | None = None,
        cost: float = 0.0,
        **kwargs,
    ):
        kwargs.setdefault("context", ErrorContext(kind=kind))
        super().__init__(message, **kwargs)
        self.kind = kind
        self.cost = cost


def is_fatal(error: Exception) -> bool:
    """
    Check whether an error must abort the calling script.

    Configuration and ledger problems are fatal; budget rejections are not.
    """
    if isinstance(error, BudgetExceededError):
        return False
    return isinstance(error, NightFactoryError)


__all__ = [
    # Base
    "ErrorCode",
    "ErrorContext",
    "NightFactoryError",
    # Config errors
    "ConfigError",
    "ConfigNotFoundError",
    "InvalidConfigError",
    # Ledger errors
    "LedgerError",
    "LedgerCorruptedError",
    "LedgerWriteError",
    # Budget errors
    "BudgetExceededError",
    # Utilities
    "is_fatal",
]
