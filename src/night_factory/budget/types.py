"""
Budget meter types: persisted ledger state, spend results and summaries.
"""

from __future__ import annotations

import copy
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any

WARNING_THRESHOLD = 75.0
CRITICAL_THRESHOLD = 90.0


def utc_timestamp(now: datetime | None = None) -> str:
    """ISO 8601 UTC timestamp with millisecond precision and a ``Z`` suffix."""
    now = now or datetime.now(timezone.utc)
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)
    return now.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def parse_timestamp(value: str) -> datetime:
    """Parse a timestamp written by ``utc_timestamp``."""
    if value.endswith("Z"):
        value = value[:-1] + "+00:00"
    return datetime.fromisoformat(value)


@dataclass
class SpendStep:
    """One committed charge event in the meter history."""

    timestamp: str
    step: str
    kind: str
    count: float
    cost: float
    total_after: float

    def to_dict(self) -> dict[str, Any]:
        return {
            "timestamp": self.timestamp,
            "step": self.step,
            "kind": self.kind,
            "count": self.count,
            "cost": self.cost,
            "totalAfter": self.total_after,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> SpendStep:
        return cls(
            timestamp=data["timestamp"],
            step=data["step"],
            kind=data["kind"],
            count=data["count"],
            cost=data["cost"],
            total_after=data["totalAfter"],
        )


@dataclass
class MeterState:
    """The persisted ledger record.

    ``total`` always equals the sum of ``steps[i].cost`` and ``by[kind]`` the
    sum over that kind's steps. ``warnings`` only grows until the next reset.
    """

    total: float = 0.0
    by: dict[str, float] = field(default_factory=dict)
    steps: list[SpendStep] = field(default_factory=list)
    start_time: str = field(default_factory=utc_timestamp)
    warnings: list[str] = field(default_factory=list)

    @classmethod
    def fresh(cls, now: datetime | None = None) -> MeterState:
        """A zero-state meter starting now."""
        return cls(start_time=utc_timestamp(now))

    def spent_on(self, kind: str) -> float:
        """Cumulative spend for a call kind, zero if it was never charged."""
        return self.by.get(kind, 0.0)

    def commit(self, step: SpendStep) -> None:
        """Apply a charge: bump the totals and append the step."""
        self.total = step.total_after
        self.by[step.kind] = self.spent_on(step.kind) + step.cost
        self.steps.append(step)

    def copy(self) -> MeterState:
        return copy.deepcopy(self)

    def to_dict(self) -> dict[str, Any]:
        return {
            "total": self.total,
            "by": dict(self.by),
            "steps": [s.to_dict() for s in self.steps],
            "startTime": self.start_time,
            "warnings": list(self.warnings),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> MeterState:
        return cls(
            total=data.get("total", 0.0),
            by=dict(data.get("by", {})),
            steps=[SpendStep.from_dict(s) for s in data.get("steps", [])],
            start_time=data["startTime"],
            warnings=list(data.get("warnings", [])),
        )


@dataclass
class SpendResult:
    """Outcome of a spend check.

    A rejection carries the unmutated meter and a human-readable message.
    """

    granted: bool
    meter: MeterState
    cost: float = 0.0
    message: str | None = None
    warning: str | None = None  # threshold label crossed by this charge

    def __bool__(self) -> bool:
        return self.granted

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"granted": self.granted, "ledger": self.meter.to_dict()}
        if self.message is not None:
            data["message"] = self.message
        return data


class BudgetStatus(str, Enum):
    """Overall usage band, mapped to the report command's exit code."""

    OK = "ok"
    WARNING = "warning"
    CRITICAL = "critical"

    @classmethod
    def from_percent(cls, percent: float) -> BudgetStatus:
        if percent >= CRITICAL_THRESHOLD:
            return cls.CRITICAL
        if percent >= WARNING_THRESHOLD:
            return cls.WARNING
        return cls.OK

    @property
    def exit_code(self) -> int:
        return {BudgetStatus.OK: 0, BudgetStatus.WARNING: 1, BudgetStatus.CRITICAL: 2}[self]


@dataclass
class BudgetSummary:
    """Read-only snapshot of the meter against the live config."""

    total: float
    max: float
    remaining: float
    percent: float  # rounded to one decimal
    by: dict[str, float]
    steps: list[SpendStep]
    warnings: list[str]
    start_time: str
    rendered: str = ""

    @property
    def status(self) -> BudgetStatus:
        return BudgetStatus.from_percent(self.percent)

    def to_dict(self) -> dict[str, Any]:
        return {
            "total": self.total,
            "max": self.max,
            "remaining": self.remaining,
            "percent": self.percent,
            "by": dict(self.by),
            "steps": [s.to_dict() for s in self.steps],
            "warnings": list(self.warnings),
            "startTime": self.start_time,
            "renderedSummary": self.rendered,
        }


__all__ = [
    "WARNING_THRESHOLD",
    "CRITICAL_THRESHOLD",
    "utc_timestamp",
    "parse_timestamp",
    "SpendStep",
    "MeterState",
    "SpendResult",
    "BudgetStatus",
    "BudgetSummary",
]
