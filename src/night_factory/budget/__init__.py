"""
Budget meter and guardrails for paid API calls.

This module provides:
- The persisted spend meter (total, per-kind breakdown, step history, warnings)
- The spend check every paid call goes through
- Summary rendering and reset
"""

from .meter import BudgetMeter, build_meter
from .render import cost_bar, render_cost_section, render_report, render_summary
from .store import FileMeterStore, InMemoryMeterStore, MeterStore
from .types import (
    BudgetStatus,
    BudgetSummary,
    MeterState,
    SpendResult,
    SpendStep,
)

__all__ = [
    "BudgetMeter",
    "build_meter",
    "MeterStore",
    "InMemoryMeterStore",
    "FileMeterStore",
    "MeterState",
    "SpendStep",
    "SpendResult",
    "BudgetStatus",
    "BudgetSummary",
    "cost_bar",
    "render_summary",
    "render_report",
    "render_cost_section",
]
