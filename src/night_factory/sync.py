"""Thin sync wrappers for the async budget meter.

The generation scripts are plain sequential programs; these wrappers let them
ask "may I spend" without managing an event loop.

- Uses asyncio.run() when no event loop is active
- Raises RuntimeError if called inside an existing event loop
"""

from __future__ import annotations

import asyncio
from collections.abc import Coroutine
from typing import Any, TypeVar

from .budget import BudgetMeter, BudgetSummary, SpendResult, build_meter

T = TypeVar("T")


def _run(coro: Coroutine[Any, Any, T], name: str) -> T:
    try:
        loop = asyncio.get_running_loop()
    except RuntimeError:
        loop = None

    if loop is not None:
        coro.close()
        raise RuntimeError(
            f"{name}_sync() cannot be called inside an async context. "
            f"Use 'await meter.{name}()' instead."
        )

    return asyncio.run(coro)


def spend_check_sync(
    kind: str,
    count: float = 1,
    step: str = "unknown",
    *,
    meter: BudgetMeter | None = None,
) -> SpendResult:
    """Sync wrapper for BudgetMeter.spend_check.

    Uses a file-backed meter built from the global settings unless one is given.
    """
    meter = meter or build_meter()
    return _run(meter.spend_check(kind, count, step), "spend_check")


def get_summary_sync(*, meter: BudgetMeter | None = None) -> BudgetSummary:
    """Sync wrapper for BudgetMeter.get_summary."""
    meter = meter or build_meter()
    return _run(meter.get_summary(), "get_summary")


def reset_sync(*, meter: BudgetMeter | None = None) -> None:
    """Sync wrapper for BudgetMeter.reset."""
    meter = meter or build_meter()
    _run(meter.reset(), "reset")


__all__ = ["spend_check_sync", "get_summary_sync", "reset_sync"]
