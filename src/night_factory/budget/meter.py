"""
Budget meter for spend tracking and cap enforcement.
"""

from __future__ import annotations

import asyncio
import math
from collections.abc import Callable
from datetime import datetime, timezone

from ..config import BudgetConfig, BudgetConfigSource, FileBudgetConfigSource, Settings, get_settings
from ..errors import BudgetExceededError
from ..logging import SpendLog, StructuredLogger, ThresholdLog, generate_run_id, get_logger
from .render import render_summary
from .store import FileMeterStore, InMemoryMeterStore, MeterStore
from .types import (
    CRITICAL_THRESHOLD,
    WARNING_THRESHOLD,
    BudgetSummary,
    MeterState,
    SpendResult,
    SpendStep,
    utc_timestamp,
)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class BudgetMeter:
    """Shared spend meter gating every paid API call.

    The BudgetMeter:
    - Prices a call from the live config (unpriced kinds are free)
    - Rejects it if it would push the global total or the kind's total over
      its cap
    - Otherwise commits the charge before the call is made and persists it
    - Records the 75% / 90% threshold crossings once each

    Charges are optimistic: a granted spend stays on the meter even if the
    external call it guarded later fails.

    Log records carry the meter's ``run_id`` plus the kind and step of the
    call, so all charges of one nightly run can be correlated.

    Every load-check-save cycle runs under one asyncio lock, so calls from a
    single process are serialized in call order. Separate processes are only
    excluded from each other when the store provides a lock (see
    ``FileMeterStore(use_lock=True)``).
    """

    def __init__(
        self,
        config_source: BudgetConfigSource,
        store: MeterStore | None = None,
        *,
        clock: Callable[[], datetime] | None = None,
        logger: StructuredLogger | None = None,
        run_id: str | None = None,
    ):
        self.run_id = run_id or generate_run_id()
        self._config_source = config_source
        self._store = store or InMemoryMeterStore()
        self._clock = clock or _utcnow
        self._logger = logger or get_logger()
        self._lock = asyncio.Lock()

    @property
    def store(self) -> MeterStore:
        return self._store

    async def _load_meter(self) -> MeterState:
        state = await self._store.load()
        if state is None:
            return MeterState.fresh(self._clock())
        return state

    async def spend_check(
        self,
        kind: str,
        count: float = 1,
        step: str = "unknown",
    ) -> SpendResult:
        """Check whether a paid call may proceed and, if so, charge for it.

        Args:
            kind: Call kind, e.g. ``gemini_call`` or ``perplexity_call``
            count: Number of units (may be fractional)
            step: Free-text label of the calling step

        Returns:
            A granted result with the updated meter, or a rejected result with
            the unmutated meter and a message explaining which cap was hit.

        Raises:
            ConfigError: If the budget config cannot be loaded
            LedgerError: If the meter cannot be loaded or saved
            ValueError: If count is negative or not finite
        """
        if not math.isfinite(count) or count < 0:
            raise ValueError(f"count must be a finite, non-negative number, got {count!r}")

        async with self._lock, self._store.lock():
            config = await self._config_source.load()
            meter = await self._load_meter()

            cost = config.price_for(kind) * count
            new_total = meter.total + cost

            if new_total > config.night_total_max:
                remaining = config.night_total_max - meter.total
                message = (
                    "❌ Budget cap reached!\n"
                    f"   Spent: {meter.total:.2f} SEK\n"
                    f"   Limit: {config.night_total_max:g} SEK\n"
                    f"   Remaining: {remaining:.2f} SEK\n"
                    f"   This operation would add: {cost:.2f} SEK ({count:g} × {kind})"
                )
                return self._reject(meter, config, kind, count, step, cost, message, reason="night_total")

            kind_spent = meter.spent_on(kind)
            if config.per_task_max is not None and kind_spent + cost > config.per_task_max:
                message = (
                    f"❌ Per-task budget exceeded for {kind}!\n"
                    f"   Task spent: {kind_spent:.2f} SEK\n"
                    f"   Task limit: {config.per_task_max:g} SEK\n"
                    f"   This operation would add: {cost:.2f} SEK"
                )
                return self._reject(meter, config, kind, count, step, cost, message, reason="per_task")

            updated = meter.copy()
            updated.commit(
                SpendStep(
                    timestamp=utc_timestamp(self._clock()),
                    step=step,
                    kind=kind,
                    count=count,
                    cost=cost,
                    total_after=new_total,
                )
            )
            percent = new_total / config.night_total_max * 100
            label = self._cross_threshold(updated, percent)

            await self._store.save(updated)

        with self._logger.run_context(self.run_id, kind=kind, step=step, operation="spend_check"):
            self._logger.log_spend(
                SpendLog(
                    kind=kind,
                    step=step,
                    count=count,
                    cost=cost,
                    total=new_total,
                    limit=config.night_total_max,
                )
            )
            if label is not None:
                self._logger.log_threshold(
                    ThresholdLog(label=label, percent=percent, total=new_total, limit=config.night_total_max)
                )

        return SpendResult(granted=True, meter=updated, cost=cost, warning=label)

    @staticmethod
    def _cross_threshold(meter: MeterState, percent: float) -> str | None:
        """Record at most one newly crossed threshold label.

        The bands are checked highest first as an either/or: a single charge
        that jumps from below 75% to 90% or more records only "90%", and
        "75%" is then never recorded for this meter.
        """
        if percent >= CRITICAL_THRESHOLD and "90%" not in meter.warnings:
            meter.warnings.append("90%")
            return "90%"
        elif percent >= WARNING_THRESHOLD and "75%" not in meter.warnings:
            meter.warnings.append("75%")
            return "75%"
        return None

    def _reject(
        self,
        meter: MeterState,
        config: BudgetConfig,
        kind: str,
        count: float,
        step: str,
        cost: float,
        message: str,
        *,
        reason: str,
    ) -> SpendResult:
        with self._logger.run_context(self.run_id, kind=kind, step=step, operation="spend_check"):
            self._logger.log_spend(
                SpendLog(
                    kind=kind,
                    step=step,
                    count=count,
                    cost=cost,
                    total=meter.total,
                    limit=config.night_total_max,
                    granted=False,
                    reason=reason,
                )
            )
        return SpendResult(granted=False, meter=meter, cost=cost, message=message)

    async def require_spend(
        self,
        kind: str,
        count: float = 1,
        step: str = "unknown",
    ) -> SpendResult:
        """Like ``spend_check`` but raises when the spend is rejected.

        Raises:
            BudgetExceededError: If either cap rejects the spend
        """
        result = await self.spend_check(kind, count, step)
        if not result.granted:
            raise BudgetExceededError(result.message or "Budget exceeded", kind=kind, cost=result.cost)
        return result

    async def get_summary(self) -> BudgetSummary:
        """Snapshot of the meter against the live config. Never writes."""
        config = await self._config_source.load()
        meter = await self._load_meter()

        limit = config.night_total_max
        return BudgetSummary(
            total=meter.total,
            max=limit,
            remaining=limit - meter.total,
            percent=round(meter.total / limit * 100, 1),
            by=dict(meter.by),
            steps=list(meter.steps),
            warnings=list(meter.warnings),
            start_time=meter.start_time,
            rendered=render_summary(
                total=meter.total,
                limit=limit,
                by=meter.by,
                step_count=len(meter.steps),
            ),
        )

    async def reset(self) -> None:
        """Replace the persisted meter with a fresh zero-state record.

        Irreversible. Callers are expected to confirm before calling this.
        """
        async with self._lock, self._store.lock():
            fresh = MeterState.fresh(self._clock())
            await self._store.save(fresh)
        with self._logger.run_context(self.run_id, operation="reset"):
            self._logger.log_reset(fresh.start_time)


def build_meter(
    settings: Settings | None = None,
    *,
    logger: StructuredLogger | None = None,
) -> BudgetMeter:
    """Wire a file-backed meter from settings (global settings by default)."""
    settings = settings or get_settings()
    return BudgetMeter(
        FileBudgetConfigSource(settings.config_path),
        FileMeterStore(settings.meter_path, use_lock=settings.use_file_lock),
        logger=logger,
        run_id=settings.run_id,
    )


__all__ = [
    "BudgetMeter",
    "build_meter",
]
