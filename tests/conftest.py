"""
Shared test fixtures for night-factory tests.

This module provides:
- Budget configs and config sources
- In-memory and file-backed meter stores
- A deterministic clock for timestamps
"""

from __future__ import annotations

import json
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Any

import pytest

from night_factory.budget import BudgetMeter, FileMeterStore, InMemoryMeterStore
from night_factory.config import BudgetConfig, StaticBudgetConfigSource
from night_factory.logging import StructuredLogger

# =============================================================================
# Helpers
# =============================================================================


class FakeClock:
    """Clock that advances one second per call."""

    def __init__(self, start: datetime | None = None):
        self.now = start or datetime(2026, 10, 19, 1, 0, 0, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        current = self.now
        self.now = self.now + timedelta(seconds=1)
        return current


class MutableConfigSource(StaticBudgetConfigSource):
    """Config source whose config can be swapped between checks."""

    def __init__(self, config: BudgetConfig):
        super().__init__(config)
        self.load_count = 0

    async def load(self) -> BudgetConfig:
        self.load_count += 1
        return self.config


def make_config(
    night_total_max: float = 100.0,
    prices: dict[str, float] | None = None,
    per_task_max: float | None = None,
) -> BudgetConfig:
    return BudgetConfig(
        night_total_max=night_total_max,
        prices=prices if prices is not None else {"gemini_call_SEK": 30.0, "perplexity_call_SEK": 2.5},
        per_task_max=per_task_max,
    )


def write_router_config(path: Path, data: dict[str, Any]) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(data), encoding="utf-8")
    return path


# =============================================================================
# Fixtures
# =============================================================================


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def logger() -> StructuredLogger:
    return StructuredLogger("night_factory.tests", level="DEBUG")


@pytest.fixture
def config_source() -> MutableConfigSource:
    return MutableConfigSource(make_config())


@pytest.fixture
def memory_store() -> InMemoryMeterStore:
    return InMemoryMeterStore()


@pytest.fixture
def meter(config_source, memory_store, clock, logger) -> BudgetMeter:
    return BudgetMeter(config_source, memory_store, clock=clock, logger=logger)


@pytest.fixture
def meter_path(tmp_path: Path) -> Path:
    return tmp_path / "reports" / "budget_meter.json"


@pytest.fixture
def file_store(meter_path: Path) -> FileMeterStore:
    return FileMeterStore(meter_path)


@pytest.fixture
def router_config(tmp_path: Path) -> Path:
    return write_router_config(
        tmp_path / "config" / "router.json",
        {
            "prices": {"gemini_call_SEK": 30, "perplexity_call_SEK": 2.5},
            "night_total_SEK_max": 100,
            "routes": {"research": "perplexity"},
        },
    )
