"""
Budget configuration: prices per call kind and spending caps.

The configuration is read-only input to the budget meter and is loaded fresh
on every spend check, so edits to ``config/router.json`` apply mid-run.
"""

from __future__ import annotations

import json
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import jsonschema

from ..concurrency import run_sync
from ..config_schema import BUDGET_CONFIG_SCHEMA
from ..errors import ConfigNotFoundError, ErrorContext, InvalidConfigError
from ..logging import get_logger
from .base import PRICE_SUFFIX


@dataclass(frozen=True)
class BudgetConfig:
    """
    Prices and caps for one tracking period.

    Attributes:
        prices: Cost per unit keyed by ``<kind>_SEK``
        night_total_max: Global cap across all call kinds
        per_task_max: Cap applied to each call kind's cumulative spend, or
            None when no per-kind cap is configured
    """

    night_total_max: float
    prices: dict[str, float] = field(default_factory=dict)
    per_task_max: float | None = None

    def __post_init__(self):
        if self.night_total_max <= 0:
            raise ValueError("night_total_max must be positive")
        if self.per_task_max is not None and self.per_task_max <= 0:
            raise ValueError("per_task_max must be positive when set")
        for key, price in self.prices.items():
            if price < 0:
                raise ValueError(f"Price for {key} cannot be negative")

    def price_for(self, kind: str) -> float:
        """Unit price for a call kind. Unpriced kinds are free."""
        return float(self.prices.get(kind + PRICE_SUFFIX, 0))

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> BudgetConfig:
        """Validate a raw router document and build the budget config from it."""
        try:
            jsonschema.validate(instance=data, schema=BUDGET_CONFIG_SCHEMA)
        except jsonschema.ValidationError as e:
            raise InvalidConfigError(
                f"Budget config validation failed: {e.message}",
                cause=e,
            ) from e

        per_task = data.get("per_task_SEK_max")
        if per_task == 0:
            # 0 has always meant "no per-kind cap" in router.json
            get_logger().warning(
                "per_task_SEK_max is 0, treating it as unset",
                event_type="config_per_task_unset",
            )
            per_task = None
        return cls(
            night_total_max=float(data["night_total_SEK_max"]),
            prices={k: float(v) for k, v in data["prices"].items()},
            per_task_max=float(per_task) if per_task is not None else None,
        )

    @classmethod
    def from_file(cls, path: str | Path) -> BudgetConfig:
        """
        Load the budget config from a JSON file.

        Raises:
            ConfigNotFoundError: If the file does not exist
            InvalidConfigError: If the file is not valid JSON or fails validation
        """
        path = Path(path)
        try:
            raw = path.read_text(encoding="utf-8")
        except FileNotFoundError as e:
            raise ConfigNotFoundError(path, cause=e) from e
        except (OSError, UnicodeDecodeError) as e:
            raise InvalidConfigError(
                f"Failed to load budget config: {e}",
                context=ErrorContext(path=str(path)),
                cause=e,
            ) from e

        try:
            data = json.loads(raw)
        except json.JSONDecodeError as e:
            raise InvalidConfigError(
                f"Failed to load budget config: {e}",
                context=ErrorContext(path=str(path)),
                cause=e,
            ) from e

        if not isinstance(data, dict):
            raise InvalidConfigError(
                "Failed to load budget config: top-level value must be an object",
                context=ErrorContext(path=str(path)),
            )

        try:
            return cls.from_dict(data)
        except InvalidConfigError as e:
            e.context.path = str(path)
            raise

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "prices": dict(self.prices),
            "night_total_SEK_max": self.night_total_max,
        }
        if self.per_task_max is not None:
            data["per_task_SEK_max"] = self.per_task_max
        return data


# =============================================================================
# Config Sources
# =============================================================================


class BudgetConfigSource(ABC):
    """Abstract source of the budget configuration."""

    @abstractmethod
    async def load(self) -> BudgetConfig:
        """Load the current budget configuration."""
        ...


class FileBudgetConfigSource(BudgetConfigSource):
    """Reads the config file on every call."""

    def __init__(self, path: str | Path):
        self.path = Path(path)

    async def load(self) -> BudgetConfig:
        return await run_sync(BudgetConfig.from_file, self.path)


class StaticBudgetConfigSource(BudgetConfigSource):
    """Serves a fixed, in-memory configuration."""

    def __init__(self, config: BudgetConfig):
        self.config = config

    async def load(self) -> BudgetConfig:
        return self.config


__all__ = [
    "BudgetConfig",
    "BudgetConfigSource",
    "FileBudgetConfigSource",
    "StaticBudgetConfigSource",
]
