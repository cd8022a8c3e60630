"""
Configuration system for night-factory.

This package provides:
- The budget configuration (prices, global cap, optional per-kind cap)
- Config sources the budget meter reloads on every check
- Runtime settings loaded from environment variables or a .env file
"""

from .base import PRICE_SUFFIX, LogFormat, LogLevel
from .budget import (
    BudgetConfig,
    BudgetConfigSource,
    FileBudgetConfigSource,
    StaticBudgetConfigSource,
)
from .logging import LoggingConfig
from .settings import (
    DEFAULT_CONFIG_PATH,
    DEFAULT_METER_PATH,
    Settings,
    configure,
    get_settings,
    load_env,
)

__all__ = [
    # Types
    "LogLevel",
    "LogFormat",
    "PRICE_SUFFIX",
    # Budget config
    "BudgetConfig",
    "BudgetConfigSource",
    "FileBudgetConfigSource",
    "StaticBudgetConfigSource",
    # Other configs
    "LoggingConfig",
    # Master config
    "Settings",
    "DEFAULT_CONFIG_PATH",
    "DEFAULT_METER_PATH",
    # Global functions
    "get_settings",
    "configure",
    "load_env",
]
