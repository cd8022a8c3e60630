"""
Night Factory budget meter.

Every paid API call made by the nightly automation scripts (Gemini,
Perplexity, ...) first asks the shared budget meter for permission. The meter
enforces a global cap and an optional per-kind cap, keeps a persisted ledger
of charges and reports threshold crossings.

Example:
    ```python
    from night_factory import build_meter

    meter = build_meter()
    result = await meter.spend_check("perplexity_call", 3, step="research")
    if not result.granted:
        print(result.message)
        return
    ```
"""

from .budget import (
    BudgetMeter,
    BudgetStatus,
    BudgetSummary,
    FileMeterStore,
    InMemoryMeterStore,
    MeterState,
    MeterStore,
    SpendResult,
    SpendStep,
    build_meter,
    cost_bar,
    render_cost_section,
    render_report,
    render_summary,
)
from .config import (
    BudgetConfig,
    BudgetConfigSource,
    FileBudgetConfigSource,
    Settings,
    StaticBudgetConfigSource,
    configure,
    get_settings,
    load_env,
)
from .errors import (
    BudgetExceededError,
    ConfigError,
    ConfigNotFoundError,
    ErrorCode,
    InvalidConfigError,
    LedgerCorruptedError,
    LedgerError,
    LedgerWriteError,
    NightFactoryError,
)
from .sync import get_summary_sync, reset_sync, spend_check_sync

__version__ = "2.1.0"

__all__ = [
    # Meter
    "BudgetMeter",
    "build_meter",
    "MeterStore",
    "InMemoryMeterStore",
    "FileMeterStore",
    # Types
    "MeterState",
    "SpendStep",
    "SpendResult",
    "BudgetStatus",
    "BudgetSummary",
    # Rendering
    "cost_bar",
    "render_summary",
    "render_report",
    "render_cost_section",
    # Config
    "BudgetConfig",
    "BudgetConfigSource",
    "FileBudgetConfigSource",
    "StaticBudgetConfigSource",
    "Settings",
    "get_settings",
    "configure",
    "load_env",
    # Errors
    "ErrorCode",
    "NightFactoryError",
    "ConfigError",
    "ConfigNotFoundError",
    "InvalidConfigError",
    "LedgerError",
    "LedgerCorruptedError",
    "LedgerWriteError",
    "BudgetExceededError",
    # Sync
    "spend_check_sync",
    "get_summary_sync",
    "reset_sync",
]
