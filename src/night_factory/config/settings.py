"""
Settings master configuration and global helpers.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from dotenv import find_dotenv, load_dotenv

from .logging import LoggingConfig

DEFAULT_CONFIG_PATH = Path("config/router.json")
DEFAULT_METER_PATH = Path("reports/budget_meter.json")


@dataclass
class Settings:
    """
    Runtime wiring for the budget meter.

    Budget values (prices and caps) live in the router config file; this only
    says where to find it, where the meter is persisted and how to log.
    """

    config_path: Path = DEFAULT_CONFIG_PATH
    meter_path: Path = DEFAULT_METER_PATH
    use_file_lock: bool = False
    run_id: str | None = None

    logging: LoggingConfig = field(default_factory=LoggingConfig)

    def __post_init__(self):
        if isinstance(self.config_path, str):
            self.config_path = Path(self.config_path)
        if isinstance(self.meter_path, str):
            self.meter_path = Path(self.meter_path)

    @classmethod
    def from_env(cls, prefix: str = "NF_") -> Settings:
        """
        Load settings from environment variables.

        Example:
            NF_BUDGET_CONFIG=config/router.json
            NF_METER_FILE=reports/budget_meter.json
            NF_METER_LOCK=true
            NF_RUN_ID=run_20261019
            NF_LOG_LEVEL=DEBUG
        """
        settings = cls()

        if config_path := os.getenv(f"{prefix}BUDGET_CONFIG"):
            settings.config_path = Path(config_path)
        if meter_path := os.getenv(f"{prefix}METER_FILE"):
            settings.meter_path = Path(meter_path)
        if use_lock := os.getenv(f"{prefix}METER_LOCK"):
            settings.use_file_lock = use_lock.lower() in ("1", "true", "yes")
        if run_id := os.getenv(f"{prefix}RUN_ID"):
            settings.run_id = run_id

        if level := os.getenv(f"{prefix}LOG_LEVEL"):
            settings.logging = LoggingConfig(level=level.upper(), format=settings.logging.format)  # type: ignore[arg-type]
        if log_format := os.getenv(f"{prefix}LOG_FORMAT"):
            settings.logging = LoggingConfig(level=settings.logging.level, format=log_format.lower())  # type: ignore[arg-type]

        return settings

    def to_dict(self) -> dict[str, Any]:
        return {
            "config_path": str(self.config_path),
            "meter_path": str(self.meter_path),
            "use_file_lock": self.use_file_lock,
            "run_id": self.run_id,
            "logging": {"level": self.logging.level, "format": self.logging.format},
        }


# =============================================================================
# Global Settings & Helpers
# =============================================================================

_global_settings: Settings | None = None


def get_settings() -> Settings:
    """Get the global settings instance, creating from the environment if needed."""
    global _global_settings
    if _global_settings is None:
        _global_settings = Settings.from_env()
    return _global_settings


def configure(settings: Settings | None = None, **kwargs) -> Settings:
    """
    Configure global settings.

    Args:
        settings: Settings object to use globally
        **kwargs: Override specific settings

    Returns:
        The configured Settings object
    """
    global _global_settings

    if settings is not None:
        _global_settings = settings
    elif _global_settings is None:
        _global_settings = Settings.from_env()

    for key, value in kwargs.items():
        if hasattr(_global_settings, key):
            setattr(_global_settings, key, value)
    _global_settings.__post_init__()

    return _global_settings


def load_env(path: str | None = None, *, override: bool = False) -> bool:
    """
    Load environment variables from a .env file.

    Returns:
        True if a .env file was found and loaded, False otherwise.
    """
    env_path = path or find_dotenv(usecwd=True)
    if not env_path:
        return False
    return load_dotenv(env_path, override=override)


__all__ = ["Settings", "get_settings", "configure", "load_env", "DEFAULT_CONFIG_PATH", "DEFAULT_METER_PATH"]
