"""
Base types for configuration.
"""

from __future__ import annotations

from typing import Literal

LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
LogFormat = Literal["text", "json"]

PRICE_SUFFIX = "_SEK"


__all__ = ["LogLevel", "LogFormat", "PRICE_SUFFIX"]
