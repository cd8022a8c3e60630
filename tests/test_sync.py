"""
Tests for the sync wrappers.
"""

from __future__ import annotations

import pytest

from conftest import make_config
from night_factory.budget import BudgetMeter, FileMeterStore
from night_factory.config import Settings, StaticBudgetConfigSource, configure
from night_factory.sync import get_summary_sync, reset_sync, spend_check_sync


@pytest.fixture
def sync_meter(meter_path):
    return BudgetMeter(StaticBudgetConfigSource(make_config()), FileMeterStore(meter_path))


class TestSyncWrappers:
    """Test scripts can use the meter without an event loop."""

    def test_spend_summary_reset(self, sync_meter):
        result = spend_check_sync("gemini_call", 2, "plan", meter=sync_meter)

        assert result.granted
        assert get_summary_sync(meter=sync_meter).total == 60.0

        reset_sync(meter=sync_meter)
        assert get_summary_sync(meter=sync_meter).total == 0

    def test_rejection(self, sync_meter):
        spend_check_sync("gemini_call", 3, meter=sync_meter)

        result = spend_check_sync("gemini_call", meter=sync_meter)

        assert not result.granted
        assert "Budget cap reached" in result.message

    def test_default_meter_from_settings(self, router_config, meter_path):
        """Test the wrappers build a file-backed meter from global settings."""
        configure(Settings(config_path=router_config, meter_path=meter_path))

        result = spend_check_sync("perplexity_call", 2, "research")

        assert result.cost == 5.0
        assert meter_path.exists()

    @pytest.mark.asyncio
    async def test_refuses_inside_loop(self, sync_meter):
        with pytest.raises(RuntimeError, match="cannot be called inside an async context"):
            spend_check_sync("gemini_call", meter=sync_meter)
