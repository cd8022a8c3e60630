"""
Tests for budget rendering.
"""

from __future__ import annotations

from night_factory.budget import BudgetSummary, SpendStep, cost_bar, render_cost_section, render_report, render_summary


def _summary(total: float = 37.5, warnings: list[str] | None = None) -> BudgetSummary:
    steps = [
        SpendStep("2026-10-19T01:00:00.000Z", "plan", "gemini_call", 1, 30.0, 30.0),
        SpendStep("2026-10-19T01:05:00.000Z", "research", "perplexity_call", 3, 7.5, 37.5),
    ]
    return BudgetSummary(
        total=total,
        max=100.0,
        remaining=100.0 - total,
        percent=round(total, 1),
        by={"gemini_call": 30.0, "perplexity_call": 7.5},
        steps=steps,
        warnings=warnings or [],
        start_time="2026-10-19T00:59:00.000Z",
        rendered=render_summary(
            total=total,
            limit=100.0,
            by={"gemini_call": 30.0, "perplexity_call": 7.5},
            step_count=len(steps),
        ),
    )


class TestCostBar:
    """Test the proportion bar."""

    def test_empty(self):
        assert cost_bar(0, 100) == "░" * 20 + " 0.0%"

    def test_half(self):
        assert cost_bar(50, 100) == "█" * 10 + "░" * 10 + " 50.0%"

    def test_clamped(self):
        assert cost_bar(250, 100) == "█" * 20 + " 100.0%"

    def test_rounds_half_up(self):
        """Test 12.5% of 20 cells (2.5) fills 3 cells."""
        assert cost_bar(12.5, 100).count("█") == 3

    def test_custom_width(self):
        bar = cost_bar(30, 100, width=10)
        assert bar.startswith("███░░░░░░░")


class TestRenderSummary:
    """Test the summary block."""

    def test_contents(self):
        text = render_summary(total=37.5, limit=100.0, by={"gemini_call": 37.5}, step_count=2)

        assert text.startswith("📊 Budget Status\n")
        assert "Spent: 37.50 SEK / 100 SEK (37.5%)" in text
        assert "Remaining: 62.50 SEK" in text
        assert "  - gemini_call: 37.50 SEK" in text
        assert text.endswith("Steps: 2 API calls")

    def test_no_activity(self):
        text = render_summary(total=0, limit=100.0, by={}, step_count=0)
        assert "(no activity)" in text


class TestRenderReport:
    """Test the full CLI report."""

    def test_sections(self):
        text = render_report(_summary(warnings=["75%"]))

        assert "NIGHT FACTORY BUDGET REPORT" in text
        assert "DETAILED STEPS" in text
        assert "plan: gemini_call x1 = 30.00 SEK (total: 30.00 SEK)" in text
        assert "2. [" in text
        assert "Budget threshold crossed: 75%" in text
        assert text.endswith("🟢 Status: OK - Budget usage normal")

    def test_no_steps_or_warnings(self):
        summary = _summary()
        summary.steps = []

        text = render_report(summary)

        assert "DETAILED STEPS" not in text
        assert "WARNINGS" not in text

    def test_status_lines(self):
        assert "WARNING - Budget usage high" in render_report(_summary(total=80))
        assert "CRITICAL - Budget nearly exhausted" in render_report(_summary(total=95))


class TestCostSection:
    """Test the morning brief markdown."""

    def test_markdown(self):
        text = render_cost_section(_summary())

        assert text.startswith("## Cost\n")
        assert "37.50 SEK of 100 SEK (37.5%)" in text
        assert "- perplexity_call: 7.50 SEK" in text
