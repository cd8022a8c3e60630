"""
Human-readable rendering of the budget meter.
"""

from __future__ import annotations

import math

from .types import BudgetStatus, BudgetSummary, SpendStep, parse_timestamp

FILLED = "█"
EMPTY = "░"
RULE_WIDTH = 60

_STATUS_LINES = {
    BudgetStatus.CRITICAL: "🔴 Status: CRITICAL - Budget nearly exhausted",
    BudgetStatus.WARNING: "🟡 Status: WARNING - Budget usage high",
    BudgetStatus.OK: "🟢 Status: OK - Budget usage normal",
}


def cost_bar(spent: float, limit: float, width: int = 20) -> str:
    """Fixed-width proportion bar, clamped at 100%."""
    percent = min(100.0, spent / limit * 100)
    filled = math.floor(percent / 100 * width + 0.5)  # round half up
    return f"{FILLED * filled}{EMPTY * (width - filled)} {percent:.1f}%"


def render_summary(
    *,
    total: float,
    limit: float,
    by: dict[str, float],
    step_count: int,
) -> str:
    percent = total / limit * 100
    remaining = limit - total
    breakdown = "\n".join(f"  - {kind}: {spent:.2f} SEK" for kind, spent in by.items())

    return (
        "📊 Budget Status\n"
        f"{cost_bar(total, limit)}\n"
        f"Spent: {total:.2f} SEK / {limit:g} SEK ({percent:.1f}%)\n"
        f"Remaining: {remaining:.2f} SEK\n"
        f"\nBreakdown:\n{breakdown or '  (no activity)'}\n"
        f"\nSteps: {step_count} API calls"
    )


def render_step(index: int, step: SpendStep) -> str:
    time = parse_timestamp(step.timestamp).astimezone().strftime("%H:%M:%S")
    return (
        f"{index}. [{time}] {step.step}: "
        f"{step.kind} x{step.count:g} = {step.cost:.2f} SEK "
        f"(total: {step.total_after:.2f} SEK)"
    )


def _section(title: str) -> list[str]:
    return ["", "-" * RULE_WIDTH, f"  {title}", "-" * RULE_WIDTH]


def render_report(summary: BudgetSummary) -> str:
    """Full report printed by the ``night-factory-budget`` command."""
    lines = ["", "=" * RULE_WIDTH, "  NIGHT FACTORY BUDGET REPORT", "=" * RULE_WIDTH, ""]
    lines.append(summary.rendered)

    if summary.steps:
        lines.extend(_section("DETAILED STEPS"))
        lines.extend(render_step(i, step) for i, step in enumerate(summary.steps, start=1))

    if summary.warnings:
        lines.extend(_section("⚠️  WARNINGS"))
        lines.extend(f"  - Budget threshold crossed: {w}" for w in summary.warnings)

    lines.extend(["", "=" * RULE_WIDTH, ""])
    lines.append(_STATUS_LINES[summary.status])
    return "\n".join(lines)


def render_cost_section(summary: BudgetSummary) -> str:
    """Markdown cost section for the morning brief."""
    lines = [
        "## Cost",
        "",
        f"{summary.total:.2f} SEK of {summary.max:g} SEK ({summary.percent:.1f}%)",
    ]
    if summary.by:
        lines.append("")
        lines.extend(f"- {kind}: {spent:.2f} SEK" for kind, spent in summary.by.items())
    return "\n".join(lines) + "\n"


__all__ = [
    "cost_bar",
    "render_summary",
    "render_step",
    "render_report",
    "render_cost_section",
]
