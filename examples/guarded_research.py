#!/usr/bin/env python3
"""
Example: a nightly step guarded by the budget meter

Demonstrates:
1. Asking the meter before a paid call
2. Skipping the step cleanly when the budget is exhausted
3. Printing the running summary
"""

import asyncio
import sys
import tempfile
from pathlib import Path

from night_factory import Settings, build_meter, render_report

TOPICS = [
    "Zendesk trial A/B for SaaS support",
    "LangGraph vs CrewAI vs AutoGen for nightly orchestration",
    "Supabase pgvector best practices",
]


async def main() -> int:
    reports_dir = Path(tempfile.mkdtemp(prefix="night_factory_"))
    settings = Settings(
        config_path=Path(__file__).parent / "router.json",
        meter_path=reports_dir / "budget_meter.json",
    )
    meter = build_meter(settings)

    for night in range(1, 6):
        result = await meter.spend_check("perplexity_call", len(TOPICS), step=f"research #{night}")
        if not result.granted:
            print(result.message)
            print("Budget cap hit, skipping research")
            break
        print(f"✅ research #{night}: charged {result.cost:.2f} SEK")

    summary = await meter.get_summary()
    print(render_report(summary))
    return summary.status.exit_code


if __name__ == "__main__":
    sys.exit(asyncio.run(main()))
