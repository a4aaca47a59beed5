"""
Dry-run script to preview filler marking for a library dump.

Run:
    python scripts/dry_run_filler_marking.py library.json [--config config.ini]

The JSON file holds a list of series:

    [{"name": "Naruto", "episodes": [
        {"id": "ep-1", "season": 1, "index": 1, "title": "Enter: Naruto Uzumaki!"},
        {"id": "ep-2", "season": 1, "index": 2, "title": "...", "placeholder": true}
    ]}]

Nothing is written anywhere; every rename decision is printed instead.
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
from typing import Any

from anime_filler.config import get_configuration
from anime_filler.models import EpisodeDecision, EpisodeRecord, SeriesRecord
from anime_filler.workflows import process_library


def _load_series(path: str) -> list[SeriesRecord]:
    with open(path, encoding="utf-8") as f:
        raw: list[dict[str, Any]] = json.load(f)

    series_batch: list[SeriesRecord] = []
    for entry in raw:
        episodes = [
            EpisodeRecord(
                episode_id=ep["id"],
                season=ep.get("season"),
                index=ep.get("index"),
                title=ep.get("title", ""),
                is_placeholder=bool(ep.get("placeholder", False)),
            )
            for ep in entry.get("episodes", [])
        ]
        series_batch.append(SeriesRecord(name=entry["name"], episodes=episodes))
    return series_batch


def _print_decision(decision: EpisodeDecision) -> None:
    print(
        f"- {decision.episode_id}: #{decision.absolute_number} "
        f"'{decision.current_title}' -> '{decision.new_title}' ({decision.label.value})"
    )


async def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(
        description="Preview filler / mixed episode markers without renaming anything"
    )
    parser.add_argument("library", help="Path to a JSON dump of series and episodes")
    parser.add_argument("--config", default="config.ini", help="Path to config.ini")
    parser.add_argument(
        "--verbose", action="store_true", help="Show debug logging (match details)"
    )
    args = parser.parse_args(argv)

    if args.verbose:
        logging.getLogger("anime_filler.config").setLevel(logging.DEBUG)

    config = get_configuration(args.config)
    series_batch = _load_series(args.library)
    summary = await process_library(series_batch, config, _print_decision)
    print(
        f"\n{summary.series_processed}/{summary.series_total} series processed, "
        f"{summary.episodes_renamed} title change(s) proposed."
    )


if __name__ == "__main__":
    asyncio.run(main())
