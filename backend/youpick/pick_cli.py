#!/usr/bin/env python3
from __future__ import annotations

import argparse
import json
import logging
import random
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[2]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from backend.youpick.logging_config import bind_pick_context, configure_structlog  # noqa: E402
from backend.youpick.matching.types import Intent  # noqa: E402
from backend.youpick.service import PickService  # noqa: E402


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Rank raw POI records for an intent.")
    parser.add_argument("candidates", type=Path, help="JSON file holding a list of POI records")
    parser.add_argument(
        "-i",
        "--intent",
        default="surprise",
        choices=[intent.value for intent in Intent] + ["services"],
    )
    parser.add_argument(
        "-f", "--filter", action="append", default=[], dest="filters", help="Preference token"
    )
    parser.add_argument("--vibe", default=None, help="Vibe preset, e.g. free-beautiful")
    parser.add_argument("--min-results", type=int, default=None)
    parser.add_argument("--shuffle-weight", type=float, default=None)
    parser.add_argument("--seed", type=int, default=None, help="Seed the jitter/shuffle RNG")
    parser.add_argument("--json", action="store_true", help="Emit JSON instead of text")
    args = parser.parse_args(argv)

    # keep stdout clean for the ranked output
    configure_structlog(json_logs=True, stream=sys.stderr)
    logging.getLogger().setLevel(logging.WARNING)
    bind_pick_context(Intent.parse(args.intent), args.filters)

    payload = json.loads(args.candidates.read_text(encoding="utf-8"))
    if isinstance(payload, dict):
        payload = payload.get("results") or payload.get("candidates") or []

    rng = random.Random(args.seed) if args.seed is not None else None
    outcome = PickService(rng=rng).pick(
        payload,
        args.intent,
        args.filters,
        vibe=args.vibe,
        min_results=args.min_results,
        shuffle_weight=args.shuffle_weight,
    )

    if args.json:
        body = {
            "intent": outcome.intent.value,
            "tiers_run": list(outcome.tiers_run),
            "guardrails": outcome.guardrails,
            "results": [
                {
                    "rank": entry.rank,
                    "id": entry.candidate.id,
                    "name": entry.candidate.name,
                    "score": round(entry.score, 2),
                    "tier": entry.tier,
                    "curated": entry.curated,
                }
                for entry in outcome.entries
            ],
            "rejections": outcome.rejections,
        }
        print(json.dumps(body, ensure_ascii=False, indent=2))
        return 0

    if not outcome.entries:
        print("Nothing matched.")
        return 0
    for entry in outcome.entries:
        marker = " (curated)" if entry.curated else ""
        print(f"{entry.rank:>2}. {entry.candidate.name}  score={entry.score:.2f} tier={entry.tier}{marker}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
