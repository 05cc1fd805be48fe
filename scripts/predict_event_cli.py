#!/usr/bin/env python3
# scripts/predict_event_cli.py
"""
Rank qualified users by predicted enjoyment of a custom event.

Takes a saved classifier payload (JSON with title, dimensions, tags and
optionally similarActivities), validates it, loads every user with
enough matchups from Supabase and prints the hybrid predictions.

Read-only: nothing is written back.

Usage:
  python -m scripts.predict_event_cli --analysis event.json
  python -m scripts.predict_event_cli --analysis event.json --min-matchups 30 --limit 10
"""
from __future__ import annotations

import argparse
import json
import logging
from pathlib import Path
from typing import Any, List, Sequence

from quiz_engine import config
from quiz_engine.db.quiz_results import fetch_qualified_users
from quiz_engine.db.supabase_client import get_supabase_client
from quiz_engine.errors import EventAnalysisError
from quiz_engine.events.population import PopulationPrediction, predict_for_population
from quiz_engine.events.validation import parse_event_analysis


def format_predictions(predictions: Sequence[PopulationPrediction], limit: int | None = None) -> List[str]:
    shown = list(predictions)[:limit] if limit else list(predictions)
    lines: List[str] = []
    for rank, p in enumerate(shown, start=1):
        lines.append(f"{rank:>3}. {p.username:<24} {p.score:>4.1f}/10  {p.explanation}")
        for sentence in p.insights.personality_insights:
            lines.append(f"       - {sentence}")
    return lines


def run(supabase: Any, payload: dict[str, Any], *, min_matchups: int, limit: int | None) -> int:
    try:
        analysis = parse_event_analysis(payload)
    except EventAnalysisError as e:
        print(f"[predict_event] invalid analysis: {e}")
        return 1

    users = fetch_qualified_users(supabase, min_matchups=min_matchups)
    if not users:
        print(f"[predict_event] no users with >= {min_matchups} matchups")
        return 2

    predictions = predict_for_population(analysis, users)

    print(f"[predict_event] event={analysis.title!r} tags={[t.name for t in analysis.tags]}")
    print("\n".join(format_predictions(predictions, limit)))
    print(
        f"\n[predict_event][summary] users={len(users)} "
        f"similar_activities={len(analysis.similar_activities)} "
        f"top={predictions[0].username}:{predictions[0].score}"
    )
    return 0


def main(argv: Sequence[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Predict a custom event for all qualified users.")
    parser.add_argument("--analysis", required=True, help="Path to the classifier JSON payload.")
    parser.add_argument("--min-matchups", type=int, default=config.QUALIFIED_MIN_MATCHUPS)
    parser.add_argument("--limit", type=int, default=None, help="Print only the top K users.")
    args = parser.parse_args(argv)

    logging.basicConfig(level=config.LOG_LEVEL, format="%(levelname)s %(name)s %(message)s")

    payload = json.loads(Path(args.analysis).read_text(encoding="utf-8"))
    supabase = get_supabase_client()
    return run(supabase, payload, min_matchups=args.min_matchups, limit=args.limit)


if __name__ == "__main__":
    raise SystemExit(main())
