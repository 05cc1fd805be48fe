#!/usr/bin/env python3
# scripts/simulate_personas.py
"""
Run synthetic personas through the rating engine and print what the
profile layer makes of them.

Useful as an end-to-end smoke check: a persona who loves high energy
should end up with energy-heavy activities on top and Energy Level among
the strongest drivers.

Usage:
  python -m scripts.simulate_personas --catalog activities_with_tags.csv
  python -m scripts.simulate_personas --catalog activities.csv --persona FlexibleFreya --seed 7
"""
from __future__ import annotations

import argparse
import logging
import random
from typing import List, Sequence

from quiz_engine import config
from quiz_engine.catalog import load_catalog
from quiz_engine.models import Activity
from quiz_engine.profile.drivers import compute_drivers, persona_name
from quiz_engine.simulation import DEFAULT_SIMULATED_MATCHUPS, PERSONAS, Persona, persona_by_name, simulate_quiz


def summarize(persona: Persona, activities: Sequence[Activity], rng: random.Random, top: int = 5) -> List[str]:
    ranked = sorted(activities, key=lambda a: a.rating, reverse=True)
    drivers = compute_drivers(activities)

    lines = [f"[simulate] {persona.username}: {persona.description}"]
    lines.append(f"  persona: {persona_name(drivers, rng.random)}")
    for a in ranked[:top]:
        lines.append(f"  top    {a.rating:>6.0f}  {a.title}")
    for d in drivers[:3]:
        lines.append(f"  driver {d.dimension:<18} r={d.correlation:+.3f}")
    return lines


def main(argv: Sequence[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Simulate persona quizzes against a catalog CSV.")
    parser.add_argument("--catalog", required=True, help="Path to the activity catalog CSV.")
    parser.add_argument("--matchups", type=int, default=DEFAULT_SIMULATED_MATCHUPS)
    parser.add_argument("--seed", type=int, default=None, help="Seed for reproducible runs.")
    parser.add_argument("--persona", default=None, help="Run a single persona by name.")
    args = parser.parse_args(argv)

    logging.basicConfig(level=config.LOG_LEVEL, format="%(levelname)s %(name)s %(message)s")

    catalog = load_catalog(args.catalog)
    if len(catalog) < 2:
        print(f"[simulate] catalog has {len(catalog)} usable activities; need at least 2")
        return 2

    try:
        personas = [persona_by_name(args.persona)] if args.persona else list(PERSONAS)
    except KeyError as e:
        print(f"[simulate] {e.args[0]}")
        return 2

    rng = random.Random(args.seed)
    for persona in personas:
        rated = simulate_quiz(persona, catalog, args.matchups, rng.random)
        print("\n".join(summarize(persona, rated, rng)))
        print()

    print(
        f"[simulate][summary] personas={len(personas)} "
        f"matchups={args.matchups} activities={len(catalog)} seed={args.seed}"
    )
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
