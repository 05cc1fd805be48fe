# quiz_engine/simulation.py
"""
Synthetic personas for exercising the rating engine end to end.

Each persona has an ideal value per dimension. A simulated answer picks
whichever of two random activities is closer to that ideal, after a
0.5–1.5 random multiplier per side so choices stay noisy.
Nothing here touches storage.
"""
from __future__ import annotations

import logging
import random
from dataclasses import dataclass
from typing import Callable, List, Sequence

from quiz_engine.constants import DIMENSION_SPAN, DIMENSIONS, INITIAL_RATING
from quiz_engine.models import Activity, EventDimensions
from quiz_engine.rating.elo import apply_choice
from quiz_engine.rating.selection import shuffle

logger = logging.getLogger(__name__)

DEFAULT_SIMULATED_MATCHUPS = 80


@dataclass(frozen=True)
class Persona:
    username: str
    preferences: EventDimensions
    description: str


def _persona(username: str, values: tuple[int, int, int, int, int, int], description: str) -> Persona:
    social, structure, novelty, formality, energy, scale = values
    return Persona(
        username=username,
        preferences=EventDimensions(
            social_intensity=social,
            structure=structure,
            novelty=novelty,
            formality=formality,
            energy_level=energy,
            scale_immersion=scale,
        ),
        description=description,
    )


# (social, structure, novelty, formality, energy, scale)
PERSONAS: tuple[Persona, ...] = (
    _persona("HighEnergyHarry", (9, 4, 8, 2, 10, 7),
             "Loves high-energy, active, social activities with lots of people"),
    _persona("QuietBookwormBella", (2, 8, 3, 6, 2, 9),
             "Prefers calm, structured, intimate activities with deep focus"),
    _persona("AdventurousAlex", (6, 3, 10, 2, 8, 8),
             "Seeks novel, spontaneous adventures and unique experiences"),
    _persona("FormalFiona", (7, 9, 4, 9, 4, 6),
             "Enjoys elegant, well-organized, sophisticated social events"),
    _persona("CasualChris", (8, 2, 5, 1, 6, 4),
             "Loves relaxed, informal hangouts with friends"),
    _persona("CreativeCarla", (5, 4, 9, 3, 6, 8),
             "Passionate about artistic, creative, and unique experiences"),
    _persona("RoutineRobert", (4, 9, 2, 7, 3, 5),
             "Prefers familiar, well-planned activities with clear structure"),
    _persona("PartyPaulina", (10, 3, 7, 2, 9, 6),
             "The life of the party - loves crowds, energy, and social chaos"),
    _persona("IntellectualIan", (3, 7, 6, 8, 2, 9),
             "Enjoys thoughtful, educational activities with meaningful discussion"),
    _persona("FlexibleFreya", (5, 5, 5, 5, 5, 5),
             "Open to all types of activities - the perfect middle ground"),
)


def persona_by_name(username: str) -> Persona:
    for p in PERSONAS:
        if p.username.lower() == username.lower():
            return p
    raise KeyError(f"unknown persona {username!r}")


def persona_affinity(preferences: EventDimensions, activity: Activity) -> float:
    """1 = perfect match, 0 = opposite on every dimension."""
    ideal = preferences.as_activity_dimensions()
    values = activity.dimension_values()
    avg_diff = sum(abs(ideal[d.key] - values[d.key]) for d in DIMENSIONS) / len(DIMENSIONS)
    return 1 - avg_diff / DIMENSION_SPAN


def reset_ratings(activities: Sequence[Activity]) -> List[Activity]:
    return [
        a.model_copy(update={
            "rating": float(INITIAL_RATING),
            "rating_update_count": 0,
            "matchups": 0,
            "wins": 0,
            "chosen_count": 0,
        })
        for a in activities
    ]


def simulate_quiz(
    persona: Persona,
    catalog: Sequence[Activity],
    matchups: int = DEFAULT_SIMULATED_MATCHUPS,
    rng: Callable[[], float] = random.random,
) -> List[Activity]:
    activities = reset_ratings(catalog)
    if len(activities) < 2:
        logger.warning("[simulate] %s: catalog too small (%d)", persona.username, len(activities))
        return activities

    for _ in range(matchups):
        a, b = shuffle(activities, rng)[:2]
        pref_a = persona_affinity(persona.preferences, a) * (0.5 + rng())
        pref_b = persona_affinity(persona.preferences, b) * (0.5 + rng())
        outcome_for_a = 1.0 if pref_a > pref_b else 0.0
        activities = apply_choice(a, b, outcome_for_a, activities, "strong")

    logger.info("[simulate] %s: %d matchups over %d activities", persona.username, matchups, len(activities))
    return activities
