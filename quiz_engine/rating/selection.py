# quiz_engine/rating/selection.py
"""
Matchup selection: which two activities to show next.

Biased toward under-sampled activities (lowest rating_update_count) and
away from anything shown in the last RECENT_HISTORY_SIZE ids. Randomness
comes from an injected ``rng`` returning floats in [0, 1).
"""
from __future__ import annotations

import logging
import random
from typing import Callable, Optional, Sequence, TypeVar

from quiz_engine.constants import RECENT_HISTORY_SIZE, SELECTION_SUB_POOL_SIZE
from quiz_engine.models import Activity

logger = logging.getLogger(__name__)

T = TypeVar("T")
Rng = Callable[[], float]


def shuffle(items: Sequence[T], rng: Rng = random.random) -> list[T]:
    """Fisher–Yates on a copy."""
    out = list(items)
    for i in range(len(out) - 1, 0, -1):
        j = int(rng() * (i + 1))
        out[i], out[j] = out[j], out[i]
    return out


def select_pair(
    activities: Sequence[Activity],
    recent_history: Sequence[int] = (),
    rng: Rng = random.random,
) -> Optional[tuple[Activity, Activity]]:
    """
    Returns (A, B) with distinct ids, or None when no such pair exists
    (caller should end the session).
    """
    if len(activities) < 2:
        logger.warning("[selector] cannot select pair: only %d activities", len(activities))
        return None

    recent = set(recent_history)
    available = [a for a in activities if a.id not in recent]
    if len(available) < 2:
        available = list(activities)

    # sorted() is stable: ties keep collection order before shuffling
    least_rated = sorted(available, key=lambda a: a.rating_update_count)
    pool = shuffle(least_rated[:min(SELECTION_SUB_POOL_SIZE, len(least_rated))], rng)

    first = pool[0]
    second = next((a for a in pool[1:] if a.id != first.id), None)

    if second is None:
        others = [a for a in activities if a.id != first.id]
        if not others:
            logger.warning("[selector] cannot select pair: all activities share id=%s", first.id)
            return None
        second = shuffle(others, rng)[0]

    if rng() < 0.5:
        return second, first
    return first, second


def push_recent_history(
    history: Sequence[int],
    a_id: int,
    b_id: int,
    size: int = RECENT_HISTORY_SIZE,
) -> list[int]:
    """Append both ids, keep the newest *size* entries."""
    updated = [*history, a_id, b_id]
    return updated[-size:] if size > 0 else []
