# quiz_engine/events/similarity.py
"""
Similarity between a custom event and a catalog activity.

    dimensional = 1 − euclidean_distance / sqrt(6 · 9²)
    tags        = |A ∩ B| / |A ∪ B| over normalized tag sets (0 if either is empty)
    combined    = 0.3 · dimensional + 0.7 · tags, clamped to [0, 1]
"""
from __future__ import annotations

import math
from typing import Iterable, Mapping

from quiz_engine.constants import DIMENSION_SPAN, DIMENSIONS
from quiz_engine.models import Activity, EventDimensions
from quiz_engine.tags import normalized_tag_set

DIMENSION_WEIGHT = 0.3
TAG_WEIGHT = 0.7
MAX_DIMENSION_DISTANCE = math.sqrt(len(DIMENSIONS) * DIMENSION_SPAN ** 2)


def dimensional_similarity(event: EventDimensions | Mapping[str, float], activity: Activity) -> float:
    """*event* may be EventDimensions or a mapping keyed by Activity dimension key."""
    values = event.as_activity_dimensions() if isinstance(event, EventDimensions) else event
    act_values = activity.dimension_values()
    squared = sum((values[d.key] - act_values[d.key]) ** 2 for d in DIMENSIONS)
    return 1.0 - math.sqrt(squared) / MAX_DIMENSION_DISTANCE


def tag_similarity(event_tags: Iterable[str], activity_tags: Iterable[str]) -> float:
    a = normalized_tag_set(event_tags)
    b = normalized_tag_set(activity_tags)
    if not a or not b:
        return 0.0
    return len(a & b) / len(a | b)


def combined_similarity(dimensional: float, tags: float) -> float:
    return max(0.0, min(1.0, DIMENSION_WEIGHT * dimensional + TAG_WEIGHT * tags))


def event_similarity(
    event: EventDimensions,
    activity: Activity,
    event_tags: Iterable[str] = (),
) -> float:
    return combined_similarity(
        dimensional_similarity(event, activity),
        tag_similarity(event_tags, activity.tags),
    )
