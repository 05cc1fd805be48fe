# quiz_engine/events/validation.py
"""
Boundary validation for event-classifier output.

The classifier (an LLM behind a network call) is not guaranteed to return
well-formed data. Everything it returns passes through
``parse_event_analysis`` before reaching the predictors:

  - title / dimensions / tags missing  → EventAnalysisError
  - dimensions                         → numeric, clamped to [1, 10], default 5
  - tags                               → known vocabulary only, importance 1–5
  - similarActivities                  → well-formed entries only, at most 5
"""
from __future__ import annotations

import logging
import math
from typing import Any, Mapping, Optional, Protocol, Sequence

from quiz_engine.constants import DIMENSION_DEFAULT, DIMENSION_MAX, DIMENSION_MIN, DIMENSIONS
from quiz_engine.errors import EventAnalysisError
from quiz_engine.models import Activity, CustomEventAnalysis, EventDimensions, EventTag, SimilarActivity
from quiz_engine.rating.elo import round_half_up
from quiz_engine.tags import DEFAULT_EVENT_TAGS, DEFAULT_TAG_IMPORTANCE, is_known_tag

logger = logging.getLogger(__name__)

MAX_SIMILAR_ACTIVITIES = 5

# payload key (camelCase) for each EventDimensions field
_DIMENSION_PAYLOAD_KEYS: dict[str, tuple[str, ...]] = {
    "social_intensity": ("socialIntensity", "social_intensity"),
    "structure": ("structure",),
    "novelty": ("novelty",),
    "formality": ("formality",),
    "energy_level": ("energyLevel", "energy_level"),
    "scale_immersion": ("scaleImmersion", "scale_immersion"),
}


class EventClassifier(Protocol):
    """
    Turns a free-text description into a raw analysis payload.

    When *reference_activities* is non-empty the payload may also carry
    ``similarActivities`` ranked against that list.
    """

    def __call__(self, description: str, reference_activities: Sequence[Activity]) -> Mapping[str, Any]:
        ...


def _to_number(value: Any) -> Optional[float]:
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return None if math.isnan(value) else float(value)
    if isinstance(value, str):
        try:
            parsed = float(value.strip())
        except ValueError:
            return None
        return None if math.isnan(parsed) else parsed
    return None


def coerce_dimension(value: Any) -> int:
    """Non-numeric (or zero) → 5, then clamp to [1, 10] and round."""
    number = _to_number(value)
    if not number:
        number = float(DIMENSION_DEFAULT)
    clamped = max(float(DIMENSION_MIN), min(float(DIMENSION_MAX), number))
    return round_half_up(clamped)


def _parse_dimensions(raw: Any) -> EventDimensions:
    if not isinstance(raw, Mapping):
        raise EventAnalysisError(f"dimensions must be an object, got {type(raw).__name__}")

    values: dict[str, int] = {}
    for d in DIMENSIONS:
        keys = _DIMENSION_PAYLOAD_KEYS[d.event_key]
        present = next((k for k in keys if k in raw), None)
        if present is None:
            values[d.event_key] = DIMENSION_DEFAULT
            continue
        coerced = coerce_dimension(raw[present])
        if coerced != raw[present]:
            logger.info("[events] dimension %s=%r coerced to %d", d.event_key, raw[present], coerced)
        values[d.event_key] = coerced
    return EventDimensions(**values)


def _default_tags() -> tuple[EventTag, ...]:
    return tuple(EventTag(name=name, importance=imp) for name, imp in DEFAULT_EVENT_TAGS)


def _parse_tags(raw: Any) -> tuple[EventTag, ...]:
    if not isinstance(raw, list):
        logger.warning("[events] tags is not a list; using defaults")
        return _default_tags()

    tags: list[EventTag] = []
    for item in raw:
        if isinstance(item, str):
            if is_known_tag(item):
                tags.append(EventTag(name=item, importance=DEFAULT_TAG_IMPORTANCE))
            else:
                logger.info("[events] dropped unknown tag %r", item)
            continue

        if not isinstance(item, Mapping):
            continue
        name = item.get("name")
        importance = item.get("importance")
        if not isinstance(name, str) or not name or not is_known_tag(name):
            logger.info("[events] dropped unknown tag %r", name)
            continue
        if isinstance(importance, bool) or not isinstance(importance, (int, float)):
            continue
        if not (1 <= importance <= 5):
            continue
        tags.append(EventTag(name=name, importance=round_half_up(importance)))

    if not tags:
        logger.warning("[events] no usable tags; using defaults")
        return _default_tags()
    return tuple(tags)


def _parse_similar(raw: Any) -> tuple[SimilarActivity, ...]:
    if raw is None:
        return ()
    if not isinstance(raw, list):
        logger.warning("[events] similarActivities is not a list; ignored")
        return ()

    out: list[SimilarActivity] = []
    for item in raw:
        if not isinstance(item, Mapping):
            continue
        title = item.get("title")
        similarity = item.get("similarity")
        explanation = item.get("explanation")
        if not title or not isinstance(title, str) or not explanation:
            continue
        if isinstance(similarity, bool) or not isinstance(similarity, (int, float)):
            continue
        if not (0 <= similarity <= 1):
            continue
        out.append(SimilarActivity(title=title, similarity=float(similarity), explanation=str(explanation)))
    return tuple(out[:MAX_SIMILAR_ACTIVITIES])


def parse_event_analysis(payload: Mapping[str, Any]) -> CustomEventAnalysis:
    if not isinstance(payload, Mapping):
        raise EventAnalysisError("classifier payload must be an object")

    title = payload.get("title")
    if not title or payload.get("dimensions") is None or payload.get("tags") is None:
        raise EventAnalysisError("classifier payload is missing title, dimensions or tags")

    return CustomEventAnalysis(
        title=str(title),
        subtitle=str(payload.get("subtitle") or ""),
        dimensions=_parse_dimensions(payload["dimensions"]),
        tags=_parse_tags(payload["tags"]),
        similar_activities=_parse_similar(payload.get("similarActivities")),
    )
