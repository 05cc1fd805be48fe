# quiz_engine/profile/drivers.py
"""
Preference drivers: which dimensions best explain a user's ratings.

Correlation is NaN when either vector has zero variance. NaN means
"no detectable signal" and is never coerced to 0.
"""
from __future__ import annotations

import logging
import math
import random
from dataclasses import dataclass
from typing import Callable, Optional, Sequence

import numpy as np

from quiz_engine.constants import DIMENSIONS, PERSONA_TRAITS
from quiz_engine.models import Activity

logger = logging.getLogger(__name__)

PERSONA_FALLBACK = "The Oracle is Pondering Your Vibe..."
MIN_PERSONA_CORRELATION = 0.05
STRONG_DRIVER = 0.35
LEANING_DRIVER = 0.15


@dataclass(frozen=True)
class PreferenceDriver:
    dimension: str      # display label
    correlation: float  # may be NaN
    low: str
    high: str
    key: str

    @property
    def has_signal(self) -> bool:
        return not math.isnan(self.correlation)


def pearson_correlation(xs: Sequence[float], ys: Sequence[float]) -> float:
    if len(xs) != len(ys) or len(xs) < 2:
        return float("nan")

    x = np.asarray(xs, dtype=float)
    y = np.asarray(ys, dtype=float)
    dx = x - x.mean()
    dy = y - y.mean()
    denominator = math.sqrt(float(np.sum(dx * dx)) * float(np.sum(dy * dy)))
    if denominator == 0:
        return float("nan")
    return float(np.sum(dx * dy)) / denominator


def _driver_sort_key(d: PreferenceDriver) -> float:
    # NaN drivers sort last
    return abs(d.correlation) if d.has_signal else -1.0


def compute_drivers(activities: Sequence[Activity]) -> list[PreferenceDriver]:
    """One driver per dimension, sorted by |correlation| descending."""
    ratings = [a.rating for a in activities]
    drivers: list[PreferenceDriver] = []
    for d in DIMENSIONS:
        values = [getattr(a, d.key) for a in activities]
        corr = pearson_correlation(ratings, values)
        logger.debug("[drivers] %s r=%s", d.label, corr)
        drivers.append(PreferenceDriver(d.label, corr, d.low, d.high, d.key))
    return sorted(drivers, key=_driver_sort_key, reverse=True)


def interpret_driver(driver: PreferenceDriver) -> str:
    if not driver.has_signal:
        return f"Could not determine correlation for {driver.dimension} (likely not enough variance in data)."

    strength = abs(driver.correlation)
    side = driver.high if driver.correlation > 0 else driver.low
    if strength > STRONG_DRIVER:
        return f"You strongly prefer activities that are more {side}."
    if strength > LEANING_DRIVER:
        return f"You lean towards activities that are more {side}."
    return f"{driver.dimension} doesn't seem to be a major factor in your choices."


def personality_insights(drivers: Sequence[PreferenceDriver], top_tag: Optional[str] = None) -> list[str]:
    """Short sentences for the three strongest drivers (|r| > 0.15) plus the top tag."""
    insights: list[str] = []
    valid = [d for d in drivers if d.has_signal and abs(d.correlation) > LEANING_DRIVER]
    for d in valid[:3]:
        if d.correlation > STRONG_DRIVER:
            insights.append(f"You're drawn to activities that are {d.high.lower()}")
        elif d.correlation < -STRONG_DRIVER:
            insights.append(f"You prefer activities that are {d.low.lower()}")
        elif d.correlation > 0:
            insights.append(f"You lean towards {d.high.lower()} activities")
        else:
            insights.append(f"You lean towards {d.low.lower()} activities")

    if top_tag:
        insights.append(f"You have a thing for {top_tag.lower()} activities")

    return insights or ["You have unique and interesting preferences!"]


# ---------------------------------------------------------------------------
# Persona name
# ---------------------------------------------------------------------------

def _trait(driver: PreferenceDriver, kind: str, rng: Callable[[], float]) -> Optional[str]:
    if not driver.has_signal or abs(driver.correlation) < MIN_PERSONA_CORRELATION:
        return None
    entry = PERSONA_TRAITS.get(driver.key)
    if not entry:
        logger.warning("[persona] no trait entry for key=%s", driver.key)
        return None
    options = entry["high" if driver.correlation > 0 else "low"].get(kind) or []
    if not options:
        return None
    return options[int(rng() * len(options))]


def persona_name(drivers: Sequence[PreferenceDriver], rng: Callable[[], float] = random.random) -> str:
    """
    "You are a <adjective> <descriptor>!" built from the two strongest drivers.

    Drivers with NaN or |r| < 0.05 are ignored. When adjective and
    descriptor coincide, the third driver's descriptor is tried, or
    "Maverick" when there are only two.
    """
    valid = [d for d in drivers if d.has_signal and abs(d.correlation) >= MIN_PERSONA_CORRELATION]
    if not valid:
        return PERSONA_FALLBACK

    adjective = _trait(valid[0], "primary", rng) or "Balanced"
    descriptor = "Explorer"

    if len(valid) > 1:
        descriptor = _trait(valid[1], "descriptor", rng) or descriptor
        if adjective.lower() == descriptor.lower():
            if len(valid) > 2:
                alternative = _trait(valid[2], "descriptor", rng)
                if alternative and alternative.lower() != adjective.lower():
                    descriptor = alternative
            else:
                descriptor = "Maverick"
    else:
        descriptor = _trait(valid[0], "descriptor", rng) or descriptor
        if adjective.lower() == descriptor.lower():
            descriptor = "Maverick"

    return f"You are a {adjective} {descriptor}!"
