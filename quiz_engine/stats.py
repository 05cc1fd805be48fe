# quiz_engine/stats.py
"""Small numeric helpers shared by the profile and event predictors."""
from __future__ import annotations

import math
from typing import Sequence

import numpy as np


def mean(values: Sequence[float]) -> float:
    if not values:
        return 0.0
    return float(np.mean(np.asarray(values, dtype=float)))


def population_std(values: Sequence[float]) -> float:
    """Standard deviation with denominator n (not n-1)."""
    if not values:
        return 0.0
    return float(np.std(np.asarray(values, dtype=float)))


def standard_error(std: float, n: int) -> float:
    return std / math.sqrt(n) if n > 0 else 0.0


def z_score(group_mean: float, overall_mean: float, se: float) -> float:
    """0 when the standard error is 0 (no spread, no signal)."""
    if se <= 0:
        return 0.0
    return (group_mean - overall_mean) / se


def rank_percentile(value: float, ratings: Sequence[float]) -> float:
    """
    Fraction of the distribution that *value* sits above or level with.

    rank = index of the first rating (sorted descending) strictly below
    *value*, or n when there is none; percentile = 1 − rank/n.
    """
    ordered = sorted(ratings, reverse=True)
    if not ordered:
        return 0.0
    rank = len(ordered)
    for i, r in enumerate(ordered):
        if value > r:
            rank = i
            break
    return 1.0 - rank / len(ordered)


def round_to(x: float, digits: int) -> float:
    """Half-up decimal rounding (matches toFixed-style display values)."""
    factor = 10 ** digits
    return math.floor(x * factor + 0.5) / factor
