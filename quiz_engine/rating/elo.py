# quiz_engine/rating/elo.py
"""
Pairwise rating engine.

Pure utility: no I/O, never mutates caller-owned data. Every update
returns a new list of Activity copies.

One choice is processed in three steps:

  1. Direct update of the two displayed activities (ELO formula, K by
     preference strength: strong 48 / somewhat 24 / tie 16).
  2. Propagation to every other activity (skipped for ties):
       - dimensional: similarity to winner/loser above 0.65
       - tags: shared (normalized) tags with winner/loser, rarer tags
         weighted more
  3. Zero-sum normalization of the pending propagation changes, then
     apply (rating rounded, update count +0.25).
"""
from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Sequence

from quiz_engine.constants import (
    DIMENSION_SPAN,
    DIMENSIONS,
    K_FACTOR_DIM_SIM_PROPAGATION,
    K_FACTOR_SOMEWHAT,
    K_FACTOR_STRONG,
    K_FACTOR_TAG_PROPAGATION,
    K_FACTOR_TIE,
    MIN_PROPAGATION_CHANGE,
    PROPAGATION_UPDATE_INCREMENT,
    SIMILARITY_THRESHOLD_FOR_DIM_PROPAGATION,
    TAG_PROPAGATION_DAMPING,
)
from quiz_engine.models import Activity, PreferenceStrength

logger = logging.getLogger(__name__)

K_FACTORS: dict[str, int] = {
    "strong": K_FACTOR_STRONG,
    "somewhat": K_FACTOR_SOMEWHAT,
    "tie": K_FACTOR_TIE,
}

VALID_OUTCOMES = (0.0, 0.5, 1.0)


# ---------------------------------------------------------------------------
# Formulas
# ---------------------------------------------------------------------------

def round_half_up(x: float) -> int:
    """Round .5 away from -inf (not banker's rounding)."""
    return math.floor(x + 0.5)


def k_factor_for(strength: PreferenceStrength | str) -> int:
    """Unknown strengths fall back to 'somewhat'."""
    return K_FACTORS.get(strength, K_FACTOR_SOMEWHAT)


def expected_score(rating: float, opponent_rating: float) -> float:
    return 1.0 / (1.0 + 10 ** ((opponent_rating - rating) / 400.0))


def updated_rating(rating: float, expected: float, actual: float, k_factor: float) -> int:
    return round_half_up(rating + k_factor * (actual - expected))


def dimensional_similarity(a: Activity, b: Activity) -> float:
    """1 − normalized L1 distance over the six dimensions (1 = identical)."""
    va = a.dimension_values()
    vb = b.dimension_values()
    total = sum(abs(va[d.key] - vb[d.key]) for d in DIMENSIONS)
    return 1.0 - total / (len(DIMENSIONS) * DIMENSION_SPAN)


def tag_frequencies(activities: Sequence[Activity]) -> dict[str, int]:
    freq: dict[str, int] = {}
    for act in activities:
        for tag in act.tag_set():
            freq[tag] = freq.get(tag, 0) + 1
    return freq


def tag_propagation_weight(collection_size: int, tag_count: int) -> float:
    """Per-shared-tag change; rarer tags weigh more, clamped to [0.5, 3] first."""
    rarity = collection_size / max(tag_count, 1)
    normalized_rarity = min(3.0, max(0.5, rarity / 5.0))
    return K_FACTOR_TAG_PROPAGATION * (normalized_rarity / 3.0) * TAG_PROPAGATION_DAMPING


# ---------------------------------------------------------------------------
# Propagation
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class PropagationChange:
    activity_id: int
    raw_change: float
    applied_change: float
    old_rating: float
    new_rating: float


def propagation_changes(
    winner: Activity,
    loser: Activity,
    activities: Sequence[Activity],
) -> dict[int, float]:
    """
    Pending (unnormalized) rating change per activity id.
    Activities whose net change is within ±0.01 are omitted.
    """
    freq = tag_frequencies(activities)
    n = len(activities)
    winner_tags = winner.tag_set()
    loser_tags = loser.tag_set()

    pending: dict[int, float] = {}
    for other in activities:
        if other.id in (winner.id, loser.id):
            continue

        change = 0.0

        sim_w = dimensional_similarity(other, winner)
        if sim_w > SIMILARITY_THRESHOLD_FOR_DIM_PROPAGATION:
            change += K_FACTOR_DIM_SIM_PROPAGATION * sim_w * (
                1 - expected_score(other.rating, loser.rating)
            )

        sim_l = dimensional_similarity(other, loser)
        if sim_l > SIMILARITY_THRESHOLD_FOR_DIM_PROPAGATION:
            change += K_FACTOR_DIM_SIM_PROPAGATION * sim_l * (
                0 - expected_score(other.rating, winner.rating)
            )

        other_tags = other.tag_set()
        tag_change = 0.0
        for tag in winner_tags & other_tags:
            tag_change += tag_propagation_weight(n, freq.get(tag, 1))
        for tag in loser_tags & other_tags:
            tag_change -= tag_propagation_weight(n, freq.get(tag, 1))
        change += tag_change

        if abs(change) > MIN_PROPAGATION_CHANGE:
            pending[other.id] = change

    return pending


def normalize_zero_sum(pending: dict[int, float]) -> dict[int, float]:
    """Subtract the mean change so the pending changes sum to zero."""
    total = sum(pending.values())
    if not pending or abs(total) <= MIN_PROPAGATION_CHANGE:
        return dict(pending)
    mean = total / len(pending)
    return {aid: change - mean for aid, change in pending.items()}


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def apply_choice(
    activity_a: Activity,
    activity_b: Activity,
    outcome_for_a: float,
    activities: Sequence[Activity],
    strength: PreferenceStrength = "somewhat",
) -> list[Activity]:
    """
    Process one pairwise answer and return the updated collection.

    outcome_for_a: 1 (A chosen), 0 (B chosen), 0.5 (tie / both good /
    neither good). If either activity is not in *activities* (by id), the
    collection is returned unchanged.
    """
    updated, _ = apply_choice_with_trace(activity_a, activity_b, outcome_for_a, activities, strength)
    return updated


def apply_choice_with_trace(
    activity_a: Activity,
    activity_b: Activity,
    outcome_for_a: float,
    activities: Sequence[Activity],
    strength: PreferenceStrength = "somewhat",
) -> tuple[list[Activity], list[PropagationChange]]:
    """Same as apply_choice, also returning the applied propagation changes."""
    updated = list(activities)
    pos = {act.id: i for i, act in enumerate(updated)}

    if activity_a.id not in pos or activity_b.id not in pos:
        logger.warning(
            "[rating] choice ignored: activity not in collection | a=%s b=%s",
            activity_a.id, activity_b.id,
        )
        return updated, []
    if outcome_for_a not in VALID_OUTCOMES:
        raise ValueError(f"outcome_for_a must be one of {VALID_OUTCOMES}, got {outcome_for_a!r}")

    act_a = updated[pos[activity_a.id]]
    act_b = updated[pos[activity_b.id]]

    # --- 1. direct update ---
    k = k_factor_for(strength)
    exp_a = expected_score(act_a.rating, act_b.rating)
    new_a = updated_rating(act_a.rating, exp_a, outcome_for_a, k)
    new_b = updated_rating(act_b.rating, 1 - exp_a, 1 - outcome_for_a, k)

    logger.debug(
        "[rating] direct | %r %s→%s vs %r %s→%s | outcome=%s strength=%s",
        act_a.title, act_a.rating, new_a, act_b.title, act_b.rating, new_b,
        outcome_for_a, strength,
    )

    a_update: dict = {"rating": float(new_a), "rating_update_count": act_a.rating_update_count + 1}
    b_update: dict = {"rating": float(new_b), "rating_update_count": act_b.rating_update_count + 1}
    if outcome_for_a in (0.0, 1.0):
        a_update["matchups"] = act_a.matchups + 1
        b_update["matchups"] = act_b.matchups + 1
        chosen_update = a_update if outcome_for_a == 1 else b_update
        chosen = act_a if outcome_for_a == 1 else act_b
        chosen_update["wins"] = chosen.wins + 1
        chosen_update["chosen_count"] = chosen.chosen_count + 1

    updated[pos[act_a.id]] = act_a.model_copy(update=a_update)
    updated[pos[act_b.id]] = act_b.model_copy(update=b_update)

    if outcome_for_a == 0.5:
        logger.debug("[rating] tie: no propagation")
        return updated, []

    # --- 2. propagation (computed against the directly-updated ratings) ---
    winner = updated[pos[act_a.id]] if outcome_for_a == 1 else updated[pos[act_b.id]]
    loser = updated[pos[act_b.id]] if outcome_for_a == 1 else updated[pos[act_a.id]]

    pending = propagation_changes(winner, loser, updated)
    normalized = normalize_zero_sum(pending)

    # --- 3. apply ---
    trace: list[PropagationChange] = []
    for aid, change in normalized.items():
        act = updated[pos[aid]]
        new_rating = float(round_half_up(act.rating + change))
        updated[pos[aid]] = act.model_copy(update={
            "rating": new_rating,
            "rating_update_count": act.rating_update_count + PROPAGATION_UPDATE_INCREMENT,
        })
        trace.append(PropagationChange(aid, pending[aid], change, act.rating, new_rating))

    logger.debug(
        "[rating] propagated | touched=%d raw_total=%.2f applied_total=%.2f",
        len(trace), sum(pending.values()), sum(normalized.values()),
    )
    return updated, trace
