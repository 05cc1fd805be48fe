# quiz_engine/rating/prediction.py
"""
Per-matchup winner predictions and the rolling "algorithm strength".

Before each answer we predict the winner from current ratings. After the
answer the prediction is resolved. Strength is a confidence-weighted
accuracy over the last ALGORITHM_HISTORY_SIZE resolved predictions and
gates when the quiz may stop.

Ties are never resolved: they advance the matchup count only.
"""
from __future__ import annotations

import logging
from typing import Sequence

from quiz_engine.constants import (
    ALGORITHM_HISTORY_SIZE,
    DIMENSION_SPAN,
    DIMENSIONS,
    FLOOR_ALGORITHM_STRENGTH,
    MEANINGFUL_DIMENSION_DIFFERENCE,
    MIN_MATCHUPS_FOR_ALGORITHM,
    MIN_RESOLVED_PREDICTIONS_FOR_READY,
    MIN_WINDOW_FILL_RATIO,
    TARGET_ALGORITHM_STRENGTH,
    THRESHOLD_DECAY_SPAN,
    THRESHOLD_DECAY_START,
)
from quiz_engine.models import Activity, AlgorithmStrength, ConfidenceLabel, MatchupPrediction
from quiz_engine.rating.elo import expected_score

logger = logging.getLogger(__name__)


def make_prediction(
    activity_a: Activity,
    activity_b: Activity,
    activities: Sequence[Activity],
    matchup_number: int,
) -> MatchupPrediction:
    ratings = [a.rating for a in activities] or [activity_a.rating, activity_b.rating]
    rating_range = max(ratings) - min(ratings)

    predicted = activity_a if expected_score(activity_a.rating, activity_b.rating) > 0.5 else activity_b
    confidence = abs(activity_a.rating - activity_b.rating) / rating_range if rating_range > 0 else 0.0

    va = activity_a.dimension_values()
    vb = activity_b.dimension_values()

    return MatchupPrediction(
        matchup_number=matchup_number,
        predicted_winner_id=predicted.id,
        confidence_level=min(1.0, confidence),
        rating_a=activity_a.rating,
        rating_b=activity_b.rating,
        rating_range=rating_range,
        dimensional_differences={d.key: float(abs(va[d.key] - vb[d.key])) for d in DIMENSIONS},
    )


def resolve_prediction(prediction: MatchupPrediction, actual_winner_id: int) -> MatchupPrediction:
    """Clean choices only; ties must not be resolved."""
    return prediction.model_copy(update={
        "actual_winner_id": actual_winner_id,
        "was_correct": prediction.predicted_winner_id == actual_winner_id,
    })


def completion_threshold(matchup_count: int) -> float:
    """0.85 until matchup 30, linear down to 0.75 at matchup 70, then flat."""
    progress = (matchup_count - THRESHOLD_DECAY_START) / THRESHOLD_DECAY_SPAN
    progress = min(1.0, max(0.0, progress))
    return TARGET_ALGORITHM_STRENGTH - progress * (TARGET_ALGORITHM_STRENGTH - FLOOR_ALGORITHM_STRENGTH)


def strength_label(score: float, window_size: int) -> ConfidenceLabel:
    if score >= 0.8 and window_size >= 8:
        return "high"
    if score >= 0.65 and window_size >= 5:
        return "medium"
    return "low"


def dimension_predictiveness(window: Sequence[MatchupPrediction]) -> dict[str, float]:
    """
    Per dimension: magnitude-weighted accuracy over predictions where that
    dimension differed meaningfully (>= 2). 0.5 when there is no such prediction.
    """
    out: dict[str, float] = {}
    for d in DIMENSIONS:
        weighted_correct = 0.0
        weighted_total = 0.0
        for p in window:
            diff = p.dimensional_differences.get(d.key, 0.0)
            if diff < MEANINGFUL_DIMENSION_DIFFERENCE:
                continue
            weight = diff / DIMENSION_SPAN
            weighted_total += weight
            if p.was_correct:
                weighted_correct += weight
        out[d.key] = weighted_correct / weighted_total if weighted_total > 0 else 0.5
    return out


def _prediction_weight(p: MatchupPrediction, predictiveness: dict[str, float]) -> float:
    weight = max(0.1, p.confidence_level)
    relevant = [
        predictiveness[d.key]
        for d in DIMENSIONS
        if p.dimensional_differences.get(d.key, 0.0) >= MEANINGFUL_DIMENSION_DIFFERENCE
    ]
    if relevant:
        avg = sum(relevant) / len(relevant)
        weight *= min(1.2, max(0.8, 1 + 0.2 * (avg - 0.5)))
    return weight


def algorithm_strength(
    history: Sequence[MatchupPrediction],
    current_matchup_count: int,
) -> AlgorithmStrength:
    threshold = completion_threshold(current_matchup_count)
    full_history = tuple(history)

    if current_matchup_count < MIN_MATCHUPS_FOR_ALGORITHM:
        return AlgorithmStrength(threshold=threshold, prediction_history=full_history)

    resolved = [p for p in full_history if p.is_resolved]
    window = resolved[-ALGORITHM_HISTORY_SIZE:]
    if not window:
        return AlgorithmStrength(threshold=threshold, prediction_history=full_history)

    predictiveness = dimension_predictiveness(window)

    weighted_correct = 0.0
    weighted_total = 0.0
    for p in window:
        w = _prediction_weight(p, predictiveness)
        weighted_total += w
        if p.was_correct:
            weighted_correct += w

    score = weighted_correct / weighted_total if weighted_total > 0 else 0.0
    confidence = strength_label(score, len(window))

    is_ready = (
        score >= threshold
        and len(resolved) >= MIN_RESOLVED_PREDICTIONS_FOR_READY
        and len(window) / ALGORITHM_HISTORY_SIZE >= MIN_WINDOW_FILL_RATIO
    )

    logger.debug(
        "[strength] matchup=%d score=%.3f threshold=%.3f window=%d resolved=%d ready=%s",
        current_matchup_count, score, threshold, len(window), len(resolved), is_ready,
    )

    return AlgorithmStrength(
        score=score,
        confidence=confidence,
        is_ready=is_ready,
        threshold=threshold,
        prediction_history=full_history,
    )
