# quiz_engine/session.py
"""
Quiz loop state machine.

    start_quiz → present_next_matchup → record_choice / record_special_choice
               → present_next_matchup → ... until is_complete

Every step takes a QuizState and returns a new one. The caller persists
``state.activities`` (see models.activities_to_snapshot) between steps.
"""
from __future__ import annotations

import logging
import random
from typing import Callable, Literal, Optional, Sequence

from pydantic import BaseModel, ConfigDict

from quiz_engine.constants import (
    ABSOLUTE_MAX_MATCHUPS,
    MIN_MATCHUPS_FOR_ALGORITHM,
    TARGET_ALGORITHM_STRENGTH,
)
from quiz_engine.errors import ActivityNotFoundError, QuizEngineError
from quiz_engine.models import Activity, AlgorithmStrength, MatchupPrediction, PreferenceStrength, index_by_id
from quiz_engine.rating.elo import apply_choice
from quiz_engine.rating.prediction import algorithm_strength, make_prediction, resolve_prediction
from quiz_engine.rating.selection import push_recent_history, select_pair

logger = logging.getLogger(__name__)

SpecialChoice = Literal["both_good", "neither_good"]


class QuizState(BaseModel):
    model_config = ConfigDict(frozen=True)

    current_matchup: int = 0
    activities: tuple[Activity, ...] = ()
    recent_history: tuple[int, ...] = ()
    current_pair: Optional[tuple[int, int]] = None
    pending_prediction: Optional[MatchupPrediction] = None
    algorithm_strength: AlgorithmStrength = AlgorithmStrength()
    # anonymous users stop as soon as the algorithm is ready;
    # signed-in users keep going until the hard ceiling
    stop_when_ready: bool = True
    is_complete: bool = False


def start_quiz(activities: Sequence[Activity], *, stop_when_ready: bool = True) -> QuizState:
    return QuizState(activities=tuple(activities), stop_when_ready=stop_when_ready)


def should_end_quiz(
    strength: AlgorithmStrength,
    matchup_count: int,
    *,
    stop_when_ready: bool = True,
) -> bool:
    if matchup_count >= ABSOLUTE_MAX_MATCHUPS:
        return True
    return stop_when_ready and strength.is_ready


def progress_percentage(state: QuizState) -> float:
    """First half of the bar fills up to MIN_MATCHUPS, then tracks strength/target."""
    if state.current_matchup >= MIN_MATCHUPS_FOR_ALGORITHM:
        return min(100.0, state.algorithm_strength.score / TARGET_ALGORITHM_STRENGTH * 100)
    return state.current_matchup / MIN_MATCHUPS_FOR_ALGORITHM * 50


def present_next_matchup(state: QuizState, rng: Callable[[], float] = random.random) -> QuizState:
    if state.is_complete:
        return state

    pair = select_pair(state.activities, state.recent_history, rng)
    if pair is None:
        logger.warning("[session] no pair available at matchup %d; ending quiz", state.current_matchup)
        return state.model_copy(update={"is_complete": True, "current_pair": None, "pending_prediction": None})

    a, b = pair
    prediction = make_prediction(a, b, state.activities, state.current_matchup + 1)
    logger.debug(
        "[session] matchup %d: %r vs %r (predicted=%s confidence=%.2f)",
        prediction.matchup_number, a.title, b.title,
        prediction.predicted_winner_id, prediction.confidence_level,
    )
    return state.model_copy(update={
        "current_pair": (a.id, b.id),
        "pending_prediction": prediction,
        "recent_history": tuple(push_recent_history(state.recent_history, a.id, b.id)),
    })


def _pending_pair(state: QuizState) -> tuple[Activity, Activity]:
    if state.current_pair is None:
        raise QuizEngineError("no matchup is pending; call present_next_matchup first")
    if state.current_matchup >= ABSOLUTE_MAX_MATCHUPS:
        raise QuizEngineError(f"quiz already reached {ABSOLUTE_MAX_MATCHUPS} matchups")

    by_id = index_by_id(state.activities)
    a_id, b_id = state.current_pair
    for aid in (a_id, b_id):
        if aid not in by_id:
            raise ActivityNotFoundError(aid, "quiz activities")
    return by_id[a_id], by_id[b_id]


def _advance(
    state: QuizState,
    activities: list[Activity],
    history: Sequence[MatchupPrediction],
) -> QuizState:
    count = state.current_matchup + 1
    strength = algorithm_strength(history, count)
    done = should_end_quiz(strength, count, stop_when_ready=state.stop_when_ready)
    if done:
        logger.info(
            "[session] quiz complete | matchups=%d score=%.3f ready=%s",
            count, strength.score, strength.is_ready,
        )
    return state.model_copy(update={
        "current_matchup": count,
        "activities": tuple(activities),
        "current_pair": None,
        "pending_prediction": None,
        "algorithm_strength": strength,
        "is_complete": done,
    })


def record_choice(
    state: QuizState,
    chosen_id: int,
    strength: PreferenceStrength = "somewhat",
) -> QuizState:
    """Clean win for *chosen_id*; resolves the pending prediction."""
    a, b = _pending_pair(state)
    if chosen_id not in (a.id, b.id):
        raise ActivityNotFoundError(chosen_id, "pending pair")

    outcome_for_a = 1.0 if chosen_id == a.id else 0.0
    updated = apply_choice(a, b, outcome_for_a, state.activities, strength)

    history = list(state.algorithm_strength.prediction_history)
    if state.pending_prediction is not None:
        history.append(resolve_prediction(state.pending_prediction, chosen_id))

    return _advance(state, updated, history)


def record_special_choice(state: QuizState, kind: SpecialChoice) -> QuizState:
    """
    "both_good" / "neither_good": a tie at K=16. The matchup counts, the
    prediction is discarded unresolved.
    """
    if kind not in ("both_good", "neither_good"):
        raise QuizEngineError(f"unknown special choice {kind!r}")

    a, b = _pending_pair(state)
    updated = apply_choice(a, b, 0.5, state.activities, "tie")
    return _advance(state, updated, state.algorithm_strength.prediction_history)
