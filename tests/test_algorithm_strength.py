# tests/test_algorithm_strength.py
"""
Tests for per-matchup predictions and the rolling algorithm strength.

Covers:
  1. make_prediction (winner, confidence, dimension differences)
  2. completion_threshold decay
  3. algorithm_strength gating and weighting
"""
from __future__ import annotations

import pytest

from quiz_engine.constants import DIMENSION_KEYS
from quiz_engine.models import Activity, MatchupPrediction
from quiz_engine.rating.prediction import (
    algorithm_strength,
    completion_threshold,
    dimension_predictiveness,
    make_prediction,
    resolve_prediction,
    strength_label,
)


def _act(aid: int, rating: float = 1200, **dims) -> Activity:
    return Activity(id=aid, title=f"Activity {aid}", rating=rating, **dims)


def _resolved(n: int, correct: bool, confidence: float = 0.9, diffs=None) -> MatchupPrediction:
    p = MatchupPrediction(
        matchup_number=n,
        predicted_winner_id=1,
        confidence_level=confidence,
        rating_a=1250,
        rating_b=1150,
        rating_range=200,
        dimensional_differences=diffs or {},
    )
    return resolve_prediction(p, 1 if correct else 2)


# ---------------------------------------------------------------------------
# 1. make_prediction
# ---------------------------------------------------------------------------

class TestMakePrediction:

    def test_higher_rating_is_predicted_winner(self):
        a, b = _act(1, 1100), _act(2, 1300)
        p = make_prediction(a, b, [a, b], matchup_number=3)
        assert p.predicted_winner_id == 2
        assert p.matchup_number == 3
        assert p.confidence_level == pytest.approx(1.0)
        assert not p.is_resolved

    def test_confidence_relative_to_collection_range(self):
        a, b, c = _act(1, 1250), _act(2, 1150), _act(3, 1000)
        p = make_prediction(a, b, [a, b, c], matchup_number=1)
        assert p.confidence_level == pytest.approx(100 / 250)
        assert p.rating_range == 250

    def test_equal_ratings_give_zero_confidence(self):
        a, b, c = _act(1, 1200), _act(2, 1200), _act(3, 1400)
        p = make_prediction(a, b, [a, b, c], matchup_number=1)
        assert p.confidence_level == 0.0

    def test_zero_range_gives_zero_confidence(self):
        a, b = _act(1), _act(2)
        p = make_prediction(a, b, [a, b], matchup_number=1)
        assert p.confidence_level == 0.0
        # expected score is exactly 0.5, so B is predicted
        assert p.predicted_winner_id == 2

    def test_dimensional_differences_recorded(self):
        a = _act(1, energy_level=9, social_intensity=2)
        b = _act(2, energy_level=3, social_intensity=2)
        p = make_prediction(a, b, [a, b], matchup_number=1)
        assert set(p.dimensional_differences) == set(DIMENSION_KEYS)
        assert p.dimensional_differences["energy_level"] == 6
        assert p.dimensional_differences["social_intensity"] == 0

    def test_resolve_marks_correctness(self):
        a, b = _act(1, 1300), _act(2, 1100)
        p = make_prediction(a, b, [a, b], matchup_number=1)
        assert resolve_prediction(p, 1).was_correct is True
        assert resolve_prediction(p, 2).was_correct is False
        assert resolve_prediction(p, 2).actual_winner_id == 2


# ---------------------------------------------------------------------------
# 2. Threshold
# ---------------------------------------------------------------------------

@pytest.mark.parametrize("count,expected", [
    (0, 0.85), (30, 0.85), (50, 0.80), (70, 0.75), (120, 0.75),
])
def test_completion_threshold(count, expected):
    assert completion_threshold(count) == pytest.approx(expected)


def test_threshold_always_within_bounds():
    for count in range(0, 130):
        assert 0.75 - 1e-9 <= completion_threshold(count) <= 0.85 + 1e-9


# ---------------------------------------------------------------------------
# 3. Strength
# ---------------------------------------------------------------------------

class TestAlgorithmStrength:

    def test_below_minimum_matchups_is_not_ready(self):
        history = [_resolved(i, True) for i in range(1, 6)]
        s = algorithm_strength(history, 5)
        assert s.score == 0
        assert s.is_ready is False
        assert s.confidence == "low"
        assert s.threshold == pytest.approx(0.85)
        assert len(s.prediction_history) == 5

    def test_empty_window_scores_zero(self):
        s = algorithm_strength([], 10)
        assert s.score == 0
        assert s.is_ready is False

    def test_perfect_predictions_become_ready(self):
        history = [_resolved(i, True) for i in range(1, 26)]
        s = algorithm_strength(history, 25)
        assert s.score == pytest.approx(1.0)
        assert s.is_ready is True
        assert s.confidence == "high"

    def test_confidence_weighting(self):
        history = [_resolved(i, True, confidence=0.9) for i in range(1, 6)]
        history += [_resolved(i, False, confidence=0.1) for i in range(6, 11)]
        s = algorithm_strength(history, 10)
        assert s.score == pytest.approx(4.5 / 5.0)

    def test_not_ready_with_too_few_resolved(self):
        history = [_resolved(i, True) for i in range(1, 11)]
        s = algorithm_strength(history, 40)
        assert s.score == pytest.approx(1.0)
        assert s.is_ready is False

    def test_window_uses_last_ten_resolved(self):
        history = [_resolved(i, False) for i in range(1, 21)]
        history += [_resolved(i, True) for i in range(21, 31)]
        s = algorithm_strength(history, 30)
        assert s.score == pytest.approx(1.0)
        assert s.is_ready is True

    def test_unresolved_predictions_are_ignored(self):
        pending = MatchupPrediction(
            matchup_number=7, predicted_winner_id=1, confidence_level=0.5,
            rating_a=1200, rating_b=1100, rating_range=100,
        )
        history = [_resolved(i, True) for i in range(1, 7)] + [pending]
        s = algorithm_strength(history, 7)
        assert s.score == pytest.approx(1.0)
        assert len(s.prediction_history) == 7


def test_dimension_predictiveness_defaults_to_half():
    window = [_resolved(1, True, diffs={"energy_level": 6.0})]
    out = dimension_predictiveness(window)
    assert out["energy_level"] == pytest.approx(1.0)
    assert out["social_intensity"] == pytest.approx(0.5)


@pytest.mark.parametrize("score,window,label", [
    (0.9, 10, "high"), (0.9, 6, "medium"), (0.7, 10, "medium"), (0.5, 10, "low"), (0.9, 3, "low"),
])
def test_strength_label(score, window, label):
    assert strength_label(score, window) == label
