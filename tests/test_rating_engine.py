# tests/test_rating_engine.py
"""
Tests for the pairwise rating engine.

Covers:
  1. Direct update (strong win, tie example, counters)
  2. Tie → no propagation
  3. Zero-sum propagation
  4. Contract violations (unknown id, bad outcome)
  5. Copy-on-write (caller data untouched)
"""
from __future__ import annotations

import pytest

from quiz_engine.constants import DIMENSION_KEYS
from quiz_engine.models import Activity
from quiz_engine.rating.elo import (
    apply_choice,
    apply_choice_with_trace,
    dimensional_similarity,
    expected_score,
    k_factor_for,
    round_half_up,
    tag_propagation_weight,
)


def _act(aid: int, rating: float = 1200, dims: int = 5, tags=(), **overrides) -> Activity:
    values = {k: dims for k in DIMENSION_KEYS}
    values.update(overrides)
    return Activity(id=aid, title=f"Activity {aid}", rating=rating, tags=tags, **values)


def _by_id(activities):
    return {a.id: a for a in activities}


def _propagation_collection():
    """Winner-like and loser-like neighbours so propagation is non-trivial."""
    return [
        _act(1, dims=8, tags=("active", "social")),   # displayed A
        _act(2, dims=2, tags=("cozy",)),              # displayed B
        _act(3, dims=8, tags=("active",)),
        _act(4, dims=7, tags=("social",)),
        _act(5, dims=2, tags=("cozy",)),
        _act(6, dims=5),
    ]


# ---------------------------------------------------------------------------
# 1. Direct update
# ---------------------------------------------------------------------------

class TestDirectUpdate:

    def test_strong_win_from_equal_ratings(self):
        a, b = _act(1), _act(2)
        updated = _by_id(apply_choice(a, b, 1, [a, b], "strong"))
        assert updated[1].rating == 1224
        assert updated[2].rating == 1176

    def test_tie_example_uses_k16(self):
        a, b = _act(1, rating=1300), _act(2, rating=1100)
        updated = _by_id(apply_choice(a, b, 0.5, [a, b], "tie"))
        assert updated[1].rating == 1296
        assert updated[2].rating == 1104

    def test_loss_for_displayed_a(self):
        a, b = _act(1), _act(2)
        updated = _by_id(apply_choice(a, b, 0, [a, b], "somewhat"))
        assert updated[1].rating == 1188
        assert updated[2].rating == 1212

    def test_clean_win_counters(self):
        a, b = _act(1), _act(2)
        updated = _by_id(apply_choice(a, b, 1, [a, b], "strong"))
        assert updated[1].wins == 1
        assert updated[1].chosen_count == 1
        assert updated[2].wins == 0
        assert updated[2].chosen_count == 0
        assert updated[1].matchups == 1
        assert updated[2].matchups == 1
        assert updated[1].rating_update_count == 1
        assert updated[2].rating_update_count == 1

    def test_tie_counts_update_but_not_wins(self):
        a, b = _act(1), _act(2)
        updated = _by_id(apply_choice(a, b, 0.5, [a, b], "tie"))
        assert updated[1].rating_update_count == 1
        assert updated[2].rating_update_count == 1
        assert updated[1].wins == 0
        assert updated[1].matchups == 0

    @pytest.mark.parametrize("strength,k", [("strong", 48), ("somewhat", 24), ("tie", 16), ("bogus", 24)])
    def test_k_factor(self, strength, k):
        assert k_factor_for(strength) == k

    def test_expected_score_symmetry(self):
        assert expected_score(1200, 1200) == pytest.approx(0.5)
        assert expected_score(1300, 1100) + expected_score(1100, 1300) == pytest.approx(1.0)
        assert expected_score(1300, 1100) == pytest.approx(0.7597, abs=1e-4)

    @pytest.mark.parametrize("x,expected", [(1295.5, 1296), (1104.5, 1105), (-0.5, 0), (1295.49, 1295)])
    def test_round_half_up(self, x, expected):
        assert round_half_up(x) == expected


# ---------------------------------------------------------------------------
# 2. Ties never propagate
# ---------------------------------------------------------------------------

def test_tie_changes_only_the_two_participants():
    acts = _propagation_collection()
    updated = _by_id(apply_choice(acts[0], acts[1], 0.5, acts, "tie"))
    for original in acts[2:]:
        assert updated[original.id].rating == original.rating
        assert updated[original.id].rating_update_count == original.rating_update_count


# ---------------------------------------------------------------------------
# 3. Zero-sum propagation
# ---------------------------------------------------------------------------

class TestPropagation:

    def test_normalized_changes_sum_to_zero(self):
        acts = _propagation_collection()
        _, trace = apply_choice_with_trace(acts[0], acts[1], 1, acts, "somewhat")

        assert trace, "expected neighbours to be touched"
        assert abs(sum(c.raw_change for c in trace)) > 0.01
        assert sum(c.applied_change for c in trace) == pytest.approx(0.0, abs=1e-9)

    def test_rounded_rating_deltas_stay_within_rounding(self):
        acts = _propagation_collection()
        updated = _by_id(apply_choice(acts[0], acts[1], 1, acts, "somewhat"))
        others = acts[2:]
        total_delta = sum(updated[a.id].rating - a.rating for a in others)
        assert abs(total_delta) <= 0.5 * len(others)

    def test_winner_neighbours_rise_loser_neighbours_fall(self):
        acts = _propagation_collection()
        updated = _by_id(apply_choice(acts[0], acts[1], 1, acts, "somewhat"))
        assert updated[3].rating > 1200
        assert updated[5].rating < 1200

    def test_propagated_activities_get_fractional_update_count(self):
        acts = _propagation_collection()
        updated, trace = apply_choice_with_trace(acts[0], acts[1], 1, acts, "somewhat")
        by_id = _by_id(updated)
        for change in trace:
            assert by_id[change.activity_id].rating_update_count == 0.25

    def test_ratings_are_integers_after_update(self):
        acts = _propagation_collection()
        for a in apply_choice(acts[0], acts[1], 1, acts, "strong"):
            assert a.rating == int(a.rating)

    def test_tag_weight_rarity_clamp(self):
        # common tag: rarity 1 → clamped up to 0.5
        assert tag_propagation_weight(10, 10) == pytest.approx(8 * (0.5 / 3) * 0.10)
        # very rare tag: rarity 100 → clamped down to 3
        assert tag_propagation_weight(100, 1) == pytest.approx(0.8)

    def test_dimensional_similarity_bounds(self):
        assert dimensional_similarity(_act(1, dims=4), _act(2, dims=4)) == pytest.approx(1.0)
        assert dimensional_similarity(_act(1, dims=1), _act(2, dims=10)) == pytest.approx(0.0)


# ---------------------------------------------------------------------------
# 4. Contract violations
# ---------------------------------------------------------------------------

class TestContractViolations:

    def test_unknown_activity_is_noop(self):
        acts = [_act(1), _act(2)]
        stranger = _act(99)
        updated = apply_choice(acts[0], stranger, 1, acts, "strong")
        assert [a.rating for a in updated] == [1200, 1200]
        assert [a.id for a in updated] == [1, 2]

    def test_invalid_outcome_raises(self):
        acts = [_act(1), _act(2)]
        with pytest.raises(ValueError):
            apply_choice(acts[0], acts[1], 0.7, acts)


# ---------------------------------------------------------------------------
# 5. Copy-on-write
# ---------------------------------------------------------------------------

def test_input_collection_is_not_mutated():
    acts = _propagation_collection()
    snapshot = [a.model_dump() for a in acts]
    as_list = list(acts)

    updated = apply_choice(acts[0], acts[1], 1, acts, "strong")

    assert updated is not acts
    assert acts == as_list
    assert [a.model_dump() for a in acts] == snapshot
