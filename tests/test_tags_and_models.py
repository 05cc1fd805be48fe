# tests/test_tags_and_models.py
"""
Tests for tag identity and the activity snapshot format.

Covers:
  1. normalize_tag / normalized_tag_set / vocabulary lookup
  2. Activity snapshot keys and defaults for missing fields
"""
from __future__ import annotations

import pytest
from pydantic import ValidationError

from quiz_engine.models import Activity, activities_from_snapshot, activities_to_snapshot, index_by_id
from quiz_engine.tags import is_known_tag, normalize_tag, normalized_tag_set


# ---------------------------------------------------------------------------
# 1. Tags
# ---------------------------------------------------------------------------

@pytest.mark.parametrize("raw,expected", [
    ("Outdoor", "outdoor"),
    ("  Arts & Culture  ", "arts-&-culture"),
    ("Live   Music", "live-music"),
    ("diy/homemade", "diy/homemade"),
    ("", ""),
    (None, ""),
])
def test_normalize_tag(raw, expected):
    assert normalize_tag(raw) == expected


def test_normalized_tag_set_dedupes_and_drops_empty():
    assert normalized_tag_set(["Cozy", "cozy ", "", "  "]) == frozenset({"cozy"})
    assert normalized_tag_set(None) == frozenset()


def test_known_tag_lookup_uses_normalized_form():
    assert is_known_tag("Group Friendly")
    assert is_known_tag("arts & culture")
    assert not is_known_tag("underwater-basket-weaving")


# ---------------------------------------------------------------------------
# 2. Snapshot
# ---------------------------------------------------------------------------

class TestSnapshot:

    def test_snapshot_uses_camel_case_keys(self):
        act = Activity(id=1, title="Chess", energy_level=2, rating=1234, rating_update_count=1.25)
        [row] = activities_to_snapshot([act])
        assert row["elo"] == 1234
        assert row["eloUpdateCount"] == 1.25
        assert row["energyLevel"] == 2
        assert row["chosenCount"] == 0
        assert activities_from_snapshot([row]) == [act]

    def test_missing_fields_get_defaults(self):
        [act] = activities_from_snapshot([
            {"id": 7, "title": "Legacy", "energyLevel": None, "tags": None, "wins": None},
        ])
        assert act.rating == 1200
        assert act.energy_level == 5
        assert act.tags == ()
        assert act.wins == 0
        assert act.rating_update_count == 0

    def test_activities_are_frozen(self):
        act = Activity(id=1, title="Chess")
        with pytest.raises(ValidationError):
            act.rating = 1300

    def test_index_by_id(self):
        acts = [Activity(id=1, title="A"), Activity(id=2, title="B")]
        assert index_by_id(acts)[2].title == "B"
        assert activities_from_snapshot(None) == []
