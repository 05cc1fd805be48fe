# tests/test_preference_drivers.py
"""
Tests for preference drivers, insights and persona names.

Covers:
  1. pearson_correlation edge cases (NaN, perfect correlation)
  2. compute_drivers ordering (NaN last)
  3. interpret_driver / personality_insights wording
  4. persona_name with an injected rng
"""
from __future__ import annotations

import math

import pytest

from quiz_engine.models import Activity
from quiz_engine.profile.drivers import (
    PERSONA_FALLBACK,
    PreferenceDriver,
    compute_drivers,
    interpret_driver,
    pearson_correlation,
    persona_name,
    personality_insights,
)


def _driver(key: str, r: float) -> PreferenceDriver:
    labels = {
        "social_intensity": ("Social Intensity", "Low Key", "High Buzz"),
        "energy_level": ("Energy Level", "Low Energy", "High Energy"),
        "familiarity_novelty": ("Novelty", "Familiar", "Novel"),
        "formality_gradient": ("Formality", "Casual", "Formal"),
    }
    label, low, high = labels[key]
    return PreferenceDriver(dimension=label, correlation=r, low=low, high=high, key=key)


def _seq(*values: float):
    it = iter(values)
    return lambda: next(it)


# ---------------------------------------------------------------------------
# 1. Pearson
# ---------------------------------------------------------------------------

class TestPearson:

    def test_perfect_positive(self):
        assert pearson_correlation([1, 2, 3], [2, 4, 6]) == pytest.approx(1.0)

    def test_perfect_negative(self):
        assert pearson_correlation([1, 2, 3], [3, 2, 1]) == pytest.approx(-1.0)

    def test_zero_variance_is_nan(self):
        assert math.isnan(pearson_correlation([1, 2, 3], [5, 5, 5]))

    def test_length_mismatch_is_nan(self):
        assert math.isnan(pearson_correlation([1, 2, 3], [1, 2]))

    def test_too_short_is_nan(self):
        assert math.isnan(pearson_correlation([1], [1]))


# ---------------------------------------------------------------------------
# 2. compute_drivers
# ---------------------------------------------------------------------------

def test_compute_drivers_orders_by_strength_with_nan_last():
    acts = [
        Activity(id=i, title=f"A{i}", rating=1000 + 100 * i, energy_level=i + 1, social_intensity=(i * 7) % 4 + 1)
        for i in range(1, 6)
    ]
    drivers = compute_drivers(acts)

    assert len(drivers) == 6
    assert drivers[0].key == "energy_level"
    assert drivers[0].correlation == pytest.approx(1.0)
    # the four constant dimensions carry no signal and trail the list
    assert all(not d.has_signal for d in drivers[2:])


# ---------------------------------------------------------------------------
# 3. Wording
# ---------------------------------------------------------------------------

class TestInterpretation:

    def test_nan_driver(self):
        text = interpret_driver(_driver("energy_level", float("nan")))
        assert text == "Could not determine correlation for Energy Level (likely not enough variance in data)."

    def test_strong_positive(self):
        assert interpret_driver(_driver("energy_level", 0.5)) == \
            "You strongly prefer activities that are more High Energy."

    def test_leaning_negative(self):
        assert interpret_driver(_driver("social_intensity", -0.2)) == \
            "You lean towards activities that are more Low Key."

    def test_weak(self):
        assert interpret_driver(_driver("formality_gradient", 0.1)) == \
            "Formality doesn't seem to be a major factor in your choices."

    def test_insights_top_three_and_tag(self):
        drivers = [
            _driver("energy_level", 0.6),
            _driver("social_intensity", -0.4),
            _driver("familiarity_novelty", 0.2),
            _driver("formality_gradient", -0.18),
        ]
        insights = personality_insights(drivers, top_tag="Outdoor")
        assert insights == [
            "You're drawn to activities that are high energy",
            "You prefer activities that are low key",
            "You lean towards novel activities",
            "You have a thing for outdoor activities",
        ]

    def test_insights_fallback(self):
        assert personality_insights([_driver("energy_level", float("nan"))]) == [
            "You have unique and interesting preferences!"
        ]


# ---------------------------------------------------------------------------
# 4. Persona name
# ---------------------------------------------------------------------------

class TestPersonaName:

    def test_two_drivers(self):
        drivers = [_driver("energy_level", 0.9), _driver("social_intensity", -0.5)]
        assert persona_name(drivers, rng=lambda: 0.0) == "You are a Energetic Soloist!"

    def test_single_driver_collision_becomes_maverick(self):
        drivers = [_driver("familiarity_novelty", 0.6)]
        # "Explorer" is both the second adjective and the first descriptor
        assert persona_name(drivers, rng=_seq(0.3, 0.0)) == "You are a Explorer Maverick!"

    def test_no_signal_gives_fallback(self):
        drivers = [_driver("energy_level", float("nan")), _driver("social_intensity", 0.01)]
        assert persona_name(drivers, rng=lambda: 0.0) == PERSONA_FALLBACK

    def test_weak_drivers_are_skipped(self):
        drivers = [_driver("social_intensity", 0.02), _driver("energy_level", -0.4)]
        name = persona_name(drivers, rng=lambda: 0.0)
        assert name == "You are a Calm Zen-Master!"
