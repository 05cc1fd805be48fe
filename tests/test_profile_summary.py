# tests/test_profile_summary.py
"""
Tests for the profile summary and the plain-text report.

Covers:
  1. overall_stats (mean, median, quartiles, std)
  2. analyze_dimensions (rating-weighted, neutral fallback)
  3. generate_profile_summary (ranking, empty input)
  4. render_profile_report
"""
from __future__ import annotations

from datetime import date

import pytest

from quiz_engine.models import Activity
from quiz_engine.profile.summary import (
    NO_QUIZ_DATA,
    analyze_dimensions,
    generate_profile_summary,
    overall_stats,
    render_profile_report,
)

TODAY = date(2026, 3, 1)


def _act(aid: int, rating: float, **fields) -> Activity:
    return Activity(id=aid, title=f"Activity {aid}", rating=rating, **fields)


# ---------------------------------------------------------------------------
# 1. Overall stats
# ---------------------------------------------------------------------------

def test_overall_stats_even_count():
    s = overall_stats([1300, 1000, 1200, 1100])
    assert s.mean_rating == 1150
    assert s.median_rating == 1150
    assert s.q1 == 1100
    assert s.q3 == 1300
    assert s.standard_deviation == 111.8
    assert s.min_rating == 1000
    assert s.max_rating == 1300


def test_overall_stats_odd_count_and_empty():
    assert overall_stats([1000, 1200, 1100]).median_rating == 1100
    assert overall_stats([]).mean_rating == 0


# ---------------------------------------------------------------------------
# 2. Dimensions
# ---------------------------------------------------------------------------

class TestAnalyzeDimensions:

    def test_names_and_order(self):
        dims = analyze_dimensions([_act(1, 1200)])
        assert [d.name for d in dims] == [
            "Social Intensity", "Structure", "Novelty", "Formality", "Energy Level", "Scale Immersion",
        ]

    def test_high_rated_energy_drives_preference(self):
        acts = [_act(1, 1400, energy_level=9), _act(2, 1100, energy_level=3)]
        energy = next(d for d in analyze_dimensions(acts) if d.key == "energy_level")
        # (9·400 + 3·100) / 500
        assert energy.score == 7.8
        assert energy.preference == "High Energy"

    def test_low_band(self):
        acts = [_act(1, 1300, social_intensity=2)]
        social = next(d for d in analyze_dimensions(acts) if d.key == "social_intensity")
        assert social.preference == "Intimate Settings"

    def test_no_positive_weight_is_neutral(self):
        dims = analyze_dimensions([_act(1, 900, energy_level=10), _act(2, 1000, energy_level=1)])
        assert all(d.score == 5.5 for d in dims)
        assert all(d.preference in {
            "Moderate Groups", "Semi-Structured", "Balanced Explorer",
            "Smart Casual", "Moderate Energy", "Moderate Duration",
        } for d in dims)


# ---------------------------------------------------------------------------
# 3. Summary
# ---------------------------------------------------------------------------

class TestGenerateProfileSummary:

    def test_ranked_activities_and_percentiles(self):
        acts = [_act(1, 1100), _act(2, 1300), _act(3, 1200), _act(4, 1000)]
        summary = generate_profile_summary("alice", acts, total_matchups=40, today=TODAY)

        assert summary.completion_date == "2026-03-01"
        assert [a.title for a in summary.all_activities] == [
            "Activity 2", "Activity 3", "Activity 1", "Activity 4",
        ]
        assert [a.rank for a in summary.all_activities] == [1, 2, 3, 4]
        assert [a.percentile for a in summary.all_activities] == pytest.approx([1.0, 0.75, 0.5, 0.25])
        assert summary.total_matchups == 40

    def test_tag_analysis_included(self):
        acts = [
            _act(1, 1400, tags=("active",)),
            _act(2, 1350, tags=("active",)),
            _act(3, 1300, tags=("active",)),
            _act(4, 1000),
        ]
        summary = generate_profile_summary("bob", acts, total_matchups=20, today=TODAY)
        assert [t.tag for t in summary.tag_analysis] == ["active"]

    def test_empty_collection(self):
        summary = generate_profile_summary("nobody", [], total_matchups=0)
        assert summary.completion_date == NO_QUIZ_DATA
        assert summary.all_activities == []
        assert summary.tag_analysis == []
        assert len(summary.dimensions) == 6
        assert all(d.preference == "Unknown" for d in summary.dimensions)


# ---------------------------------------------------------------------------
# 4. Report
# ---------------------------------------------------------------------------

class TestRenderReport:

    def test_no_profiles(self):
        assert render_profile_report([]) == "No profiles selected."

    def test_header_and_sections(self):
        acts = [_act(1, 1100), _act(2, 1300)]
        summary = generate_profile_summary("alice", acts, total_matchups=30, today=TODAY)
        report = render_profile_report([summary], today=TODAY)

        assert report.startswith("Profile Analysis Summary - 2026-03-01\n")
        assert "Users: alice" in report
        assert "1. ALICE" in report
        assert "Quiz Completion: 30 matchups" in report
        assert "Mean ELO: 1200" in report
        assert "DIMENSIONAL PREFERENCES:" in report
        assert "Activity 2" in report
        # no tag has three members
        assert "TAG ANALYSIS:" not in report

    def test_profile_without_matchups(self):
        empty = generate_profile_summary("nobody", [], total_matchups=0)
        report = render_profile_report([empty], today=TODAY)
        assert "No quiz data available for this user." in report
        assert "OVERALL STATISTICS:" not in report
