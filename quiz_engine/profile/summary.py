# quiz_engine/profile/summary.py
"""
Full profile summary for one user and the plain-text multi-profile report.

Pure: takes a rated collection, returns derived values. ``today`` is
injectable so reports are reproducible in tests.
"""
from __future__ import annotations

import math
from dataclasses import dataclass, field
from datetime import date
from typing import Optional, Sequence

from quiz_engine.constants import DIMENSIONS
from quiz_engine.models import Activity
from quiz_engine.profile.tag_stats import TagAnalysis, analyze_tags
from quiz_engine.stats import mean, population_std, round_to

NO_QUIZ_DATA = "No quiz data"
NEUTRAL_DIMENSION_SCORE = 5.5
# ratings are weighted by their distance from this baseline
DIMENSION_WEIGHT_BASELINE = 1000

# event_key -> ((high label, explanation), (mid ...), (low ...))
_PREFERENCE_BANDS: dict[str, tuple[tuple[str, str], tuple[str, str], tuple[str, str]]] = {
    "social_intensity": (
        ("Large Groups", "Prefers big social gatherings and events with many people"),
        ("Moderate Groups", "Comfortable with medium-sized social settings"),
        ("Intimate Settings", "Prefers small, close-knit gatherings and one-on-one activities"),
    ),
    "structure": (
        ("Highly Organized", "Likes well-planned, structured activities with clear agendas"),
        ("Semi-Structured", "Enjoys a mix of planned and spontaneous elements"),
        ("Spontaneous", "Prefers unplanned, go-with-the-flow activities"),
    ),
    "novelty": (
        ("Adventure Seeker", "Loves new experiences and trying unfamiliar activities"),
        ("Balanced Explorer", "Enjoys mix of familiar favorites and new experiences"),
        ("Comfort Zone", "Prefers familiar, tried-and-true activities"),
    ),
    "formality": (
        ("Formal/Elegant", "Enjoys sophisticated, upscale, and polished experiences"),
        ("Smart Casual", "Comfortable with moderately formal settings"),
        ("Casual/Relaxed", "Prefers laid-back, informal atmospheres"),
    ),
    "energy_level": (
        ("High Energy", "Loves active, dynamic, physically or mentally stimulating activities"),
        ("Moderate Energy", "Enjoys a balance of active and relaxed activities"),
        ("Low Key", "Prefers calm, peaceful, and restorative activities"),
    ),
    "scale_immersion": (
        ("Long-term Commitment", "Enjoys immersive experiences and longer-duration activities"),
        ("Moderate Duration", "Comfortable with medium-length activities and commitments"),
        ("Brief & Flexible", "Prefers short, low-commitment activities"),
    ),
}


@dataclass(frozen=True)
class OverallStats:
    mean_rating: float = 0.0
    median_rating: float = 0.0
    standard_deviation: float = 0.0
    min_rating: float = 0.0
    max_rating: float = 0.0
    q1: float = 0.0
    q3: float = 0.0


@dataclass(frozen=True)
class RankedActivity:
    rank: int
    title: str
    rating: float
    percentile: float


@dataclass(frozen=True)
class DimensionPreference:
    key: str            # event-side dimension name
    name: str           # display name
    preference: str
    score: float
    explanation: str


@dataclass(frozen=True)
class ProfileSummary:
    username: str
    total_matchups: int
    completion_date: str
    overall_stats: OverallStats
    all_activities: list[RankedActivity] = field(default_factory=list)
    tag_analysis: list[TagAnalysis] = field(default_factory=list)
    dimensions: list[DimensionPreference] = field(default_factory=list)


def _display_name(event_key: str) -> str:
    return event_key.replace("_", " ").title()


def _band(score: float) -> int:
    if score >= 7:
        return 0
    if score >= 4:
        return 1
    return 2


def analyze_dimensions(activities: Sequence[Activity]) -> list[DimensionPreference]:
    """Rating-weighted mean of each dimension (weight = rating − 1000)."""
    out: list[DimensionPreference] = []
    for d in DIMENSIONS:
        weighted_sum = 0.0
        weight_sum = 0.0
        for act in activities:
            weight = act.rating - DIMENSION_WEIGHT_BASELINE
            weighted_sum += getattr(act, d.key) * weight
            weight_sum += weight
        avg = weighted_sum / weight_sum if weight_sum > 0 else NEUTRAL_DIMENSION_SCORE
        score = round_to(avg, 1)
        preference, explanation = _PREFERENCE_BANDS[d.event_key][_band(score)]
        out.append(DimensionPreference(d.event_key, _display_name(d.event_key), preference, score, explanation))
    return out


def _empty_summary(username: str) -> ProfileSummary:
    return ProfileSummary(
        username=username,
        total_matchups=0,
        completion_date=NO_QUIZ_DATA,
        overall_stats=OverallStats(),
        dimensions=[
            DimensionPreference(d.event_key, _display_name(d.event_key), "Unknown", 0.0, "No data")
            for d in DIMENSIONS
        ],
    )


def overall_stats(ratings: Sequence[float]) -> OverallStats:
    if not ratings:
        return OverallStats()
    ordered = sorted(ratings)
    n = len(ordered)
    if n % 2 == 0:
        median = (ordered[n // 2 - 1] + ordered[n // 2]) / 2
    else:
        median = ordered[n // 2]
    return OverallStats(
        mean_rating=round_to(mean(ratings), 1),
        median_rating=round_to(median, 1),
        standard_deviation=round_to(population_std(ratings), 1),
        min_rating=min(ratings),
        max_rating=max(ratings),
        q1=round_to(ordered[math.floor(n * 0.25)], 1),
        q3=round_to(ordered[math.floor(n * 0.75)], 1),
    )


def generate_profile_summary(
    username: str,
    activities: Sequence[Activity],
    total_matchups: int,
    today: Optional[date] = None,
) -> ProfileSummary:
    if not activities:
        return _empty_summary(username)

    n = len(activities)
    ranked = sorted(activities, key=lambda a: a.rating, reverse=True)

    return ProfileSummary(
        username=username,
        total_matchups=total_matchups,
        completion_date=(today or date.today()).isoformat(),
        overall_stats=overall_stats([a.rating for a in activities]),
        all_activities=[
            RankedActivity(rank=i + 1, title=a.title, rating=a.rating, percentile=1 - i / n)
            for i, a in enumerate(ranked)
        ],
        tag_analysis=analyze_tags(activities),
        dimensions=analyze_dimensions(activities),
    )


def _fmt(x: float) -> str:
    """Print whole numbers without a trailing .0."""
    return str(int(x)) if float(x).is_integer() else str(x)


def render_profile_report(profiles: Sequence[ProfileSummary], today: Optional[date] = None) -> str:
    if not profiles:
        return "No profiles selected."

    lines: list[str] = [
        f"Profile Analysis Summary - {(today or date.today()).isoformat()}",
        "=" * 52,
        "",
        f"Selected Profiles: {len(profiles)}",
        f"Users: {', '.join(p.username for p in profiles)}",
        "",
    ]

    for index, p in enumerate(profiles, start=1):
        lines += [
            f"{index}. {p.username.upper()}",
            "=" * (len(p.username) + 3),
            "",
            f"Quiz Completion: {p.total_matchups} matchups",
            f"Completion Date: {p.completion_date}",
            "",
        ]

        if p.total_matchups == 0:
            lines += ["No quiz data available for this user.", ""]
            continue

        s = p.overall_stats
        lines += [
            "OVERALL STATISTICS:",
            "-" * 20,
            f"Mean ELO: {_fmt(s.mean_rating)}",
            f"Median ELO: {_fmt(s.median_rating)}",
            f"Standard Deviation: {_fmt(s.standard_deviation)}",
            f"Range: {_fmt(s.min_rating)} - {_fmt(s.max_rating)}",
            f"Quartiles: Q1={_fmt(s.q1)}, Q3={_fmt(s.q3)}",
            "",
            "DIMENSIONAL PREFERENCES:",
            "-" * 25,
        ]
        lines += [f"{d.name}: {d.preference} ({_fmt(d.score)}/10)" for d in p.dimensions]
        lines += ["", "ALL ACTIVITIES (by percentile):", "-" * 32]
        lines += [
            f"{a.rank:>3}. {a.title:<50} {a.percentile * 100:>5.1f}%"
            for a in p.all_activities
        ]
        lines.append("")

        if p.tag_analysis:
            lines += [
                "TAG ANALYSIS:",
                "-" * 13,
                "Tag Name                          Count   Z-Score   Percentile",
                "-" * 65,
            ]
            lines += [
                f"{t.label:<32} {t.activity_count:>5} {_fmt(t.z_score):>7} {t.percentile * 100:>9.1f}%"
                for t in p.tag_analysis
            ]
            lines.append("")

        lines += ["=" * 80, ""]

    return "\n".join(lines) + "\n"
