# quiz_engine/profile/tag_stats.py
"""
Tag statistics over a rated collection.

Activities are grouped by normalized tag (an activity counts toward every
tag it carries). For each group with enough members:

    standard_error = overall_std / sqrt(n)
    z = (group_mean - overall_mean) / standard_error

Groups below the minimum size are excluded, not reported as zero.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Sequence

from quiz_engine.models import Activity
from quiz_engine.stats import mean, population_std, rank_percentile, round_to, standard_error, z_score
from quiz_engine.tags import normalize_tag

MIN_TAG_COUNT = 2
MIN_TAG_COUNT_ANALYSIS = 3


@dataclass(frozen=True)
class TagScore:
    tag: str                # normalized identity
    label: str              # first stored form seen, for display
    activity_count: int
    average_rating: float
    overall_mean: float
    standard_deviation: float
    standard_error: float
    z_score: float


@dataclass(frozen=True)
class TagAnalysis:
    tag: str
    label: str
    activity_count: int
    user_avg_rating: float
    overall_avg_rating: float
    standard_deviation: float  # within the tag group
    z_score: float
    percentile: float
    top_activities: list[str]
    significance: str


def group_by_tag(activities: Sequence[Activity]) -> dict[str, tuple[str, list[Activity]]]:
    """normalized tag -> (display label, activities carrying it)."""
    groups: dict[str, tuple[str, list[Activity]]] = {}
    for act in activities:
        seen: set[str] = set()
        for raw in act.tags:
            key = normalize_tag(raw)
            if not key or key in seen:
                continue
            seen.add(key)
            if key not in groups:
                groups[key] = (raw, [])
            groups[key][1].append(act)
    return groups


def compute_tag_scores(activities: Sequence[Activity], min_count: int = MIN_TAG_COUNT) -> list[TagScore]:
    """Tag scores sorted by z descending (favorites first)."""
    if not activities:
        return []

    ratings = [a.rating for a in activities]
    overall_mean = mean(ratings)
    overall_std = population_std(ratings)

    scores: list[TagScore] = []
    for tag, (label, members) in group_by_tag(activities).items():
        n = len(members)
        if n < min_count:
            continue
        group_mean = mean([a.rating for a in members])
        se = standard_error(overall_std, n)
        scores.append(TagScore(
            tag=tag,
            label=label,
            activity_count=n,
            average_rating=group_mean,
            overall_mean=overall_mean,
            standard_deviation=overall_std,
            standard_error=se,
            z_score=z_score(group_mean, overall_mean, se),
        ))

    return sorted(scores, key=lambda s: s.z_score, reverse=True)


def favorite_tags(scores: Sequence[TagScore], limit: int = 15) -> list[TagScore]:
    ordered = sorted(scores, key=lambda s: s.z_score, reverse=True)
    return ordered[:limit]


def least_favorite_tags(scores: Sequence[TagScore], limit: int = 10) -> list[TagScore]:
    """Negative-z tags only, worst first."""
    ordered = sorted(scores, key=lambda s: s.z_score, reverse=True)
    negative = [s for s in ordered if s.z_score < 0]
    return list(reversed(negative[-limit:])) if limit > 0 else []


def significance_label(z: float) -> str:
    abs_z = abs(z)
    if abs_z > 3:
        return "Highly Significant"
    if abs_z > 2:
        return "Significant"
    if abs_z > 1:
        return "Moderate"
    if abs_z > 0.5:
        return "Weak"
    return "None"


def analyze_tag(tag: str, activities: Sequence[Activity]) -> Optional[TagAnalysis]:
    """Richer per-tag analysis; None below MIN_TAG_COUNT_ANALYSIS members."""
    key = normalize_tag(tag)
    members = [a for a in activities if key in a.tag_set()]
    if len(members) < MIN_TAG_COUNT_ANALYSIS:
        return None

    ratings = [a.rating for a in activities]
    overall_mean = mean(ratings)
    overall_std = population_std(ratings)

    member_ratings = [a.rating for a in members]
    group_mean = mean(member_ratings)
    z = z_score(group_mean, overall_mean, standard_error(overall_std, len(members)))

    top = sorted(members, key=lambda a: a.rating, reverse=True)[:5]

    return TagAnalysis(
        tag=key,
        label=tag,
        activity_count=len(members),
        user_avg_rating=round_to(group_mean, 1),
        overall_avg_rating=round_to(overall_mean, 1),
        standard_deviation=round_to(population_std(member_ratings), 1),
        z_score=round_to(z, 2),
        percentile=round_to(rank_percentile(group_mean, ratings), 3),
        top_activities=[a.title for a in top],
        significance=significance_label(z),
    )


def analyze_tags(activities: Sequence[Activity]) -> list[TagAnalysis]:
    """All tags with >= 3 activities, most significant (|z|) first."""
    results: list[TagAnalysis] = []
    for _key, (label, _members) in sorted(group_by_tag(activities).items()):
        analysis = analyze_tag(label, activities)
        if analysis is not None:
            results.append(analysis)
    return sorted(results, key=lambda t: abs(t.z_score), reverse=True)
