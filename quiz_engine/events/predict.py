# quiz_engine/events/predict.py
"""
Enjoyment prediction for a custom (not-in-catalog) event, per user.

Three strategies, all returning a score on the 0.5–10 scale:

  geometry             top-20 most similar catalog activities (own
                       similarity, weight = similarity³)
  external similarity  activities named by the classifier (matched by
                       exact title, weight = classifier similarity)
  hybrid               external-similarity score, adjusted by the user's
                       tag z-scores (tanh-bounded, damped near the extremes)

Every strategy keeps its intermediate numbers in the returned breakdown
(``calculation_steps`` plus structured fields). Degenerate input (empty
collection, nothing to compare against) yields 5.0 and a message.
"""
from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from typing import Sequence

from quiz_engine.constants import DIMENSIONS, INITIAL_RATING
from quiz_engine.models import Activity, EventDimensions, EventTag, SimilarActivity
from quiz_engine.rating.elo import round_half_up
from quiz_engine.stats import mean, population_std, rank_percentile, round_to, standard_error, z_score
from quiz_engine.tags import DEFAULT_TAG_IMPORTANCE, normalize_tag
from quiz_engine.events.similarity import (
    DIMENSION_WEIGHT,
    TAG_WEIGHT,
    combined_similarity,
    dimensional_similarity,
    tag_similarity,
)

logger = logging.getLogger(__name__)

NEUTRAL_SCORE = 5.0
MIN_SCORE = 0.5
MAX_SCORE = 10.0
SCORE_MIDPOINT = 5.5
SCORE_HALF_SPAN = 4.5
GEOMETRY_TOP_N = 20
SIMILARITY_EXPONENT = 3
MAX_TAG_ADJUSTMENT = 3.0
MIN_EXTREMENESS_FACTOR = 0.6
MIN_TAG_ACTIVITIES = 2
MIN_TAG_ACTIVITIES_FOR_INSIGHT = 3


# ---------------------------------------------------------------------------
# Result types
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class SimilarityCalculation:
    title: str
    dimensional_similarity: float
    tag_similarity: float
    combined_similarity: float
    rating: float
    weight: float
    weighted_rating: float


@dataclass(frozen=True)
class TagContribution:
    tag: str
    matching_activities: list[str]
    contribution_to_similarity: float


@dataclass(frozen=True)
class DimensionContribution:
    dimension: str
    event_value: float
    avg_similar_value: float
    difference: float


@dataclass(frozen=True)
class GeometryBreakdown:
    dimension_weight: float = DIMENSION_WEIGHT
    tag_weight: float = TAG_WEIGHT
    total_activities_analyzed: int = 0
    top_similar_activities_count: int = 0
    weighted_rating_sum: float = 0.0
    total_weight: float = 0.0
    estimated_rating: float = float(INITIAL_RATING)
    rank: int = 0
    total_ranked: int = 0
    percentile: float = 0.5
    similarity_calculations: list[SimilarityCalculation] = field(default_factory=list)
    tag_contributions: list[TagContribution] = field(default_factory=list)
    dimension_contributions: list[DimensionContribution] = field(default_factory=list)
    calculation_steps: list[str] = field(default_factory=list)


@dataclass(frozen=True)
class ScoredActivity:
    title: str
    rating: float
    similarity: float
    explanation: str = ""


@dataclass(frozen=True)
class GeometryPrediction:
    score: float
    explanation: str
    top_similar_activities: list[ScoredActivity]
    breakdown: GeometryBreakdown


@dataclass(frozen=True)
class MatchedActivity:
    title: str
    similarity: float
    rating: float
    weight: float
    weighted_rating: float
    explanation: str


@dataclass(frozen=True)
class ExternalSimilarityPrediction:
    score: float
    explanation: str
    top_similar_activities: list[MatchedActivity]
    calculation_steps: list[str] = field(default_factory=list)
    similar_activities_used: list[MatchedActivity] = field(default_factory=list)


@dataclass(frozen=True)
class HybridTagAnalysis:
    tag: str
    importance: int
    user_avg_rating: float
    overall_avg_rating: float
    standard_deviation: float
    standard_error: float
    z_score: float
    activity_count: int
    importance_weight: float
    adjustment: float
    top_activities: list[str] = field(default_factory=list)


@dataclass(frozen=True)
class PredictionInsights:
    liked_similar_activities: list[str] = field(default_factory=list)
    enjoyed_tags: list[str] = field(default_factory=list)
    disliked_tags: list[str] = field(default_factory=list)
    personality_insights: list[str] = field(default_factory=list)


@dataclass(frozen=True)
class HybridBreakdown:
    calculation_steps: list[str]
    base_score: float = NEUTRAL_SCORE
    tag_analysis: list[HybridTagAnalysis] = field(default_factory=list)
    weighted_z_score: float = 0.0
    raw_adjustment: float = 0.0
    extremeness_factor: float = 1.0
    final_adjustment: float = 0.0
    similar_activities_used: list[MatchedActivity] = field(default_factory=list)


@dataclass(frozen=True)
class HybridPrediction:
    score: float
    explanation: str
    insights: PredictionInsights
    breakdown: HybridBreakdown


# ---------------------------------------------------------------------------
# Shared helpers
# ---------------------------------------------------------------------------

def _tag_objects(tags: Sequence[EventTag | str] | None) -> list[EventTag]:
    """Plain strings get the default importance."""
    out: list[EventTag] = []
    for t in tags or ():
        out.append(t if isinstance(t, EventTag) else EventTag(name=str(t), importance=DEFAULT_TAG_IMPORTANCE))
    return out


def _rank(estimate: float, ratings: Sequence[float]) -> int:
    ordered = sorted(ratings, reverse=True)
    for i, r in enumerate(ordered):
        if estimate > r:
            return i
    return len(ordered)


def score_from_percentile(percentile: float) -> float:
    return MIN_SCORE + percentile * 9


def _fmt_rating(rating: float) -> str:
    return f"{rating:g}"


def _match_titles(
    similar: Sequence[SimilarActivity],
    activities: Sequence[Activity],
) -> list[MatchedActivity]:
    """Exact title match; unmatched titles are dropped."""
    by_title: dict[str, Activity] = {}
    for act in activities:
        by_title.setdefault(act.title, act)

    matched: list[MatchedActivity] = []
    for s in similar:
        act = by_title.get(s.title)
        if act is None:
            logger.debug("[events] similar title not in collection: %r", s.title)
            continue
        matched.append(MatchedActivity(
            title=act.title,
            similarity=s.similarity,
            rating=act.rating,
            weight=s.similarity,
            weighted_rating=act.rating * s.similarity,
            explanation=s.explanation,
        ))
    return matched


def _weighted_estimate(matched: Sequence[MatchedActivity]) -> tuple[float, float, float]:
    """(weighted_sum, total_weight, estimate); estimate defaults to the initial rating."""
    weighted_sum = sum(m.weighted_rating for m in matched)
    total_weight = sum(m.weight for m in matched)
    estimate = weighted_sum / total_weight if total_weight > 0 else float(INITIAL_RATING)
    return weighted_sum, total_weight, estimate


def _percentile_explanation(percentile: float) -> str:
    if percentile >= 0.8:
        return f"Would likely be in your top {round_half_up((1 - percentile) * 100)}% of activities"
    if percentile >= 0.6:
        return "Would rank in your upper-middle preferences"
    if percentile >= 0.4:
        return "Would be somewhere in the middle of your preferences"
    if percentile >= 0.2:
        return "Would rank in your lower-middle preferences"
    return f"Would likely be in your bottom {round_half_up(percentile * 100 + 20)}% of activities"


# ---------------------------------------------------------------------------
# (a) Geometry
# ---------------------------------------------------------------------------

def predict_by_geometry(
    event: EventDimensions,
    event_tags: Sequence[EventTag | str] | None,
    activities: Sequence[Activity],
) -> GeometryPrediction:
    if not activities:
        return GeometryPrediction(
            score=NEUTRAL_SCORE,
            explanation="No profile data available for prediction",
            top_similar_activities=[],
            breakdown=GeometryBreakdown(),
        )

    tag_names = [t.name for t in _tag_objects(event_tags)]
    event_values = event.as_activity_dimensions()

    scored: list[tuple[Activity, float, float, float]] = []
    for act in activities:
        dim_sim = dimensional_similarity(event_values, act)
        tag_sim = tag_similarity(tag_names, act.tags)
        scored.append((act, dim_sim, tag_sim, combined_similarity(dim_sim, tag_sim)))
    # sorted() is stable: equal similarities keep collection order
    top = sorted(scored, key=lambda row: row[3], reverse=True)[:GEOMETRY_TOP_N]

    steps: list[str] = [
        f"STEP 1: Calculate similarity for top {len(top)} activities",
        "Formula: Similarity = (Dimensional × 30%) + (Tag × 70%)",
    ]
    calcs: list[SimilarityCalculation] = []
    weighted_sum = 0.0
    total_weight = 0.0
    for i, (act, dim_sim, tag_sim, sim) in enumerate(top):
        weight = sim ** SIMILARITY_EXPONENT
        weighted = act.rating * weight
        weighted_sum += weighted
        total_weight += weight
        calcs.append(SimilarityCalculation(
            title=act.title,
            dimensional_similarity=round_to(dim_sim, 3),
            tag_similarity=round_to(tag_sim, 3),
            combined_similarity=round_to(sim, 3),
            rating=act.rating,
            weight=round_to(weight, 3),
            weighted_rating=round_to(weighted, 1),
        ))
        if i < 5:
            steps.append(
                f"  {act.title}: dim={dim_sim:.3f} (30%) + tag={tag_sim:.3f} (70%) = {sim:.3f}"
            )
            steps.append(
                f"    Weight = {sim:.3f}³ = {weight:.3f}, ELO={_fmt_rating(act.rating)} → Weighted={weighted:.1f}"
            )

    estimate = weighted_sum / total_weight if total_weight > 0 else float(INITIAL_RATING)
    ratings = [a.rating for a in activities]
    rank = _rank(estimate, ratings)
    percentile = rank_percentile(estimate, ratings)
    score = score_from_percentile(percentile)

    steps += [
        "STEP 2: Calculate weighted average ELO",
        f"Sum of weighted ELOs: {weighted_sum:.1f}",
        f"Sum of weights: {total_weight:.3f}",
        f"Estimated ELO = {estimate:.1f}",
        f"STEP 3: Determine ranking among user's {len(ratings)} activities",
        f"Estimated ELO {estimate:.1f} ranks #{rank + 1} ({percentile * 100:.1f}th percentile)",
        "STEP 4: Convert to 0-10 scale",
        f"Score = 0.5 + ({percentile:.3f} × 9) = {score:.1f}/10",
    ]

    top_acts = [row[0] for row in top]
    explanation = (
        f"{_percentile_explanation(percentile)} "
        f"(estimated ELO: {round_half_up(estimate)}, similar to {top_acts[0].title})"
    )

    breakdown = GeometryBreakdown(
        total_activities_analyzed=len(activities),
        top_similar_activities_count=len(top),
        weighted_rating_sum=round_to(weighted_sum, 1),
        total_weight=round_to(total_weight, 3),
        estimated_rating=round_to(estimate, 1),
        rank=rank,
        total_ranked=len(ratings),
        percentile=round_to(percentile, 3),
        similarity_calculations=calcs,
        tag_contributions=_tag_contributions(tag_names, top_acts),
        dimension_contributions=_dimension_contributions(event, top_acts),
        calculation_steps=steps,
    )

    logger.debug("[events] geometry | estimate=%.1f rank=%d score=%.2f", estimate, rank, score)

    return GeometryPrediction(
        score=round_to(score, 1),
        explanation=explanation,
        top_similar_activities=[
            ScoredActivity(title=act.title, rating=act.rating, similarity=round_to(sim, 2))
            for act, _d, _t, sim in top[:3]
        ],
        breakdown=breakdown,
    )


def _tag_contributions(tag_names: Sequence[str], top: Sequence[Activity]) -> list[TagContribution]:
    out: list[TagContribution] = []
    for tag in tag_names:
        key = normalize_tag(tag)
        matching = [a for a in top if key in a.tag_set()]
        contributions = [tag_similarity(tag_names, a.tags) * TAG_WEIGHT for a in matching]
        out.append(TagContribution(
            tag=tag,
            matching_activities=[a.title for a in matching],
            contribution_to_similarity=sum(contributions) / len(contributions) if contributions else 0.0,
        ))
    return out


def _dimension_contributions(event: EventDimensions, top: Sequence[Activity]) -> list[DimensionContribution]:
    out: list[DimensionContribution] = []
    for d in DIMENSIONS:
        event_value = getattr(event, d.event_key)
        values = [getattr(a, d.key) for a in top]
        avg = mean(values) if values else float(event_value)
        out.append(DimensionContribution(
            dimension=d.event_key.replace("_", " ").title(),
            event_value=event_value,
            avg_similar_value=round_to(avg, 1),
            difference=round_to(abs(event_value - avg), 1),
        ))
    return out


# ---------------------------------------------------------------------------
# (b) External similarity
# ---------------------------------------------------------------------------

def predict_by_external_similarity(
    similar_activities: Sequence[SimilarActivity],
    activities: Sequence[Activity],
) -> ExternalSimilarityPrediction:
    if not activities:
        return ExternalSimilarityPrediction(NEUTRAL_SCORE, "No profile data available for prediction", [])
    if not similar_activities:
        return ExternalSimilarityPrediction(NEUTRAL_SCORE, "Could not find similar activities", [])

    matched = _match_titles(similar_activities, activities)
    if not matched:
        return ExternalSimilarityPrediction(NEUTRAL_SCORE, "No matching activities found in user profile", [])

    steps = [
        "SEMANTIC APPROACH: Using the classifier's similarity analysis",
        f"Found {len(matched)} similar activities from the classifier's analysis",
        "Formula: Direct similarity weighting (no exponential cubing)",
    ]
    for m in matched:
        steps.append(f"  {m.title}: similarity={m.similarity:.3f} × ELO={_fmt_rating(m.rating)} = {m.weighted_rating:.1f}")
        steps.append(f'    Classifier reasoning: "{m.explanation}"')

    weighted_sum, total_weight, estimate = _weighted_estimate(matched)
    ratings = [a.rating for a in activities]
    rank = _rank(estimate, ratings)
    percentile = rank_percentile(estimate, ratings)
    score = score_from_percentile(percentile)

    steps += [
        f"Total weighted ELO: {weighted_sum:.1f}",
        f"Total weight: {total_weight:.3f}",
        f"Estimated ELO = {weighted_sum:.1f} ÷ {total_weight:.3f} = {estimate:.1f}",
        f"Ranking: ELO {estimate:.1f} ranks #{rank + 1} out of {len(ratings)} ({percentile * 100:.1f}th percentile)",
        f"Final Score: 0.5 + ({percentile:.3f} × 9) = {score:.1f}/10",
    ]

    used = [
        MatchedActivity(
            title=m.title,
            similarity=round_to(m.similarity, 3),
            rating=m.rating,
            weight=round_to(m.weight, 3),
            weighted_rating=round_to(m.weighted_rating, 1),
            explanation=m.explanation,
        )
        for m in matched
    ]

    return ExternalSimilarityPrediction(
        score=round_to(score, 1),
        explanation=(
            f"Semantic prediction: Would rank {round_half_up(percentile * 100)}th percentile "
            f"(estimated ELO: {round_half_up(estimate)})"
        ),
        top_similar_activities=matched[:5],
        calculation_steps=steps,
        similar_activities_used=used,
    )


# ---------------------------------------------------------------------------
# (c) Hybrid
# ---------------------------------------------------------------------------

def extremeness_factor(base_score: float) -> float:
    """1.0 at the midpoint, down to 0.6 at the ends of the scale."""
    distance = abs(base_score - SCORE_MIDPOINT)
    return max(MIN_EXTREMENESS_FACTOR, 1 - (distance / SCORE_HALF_SPAN) * 0.4)


def raw_tag_adjustment(weighted_z: float) -> float:
    return math.tanh(weighted_z / 3.0) * MAX_TAG_ADJUSTMENT


def _insufficient(explanation: str, step: str) -> HybridPrediction:
    return HybridPrediction(
        score=NEUTRAL_SCORE,
        explanation=explanation,
        insights=PredictionInsights(),
        breakdown=HybridBreakdown(calculation_steps=[step]),
    )


def _significance_line(weighted_z: float) -> str:
    abs_z = abs(weighted_z)
    if abs_z > 3:
        return "→ Highly significant preference pattern (99.7% confidence)"
    if abs_z > 2:
        return "→ Statistically significant preference pattern (95% confidence)"
    if abs_z > 1:
        return "→ Moderate preference pattern detected"
    return "→ Weak or no clear preference pattern"


def predict_hybrid(
    similar_activities: Sequence[SimilarActivity],
    event_tags: Sequence[EventTag | str] | None,
    activities: Sequence[Activity],
) -> HybridPrediction:
    if not similar_activities or not activities:
        return _insufficient(
            "Insufficient data for hybrid prediction",
            "No similar activities or user data available",
        )

    matched = _match_titles(similar_activities, activities)
    if not matched:
        return _insufficient(
            "No matching activities found in user profile",
            "No similar activities from the classifier matched the user profile",
        )

    steps: list[str] = [
        "HYBRID APPROACH: Semantic similarity + Tag-based ELO statistics",
        "STEP 1: Calculate base score from similar activities",
    ]

    # --- step 1: base score from the classifier's similar activities ---
    for m in matched:
        steps.append(f"  {m.title}: similarity={m.similarity:.3f} × ELO={_fmt_rating(m.rating)} = {m.weighted_rating:.1f}")
    weighted_sum, total_weight, estimate = _weighted_estimate(matched)
    steps.append(f"Weighted ELO: {weighted_sum:.1f} ÷ {total_weight:.3f} = {estimate:.1f}")

    ratings = [a.rating for a in activities]
    rank = _rank(estimate, ratings)
    percentile = rank_percentile(estimate, ratings)
    base_score = score_from_percentile(percentile)
    steps.append(f"Base score: Rank {rank + 1}/{len(ratings)} ({percentile * 100:.1f}%) = {base_score:.1f}/10")

    # --- step 2: tag statistics weighted by importance ---
    steps.append("STEP 2: Analyze tag-based ELO patterns with importance weighting")
    overall_mean = mean(ratings)
    steps.append(f"Overall ELO: avg={overall_mean:.1f}, std={population_std(ratings):.1f}")

    tag_rows: list[HybridTagAnalysis] = []
    weighted_z_sum = 0.0
    importance_total = 0.0
    for tag in _tag_objects(event_tags):
        key = normalize_tag(tag.name)
        members = [a for a in activities if key in a.tag_set()]
        if len(members) < MIN_TAG_ACTIVITIES:
            steps.append(
                f'Tag "{tag.name}" (importance={tag.importance}): Only {len(members)} activities '
                f"(insufficient for statistics)"
            )
            continue

        member_ratings = [a.rating for a in members]
        tag_mean = mean(member_ratings)
        tag_std = population_std(member_ratings)
        se = standard_error(tag_std, len(members))
        z = z_score(tag_mean, overall_mean, se)
        weight = tag.importance / 5
        weighted_z_sum += z * weight
        importance_total += weight

        tag_rows.append(HybridTagAnalysis(
            tag=tag.name,
            importance=tag.importance,
            user_avg_rating=round_to(tag_mean, 1),
            overall_avg_rating=round_to(overall_mean, 1),
            standard_deviation=round_to(tag_std, 1),
            standard_error=round_to(se, 2),
            z_score=round_to(z, 2),
            activity_count=len(members),
            importance_weight=round_to(weight, 2),
            adjustment=round_to(z * weight, 2),
            top_activities=[a.title for a in sorted(members, key=lambda a: a.rating, reverse=True)[:3]],
        ))
        steps.append(
            f'Tag "{tag.name}" (importance={tag.importance}): {len(members)} activities, '
            f"avg={tag_mean:.1f}, SE={se:.2f}, z={z:.2f}"
        )

    weighted_z = weighted_z_sum / importance_total if importance_total > 0 else 0.0
    steps.append(f"Overall weighted z-score: {weighted_z:.3f}")

    # --- step 3: bounded, damped adjustment ---
    steps.append("STEP 3: Apply tag-based adjustment using statistical significance")
    raw_adj = raw_tag_adjustment(weighted_z)
    factor = extremeness_factor(base_score)
    final_adj = raw_adj * factor
    final_score = max(MIN_SCORE, min(MAX_SCORE, base_score + final_adj))

    steps += [
        f"Base score: {base_score:.1f}",
        f"Weighted z-score: {weighted_z:.3f} (using standard errors for statistical significance)",
        f"Raw adjustment: tanh({weighted_z:.3f} ÷ 3) × {MAX_TAG_ADJUSTMENT} = {raw_adj:.2f}",
        f"Extremeness factor: {factor:.2f} (prevents impossible scores)",
        f"Final adjustment: {raw_adj:.2f} × {factor:.2f} = {final_adj:.2f}",
        f"Final hybrid score: {base_score:.1f} + {final_adj:.2f} = {final_score:.1f}/10",
        _significance_line(weighted_z),
    ]

    explanation = f"Hybrid prediction: {final_score:.1f}/10"
    if abs(final_adj) > 0.1:
        sign = "+" if final_adj > 0 else ""
        explanation += f" (semantic base: {base_score:.1f}, tag adjustment: {sign}{final_adj:.1f})"

    logger.debug(
        "[events] hybrid | base=%.2f z=%.3f adj=%.3f final=%.2f",
        base_score, weighted_z, final_adj, final_score,
    )

    return HybridPrediction(
        score=round_to(final_score, 1),
        explanation=explanation,
        insights=_hybrid_insights(final_score, matched, tag_rows, overall_mean),
        breakdown=HybridBreakdown(
            calculation_steps=steps,
            base_score=round_to(base_score, 1),
            tag_analysis=tag_rows,
            weighted_z_score=weighted_z,
            raw_adjustment=raw_adj,
            extremeness_factor=factor,
            final_adjustment=round_to(final_adj, 2),
            similar_activities_used=list(matched),
        ),
    )


def _hybrid_insights(
    final_score: float,
    matched: Sequence[MatchedActivity],
    tag_rows: Sequence[HybridTagAnalysis],
    overall_mean: float,
) -> PredictionInsights:
    liked = [m.title for m in matched if m.rating > overall_mean][:3]
    enjoyed = [
        t.tag for t in tag_rows
        if t.z_score > 0.5 and t.activity_count >= MIN_TAG_ACTIVITIES_FOR_INSIGHT
    ][:3]
    disliked = [
        t.tag for t in tag_rows
        if t.z_score < -0.5 and t.activity_count >= MIN_TAG_ACTIVITIES_FOR_INSIGHT
    ][:3]

    sentences: list[str] = []
    if final_score >= 8:
        sentences.append("This person would likely love this type of event")
    elif final_score >= 6.5:
        sentences.append("This person would probably enjoy this event")
    elif final_score >= 4:
        sentences.append("This person might be neutral about this event")
    else:
        sentences.append("This person would likely prefer other activities")

    if liked:
        sentences.append(f"They enjoyed similar activities like {', '.join(liked)}")
    if enjoyed:
        sentences.append(f"They tend to enjoy {', '.join(enjoyed)} activities")

    for t in tag_rows[:2]:
        if t.adjustment > 0.3:
            sentences.append(f"Strong preference for {t.tag} activities ({t.activity_count} examples)")
        elif t.adjustment < -0.3:
            sentences.append(f"Generally avoids {t.tag} activities ({t.activity_count} examples)")

    return PredictionInsights(
        liked_similar_activities=liked,
        enjoyed_tags=enjoyed,
        disliked_tags=disliked,
        personality_insights=sentences,
    )
