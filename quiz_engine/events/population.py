# quiz_engine/events/population.py
"""
Predict a custom event for every qualified user.

The classifier is called once, against a reference catalog (all users
share the same base catalog), then the hybrid predictor runs per user.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Sequence

from quiz_engine.models import Activity, CustomEventAnalysis
from quiz_engine.events.predict import HybridBreakdown, PredictionInsights, predict_hybrid
from quiz_engine.events.validation import EventClassifier, parse_event_analysis

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class QualifiedUser:
    username: str
    activities: list[Activity]
    total_matchups: int


@dataclass(frozen=True)
class PopulationPrediction:
    username: str
    score: float
    explanation: str
    insights: PredictionInsights
    breakdown: HybridBreakdown


@dataclass(frozen=True)
class PopulationAnalysis:
    analysis: CustomEventAnalysis
    predictions: list[PopulationPrediction] = field(default_factory=list)


def reference_catalog(users: Sequence[QualifiedUser]) -> list[Activity]:
    return list(users[0].activities) if users else []


def predict_for_population(
    analysis: CustomEventAnalysis,
    users: Sequence[QualifiedUser],
) -> list[PopulationPrediction]:
    """Highest score first; ties keep the input user order."""
    predictions: list[PopulationPrediction] = []
    for user in users:
        result = predict_hybrid(analysis.similar_activities, analysis.tags, user.activities)
        predictions.append(PopulationPrediction(
            username=user.username,
            score=result.score,
            explanation=result.explanation,
            insights=result.insights,
            breakdown=result.breakdown,
        ))

    logger.info("[events] predicted %r for %d users", analysis.title, len(predictions))
    return sorted(predictions, key=lambda p: p.score, reverse=True)


def analyze_event_for_population(
    description: str,
    users: Sequence[QualifiedUser],
    classifier: EventClassifier,
) -> PopulationAnalysis:
    """Raises EventAnalysisError when the classifier payload is unusable."""
    reference = reference_catalog(users)
    logger.info(
        "[events] classifying event | users=%d reference_activities=%d",
        len(users), len(reference),
    )
    payload = classifier(description, reference)
    analysis = parse_event_analysis(payload)
    return PopulationAnalysis(analysis=analysis, predictions=predict_for_population(analysis, users))
