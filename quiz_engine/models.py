from __future__ import annotations

from typing import Any, Iterable, Literal, Mapping, Optional, Sequence

from pydantic import BaseModel, ConfigDict, Field, field_validator

from quiz_engine.constants import DIMENSION_DEFAULT, DIMENSIONS, INITIAL_RATING
from quiz_engine.tags import normalized_tag_set

PreferenceStrength = Literal["strong", "somewhat", "tie"]
ConfidenceLabel = Literal["low", "medium", "high"]

_ACTIVITY_DIMENSION_FIELDS = tuple(d.key for d in DIMENSIONS)


class Activity(BaseModel):
    """
    One ratable catalog item.

    Snapshot keys are camelCase (``elo``, ``eloUpdateCount``, ...) so the
    persisted JSON stays compatible with the storage collaborator.
    """
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: int
    title: str
    subtitle: str = ""

    social_intensity: int = Field(DIMENSION_DEFAULT, alias="socialIntensity")
    structure_spontaneity: int = Field(DIMENSION_DEFAULT, alias="structureSpontaneity")
    familiarity_novelty: int = Field(DIMENSION_DEFAULT, alias="familiarityNovelty")
    formality_gradient: int = Field(DIMENSION_DEFAULT, alias="formalityGradient")
    energy_level: int = Field(DIMENSION_DEFAULT, alias="energyLevel")
    scale_immersion: int = Field(DIMENSION_DEFAULT, alias="scaleImmersion")

    tags: tuple[str, ...] = ()

    rating: float = Field(INITIAL_RATING, alias="elo")
    # advisory: selection priority only, never used by rating math
    rating_update_count: float = Field(0, alias="eloUpdateCount")
    matchups: int = 0
    wins: int = 0
    chosen_count: int = Field(0, alias="chosenCount")

    @field_validator(*_ACTIVITY_DIMENSION_FIELDS, mode="before")
    @classmethod
    def _default_missing_dimension(cls, v: Any) -> Any:
        return DIMENSION_DEFAULT if v is None else v

    @field_validator("matchups", "wins", "chosen_count", "rating_update_count", mode="before")
    @classmethod
    def _default_missing_counter(cls, v: Any) -> Any:
        return 0 if v is None else v

    @field_validator("tags", mode="before")
    @classmethod
    def _default_missing_tags(cls, v: Any) -> Any:
        return () if v is None else v

    def dimension_values(self) -> dict[str, int]:
        return {key: getattr(self, key) for key in _ACTIVITY_DIMENSION_FIELDS}

    def tag_set(self) -> frozenset[str]:
        return normalized_tag_set(self.tags)

    def to_snapshot(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True, mode="json")


def activities_to_snapshot(activities: Iterable[Activity]) -> list[dict[str, Any]]:
    return [a.to_snapshot() for a in activities]


def activities_from_snapshot(rows: Iterable[Mapping[str, Any]] | None) -> list[Activity]:
    return [Activity.model_validate(row) for row in (rows or [])]


def index_by_id(activities: Iterable[Activity]) -> dict[int, Activity]:
    return {a.id: a for a in activities}


class MatchupPrediction(BaseModel):
    """Prediction for one presented pair; finalized once the user answers."""
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    matchup_number: int = Field(alias="matchupNumber")
    predicted_winner_id: int = Field(alias="predictedWinnerId")
    actual_winner_id: Optional[int] = Field(None, alias="actualWinnerId")
    confidence_level: float = Field(alias="confidenceLevel")
    was_correct: Optional[bool] = Field(None, alias="wasCorrect")

    rating_a: float = Field(alias="eloA")
    rating_b: float = Field(alias="eloB")
    rating_range: float = Field(alias="eloRange")
    dimensional_differences: dict[str, float] = Field(
        default_factory=dict, alias="dimensionalDifferences"
    )

    @property
    def is_resolved(self) -> bool:
        return self.was_correct is not None


class AlgorithmStrength(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    score: float = 0.0
    confidence: ConfidenceLabel = "low"
    is_ready: bool = Field(False, alias="isReady")
    threshold: float = 0.0
    prediction_history: tuple[MatchupPrediction, ...] = Field((), alias="predictionHistory")


# ---------------------------------------------------------------------------
# Custom events (produced by the external classifier)
# ---------------------------------------------------------------------------

class EventDimensions(BaseModel):
    """Event-side dimension names: structure/novelty/formality are shortened."""
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    social_intensity: int = Field(DIMENSION_DEFAULT, alias="socialIntensity")
    structure: int = DIMENSION_DEFAULT
    novelty: int = DIMENSION_DEFAULT
    formality: int = DIMENSION_DEFAULT
    energy_level: int = Field(DIMENSION_DEFAULT, alias="energyLevel")
    scale_immersion: int = Field(DIMENSION_DEFAULT, alias="scaleImmersion")

    def as_activity_dimensions(self) -> dict[str, int]:
        """Values keyed by the Activity dimension field they map onto."""
        return {d.key: getattr(self, d.event_key) for d in DIMENSIONS}


class EventTag(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    importance: int = 3


class SimilarActivity(BaseModel):
    model_config = ConfigDict(frozen=True)

    title: str
    similarity: float
    explanation: str = ""


class CustomEventAnalysis(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    title: str
    subtitle: str = ""
    dimensions: EventDimensions = Field(default_factory=EventDimensions)
    tags: tuple[EventTag, ...] = ()
    similar_activities: tuple[SimilarActivity, ...] = Field((), alias="similarActivities")


def event_tag_names(tags: Sequence[EventTag | str] | None) -> list[str]:
    """Tag names from either EventTag objects or plain strings."""
    return [t.name if isinstance(t, EventTag) else str(t) for t in (tags or ())]
