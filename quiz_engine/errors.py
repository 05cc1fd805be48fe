# quiz_engine/errors.py
from __future__ import annotations


class QuizEngineError(Exception):
    """Base class for engine errors."""


class ActivityNotFoundError(QuizEngineError, LookupError):
    """An activity id was not found where the caller promised it would be."""

    def __init__(self, activity_id: int, where: str = "collection") -> None:
        self.activity_id = activity_id
        super().__init__(f"activity id={activity_id} not found in {where}")


class EventAnalysisError(QuizEngineError, ValueError):
    """Classifier payload is structurally unusable (missing title/dimensions/tags)."""
