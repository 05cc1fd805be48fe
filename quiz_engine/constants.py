# quiz_engine/constants.py
"""
Tunable constants for the rating and prediction engine.

These values were calibrated against real quiz sessions. Changing them
changes observable quiz length and scoring behavior, so they are plain
module constants (not environment-tunable).
"""
from __future__ import annotations

from dataclasses import dataclass


# ---------------------------------------------------------------------------
# Adaptive quiz
# ---------------------------------------------------------------------------

MIN_MATCHUPS_FOR_ALGORITHM = 6
ALGORITHM_HISTORY_SIZE = 10
TARGET_ALGORITHM_STRENGTH = 0.85
FLOOR_ALGORITHM_STRENGTH = 0.75
THRESHOLD_DECAY_START = 30
THRESHOLD_DECAY_SPAN = 40          # 0.85 at matchup 30 → 0.75 at matchup 70
MIN_RESOLVED_PREDICTIONS_FOR_READY = 20
MIN_WINDOW_FILL_RATIO = 0.7
MEANINGFUL_DIMENSION_DIFFERENCE = 2
ABSOLUTE_MAX_MATCHUPS = 120

# ---------------------------------------------------------------------------
# Rating engine
# ---------------------------------------------------------------------------

INITIAL_RATING = 1200

K_FACTOR_STRONG = 48
K_FACTOR_SOMEWHAT = 24
K_FACTOR_TIE = 16

K_FACTOR_DIM_SIM_PROPAGATION = 12
K_FACTOR_TAG_PROPAGATION = 8
TAG_PROPAGATION_DAMPING = 0.10
SIMILARITY_THRESHOLD_FOR_DIM_PROPAGATION = 0.65
MIN_PROPAGATION_CHANGE = 0.01
PROPAGATION_UPDATE_INCREMENT = 0.25

# ---------------------------------------------------------------------------
# Matchup selection
# ---------------------------------------------------------------------------

RECENT_HISTORY_SIZE = 20
SELECTION_SUB_POOL_SIZE = 15


# ---------------------------------------------------------------------------
# Dimensions
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class DimensionMeta:
    key: str            # Activity field name
    alias: str          # camelCase snapshot key
    event_key: str      # EventDimensions field name
    label: str
    low: str
    high: str


DIMENSIONS: tuple[DimensionMeta, ...] = (
    DimensionMeta("social_intensity", "socialIntensity", "social_intensity",
                  "Social Intensity", "Low Key", "High Buzz"),
    DimensionMeta("structure_spontaneity", "structureSpontaneity", "structure",
                  "Structure", "Structured", "Spontaneous"),
    DimensionMeta("familiarity_novelty", "familiarityNovelty", "novelty",
                  "Novelty", "Familiar", "Novel"),
    DimensionMeta("formality_gradient", "formalityGradient", "formality",
                  "Formality", "Casual", "Formal"),
    DimensionMeta("energy_level", "energyLevel", "energy_level",
                  "Energy Level", "Low Energy", "High Energy"),
    DimensionMeta("scale_immersion", "scaleImmersion", "scale_immersion",
                  "Scale & Immersion", "Intimate/Brief", "Massive/Immersive"),
)

DIMENSION_KEYS: tuple[str, ...] = tuple(d.key for d in DIMENSIONS)

DIMENSION_MIN = 1
DIMENSION_MAX = 10
DIMENSION_DEFAULT = 5
DIMENSION_SPAN = DIMENSION_MAX - DIMENSION_MIN  # 9


# ---------------------------------------------------------------------------
# Persona traits (per dimension, per correlation sign)
# ---------------------------------------------------------------------------

PERSONA_TRAITS: dict[str, dict[str, dict[str, list[str]]]] = {
    "social_intensity": {
        "high": {"primary": ["Gregarious", "Vibrant", "Social", "Outgoing"],
                 "descriptor": ["Socialite", "Networker", "People-Person", "Extrovert"]},
        "low": {"primary": ["Introspective", "Chill", "Peaceful", "Reserved"],
                "descriptor": ["Soloist", "Reflector", "Observer", "Introvert"]},
    },
    "structure_spontaneity": {
        "high": {"primary": ["Spontaneous", "Adventurous", "Free-Spirited", "Unpredictable"],
                 "descriptor": ["Adventurer", "Maverick", "Innovator", "Daredevil"]},
        "low": {"primary": ["Methodical", "Organized", "Deliberate", "Planner"],
                "descriptor": ["Planner", "Strategist", "Architect", "Organizer"]},
    },
    "familiarity_novelty": {
        "high": {"primary": ["Novelty-Seeking", "Explorer", "Trailblazer", "Curious"],
                 "descriptor": ["Explorer", "Pioneer", "Discoverer", "Innovator"]},
        "low": {"primary": ["Comfort-Loving", "Traditionalist", "Steady", "Classic"],
                "descriptor": ["Traditionalist", "Connoisseur", "Aficionado", "Homebody"]},
    },
    "formality_gradient": {
        "high": {"primary": ["Elegant", "Refined", "Distinguished", "Polished"],
                 "descriptor": ["Connoisseur", "Sophisticate", "Aesthete", "Formalist"]},
        "low": {"primary": ["Casual", "Relaxed", "Easygoing", "Down-to-Earth"],
                "descriptor": ["Relaxer", "Chiller", "Everyperson", "Informalist"]},
    },
    "energy_level": {
        "high": {"primary": ["Energetic", "Dynamic", "Lively", "Active"],
                 "descriptor": ["Dynamo", "Sparkplug", "Go-Getter", "Activist"]},
        "low": {"primary": ["Calm", "Restful", "Mellow", "Serene"],
                "descriptor": ["Zen-Master", "Contemplator", "Dreamer", "Relaxer"]},
    },
    "scale_immersion": {
        "high": {"primary": ["Expansive", "Immersive", "Epicurean", "Grand"],
                 "descriptor": ["World-Builder", "Visionary", "Maximalist", "Experiencer"]},
        "low": {"primary": ["Focused", "Intimate", "Concise", "Subtle"],
                "descriptor": ["Minimalist", "Specialist", "Purist", "Simplifier"]},
    },
}
