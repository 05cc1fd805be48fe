# quiz_engine/catalog.py
"""
Activity catalog ingestion from CSV.

Expected header (case-insensitive, first eight columns):

    Activity, Subtitle, Social Intensity, Structure, Novelty, Formality,
    Energy Level, Scale & Immersion

Every column after the eighth is a tag. Rows with a missing title or a
score outside 1–10 are skipped (logged). A row that ends before a score
column gets 5 for that dimension.
"""
from __future__ import annotations

import csv
import io
import logging
from pathlib import Path
from typing import Any, List

from quiz_engine.constants import DIMENSION_DEFAULT, DIMENSION_MAX, DIMENSION_MIN, DIMENSIONS, INITIAL_RATING
from quiz_engine.models import Activity

logger = logging.getLogger(__name__)

EXPECTED_HEADERS = (
    "Activity",
    "Subtitle",
    "Social Intensity",
    "Structure",
    "Novelty",
    "Formality",
    "Energy Level",
    "Scale & Immersion",
)
CATALOG_ID_OFFSET = 5000

# CSV column index -> Activity dimension field, in DIMENSIONS order
_SCORE_COLUMNS = {2 + i: d.key for i, d in enumerate(DIMENSIONS)}


def _headers_match(header: List[str]) -> bool:
    for i, expected in enumerate(EXPECTED_HEADERS):
        got = header[i].strip() if i < len(header) else ""
        if got.lower() != expected.lower():
            logger.error(
                "[catalog] header mismatch at column %d: expected %r, got %r",
                i + 1, expected, got,
            )
            return False
    return True


def _parse_score(raw: str) -> int | None:
    try:
        score = int(raw.strip())
    except ValueError:
        return None
    return score if DIMENSION_MIN <= score <= DIMENSION_MAX else None


def parse_catalog_csv(text: str) -> List[Activity]:
    """Returns [] when the header is wrong or there is no data row."""
    rows = [r for r in csv.reader(io.StringIO(text.strip())) if any(cell.strip() for cell in r)]
    if len(rows) < 2:
        logger.warning("[catalog] too short: needs a header and at least one data row")
        return []
    if not _headers_match(rows[0]):
        return []

    activities: List[Activity] = []
    for line_no, values in enumerate(rows[1:], start=1):
        title = values[0].strip() if values else ""
        if not title:
            logger.warning("[catalog] line %d: missing title; skipped", line_no + 1)
            continue

        fields: dict[str, Any] = {
            "id": CATALOG_ID_OFFSET + line_no,
            "title": title,
            "subtitle": values[1].strip() if len(values) > 1 else "",
            "rating": INITIAL_RATING,
            "rating_update_count": 0,
        }

        valid = True
        for col, key in _SCORE_COLUMNS.items():
            if col >= len(values):
                logger.warning(
                    "[catalog] line %d %r: missing %s; defaulting to %d",
                    line_no + 1, title, key, DIMENSION_DEFAULT,
                )
                fields[key] = DIMENSION_DEFAULT
                continue
            score = _parse_score(values[col])
            if score is None:
                logger.warning(
                    "[catalog] line %d %r: invalid %s score %r; skipped",
                    line_no + 1, title, key, values[col],
                )
                valid = False
                break
            fields[key] = score

        if not valid:
            continue

        fields["tags"] = tuple(t.strip() for t in values[len(EXPECTED_HEADERS):] if t.strip())
        activities.append(Activity(**fields))

    logger.info("[catalog] parsed %d activities", len(activities))
    return activities


def load_catalog(path: str | Path) -> List[Activity]:
    return parse_catalog_csv(Path(path).read_text(encoding="utf-8"))
