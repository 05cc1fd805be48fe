# tests/test_catalog.py
"""
Tests for catalog CSV ingestion.

Covers:
  1. Happy path (ids, dimensions, tags)
  2. Header validation
  3. Row-level skips and defaults
"""
from __future__ import annotations

from quiz_engine.catalog import CATALOG_ID_OFFSET, load_catalog, parse_catalog_csv

HEADER = "Activity,Subtitle,Social Intensity,Structure,Novelty,Formality,Energy Level,Scale & Immersion,Tag 1,Tag 2"


def _csv(*rows: str) -> str:
    return "\n".join([HEADER, *rows]) + "\n"


# ---------------------------------------------------------------------------
# 1. Happy path
# ---------------------------------------------------------------------------

def test_parses_rows_with_tags():
    acts = parse_catalog_csv(_csv(
        "Rock Climbing,Indoor bouldering,4,6,7,2,9,5,active,adventure",
        '"Wine Tasting, Downtown",Local vineyards,6,8,5,7,3,4,wine,',
    ))

    assert [a.title for a in acts] == ["Rock Climbing", "Wine Tasting, Downtown"]
    climbing = acts[0]
    assert climbing.id == CATALOG_ID_OFFSET + 1
    assert climbing.subtitle == "Indoor bouldering"
    assert climbing.social_intensity == 4
    assert climbing.structure_spontaneity == 6
    assert climbing.familiarity_novelty == 7
    assert climbing.formality_gradient == 2
    assert climbing.energy_level == 9
    assert climbing.scale_immersion == 5
    assert climbing.tags == ("active", "adventure")
    assert climbing.rating == 1200
    assert climbing.rating_update_count == 0
    assert acts[1].tags == ("wine",)


def test_header_is_case_insensitive():
    text = HEADER.upper() + "\nChess,,3,8,2,4,2,3\n"
    assert [a.title for a in parse_catalog_csv(text)] == ["Chess"]


def test_load_catalog_reads_file(tmp_path):
    path = tmp_path / "activities.csv"
    path.write_text(_csv("Chess,Board game,3,8,2,4,2,3,strategic"), encoding="utf-8")
    [chess] = load_catalog(path)
    assert chess.tags == ("strategic",)


# ---------------------------------------------------------------------------
# 2. Header validation
# ---------------------------------------------------------------------------

def test_wrong_header_gives_empty_catalog():
    text = "Name,Subtitle,Social Intensity,Structure,Novelty,Formality,Energy Level,Scale & Immersion\nChess,,3,8,2,4,2,3\n"
    assert parse_catalog_csv(text) == []


def test_header_only_gives_empty_catalog():
    assert parse_catalog_csv(HEADER) == []


# ---------------------------------------------------------------------------
# 3. Row-level handling
# ---------------------------------------------------------------------------

class TestRows:

    def test_missing_title_skipped_but_ids_stay_positional(self):
        acts = parse_catalog_csv(_csv(
            ",no title,3,3,3,3,3,3",
            "Chess,,3,8,2,4,2,3",
        ))
        assert [(a.id, a.title) for a in acts] == [(CATALOG_ID_OFFSET + 2, "Chess")]

    def test_out_of_range_score_skips_row(self):
        acts = parse_catalog_csv(_csv(
            "Skydiving,,5,5,10,1,11,6",
            "Chess,,3,8,2,4,2,3",
        ))
        assert [a.title for a in acts] == ["Chess"]

    def test_non_numeric_or_empty_score_skips_row(self):
        acts = parse_catalog_csv(_csv(
            "Skydiving,,5,five,10,1,9,6",
            "Napping,,1,,1,1,1,1",
            "Chess,,3,8,2,4,2,3",
        ))
        assert [a.title for a in acts] == ["Chess"]

    def test_short_row_defaults_missing_scores(self):
        [walk] = parse_catalog_csv(_csv("Walk,Around the block,2,3"))
        assert walk.social_intensity == 2
        assert walk.structure_spontaneity == 3
        assert walk.familiarity_novelty == 5
        assert walk.scale_immersion == 5
        assert walk.tags == ()

    def test_blank_lines_are_ignored(self):
        text = HEADER + "\n\nChess,,3,8,2,4,2,3\n\n"
        assert len(parse_catalog_csv(text)) == 1
