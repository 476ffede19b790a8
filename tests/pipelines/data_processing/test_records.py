"""Tests for roster and publication record normalisation."""

import pandas as pd

from school_compare.pipelines.data_processing.utils.records import (
    completeness_score,
    normalize_publications,
    normalize_roster,
    normalize_type,
    parse_int,
    prefer_more_complete,
    split_terms,
    synthetic_work_id,
)


class TestNormalizeRoster:
    """Test cases for normalize_roster."""

    def test_one_row_per_canonical_id(self):
        """Test that URL and bare spellings of one author are merged."""
        raw = pd.DataFrame(
            {
                "OpenAlexID": ["https://openalex.org/A1", "A1", "A2"],
                "Name": ["", "Ada Lovelace", "Alan Turing"],
            }
        )
        roster = normalize_roster(raw, "A")
        assert roster["id"].tolist() == ["A1", "A2"]
        assert roster["id"].is_unique

    def test_keeps_most_complete_row(self):
        """Test that the duplicate with more identity fields wins."""
        raw = pd.DataFrame(
            {
                "OpenAlexID": ["A1", "A1"],
                "Name": ["Ada", "Ada Lovelace"],
                "Email": ["", "ada@a.edu"],
            }
        )
        roster = normalize_roster(raw, "A")
        assert roster.iloc[0]["display_name"] == "Ada Lovelace"
        assert roster.iloc[0]["contact"] == "ada@a.edu"

    def test_tie_keeps_first_row(self):
        """Test that equally complete duplicates resolve to the first row seen."""
        raw = pd.DataFrame({"OpenAlexID": ["A1", "A1"], "Name": ["First", "Second"]})
        assert normalize_roster(raw, "A").iloc[0]["display_name"] == "First"

    def test_rows_without_id_dropped(self):
        """Test that rows whose id does not resolve are dropped."""
        raw = pd.DataFrame(
            {"OpenAlexID": [None, "", "A1"], "Name": ["Ghost", "Nobody", "Ada"]}
        )
        roster = normalize_roster(raw, "B")
        assert roster["id"].tolist() == ["A1"]
        assert roster["institution"].tolist() == ["B"]

    def test_missing_fields_default_to_empty(self):
        """Test that absent optional columns become empty strings."""
        roster = normalize_roster(pd.DataFrame({"OpenAlexID": ["A1"]}), "A")
        assert roster.iloc[0]["display_name"] == ""
        assert roster.iloc[0]["appointment_type"] == ""

    def test_custom_columns(self):
        """Test that configured candidate columns override the defaults."""
        raw = pd.DataFrame({"person": ["A1"], "full_name": ["Ada"]})
        roster = normalize_roster(
            raw, "A", {"id": ["person"], "display_name": ["full_name"]}
        )
        assert roster.iloc[0]["display_name"] == "Ada"


class TestCompleteness:
    """Test cases for the duplicate comparator."""

    def test_score_counts_identity_fields(self):
        """Test the completeness score."""
        assert completeness_score({"display_name": "Ada", "contact": "x"}) == 2
        assert completeness_score({"display_name": ""}) == 0

    def test_candidate_must_be_strictly_better(self):
        """Test that ties keep the current row."""
        kept = {"display_name": "Ada"}
        candidate = {"display_name": "Ada L."}
        assert prefer_more_complete(kept, candidate) is kept


class TestPublicationFields:
    """Test cases for the per-field publication parsers."""

    def test_years(self):
        """Test year parsing of numeric strings and junk."""
        assert parse_int("2022.0") == 2022
        assert parse_int(2021) == 2021
        assert parse_int("n/a") == 0
        assert parse_int(None) == 0
        assert parse_int(float("inf")) == 0

    def test_type_synonyms(self):
        """Test that journal and review spellings collapse."""
        assert normalize_type("journal-article") == "article"
        assert normalize_type("Journal Article") == "article"
        assert normalize_type("review-article") == "review"
        assert normalize_type(" Book-Chapter ") == "book-chapter"
        assert normalize_type("dataset") == "dataset"

    def test_terms(self):
        """Test concept splitting, lowercasing and deduplication."""
        assert split_terms("Biology; virus|BIOLOGY") == ["biology", "virus"]
        assert split_terms(None) == []

    def test_synthetic_work_id_fallbacks(self):
        """Test the work id, DOI and title fallbacks."""
        assert synthetic_work_id("https://openalex.org/W1", "", "") == "W1"
        assert synthetic_work_id("", "https://doi.org/10.1/X", "T") == "doi:10.1/x"
        assert synthetic_work_id("", "", " A  Title ") == "t:a title"
        assert synthetic_work_id("", "", "") == ""


class TestNormalizePublications:
    """Test cases for normalize_publications."""

    def test_fixture_export(self, publications):
        """Test the normalised OpenAlex export."""
        first, second = publications.to_dict("records")
        assert first["work_id"] == "W1"
        assert first["year"] == 2022
        assert first["type"] == "article"
        assert first["author_ids"] == ["A1", "b1"]
        assert first["topic_terms"] == ["virology"]
        assert first["concept_terms"] == ["biology", "virus"]
        assert second["year"] == 2023

    def test_type_falls_back_to_display_type(self):
        """Test that an empty type uses the display type."""
        raw = pd.DataFrame(
            {"id": ["W1"], "type": [None], "display_type": ["Review Article"]}
        )
        assert normalize_publications(raw).iloc[0]["type"] == "review"

    def test_author_fallback_columns(self):
        """Test that single-author columns are used when the authorships are empty."""
        raw = pd.DataFrame(
            {
                "id": ["W1", "W2"],
                "authorships__author__id": ["", "A9"],
                "author_openalex_id": ["https://openalex.org/A3", "A4"],
            }
        )
        publications = normalize_publications(raw)
        assert publications["author_ids"].tolist() == [["A3"], ["A9"]]

    def test_first_non_empty_extractor_wins(self):
        """Test that candidate id columns are never merged."""
        raw = pd.DataFrame(
            {"authorships__author__id": ["A1|A2"], "OpenAlexID": ["A3"]}
        )
        assert normalize_publications(raw).iloc[0]["author_ids"] == ["A1", "A2"]

    def test_missing_authors_give_empty_list(self):
        """Test that a publication without ids gets an empty author list."""
        raw = pd.DataFrame({"id": ["W1"], "publication_year": ["2020"]})
        record = normalize_publications(raw).iloc[0]
        assert record["author_ids"] == []
        assert record["year"] == 2020

    def test_empty_export(self):
        """Test that an empty export yields an empty table with the schema."""
        publications = normalize_publications(pd.DataFrame())
        assert publications.empty
        assert "author_ids" in publications.columns
