"""Shared fixtures: two small institutions exported the way OpenAlex dumps look."""

import pandas as pd
import pytest

from school_compare.pipelines.data_processing.utils import (
    normalize_publications,
    normalize_roster,
)


@pytest.fixture
def raw_roster_a():
    return pd.DataFrame(
        {
            "OpenAlexID": [
                "https://openalex.org/authors/A1",
                "https://openalex.org/A2",
            ],
            "Name": ["Ada Lovelace", "Alan Turing"],
            "Email": ["ada@a.edu", ""],
            "Appointment": ["Full-time", "full time"],
        }
    )


@pytest.fixture
def raw_roster_b():
    return pd.DataFrame(
        {
            "OpenAlexID": ["b1"],
            "Name": ["Barbara Liskov"],
            "Email": ["barbara@b.edu"],
            "Appointment": ["Full Time"],
        }
    )


@pytest.fixture
def raw_publications():
    """One joint work (P1) plus a work of A only."""
    return pd.DataFrame(
        {
            "id": ["https://openalex.org/W1", "https://openalex.org/W2"],
            "display_name": ["Joint paper", "Solo paper"],
            "publication_year": [2022, "2023.0"],
            "type": ["journal-article", "article"],
            "authorships__author__id": [
                "https://openalex.org/A1|https://openalex.org/b1",
                "https://openalex.org/A2",
            ],
            "primary_topic__display_name": ["Virology", "Virology"],
            "concepts_list": ["Biology; Virus", "Biology"],
            "cited_by_count": [10, 3],
        }
    )


@pytest.fixture
def roster_a(raw_roster_a):
    return normalize_roster(raw_roster_a, "A")


@pytest.fixture
def roster_b(raw_roster_b):
    return normalize_roster(raw_roster_b, "B")


@pytest.fixture
def publications(raw_publications):
    return normalize_publications(raw_publications)
