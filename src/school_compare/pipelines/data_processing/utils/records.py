"""
Utility functions for turning raw roster and publication exports into typed records.

Roster exports carry one row per appointment and occasionally repeat an author;
publication exports come either deduplicated (one row per work, with the full
authorship list) or per author (one row per work and roster author). This module
maps both shapes onto fixed column schemas:

- Rosters: one row per canonical author id, keeping the most complete row
- Publications: integer year, normalised type, canonical author ids, topic and
  concept term lists, and a synthetic work id usable across sources

Malformed values never raise: they are defaulted (empty id, year 0, pass-through
type) and the affected rows are reported in the logs.
"""

import logging
import math
import re
from functools import partial, reduce
from typing import Any, Callable, Dict, List, Optional

import pandas as pd

from .identifiers import (
    as_text,
    normalize_doi,
    normalize_id,
    normalize_title,
    normalize_work_id,
    split_ids,
)

logger = logging.getLogger(__name__)

ROSTER_COLUMNS = {
    "id": ["OpenAlexID", "openalex_id", "author_id"],
    "display_name": ["Name", "Display_name", "display_name", "name"],
    "alternate_name": ["Alternate_name", "Other_names", "display_name_alternatives"],
    "contact": ["Email", "email"],
    "appointment_type": ["Appointment", "appointment"],
    "level": ["Level", "level"],
    "category": ["Category", "category"],
}

PUBLICATION_COLUMNS = {
    "work_id": ["id", "work_id"],
    "doi": ["doi"],
    "title": ["display_name", "title"],
    "year": ["publication_year", "year"],
    "type": ["type", "display_type"],
    "author_ids": [
        "authorships__author__id",
        "author_openalex_id",
        "OpenAlexID",
        "author_id",
    ],
    "topic": ["primary_topic__display_name"],
    "concepts": ["concepts_list"],
    "cited_by_count": ["cited_by_count"],
}

ROSTER_FIELDS = [
    "id",
    "display_name",
    "alternate_name",
    "contact",
    "appointment_type",
    "level",
    "category",
    "institution",
]

PUBLICATION_FIELDS = [
    "work_id",
    "year",
    "type",
    "author_ids",
    "topic_terms",
    "concept_terms",
    "title",
    "doi",
    "cited_by_count",
]

COMPLETENESS_FIELDS = ["display_name", "alternate_name", "contact"]

TYPE_SYNONYMS = {
    "journal-article": "article",
    "journal article": "article",
    "review-article": "review",
    "review article": "review",
}


def _cell(record: Dict[str, Any], column: str) -> str:
    return as_text(record.get(column))


def first_value(record: Dict[str, Any], columns: List[str]) -> str:
    """Return the first non-empty trimmed value among candidate columns."""
    for column in columns:
        value = _cell(record, column)
        if value:
            return value
    return ""


def completeness_score(author: Dict[str, str]) -> int:
    """Count the non-empty identity fields of a roster record."""
    return sum(1 for field in COMPLETENESS_FIELDS if author.get(field))


def prefer_more_complete(kept: Dict[str, str], candidate: Dict[str, str]) -> Dict[str, str]:
    """Comparator used to merge duplicate roster rows.

    The candidate only replaces the kept row when it is strictly more complete, so
    ties resolve to the first row seen.
    """
    if completeness_score(candidate) > completeness_score(kept):
        return candidate
    return kept


def normalize_roster(
    raw: pd.DataFrame,
    institution: str,
    columns: Optional[Dict[str, List[str]]] = None,
) -> pd.DataFrame:
    """
    Normalise a roster export into one author record per canonical id.

    Rows whose identifier does not resolve to a canonical id are dropped. Rows that
    resolve to the same id are merged with ``prefer_more_complete``, applied in
    first-seen order.

    Args:
        raw (pd.DataFrame): Raw roster rows.
        institution (str): Institution label for the resulting records ("A" or "B").
        columns (Dict[str, List[str]], optional): Candidate source columns per field.
            Defaults to ``ROSTER_COLUMNS``.

    Returns:
        pd.DataFrame: Author records with the ``ROSTER_FIELDS`` columns, in the order
            each canonical id was first seen.
    """
    columns = {**ROSTER_COLUMNS, **(columns or {})}
    raw = pd.DataFrame(raw)

    authors = []
    for record in raw.to_dict("records"):
        author = {
            field: first_value(record, columns[field])
            for field in ROSTER_FIELDS
            if field != "institution"
        }
        author["id"] = normalize_id(author["id"])
        author["institution"] = institution
        authors.append(author)

    valid = [author for author in authors if author["id"]]
    if len(valid) < len(authors):
        logger.info(
            "Dropped %d roster rows without a resolvable author id (institution %s)",
            len(authors) - len(valid),
            institution,
        )

    grouped: Dict[str, List[Dict[str, str]]] = {}
    for author in valid:
        grouped.setdefault(author["id"], []).append(author)

    merged = [reduce(prefer_more_complete, rows) for rows in grouped.values()]
    logger.info(
        "Normalised roster for institution %s: %d authors from %d rows",
        institution,
        len(merged),
        len(raw),
    )
    return pd.DataFrame(merged, columns=ROSTER_FIELDS)


def normalize_type(value: Any) -> str:
    """Map publication types onto their canonical spelling."""
    text = as_text(value).lower()
    return TYPE_SYNONYMS.get(text, text)


def parse_int(value: Any) -> int:
    """Parse an integer cell such as a year, returning 0 for anything non-numeric."""
    try:
        number = float(as_text(value))
    except ValueError:
        return 0
    if not math.isfinite(number):
        return 0
    return int(round(number))


def split_terms(value: Any) -> list:
    """Split a ``;`` or ``|`` delimited term cell into unique lowercased terms."""
    terms = (term.strip() for term in re.split(r"[;|]", as_text(value).lower()))
    return list(dict.fromkeys(term for term in terms if term))


def _ids_from_column(column: str, record: Dict[str, Any]) -> list:
    return split_ids(record.get(column))


def author_id_extractors(columns: List[str]) -> List[Callable[[Dict[str, Any]], list]]:
    """Build the ordered extractor strategies for author ids.

    Args:
        columns: Candidate columns in priority order, the combined authorship column
            first and the single-author fallbacks after it.

    Returns:
        List of callables, each returning the canonical ids found in one column.
    """
    return [partial(_ids_from_column, column) for column in columns]


def extract_author_ids(record: Dict[str, Any], extractors: List[Callable]) -> list:
    """Return the first non-empty id list produced by the extractors."""
    for extractor in extractors:
        ids = extractor(record)
        if ids:
            return ids
    return []


def synthetic_work_id(work_id: Any, doi: Any, title: Any) -> str:
    """
    Derive a work key that is stable across roster sources.

    The OpenAlex work id is preferred; a normalised DOI and then a normalised title
    are used when it is missing. Works without any of the three get ``""`` and are
    treated as distinct from every other row downstream.
    """
    key = normalize_work_id(work_id)
    if key:
        return key
    doi = normalize_doi(doi)
    if doi:
        return f"doi:{doi}"
    title = normalize_title(title)
    if title:
        return f"t:{title}"
    return ""


def normalize_publications(
    raw: pd.DataFrame,
    columns: Optional[Dict[str, List[str]]] = None,
) -> pd.DataFrame:
    """
    Normalise a publication export into typed publication records.

    For every row this derives the integer year, the canonical type, the canonical
    author ids (first non-empty candidate column wins, candidates are never merged),
    the topic and concept term lists and the synthetic work id.

    Args:
        raw (pd.DataFrame): Raw publication rows, deduplicated or per author.
        columns (Dict[str, List[str]], optional): Candidate source columns per field.
            Defaults to ``PUBLICATION_COLUMNS``.

    Returns:
        pd.DataFrame: Publication records with the ``PUBLICATION_FIELDS`` columns.
    """
    columns = {**PUBLICATION_COLUMNS, **(columns or {})}
    extractors = author_id_extractors(columns["author_ids"])
    raw = pd.DataFrame(raw)

    publications = []
    for record in raw.to_dict("records"):
        work_id = first_value(record, columns["work_id"])
        doi = first_value(record, columns["doi"])
        title = first_value(record, columns["title"])
        topic = first_value(record, columns["topic"])
        publications.append(
            {
                "work_id": synthetic_work_id(work_id, doi, title),
                "year": parse_int(first_value(record, columns["year"])),
                "type": normalize_type(first_value(record, columns["type"])),
                "author_ids": extract_author_ids(record, extractors),
                "topic_terms": [topic.lower()] if topic else [],
                "concept_terms": split_terms(first_value(record, columns["concepts"])),
                "title": title,
                "doi": doi,
                "cited_by_count": parse_int(
                    first_value(record, columns["cited_by_count"])
                ),
            }
        )

    publications = pd.DataFrame(publications, columns=PUBLICATION_FIELDS)
    logger.info(
        "Normalised %d publications (%d without authors, %d without a work key)",
        len(publications),
        int((publications["author_ids"].apply(len) == 0).sum()),
        int((publications["work_id"] == "").sum()),
    )
    return publications
