"""
Utility functions for comparing the research topics of two institutions.

Terms are either the primary topic labels or the concepts of each publication.
Frequencies are document frequencies: a term counts once per publication no matter
how often it is listed. Per-capita rates divide these frequencies by the
institution's headcount scale.

The module provides:
- term_document_frequency: term -> number of publications containing it
- overlap: Jaccard similarity of the two vocabularies
- compute_enrichment: per-capita rates and log2 fold change per term
- top_distinct, top_terms, shared_terms: ranked views over the above
- publications_by_year: raw and scaled publication counts per year
"""

# pylint: disable=E0402

import logging

import numpy as np
import pandas as pd

from ...data_processing.utils.filtering import per_capita_scale

logger = logging.getLogger(__name__)

TERM_SOURCES = {"topics": "topic_terms", "concepts": "concept_terms"}

# Added to both rates so one-sided terms get a large, finite fold change.
EPSILON = 1e-9

ENRICHMENT_COLUMNS = [
    "term",
    "per_capita_a",
    "per_capita_b",
    "total",
    "log2_fold_change",
]


def term_column(source: str) -> str:
    """Publication column holding the terms of ``source``."""
    if source not in TERM_SOURCES:
        raise ValueError(
            f"Unknown term source '{source}', expected one of {sorted(TERM_SOURCES)}"
        )
    return TERM_SOURCES[source]


def term_document_frequency(publications: pd.DataFrame, source: str) -> pd.Series:
    """
    Count the publications containing each term.

    Args:
        publications (pd.DataFrame): Filtered publications.
        source (str): "topics" or "concepts".

    Returns:
        pd.Series: Document frequency indexed by term, most frequent first.
    """
    column = term_column(source)
    terms = publications[column].apply(lambda values: list(dict.fromkeys(values)))
    frequency = terms.explode().dropna()
    frequency = frequency[frequency != ""].value_counts()
    frequency.index.name = "term"
    frequency.name = "count"
    return frequency.astype(int)


def _present(frequency: pd.Series) -> set:
    return set(frequency[frequency > 0].index)


def overlap(frequency_a: pd.Series, frequency_b: pd.Series) -> float:
    """Jaccard similarity of the terms present at each institution, 0 when both are empty."""
    terms_a = _present(frequency_a)
    terms_b = _present(frequency_b)
    union = terms_a | terms_b
    if not union:
        return 0.0
    return len(terms_a & terms_b) / len(union)


def compute_enrichment(
    frequency_a: pd.Series,
    frequency_b: pd.Series,
    scale_a: float = 1,
    scale_b: float = 1,
) -> pd.DataFrame:
    """
    Compute per-capita rates and the log2 fold change of every term.

    The fold change is ``log2((rate_a + EPSILON) / (rate_b + EPSILON))``; positive
    values favour institution A.

    Args:
        frequency_a (pd.Series): Document frequencies of institution A.
        frequency_b (pd.Series): Document frequencies of institution B.
        scale_a (float): Headcount scale of institution A, 1 for raw counts. A
            non-positive scale falls back to raw counts.
        scale_b (float): Headcount scale of institution B, likewise.

    Returns:
        pd.DataFrame: One row per term in either vocabulary, sorted by combined rate
            descending.
    """
    scale_a = per_capita_scale(scale_a)
    scale_b = per_capita_scale(scale_b)
    terms = frequency_a.index.union(frequency_b.index)
    rate_a = frequency_a.reindex(terms, fill_value=0).astype(float) / scale_a
    rate_b = frequency_b.reindex(terms, fill_value=0).astype(float) / scale_b

    enrichment = pd.DataFrame(
        {
            "term": terms,
            "per_capita_a": rate_a.values,
            "per_capita_b": rate_b.values,
        }
    )
    enrichment["total"] = enrichment["per_capita_a"] + enrichment["per_capita_b"]
    enrichment["log2_fold_change"] = np.log2(
        (enrichment["per_capita_a"] + EPSILON) / (enrichment["per_capita_b"] + EPSILON)
    )
    enrichment = enrichment.sort_values(
        ["total", "term"], ascending=[False, True]
    ).reset_index(drop=True)

    logger.debug("Computed enrichment for %d terms", len(enrichment))
    return enrichment[ENRICHMENT_COLUMNS]


def top_distinct(
    enrichment: pd.DataFrame, side: str, top_n: int = 10, min_total: float = 0.0
) -> pd.DataFrame:
    """
    Terms most characteristic of one institution.

    Args:
        enrichment (pd.DataFrame): Output of ``compute_enrichment``.
        side (str): "A" keeps positive fold changes, "B" negative ones.
        top_n (int): Maximum number of terms.
        min_total (float): Minimum combined rate for a term to qualify.

    Returns:
        pd.DataFrame: Enrichment rows ordered by fold change magnitude.
    """
    if side not in ("A", "B"):
        raise ValueError(f"Unknown institution side '{side}'")
    fold_change = enrichment["log2_fold_change"]
    sign = fold_change > 0 if side == "A" else fold_change < 0
    selected = enrichment[sign & (enrichment["total"] >= min_total)]
    order = selected["log2_fold_change"].abs().sort_values(ascending=False, kind="stable")
    return selected.loc[order.index].head(top_n).reset_index(drop=True)


def top_terms(frequency: pd.Series, top_n: int = 8) -> pd.Series:
    """Most frequent terms of one institution."""
    return frequency.sort_values(ascending=False, kind="stable").head(top_n)


def shared_terms(enrichment: pd.DataFrame, top_n: int = 15) -> pd.DataFrame:
    """Terms used by both institutions, by combined rate."""
    both = enrichment[(enrichment["per_capita_a"] > 0) & (enrichment["per_capita_b"] > 0)]
    return both.head(top_n).reset_index(drop=True)


def publications_by_year(
    publications_a: pd.DataFrame,
    publications_b: pd.DataFrame,
    year_min: int,
    year_max: int,
    scale_a: float = 1,
    scale_b: float = 1,
) -> pd.DataFrame:
    """
    Count each institution's publications per year of the window.

    Every year of the window gets a row, also years without publications.

    Returns:
        pd.DataFrame: Columns year, count_a, count_b, value_a and value_b, where the
            values are the counts divided by the institution's scale. A non-positive
            scale leaves the counts unscaled.
    """
    scale_a = per_capita_scale(scale_a)
    scale_b = per_capita_scale(scale_b)
    years = pd.Index(range(year_min, year_max + 1), name="year")
    counts_a = publications_a["year"].value_counts().reindex(years, fill_value=0)
    counts_b = publications_b["year"].value_counts().reindex(years, fill_value=0)
    by_year = pd.DataFrame(
        {
            "year": years,
            "count_a": counts_a.values.astype(int),
            "count_b": counts_b.values.astype(int),
        }
    )
    by_year["value_a"] = by_year["count_a"] / scale_a
    by_year["value_b"] = by_year["count_b"] / scale_b
    return by_year
