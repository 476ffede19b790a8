"""
This module contains the nodes for the topic comparison pipeline.
"""

import logging
from typing import Dict

import pandas as pd

from ..data_processing.nodes import resolve_window
from .utils.term_statistics import (
    compute_enrichment,
    overlap,
    publications_by_year,
    shared_terms,
    term_document_frequency,
    top_distinct,
    top_terms,
)

logger = logging.getLogger(__name__)


def term_source(options: Dict) -> str:
    """Term source selected by the ``use_topics`` option."""
    return "topics" if options.get("use_topics", True) else "concepts"


def compute_term_frequencies(
    publications_a: pd.DataFrame, publications_b: pd.DataFrame, options: Dict
) -> Dict[str, pd.Series]:
    """
    Compute the document frequencies of both institutions.

    Args:
        publications_a (pd.DataFrame): Institution A's filtered publications.
        publications_b (pd.DataFrame): Institution B's filtered publications.
        options (Dict): Analysis options; ``use_topics`` picks topics over concepts.

    Returns:
        Dict[str, pd.Series]: Frequencies under the keys ``a`` and ``b``.
    """
    source = term_source(options)
    frequencies = {
        "a": term_document_frequency(publications_a, source),
        "b": term_document_frequency(publications_b, source),
    }
    logger.info(
        "Vocabulary sizes (%s): A=%d, B=%d",
        source,
        len(frequencies["a"]),
        len(frequencies["b"]),
    )
    return frequencies


def compute_topic_comparison(
    frequency_a: pd.Series,
    frequency_b: pd.Series,
    denominators: Dict[str, int],
    params: Dict,
) -> Dict[str, object]:
    """
    Compare the two vocabularies.

    Args:
        frequency_a (pd.Series): Document frequencies of institution A.
        frequency_b (pd.Series): Document frequencies of institution B.
        denominators (Dict[str, int]): Output of ``compute_denominators``.
        params (Dict): ``top_distinct``, ``top_shared``, ``top_terms`` and
            ``min_total`` settings.

    Returns:
        Dict[str, object]: ``enrichment``, ``distinct_a``, ``distinct_b`` and
            ``shared`` tables plus a ``summary`` with the overlap and top terms.
    """
    enrichment = compute_enrichment(
        frequency_a, frequency_b, denominators["scale_a"], denominators["scale_b"]
    )
    top_n = params.get("top_distinct", 10)
    min_total = params.get("min_total", 0.0)
    n_top_terms = params.get("top_terms", 8)

    summary = {
        "overlap": overlap(frequency_a, frequency_b),
        "top_terms_a": top_terms(frequency_a, n_top_terms).index.tolist(),
        "top_terms_b": top_terms(frequency_b, n_top_terms).index.tolist(),
    }
    logger.info("Topic overlap (Jaccard): %.3f", summary["overlap"])
    return {
        "enrichment": enrichment,
        "distinct_a": top_distinct(enrichment, "A", top_n, min_total),
        "distinct_b": top_distinct(enrichment, "B", top_n, min_total),
        "shared": shared_terms(enrichment, params.get("top_shared", 15)),
        "summary": summary,
    }


def compute_publications_by_year(
    publications_a: pd.DataFrame,
    publications_b: pd.DataFrame,
    window: Dict,
    denominators: Dict[str, int],
) -> pd.DataFrame:
    """Publication counts per year, scaled by the per-capita denominators."""
    bounds = resolve_window(window)
    return publications_by_year(
        publications_a,
        publications_b,
        bounds["year_min"],
        bounds["year_max"],
        denominators["scale_a"],
        denominators["scale_b"],
    )
