"""
This module contains the nodes for the author embedding pipeline.
"""

import logging
from typing import Dict, Optional

import pandas as pd

from ..data_processing.nodes import allowed_types, resolve_window
from ..data_analysis_topics.nodes import term_source
from .utils.embedding import (
    POINT_COLUMNS,
    EmbeddingResult,
    author_terms,
    compute_embedding,
)

logger = logging.getLogger(__name__)


def build_author_terms(
    per_author_publications: Optional[pd.DataFrame],
    publications: pd.DataFrame,
    roster: pd.DataFrame,
    window: Dict,
    options: Dict,
) -> Dict[str, set]:
    """
    Collect each roster member's terms within the analysis window.

    The per-author export lists every roster author of a work, so it is preferred
    whenever it has rows; the deduplicated export is used otherwise.

    Args:
        per_author_publications (pd.DataFrame): Normalised per-author export, may be
            empty.
        publications (pd.DataFrame): Normalised deduplicated export.
        roster (pd.DataFrame): Normalised roster.
        window (Dict): Mapping with ``yearMin`` and ``yearMax``.
        options (Dict): Analysis options.

    Returns:
        Dict[str, set]: Author id -> terms.
    """
    if per_author_publications is not None and len(per_author_publications) > 0:
        source_publications = per_author_publications
    else:
        logger.info("Per-author export is empty, using the deduplicated export")
        source_publications = publications

    bounds = resolve_window(window)
    return author_terms(
        source_publications,
        roster,
        term_source(options),
        bounds["year_min"],
        bounds["year_max"],
        allowed_types(options),
    )


def compute_author_embedding(
    authors_a: Dict[str, set],
    authors_b: Dict[str, set],
    roster_a: pd.DataFrame,
    roster_b: pd.DataFrame,
    params: Dict,
) -> Dict[str, object]:
    """
    Embed the authors of both institutions.

    Args:
        authors_a (Dict[str, set]): Author terms of institution A.
        authors_b (Dict[str, set]): Author terms of institution B.
        roster_a (pd.DataFrame): Roster of institution A.
        roster_b (pd.DataFrame): Roster of institution B.
        params (Dict): ``method``, ``seed`` and ``n_iter`` settings.

    Returns:
        Dict[str, object]: ``points`` (empty when no embedding could be computed) and
            a ``summary`` describing the embedding or why it is missing.
    """
    result = compute_embedding(
        authors_a,
        authors_b,
        roster_a,
        roster_b,
        method=params.get("method", "pca"),
        seed=params.get("seed"),
        n_iter=params.get("n_iter"),
    )
    if not isinstance(result, EmbeddingResult):
        return {
            "points": pd.DataFrame(columns=POINT_COLUMNS),
            "summary": {"reason": result.reason, "n_authors": result.n_authors},
        }
    return {
        "points": result.points,
        "summary": {
            "method": result.method,
            "n_terms": result.n_terms,
            "n_a": result.n_a,
            "n_b": result.n_b,
        },
    }
