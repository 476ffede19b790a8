"""
This module contains the nodes for the cross-institution collaboration pipeline.
"""

import logging
from typing import Dict

import pandas as pd

from .utils.graph import build_cross_institution_graph, summarize_top_pairs

logger = logging.getLogger(__name__)


def compute_cross_institution_graph(
    publications_a: pd.DataFrame,
    publications_b: pd.DataFrame,
    roster_a: pd.DataFrame,
    roster_b: pd.DataFrame,
) -> Dict[str, pd.DataFrame]:
    """
    Build the co-authorship graph between the two institutions.

    Args:
        publications_a (pd.DataFrame): Institution A's roster-filtered publications.
        publications_b (pd.DataFrame): Institution B's roster-filtered publications.
        roster_a (pd.DataFrame): Institution A's normalised roster.
        roster_b (pd.DataFrame): Institution B's normalised roster.

    Returns:
        Dict[str, pd.DataFrame]: The ``pairs``, ``nodes`` and ``works`` tables.
    """
    return build_cross_institution_graph(
        publications_a, publications_b, roster_a, roster_b
    )


def create_collaboration_summary(
    pairs: pd.DataFrame,
    works: pd.DataFrame,
    roster_a: pd.DataFrame,
    roster_b: pd.DataFrame,
    top_n: int = 8,
) -> Dict[str, object]:
    """
    Summarise the cross-institution collaboration for display.

    Returns:
        Dict[str, object]: ``cross_publications`` (number of joint works),
            ``pairs`` (number of author pairs) and ``top_pairs`` (text summary).
    """
    summary = {
        "cross_publications": int(len(works)),
        "pairs": int(len(pairs)),
        "top_pairs": summarize_top_pairs(pairs, roster_a, roster_b, top_n),
    }
    logger.info(
        "Cross-institution summary: %d works, %d pairs",
        summary["cross_publications"],
        summary["pairs"],
    )
    return summary
