"""
This module contains the nodes for the data processing pipeline. Each node
normalises one institution's raw exports or scopes its publications to the
institution's roster.
"""

import logging
from typing import Dict, List, Optional

import pandas as pd

from .utils.records import normalize_roster, normalize_publications
from .utils.filtering import (
    DEFAULT_TYPES,
    DEFAULT_YEAR_MAX,
    DEFAULT_YEAR_MIN,
    clamp_year,
    filter_to_roster,
    headcount,
    per_capita_scale,
)

logger = logging.getLogger(__name__)


def normalize_institution_roster(
    raw_roster: pd.DataFrame,
    institution: str,
    columns: Optional[Dict[str, List[str]]] = None,
) -> pd.DataFrame:
    """
    Normalise one institution's roster export.

    Args:
        raw_roster (pd.DataFrame): Roster rows as loaded from the catalog.
        institution (str): Institution label, "A" or "B".
        columns (Dict[str, List[str]], optional): Candidate source columns per field.

    Returns:
        pd.DataFrame: One author record per canonical id.
    """
    logger.info("Normalising roster for institution %s", institution)
    return normalize_roster(raw_roster, institution, columns)


def normalize_institution_publications(
    raw_publications: pd.DataFrame,
    columns: Optional[Dict[str, List[str]]] = None,
) -> pd.DataFrame:
    """Normalise a deduplicated or per-author publication export."""
    if raw_publications is None or len(raw_publications) == 0:
        logger.warning("Publication export is empty")
    return normalize_publications(
        raw_publications if raw_publications is not None else pd.DataFrame(), columns
    )


def resolve_window(window: Dict) -> Dict[str, int]:
    """
    Clamp the configured analysis window.

    Args:
        window (Dict): Mapping with ``yearMin`` and ``yearMax``.

    Returns:
        Dict[str, int]: ``year_min`` and ``year_max`` within the supported range.
    """
    year_min = clamp_year(window.get("yearMin"), DEFAULT_YEAR_MIN)
    year_max = clamp_year(window.get("yearMax"), DEFAULT_YEAR_MAX)
    if year_min > year_max:
        logger.warning("Year window %s-%s is empty", year_min, year_max)
    return {"year_min": year_min, "year_max": year_max}


def allowed_types(options: Dict) -> Optional[frozenset]:
    """Type filter implied by the ``normalize_types`` option."""
    return DEFAULT_TYPES if options.get("normalize_types", True) else None


def filter_publications(
    publications: pd.DataFrame,
    roster: pd.DataFrame,
    window: Dict,
    options: Dict,
) -> pd.DataFrame:
    """
    Scope an institution's publications to its roster and the analysis window.

    Args:
        publications (pd.DataFrame): Normalised publications.
        roster (pd.DataFrame): Normalised roster.
        window (Dict): Mapping with ``yearMin`` and ``yearMax``.
        options (Dict): Analysis options; ``normalize_types`` restricts the
            publication types to ``DEFAULT_TYPES``.

    Returns:
        pd.DataFrame: The filtered publications.
    """
    bounds = resolve_window(window)
    return filter_to_roster(
        publications,
        roster,
        bounds["year_min"],
        bounds["year_max"],
        allowed_types(options),
    )


def compute_denominators(
    roster_a: pd.DataFrame, roster_b: pd.DataFrame, options: Dict
) -> Dict[str, int]:
    """
    Compute headcounts and the per-capita scales of both institutions.

    When ``per_capita`` is off both scales are 1. A zero headcount also scales by 1,
    so per-capita values fall back to raw counts.

    Returns:
        Dict[str, int]: ``headcount_a``, ``headcount_b``, ``scale_a`` and ``scale_b``.
    """
    full_time_only = options.get("full_time_only", True)
    count_a = headcount(roster_a, full_time_only)
    count_b = headcount(roster_b, full_time_only)
    per_capita = options.get("per_capita", False)

    denominators = {
        "headcount_a": count_a,
        "headcount_b": count_b,
        "scale_a": per_capita_scale(count_a) if per_capita else 1,
        "scale_b": per_capita_scale(count_b) if per_capita else 1,
    }
    logger.info(
        "Headcounts: A=%d, B=%d (full-time only: %s)", count_a, count_b, full_time_only
    )
    return denominators
