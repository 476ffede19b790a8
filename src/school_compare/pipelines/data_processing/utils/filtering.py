"""
Roster-scoped filtering and per-capita denominators.

A comparison only counts publications that belong to an institution's current
roster: at least one canonical author id on the publication must be a roster
member, the publication year must fall inside the analysis window and, optionally,
its type must be in an allowed set. Denominators for per-capita views come from the
same rosters.
"""

import logging
import math
import re
from typing import Any, Iterable, Optional

import pandas as pd

logger = logging.getLogger(__name__)

YEAR_FLOOR = 1990
YEAR_CEILING = 2100
DEFAULT_YEAR_MIN = 2021
DEFAULT_YEAR_MAX = 2025

DEFAULT_TYPES = frozenset({"article", "review", "book", "book-chapter"})

FULL_TIME_PATTERN = re.compile(r"^full\s*-?\s*time", re.IGNORECASE)

# A zero headcount scales by 1, i.e. per-capita views fall back to raw counts.
EMPTY_HEADCOUNT_POLICY = "raw_counts"


def clamp_year(value: Any, default: int = DEFAULT_YEAR_MIN) -> int:
    """
    Clamp a year bound to the supported window.

    Missing, non-numeric, zero and non-finite inputs fall back to ``default``; the
    result is then clamped to ``[YEAR_FLOOR, YEAR_CEILING]``.

    Args:
        value: Raw year bound.
        default (int): Year used when ``value`` is unusable.

    Returns:
        int: A year within the supported window.
    """
    try:
        year = float(value)
    except (TypeError, ValueError):
        year = float("nan")
    if not math.isfinite(year) or year == 0:
        year = default
    return int(min(max(int(year), YEAR_FLOOR), YEAR_CEILING))


def roster_ids(roster: pd.DataFrame) -> set:
    """Canonical id set of a normalised roster, without the empty id."""
    return {id_ for id_ in roster["id"] if id_}


def filter_to_roster(
    publications: pd.DataFrame,
    roster: pd.DataFrame,
    year_min: int,
    year_max: int,
    allowed_types: Optional[Iterable[str]] = None,
) -> pd.DataFrame:
    """
    Keep the publications written by at least one roster member inside a window.

    Args:
        publications (pd.DataFrame): Normalised publications.
        roster (pd.DataFrame): Normalised roster; membership uses canonical ids only.
        year_min (int): First year of the window, inclusive.
        year_max (int): Last year of the window, inclusive.
        allowed_types (Iterable[str], optional): Publication types to keep; ``None``
            keeps every type.

    Returns:
        pd.DataFrame: The matching publications, index reset.
    """
    members = roster_ids(roster)
    types = None if allowed_types is None else set(allowed_types)

    in_window = publications["year"].between(year_min, year_max)
    type_ok = (
        publications["type"].isin(types)
        if types is not None
        else pd.Series(True, index=publications.index)
    )
    has_member = publications["author_ids"].apply(
        lambda ids: any(id_ in members for id_ in ids)
    ).astype(bool)

    filtered = publications[in_window & type_ok & has_member].reset_index(drop=True)
    logger.info(
        "Kept %d of %d publications for %d roster members (%s-%s)",
        len(filtered),
        len(publications),
        len(members),
        year_min,
        year_max,
    )
    return filtered


def headcount(roster: pd.DataFrame, full_time_only: bool = True) -> int:
    """
    Count roster members, optionally only full-time appointments.

    The count may be zero; ``per_capita_scale`` turns it into a safe denominator.
    """
    if not full_time_only:
        return int(len(roster))
    return int(
        roster["appointment_type"]
        .fillna("")
        .astype(str)
        .apply(lambda appointment: bool(FULL_TIME_PATTERN.match(appointment)))
        .sum()
    )


def per_capita_scale(count: int) -> int:
    """Denominator for per-capita rates; a zero headcount falls back to raw counts."""
    if count > 0:
        return count
    logger.warning(
        "Headcount is zero, per-capita values fall back to %s", EMPTY_HEADCOUNT_POLICY
    )
    return 1
