"""
Name search over an embedding.

Highlighting produces a style overlay for the embedded points and never touches
their coordinates.
"""

# pylint: disable=E0402

from typing import Optional, Union

import pandas as pd

from .embedding import EmbeddingResult, InsufficientData

BASE_SIZE = 9
BASE_OPACITY = 0.55

OVERLAY_COLUMNS = ["author_id", "institution", "matched", "size", "opacity", "line_width"]


def highlight(
    embedding: Optional[Union[EmbeddingResult, InsufficientData]], query: str
) -> pd.DataFrame:
    """
    Style the embedded points against a name query.

    The query is trimmed and lowercased and matched as a substring of each lowercased
    display name. With an empty query every point keeps the base style; otherwise
    matches are enlarged and opaque and the other points are shrunk and faded.

    Args:
        embedding: The last embedding; anything but an ``EmbeddingResult`` yields an
            empty overlay.
        query (str): Name fragment to search for.

    Returns:
        pd.DataFrame: One style row per point, in the order of ``embedding.points``.
    """
    if not isinstance(embedding, EmbeddingResult):
        return pd.DataFrame(columns=OVERLAY_COLUMNS)

    points = embedding.points
    query = (query or "").strip().lower()
    overlay = points[["author_id", "institution"]].copy()

    if not query:
        overlay["matched"] = False
        overlay["size"] = float(BASE_SIZE)
        overlay["opacity"] = BASE_OPACITY
        overlay["line_width"] = 0.0
        return overlay[OVERLAY_COLUMNS]

    matched = (
        points["display_name"]
        .fillna("")
        .astype(str)
        .str.lower()
        .str.contains(query, regex=False)
    )
    overlay["matched"] = matched
    overlay["size"] = matched.map(
        {True: max(BASE_SIZE * 1.8, 14), False: max(BASE_SIZE * 0.8, 6)}
    ).astype(float)
    overlay["opacity"] = matched.map({True: 1.0, False: 0.15})
    overlay["line_width"] = matched.map({True: 2.5, False: 0.0})
    return overlay[OVERLAY_COLUMNS]
