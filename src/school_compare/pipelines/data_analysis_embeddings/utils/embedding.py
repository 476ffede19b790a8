"""
Utility functions for embedding authors in two dimensions by research topic.

Each author is described by the set of topic (or concept) terms of their
publications inside the analysis window. Two projections are available:

- ``pca``: the binary authors x terms matrix is column-centred and projected on its
  two leading principal directions
- ``mds``: classical multidimensional scaling of the pairwise Jaccard distances

Both use the power iteration in ``power_iteration.py`` with a seedable generator,
so a fixed seed reproduces the same layout. Below three authors, or without any
term, no embedding is produced and an ``InsufficientData`` result is returned.
"""

# pylint: disable=E0402

import logging
from dataclasses import dataclass
from typing import Dict, Iterable, Optional, Union

import numpy as np
import pandas as pd
from scipy.spatial.distance import pdist, squareform

from ...data_processing.utils.filtering import filter_to_roster, roster_ids
from ...data_analysis_topics.utils.term_statistics import term_column
from .power_iteration import power_iteration

logger = logging.getLogger(__name__)

METHODS = ("pca", "mds")
DEFAULT_ITERATIONS = {"pca": 25, "mds": 120}
MIN_AUTHORS = 3

POINT_COLUMNS = ["author_id", "display_name", "x", "y", "institution"]


@dataclass(frozen=True)
class EmbeddingResult:
    """Coordinates of every embedded author, one row per author and institution."""

    points: pd.DataFrame
    n_terms: int
    method: str
    n_a: int
    n_b: int


@dataclass(frozen=True)
class InsufficientData:
    """Returned instead of an embedding when the input cannot support one."""

    reason: str
    n_authors: int


def author_terms(
    publications: pd.DataFrame,
    roster: pd.DataFrame,
    source: str,
    year_min: int,
    year_max: int,
    allowed_types: Optional[Iterable[str]] = None,
) -> Dict[str, set]:
    """
    Collect the terms of every roster member's publications in the window.

    Args:
        publications (pd.DataFrame): Normalised publications, per author or
            deduplicated.
        roster (pd.DataFrame): Normalised roster; only its members get an entry.
        source (str): "topics" or "concepts".
        year_min (int): First year of the window, inclusive.
        year_max (int): Last year of the window, inclusive.
        allowed_types (Iterable[str], optional): Publication types to keep.

    Returns:
        Dict[str, set]: Author id -> terms, in first-seen author order. Authors whose
            publications carry no terms map to an empty set.
    """
    column = term_column(source)
    members = roster_ids(roster)
    scoped = filter_to_roster(publications, roster, year_min, year_max, allowed_types)

    terms: Dict[str, set] = {}
    for author_ids, publication_terms in zip(scoped["author_ids"], scoped[column]):
        for id_ in author_ids:
            if id_ in members:
                terms.setdefault(id_, set()).update(publication_terms)
    return terms


def _pca(matrix: np.ndarray, n_iter: int, rng: np.random.Generator) -> np.ndarray:
    centred = matrix - matrix.mean(axis=0)
    vectors, _ = power_iteration(
        lambda v: centred @ (centred.T @ v), len(centred), 2, n_iter, rng
    )
    return vectors.T


def _mds(matrix: np.ndarray, n_iter: int, rng: np.random.Generator) -> np.ndarray:
    n = len(matrix)
    distances = squareform(pdist(matrix.astype(bool), "jaccard"))
    # Two authors without terms are as far apart as two disjoint term sets.
    empty = ~matrix.astype(bool).any(axis=1)
    distances[np.ix_(empty, empty)] = 1.0
    np.fill_diagonal(distances, 0.0)
    centring = np.eye(n) - np.full((n, n), 1.0 / n)
    gram = -0.5 * centring @ (distances**2) @ centring
    vectors, values = power_iteration(lambda v: gram @ v, n, 2, n_iter, rng)
    return vectors.T * np.sqrt(np.maximum(values, 0))


def _display_names(*rosters: pd.DataFrame) -> Dict[str, str]:
    names: Dict[str, str] = {}
    for roster in rosters:
        for id_, name in zip(roster["id"], roster["display_name"]):
            names.setdefault(id_, name or id_)
    return names


def compute_embedding(
    authors_a: Dict[str, set],
    authors_b: Dict[str, set],
    roster_a: pd.DataFrame,
    roster_b: pd.DataFrame,
    method: str = "pca",
    seed: Optional[int] = None,
    n_iter: Optional[int] = None,
) -> Union[EmbeddingResult, InsufficientData]:
    """
    Embed the authors of both institutions in two dimensions.

    An author on both rosters yields one point per institution, each built from
    that institution's term set.

    Args:
        authors_a (Dict[str, set]): Author terms of institution A (``author_terms``).
        authors_b (Dict[str, set]): Author terms of institution B.
        roster_a (pd.DataFrame): Roster of institution A, used for display names.
        roster_b (pd.DataFrame): Roster of institution B.
        method (str): "pca" or "mds".
        seed (int, optional): Seed of the random start vectors.
        n_iter (int, optional): Power iterations; defaults to 25 for PCA and 120
            for MDS.

    Returns:
        Union[EmbeddingResult, InsufficientData]: The embedding, or the reason none
            could be computed.
    """
    if method not in METHODS:
        raise ValueError(f"Unknown embedding method '{method}', expected one of {METHODS}")

    entries = [(id_, "A", terms) for id_, terms in authors_a.items()]
    entries += [(id_, "B", terms) for id_, terms in authors_b.items()]
    if len(entries) < MIN_AUTHORS:
        logger.warning(
            "Too few authors to embed: %d (need %d)", len(entries), MIN_AUTHORS
        )
        return InsufficientData("too_few_authors", len(entries))

    vocabulary = sorted(set().union(*(terms for _, _, terms in entries)))
    if not vocabulary:
        logger.warning("No terms to embed %d authors with", len(entries))
        return InsufficientData("empty_vocabulary", len(entries))

    index = {term: position for position, term in enumerate(vocabulary)}
    matrix = np.zeros((len(entries), len(vocabulary)))
    for row, (_, _, terms) in enumerate(entries):
        matrix[row, [index[term] for term in terms]] = 1.0

    rng = np.random.default_rng(seed)
    n_iter = n_iter or DEFAULT_ITERATIONS[method]
    coordinates = (_pca if method == "pca" else _mds)(matrix, n_iter, rng)

    names = _display_names(roster_a, roster_b)
    points = pd.DataFrame(
        {
            "author_id": [id_ for id_, _, _ in entries],
            "display_name": [names.get(id_, id_) for id_, _, _ in entries],
            "x": coordinates[:, 0],
            "y": coordinates[:, 1],
            "institution": [side for _, side, _ in entries],
        },
        columns=POINT_COLUMNS,
    )
    logger.info(
        "Embedded %d authors (A=%d, B=%d) over %d terms with %s",
        len(points),
        len(authors_a),
        len(authors_b),
        len(vocabulary),
        method,
    )
    return EmbeddingResult(
        points=points,
        n_terms=len(vocabulary),
        method=method,
        n_a=len(authors_a),
        n_b=len(authors_b),
    )
