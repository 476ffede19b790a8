"""
Utility functions for detecting cross-institution collaborations.

A work is cross-institutional when at least one of its authors is on institution
A's roster and at least one is on institution B's roster. The same work usually
appears in both institutions' exports, so rows are grouped by their synthetic work
id first and the roster members seen across all rows of a work are unioned. Each
work then contributes at most one increment to any author pair, whichever export
(or both) it came from.

The module provides:
- build_cross_institution_graph: weighted author pairs, nodes and joint works
- joint_publications: the joint works behind one pair
- summarize_top_pairs: short text summary of the most frequent pairs
"""

# pylint: disable=E0402

import logging
from itertools import chain
from typing import Dict, Hashable, Tuple

import pandas as pd

from ...data_processing.utils.filtering import roster_ids

logger = logging.getLogger(__name__)

PAIR_COLUMNS = ["author_a", "author_b", "joint_publication_count"]
NODE_COLUMNS = ["id", "display_name", "institution", "degree"]
WORK_COLUMNS = [
    "work_id",
    "year",
    "type",
    "title",
    "doi",
    "cited_by_count",
    "a_ids",
    "b_ids",
]


def _group_works(
    pubs_a: pd.DataFrame, pubs_b: pd.DataFrame, ids_a: set, ids_b: set
) -> Dict[Hashable, dict]:
    """Union the roster members of every work across both exports.

    Rows without a work key cannot be matched to any other row and form their own
    group.
    """
    groups: Dict[Hashable, dict] = {}
    rows = chain(pubs_a.to_dict("records"), pubs_b.to_dict("records"))
    for position, record in enumerate(rows):
        key = ("work", record["work_id"]) if record["work_id"] else ("row", position)
        group = groups.setdefault(key, {"record": record, "a_ids": {}, "b_ids": {}})
        for id_ in record["author_ids"]:
            if id_ in ids_a:
                group["a_ids"][id_] = None
            if id_ in ids_b:
                group["b_ids"][id_] = None
    return groups


def _work_pairs(group: dict) -> Dict[Tuple[str, str], Tuple[str, str]]:
    """Unordered cross pairs of one work, mapped to their first-seen orientation."""
    pairs: Dict[Tuple[str, str], Tuple[str, str]] = {}
    for author_a in group["a_ids"]:
        for author_b in group["b_ids"]:
            if author_a == author_b:
                continue
            pairs.setdefault(tuple(sorted((author_a, author_b))), (author_a, author_b))
    return pairs


def _display_names(*rosters: pd.DataFrame) -> Dict[str, str]:
    names: Dict[str, str] = {}
    for roster in rosters:
        for id_, name in zip(roster["id"], roster["display_name"]):
            names.setdefault(id_, name or id_)
    return names


def _weighted_nodes(pairs: pd.DataFrame, names: Dict[str, str]) -> pd.DataFrame:
    """Authors of the pairs with their weighted degree.

    An author's side is the one of their first incidence in the sorted pair list.
    """
    if pairs.empty:
        return pd.DataFrame(columns=NODE_COLUMNS)
    endpoints = pd.concat(
        [
            pd.DataFrame(
                {
                    "id": pairs[column],
                    "institution": side,
                    "degree": pairs["joint_publication_count"],
                    "order": pairs.index * 2 + offset,
                }
            )
            for offset, (column, side) in enumerate(
                (("author_a", "A"), ("author_b", "B"))
            )
        ],
        ignore_index=True,
    ).sort_values("order", kind="stable")
    nodes = (
        endpoints.groupby("id", sort=False)
        .agg(institution=("institution", "first"), degree=("degree", "sum"))
        .reset_index()
    )
    nodes["display_name"] = nodes["id"].map(lambda id_: names.get(id_, id_))
    return nodes[NODE_COLUMNS]


def build_cross_institution_graph(
    pubs_a: pd.DataFrame,
    pubs_b: pd.DataFrame,
    roster_a: pd.DataFrame,
    roster_b: pd.DataFrame,
) -> Dict[str, pd.DataFrame]:
    """
    Build the weighted co-authorship graph between two institutions.

    A work is cross-institutional when its unioned A and B author sets are both
    non-empty. Every unordered pair of distinct authors (one on roster A, one on
    roster B) that shares a work gains one increment per work. An author listed on
    both rosters never pairs with themself, so their solo works count as joint works
    without adding a pair. Nodes are the authors taking part in at least one pair;
    isolated authors are left out.

    Args:
        pubs_a (pd.DataFrame): Institution A's roster-filtered publications.
        pubs_b (pd.DataFrame): Institution B's roster-filtered publications.
        roster_a (pd.DataFrame): Institution A's normalised roster.
        roster_b (pd.DataFrame): Institution B's normalised roster.

    Returns:
        Dict[str, pd.DataFrame]: With keys:
            - pairs: author_a, author_b, joint_publication_count; sorted by count
              descending, ties in first-seen order
            - nodes: id, display_name, institution, degree (weighted)
            - works: the cross-institutional works with their A and B authors
    """
    ids_a = roster_ids(roster_a)
    ids_b = roster_ids(roster_b)
    groups = _group_works(pubs_a, pubs_b, ids_a, ids_b)

    pairs: Dict[Tuple[str, str], dict] = {}
    works = []
    for group in groups.values():
        if not (group["a_ids"] and group["b_ids"]):
            continue
        record = group["record"]
        works.append(
            {
                "work_id": record["work_id"],
                "year": record["year"],
                "type": record["type"],
                "title": record["title"],
                "doi": record["doi"],
                "cited_by_count": record["cited_by_count"],
                "a_ids": list(group["a_ids"]),
                "b_ids": list(group["b_ids"]),
            }
        )
        for key, (author_a, author_b) in _work_pairs(group).items():
            pair = pairs.setdefault(
                key,
                {"author_a": author_a, "author_b": author_b, "joint_publication_count": 0},
            )
            pair["joint_publication_count"] += 1

    pairs_df = pd.DataFrame(list(pairs.values()), columns=PAIR_COLUMNS).sort_values(
        "joint_publication_count", ascending=False, kind="stable"
    ).reset_index(drop=True)
    nodes = _weighted_nodes(pairs_df, _display_names(roster_a, roster_b))

    logger.info(
        "Found %d cross-institution works, %d author pairs and %d authors",
        len(works),
        len(pairs_df),
        len(nodes),
    )
    return {
        "pairs": pairs_df,
        "nodes": nodes,
        "works": pd.DataFrame(works, columns=WORK_COLUMNS),
    }


def joint_publications(works: pd.DataFrame, author_a: str, author_b: str) -> pd.DataFrame:
    """
    List the cross-institution works shared by one pair, newest and most cited first.

    The pair is unordered: either author may sit on either side.
    """
    if works.empty:
        return works.copy()
    mask = works.apply(
        lambda work: (author_a in work["a_ids"] and author_b in work["b_ids"])
        or (author_b in work["a_ids"] and author_a in work["b_ids"]),
        axis=1,
    )
    return works[mask].sort_values(
        ["year", "cited_by_count"], ascending=False, kind="stable"
    ).reset_index(drop=True)


def summarize_top_pairs(
    pairs: pd.DataFrame,
    roster_a: pd.DataFrame,
    roster_b: pd.DataFrame,
    top_n: int = 8,
) -> str:
    """Render the most frequent pairs as ``"Name A ↔ Name B (n)"``, joined by ``"; "``."""
    if pairs.empty:
        return "—"
    names = _display_names(roster_a, roster_b)
    return "; ".join(
        f"{names.get(row.author_a, row.author_a)} ↔ "
        f"{names.get(row.author_b, row.author_b)} ({row.joint_publication_count})"
        for row in pairs.head(top_n).itertuples(index=False)
    )
