"""
Cross-Institution Collaboration Pipeline

Detects the works co-authored by members of both institutions and aggregates them
into weighted author pairs.

Command Line Example:
    ```
    kedro run --pipeline data_analysis_collaboration
    ```
"""

from kedro.pipeline import Pipeline, node, pipeline
from .nodes import compute_cross_institution_graph, create_collaboration_summary


def create_pipeline(**kwargs) -> Pipeline:  # pylint: disable=W0613
    """Create the cross-institution collaboration pipeline.

    Returns:
        Pipeline: A Kedro pipeline containing nodes for:
            - Building the author pair graph from both filtered publication sets
            - Summarising the joint works and the most frequent pairs
    """
    return pipeline(
        [
            node(
                func=compute_cross_institution_graph,
                inputs={
                    "publications_a": "school_a.publications.primary",
                    "publications_b": "school_b.publications.primary",
                    "roster_a": "school_a.roster.primary",
                    "roster_b": "school_b.roster.primary",
                },
                outputs={
                    "pairs": "analysis.collaboration.pairs",
                    "nodes": "analysis.collaboration.nodes",
                    "works": "analysis.collaboration.works",
                },
                name="compute_cross_institution_graph",
            ),
            node(
                func=create_collaboration_summary,
                inputs={
                    "pairs": "analysis.collaboration.pairs",
                    "works": "analysis.collaboration.works",
                    "roster_a": "school_a.roster.primary",
                    "roster_b": "school_b.roster.primary",
                    "top_n": "params:compare.collaboration.top_pairs",
                },
                outputs="analysis.collaboration.summary",
                name="create_collaboration_summary",
            ),
        ],
        tags="collaboration",
    )
