"""
Author Embedding Pipeline

Places the authors of both institutions in a two-dimensional map according to the
topics (or concepts) they publish on.

Command Line Examples:
    Run the complete pipeline:
    ```
    kedro run --pipeline data_analysis_embeddings
    ```

    Use classical MDS instead of PCA:
    ```
    kedro run --pipeline data_analysis_embeddings --params compare.embedding.method=mds
    ```
"""

from kedro.pipeline import Pipeline, node, pipeline
from .nodes import build_author_terms, compute_author_embedding


def create_pipeline(**kwargs) -> Pipeline:  # pylint: disable=W0613
    """
    Create the author embedding pipeline.

    Returns:
        Pipeline: A Kedro pipeline containing nodes for:
            - Collecting each roster member's terms, per institution
            - Projecting the authors with PCA or classical MDS
    """
    author_terms_pipeline = pipeline(
        [
            node(
                func=build_author_terms,
                inputs={
                    "per_author_publications": f"{key}.per_author_publications.intermediate",
                    "publications": f"{key}.publications.intermediate",
                    "roster": f"{key}.roster.primary",
                    "window": "params:compare.defaults",
                    "options": "params:compare.options",
                },
                outputs=f"analysis.embedding.author_terms_{side}",
                name=f"build_author_terms_{key}",
            )
            for key, side in (("school_a", "a"), ("school_b", "b"))
        ],
        tags="author_terms",
    )

    embedding_pipeline = pipeline(
        [
            node(
                func=compute_author_embedding,
                inputs={
                    "authors_a": "analysis.embedding.author_terms_a",
                    "authors_b": "analysis.embedding.author_terms_b",
                    "roster_a": "school_a.roster.primary",
                    "roster_b": "school_b.roster.primary",
                    "params": "params:compare.embedding",
                },
                outputs={
                    "points": "analysis.embedding.points",
                    "summary": "analysis.embedding.summary",
                },
                name="compute_author_embedding",
            ),
        ],
        tags="embedding",
    )

    return author_terms_pipeline + embedding_pipeline
