"""
Topic Comparison Pipeline

Compares the research topics of the two institutions and builds the per-capita
publication trend.

Command Line Examples:
    Run the complete pipeline:
    ```
    kedro run --pipeline data_analysis_topics
    ```

    Only rebuild the publication trend:
    ```
    kedro run --pipeline data_analysis_topics --tags trends
    ```
"""

from kedro.pipeline import Pipeline, node, pipeline
from .nodes import (
    compute_term_frequencies,
    compute_topic_comparison,
    compute_publications_by_year,
)


def create_pipeline(**kwargs) -> Pipeline:  # pylint: disable=W0613
    """
    Create the topic comparison pipeline.

    Returns:
        Pipeline: A Kedro pipeline containing nodes for:
            - Document frequencies of topics or concepts per institution
            - Overlap, enrichment and distinctive terms
            - Publications per year, raw and per capita
    """
    topics = pipeline(
        [
            node(
                func=compute_term_frequencies,
                inputs={
                    "publications_a": "school_a.publications.primary",
                    "publications_b": "school_b.publications.primary",
                    "options": "params:compare.options",
                },
                outputs={
                    "a": "analysis.topics.frequency_a",
                    "b": "analysis.topics.frequency_b",
                },
                name="compute_term_frequencies",
            ),
            node(
                func=compute_topic_comparison,
                inputs={
                    "frequency_a": "analysis.topics.frequency_a",
                    "frequency_b": "analysis.topics.frequency_b",
                    "denominators": "analysis.denominators",
                    "params": "params:compare.topics",
                },
                outputs={
                    "enrichment": "analysis.topics.enrichment",
                    "distinct_a": "analysis.topics.distinct_a",
                    "distinct_b": "analysis.topics.distinct_b",
                    "shared": "analysis.topics.shared",
                    "summary": "analysis.topics.summary",
                },
                name="compute_topic_comparison",
            ),
        ],
        tags="topics",
    )

    trends = pipeline(
        [
            node(
                func=compute_publications_by_year,
                inputs={
                    "publications_a": "school_a.publications.primary",
                    "publications_b": "school_b.publications.primary",
                    "window": "params:compare.defaults",
                    "denominators": "analysis.denominators",
                },
                outputs="analysis.publications_by_year",
                name="compute_publications_by_year",
            ),
        ],
        tags="trends",
    )

    return topics + trends
