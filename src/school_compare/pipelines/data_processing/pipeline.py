"""
Data Processing Pipeline

Normalises both institutions' roster and publication exports and scopes the
publications to each roster and the configured year window.

Command Line Examples:
    Run the complete pipeline:
    ```
    kedro run --pipeline data_processing
    ```

    Only normalise the raw exports:
    ```
    kedro run --pipeline data_processing --tags normalisation
    ```
"""

from functools import partial

from kedro.pipeline import Pipeline, node, pipeline
from .nodes import (
    normalize_institution_roster,
    normalize_institution_publications,
    filter_publications,
    compute_denominators,
)


def _institution_pipeline(side: str) -> Pipeline:
    """Nodes normalising and filtering one institution's exports."""
    key = f"school_{side.lower()}"
    normalize_roster_node = partial(normalize_institution_roster, institution=side)

    normalisation = pipeline(
        [
            node(
                func=normalize_roster_node,
                inputs={
                    "raw_roster": f"{key}.roster.raw",
                    "columns": "params:compare.columns.roster",
                },
                outputs=f"{key}.roster.primary",
                name=f"normalize_roster_{key}",
            ),
            node(
                func=normalize_institution_publications,
                inputs={
                    "raw_publications": f"{key}.dedup.raw",
                    "columns": "params:compare.columns.publications",
                },
                outputs=f"{key}.publications.intermediate",
                name=f"normalize_publications_{key}",
            ),
            node(
                func=normalize_institution_publications,
                inputs={
                    "raw_publications": f"{key}.per_author.raw",
                    "columns": "params:compare.columns.publications",
                },
                outputs=f"{key}.per_author_publications.intermediate",
                name=f"normalize_per_author_publications_{key}",
            ),
        ],
        tags="normalisation",
    )

    filtering = pipeline(
        [
            node(
                func=filter_publications,
                inputs={
                    "publications": f"{key}.publications.intermediate",
                    "roster": f"{key}.roster.primary",
                    "window": "params:compare.defaults",
                    "options": "params:compare.options",
                },
                outputs=f"{key}.publications.primary",
                name=f"filter_publications_{key}",
            ),
        ],
        tags="filtering",
    )
    return normalisation + filtering


def create_pipeline(**kwargs) -> Pipeline:  # pylint: disable=W0613
    """
    Create the data processing pipeline.

    For each institution the pipeline:
    1. Normalises the roster into one record per canonical author id
    2. Normalises the deduplicated and per-author publication exports
    3. Filters the deduplicated publications to the roster and year window

    It then derives the headcount denominators used by per-capita views.

    Returns:
        Pipeline: The data processing pipeline.
    """
    denominators = pipeline(
        [
            node(
                func=compute_denominators,
                inputs={
                    "roster_a": "school_a.roster.primary",
                    "roster_b": "school_b.roster.primary",
                    "options": "params:compare.options",
                },
                outputs="analysis.denominators",
                name="compute_denominators",
            ),
        ],
        tags="filtering",
    )
    return _institution_pipeline("A") + _institution_pipeline("B") + denominators
