"""Term statistics utilities."""

from .term_statistics import (
    compute_enrichment,
    overlap,
    publications_by_year,
    shared_terms,
    term_document_frequency,
    top_distinct,
    top_terms,
)
