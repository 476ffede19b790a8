"""Cross-institution graph utilities."""

from .graph import build_cross_institution_graph, joint_publications, summarize_top_pairs
