"""
Pipeline detecting co-authored works and author pairs across two institutions.
"""

from .pipeline import create_pipeline

__all__ = ["create_pipeline"]
