"""
Pipeline normalising roster and publication exports and scoping them to rosters.
"""

from .pipeline import create_pipeline

__all__ = ["create_pipeline"]
