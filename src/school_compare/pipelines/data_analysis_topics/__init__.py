"""
Pipeline comparing the topic vocabularies and publication trends of two institutions.
"""

from .pipeline import create_pipeline

__all__ = ["create_pipeline"]
