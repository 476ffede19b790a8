"""
Pipeline embedding the authors of two institutions by research topic.
"""

from .pipeline import create_pipeline

__all__ = ["create_pipeline"]
