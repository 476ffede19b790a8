"""school-compare: side-by-side research output analytics for two institutions."""

__version__ = "0.1.0"
