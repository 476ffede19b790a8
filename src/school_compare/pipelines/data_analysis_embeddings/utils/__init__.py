"""Author embedding and highlighting utilities."""

from .embedding import EmbeddingResult, InsufficientData, author_terms, compute_embedding
from .highlight import highlight
from .power_iteration import power_iteration
