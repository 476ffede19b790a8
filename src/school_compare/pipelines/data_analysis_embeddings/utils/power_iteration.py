"""
Power iteration for the leading eigenvectors of a symmetric operator.

The operator is any callable computing ``A @ v``; it lets PCA iterate on
``M @ (M.T @ v)`` without building the authors x authors covariance. Vectors are
found one after another, each orthogonalised (Gram-Schmidt) against the previous
ones before and after every multiplication.
"""

import logging
from typing import Callable, Optional, Tuple

import numpy as np

logger = logging.getLogger(__name__)


def _orthogonalise(vector: np.ndarray, basis: list) -> np.ndarray:
    for previous in basis:
        vector = vector - np.dot(vector, previous) * previous
    return vector


def _normalise(vector: np.ndarray) -> np.ndarray:
    norm = np.linalg.norm(vector)
    if norm == 0:
        return vector
    return vector / norm


def power_iteration(
    operator: Callable[[np.ndarray], np.ndarray],
    size: int,
    n_components: int = 2,
    n_iter: int = 25,
    rng: Optional[np.random.Generator] = None,
) -> Tuple[np.ndarray, np.ndarray]:
    """
    Approximate the leading eigenvectors of a symmetric operator.

    Args:
        operator (Callable): Computes the operator applied to a vector of length ``size``.
        size (int): Dimension of the vectors.
        n_components (int): Number of eigenvectors to compute.
        n_iter (int): Multiplications per eigenvector.
        rng (np.random.Generator, optional): Source of the random start vectors.

    Returns:
        Tuple[np.ndarray, np.ndarray]: Unit eigenvectors of shape
            ``(n_components, size)`` and the Rayleigh quotients ``v . A v``. A vector
            collapsing to zero (e.g. a rank-deficient operator) stays zero with
            eigenvalue 0.
    """
    rng = rng if rng is not None else np.random.default_rng()
    basis = []
    for _ in range(n_components):
        vector = _normalise(_orthogonalise(rng.random(size), basis))
        for _ in range(n_iter):
            vector = _normalise(_orthogonalise(operator(vector), basis))
        basis.append(vector)

    vectors = np.vstack(basis) if basis else np.empty((0, size))
    values = np.array([np.dot(vector, operator(vector)) for vector in basis])
    logger.debug("Power iteration eigenvalues: %s", values)
    return vectors, values
