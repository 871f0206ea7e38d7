"""
K-means clustering of color samples.

Lloyd's algorithm with Euclidean distance in RGB space. Initial centroids are
the first k samples of a random permutation, so results vary between runs
unless a seeded random source is supplied.
"""
from dataclasses import dataclass
from typing import Optional, Protocol

import numpy as np
from loguru import logger

from swatchkit.config import config
from swatchkit.errors import PreconditionError


class PermutationSource(Protocol):
    """Anything that can produce a random permutation of range(n)."""

    def permutation(self, n: int) -> np.ndarray: ...


@dataclass
class KMeansResult:
    """Final state of one k-means run."""
    centroids: np.ndarray  # (k, 3) float64
    labels: np.ndarray  # (N,) cluster index per sample, from the last assignment
    iterations: int
    converged: bool


def assign_clusters(samples: np.ndarray, centroids: np.ndarray) -> np.ndarray:
    """
    Assign every sample to its nearest centroid.

    Squared distances are compared; equidistant centroids resolve to the
    lowest index (argmin returns the first minimum).
    """
    deltas = samples[:, np.newaxis, :] - centroids[np.newaxis, :, :]
    distances = np.einsum("nkc,nkc->nk", deltas, deltas)
    return np.argmin(distances, axis=1)


def update_centroids(samples: np.ndarray, labels: np.ndarray, centroids: np.ndarray) -> np.ndarray:
    """
    Move each centroid to the mean of its assigned samples.

    A centroid whose cluster is empty keeps its previous value.
    """
    k = len(centroids)
    counts = np.bincount(labels, minlength=k)
    sums = np.zeros_like(centroids)
    np.add.at(sums, labels, samples)

    updated = centroids.copy()
    non_empty = counts > 0
    updated[non_empty] = sums[non_empty] / counts[non_empty][:, np.newaxis]
    return updated


def has_converged(centroids: np.ndarray, previous: Optional[np.ndarray],
                  threshold: float = 1.0) -> bool:
    """True when no channel of any centroid moved by ``threshold`` or more."""
    if previous is None or previous.shape != centroids.shape:
        return False
    return bool(np.all(np.abs(centroids - previous) < threshold))


def run_kmeans(samples: np.ndarray, k: int, max_iterations: Optional[int] = None,
               rng: Optional[PermutationSource] = None) -> KMeansResult:
    """
    Cluster color samples into ``k`` groups.

    Args:
        samples: RGB samples (N, 3), N >= k
        k: Number of clusters
        max_iterations: Iteration cap (default from config)
        rng: Random source used to pick initial centroids; an unseeded
            ``numpy.random.Generator`` when omitted

    Returns:
        KMeansResult with exactly ``k`` centroids

    Raises:
        PreconditionError: If k < 1, the cap is < 1 or there are fewer than k samples
    """
    if max_iterations is None:
        max_iterations = config.MAX_ITERATIONS
    if k < 1:
        raise PreconditionError(f"k must be >= 1, got {k}")
    if not config.validate_max_iterations(max_iterations):
        raise PreconditionError(f"max_iterations must be >= 1, got {max_iterations}")

    samples_f = np.asarray(samples, dtype=np.float64).reshape(-1, 3)
    n_samples = len(samples_f)
    if n_samples < k:
        raise PreconditionError(f"Insufficient samples for clustering: {n_samples} < {k}")

    if rng is None:
        rng = np.random.default_rng()

    order = np.asarray(rng.permutation(n_samples))
    centroids = samples_f[order[:k]].copy()
    previous = None
    labels = np.zeros(n_samples, dtype=np.intp)
    iterations = 0

    logger.debug(f"Starting k-means with k={k}, {n_samples} samples, max_iterations={max_iterations}")

    while iterations < max_iterations and not has_converged(
        centroids, previous, config.CONVERGENCE_THRESHOLD
    ):
        labels = assign_clusters(samples_f, centroids)
        previous = centroids
        centroids = update_centroids(samples_f, labels, centroids)
        iterations += 1

    converged = has_converged(centroids, previous, config.CONVERGENCE_THRESHOLD)
    logger.debug(f"K-means finished after {iterations} iterations (converged={converged})")

    return KMeansResult(
        centroids=centroids,
        labels=labels,
        iterations=iterations,
        converged=converged
    )


def cluster(samples: np.ndarray, k: int, max_iterations: Optional[int] = None,
            rng: Optional[PermutationSource] = None) -> np.ndarray:
    """Return the ``k`` centroid colors (k, 3) float64 found by k-means."""
    return run_kmeans(samples, k, max_iterations=max_iterations, rng=rng).centroids
