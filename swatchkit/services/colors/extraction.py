"""
Palette extraction pipeline.

This module sequences the extraction stages: resize to the sampling size,
sample distinct opaque colors, cluster them with k-means and format the
resulting centroids as hex strings.
"""
import time
from typing import List, Optional

from swatchkit.config import config
from swatchkit.errors import PreconditionError
from swatchkit.schemas import PaletteResult, PixelBuffer
from swatchkit.services.colors.clustering import PermutationSource, run_kmeans
from swatchkit.services.colors.formatting import rgb_to_hex
from swatchkit.services.colors.sampling import sample_pixels
from swatchkit.services.imaging import decode_image_bytes, resize_buffer
from swatchkit.utils.ids import generate_extraction_id
from swatchkit.utils.logging import get_logger
from swatchkit.utils.metrics import get_metrics, performance_monitor


def validate_extraction_params(k: int, max_sample_dimension: int, max_iterations: int) -> None:
    """Validate extraction parameters, failing fast on programming errors."""
    if not config.validate_palette_size(k):
        raise PreconditionError(f"k must be >= 1, got {k}")
    if not config.validate_max_sample_dimension(max_sample_dimension):
        raise PreconditionError(f"max_sample_dimension must be >= 1, got {max_sample_dimension}")
    if not config.validate_max_iterations(max_iterations):
        raise PreconditionError(f"max_iterations must be >= 1, got {max_iterations}")


def run_extraction(
    buffer: PixelBuffer,
    k: Optional[int] = None,
    max_sample_dimension: Optional[int] = None,
    max_iterations: Optional[int] = None,
    rng: Optional[PermutationSource] = None
) -> PaletteResult:
    """
    Extract a palette of at most ``k`` colors from a decoded image.

    When the image holds ``k`` or fewer distinct opaque colors they are
    returned directly in first-occurrence order and no clustering runs.
    Otherwise the ``k`` k-means centroids are returned in cluster order.
    Callers must not rely on either order as a ranking.

    Args:
        buffer: Decoded RGBA buffer at any resolution
        k: Number of colors requested (default from config)
        max_sample_dimension: Longest side sampled (default from config)
        max_iterations: K-means iteration cap (default from config)
        rng: Random source for centroid initialization

    Returns:
        PaletteResult with the colors and run metadata
    """
    k = config.PALETTE_SIZE if k is None else k
    if max_sample_dimension is None:
        max_sample_dimension = config.MAX_SAMPLE_DIMENSION
    if max_iterations is None:
        max_iterations = config.MAX_ITERATIONS
    validate_extraction_params(k, max_sample_dimension, max_iterations)

    metrics = get_metrics()
    extraction_id = generate_extraction_id()
    start_time = time.perf_counter()
    log = get_logger()
    log.info(
        f"Starting palette extraction {extraction_id}",
        extra={"extraction_id": extraction_id, "width": buffer.width,
               "height": buffer.height, "k": k}
    )

    try:
        # Stage 1: bound the sampled area
        with performance_monitor("resize", width=buffer.width, height=buffer.height):
            sampled = resize_buffer(buffer, max_sample_dimension)

        # Stage 2: distinct opaque colors
        with performance_monitor("sampling", width=sampled.width, height=sampled.height):
            samples = sample_pixels(sampled)
        metrics.record_sample_count(len(samples))

        iterations = 0
        converged = False
        clustered = len(samples) > k

        if not clustered:
            # Every color present is shown, none synthesized
            colors = [rgb_to_hex(sample) for sample in samples]
            metrics.increment_degenerate_count()
            if len(samples) == 0:
                metrics.increment_empty_count()
                log.warning(f"Extraction {extraction_id}: no opaque pixels",
                            extra={"extraction_id": extraction_id})
        else:
            # Stage 3: k-means
            with performance_monitor("clustering", sample_count=len(samples), k=k):
                result = run_kmeans(samples, k, max_iterations=max_iterations, rng=rng)
            iterations = result.iterations
            converged = result.converged
            metrics.increment_kmeans_outcome(converged)

            # Stage 4: hex formatting
            colors = [rgb_to_hex(centroid) for centroid in result.centroids]

    except Exception as e:
        metrics.increment_failure_count(type(e).__name__)
        log.error(f"Palette extraction {extraction_id} failed: {e}",
                  extra={"extraction_id": extraction_id, "error_type": type(e).__name__})
        raise

    duration_ms = (time.perf_counter() - start_time) * 1000
    metrics.increment_extraction_count()
    metrics.record_timing("extraction", duration_ms)

    log.info(
        f"Palette extraction {extraction_id} completed",
        extra={
            "extraction_id": extraction_id,
            "sample_count": len(samples),
            "clustered": clustered,
            "iterations": iterations,
            "converged": converged,
            "palette": colors,
            "duration_ms": round(duration_ms, 2)
        }
    )

    return PaletteResult(
        colors=colors,
        k=k,
        sample_count=len(samples),
        clustered=clustered,
        iterations=iterations,
        converged=converged,
        width=sampled.width,
        height=sampled.height,
        extraction_id=extraction_id,
        duration_ms=duration_ms
    )


def extract_palette(
    buffer: PixelBuffer,
    k: Optional[int] = None,
    max_sample_dimension: Optional[int] = None,
    max_iterations: Optional[int] = None,
    rng: Optional[PermutationSource] = None
) -> List[str]:
    """Extract at most ``k`` hex colors from a decoded image."""
    return run_extraction(
        buffer,
        k=k,
        max_sample_dimension=max_sample_dimension,
        max_iterations=max_iterations,
        rng=rng
    ).colors


def extract_palette_from_bytes(
    image_bytes: bytes,
    k: Optional[int] = None,
    max_sample_dimension: Optional[int] = None,
    max_iterations: Optional[int] = None,
    rng: Optional[PermutationSource] = None
) -> List[str]:
    """
    Decode encoded image bytes and extract their palette.

    Raises:
        InputUnavailableError: If the bytes cannot be decoded
    """
    buffer = decode_image_bytes(image_bytes)
    return extract_palette(
        buffer,
        k=k,
        max_sample_dimension=max_sample_dimension,
        max_iterations=max_iterations,
        rng=rng
    )
