"""
Pixel sampling for palette extraction.

Reduces a decoded RGBA buffer to the distinct, fully opaque RGB colors it
contains so that clustering cost depends on color variety, not pixel count.
"""
import numpy as np
from loguru import logger

from swatchkit.config import config
from swatchkit.schemas import PixelBuffer


def opaque_pixels(rgba: np.ndarray) -> np.ndarray:
    """Return the RGB channels of fully opaque pixels in row-major order."""
    flat = rgba.reshape(-1, 4)
    keep_mask = flat[:, 3] >= config.OPAQUE_ALPHA
    return flat[keep_mask, :3]


def unique_in_order(pixels_rgb: np.ndarray) -> np.ndarray:
    """Drop duplicate RGB triples, keeping the first occurrence of each."""
    if len(pixels_rgb) == 0:
        return np.empty((0, 3), dtype=np.uint8)

    _, first_index = np.unique(pixels_rgb, axis=0, return_index=True)
    return pixels_rgb[np.sort(first_index)]


def sample_pixels(buffer: PixelBuffer) -> np.ndarray:
    """
    Sample the distinct opaque colors of an image.

    Pixels with alpha below 255 are dropped entirely, never blended. The
    buffer is expected to be already resized; no resampling happens here.

    Args:
        buffer: Decoded RGBA buffer

    Returns:
        Distinct RGB samples (N, 3) uint8, empty when every pixel is transparent
    """
    rgba = buffer.as_array()
    pixels_rgb = opaque_pixels(rgba)
    samples = unique_in_order(pixels_rgb)

    logger.debug(
        f"Sampled {buffer.width}x{buffer.height}: {len(pixels_rgb)} opaque pixels, "
        f"{len(samples)} distinct colors"
    )
    return samples
