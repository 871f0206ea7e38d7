"""
swatchkit Imaging Utilities
Decoder/resizer collaborator: turns encoded bytes into RGBA pixel buffers and
applies the downscale rule that bounds sampling cost.
"""
import io
from typing import Optional, Tuple

import cv2
import numpy as np
from loguru import logger
from PIL import Image

from swatchkit.config import config
from swatchkit.errors import InputUnavailableError, PreconditionError
from swatchkit.schemas import PixelBuffer


def scaled_dimensions(width: int, height: int, max_dimension: int) -> Tuple[int, int]:
    """
    Compute the sampling size for an image.

    Landscape images wider than ``max_dimension`` are scaled so their width
    equals it; any other image taller than ``max_dimension`` is scaled so its
    height equals it. The other side keeps the aspect ratio and is truncated
    to a whole pixel (never below 1).

    Args:
        width: Source width in pixels
        height: Source height in pixels
        max_dimension: Longest side allowed

    Returns:
        Tuple of (width, height)
    """
    if width <= 0 or height <= 0:
        raise PreconditionError(f"Image dimensions must be positive, got {width}x{height}")
    if not config.validate_max_sample_dimension(max_dimension):
        raise PreconditionError(f"max_dimension must be >= 1, got {max_dimension}")

    if width > height and width > max_dimension:
        new_height = max(1, int(height * max_dimension / width))
        return max_dimension, new_height
    if height > max_dimension:
        new_width = max(1, int(width * max_dimension / height))
        return new_width, max_dimension
    return width, height


def resize_buffer(buffer: PixelBuffer, max_dimension: Optional[int] = None) -> PixelBuffer:
    """
    Downscale a buffer so its longest side is at most ``max_dimension``.

    Args:
        buffer: Decoded RGBA buffer
        max_dimension: Longest side allowed (default from config)

    Returns:
        The same buffer when already within bounds, otherwise a resized copy
    """
    if max_dimension is None:
        max_dimension = config.MAX_SAMPLE_DIMENSION

    new_width, new_height = scaled_dimensions(buffer.width, buffer.height, max_dimension)
    if (new_width, new_height) == (buffer.width, buffer.height):
        return buffer

    # INTER_AREA for downscaling (better quality)
    resized = cv2.resize(buffer.as_array(), (new_width, new_height), interpolation=cv2.INTER_AREA)
    logger.debug(f"Resized buffer {buffer.width}x{buffer.height} -> {new_width}x{new_height}")

    return PixelBuffer.from_array(resized)


def decode_image_bytes(image_bytes: bytes) -> PixelBuffer:
    """
    Decode encoded image bytes (PNG, JPEG, ...) into an RGBA buffer.

    Args:
        image_bytes: Raw encoded image bytes

    Returns:
        Full-resolution RGBA buffer

    Raises:
        InputUnavailableError: If the bytes cannot be decoded
    """
    if not image_bytes:
        raise InputUnavailableError("Could not load image: no data")

    try:
        pil_image = Image.open(io.BytesIO(image_bytes))
        if pil_image.mode != 'RGBA':
            pil_image = pil_image.convert('RGBA')
        rgba = np.array(pil_image, dtype=np.uint8)
    except Exception as e:
        raise InputUnavailableError(f"Could not load image: {str(e)}") from e

    return PixelBuffer.from_array(rgba)
