"""
Test configuration and fixtures for swatchkit tests.
"""
import numpy as np
import pytest

from swatchkit.schemas import PixelBuffer


class FixedOrder:
    """Permutation source that never shuffles: centroids start at samples[:k]."""

    def __init__(self):
        self.calls = []

    def permutation(self, n):
        self.calls.append(n)
        return np.arange(n)


@pytest.fixture(autouse=True)
def reset_metrics():
    """Reset metrics before each test."""
    from swatchkit.utils.metrics import reset_metrics
    reset_metrics()


@pytest.fixture
def fixed_order():
    """Deterministic, non-shuffling random source."""
    return FixedOrder()


@pytest.fixture
def make_buffer():
    """Build a PixelBuffer from a row-major list of RGBA tuples."""
    def _make(pixels, width, height):
        rgba = np.array(pixels, dtype=np.uint8).reshape(height, width, 4)
        return PixelBuffer.from_array(rgba)
    return _make


@pytest.fixture
def solid_buffer():
    """Build a PixelBuffer filled with a single RGBA value."""
    def _make(width, height, rgba=(255, 0, 0, 255)):
        img = np.empty((height, width, 4), dtype=np.uint8)
        img[:, :] = rgba
        return PixelBuffer.from_array(img)
    return _make


@pytest.fixture
def gradient_buffer():
    """16x16 opaque image where every pixel is a distinct color."""
    ys, xs = np.mgrid[0:16, 0:16]
    img = np.zeros((16, 16, 4), dtype=np.uint8)
    img[..., 0] = xs * 16
    img[..., 1] = ys * 16
    img[..., 2] = 255 - xs * 8
    img[..., 3] = 255
    return PixelBuffer.from_array(img)


@pytest.fixture
def swatchkit_logs():
    """Enable swatchkit log records and capture them in a list."""
    from loguru import logger
    records = []
    logger.enable("swatchkit")
    handler_id = logger.add(lambda message: records.append(message.record), level="DEBUG")
    yield records
    logger.remove(handler_id)
    logger.disable("swatchkit")
