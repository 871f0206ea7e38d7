"""
Integration tests for the palette extraction pipeline.
"""
import io
import re

import numpy as np
import pytest
from loguru import logger
from PIL import Image

from swatchkit.errors import InputUnavailableError, PreconditionError
from swatchkit.schemas import PixelBuffer
from swatchkit.services.colors import extraction
from swatchkit.services.colors.extraction import (
    extract_palette, extract_palette_from_bytes, run_extraction
)
from swatchkit.services.colors.formatting import hex_to_rgb
from swatchkit.utils.metrics import get_metrics

HEX_RE = re.compile(r"#[0-9A-F]{6}")


def color_hex_distance(hex1, hex2):
    """Calculate RGB distance between two hex colors"""
    rgb1 = np.array(hex_to_rgb(hex1))
    rgb2 = np.array(hex_to_rgb(hex2))
    return np.linalg.norm(rgb1 - rgb2)


@pytest.fixture
def red_blue_halves(make_buffer):
    """4x4 opaque image, left half red, right half blue"""
    red, blue = (255, 0, 0, 255), (0, 0, 255, 255)
    row = [red, red, blue, blue]
    return make_buffer(row * 4, width=4, height=4)


@pytest.fixture
def red_blue_shades():
    """Six shades of red and six of blue, each repeated over a 12x12 image"""
    img = np.zeros((12, 12, 4), dtype=np.uint8)
    img[..., 3] = 255
    for i in range(6):
        img[i, :6, 0] = 250 + i
        img[i, 6:, 2] = 250 + i
    img[6:, :6, 0] = 250
    img[6:, 6:, 2] = 250
    return PixelBuffer.from_array(img)


class TestDegeneratePath:
    """Test images with no more distinct colors than requested"""

    def test_two_colors_returned_directly(self, make_buffer, monkeypatch):
        """Distinct samples come back in first-occurrence order without clustering"""
        def fail_kmeans(*args, **kwargs):
            raise AssertionError("clustering must not run")
        monkeypatch.setattr(extraction, "run_kmeans", fail_kmeans)

        buffer = make_buffer([
            (10, 10, 10, 255), (20, 20, 20, 255), (0, 0, 0, 0),
            (20, 20, 20, 255), (10, 10, 10, 255), (99, 99, 99, 10),
        ], width=3, height=2)

        result = run_extraction(buffer, k=6)

        assert result.colors == ["#0A0A0A", "#141414"]
        assert not result.clustered
        assert result.iterations == 0
        assert result.sample_count == 2

    @pytest.mark.parametrize("k", [1, 6, 12])
    def test_fully_transparent_image(self, solid_buffer, k):
        """All alpha=0 pixels give an empty palette for any k"""
        assert extract_palette(solid_buffer(16, 16, (200, 100, 50, 0)), k=k) == []

    def test_samples_equal_to_k(self, make_buffer):
        buffer = make_buffer([(1, 1, 1, 255), (2, 2, 2, 255)], width=2, height=1)
        assert extract_palette(buffer, k=2) == ["#010101", "#020202"]

    def test_red_blue_halves(self, red_blue_halves):
        """Two flat halves with k=2 yield pure red and pure blue"""
        colors = extract_palette(red_blue_halves, k=2)
        assert sorted(colors) == ["#0000FF", "#FF0000"]


class TestClusteringPath:
    """Test images with more distinct colors than requested"""

    @pytest.mark.parametrize("seed", [0, 1, 2, 3])
    def test_red_and_blue_shades_separate(self, red_blue_shades, seed):
        """Shades collapse to one red and one blue swatch whatever the seed"""
        result = run_extraction(red_blue_shades, k=2, rng=np.random.default_rng(seed))

        assert result.clustered
        assert len(result.colors) == 2
        found_red = any(color_hex_distance(c, "#FF0000") < 10 for c in result.colors)
        found_blue = any(color_hex_distance(c, "#0000FF") < 10 for c in result.colors)
        assert found_red, f"Red color not found in {result.colors}"
        assert found_blue, f"Blue color not found in {result.colors}"

    def test_returns_k_colors(self, gradient_buffer):
        colors = extract_palette(gradient_buffer, k=6, rng=np.random.default_rng(5))

        assert len(colors) == 6
        assert all(HEX_RE.fullmatch(c) for c in colors)

    def test_default_palette_size(self, gradient_buffer):
        assert len(extract_palette(gradient_buffer)) == 6

    def test_fixed_order_is_deterministic(self, gradient_buffer, fixed_order):
        first = extract_palette(gradient_buffer, k=4, rng=fixed_order)
        second = extract_palette(gradient_buffer, k=4, rng=fixed_order)
        assert first == second

    def test_iteration_cap(self, gradient_buffer):
        result = run_extraction(gradient_buffer, k=8, max_iterations=2,
                                rng=np.random.default_rng(0))
        assert 1 <= result.iterations <= 2

    def test_large_image_downscaled_before_sampling(self):
        rng = np.random.default_rng(11)
        img = rng.integers(0, 256, size=(250, 500, 4), dtype=np.uint8)
        img[..., 3] = 255

        result = run_extraction(PixelBuffer.from_array(img), k=3, max_iterations=5)

        assert (result.width, result.height) == (200, 100)
        assert result.sample_count <= 200 * 100
        assert len(result.colors) == 3


class TestPreconditions:
    """Test fail-fast argument validation"""

    def test_k_zero(self, solid_buffer):
        with pytest.raises(PreconditionError):
            extract_palette(solid_buffer(2, 2), k=0)

    def test_k_above_sample_count(self, gradient_buffer, monkeypatch):
        """A k larger than the distinct colors returns every distinct color"""
        def fail_kmeans(*args, **kwargs):
            raise AssertionError("clustering must not run")
        monkeypatch.setattr(extraction, "run_kmeans", fail_kmeans)

        result = run_extraction(gradient_buffer, k=300)

        assert not result.clustered
        assert len(result.colors) == 256
        assert len(set(result.colors)) == 256
        assert result.colors[:2] == ["#0000FF", "#1000F7"]

    def test_bad_sample_dimension(self, solid_buffer):
        with pytest.raises(PreconditionError):
            extract_palette(solid_buffer(2, 2), max_sample_dimension=0)


class TestExtractFromBytes:
    """Test the decode-then-extract entry point"""

    def test_png_bytes(self):
        img = Image.new("RGBA", (6, 6), (0, 0, 0, 0))
        for x in range(3):
            for y in range(6):
                img.putpixel((x, y), (31, 78, 121, 255))
        out = io.BytesIO()
        img.save(out, format="PNG")

        assert extract_palette_from_bytes(out.getvalue(), k=6) == ["#1F4E79"]

    def test_unreadable_bytes(self):
        with pytest.raises(InputUnavailableError):
            extract_palette_from_bytes(b"\x00\x01garbage", k=6)


class TestExtractionMetrics:
    """Test metrics recorded by the pipeline"""

    def test_degenerate_and_empty_counters(self, solid_buffer):
        extract_palette(solid_buffer(4, 4, (1, 2, 3, 0)), k=3)
        extract_palette(solid_buffer(4, 4, (1, 2, 3, 255)), k=3)

        counters = get_metrics().get_counters()
        assert counters["extractions_total"] == 2
        assert counters["extractions_degenerate_total"] == 2
        assert counters["extractions_empty_total"] == 1

    def test_clustering_counters(self, gradient_buffer):
        extract_palette(gradient_buffer, k=3, rng=np.random.default_rng(0))

        counters = get_metrics().get_counters()
        kmeans_runs = counters.get("kmeans_converged_total", 0) + counters.get("kmeans_iteration_cap_total", 0)
        assert kmeans_runs == 1
        assert "extraction_duration_ms" in get_metrics().get_timing_stats()
        assert "clustering_duration_ms" in get_metrics().get_timing_stats()

    def test_failure_counter(self, solid_buffer, monkeypatch):
        def broken_sampler(buffer):
            raise RuntimeError("sampler exploded")
        monkeypatch.setattr(extraction, "sample_pixels", broken_sampler)

        with pytest.raises(RuntimeError):
            extract_palette(solid_buffer(2, 2), k=2)

        assert get_metrics().get_counters()["extraction_failed_total_RuntimeError"] == 1


class TestExtractionLogging:
    """Test log records emitted by the pipeline"""

    def test_caller_sink_survives_extraction(self, solid_buffer, gradient_buffer):
        records = []
        handler_id = logger.add(lambda message: records.append(message.record), level="DEBUG")
        try:
            extract_palette(solid_buffer(2, 2), k=2)
            extract_palette(gradient_buffer, k=3, rng=np.random.default_rng(0))
            logger.info("host application message")
        finally:
            # Raises ValueError if the handler was removed
            logger.remove(handler_id)

        assert [r["message"] for r in records] == ["host application message"]

    def test_completion_record(self, solid_buffer, swatchkit_logs):
        result = run_extraction(solid_buffer(2, 2, (31, 78, 121, 255)), k=3)

        completed = [r for r in swatchkit_logs if r["message"].endswith("completed")]
        assert len(completed) == 1
        assert completed[0]["extra"]["extraction_id"] == result.extraction_id
        assert completed[0]["extra"]["palette"] == ["#1F4E79"]

    def test_empty_image_warning(self, solid_buffer, swatchkit_logs):
        result = run_extraction(solid_buffer(2, 2, (0, 0, 0, 0)), k=3)

        warnings = [r for r in swatchkit_logs if r["level"].name == "WARNING"]
        assert len(warnings) == 1
        assert warnings[0]["extra"]["extraction_id"] == result.extraction_id

    def test_failure_error_record(self, solid_buffer, swatchkit_logs, monkeypatch):
        def broken_sampler(buffer):
            raise RuntimeError("sampler exploded")
        monkeypatch.setattr(extraction, "sample_pixels", broken_sampler)

        with pytest.raises(RuntimeError):
            extract_palette(solid_buffer(2, 2), k=2)

        errors = [r for r in swatchkit_logs
                  if r["level"].name == "ERROR" and "error_type" in r["extra"]]
        assert len(errors) == 1
        assert errors[0]["extra"]["error_type"] == "RuntimeError"
