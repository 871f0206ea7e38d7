"""
swatchkit Configuration
Manages environment variables and defaults for palette extraction.
"""
import os


class Config:
    """Configuration class for swatchkit services."""

    # Palette defaults
    PALETTE_SIZE: int = int(os.environ.get("SWATCHKIT_PALETTE_SIZE", "6"))

    # Sampling
    MAX_SAMPLE_DIMENSION: int = int(os.environ.get("SWATCHKIT_MAX_SAMPLE_DIMENSION", "200"))

    # Clustering
    MAX_ITERATIONS: int = int(os.environ.get("SWATCHKIT_MAX_ITERATIONS", "100"))
    CONVERGENCE_THRESHOLD: float = float(os.environ.get("SWATCHKIT_CONVERGENCE_THRESHOLD", "1.0"))

    # Logging and metrics
    LOG_LEVEL: str = os.environ.get("SWATCHKIT_LOG_LEVEL", "INFO")
    METRICS_ENABLED: bool = bool(int(os.environ.get("SWATCHKIT_METRICS_ENABLED", "1")))

    # Only fully opaque pixels are sampled
    OPAQUE_ALPHA: int = 255

    @classmethod
    def validate_palette_size(cls, k: int) -> bool:
        """Validate requested palette size."""
        return k >= 1

    @classmethod
    def validate_max_sample_dimension(cls, max_dimension: int) -> bool:
        """Validate longest sampled side."""
        return max_dimension >= 1

    @classmethod
    def validate_max_iterations(cls, max_iterations: int) -> bool:
        """Validate k-means iteration cap."""
        return max_iterations >= 1


# Global config instance
config = Config()
