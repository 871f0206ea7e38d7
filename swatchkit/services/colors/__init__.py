"""
swatchkit Colors Module

Provides pixel sampling, k-means clustering and hex formatting for
extracting representative color palettes from images.
"""

from .clustering import KMeansResult, cluster, run_kmeans
from .extraction import extract_palette, extract_palette_from_bytes, run_extraction
from .formatting import hex_to_rgb, rgb_to_hex
from .sampling import sample_pixels

__all__ = [
    'KMeansResult',
    'cluster',
    'run_kmeans',
    'extract_palette',
    'extract_palette_from_bytes',
    'run_extraction',
    'hex_to_rgb',
    'rgb_to_hex',
    'sample_pixels'
]
