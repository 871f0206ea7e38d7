"""
Hex formatting for palette colors.
"""
import math
from typing import Sequence, Tuple


def round_channel(value: float) -> int:
    """Round half-up (2.5 -> 3), the same rule for every channel."""
    return int(math.floor(float(value) + 0.5))


def rgb_to_hex(rgb: Sequence[float]) -> str:
    """
    Convert an RGB triple to an uppercase ``#RRGGBB`` string.

    Channels may be fractional (k-means centroids) and are rounded with
    ``round_channel``. Values are expected in [0, 255]; nothing is clamped.
    """
    r, g, b = [round_channel(x) for x in rgb]
    return f"#{r:02X}{g:02X}{b:02X}"


def hex_to_rgb(hex_color: str) -> Tuple[int, int, int]:
    """Convert hex color string to RGB tuple."""
    hex_color = hex_color.lstrip('#')
    return tuple(int(hex_color[i:i+2], 16) for i in (0, 2, 4))
