"""
swatchkit

Extracts a small palette of representative hex colors from decoded
image pixel data using k-means clustering.
"""
from loguru import logger

__version__ = "1.0.0"

# Library records stay silent until the host calls logger.enable("swatchkit")
# or swatchkit.utils.logging.configure_logging().
logger.disable("swatchkit")
