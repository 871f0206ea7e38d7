"""
swatchkit Extraction ID Utilities
Generate unique ids for correlating extraction log records.
"""
import uuid
from datetime import datetime


def generate_extraction_id() -> str:
    """
    Generate a unique extraction ID.

    Returns:
        ID string of the form ``pal-<YYYYmmddHHMMSS>-<8 hex chars>``
    """
    timestamp = datetime.now().strftime("%Y%m%d%H%M%S")
    short_uuid = uuid.uuid4().hex[:8]
    return f"pal-{timestamp}-{short_uuid}"

