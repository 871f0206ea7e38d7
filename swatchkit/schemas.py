"""
swatchkit Schemas
Pydantic models for pixel buffers and palette extraction results.
"""
from typing import Annotated, List

import numpy as np
from pydantic import BaseModel, Field, model_validator

HEX_COLOR_PATTERN = r"^#[0-9A-F]{6}$"

HexColor = Annotated[str, Field(pattern=HEX_COLOR_PATTERN)]


class PixelBuffer(BaseModel):
    """Decoded image as row-major RGBA bytes, 8 bits per channel."""
    width: int = Field(..., gt=0, description="Image width in pixels")
    height: int = Field(..., gt=0, description="Image height in pixels")
    data: bytes = Field(..., description="Row-major RGBA bytes, length width*height*4")

    @model_validator(mode="after")
    def check_data_length(self) -> "PixelBuffer":
        expected = self.width * self.height * 4
        if len(self.data) != expected:
            raise ValueError(
                f"Buffer length {len(self.data)} does not match "
                f"{self.width}x{self.height} RGBA ({expected} bytes)"
            )
        return self

    @classmethod
    def from_array(cls, rgba: np.ndarray) -> "PixelBuffer":
        """Build a buffer from an (H, W, 4) uint8 array."""
        if rgba.ndim != 3 or rgba.shape[2] != 4:
            raise ValueError(f"Expected (H, W, 4) RGBA array, got shape {rgba.shape}")
        height, width = rgba.shape[:2]
        return cls(
            width=width,
            height=height,
            data=np.ascontiguousarray(rgba, dtype=np.uint8).tobytes()
        )

    def as_array(self) -> np.ndarray:
        """View the buffer as an (H, W, 4) uint8 array."""
        return np.frombuffer(self.data, dtype=np.uint8).reshape(self.height, self.width, 4)


class PaletteResult(BaseModel):
    """Palette extraction output with run metadata."""
    colors: List[HexColor] = Field(
        default_factory=list,
        description="Palette colors; order carries no ranking"
    )
    k: int = Field(..., ge=1, description="Number of colors requested")
    sample_count: int = Field(
        ...,
        ge=0,
        description="Distinct opaque colors sampled from the image"
    )
    clustered: bool = Field(
        ...,
        description="False when samples were returned directly (sample_count <= k)"
    )
    iterations: int = Field(0, ge=0, description="K-means iterations run")
    converged: bool = Field(
        False,
        description="Whether k-means stopped before the iteration cap"
    )
    width: int = Field(..., ge=0, description="Sampled image width in pixels")
    height: int = Field(..., ge=0, description="Sampled image height in pixels")
    extraction_id: str = Field(..., description="Id used to correlate log records")
    duration_ms: float = Field(..., ge=0.0, description="Total extraction time")
