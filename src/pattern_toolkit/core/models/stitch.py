"""
Module: stitch

Purpose:
    Merge parameters supplied by the stitcher: the pattern's stitch count
    and the overlap margin trimmed at each internal seam.

Key Classes:
    - StitchConfig: Pattern width/height in stitches (metadata only)
    - OverlapSpec: Pixels trimmed per internal seam
"""

from __future__ import annotations

from dataclasses import dataclass

from ..errors import InvalidOverlap

# Thin alignment strip repeated on adjacent pattern pages
DEFAULT_OVERLAP_PIXELS = 3


@dataclass(frozen=True)
class StitchConfig:
    """
    Real stitch-count dimensions of the pattern.

    Never used for pixel arithmetic; only for descriptive metadata and an
    aspect-ratio sanity check on the composite.

    Attributes:
        width: Stitches wide (> 0)
        height: Stitches tall (> 0)
    """

    width: int
    height: int

    def __post_init__(self) -> None:
        if self.width <= 0:
            raise ValueError(f"width must be positive: {self.width}")
        if self.height <= 0:
            raise ValueError(f"height must be positive: {self.height}")

    @property
    def aspect_ratio(self) -> float:
        return self.width / self.height

    def aspect_mismatch(self, width_px: int, height_px: int) -> float:
        """
        Relative difference between this pattern's aspect and a pixel size.

        Example:
            >>> StitchConfig(100, 100).aspect_mismatch(1100, 1000)
            0.1
        """
        pixel_ratio = width_px / height_px
        return round(abs(pixel_ratio - self.aspect_ratio) / self.aspect_ratio, 6)


@dataclass(frozen=True)
class OverlapSpec:
    """
    Pixels trimmed from each shared internal edge between adjacent cells.

    Attributes:
        overlap_pixels: Seam overlap (>= 0). Zero means plain tiling.

    Raises:
        InvalidOverlap: If overlap_pixels is negative
    """

    overlap_pixels: int = DEFAULT_OVERLAP_PIXELS

    def __post_init__(self) -> None:
        if self.overlap_pixels < 0:
            raise InvalidOverlap(f"overlap_pixels must be >= 0: {self.overlap_pixels}")
