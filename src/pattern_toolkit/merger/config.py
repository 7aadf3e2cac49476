"""
Module: merger.config

Purpose:
    Configuration for grid merging and merge previews.

Key Classes:
    - MergeConfig: Default overlap, canvas fill and preview settings
"""

from dataclasses import dataclass
from typing import Tuple

from ..core.models.stitch import DEFAULT_OVERLAP_PIXELS

WHITE: Tuple[int, int, int] = (255, 255, 255)

# About 750 MB of RGB canvas
DEFAULT_MAX_CANVAS_PIXELS = 250_000_000


@dataclass(frozen=True)
class MergeConfig:
    """
    Configuration for merging.

    Attributes:
        default_overlap_pixels: Overlap used when a request gives none (default 3)
        fill_color: Canvas colour for unplaced cells (default opaque white)
        preview_width: Preview width in pixels (default 800)
        preview_quality: Preview JPEG quality (default 85)
        max_canvas_pixels: Largest composite (width*height) a merge may allocate
    """
    default_overlap_pixels: int = DEFAULT_OVERLAP_PIXELS
    fill_color: Tuple[int, int, int] = WHITE
    preview_width: int = 800
    preview_quality: int = 85
    max_canvas_pixels: int = DEFAULT_MAX_CANVAS_PIXELS

    def __post_init__(self) -> None:
        """Validate configuration on construction."""
        if self.default_overlap_pixels < 0:
            raise ValueError(
                f"default_overlap_pixels must be >= 0: {self.default_overlap_pixels}"
            )
        if self.preview_width <= 0:
            raise ValueError(f"preview_width must be positive: {self.preview_width}")
        if not 1 <= self.preview_quality <= 95:
            raise ValueError(f"preview_quality must be 1-95: {self.preview_quality}")
        if self.max_canvas_pixels <= 0:
            raise ValueError(f"max_canvas_pixels must be positive: {self.max_canvas_pixels}")
