"""
Module: merger

Purpose:
    Grid compositing. Merges the stitcher's grid of page bitmaps into a
    single composite image, trimming overlap margins at internal seams.

Key Functions:
    - merge_grid(): Main merging function
    - composite_size(), cell_origin(): Seam arithmetic
    - make_preview(): JPEG preview of a composite

Key Classes:
    - MergeConfig: Merge defaults

Dependencies:
    - PIL: Image compositing
"""

from .config import MergeConfig
from .compositor import (
    merge_grid,
    composite_size,
    cell_origin,
    EXTRACTING_GRIDS,
    MERGING_PATTERN,
    FINALIZING,
)
from .preview import make_preview

__all__ = [
    "MergeConfig",
    "merge_grid",
    "composite_size",
    "cell_origin",
    "make_preview",
    "EXTRACTING_GRIDS",
    "MERGING_PATTERN",
    "FINALIZING",
]
