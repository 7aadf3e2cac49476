"""
Core Models Package

Validated data models passed between pipeline stages.

Everything except GridArrangement is a frozen dataclass: bitmaps and
composites have a single owner at each stage and are never mutated in
place. GridArrangement is the user's editable arrangement and is mutable.
"""

from .pages import SourceDocument, PageBitmap
from .grid import GridArrangement, Cell
from .stitch import StitchConfig, OverlapSpec, DEFAULT_OVERLAP_PIXELS
from .composite import CompositeImage
from .export import ExportSpec, ExportFormat, SizeMode, ResolvedSize

__all__ = [
    "SourceDocument",
    "PageBitmap",
    "GridArrangement",
    "Cell",
    "StitchConfig",
    "OverlapSpec",
    "DEFAULT_OVERLAP_PIXELS",
    "CompositeImage",
    "ExportSpec",
    "ExportFormat",
    "SizeMode",
    "ResolvedSize",
]
