"""
Module: export

Purpose:
    Export request and resolved-size models for the scaler/encoder.

Key Classes:
    - SizeMode: original / pixels / print
    - ExportFormat: png / pdf
    - ExportSpec: What the stitcher asked for
    - ResolvedSize: What the scaler actually produced

Used By:
    - export.scaler: resolve_export_size(), scale_composite()
    - export.encoder: export_composite()
    - cli: Builds ExportSpec from arguments
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Union


class SizeMode(str, Enum):
    """
    How the export size is specified.

    Attributes:
        ORIGINAL: Keep the composite's pixel size, no resampling.
        PIXELS: target_width/target_height are pixels.
        PRINT: target_width/target_height are inches at dpi.
    """

    ORIGINAL = "original"
    PIXELS = "pixels"
    PRINT = "print"


class ExportFormat(str, Enum):
    """Encoded artifact format."""

    PNG = "png"
    PDF = "pdf"

    @property
    def media_type(self) -> str:
        return "image/png" if self is ExportFormat.PNG else "application/pdf"


@dataclass(frozen=True)
class ExportSpec:
    """
    Requested export (immutable).

    Attributes:
        size_mode: How targets are interpreted
        target_width: Pixels (PIXELS) or inches (PRINT); ignored for ORIGINAL
        target_height: Pixels (PIXELS) or inches (PRINT); ignored for ORIGINAL
        dpi: Print resolution, required for PRINT
        maintain_aspect_ratio: Fit inside the target box instead of stretching
        format: Output format

    Example:
        >>> spec = ExportSpec(SizeMode.PRINT, 8.5, 11, dpi=300, format=ExportFormat.PDF)
    """

    size_mode: SizeMode = SizeMode.ORIGINAL
    target_width: Optional[Union[int, float]] = None
    target_height: Optional[Union[int, float]] = None
    dpi: Optional[int] = None
    maintain_aspect_ratio: bool = True
    format: ExportFormat = ExportFormat.PNG

    def __post_init__(self) -> None:
        # Accept plain strings from JSON / CLI
        object.__setattr__(self, "size_mode", SizeMode(self.size_mode))
        object.__setattr__(self, "format", ExportFormat(self.format))
        if self.size_mode is not SizeMode.ORIGINAL:
            if self.target_width is None or self.target_height is None:
                raise ValueError(f"{self.size_mode.value} export needs target_width and target_height")
        if self.size_mode is SizeMode.PRINT and not self.dpi:
            raise ValueError("print export needs dpi")
        if self.dpi is not None and self.dpi <= 0:
            raise ValueError(f"dpi must be positive: {self.dpi}")


@dataclass(frozen=True)
class ResolvedSize:
    """
    Dimensions actually used for an export.

    When aspect ratio is maintained these can differ from the request;
    callers should display them rather than the requested numbers.

    Attributes:
        width: Output width in pixels
        height: Output height in pixels
        requested_width: Requested width in pixels (after print conversion)
        requested_height: Requested height in pixels (after print conversion)
    """

    width: int
    height: int
    requested_width: int
    requested_height: int

    @property
    def adjusted(self) -> bool:
        """True when the output differs from the literal request."""
        return (self.width, self.height) != (self.requested_width, self.requested_height)

    @property
    def size(self) -> tuple[int, int]:
        return self.width, self.height
