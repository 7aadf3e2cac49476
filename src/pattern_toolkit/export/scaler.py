"""
Module: export.scaler

Purpose:
    Resolve the pixel size of an export and resample composites to it.

Key Functions:
    - resolve_export_size(): Turn an ExportSpec into concrete pixels
    - scale_composite(): Resample a composite copy to the resolved size
    - print_size_to_pixels(), pixels_to_print_size(): Inch/pixel conversion
    - maintained_dimension(): Other axis for a fixed aspect ratio

Dependencies:
    - PIL.Image: LANCZOS resampling

Used By:
    - export.encoder: export_composite()
    - cli: Export options

Design Notes:
    Rounding is half-up, matching what export dialogs display. When the
    aspect ratio is maintained the resolved size can differ from the
    request; ResolvedSize carries both so callers can show the real size.
"""

from __future__ import annotations

import math
from typing import Literal, Tuple, Union

from PIL import Image

from ..core.errors import InvalidExportSize
from ..core.models import CompositeImage, ExportSpec, ResolvedSize, SizeMode
from ..merger.config import WHITE

Number = Union[int, float]

# Quality-biased filter; pattern grid lines must stay crisp
RESAMPLE_FILTER = Image.Resampling.LANCZOS


def round_half_up(value: float) -> int:
    """
    Round .5 away from zero for positive values.

    Example:
        >>> round_half_up(2.5), round(2.5)
        (3, 2)
    """
    return int(math.floor(value + 0.5))


def print_size_to_pixels(width_in: Number, height_in: Number, dpi: int) -> Tuple[int, int]:
    """
    Convert physical print size to pixels.

    Example:
        >>> print_size_to_pixels(8.5, 11, 300)
        (2550, 3300)
    """
    return round_half_up(width_in * dpi), round_half_up(height_in * dpi)


def pixels_to_print_size(width_px: int, height_px: int, dpi: int) -> Tuple[float, float]:
    """
    Convert pixels to physical print size in inches.

    Example:
        >>> pixels_to_print_size(2550, 3300, 300)
        (8.5, 11.0)
    """
    return width_px / dpi, height_px / dpi


def maintained_dimension(
    source_width: int,
    source_height: int,
    known: Literal["width", "height"],
    value: Number,
) -> int:
    """
    Compute the other axis so the source aspect ratio is kept.

    Example:
        >>> maintained_dimension(1950, 1300, "width", 600)
        400
    """
    ratio = source_width / source_height
    if known == "width":
        return round_half_up(value / ratio)
    return round_half_up(value * ratio)


def fit_inside(
    source_width: int,
    source_height: int,
    box_width: Number,
    box_height: Number,
) -> Tuple[int, int]:
    """
    Largest size with the source aspect ratio that fits in the box.

    The axis that is relatively longer in the source is pinned to the box;
    the other axis is recomputed from the source ratio.

    Example:
        >>> fit_inside(2000, 1000, 800, 800)
        (800, 400)
    """
    source_ratio = source_width / source_height
    box_ratio = box_width / box_height
    if source_ratio > box_ratio:
        width = box_width
        height = box_width / source_ratio
    else:
        height = box_height
        width = box_height * source_ratio
    return round_half_up(width), round_half_up(height)


def resolve_export_size(width: int, height: int, spec: ExportSpec) -> ResolvedSize:
    """
    Resolve the pixel dimensions an export will actually have.

    Args:
        width: Source width in pixels
        height: Source height in pixels
        spec: Export request

    Returns:
        ResolvedSize with used and requested dimensions.

    Raises:
        InvalidExportSize: If a resolved or requested dimension is <= 0

    Example:
        >>> spec = ExportSpec(SizeMode.PIXELS, 1000, 1000)
        >>> resolve_export_size(1950, 1300, spec).size
        (1000, 667)
    """
    if spec.size_mode is SizeMode.ORIGINAL:
        resolved = ResolvedSize(width, height, width, height)
    else:
        if spec.size_mode is SizeMode.PRINT:
            requested_w, requested_h = print_size_to_pixels(
                spec.target_width, spec.target_height, spec.dpi
            )
        else:
            requested_w = round_half_up(spec.target_width)
            requested_h = round_half_up(spec.target_height)

        if requested_w <= 0 or requested_h <= 0:
            raise InvalidExportSize(
                f"Requested export size {requested_w}x{requested_h}px is not positive"
            )

        if spec.maintain_aspect_ratio:
            used_w, used_h = fit_inside(width, height, requested_w, requested_h)
        else:
            used_w, used_h = requested_w, requested_h
        resolved = ResolvedSize(used_w, used_h, requested_w, requested_h)

    if resolved.width <= 0 or resolved.height <= 0:
        raise InvalidExportSize(
            f"Resolved export size {resolved.width}x{resolved.height}px is not positive"
        )
    return resolved


def scale_composite(
    composite: CompositeImage,
    spec: ExportSpec,
) -> Tuple[Image.Image, ResolvedSize]:
    """
    Produce the export bitmap for a composite.

    The composite is never modified; a copy is flattened onto white and
    resampled with LANCZOS when the size changes.

    Returns:
        (image, resolved_size)
    """
    resolved = resolve_export_size(composite.width, composite.height, spec)
    image = _flatten(composite.copy_image())
    if resolved.size != image.size:
        image = image.resize(resolved.size, RESAMPLE_FILTER)
    return image, resolved


def _flatten(image: Image.Image) -> Image.Image:
    if image.mode in ("RGBA", "LA") or (image.mode == "P" and "transparency" in image.info):
        rgba = image.convert("RGBA")
        background = Image.new("RGB", rgba.size, WHITE)
        background.paste(rgba, mask=rgba.getchannel("A"))
        return background
    if image.mode not in ("RGB", "L"):
        return image.convert("RGB")
    return image
