"""
Module: export.encoder

Purpose:
    Encode composites as download-ready PNG or single-page PDF artifacts.

Key Functions:
    - export_composite(): Scale and encode per an ExportSpec
    - encode_png(): Lossless PNG bytes
    - encode_pdf(): One-page PDF sized to the image's physical size
    - export_filename(): "<stem>-merged.<ext>" download name

Key Classes:
    - ExportResult: Encoded bytes plus the size actually used

Dependencies:
    - reportlab: PDF generation
    - PIL: Image handling

Used By:
    - cli: merge command
"""

from __future__ import annotations

import io
import logging
from dataclasses import dataclass, field
from pathlib import PurePath
from typing import Optional

from PIL import Image
from reportlab.lib.utils import ImageReader
from reportlab.pdfgen import canvas

from ..core.models import CompositeImage, ExportFormat, ExportSpec, ResolvedSize, SizeMode
from .scaler import scale_composite

logger = logging.getLogger(__name__)

# Physical size assumed for on-screen pixel exports
SCREEN_DPI = 96
POINTS_PER_INCH = 72.0


@dataclass(frozen=True)
class ExportResult:
    """
    Encoded export artifact.

    Attributes:
        data: Encoded bytes
        format: PNG or PDF
        size: Pixel size used (may differ from the request)
        filename: Suggested download name
    """
    data: bytes = field(repr=False)
    format: ExportFormat
    size: ResolvedSize
    filename: str

    @property
    def media_type(self) -> str:
        return self.format.media_type


def encode_png(image: Image.Image) -> bytes:
    """Encode an image as lossless PNG."""
    buf = io.BytesIO()
    image.save(buf, format="PNG")
    return buf.getvalue()


def encode_pdf(image: Image.Image, dpi: float = SCREEN_DPI) -> bytes:
    """
    Wrap an image in a single-page PDF.

    The page is exactly the image's physical size at dpi, with the image
    filling it edge to edge.

    Example:
        >>> pdf = encode_pdf(Image.new("RGB", (2550, 3300), "white"), dpi=300)
        # 8.5 x 11 inch page
    """
    width_pt = _px_to_pt(image.width, dpi)
    height_pt = _px_to_pt(image.height, dpi)

    buf = io.BytesIO()
    c = canvas.Canvas(buf, pagesize=(width_pt, height_pt))
    c.drawImage(_pil_to_reader(image), 0, 0, width=width_pt, height=height_pt)
    c.showPage()
    c.save()
    return buf.getvalue()


def export_filename(source_name: Optional[str], fmt: ExportFormat) -> str:
    """
    Download name for an export.

    Example:
        >>> export_filename("rose-garden.pdf", ExportFormat.PNG)
        'rose-garden-merged.png'
    """
    stem = PurePath(source_name).stem if source_name else ""
    return f"{stem or 'pattern'}-merged.{fmt.value}"


def export_composite(
    composite: CompositeImage,
    spec: ExportSpec,
    *,
    source_name: Optional[str] = None,
) -> ExportResult:
    """
    Scale and encode a composite.

    Args:
        composite: Merged image (not modified)
        spec: Export request
        source_name: Original upload name, used for the download name

    Returns:
        ExportResult with bytes and the resolved size.

    Raises:
        InvalidExportSize: If the resolved size is not positive

    Example:
        >>> result = export_composite(composite, ExportSpec(SizeMode.PIXELS, 1000, 1000))
        >>> result.size.adjusted
        True
    """
    image, resolved = scale_composite(composite, spec)

    if spec.format is ExportFormat.PDF:
        dpi = spec.dpi if spec.size_mode is SizeMode.PRINT else SCREEN_DPI
        data = encode_pdf(image, dpi)
    else:
        data = encode_png(image)

    if resolved.adjusted:
        logger.info(
            f"Export adjusted to {resolved.width}x{resolved.height}px "
            f"(requested {resolved.requested_width}x{resolved.requested_height}px)"
        )
    logger.info(f"Exported {spec.format.value.upper()} {resolved.width}x{resolved.height}px, {len(data)} bytes")

    return ExportResult(
        data=data,
        format=spec.format,
        size=resolved,
        filename=export_filename(source_name, spec.format),
    )


def _pil_to_reader(img: Image.Image) -> ImageReader:
    """
    Convert PIL image to ReportLab ImageReader.

    Args:
        img: PIL Image object

    Returns:
        ImageReader for use with ReportLab
    """
    buf = io.BytesIO()
    img.save(buf, format="PNG")
    buf.seek(0)
    return ImageReader(buf)


def _px_to_pt(px: int, dpi: float) -> float:
    """
    Convert pixels to PDF points.

    PDF points are 1/72 inch.
    """
    return px * POINTS_PER_INCH / dpi
