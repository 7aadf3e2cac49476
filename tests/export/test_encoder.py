"""
Tests for PNG/PDF export encoding.

Encoded artifacts are re-opened with Pillow and PyMuPDF and measured.
"""

import io

import fitz
import numpy as np
import pytest
from PIL import Image

from pattern_toolkit.core.models import CompositeImage, ExportFormat, ExportSpec, SizeMode
from pattern_toolkit.export import (
    SCREEN_DPI,
    encode_pdf,
    encode_png,
    export_composite,
    export_filename,
)


@pytest.fixture
def composite():
    """300x600 composite with a black top-left pixel."""
    image = Image.new("RGB", (300, 600), (200, 40, 40))
    image.putpixel((0, 0), (0, 0, 0))
    return CompositeImage(image, source_page_count=2)


def pdf_page_size(data: bytes):
    with fitz.open(stream=data, filetype="pdf") as doc:
        assert doc.page_count == 1
        rect = doc[0].rect
        return rect.width, rect.height


def pdf_image_size(data: bytes):
    with fitz.open(stream=data, filetype="pdf") as doc:
        xref = doc[0].get_images()[0][0]
        info = doc.extract_image(xref)
        return info["width"], info["height"]


# ─────────────────────────────────────────────────────────────────────────────
# PNG
# ─────────────────────────────────────────────────────────────────────────────

def test_export_when_original_png_then_lossless_round_trip(composite):
    # Act
    result = export_composite(composite, ExportSpec())

    # Assert
    decoded = Image.open(io.BytesIO(result.data))
    assert decoded.format == "PNG"
    assert decoded.size == composite.size
    assert np.array_equal(np.asarray(decoded.convert("RGB")), np.asarray(composite.image))
    assert result.media_type == "image/png"


def test_export_when_pixels_maintained_then_reports_adjusted_size(composite):
    result = export_composite(composite, ExportSpec(SizeMode.PIXELS, 600, 600))

    decoded = Image.open(io.BytesIO(result.data))
    assert decoded.size == result.size.size == (300, 600)
    assert result.size.adjusted is True


def test_export_when_pixels_stretched_then_exact_size(composite):
    spec = ExportSpec(SizeMode.PIXELS, 120, 90, maintain_aspect_ratio=False)
    result = export_composite(composite, spec)
    assert Image.open(io.BytesIO(result.data)).size == (120, 90)


def test_export_when_encoded_then_composite_unchanged(composite):
    export_composite(composite, ExportSpec(SizeMode.PIXELS, 30, 60))
    assert composite.size == (300, 600)
    assert composite.image.getpixel((0, 0)) == (0, 0, 0)


def test_encode_png_when_called_then_png_signature(sample_image):
    assert encode_png(sample_image).startswith(b"\x89PNG")


# ─────────────────────────────────────────────────────────────────────────────
# PDF
# ─────────────────────────────────────────────────────────────────────────────

def test_export_when_print_pdf_then_page_is_physical_size(composite):
    """300x600px at 100 DPI is a 3x6 inch page (216x432pt)."""
    spec = ExportSpec(SizeMode.PRINT, 3, 6, dpi=100, format=ExportFormat.PDF)

    result = export_composite(composite, spec)

    assert result.data.startswith(b"%PDF")
    assert result.media_type == "application/pdf"
    assert pdf_page_size(result.data) == pytest.approx((216.0, 432.0))
    assert pdf_image_size(result.data) == (300, 600)


def test_export_when_pixel_pdf_then_page_at_screen_dpi(composite):
    spec = ExportSpec(SizeMode.ORIGINAL, format="pdf")

    result = export_composite(composite, spec)

    expected = (300 * 72 / SCREEN_DPI, 600 * 72 / SCREEN_DPI)
    assert pdf_page_size(result.data) == pytest.approx(expected)


def test_encode_pdf_when_letter_at_300_dpi_then_letter_page():
    data = encode_pdf(Image.new("RGB", (2550, 3300), "white"), dpi=300)
    assert pdf_page_size(data) == pytest.approx((612.0, 792.0))


# ─────────────────────────────────────────────────────────────────────────────
# Filenames
# ─────────────────────────────────────────────────────────────────────────────

@pytest.mark.parametrize("source,fmt,expected", [
    ("rose-garden.pdf", ExportFormat.PNG, "rose-garden-merged.png"),
    ("uploads/Fox.PDF", ExportFormat.PDF, "Fox-merged.pdf"),
    (None, ExportFormat.PNG, "pattern-merged.png"),
    ("", ExportFormat.PDF, "pattern-merged.pdf"),
])
def test_export_filename_when_source_given_then_merged_suffix(source, fmt, expected):
    assert export_filename(source, fmt) == expected


def test_export_when_source_name_given_then_result_filename(composite):
    result = export_composite(composite, ExportSpec(format="pdf"), source_name="owl.pdf")
    assert result.filename == "owl-merged.pdf"
