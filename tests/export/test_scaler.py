"""
Unit tests for export size resolution and resampling.
"""

import numpy as np
import pytest
from PIL import Image

from pattern_toolkit.core.errors import InvalidExportSize
from pattern_toolkit.core.models import CompositeImage, ExportSpec, SizeMode
from pattern_toolkit.export import (
    fit_inside,
    maintained_dimension,
    pixels_to_print_size,
    print_size_to_pixels,
    resolve_export_size,
    round_half_up,
    scale_composite,
)


# ─────────────────────────────────────────────────────────────────────────────
# Arithmetic helpers
# ─────────────────────────────────────────────────────────────────────────────

def test_round_half_up_when_half_then_rounds_up():
    assert round_half_up(2.5) == 3
    assert round_half_up(666.5) == 667
    assert round_half_up(666.49) == 666


def test_print_size_to_pixels_when_letter_at_300_then_2550_by_3300():
    assert print_size_to_pixels(8.5, 11, 300) == (2550, 3300)


def test_pixels_to_print_size_when_converted_back_then_inches():
    assert pixels_to_print_size(2550, 3300, 300) == (8.5, 11.0)


def test_maintained_dimension_when_width_known_then_height_follows_ratio():
    assert maintained_dimension(1950, 1300, "width", 600) == 400
    assert maintained_dimension(1950, 1300, "height", 400) == 600


@pytest.mark.parametrize("source,box,expected", [
    ((2000, 1000), (800, 800), (800, 400)),
    ((1000, 2000), (800, 800), (400, 800)),
    ((1950, 1300), (1000, 1000), (1000, 667)),
    ((100, 100), (300, 200), (200, 200)),
])
def test_fit_inside_when_box_given_then_fits_and_keeps_ratio(source, box, expected):
    assert fit_inside(*source, *box) == expected


# ─────────────────────────────────────────────────────────────────────────────
# resolve_export_size
# ─────────────────────────────────────────────────────────────────────────────

def test_resolve_when_original_then_composite_size():
    resolved = resolve_export_size(1950, 1300, ExportSpec())
    assert resolved.size == (1950, 1300)
    assert resolved.adjusted is False


def test_resolve_when_pixels_maintained_then_adjusted_to_fit():
    resolved = resolve_export_size(1950, 1300, ExportSpec(SizeMode.PIXELS, 1000, 1000))
    assert resolved.size == (1000, 667)
    assert (resolved.requested_width, resolved.requested_height) == (1000, 1000)
    assert resolved.adjusted is True


def test_resolve_when_pixels_stretched_then_exact_request():
    spec = ExportSpec(SizeMode.PIXELS, 1000, 1000, maintain_aspect_ratio=False)
    resolved = resolve_export_size(1950, 1300, spec)
    assert resolved.size == (1000, 1000)
    assert resolved.adjusted is False


def test_resolve_when_print_stretched_then_inches_times_dpi():
    spec = ExportSpec(SizeMode.PRINT, 8.5, 11, dpi=300, maintain_aspect_ratio=False)
    assert resolve_export_size(1950, 1950, spec).size == (2550, 3300)


def test_resolve_when_print_maintained_then_fits_print_box():
    spec = ExportSpec(SizeMode.PRINT, 8, 10, dpi=100)
    resolved = resolve_export_size(1950, 1950, spec)
    assert resolved.size == (800, 800)
    assert (resolved.requested_width, resolved.requested_height) == (800, 1000)


@pytest.mark.parametrize("source,target", [
    ((1950, 1300), (1234, 987)),
    ((733, 1999), (500, 500)),
    ((4096, 300), (640, 480)),
    ((1001, 999), (3000, 17)),
])
def test_resolve_when_maintained_then_aspect_within_one_pixel(source, target):
    width, height = source
    resolved = resolve_export_size(width, height, ExportSpec(SizeMode.PIXELS, *target))

    assert resolved.width <= target[0]
    assert resolved.height <= target[1]
    # One axis is pinned to the box, the other is within a rounding unit
    if resolved.width == target[0]:
        assert abs(resolved.height - target[0] * height / width) <= 1
    else:
        assert resolved.height == target[1]
        assert abs(resolved.width - target[1] * width / height) <= 1


@pytest.mark.parametrize("target", [(0, 100), (100, 0), (-5, -5)])
def test_resolve_when_request_not_positive_then_raises(target):
    with pytest.raises(InvalidExportSize):
        resolve_export_size(100, 100, ExportSpec(SizeMode.PIXELS, *target))


def test_resolve_when_fit_collapses_axis_then_raises():
    with pytest.raises(InvalidExportSize):
        resolve_export_size(10000, 1, ExportSpec(SizeMode.PIXELS, 100, 100))


def test_resolve_when_print_size_rounds_to_zero_then_raises():
    with pytest.raises(InvalidExportSize):
        resolve_export_size(100, 100, ExportSpec(SizeMode.PRINT, 0.001, 1, dpi=300))


# ─────────────────────────────────────────────────────────────────────────────
# scale_composite
# ─────────────────────────────────────────────────────────────────────────────

def test_scale_composite_when_original_then_identical_pixels():
    source = Image.new("RGB", (30, 20), (10, 20, 30))
    composite = CompositeImage(source, source_page_count=1)

    image, resolved = scale_composite(composite, ExportSpec())

    assert resolved.size == (30, 20)
    assert np.array_equal(np.asarray(image), np.asarray(source))
    assert image is not composite.image


def test_scale_composite_when_resized_then_composite_untouched():
    composite = CompositeImage(Image.new("RGB", (300, 200), "white"), source_page_count=2)

    image, resolved = scale_composite(composite, ExportSpec(SizeMode.PIXELS, 150, 150))

    assert image.size == resolved.size == (150, 100)
    assert composite.size == (300, 200)


def test_scale_composite_when_transparent_then_flattened_on_white():
    composite = CompositeImage(Image.new("RGBA", (10, 10), (0, 0, 0, 0)), source_page_count=1)

    image, _ = scale_composite(composite, ExportSpec())

    assert image.mode == "RGB"
    assert image.getpixel((5, 5)) == (255, 255, 255)
