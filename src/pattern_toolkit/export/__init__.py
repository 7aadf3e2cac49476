"""
Module: export

Purpose:
    Output scaling and encoding. Resolves original / pixel / print
    export sizes, resamples with a quality filter and encodes PNG or PDF.

Key Functions:
    - export_composite(): Main entry point
    - resolve_export_size(): Size resolution only (for dialogs)
    - scale_composite(): Resampled bitmap
    - encode_png(), encode_pdf(): Encoders

Dependencies:
    - PIL: Resampling and PNG
    - reportlab: PDF
"""

from .scaler import (
    resolve_export_size,
    scale_composite,
    fit_inside,
    print_size_to_pixels,
    pixels_to_print_size,
    maintained_dimension,
    round_half_up,
)
from .encoder import (
    ExportResult,
    export_composite,
    export_filename,
    encode_png,
    encode_pdf,
    SCREEN_DPI,
)

__all__ = [
    "resolve_export_size",
    "scale_composite",
    "fit_inside",
    "print_size_to_pixels",
    "pixels_to_print_size",
    "maintained_dimension",
    "round_half_up",
    "ExportResult",
    "export_composite",
    "export_filename",
    "encode_png",
    "encode_pdf",
    "SCREEN_DPI",
]
