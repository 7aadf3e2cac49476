"""
Module: merger.preview

Purpose:
    Downsized JPEG preview of a composite for display.
"""

from __future__ import annotations

import io

from PIL import Image

from ..core.models import CompositeImage
from .config import MergeConfig


def make_preview(
    composite: CompositeImage,
    width: int = MergeConfig.preview_width,
    quality: int = MergeConfig.preview_quality,
) -> bytes:
    """
    Encode a JPEG preview that fits inside width, never enlarging.

    Returns:
        JPEG bytes.
    """
    preview = composite.copy_image().convert("RGB")
    if preview.width > width:
        height = max(1, round(preview.height * width / preview.width))
        preview = preview.resize((width, height), Image.Resampling.LANCZOS)
    buf = io.BytesIO()
    preview.save(buf, format="JPEG", quality=quality)
    return buf.getvalue()
