"""
Module: renderer.thumbnails

Purpose:
    Small JPEG previews of rendered pages for page pickers.
"""

from __future__ import annotations

import io

from PIL import Image

from .config import RenderConfig


def make_thumbnail(
    image: Image.Image,
    width: int = RenderConfig.thumbnail_width,
    quality: int = RenderConfig.thumbnail_quality,
) -> bytes:
    """
    Encode a JPEG that fits inside width, never enlarging.

    Args:
        image: Source image (not modified)
        width: Maximum width in pixels
        quality: JPEG quality

    Returns:
        JPEG bytes.
    """
    thumb = image.convert("RGB")
    if thumb.width > width:
        height = max(1, round(thumb.height * width / thumb.width))
        thumb = thumb.resize((width, height), Image.Resampling.LANCZOS)
    buf = io.BytesIO()
    thumb.save(buf, format="JPEG", quality=quality)
    return buf.getvalue()
