"""
Module: renderer

Purpose:
    PDF page rasterization. Turns an uploaded document into an ordered
    list of same-scale page bitmaps, plus thumbnails for page pickers.

Key Functions:
    - load_document(): Parse bytes into a SourceDocument
    - rasterize_document(): Render all pages (all-or-nothing)
    - iter_page_bitmaps(): Lazy per-page rendering
    - make_thumbnail(): JPEG thumbnail of a page

Key Classes:
    - RenderConfig: Render scale and thumbnail settings

Dependencies:
    - fitz (PyMuPDF): PDF rendering
    - PIL: Image handling
"""

from .config import RenderConfig
from .rasterizer import (
    load_document,
    iter_page_bitmaps,
    rasterize_document,
    render_page,
    rendering_page_stage,
)
from .thumbnails import make_thumbnail

__all__ = [
    "RenderConfig",
    "load_document",
    "iter_page_bitmaps",
    "rasterize_document",
    "render_page",
    "rendering_page_stage",
    "make_thumbnail",
]
