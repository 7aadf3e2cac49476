"""
Module: pages

Purpose:
    Source document and rendered page models.

Key Classes:
    - SourceDocument: Uploaded PDF bytes plus page count
    - PageBitmap: One rendered page (1-based page number + PIL image)

Dependencies:
    - dataclasses (std)
    - PIL.Image (TYPE_CHECKING only)

Used By:
    - renderer.rasterizer: Produces PageBitmap from SourceDocument
    - merger.compositor: Consumes PageBitmap
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from PIL import Image


@dataclass(frozen=True)
class SourceDocument:
    """
    Uploaded document bytes (immutable).

    Created on upload, discarded once rasterization finishes. Build one
    with renderer.load_document(), which counts pages and rejects
    unreadable input.

    Attributes:
        data: Raw PDF bytes
        page_count: Number of pages (>= 1)
    """

    data: bytes = field(repr=False)
    page_count: int

    def __post_init__(self) -> None:
        if self.page_count < 1:
            raise ValueError(f"page_count must be >= 1: {self.page_count}")


@dataclass(frozen=True)
class PageBitmap:
    """
    A rendered page.

    All bitmaps from one document share the rendering scale, so pages with
    the same source size have the same pixel size.

    Attributes:
        page_number: 1-based page number, unique within a document
        image: Rendered RGB image

    Example:
        >>> bitmap = PageBitmap(1, Image.new("RGB", (1000, 1400), "white"))
        >>> bitmap.size
        (1000, 1400)
    """

    page_number: int
    image: "Image.Image" = field(repr=False, compare=False)

    def __post_init__(self) -> None:
        if self.page_number < 1:
            raise ValueError(f"page_number must be >= 1: {self.page_number}")

    @property
    def width(self) -> int:
        return self.image.width

    @property
    def height(self) -> int:
        return self.image.height

    @property
    def size(self) -> tuple[int, int]:
        return self.image.size
