"""
Module: composite

Purpose:
    The merged output image handed from the merger to the exporter.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from PIL import Image


@dataclass(frozen=True)
class CompositeImage:
    """
    Single merged pattern image.

    Never mutated after creation; exporters work on copy_image().

    Attributes:
        image: Merged image
        source_page_count: Number of pages that contributed
    """

    image: "Image.Image" = field(repr=False, compare=False)
    source_page_count: int

    @property
    def width(self) -> int:
        return self.image.width

    @property
    def height(self) -> int:
        return self.image.height

    @property
    def size(self) -> tuple[int, int]:
        return self.image.size

    def copy_image(self) -> "Image.Image":
        """Return an independent copy of the pixels."""
        return self.image.copy()
