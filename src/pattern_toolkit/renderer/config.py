"""
Module: renderer.config

Purpose:
    Configuration dataclass for page rasterization. Immutable settings
    for render scale and thumbnail output.

Key Classes:
    - RenderConfig: Main configuration for rendering

Dependencies:
    - dataclasses: For frozen dataclass support

Used By:
    - renderer.rasterizer: Render scale
    - renderer.thumbnails: Thumbnail size/quality
    - service.config: ServiceConfig.render
"""

from dataclasses import dataclass

# Pattern symbols stay legible from 2x upwards
MIN_RENDER_SCALE = 2.0


@dataclass(frozen=True)
class RenderConfig:
    """
    Configuration for page rasterization.

    Attributes:
        render_scale: Multiplier over the screen baseline (default 2.5)
        base_dpi: Screen baseline the scale applies to (default 96)
        thumbnail_width: Thumbnail width in pixels (default 200)
        thumbnail_quality: Thumbnail JPEG quality (default 80)

    Example:
        >>> RenderConfig().dpi
        240.0
    """
    render_scale: float = 2.5
    base_dpi: int = 96
    thumbnail_width: int = 200
    thumbnail_quality: int = 80

    def __post_init__(self) -> None:
        """Validate configuration on construction."""
        if self.render_scale < MIN_RENDER_SCALE:
            raise ValueError(
                f"render_scale must be >= {MIN_RENDER_SCALE}: {self.render_scale}"
            )
        if self.base_dpi <= 0:
            raise ValueError(f"base_dpi must be positive: {self.base_dpi}")
        if self.thumbnail_width <= 0:
            raise ValueError(f"thumbnail_width must be positive: {self.thumbnail_width}")
        if not 1 <= self.thumbnail_quality <= 95:
            raise ValueError(f"thumbnail_quality must be 1-95: {self.thumbnail_quality}")

    @property
    def dpi(self) -> float:
        """Effective rendering resolution."""
        return self.base_dpi * self.render_scale

    @property
    def zoom(self) -> float:
        """PDF points (72 per inch) to pixels factor."""
        return self.dpi / 72.0
