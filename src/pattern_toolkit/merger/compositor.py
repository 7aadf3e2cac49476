"""
Module: merger.compositor

Purpose:
    Stitch a grid of page bitmaps into one composite image, removing the
    duplicated overlap margin exactly once per internal seam.

Key Functions:
    - merge_grid(): Merge a GridArrangement into a CompositeImage
    - composite_size(): Canvas size for a grid, cell size and overlap
    - cell_origin(): Top-left paste position of a cell

Dependencies:
    - PIL.Image: Canvas creation and pasting

Used By:
    - service.jobs: Merge pipeline
    - cli: merge command

Design Notes:
    Overlap removal is realized purely through the paste offsets: each
    page is pasted un-cropped at col*(w-o), row*(h-o), so neighbouring
    pages share an o-pixel strip and the later (row-major) page wins it.
    The outer boundary of the composite is never trimmed. No source
    pixels are cropped or resampled.
"""

from __future__ import annotations

import logging
from typing import Mapping, Optional, Tuple, Union

from PIL import Image

from ..core.errors import (
    CompositeTooLarge,
    EmptyGrid,
    InconsistentCellSize,
    InvalidOverlap,
    MissingPage,
)
from ..core.models import CompositeImage, GridArrangement, OverlapSpec, PageBitmap
from ..progress import NullProgress, ProgressSink
from ..timing import TimingLog, WorkBudget, timed_unit
from .config import DEFAULT_MAX_CANVAS_PIXELS, WHITE

logger = logging.getLogger(__name__)

EXTRACTING_GRIDS = "Extracting grid sections..."
MERGING_PATTERN = "Merging pattern..."
FINALIZING = "Finalizing..."


def composite_size(
    rows: int,
    cols: int,
    cell_size: Tuple[int, int],
    overlap: int,
) -> Tuple[int, int]:
    """
    Size of the merged canvas.

    Example:
        >>> composite_size(2, 2, (1000, 1000), 50)
        (1950, 1950)
    """
    cell_width, cell_height = cell_size
    return (
        cols * cell_width - (cols - 1) * overlap,
        rows * cell_height - (rows - 1) * overlap,
    )


def cell_origin(
    row: int,
    col: int,
    cell_size: Tuple[int, int],
    overlap: int,
) -> Tuple[int, int]:
    """
    Top-left paste position of a cell on the canvas.

    Example:
        >>> cell_origin(1, 1, (1000, 1000), 50)
        (950, 950)
    """
    cell_width, cell_height = cell_size
    return col * (cell_width - overlap), row * (cell_height - overlap)


def merge_grid(
    arrangement: GridArrangement,
    pages: Mapping[int, PageBitmap],
    overlap: Union[OverlapSpec, int] = OverlapSpec(),
    *,
    fill_color: Tuple[int, int, int] = WHITE,
    max_pixels: int = DEFAULT_MAX_CANVAS_PIXELS,
    progress: Optional[ProgressSink] = None,
    budget: Optional[WorkBudget] = None,
    timing: Optional[TimingLog] = None,
) -> CompositeImage:
    """
    Merge the placed pages of a grid into one composite image.

    Only populated cells are drawn; empty cells stay fill_color. A 1x1
    grid yields a pixel-identical copy of its page.

    Args:
        arrangement: Grid of page placements
        pages: Rendered bitmaps keyed by page number
        overlap: Overlap spec or pixel count trimmed per internal seam
        fill_color: RGB colour of unplaced cells (default white)
        max_pixels: Largest canvas (width*height) to allocate
        progress: Sink for coarse stage events
        budget: Optional wall-clock budget, checked per cell
        timing: Optional TimingLog collecting per-cell durations

    Returns:
        CompositeImage of size cols*w-(cols-1)*o x rows*h-(rows-1)*o.

    Raises:
        EmptyGrid: If no cell is filled
        MissingPage: If a cell references a page not in pages
        InconsistentCellSize: If placed pages differ in pixel size
        InvalidOverlap: If overlap >= cell width or height
        CompositeTooLarge: If the canvas would exceed max_pixels
        OperationCancelled: If the progress consumer went away
        BudgetExceeded: If the wall-clock budget ran out

    Example:
        >>> grid = GridArrangement.from_cells(1, 2, [(1, 0, 0), (2, 0, 1)])
        >>> merged = merge_grid(grid, {p.page_number: p for p in pages}, 50)
        >>> merged.size
        (1950, 1000)
    """
    progress = progress or NullProgress()
    if not isinstance(overlap, OverlapSpec):
        overlap = OverlapSpec(overlap)
    overlap_px = overlap.overlap_pixels

    progress.emit(EXTRACTING_GRIDS)

    filled = arrangement.filled_cells()
    if not filled:
        raise EmptyGrid("Grid has no placed pages")

    placed = []
    for cell, page_number in filled:
        bitmap = pages.get(page_number)
        if bitmap is None:
            raise MissingPage(page_number)
        placed.append((cell, bitmap))

    cell_size = placed[0][1].size
    for cell, bitmap in placed[1:]:
        if bitmap.size != cell_size:
            raise InconsistentCellSize(
                f"Page {bitmap.page_number} at {tuple(cell)} is {bitmap.width}x{bitmap.height}px, "
                f"expected {cell_size[0]}x{cell_size[1]}px"
            )

    if overlap_px >= cell_size[0] or overlap_px >= cell_size[1]:
        raise InvalidOverlap(
            f"Overlap {overlap_px}px must be smaller than the cell size "
            f"{cell_size[0]}x{cell_size[1]}px"
        )

    if arrangement.rows == 1 and arrangement.cols == 1:
        only = placed[0][1]
        progress.emit(FINALIZING)
        logger.info(f"Single-cell grid, composite is page {only.page_number} as-is")
        return CompositeImage(image=only.image.copy(), source_page_count=1)

    size = composite_size(arrangement.rows, arrangement.cols, cell_size, overlap_px)
    if size[0] * size[1] > max_pixels:
        raise CompositeTooLarge(
            f"{arrangement.rows}x{arrangement.cols} grid of {cell_size[0]}x{cell_size[1]}px pages "
            f"needs a {size[0]}x{size[1]}px canvas, limit is {max_pixels} pixels"
        )
    progress.emit(MERGING_PATTERN)

    with timed_unit(timing, "merge"):
        canvas = Image.new("RGB", size, fill_color)
        for cell, bitmap in placed:
            unit = f"cell ({cell.row}, {cell.col})"
            if budget is not None:
                budget.check(unit)
            with timed_unit(timing, "merge", unit):
                image = bitmap.image if bitmap.image.mode == "RGB" else bitmap.image.convert("RGB")
                canvas.paste(image, cell_origin(cell.row, cell.col, cell_size, overlap_px))

    progress.emit(FINALIZING)
    logger.info(
        f"Merged {len(placed)} pages into {arrangement.rows}x{arrangement.cols} grid: "
        f"{size[0]}x{size[1]}px (overlap {overlap_px}px)"
    )
    return CompositeImage(image=canvas, source_page_count=len(placed))
