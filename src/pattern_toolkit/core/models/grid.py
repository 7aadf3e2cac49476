"""
Module: grid

Purpose:
    The stitcher's rows x cols arrangement of pattern pages. Pure data
    manipulation: no I/O, no knowledge of which pages were rendered.

Key Classes:
    - Cell: (row, col) grid position
    - GridArrangement: Editable mapping of cells to page numbers

Used By:
    - merger.compositor: merge_grid() reads filled cells
    - service.jobs: Builds arrangements from merge requests

Design Notes:
    Placement policy is "move, don't reject": placing a page that is
    already on the grid moves it, and placing onto an occupied cell evicts
    the previous page back to unplaced. DuplicatePlacement is only raised
    by from_cells(), where a batch of placements cannot express a move.
"""

from __future__ import annotations

from typing import Dict, Iterable, Iterator, List, NamedTuple, Optional, Tuple

from ..errors import DuplicatePlacement, OutOfBounds


class Cell(NamedTuple):
    """Grid position, 0-based from the top-left."""

    row: int
    col: int


class GridArrangement:
    """
    Rows x cols grid of page placements.

    A grid may be partially filled; the merger treats empty cells as
    blank space of the cell size.

    Invariants:
        - rows >= 1, cols >= 1
        - every key satisfies 0 <= row < rows and 0 <= col < cols
        - a page number appears in at most one cell

    Example:
        >>> grid = GridArrangement(2, 2)
        >>> grid.place_page(3, 0, 0)
        >>> grid.place_page(3, 1, 1)   # moves page 3
        >>> grid.page_at(0, 0) is None
        True
    """

    def __init__(self, rows: int, cols: int) -> None:
        if rows < 1:
            raise ValueError(f"rows must be >= 1: {rows}")
        if cols < 1:
            raise ValueError(f"cols must be >= 1: {cols}")
        self._rows = rows
        self._cols = cols
        self._cells: Dict[Cell, int] = {}
        self._positions: Dict[int, Cell] = {}

    # ─────────────────────────────────────────────────────────────────────────
    # Construction
    # ─────────────────────────────────────────────────────────────────────────

    @classmethod
    def from_cells(
        cls,
        rows: int,
        cols: int,
        placements: Iterable[Tuple[int, int, int]],
    ) -> "GridArrangement":
        """
        Build a grid from a batch of (page_number, row, col) placements.

        Raises:
            OutOfBounds: If a placement lies outside the grid
            DuplicatePlacement: If a page is listed twice or two pages
                target the same cell
        """
        grid = cls(rows, cols)
        for page_number, row, col in placements:
            grid._check_bounds(row, col)
            if page_number in grid._positions:
                raise DuplicatePlacement(
                    f"Page {page_number} placed at {grid._positions[page_number]} and ({row}, {col})"
                )
            existing = grid._cells.get(Cell(row, col))
            if existing is not None:
                raise DuplicatePlacement(
                    f"Cell ({row}, {col}) claimed by pages {existing} and {page_number}"
                )
            grid.place_page(page_number, row, col)
        return grid

    # ─────────────────────────────────────────────────────────────────────────
    # Properties
    # ─────────────────────────────────────────────────────────────────────────

    @property
    def rows(self) -> int:
        return self._rows

    @property
    def cols(self) -> int:
        return self._cols

    @property
    def cell_count(self) -> int:
        return self._rows * self._cols

    @property
    def cells(self) -> Dict[Cell, int]:
        """Copy of the filled cells."""
        return dict(self._cells)

    @property
    def placed_pages(self) -> List[int]:
        """Placed page numbers in row-major cell order."""
        return [page for _, page in self.filled_cells()]

    # ─────────────────────────────────────────────────────────────────────────
    # Editing
    # ─────────────────────────────────────────────────────────────────────────

    def place_page(self, page_number: int, row: int, col: int) -> Optional[int]:
        """
        Place a page, moving it if it is already on the grid.

        Args:
            page_number: 1-based page number
            row: Target row
            col: Target column

        Returns:
            Page number evicted from the target cell, or None.

        Raises:
            OutOfBounds: If (row, col) is outside the grid
        """
        self._check_bounds(row, col)
        if page_number < 1:
            raise ValueError(f"page_number must be >= 1: {page_number}")
        target = Cell(row, col)

        previous = self._positions.pop(page_number, None)
        if previous is not None:
            del self._cells[previous]

        evicted = self._cells.get(target)
        if evicted is not None:
            del self._positions[evicted]

        self._cells[target] = page_number
        self._positions[page_number] = target
        return evicted

    def remove_page(self, row: int, col: int) -> Optional[int]:
        """Clear a cell. Returns the removed page number, or None if empty."""
        self._check_bounds(row, col)
        page_number = self._cells.pop(Cell(row, col), None)
        if page_number is not None:
            del self._positions[page_number]
        return page_number

    def resize(self, rows: int, cols: int) -> List[int]:
        """
        Change the grid dimensions.

        Pages in cells that no longer exist become unplaced.

        Returns:
            Page numbers dropped by the resize, in row-major order.
        """
        if rows < 1 or cols < 1:
            raise ValueError(f"grid must be at least 1x1: {rows}x{cols}")
        dropped = [
            page for cell, page in self.filled_cells()
            if cell.row >= rows or cell.col >= cols
        ]
        for page in dropped:
            del self._cells[self._positions.pop(page)]
        self._rows = rows
        self._cols = cols
        return dropped

    def clear(self) -> None:
        self._cells.clear()
        self._positions.clear()

    # ─────────────────────────────────────────────────────────────────────────
    # Queries
    # ─────────────────────────────────────────────────────────────────────────

    def page_at(self, row: int, col: int) -> Optional[int]:
        self._check_bounds(row, col)
        return self._cells.get(Cell(row, col))

    def position_of(self, page_number: int) -> Optional[Cell]:
        return self._positions.get(page_number)

    def is_complete(self) -> bool:
        """Whether every one of the rows x cols cells holds a page."""
        return len(self._cells) == self.cell_count

    def filled_cells(self) -> List[Tuple[Cell, int]]:
        """Filled (cell, page_number) pairs in row-major order."""
        return sorted(self._cells.items())

    def __iter__(self) -> Iterator[Tuple[Cell, int]]:
        return iter(self.filled_cells())

    def __len__(self) -> int:
        return len(self._cells)

    def __repr__(self) -> str:
        return f"GridArrangement(rows={self._rows}, cols={self._cols}, filled={len(self._cells)})"

    def _check_bounds(self, row: int, col: int) -> None:
        if not (0 <= row < self._rows and 0 <= col < self._cols):
            raise OutOfBounds(
                f"Cell ({row}, {col}) is outside a {self._rows}x{self._cols} grid"
            )
