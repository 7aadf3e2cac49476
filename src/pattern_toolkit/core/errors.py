"""
Module: core.errors

Purpose:
    Error taxonomy for the pattern composition engine. Every error is
    terminal for the operation that raised it; nothing is retried inside
    the engine.

Key Classes:
    - PatternError: Base class carrying a short, user-facing message
    - UnsupportedDocument, RenderError: Rasterization failures
    - OutOfBounds, DuplicatePlacement: Grid editing failures
    - MissingPage, InconsistentCellSize, InvalidOverlap, EmptyGrid,
      CompositeTooLarge: Merge failures
    - InvalidExportSize: Export failures
    - OperationCancelled, BudgetExceeded: Request lifecycle failures

Used By:
    - pattern_toolkit.renderer, merger, export: Raise
    - pattern_toolkit.api: Translates to HTTP responses

Design Notes:
    str(error) is the diagnostic detail (logged). user_message is what a
    stitcher sees; it never leaks internal details.
"""

from __future__ import annotations

from typing import Optional


class PatternError(Exception):
    """Base class for all engine errors."""

    user_message = "Something went wrong while processing the pattern."

    def __init__(self, detail: str = "", *, user_message: Optional[str] = None):
        super().__init__(detail or self.user_message)
        if user_message is not None:
            self.user_message = user_message

    @property
    def kind(self) -> str:
        """Internal error kind, used for diagnostics only."""
        return type(self).__name__


class UnsupportedDocument(PatternError):
    """Byte stream could not be parsed as a PDF."""

    user_message = "File must be a supported pattern document (PDF)."


class RenderError(PatternError):
    """A single page failed to rasterize; the whole render is aborted."""

    user_message = "A page of the document could not be rendered."

    def __init__(self, page_number: int, detail: str = ""):
        self.page_number = page_number
        super().__init__(
            f"Failed to render page {page_number}" + (f": {detail}" if detail else ""),
            user_message=f"Page {page_number} of the document could not be rendered.",
        )


class OutOfBounds(PatternError):
    """Grid position lies outside the arrangement."""

    user_message = "That position is outside the grid."


class DuplicatePlacement(PatternError):
    """A page or a cell was claimed twice in one placement batch."""

    user_message = "Each page can only be placed once, one page per cell."


class MissingPage(PatternError):
    """A grid cell references a page that was never rendered."""

    user_message = "A selected page is not available. Please upload the document again."

    def __init__(self, page_number: int, detail: str = ""):
        self.page_number = page_number
        super().__init__(detail or f"Page {page_number} is not in the rendered page set")


class InconsistentCellSize(PatternError):
    """Contributing pages do not share one pixel size."""

    user_message = "The selected pages have different sizes and cannot be merged."


class InvalidOverlap(PatternError):
    """Overlap is negative or swallows a whole cell."""

    user_message = "The overlap is too large for the page size."


class InvalidExportSize(PatternError):
    """Resolved export width or height is not positive."""

    user_message = "Export width and height must be greater than zero."


class CompositeTooLarge(PatternError):
    """Merged canvas would exceed the configured pixel limit."""

    user_message = "The merged pattern would be too large. Use fewer rows or columns."


class EmptyGrid(PatternError):
    """Merge was requested with no placed pages."""

    user_message = "No pages selected. Please select at least one pattern page."


class OperationCancelled(PatternError):
    """The progress consumer went away; work was abandoned."""

    user_message = "The operation was cancelled."


class BudgetExceeded(PatternError):
    """Wall-clock budget ran out; unit names the page/cell being started."""

    user_message = "Processing took too long. Try fewer pages."

    def __init__(self, unit: str, elapsed: float, budget: float):
        self.unit = unit
        self.elapsed = elapsed
        self.budget = budget
        super().__init__(
            f"Budget of {budget:.1f}s exceeded after {elapsed:.1f}s before {unit}"
        )
