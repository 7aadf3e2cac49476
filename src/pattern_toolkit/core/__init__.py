"""Core data models and errors shared by every pipeline stage."""

from __future__ import annotations

from .errors import (
    PatternError,
    UnsupportedDocument,
    RenderError,
    OutOfBounds,
    DuplicatePlacement,
    MissingPage,
    InconsistentCellSize,
    InvalidOverlap,
    InvalidExportSize,
    EmptyGrid,
    CompositeTooLarge,
    OperationCancelled,
    BudgetExceeded,
)

__all__ = [
    "PatternError",
    "UnsupportedDocument",
    "RenderError",
    "OutOfBounds",
    "DuplicatePlacement",
    "MissingPage",
    "InconsistentCellSize",
    "InvalidOverlap",
    "InvalidExportSize",
    "EmptyGrid",
    "CompositeTooLarge",
    "OperationCancelled",
    "BudgetExceeded",
]
