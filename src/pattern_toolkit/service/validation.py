"""
Module: service.validation

Purpose:
    Validate merge request payloads before the engine runs. Messages are
    short and shown to the stitcher as-is.

Key Functions:
    - parse_merge_request(): JSON payload -> MergeRequest

Key Classes:
    - MergeRequest, MergeCell: Validated request
    - MergeRequestError: Validation failure

Used By:
    - service.jobs: PatternService.merge()
    - api.app: Merge endpoint
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping, Optional, Tuple

from ..core.errors import PatternError
from ..core.models import StitchConfig
from ..storage.artifacts import is_valid_job_id

NO_PAGES_SELECTED = "No pages selected. Please select at least one pattern page."


class MergeRequestError(PatternError):
    """Merge request rejected before reaching the engine."""

    def __init__(self, message: str):
        super().__init__(message, user_message=message)


@dataclass(frozen=True)
class MergeCell:
    """One placement of a merge request."""
    page_number: int
    row: int
    col: int
    image_url: str


@dataclass(frozen=True)
class MergeRequest:
    """
    Validated merge request.

    Attributes:
        job_id: Upload job the pages belong to
        cells: Page placements
        rows: Grid rows
        cols: Grid columns
        stitch_config: Pattern stitch counts
        overlap_pixels: Seam overlap, None for the service default
    """
    job_id: str
    cells: Tuple[MergeCell, ...]
    rows: int
    cols: int
    stitch_config: StitchConfig
    overlap_pixels: Optional[int] = None


def parse_merge_request(body: Any) -> MergeRequest:
    """
    Validate a merge request payload.

    Args:
        body: Decoded JSON body, e.g.
            {"jobId": ..., "cells": [{"pageNumber", "row", "col", "imageUrl"}],
             "arrangement": {"rows", "cols"}, "stitchConfig": {"width", "height"},
             "overlapPixels": 3}

    Returns:
        MergeRequest

    Raises:
        MergeRequestError: With a user-facing message
    """
    if not isinstance(body, Mapping):
        raise MergeRequestError("Invalid request body")

    job_id = body.get("jobId")
    if not job_id:
        raise MergeRequestError("Missing jobId")
    if not isinstance(job_id, str) or not is_valid_job_id(job_id):
        raise MergeRequestError("Invalid jobId format")

    raw_cells = body.get("cells")
    if not raw_cells:
        raise MergeRequestError(NO_PAGES_SELECTED)
    if not isinstance(raw_cells, list):
        raise MergeRequestError("Invalid cells")

    arrangement = body.get("arrangement")
    if not isinstance(arrangement, Mapping) or not _positive_int(arrangement.get("rows")) \
            or not _positive_int(arrangement.get("cols")):
        raise MergeRequestError("Missing or invalid arrangement")

    stitch = body.get("stitchConfig")
    if not isinstance(stitch, Mapping) or not _positive_int(stitch.get("width")) \
            or not _positive_int(stitch.get("height")):
        raise MergeRequestError("Missing or invalid stitchConfig")

    cells = []
    for raw in raw_cells:
        if not isinstance(raw, Mapping):
            raise MergeRequestError("Invalid cell data: missing pageNumber, row, or col")
        page_number, row, col = raw.get("pageNumber"), raw.get("row"), raw.get("col")
        if page_number is None or row is None or col is None:
            raise MergeRequestError("Invalid cell data: missing pageNumber, row, or col")
        if not (_int(page_number) and _int(row) and _int(col)) or page_number < 1 or row < 0 or col < 0:
            raise MergeRequestError("Invalid cell data: pageNumber, row and col must be whole numbers")
        if not raw.get("imageUrl"):
            raise MergeRequestError(f"Missing imageUrl for page {page_number}")
        cells.append(MergeCell(page_number, row, col, raw["imageUrl"]))

    overlap = body.get("overlapPixels")
    if overlap is not None and (not _int(overlap) or overlap < 0):
        raise MergeRequestError("Invalid overlapPixels")

    return MergeRequest(
        job_id=job_id,
        cells=tuple(cells),
        rows=arrangement["rows"],
        cols=arrangement["cols"],
        stitch_config=StitchConfig(stitch["width"], stitch["height"]),
        overlap_pixels=overlap,
    )


def _int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def _positive_int(value: Any) -> bool:
    return _int(value) and value > 0
