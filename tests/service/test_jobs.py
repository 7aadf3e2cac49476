"""
Integration tests for PatternService (upload → merge → cleanup) over a
LocalArtifactStore in a temporary directory.
"""

import io
import json
import logging
from unittest.mock import patch

import pytest
from PIL import Image

from pattern_toolkit.core.errors import (
    DuplicatePlacement,
    MissingPage,
    OutOfBounds,
    RenderError,
    UnsupportedDocument,
)
from pattern_toolkit.progress import CallbackProgress
from pattern_toolkit.service import MergeRequestError, PatternService, ServiceConfig
from pattern_toolkit.storage import PREVIEW_NAME, RESULT_NAME


@pytest.fixture
def service(store):
    return PatternService(store, ServiceConfig(storage_root=store.root))


@pytest.fixture
def uploaded(service, pdf_bytes):
    return service.upload(pdf_bytes)


def merge_body(upload, placements, rows, cols, stitch=(100, 100), overlap=0):
    """Merge payload placing (page_number, row, col) tuples."""
    urls = {page.page_number: page.image_url for page in upload.pages}
    body = {
        "jobId": upload.job_id,
        "cells": [
            {"pageNumber": n, "row": r, "col": c, "imageUrl": urls.get(n, f"artifact://{upload.job_id}/pages/page-{n}.png")}
            for n, r, c in placements
        ],
        "arrangement": {"rows": rows, "cols": cols},
        "stitchConfig": {"width": stitch[0], "height": stitch[1]},
    }
    if overlap is not None:
        body["overlapPixels"] = overlap
    return body


def parse_sse(chunks):
    events = []
    for chunk in chunks:
        lines = chunk.strip().split("\n")
        assert lines[0].startswith("event: ")
        assert lines[1].startswith("data: ")
        events.append((lines[0][len("event: "):], json.loads(lines[1][len("data: "):])))
    return events


def job_dirs(store):
    merge_root = store.root / "merge"
    return list(merge_root.iterdir()) if merge_root.exists() else []


# ─────────────────────────────────────────────────────────────────────────────
# Upload
# ─────────────────────────────────────────────────────────────────────────────

def test_upload_when_valid_pdf_then_pages_and_thumbnails_stored(service, store, pdf_bytes):
    # Act
    result = service.upload(pdf_bytes)

    # Assert
    assert result.total_pages == 3
    assert [p.page_number for p in result.pages] == [1, 2, 3]
    first = result.pages[0]
    page_image = Image.open(io.BytesIO(store.get(first.image_url, job_id=result.job_id)))
    assert page_image.format == "PNG"
    assert page_image.size == (first.width, first.height)
    thumb = Image.open(io.BytesIO(store.get(first.thumbnail_url, job_id=result.job_id)))
    assert thumb.format == "JPEG"
    assert thumb.width <= 200


def test_upload_result_to_dict_when_serialised_then_camel_case(uploaded):
    data = uploaded.to_dict()
    assert data["jobId"] == uploaded.job_id
    assert data["totalPages"] == 3
    assert set(data["pages"][0]) == {"pageNumber", "imageUrl", "thumbnailUrl", "width", "height"}


def test_upload_when_not_pdf_then_unsupported_and_nothing_stored(service, store):
    with pytest.raises(UnsupportedDocument):
        service.upload(b"this is not a pdf")
    assert job_dirs(store) == []


def test_upload_when_page_fails_then_render_error_and_job_removed(service, store, pdf_bytes):
    ok = Image.new("RGB", (10, 10))
    with patch(
        "pattern_toolkit.renderer.rasterizer.render_page",
        side_effect=[ok, RuntimeError("bad page")],
    ):
        with pytest.raises(RenderError) as exc_info:
            service.upload(pdf_bytes)

    assert exc_info.value.page_number == 2
    assert job_dirs(store) == []


def test_upload_when_pages_stored_then_saving_stage_per_page(service, pdf_bytes):
    stages = []

    service.upload(pdf_bytes, progress=CallbackProgress(stages.append))

    saving = [(e.stage, e.page, e.total) for e in stages if e.stage.startswith("Saving")]
    assert saving == [
        ("Saving page 1 of 3...", 1, 3),
        ("Saving page 2 of 3...", 2, 3),
        ("Saving page 3 of 3...", 3, 3),
    ]


def test_upload_when_artifact_write_fails_then_error_and_job_removed(service, store, pdf_bytes):
    with patch.object(store, "put", side_effect=OSError("disk full")):
        with pytest.raises(OSError, match="disk full"):
            service.upload(pdf_bytes)

    assert job_dirs(store) == []


# ─────────────────────────────────────────────────────────────────────────────
# Streaming upload
# ─────────────────────────────────────────────────────────────────────────────

def test_stream_upload_when_valid_then_start_progress_complete(service, pdf_bytes):
    # Act
    events = parse_sse(service.stream_upload(pdf_bytes))

    # Assert
    kinds = [kind for kind, _ in events]
    assert kinds == ["start"] + ["progress"] * 6 + ["complete"]
    assert events[0][1]["totalPages"] == 3
    assert events[1][1] == {"stage": "Rendering page 1 of 3...", "page": 1, "total": 3}
    stages = [payload["stage"] for kind, payload in events if kind == "progress"]
    assert stages[3:] == [
        "Saving page 1 of 3...",
        "Saving page 2 of 3...",
        "Saving page 3 of 3...",
    ]
    complete = events[-1][1]
    assert complete["jobId"] == events[0][1]["jobId"]
    assert len(complete["pages"]) == 3


def test_stream_upload_when_not_pdf_then_single_error_event(service):
    events = parse_sse(service.stream_upload(b"garbage"))
    assert events == [("error", {"message": UnsupportedDocument.user_message})]


def test_stream_upload_when_page_fails_then_error_event_and_job_removed(service, store, pdf_bytes):
    ok = Image.new("RGB", (10, 10))
    with patch(
        "pattern_toolkit.renderer.rasterizer.render_page",
        side_effect=[ok, RuntimeError("bad page")],
    ):
        events = parse_sse(service.stream_upload(pdf_bytes))

    assert events[0][0] == "start"
    assert events[-1] == ("error", {"message": "Page 2 of the document could not be rendered."})
    assert "complete" not in [kind for kind, _ in events]
    assert job_dirs(store) == []


# ─────────────────────────────────────────────────────────────────────────────
# Merge
# ─────────────────────────────────────────────────────────────────────────────

def test_merge_when_two_pages_side_by_side_then_result_and_preview_stored(service, store, uploaded):
    # Arrange
    page = uploaded.pages[0]
    body = merge_body(uploaded, [(1, 0, 0), (2, 0, 1)], rows=1, cols=2, overlap=10)

    # Act
    result = service.merge(body)

    # Assert
    assert result.pages_merged == 2
    assert (result.width, result.height) == (2 * page.width - 10, page.height)
    merged = Image.open(io.BytesIO(store.get(result.image_url, job_id=uploaded.job_id)))
    assert merged.size == (result.width, result.height)
    assert result.image_url.endswith(RESULT_NAME)
    assert result.preview_url.endswith(PREVIEW_NAME)
    assert result.to_dict()["dimensions"] == {"width": result.width, "height": result.height}


def test_merge_when_overlap_omitted_then_default_three_pixels(service, uploaded):
    page = uploaded.pages[0]
    body = merge_body(uploaded, [(1, 0, 0), (3, 1, 0)], rows=2, cols=1, overlap=None)

    result = service.merge(body)

    assert (result.width, result.height) == (page.width, 2 * page.height - 3)


def test_merge_when_aspect_far_from_stitches_then_logs_warning(service, uploaded, caplog):
    body = merge_body(uploaded, [(1, 0, 0), (2, 0, 1)], rows=1, cols=2, stitch=(10, 100))

    with caplog.at_level(logging.WARNING, logger="pattern_toolkit"):
        service.merge(body)

    assert "aspect difference" in caplog.text


def test_merge_when_page_of_other_job_then_missing_page(service, uploaded, pdf_bytes):
    other = service.upload(pdf_bytes)
    body = merge_body(uploaded, [(1, 0, 0)], rows=1, cols=1)
    body["cells"][0]["imageUrl"] = other.pages[0].image_url

    with pytest.raises(MissingPage) as exc_info:
        service.merge(body)
    assert exc_info.value.page_number == 1


def test_merge_when_page_not_stored_then_missing_page(service, uploaded):
    body = merge_body(uploaded, [(1, 0, 0), (9, 0, 1)], rows=1, cols=2)
    with pytest.raises(MissingPage):
        service.merge(body)


def test_merge_when_cell_claimed_twice_then_duplicate_placement(service, uploaded):
    body = merge_body(uploaded, [(1, 0, 0), (2, 0, 0)], rows=1, cols=2)
    with pytest.raises(DuplicatePlacement):
        service.merge(body)


def test_merge_when_cell_outside_grid_then_out_of_bounds(service, uploaded):
    body = merge_body(uploaded, [(1, 0, 0), (2, 0, 2)], rows=1, cols=2)
    with pytest.raises(OutOfBounds):
        service.merge(body)


def test_merge_when_no_cells_then_no_pages_selected(service, uploaded):
    body = merge_body(uploaded, [], rows=1, cols=1)
    with pytest.raises(MergeRequestError) as exc_info:
        service.merge(body)
    assert exc_info.value.user_message == "No pages selected. Please select at least one pattern page."


# ─────────────────────────────────────────────────────────────────────────────
# Cleanup
# ─────────────────────────────────────────────────────────────────────────────

def test_cleanup_when_job_exists_then_artifacts_deleted(service, store, uploaded):
    deleted = service.cleanup(uploaded.job_id)

    assert deleted == 6
    assert job_dirs(store) == []


@pytest.mark.parametrize("job_id,message", [
    (None, "Missing jobId"),
    ("", "Missing jobId"),
    ("../../etc", "Invalid jobId format"),
    (123, "Invalid jobId format"),
])
def test_cleanup_when_job_id_invalid_then_raises(service, job_id, message):
    with pytest.raises(MergeRequestError) as exc_info:
        service.cleanup(job_id)
    assert exc_info.value.user_message == message
