"""
Module: service.jobs

Purpose:
    Orchestrate upload, merge and cleanup jobs around the engine:
    Upload → Rasterize → Store pages; Merge request → Load pages →
    Merge → Store result and preview.

Key Classes:
    - PatternService: Job orchestration over an ArtifactStore
    - PageInfo, UploadResult, MergeResult: Job results (JSON-ready)

Dependencies:
    - PIL: Decoding stored page images
    - pattern_toolkit.renderer, merger, export: Engine stages
    - pattern_toolkit.storage: Artifact persistence

Used By:
    - api.app: HTTP endpoints
"""

from __future__ import annotations

import io
import logging
from dataclasses import dataclass
from functools import partial
from typing import Any, Dict, Iterator, Mapping, Optional, Tuple, Union

from PIL import Image

from ..core.errors import MissingPage, PatternError
from ..core.models import GridArrangement, PageBitmap, SourceDocument
from ..export.encoder import encode_png
from ..merger import make_preview, merge_grid
from ..progress import NullProgress, ProgressSink, run_with_progress
from ..renderer import iter_page_bitmaps, load_document, make_thumbnail
from ..storage import (
    PREVIEW_NAME,
    RESULT_NAME,
    ArtifactNotFoundError,
    ArtifactStore,
    InvalidArtifactUrl,
    WriteQueue,
    is_valid_job_id,
    new_job_id,
    page_image_name,
    thumbnail_name,
)
from ..timing import TimingLog, WorkBudget
from .config import ServiceConfig
from .sse import COMPLETE, ERROR, PROGRESS, START, format_sse
from .validation import MergeRequest, MergeRequestError, parse_merge_request

logger = logging.getLogger(__name__)

# Composite vs stitch-count aspect difference worth a warning
ASPECT_WARNING_THRESHOLD = 0.10

GENERIC_UPLOAD_ERROR = "Failed to process PDF"


def saving_page_stage(page_number: int, total: int) -> str:
    """Progress text emitted once a page's image and thumbnail are stored."""
    return f"Saving page {page_number} of {total}..."


@dataclass(frozen=True)
class PageInfo:
    """Stored page of an upload job."""
    page_number: int
    image_url: str
    thumbnail_url: str
    width: int
    height: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            "pageNumber": self.page_number,
            "imageUrl": self.image_url,
            "thumbnailUrl": self.thumbnail_url,
            "width": self.width,
            "height": self.height,
        }


@dataclass(frozen=True)
class UploadResult:
    """
    Completed upload job.

    Attributes:
        job_id: Identifier correlating the stored artifacts
        pages: Stored pages in page order
        total_pages: Page count of the document
    """
    job_id: str
    pages: Tuple[PageInfo, ...]
    total_pages: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            "jobId": self.job_id,
            "pages": [page.to_dict() for page in self.pages],
            "totalPages": self.total_pages,
        }


@dataclass(frozen=True)
class MergeResult:
    """Completed merge job."""
    image_url: str
    preview_url: str
    pages_merged: int
    width: int
    height: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            "imageUrl": self.image_url,
            "previewUrl": self.preview_url,
            "pagesMerged": self.pages_merged,
            "dimensions": {"width": self.width, "height": self.height},
        }


class PatternService:
    """
    Upload/merge/cleanup jobs over an artifact store.

    Each call is an independent job with its own document, grid and
    bitmaps; the only shared object is the store.

    Example:
        >>> service = PatternService(LocalArtifactStore(Path("artifacts")))
        >>> upload = service.upload(pdf_bytes)
        >>> merged = service.merge({"jobId": upload.job_id, ...})
    """

    def __init__(self, store: ArtifactStore, config: Optional[ServiceConfig] = None) -> None:
        self.store = store
        self.config = config or ServiceConfig()

    # ─────────────────────────────────────────────────────────────────────────
    # Upload
    # ─────────────────────────────────────────────────────────────────────────

    def upload(self, data: bytes, *, progress: Optional[ProgressSink] = None) -> UploadResult:
        """
        Rasterize an uploaded PDF and store every page.

        Raises:
            UnsupportedDocument: If the bytes are not a PDF
            RenderError: If any page fails (nothing is kept)
        """
        document = load_document(data)
        return self.render_document(document, new_job_id(), progress=progress)

    def render_document(
        self,
        document: SourceDocument,
        job_id: str,
        *,
        progress: Optional[ProgressSink] = None,
    ) -> UploadResult:
        """
        Render and store all pages of a loaded document under job_id.

        On any failure the job's stored artifacts are deleted before the
        error propagates.
        """
        progress = progress or NullProgress()
        budget = WorkBudget(self.config.request_budget_seconds)
        timing = TimingLog()
        render = self.config.render
        logger.info(f"Job {job_id}: rendering {document.page_count} pages")

        try:
            pending = []
            with WriteQueue(self.store, job_id, self.config.write_workers) as queue:
                for bitmap in iter_page_bitmaps(
                    document, render, progress=progress, budget=budget, timing=timing,
                ):
                    image_future = queue.submit(
                        page_image_name(bitmap.page_number),
                        partial(encode_png, bitmap.image),
                    )
                    thumb_future = queue.submit(
                        thumbnail_name(bitmap.page_number),
                        partial(make_thumbnail, bitmap.image, render.thumbnail_width, render.thumbnail_quality),
                    )
                    pending.append((bitmap.page_number, bitmap.size, image_future, thumb_future))
                for page_number, _, image_future, thumb_future in pending:
                    image_future.result()
                    thumb_future.result()
                    progress.emit(
                        saving_page_stage(page_number, document.page_count),
                        page=page_number,
                        total=document.page_count,
                    )
                queue.wait_all()
        except BaseException:
            self.store.delete_job(job_id)
            raise

        pages = tuple(
            PageInfo(
                page_number=page_number,
                image_url=image_future.result(),
                thumbnail_url=thumb_future.result(),
                width=size[0],
                height=size[1],
            )
            for page_number, size, image_future, thumb_future in pending
        )
        logger.debug(timing.summary())
        logger.info(f"Job {job_id}: stored {len(pages)} pages")
        return UploadResult(job_id=job_id, pages=pages, total_pages=document.page_count)

    def stream_upload(self, data: bytes) -> Iterator[str]:
        """
        Upload with progress as server-sent events.

        Yields "start", then "progress" events, then either "complete"
        with the UploadResult payload or "error" with a user message.
        Closing the iterator early cancels rendering.
        """
        try:
            document = load_document(data)
        except PatternError as e:
            logger.warning(f"Upload rejected ({e.kind}): {e}")
            yield format_sse(ERROR, {"message": e.user_message})
            return

        job_id = new_job_id()
        yield format_sse(START, {"jobId": job_id, "totalPages": document.page_count})

        stream = run_with_progress(self.render_document, document, job_id)
        try:
            for event in stream:
                yield format_sse(PROGRESS, event.to_dict())
            result = stream.result()
        except PatternError as e:
            logger.error(f"Job {job_id}: upload failed ({e.kind}): {e}")
            yield format_sse(ERROR, {"message": e.user_message})
            return
        except Exception:
            logger.exception(f"Job {job_id}: upload failed")
            yield format_sse(ERROR, {"message": GENERIC_UPLOAD_ERROR})
            return
        finally:
            stream.close()

        yield format_sse(COMPLETE, result.to_dict())

    # ─────────────────────────────────────────────────────────────────────────
    # Merge
    # ─────────────────────────────────────────────────────────────────────────

    def merge(
        self,
        request: Union[MergeRequest, Mapping[str, Any]],
        *,
        progress: Optional[ProgressSink] = None,
    ) -> MergeResult:
        """
        Merge stored pages of a job into one composite.

        Args:
            request: MergeRequest or raw JSON payload (validated here)
            progress: Sink for merge stage events

        Raises:
            MergeRequestError: If the payload is invalid
            DuplicatePlacement, OutOfBounds: If placements conflict
            MissingPage: If a page cannot be loaded from the store
            InconsistentCellSize, InvalidOverlap: From the merger
        """
        if not isinstance(request, MergeRequest):
            request = parse_merge_request(request)

        budget = WorkBudget(self.config.request_budget_seconds)
        timing = TimingLog()

        grid = GridArrangement.from_cells(
            request.rows,
            request.cols,
            [(cell.page_number, cell.row, cell.col) for cell in request.cells],
        )
        pages = self._load_pages(request, budget)

        overlap = request.overlap_pixels
        if overlap is None:
            overlap = self.config.merge.default_overlap_pixels

        composite = merge_grid(
            grid,
            pages,
            overlap,
            fill_color=self.config.merge.fill_color,
            max_pixels=self.config.merge.max_canvas_pixels,
            progress=progress,
            budget=budget,
            timing=timing,
        )

        mismatch = request.stitch_config.aspect_mismatch(composite.width, composite.height)
        if mismatch > ASPECT_WARNING_THRESHOLD:
            logger.warning(
                f"Job {request.job_id}: composite {composite.width}x{composite.height}px does not "
                f"match pattern {request.stitch_config.width}x{request.stitch_config.height} stitches "
                f"({mismatch:.0%} aspect difference)"
            )

        image_url = self.store.put(request.job_id, RESULT_NAME, encode_png(composite.image))
        preview_url = self.store.put(
            request.job_id,
            PREVIEW_NAME,
            make_preview(composite, self.config.merge.preview_width, self.config.merge.preview_quality),
        )
        logger.debug(timing.summary())

        return MergeResult(
            image_url=image_url,
            preview_url=preview_url,
            pages_merged=composite.source_page_count,
            width=composite.width,
            height=composite.height,
        )

    # ─────────────────────────────────────────────────────────────────────────
    # Cleanup
    # ─────────────────────────────────────────────────────────────────────────

    def cleanup(self, job_id: Any) -> int:
        """
        Delete every stored artifact of a job.

        Raises:
            MergeRequestError: If job_id is missing or malformed
        """
        if not job_id:
            raise MergeRequestError("Missing jobId")
        if not isinstance(job_id, str) or not is_valid_job_id(job_id):
            raise MergeRequestError("Invalid jobId format")
        return self.store.delete_job(job_id)

    def _load_pages(self, request: MergeRequest, budget: WorkBudget) -> Dict[int, PageBitmap]:
        pages: Dict[int, PageBitmap] = {}
        for cell in request.cells:
            budget.check(f"page {cell.page_number}")
            try:
                data = self.store.get(cell.image_url, job_id=request.job_id)
            except (ArtifactNotFoundError, InvalidArtifactUrl) as e:
                raise MissingPage(cell.page_number, str(e)) from e
            try:
                image = Image.open(io.BytesIO(data))
                image.load()
            except OSError as e:
                raise MissingPage(cell.page_number, f"Stored page is not a readable image: {e}") from e
            pages[cell.page_number] = PageBitmap(cell.page_number, image)
        return pages
