"""
Module: renderer.rasterizer

Purpose:
    Convert PDF pages into uniform-resolution RGB bitmaps. Every page of
    the document is rendered, in order, at one scale factor; deciding
    which pages hold pattern content is left to the caller.

Key Functions:
    - load_document(): Parse uploaded bytes into a SourceDocument
    - iter_page_bitmaps(): Lazily render pages 1..N
    - rasterize_document(): Render all pages or fail as a whole
    - render_page(): Render a single PyMuPDF page

Dependencies:
    - fitz (PyMuPDF): PDF parsing and rendering
    - PIL.Image: Bitmap handling

Used By:
    - service.jobs: Upload pipeline
    - cli: merge command
"""

from __future__ import annotations

import logging
from typing import Iterator, List, Optional

import fitz
from PIL import Image

from ..core.errors import RenderError, UnsupportedDocument
from ..core.models import PageBitmap, SourceDocument
from ..progress import ProgressSink, NullProgress
from ..timing import TimingLog, WorkBudget, timed_unit
from .config import RenderConfig

logger = logging.getLogger(__name__)

PDF_FILETYPE = "pdf"


def rendering_page_stage(page_number: int, total: int) -> str:
    """Progress text emitted before a page is rendered."""
    return f"Rendering page {page_number} of {total}..."


def load_document(data: bytes) -> SourceDocument:
    """
    Parse uploaded bytes as a PDF and count its pages.

    Args:
        data: Raw upload bytes

    Returns:
        SourceDocument holding the bytes and page count.

    Raises:
        UnsupportedDocument: If the bytes are not a readable PDF with
            at least one page

    Example:
        >>> document = load_document(Path("pattern.pdf").read_bytes())
        >>> document.page_count
        12
    """
    if not data:
        raise UnsupportedDocument("Empty upload")
    doc = _open(data)
    try:
        page_count = doc.page_count
    finally:
        doc.close()
    if page_count < 1:
        raise UnsupportedDocument("Document has no pages")
    return SourceDocument(data=data, page_count=page_count)


def render_page(page: "fitz.Page", config: RenderConfig) -> Image.Image:
    """
    Render one page to an RGB image at the configured scale.

    Args:
        page: PyMuPDF page
        config: Render settings

    Returns:
        RGB PIL Image.
    """
    matrix = fitz.Matrix(config.zoom, config.zoom)
    pix = page.get_pixmap(matrix=matrix, alpha=False, colorspace=fitz.csRGB)
    return Image.frombytes("RGB", (pix.width, pix.height), pix.samples)


def iter_page_bitmaps(
    document: SourceDocument,
    config: RenderConfig = RenderConfig(),
    *,
    progress: Optional[ProgressSink] = None,
    budget: Optional[WorkBudget] = None,
    timing: Optional[TimingLog] = None,
) -> Iterator[PageBitmap]:
    """
    Render pages 1..N in order, one at a time.

    Page N+1 is not started until page N's bitmap has been yielded. A
    progress event is emitted before each page; the budget is checked
    before each page.

    Raises:
        UnsupportedDocument: If the document cannot be opened
        RenderError: If a page fails to render
        OperationCancelled: If the progress consumer went away
        BudgetExceeded: If the wall-clock budget ran out
    """
    progress = progress or NullProgress()
    doc = _open(document.data)
    try:
        total = doc.page_count
        for index in range(total):
            page_number = index + 1
            if budget is not None:
                budget.check(f"page {page_number}")
            progress.emit(rendering_page_stage(page_number, total), page=page_number, total=total)
            with timed_unit(timing, "rasterize", f"page {page_number}"):
                try:
                    image = render_page(doc.load_page(index), config)
                except Exception as e:
                    raise RenderError(page_number, str(e)) from e
            yield PageBitmap(page_number=page_number, image=image)
    finally:
        doc.close()


def rasterize_document(
    document: SourceDocument,
    config: RenderConfig = RenderConfig(),
    *,
    progress: Optional[ProgressSink] = None,
    budget: Optional[WorkBudget] = None,
    timing: Optional[TimingLog] = None,
) -> List[PageBitmap]:
    """
    Render every page of a document.

    Partial results are never returned: any failing page aborts the
    whole operation.

    Args:
        document: Loaded document
        config: Render settings
        progress: Sink receiving "Rendering page k of N..." events
        budget: Optional wall-clock budget, checked per page
        timing: Optional TimingLog collecting per-page durations

    Returns:
        PageBitmaps with page numbers 1..N in ascending order.

    Example:
        >>> pages = rasterize_document(load_document(data))
        >>> [p.page_number for p in pages]
        [1, 2, 3]
    """
    with timed_unit(timing, "rasterize"):
        pages = list(iter_page_bitmaps(
            document, config, progress=progress, budget=budget, timing=timing,
        ))
    if pages:
        logger.info(
            f"Rendered {len(pages)} pages at {config.dpi:.0f} DPI "
            f"({pages[0].width}x{pages[0].height}px first page)"
        )
    return pages


def _open(data: bytes) -> "fitz.Document":
    # PyMuPDF sniffs the stream and ignores filetype, so images open too
    try:
        doc = fitz.open(stream=data, filetype=PDF_FILETYPE)
    except Exception as e:
        raise UnsupportedDocument(f"Could not open PDF: {e}") from e
    if not doc.is_pdf:
        doc.close()
        raise UnsupportedDocument("Upload is not a PDF")
    return doc
