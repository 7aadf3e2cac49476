import sys
from pathlib import Path
from typing import Sequence, Tuple

import fitz
import pytest
from PIL import Image

# Add src to sys.path so we can import pattern_toolkit
SRC_PATH = Path(__file__).resolve().parent.parent / "src"
if SRC_PATH.as_posix() not in sys.path:
    sys.path.insert(0, SRC_PATH.as_posix())

from pattern_toolkit.core.models import PageBitmap  # noqa: E402
from pattern_toolkit.storage import LocalArtifactStore  # noqa: E402


def make_pdf(page_sizes: Sequence[Tuple[float, float]]) -> bytes:
    """Build a PDF with one filled, labelled rectangle per page."""
    doc = fitz.open()
    for index, (width, height) in enumerate(page_sizes):
        page = doc.new_page(width=width, height=height)
        page.draw_rect(fitz.Rect(10, 10, width - 10, height - 10), color=(0, 0, 0), fill=(0.9, 0.2, 0.2))
        page.insert_text((20, 30), f"Page {index + 1}", fontsize=12)
    data = doc.tobytes()
    doc.close()
    return data


def solid_page(page_number: int, size: Tuple[int, int], color) -> PageBitmap:
    """Rendered page of one flat colour."""
    return PageBitmap(page_number, Image.new("RGB", size, color))


# Common test fixtures
@pytest.fixture
def pdf_factory():
    """Return the make_pdf builder."""
    return make_pdf


@pytest.fixture
def page_factory():
    """Return the solid_page builder."""
    return solid_page


@pytest.fixture
def pdf_bytes() -> bytes:
    """Three-page document of 72pt x 96pt pages (240x320px at the default scale)."""
    return make_pdf([(72, 96)] * 3)


@pytest.fixture
def store(tmp_path: Path) -> LocalArtifactStore:
    """Artifact store rooted in a temporary directory."""
    return LocalArtifactStore(tmp_path / "artifacts")


@pytest.fixture
def sample_image() -> Image.Image:
    """Create a simple test image."""
    return Image.new("RGB", (200, 100), color="white")
