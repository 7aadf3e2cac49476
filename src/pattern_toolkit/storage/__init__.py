"""Artifact storage for job intermediates (page images, results)."""

from .artifacts import (
    ArtifactStore,
    LocalArtifactStore,
    ArtifactNotFoundError,
    InvalidArtifactUrl,
    new_job_id,
    is_valid_job_id,
    page_image_name,
    thumbnail_name,
    RESULT_NAME,
    PREVIEW_NAME,
)
from .write_queue import WriteQueue

__all__ = [
    "ArtifactStore",
    "LocalArtifactStore",
    "ArtifactNotFoundError",
    "InvalidArtifactUrl",
    "new_job_id",
    "is_valid_job_id",
    "page_image_name",
    "thumbnail_name",
    "RESULT_NAME",
    "PREVIEW_NAME",
    "WriteQueue",
]
