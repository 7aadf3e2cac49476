"""
Module: storage.artifacts

Purpose:
    Storage for intermediate artifacts of a job (page images, thumbnails,
    merged result and preview), addressed by opaque artifact URLs and
    grouped by job id so a job can be cleaned up in one call.

Key Classes:
    - ArtifactStore: Abstract storage interface
    - LocalArtifactStore: Filesystem implementation
    - ArtifactNotFoundError, InvalidArtifactUrl: Lookup failures

Key Functions:
    - new_job_id(), is_valid_job_id(): Job identifiers
    - page_image_name(), thumbnail_name(): Artifact naming

Dependencies:
    - pathlib, secrets (std)

Used By:
    - service.jobs: Upload/merge/cleanup
    - api.app: Cleanup endpoint

Design Notes:
    URLs look like artifact://<job_id>/<name>. resolve() only accepts URLs
    of that shape with safe path segments, so a client-supplied URL can
    never reach outside the store or into another job.
"""

from __future__ import annotations

import logging
import re
import secrets
import shutil
import tempfile
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Optional, Tuple

logger = logging.getLogger(__name__)

URL_SCHEME = "artifact://"
JOB_ID_PATTERN = re.compile(r"^[A-Za-z0-9_-]+$")
_SEGMENT_PATTERN = re.compile(r"^[A-Za-z0-9_-][A-Za-z0-9_.-]*$")

RESULT_NAME = "merged/result.png"
PREVIEW_NAME = "merged/preview.jpg"


class ArtifactNotFoundError(Exception):
    """Artifact does not exist."""
    pass


class InvalidArtifactUrl(ValueError):
    """URL is malformed, unsafe, or belongs to another job."""
    pass


def new_job_id() -> str:
    """12 URL-safe characters."""
    return secrets.token_urlsafe(9)


def is_valid_job_id(job_id: str) -> bool:
    return bool(job_id) and bool(JOB_ID_PATTERN.match(job_id))


def page_image_name(page_number: int) -> str:
    return f"pages/page-{page_number}.png"


def thumbnail_name(page_number: int) -> str:
    return f"thumbnails/page-{page_number}.jpg"


class ArtifactStore(ABC):
    """
    Abstract storage for job artifacts.

    Implementations handle the actual backend; callers only see URLs.
    """

    @abstractmethod
    def put(self, job_id: str, name: str, data: bytes) -> str:
        """
        Store an artifact.

        Returns:
            URL for the artifact
        """

    @abstractmethod
    def read(self, job_id: str, name: str) -> bytes:
        """
        Read an artifact.

        Raises:
            ArtifactNotFoundError: If it does not exist
        """

    @abstractmethod
    def delete_job(self, job_id: str) -> int:
        """Delete every artifact of a job. Returns the number deleted."""

    def url_for(self, job_id: str, name: str) -> str:
        _check_job_id(job_id)
        _check_name(name)
        return f"{URL_SCHEME}{job_id}/{name}"

    def resolve(self, url: str, job_id: Optional[str] = None) -> Tuple[str, str]:
        """
        Split an artifact URL into (job_id, name).

        Args:
            url: Artifact URL
            job_id: If given, the URL must belong to this job

        Raises:
            InvalidArtifactUrl: If the URL is malformed or for another job
        """
        if not isinstance(url, str) or not url.startswith(URL_SCHEME):
            raise InvalidArtifactUrl(f"Not an artifact URL: {url!r}")
        owner, _, name = url[len(URL_SCHEME):].partition("/")
        try:
            _check_job_id(owner)
            _check_name(name)
        except ValueError as e:
            raise InvalidArtifactUrl(f"Unsafe artifact URL {url!r}: {e}") from e
        if job_id is not None and owner != job_id:
            raise InvalidArtifactUrl(f"Artifact {url!r} does not belong to job {job_id}")
        return owner, name

    def get(self, url: str, job_id: Optional[str] = None) -> bytes:
        """Read an artifact by URL."""
        owner, name = self.resolve(url, job_id)
        return self.read(owner, name)


class LocalArtifactStore(ArtifactStore):
    """
    Filesystem artifact store.

    Layout: <root>/merge/<job_id>/<name>. Writes are atomic (temp file
    then rename) so readers never see partial artifacts.
    """

    def __init__(self, root: Path) -> None:
        self.root = Path(root)

    def put(self, job_id: str, name: str, data: bytes) -> str:
        path = self._path(job_id, name)
        path.parent.mkdir(parents=True, exist_ok=True)
        with tempfile.NamedTemporaryFile(
            mode="wb",
            suffix=path.suffix,
            dir=path.parent,
            delete=False,
        ) as f:
            f.write(data)
            temp_path = Path(f.name)
        temp_path.replace(path)
        return self.url_for(job_id, name)

    def read(self, job_id: str, name: str) -> bytes:
        path = self._path(job_id, name)
        if not path.is_file():
            raise ArtifactNotFoundError(f"No artifact {name} for job {job_id}")
        return path.read_bytes()

    def delete_job(self, job_id: str) -> int:
        job_dir = self._job_dir(job_id)
        if not job_dir.exists():
            return 0
        count = sum(1 for p in job_dir.rglob("*") if p.is_file())
        shutil.rmtree(job_dir)
        logger.info(f"Deleted {count} artifacts for job {job_id}")
        return count

    def _job_dir(self, job_id: str) -> Path:
        _check_job_id(job_id)
        return self.root / "merge" / job_id

    def _path(self, job_id: str, name: str) -> Path:
        _check_name(name)
        return self._job_dir(job_id).joinpath(*name.split("/"))


def _check_job_id(job_id: str) -> None:
    if not is_valid_job_id(job_id):
        raise ValueError(f"Invalid job id: {job_id!r}")


def _check_name(name: str) -> None:
    segments = name.split("/") if name else []
    if not segments or not all(_SEGMENT_PATTERN.match(s) for s in segments):
        raise ValueError(f"Invalid artifact name: {name!r}")
