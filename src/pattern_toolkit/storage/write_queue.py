"""
Module: storage.write_queue

Purpose:
    Background artifact writing so rasterization of the next page can
    continue while the previous page is encoded and stored.

Key Classes:
    - WriteQueue: Thread pool-based async write queue

Dependencies:
    - concurrent.futures: Thread pool execution

Used By:
    - service.jobs: Page image and thumbnail uploads
"""

from __future__ import annotations

import logging
from concurrent.futures import Future, ThreadPoolExecutor
from typing import Any, Callable, List, Optional

from .artifacts import ArtifactStore

logger = logging.getLogger(__name__)


class WriteQueue:
    """
    Thread pool-based async write queue for artifacts.

    Unlike a fire-and-forget queue, wait_all() re-raises the first failed
    write: a job whose artifacts were not all stored must not report
    success.

    Usage:
        with WriteQueue(store, job_id, max_workers=4) as queue:
            for bitmap in pages:
                queue.submit(page_image_name(n), lambda: encode_png(bitmap.image))
            urls = queue.wait_all()

    Attributes:
        max_workers: Maximum concurrent write threads.
    """

    def __init__(self, store: ArtifactStore, job_id: str, max_workers: int = 4):
        """
        Initialize write queue.

        Args:
            store: Destination store
            job_id: Job the artifacts belong to
            max_workers: Maximum concurrent write threads.
        """
        self._store = store
        self._job_id = job_id
        self._executor = ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="artifact-write")
        self._futures: List["Future[str]"] = []

    def submit(self, name: str, encode: Callable[[], bytes]) -> "Future[str]":
        """
        Queue encode-and-store of one artifact.

        Args:
            name: Artifact name within the job
            encode: Callable producing the bytes (runs in the pool)

        Returns:
            Future resolving to the artifact URL.
        """
        future = self._executor.submit(self._write, name, encode)
        self._futures.append(future)
        return future

    def wait_all(self, timeout: Optional[float] = None) -> int:
        """
        Wait for all queued writes to complete.

        Returns:
            Number of completed writes.

        Raises:
            Exception: The first write failure, after all writes settled
        """
        completed = 0
        first_error: Optional[BaseException] = None
        for future in self._futures:
            try:
                future.result(timeout=timeout)
                completed += 1
            except Exception as e:
                logger.error(f"Artifact write failed for job {self._job_id}: {e}")
                if first_error is None:
                    first_error = e
        self._futures.clear()
        if first_error is not None:
            raise first_error
        return completed

    def shutdown(self) -> None:
        """Shutdown the thread pool, abandoning queued writes."""
        for future in self._futures:
            future.cancel()
        self._executor.shutdown(wait=True)

    def __enter__(self) -> "WriteQueue":
        return self

    def __exit__(self, *args: Any) -> None:
        self.shutdown()

    def _write(self, name: str, encode: Callable[[], bytes]) -> str:
        return self._store.put(self._job_id, name, encode())
