"""
Module: progress

Purpose:
    One-directional, ordered stream of stage events from a long-running
    job (rasterizing, merging) to its caller. Nothing flows back except
    closure: a consumer that goes away closes the channel, and the next
    emit() in the worker raises OperationCancelled.

Key Classes:
    - ProgressEvent: One stage description
    - ProgressSink: Protocol the engine emits into
    - NullProgress, CallbackProgress: Simple sinks
    - ProgressChannel: Bounded thread-safe channel sink
    - ProgressStream: Iterable of events with a separate final result

Key Functions:
    - run_with_progress(): Run a job in a worker thread, stream its events

Dependencies:
    - queue, threading, concurrent.futures (std)

Used By:
    - renderer.rasterizer, merger.compositor: Emit events
    - service.jobs: Streams upload progress as server-sent events
    - cli: Prints events
"""

from __future__ import annotations

import logging
import queue
import threading
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import asdict, dataclass
from typing import Any, Callable, Dict, Iterator, Optional, Protocol

from .core.errors import OperationCancelled

logger = logging.getLogger(__name__)

DEFAULT_CHANNEL_SIZE = 32

_END = object()


@dataclass(frozen=True)
class ProgressEvent:
    """
    Stage description emitted during a job.

    Attributes:
        stage: Human readable stage, e.g. "Rendering page 2 of 9..."
        page: Current page number for per-page stages
        total: Total pages for per-page stages
    """
    stage: str
    page: Optional[int] = None
    total: Optional[int] = None

    def to_dict(self) -> Dict[str, Any]:
        return {key: value for key, value in asdict(self).items() if value is not None}


class ProgressSink(Protocol):
    """Anything the engine can report progress into."""

    def emit(self, stage: str, *, page: Optional[int] = None, total: Optional[int] = None) -> None:
        ...


class NullProgress:
    """Sink that discards every event."""

    def emit(self, stage: str, *, page: Optional[int] = None, total: Optional[int] = None) -> None:
        pass


class CallbackProgress:
    """Sink that hands each event to a callable."""

    def __init__(self, callback: Callable[[ProgressEvent], None]) -> None:
        self._callback = callback

    def emit(self, stage: str, *, page: Optional[int] = None, total: Optional[int] = None) -> None:
        self._callback(ProgressEvent(stage, page, total))


class ProgressChannel:
    """
    Bounded, ordered, append-only channel of ProgressEvent.

    The producer blocks while the channel is full. Once the consumer calls
    close(), every further emit() raises OperationCancelled so the producer
    abandons its work at the next unit boundary.

    Usage:
        channel = ProgressChannel()
        # producer thread
        channel.emit("Rendering page 1 of 3...", page=1, total=3)
        channel.finish()
        # consumer thread
        for event in channel:
            print(event.stage)
    """

    _POLL_SECONDS = 0.05

    def __init__(self, maxsize: int = DEFAULT_CHANNEL_SIZE) -> None:
        if maxsize < 1:
            raise ValueError(f"maxsize must be >= 1: {maxsize}")
        self._queue: "queue.Queue[object]" = queue.Queue(maxsize=maxsize)
        self._closed = threading.Event()

    @property
    def closed(self) -> bool:
        return self._closed.is_set()

    def emit(self, stage: str, *, page: Optional[int] = None, total: Optional[int] = None) -> None:
        """
        Append an event.

        Raises:
            OperationCancelled: If the consumer has closed the channel
        """
        self._put(ProgressEvent(stage, page, total))

    def finish(self) -> None:
        """Mark the end of the stream. A no-op on a closed channel."""
        try:
            self._put(_END)
        except OperationCancelled:
            pass

    def close(self) -> None:
        """Consumer side: stop listening and cancel the producer."""
        self._closed.set()
        while True:
            try:
                self._queue.get_nowait()
            except queue.Empty:
                break

    def __iter__(self) -> Iterator[ProgressEvent]:
        while not self._closed.is_set():
            try:
                item = self._queue.get(timeout=self._POLL_SECONDS)
            except queue.Empty:
                continue
            if item is _END:
                return
            yield item  # type: ignore[misc]

    def _put(self, item: object) -> None:
        while True:
            if self._closed.is_set():
                raise OperationCancelled("Progress consumer closed the channel")
            try:
                self._queue.put(item, timeout=self._POLL_SECONDS)
            except queue.Full:
                continue
            # close() drains the queue, which can unblock a pending put
            if self._closed.is_set():
                raise OperationCancelled("Progress consumer closed the channel")
            return


class ProgressStream:
    """
    Events of a running job, followed by its result.

    Iterate to receive events in order. The job's return value (or
    exception) is only available through result() once iteration has
    finished. Closing the stream early cancels the job cooperatively.
    """

    def __init__(self, channel: ProgressChannel, future: "Future[Any]") -> None:
        self._channel = channel
        self._future = future
        self._exhausted = False

    def __iter__(self) -> Iterator[ProgressEvent]:
        yield from self._channel
        self._exhausted = True

    def result(self, timeout: Optional[float] = None) -> Any:
        """
        Final value of the job.

        Raises:
            RuntimeError: If called before the event stream completed
            Exception: Whatever the job raised
        """
        if not self._exhausted:
            raise RuntimeError("Progress stream must be fully consumed before reading the result")
        return self._future.result(timeout=timeout)

    def close(self) -> None:
        """Cancel the job; the worker stops at its next progress event."""
        if not self._exhausted and not self._channel.closed:
            logger.warning("Progress consumer disconnected, cancelling job")
        self._channel.close()

    @property
    def done(self) -> bool:
        return self._future.done()

    def __enter__(self) -> "ProgressStream":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()


def run_with_progress(
    func: Callable[..., Any],
    *args: Any,
    maxsize: int = DEFAULT_CHANNEL_SIZE,
    **kwargs: Any,
) -> ProgressStream:
    """
    Run func in a worker thread with a ProgressChannel as its progress sink.

    func is called as func(*args, progress=channel, **kwargs).

    Example:
        >>> stream = run_with_progress(rasterize_document, document)
        >>> for event in stream:
        ...     print(event.stage)
        >>> pages = stream.result()
    """
    channel = ProgressChannel(maxsize=maxsize)

    def _run() -> Any:
        try:
            return func(*args, progress=channel, **kwargs)
        except OperationCancelled:
            logger.info(f"{getattr(func, '__name__', 'job')} cancelled by consumer")
            raise
        finally:
            channel.finish()

    executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="pattern-job")
    future = executor.submit(_run)
    executor.shutdown(wait=False)
    return ProgressStream(channel, future)
