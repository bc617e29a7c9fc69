"""
Background decode worker.

One thread owns one :class:`DecodingPipeline` and serves decode requests in
strict FIFO order over a request channel, answering on a result channel.
Decode failures come back as results; anything else escaping the pipeline
kills the thread and is picked up by the supervisor.
"""

from __future__ import annotations

import logging
import queue
import threading
import time
import uuid
from dataclasses import dataclass, field
from typing import Any, Callable, Optional

from .buffer import SampleBuffer
from .errors import DecodeError
from .sstv.image_decoder import PipelineResult
from .sstv.params import DecoderParams
from .sstv.pipeline import DecodingPipeline

logger = logging.getLogger('voyager.worker')

# Join timeout when tearing a worker down
WORKER_JOIN_TIMEOUT = 2.0

PipelineFactory = Callable[[], DecodingPipeline]


class ChannelClosed(Exception):
    """The far end of a channel has been closed."""


_CLOSED = object()


class Channel:
    """
    One-directional FIFO between two threads.

    A thin wrapper over ``queue.Queue`` that adds closing: after
    :meth:`close`, sends raise :class:`ChannelClosed` and a blocked
    :meth:`recv` wakes up and raises it once the queue is drained.
    """

    def __init__(self, name: str = 'channel'):
        self.name = name
        self._queue: queue.Queue = queue.Queue()
        self._closed = threading.Event()

    @property
    def closed(self) -> bool:
        return self._closed.is_set()

    def send(self, item: Any) -> None:
        if self._closed.is_set():
            raise ChannelClosed(self.name)
        self._queue.put_nowait(item)

    def recv(self, timeout: Optional[float] = None) -> Any:
        """Block until an item arrives. Raises ``queue.Empty`` on timeout."""
        item = self._queue.get(timeout=timeout)
        if item is _CLOSED:
            # Leave the marker for any other waiter.
            self._queue.put_nowait(_CLOSED)
            raise ChannelClosed(self.name)
        return item

    def try_recv(self) -> Any:
        """Return the next item without blocking, or None if there is none."""
        try:
            item = self._queue.get_nowait()
        except queue.Empty:
            return None
        if item is _CLOSED:
            self._queue.put_nowait(_CLOSED)
            return None
        return item

    def drain(self) -> list:
        items = []
        while True:
            item = self.try_recv()
            if item is None:
                return items
            items.append(item)

    def qsize(self) -> int:
        return self._queue.qsize()

    def close(self) -> None:
        if not self._closed.is_set():
            self._closed.set()
            self._queue.put_nowait(_CLOSED)


@dataclass(frozen=True)
class DecodeRequest:
    """
    A decode job. Holds a reference to the shared buffer, never a copy.

    Attributes:
        id: Monotonic request id assigned by the supervisor.
        buffer: Shared sample buffer.
        start_offset: First sample of the decode window.
        params: Decoder parameters.
        sample_rate: Sample rate (Hz).
    """
    id: int
    buffer: SampleBuffer
    start_offset: int
    params: DecoderParams
    sample_rate: int

    def window_bounds(self) -> tuple[int, int]:
        """``[start, end)`` of the decode window, clamped to the buffer."""
        total = len(self.buffer)
        window = self.params.window_samples(self.sample_rate)
        start = min(max(0, self.start_offset), total)
        end = min(start + window, total)
        return start, end


@dataclass(frozen=True)
class DecodeResult:
    """
    Outcome of one request. Exactly one of ``result`` and ``error`` is set.

    Attributes:
        id: Id of the request this answers.
        result: Decoded raster on success.
        duration: Wall time spent decoding (seconds).
        error: Error message on failure.
        worker_id: Identity of the worker that produced it.
    """
    id: int
    result: Optional[PipelineResult] = None
    duration: float = 0.0
    error: Optional[str] = None
    worker_id: str = ''
    completed_at: float = field(default_factory=time.time)

    def __post_init__(self) -> None:
        if (self.result is None) == (self.error is None):
            raise ValueError("DecodeResult needs exactly one of result or error")

    @property
    def ok(self) -> bool:
        return self.result is not None

    def to_dict(self) -> dict:
        data = {
            'id': self.id,
            'ok': self.ok,
            'duration_ms': round(self.duration * 1000.0, 3),
            'worker_id': self.worker_id,
            'error': self.error,
        }
        if self.result is not None:
            data.update(self.result.summary())
        return data


class DecodeWorker:
    """
    Decode thread plus its two channels.

    The thread blocks only on the request channel. It stops when the request
    channel is closed or when the result channel has been closed by the
    caller.
    """

    def __init__(self, pipeline_factory: Optional[PipelineFactory] = None):
        self.worker_id = uuid.uuid4().hex[:12]
        self.requests = Channel('decode-requests')
        self.results = Channel('decode-results')
        self._pipeline_factory = pipeline_factory or DecodingPipeline
        self._thread: Optional[threading.Thread] = None
        self.processed = 0

    @property
    def is_alive(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def start(self) -> DecodeWorker:
        self._thread = threading.Thread(
            target=self._run,
            daemon=True,
            name=f'decode-worker-{self.worker_id}',
        )
        self._thread.start()
        return self

    def submit(self, request: DecodeRequest) -> None:
        """Hand a request to the worker. Ownership moves with it."""
        self.requests.send(request)

    def close(self) -> None:
        """Close both channels.

        A request already being decoded runs to completion; nothing queued
        behind it starts.
        """
        self.requests.close()
        self.results.close()

    def join(self, timeout: Optional[float] = WORKER_JOIN_TIMEOUT) -> bool:
        """Wait for the thread. Returns True if it has exited."""
        if self._thread is None:
            return True
        self._thread.join(timeout)
        return not self._thread.is_alive()

    def _run(self) -> None:
        pipeline = self._pipeline_factory()
        logger.info(f"Decode worker {self.worker_id} started")

        while True:
            try:
                request = self.requests.recv()
            except ChannelClosed:
                break
            if self.results.closed:
                break

            result = self.handle(pipeline, request)
            self.processed += 1

            try:
                self.results.send(result)
            except ChannelClosed:
                logger.info("Result channel closed, worker shutting down")
                break

        logger.info(f"Decode worker {self.worker_id} exiting")

    def handle(self, pipeline: DecodingPipeline, request: DecodeRequest) -> DecodeResult:
        """Decode one request. Only :class:`DecodeError` is turned into a result."""
        started = time.monotonic()

        try:
            # Params are checked before the window is sized from them.
            request.params.validate()
            start, end = request.window_bounds()
            samples = request.buffer.data[start:end]
            logger.debug(f"Starting decode for request {request.id} [{start}:{end}]")
            decoded = pipeline.process(samples, request.params, request.sample_rate)
        except DecodeError as e:
            logger.error(f"Decode failed for request {request.id}: {e}")
            return DecodeResult(
                id=request.id,
                duration=time.monotonic() - started,
                error=str(e),
                worker_id=self.worker_id,
            )

        logger.debug(f"Decode successful for request {request.id}")
        return DecodeResult(
            id=request.id,
            result=decoded,
            duration=time.monotonic() - started,
            worker_id=self.worker_id,
        )


def spawn_decode_worker(pipeline_factory: Optional[PipelineFactory] = None) -> DecodeWorker:
    """Create and start a decode worker."""
    return DecodeWorker(pipeline_factory).start()
