"""
Decode worker supervision.

The supervisor is the caller-side face of the decode worker: it hands out
request ids, enqueues requests, polls results without blocking, and once per
interactive tick checks whether the worker is still alive and answering. A
dead or stuck worker is replaced wholesale; whatever it was working on is
lost.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Callable, Optional, Union

from .buffer import SampleBuffer, SampleView
from .config import WorkerConfig
from .errors import QueueFullError, WorkerUnavailableError
from .metrics import DecodeMetrics
from .sstv.params import DecoderParams
from .worker import (
    ChannelClosed,
    DecodeRequest,
    DecodeResult,
    DecodeWorker,
    PipelineFactory,
    spawn_decode_worker,
)

logger = logging.getLogger('voyager.supervisor')

SampleSource = Union[SampleBuffer, SampleView]

# Health reasons
HEALTH_OK = 'ok'
HEALTH_NO_WORKER = 'no_worker'
HEALTH_DEAD = 'worker_dead'
HEALTH_UNRESPONSIVE = 'worker_unresponsive'


@dataclass
class WorkerHealth:
    """Snapshot returned by :meth:`WorkerSupervisor.health`."""
    healthy: bool
    reason: str
    worker_id: Optional[str]
    alive: bool
    pending_requests: int
    restart_count: int
    since_last_response_ms: float

    def __bool__(self) -> bool:
        return self.healthy

    def to_dict(self) -> dict:
        return dict(self.__dict__)


class WorkerSupervisor:
    """
    Owns the decode worker and the request/restart counters.

    All methods are meant to be called from one caller thread (the
    interactive loop). None of them blocks on decoding.
    """

    def __init__(
        self,
        config: Optional[WorkerConfig] = None,
        pipeline_factory: Optional[PipelineFactory] = None,
        metrics: Optional[DecodeMetrics] = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        """
        Start a supervisor with a fresh worker.

        Args:
            config: Queue size, responsiveness timeout and auto-restart flag.
            pipeline_factory: Builds the pipeline inside each new worker.
            metrics: Shared metrics collector (one is created if omitted).
            clock: Monotonic time source in seconds.
        """
        self.config = config or WorkerConfig()
        self.metrics = metrics or DecodeMetrics()
        self._pipeline_factory = pipeline_factory
        self._clock = clock

        self._worker: Optional[DecodeWorker] = None
        self._next_request_id = 1
        self.pending_request_count = 0
        self.restart_count = 0
        self.last_response_timestamp = clock()
        self.last_error: Optional[str] = None

        self._spawn()

    # ------------------------------------------------------------------
    # Worker lifecycle
    # ------------------------------------------------------------------

    def _spawn(self) -> None:
        self._worker = spawn_decode_worker(self._pipeline_factory)
        self.pending_request_count = 0
        self.last_response_timestamp = self._clock()
        self.metrics.set_queue_depth(0)

    @property
    def worker_id(self) -> Optional[str]:
        return self._worker.worker_id if self._worker else None

    @property
    def worker(self) -> Optional[DecodeWorker]:
        return self._worker

    def restart(self) -> None:
        """Replace the worker. Requests queued or in flight are lost."""
        old = self._worker
        logger.warning(
            f"Restarting decode worker {old.worker_id if old else None} "
            f"({self.pending_request_count} pending requests dropped)"
        )
        if old is not None:
            # A stuck worker cannot be joined; closing its channels is enough
            # for it to exit once its current decode returns.
            old.close()
            if not old.is_alive:
                old.join(0)
        self._worker = None

        self._spawn()
        self.restart_count += 1
        self.metrics.record_worker_restart()
        logger.info(f"Decode worker restarted as {self.worker_id}")

    def shutdown(self, timeout: Optional[float] = 2.0) -> None:
        """Close both channels and join the worker."""
        worker = self._worker
        self._worker = None
        if worker is None:
            return
        worker.close()
        if not worker.join(timeout):
            logger.warning(f"Decode worker {worker.worker_id} did not exit within {timeout}s")
        self.pending_request_count = 0

    def __enter__(self) -> WorkerSupervisor:
        return self

    def __exit__(self, *exc) -> None:
        self.shutdown()

    # ------------------------------------------------------------------
    # Request protocol
    # ------------------------------------------------------------------

    def submit(
        self,
        source: SampleSource,
        start_offset: Optional[int] = None,
        params: Optional[DecoderParams] = None,
        sample_rate: Optional[int] = None,
    ) -> int:
        """
        Queue a decode and return its request id. Never waits for the decode.

        Args:
            source: Shared buffer, or a view whose offset is used when
                ``start_offset`` is omitted.
            start_offset: Absolute sample index of the decode window.
            params: Decoder parameters (defaults if omitted).
            sample_rate: Defaults to the buffer's sample rate.

        Raises:
            InvalidParamsError: ``params`` failed validation.
            QueueFullError: ``max_queue_size`` requests are already pending.
            WorkerUnavailableError: The supervisor has been shut down.
        """
        params = params or DecoderParams()
        params.validate()

        if isinstance(source, SampleView):
            buffer = source.buffer
            if start_offset is None:
                start_offset = source.offset
        else:
            buffer = source
        if start_offset is None:
            start_offset = 0
        if sample_rate is None:
            sample_rate = buffer.sample_rate

        if self._worker is None:
            raise WorkerUnavailableError("decode worker has been shut down")
        if self.pending_request_count >= self.config.max_queue_size:
            raise QueueFullError(self.pending_request_count)

        request = DecodeRequest(
            id=self._next_request_id,
            buffer=buffer,
            start_offset=int(start_offset),
            params=params,
            sample_rate=int(sample_rate),
        )

        try:
            self._worker.submit(request)
        except ChannelClosed as e:
            raise WorkerUnavailableError("decode worker request channel closed") from e

        self._next_request_id += 1
        if self.pending_request_count == 0:
            # Responsiveness is measured from the moment work is owed.
            self.last_response_timestamp = self._clock()
        self.pending_request_count += 1
        self.metrics.set_queue_depth(self.pending_request_count)
        logger.debug(f"Submitted decode request {request.id} at offset {start_offset}")
        return request.id

    def poll(self) -> list[DecodeResult]:
        """Collect every result that is ready, without blocking."""
        if self._worker is None:
            return []

        results = self._worker.results.drain()
        for result in results:
            self.pending_request_count = max(0, self.pending_request_count - 1)
            self.last_response_timestamp = self._clock()
            pixels = result.result.pixel_count if result.result else 0
            self.metrics.record_decode(result.duration, pixels, result.ok)
            if result.error:
                self.last_error = result.error
                logger.warning(f"Decode {result.id} failed: {result.error}")
        if results:
            self.metrics.set_queue_depth(self.pending_request_count)
        return results

    # ------------------------------------------------------------------
    # Health
    # ------------------------------------------------------------------

    def health(self) -> WorkerHealth:
        """
        Liveness and responsiveness of the current worker.

        Responsiveness only counts while requests are pending. A legitimately
        slow decode of a very large window looks the same as a stuck worker.
        """
        since_ms = (self._clock() - self.last_response_timestamp) * 1000.0
        worker = self._worker

        if worker is None:
            reason = HEALTH_NO_WORKER
        elif not worker.is_alive:
            reason = HEALTH_DEAD
        elif (self.pending_request_count > 0
              and since_ms > self.config.max_unresponsive_ms):
            reason = HEALTH_UNRESPONSIVE
        else:
            reason = HEALTH_OK

        return WorkerHealth(
            healthy=reason == HEALTH_OK,
            reason=reason,
            worker_id=worker.worker_id if worker else None,
            alive=bool(worker and worker.is_alive),
            pending_requests=self.pending_request_count,
            restart_count=self.restart_count,
            since_last_response_ms=since_ms,
        )

    def check_health(self) -> bool:
        status = self.health()
        if status.reason == HEALTH_DEAD:
            logger.error(f"Decode worker {status.worker_id} has exited, needs restart")
        elif status.reason == HEALTH_UNRESPONSIVE:
            logger.warning(
                f"Decode worker {status.worker_id} unresponsive for "
                f"{status.since_last_response_ms:.0f}ms, needs restart"
            )
        return status.healthy

    def tick(self) -> list[DecodeResult]:
        """
        Per-frame entry point: restart an unhealthy worker if configured to,
        then poll for results.
        """
        if (self.config.auto_restart and self._worker is not None
                and not self.check_health()):
            self.last_error = 'Decode worker crashed or timed out, restarting...'
            self.restart()
        return self.poll()
