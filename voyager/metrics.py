"""
Decode metrics.

Latency percentiles, success/error counts, decoded pixel totals and worker
restarts for the status panel and the health endpoint.
"""

from __future__ import annotations

import threading
import time
from collections import deque
from dataclasses import dataclass
from typing import Optional

import numpy as np

# Latency samples kept for percentile estimation
MAX_LATENCY_SAMPLES = 1000


@dataclass
class MetricsSummary:
    decode_p50_ms: float
    decode_p95_ms: float
    decode_p99_ms: float
    total_requests: int
    total_success: int
    total_errors: int
    success_rate: float
    total_pixels: int
    worker_restarts: int
    queue_depth: int
    uptime_secs: float

    def to_dict(self) -> dict:
        return dict(self.__dict__)


class DecodeMetrics:
    """Thread-safe counters and a bounded latency window."""

    def __init__(self, max_samples: int = MAX_LATENCY_SAMPLES):
        self._lock = threading.Lock()
        self._latencies_ms: deque[float] = deque(maxlen=max_samples)
        self._started = time.monotonic()
        self.total_requests = 0
        self.total_success = 0
        self.total_errors = 0
        self.total_pixels = 0
        self.worker_restarts = 0
        self.queue_depth = 0

    def record_decode(self, duration_s: float, pixels: int, success: bool) -> None:
        with self._lock:
            self._latencies_ms.append(duration_s * 1000.0)
            self.total_requests += 1
            if success:
                self.total_success += 1
                self.total_pixels += pixels
            else:
                self.total_errors += 1

    def record_worker_restart(self) -> None:
        with self._lock:
            self.worker_restarts += 1

    def set_queue_depth(self, depth: int) -> None:
        self.queue_depth = depth

    def percentile(self, q: float) -> Optional[float]:
        """Latency percentile in ms (``q`` in 0-100), or None with no samples."""
        with self._lock:
            if not self._latencies_ms:
                return None
            return float(np.percentile(np.fromiter(self._latencies_ms, dtype=float), q))

    def summary(self) -> MetricsSummary:
        p50 = self.percentile(50) or 0.0
        p95 = self.percentile(95) or 0.0
        p99 = self.percentile(99) or 0.0
        with self._lock:
            total = self.total_requests
            rate = self.total_success / total if total else 0.0
            return MetricsSummary(
                decode_p50_ms=p50,
                decode_p95_ms=p95,
                decode_p99_ms=p99,
                total_requests=total,
                total_success=self.total_success,
                total_errors=self.total_errors,
                success_rate=rate,
                total_pixels=self.total_pixels,
                worker_restarts=self.worker_restarts,
                queue_depth=self.queue_depth,
                uptime_secs=time.monotonic() - self._started,
            )
