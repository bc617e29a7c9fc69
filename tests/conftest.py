"""Shared fixtures for decoder tests."""

import numpy as np
import pytest

from voyager.buffer import SampleBuffer
from voyager.config import WorkerConfig
from voyager.supervisor import WorkerSupervisor

SAMPLE_RATE = 44100


@pytest.fixture
def alternating_buffer():
    """Two seconds of alternating +/-0.5 samples."""
    samples = np.tile(np.array([0.5, -0.5], dtype=np.float32), SAMPLE_RATE)
    return SampleBuffer(samples, SAMPLE_RATE)


@pytest.fixture
def supervisor():
    sup = WorkerSupervisor(WorkerConfig(max_queue_size=10, max_unresponsive_ms=5000))
    yield sup
    sup.shutdown()
