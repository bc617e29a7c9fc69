"""Synthetic test signals.

Deterministic sine, square, noise and sync-pattern generators with known
properties, so decoding and sync detection can be exercised without
shipping recordings.
"""

from __future__ import annotations

import numpy as np

from .constants import DEFAULT_SAMPLE_RATE, FREQ_SYNC


def sine_wave(frequency: float, duration_s: float,
              sample_rate: int = DEFAULT_SAMPLE_RATE,
              amplitude: float = 0.5) -> np.ndarray:
    n = int(duration_s * sample_rate)
    t = np.arange(n) / sample_rate
    return (amplitude * np.sin(2.0 * np.pi * frequency * t)).astype(np.float32)


def square_wave(frequency: float, duration_s: float,
                sample_rate: int = DEFAULT_SAMPLE_RATE,
                amplitude: float = 0.5) -> np.ndarray:
    """Alternating +/- amplitude; decodes to clear vertical stripes."""
    n = int(duration_s * sample_rate)
    phase = (np.arange(n) * frequency / sample_rate) % 1.0
    return np.where(phase < 0.5, amplitude, -amplitude).astype(np.float32)


def white_noise(duration_s: float, sample_rate: int = DEFAULT_SAMPLE_RATE,
                amplitude: float = 0.1, seed: int = 0) -> np.ndarray:
    """Uniform noise in [-amplitude, amplitude], reproducible via ``seed``."""
    rng = np.random.default_rng(seed)
    n = int(duration_s * sample_rate)
    return rng.uniform(-amplitude, amplitude, n).astype(np.float32)


def sync_pattern(sample_rate: int = DEFAULT_SAMPLE_RATE,
                 pulses: int = 3,
                 pulse_s: float = 0.1,
                 gap_s: float = 0.5,
                 amplitude: float = 0.5) -> tuple[np.ndarray, list[int]]:
    """Sync tone bursts separated by silence.

    Returns:
        Tuple of (samples, start index of each pulse).
    """
    tone = sine_wave(FREQ_SYNC, pulse_s, sample_rate, amplitude)
    gap = np.zeros(int(gap_s * sample_rate), dtype=np.float32)

    parts: list[np.ndarray] = []
    starts: list[int] = []
    offset = 0
    for _ in range(pulses):
        parts.append(gap)
        offset += len(gap)
        starts.append(offset)
        parts.append(tone)
        offset += len(tone)
    parts.append(gap)
    return np.concatenate(parts), starts
