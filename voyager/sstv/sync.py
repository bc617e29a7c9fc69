"""Sync tone detection.

Locates the 1200 Hz calibration tone that marks image boundaries on the
Golden Record. Detection is a single windowed FFT per chunk: the bin nearest
the sync frequency has to stand well clear of the average spectral level.
"""

from __future__ import annotations

import logging

import numpy as np

from .constants import (
    FFT_WINDOW,
    FREQ_SYNC,
    SYNC_HIT_SKIP_WINDOWS,
    SYNC_MISS_DIVISOR,
    SYNC_THRESHOLD_MULTIPLIER,
)
from .dsp import hann_window, magnitude_spectrum, nearest_bin

logger = logging.getLogger('voyager.sstv.sync')


class SyncDetector:
    """Find sync tones in a sample stream.

    Stateless apart from its configuration, so one instance can be shared
    between the worker and the interactive thread.
    """

    def __init__(
        self,
        target_freq: float = FREQ_SYNC,
        window_size: int = FFT_WINDOW,
        threshold_multiplier: float = SYNC_THRESHOLD_MULTIPLIER,
    ):
        if window_size < 4:
            raise ValueError(f"FFT window too small: {window_size}")
        self.target_freq = target_freq
        self.window_size = window_size
        self.threshold_multiplier = threshold_multiplier

    @property
    def hit_skip(self) -> int:
        return self.window_size * SYNC_HIT_SKIP_WINDOWS

    @property
    def miss_step(self) -> int:
        return max(1, self.window_size // SYNC_MISS_DIVISOR)

    def detect_tone(self, chunk: np.ndarray, sample_rate: int) -> bool:
        """Check one FFT window for the sync tone.

        Only the first ``window_size`` samples are analysed; shorter chunks
        are not analysed at all.

        Args:
            chunk: Audio samples.
            sample_rate: Sample rate (Hz).

        Returns:
            True if the target bin exceeds the mean bin magnitude times the
            threshold multiplier.
        """
        if len(chunk) < self.window_size:
            return False

        magnitudes = magnitude_spectrum(
            chunk[:self.window_size], hann_window(self.window_size))
        peak = magnitudes[nearest_bin(self.target_freq, self.window_size, sample_rate)]
        mean = float(np.mean(magnitudes))
        return bool(peak > mean * self.threshold_multiplier)

    def find_positions(self, samples: np.ndarray, sample_rate: int) -> list[int]:
        """Scan a buffer for every sync tone.

        On a hit the scan jumps ahead two windows so one tone is not reported
        many times; on a miss it advances a quarter window so tones straddling
        a window edge are still caught.

        Args:
            samples: Audio samples.
            sample_rate: Sample rate (Hz).

        Returns:
            Ascending sample indices, each less than ``len(samples)``.
        """
        positions: list[int] = []
        window = self.window_size
        total = len(samples)
        pos = 0

        while pos + window <= total:
            if self.detect_tone(samples[pos:pos + window], sample_rate):
                positions.append(pos)
                pos += self.hit_skip
            else:
                pos += self.miss_step

        logger.debug(f"Sync scan over {total} samples found {len(positions)} positions")
        return positions

    def find_next(self, samples: np.ndarray, start: int,
                  sample_rate: int) -> int | None:
        """Find the first sync tone at or after ``start``.

        Args:
            samples: Full audio buffer.
            start: Absolute sample index to search from.
            sample_rate: Sample rate (Hz).

        Returns:
            Absolute index of the next sync tone, or None.
        """
        start = max(0, start)
        if start >= len(samples):
            return None

        window = self.window_size
        tail = samples[start:]
        pos = 0
        # Same walk as find_positions, stopping at the first hit.
        while pos + window <= len(tail):
            if self.detect_tone(tail[pos:pos + window], sample_rate):
                return start + pos
            pos += self.miss_step
        return None


_default_detector = SyncDetector()


def detect_tone(chunk: np.ndarray, sample_rate: int) -> bool:
    """Module-level :meth:`SyncDetector.detect_tone` with default settings."""
    return _default_detector.detect_tone(chunk, sample_rate)


def find_positions(samples: np.ndarray, sample_rate: int) -> list[int]:
    """Module-level :meth:`SyncDetector.find_positions` with default settings."""
    return _default_detector.find_positions(samples, sample_rate)


def find_next(samples: np.ndarray, start: int, sample_rate: int) -> int | None:
    """Module-level :meth:`SyncDetector.find_next` with default settings."""
    return _default_detector.find_next(samples, start, sample_rate)
