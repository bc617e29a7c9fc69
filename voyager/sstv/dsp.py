"""DSP utilities for Golden Record decoding.

FFT magnitude helpers for sync-tone detection, spectrum display, and the
linear-interpolation resampler used to map a scan line onto output columns.
"""

from __future__ import annotations

import numpy as np

from .constants import DEFAULT_SAMPLE_RATE, FFT_WINDOW


_hann_cache: dict[int, np.ndarray] = {}


def hann_window(size: int) -> np.ndarray:
    """Return a (cached, read-only) Hann window of ``size`` samples."""
    window = _hann_cache.get(size)
    if window is None:
        window = np.hanning(size).astype(np.float64)
        window.setflags(write=False)
        _hann_cache[size] = window
    return window


def magnitude_spectrum(chunk: np.ndarray, window: np.ndarray | None = None) -> np.ndarray:
    """Windowed real FFT magnitudes of ``chunk``.

    Args:
        chunk: Audio samples (float, -1.0 to 1.0).
        window: Analysis window of the same length. Defaults to Hann.

    Returns:
        Magnitudes of the ``len(chunk) // 2 + 1`` non-negative frequency bins.
    """
    chunk = np.asarray(chunk, dtype=np.float64)
    if window is None:
        window = hann_window(len(chunk))
    return np.abs(np.fft.rfft(chunk * window))


def nearest_bin(freq: float, fft_size: int,
                sample_rate: int = DEFAULT_SAMPLE_RATE) -> int:
    """Index of the rfft bin whose centre is closest to ``freq``."""
    bin_index = int(round(freq * fft_size / sample_rate))
    return max(0, min(fft_size // 2, bin_index))


def compute_spectrum(samples: np.ndarray,
                     sample_rate: int = DEFAULT_SAMPLE_RATE,
                     fft_size: int = FFT_WINDOW) -> tuple[np.ndarray, np.ndarray]:
    """Compute a normalized magnitude spectrum for display.

    Uses a Hamming window over the first ``fft_size`` samples (or all of
    them when shorter) and normalizes by the transform length.

    Args:
        samples: Audio samples.
        sample_rate: Sample rate (Hz).
        fft_size: Maximum number of samples to analyse.

    Returns:
        Tuple of (frequencies in Hz, normalized magnitudes).
    """
    chunk = np.asarray(samples[:fft_size], dtype=np.float64)
    n = len(chunk)
    if n == 0:
        return np.array([]), np.array([])

    magnitudes = np.abs(np.fft.rfft(chunk * np.hamming(n))) / n
    freqs = np.fft.rfftfreq(n, d=1.0 / sample_rate)
    return freqs, magnitudes


def resample_line(line: np.ndarray, width: int) -> np.ndarray:
    """Resample one scan line onto ``width`` columns.

    Each column takes the linear interpolation of the two source samples
    nearest to its position; the first and last columns land exactly on
    the first and last source samples.

    Args:
        line: Source samples for one line.
        width: Number of output columns.

    Returns:
        Float64 array of shape (width,).
    """
    n = len(line)
    if n == 1:
        return np.full(width, float(line[0]))
    positions = np.linspace(0.0, n - 1, width)
    return np.interp(positions, np.arange(n), line)


def resample_lines(lines: np.ndarray, width: int) -> np.ndarray:
    """Vectorized :func:`resample_line` over a (rows, samples) matrix."""
    rows, n = lines.shape
    if n == 1:
        return np.repeat(lines.astype(np.float64), width, axis=1)

    positions = np.linspace(0.0, n - 1, width)
    left = np.floor(positions).astype(np.intp)
    right = np.minimum(left + 1, n - 1)
    frac = positions - left

    lo = lines[:, left].astype(np.float64)
    hi = lines[:, right].astype(np.float64)
    return lo + (hi - lo) * frac


def normalize_audio(raw: np.ndarray) -> np.ndarray:
    """Normalize integer PCM audio to float32 in range [-1.0, 1.0].

    Args:
        raw: Raw PCM samples (int16, int32, uint8 or already float).

    Returns:
        Float32 normalized samples.
    """
    if raw.dtype == np.uint8:
        return (raw.astype(np.float32) - 128.0) / 128.0
    if raw.dtype == np.int16:
        return raw.astype(np.float32) / 32768.0
    if raw.dtype == np.int32:
        return (raw.astype(np.float64) / 2147483648.0).astype(np.float32)
    return np.clip(raw.astype(np.float32), -1.0, 1.0)
