"""
WAV loading.

Reads a recording with scipy, normalizes it to [-1, 1] and splits it into
one shared :class:`SampleBuffer` per channel.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

import numpy as np
from scipy.io import wavfile

from .buffer import SampleBuffer
from .errors import AudioLoadError
from .sstv.constants import MAX_SAMPLE_RATE, MIN_SAMPLE_RATE
from .sstv.dsp import normalize_audio

logger = logging.getLogger('voyager.audio')

CHANNEL_LEFT = 'left'
CHANNEL_RIGHT = 'right'


@dataclass
class Recording:
    """A loaded recording: per-channel buffers plus format details."""
    channels: list[SampleBuffer]
    sample_rate: int
    path: Optional[Path] = None

    @property
    def channel_count(self) -> int:
        return len(self.channels)

    @property
    def duration_secs(self) -> float:
        return self.channels[0].duration_secs if self.channels else 0.0

    def channel(self, name: str = CHANNEL_LEFT) -> SampleBuffer:
        """Buffer for ``'left'``/``'right'`` (or index). Mono returns its only channel."""
        if isinstance(name, int):
            index = name
        else:
            index = 1 if str(name).lower() == CHANNEL_RIGHT else 0
        return self.channels[min(index, len(self.channels) - 1)]


def recording_from_array(data: np.ndarray, sample_rate: int,
                         path: Optional[Path] = None) -> Recording:
    """Validate and wrap a (frames,) or (frames, channels) PCM array."""
    if not MIN_SAMPLE_RATE <= sample_rate <= MAX_SAMPLE_RATE:
        raise AudioLoadError(
            f"Invalid sample rate: {sample_rate} Hz (must be 8kHz-192kHz)")

    channels = 1 if data.ndim == 1 else data.shape[1]
    if channels not in (1, 2):
        raise AudioLoadError(
            f"Unsupported channel count: {channels} (only mono/stereo supported)")
    if len(data) == 0:
        raise AudioLoadError(f"Empty audio file: {path}")

    buffers = SampleBuffer.from_interleaved(normalize_audio(data), sample_rate)
    return Recording(channels=buffers, sample_rate=int(sample_rate), path=path)


def load_wav(path: str | Path) -> Recording:
    """
    Load a WAV file into shared per-channel buffers.

    Raises:
        AudioLoadError: Unreadable file, bad sample rate, >2 channels or empty.
    """
    path = Path(path)
    try:
        sample_rate, data = wavfile.read(path)
    except (OSError, ValueError) as e:
        raise AudioLoadError(f"Failed to load WAV file '{path}': {e}") from e

    recording = recording_from_array(data, sample_rate, path)
    logger.info(
        f"Loaded {path.name}: {recording.channel_count} ch, {sample_rate} Hz, "
        f"{recording.duration_secs:.1f}s"
    )
    return recording
