"""
Shared sample buffers.

A loaded recording is held once as a read-only numpy array. Everything that
needs samples (playback cursor, decode requests, waveform rendering) holds a
reference to the same buffer plus an integer offset, so seeking never copies
audio.
"""

from __future__ import annotations

from typing import Optional

import numpy as np


class SampleBuffer:
    """
    Immutable array of normalized audio amplitudes for one channel.

    The backing array has its ``writeable`` flag cleared, so any attempt to
    modify it raises. Slicing it with basic indexing returns views that
    share memory with the buffer.
    """

    __slots__ = ('_data', 'sample_rate', 'channel_count')

    def __init__(
        self,
        samples: np.ndarray,
        sample_rate: int,
        channel_count: int = 1,
        copy: bool = True,
    ):
        """
        Wrap samples in a read-only buffer.

        Args:
            samples: 1-D samples in [-1.0, 1.0].
            sample_rate: Sample rate in Hz.
            channel_count: Channels in the source recording (1 or 2).
            copy: Take a private copy. Pass False only when the caller hands
                over an array nobody else writes to.
        """
        if channel_count not in (1, 2):
            raise ValueError(f"Unsupported channel count: {channel_count}")
        if sample_rate <= 0:
            raise ValueError(f"Invalid sample rate: {sample_rate}")

        data = np.array(samples, dtype=np.float32, copy=True) if copy \
            else np.ascontiguousarray(samples, dtype=np.float32)
        if data.ndim != 1:
            raise ValueError("SampleBuffer expects a 1-D array")
        data.setflags(write=False)

        self._data = data
        self.sample_rate = int(sample_rate)
        self.channel_count = channel_count

    @classmethod
    def from_interleaved(
        cls,
        data: np.ndarray,
        sample_rate: int,
    ) -> list[SampleBuffer]:
        """
        Split a (frames,) or (frames, channels) array into per-channel buffers.

        This is the one place samples are copied: each channel is made
        contiguous once at load time.
        """
        data = np.asarray(data)
        if data.ndim == 1:
            return [cls(data, sample_rate, 1, copy=True)]
        channels = data.shape[1]
        return [
            cls(data[:, ch], sample_rate, channels, copy=True)
            for ch in range(channels)
        ]

    @property
    def data(self) -> np.ndarray:
        """The read-only backing array (not a copy)."""
        return self._data

    def __len__(self) -> int:
        return len(self._data)

    def __repr__(self) -> str:
        return (f"SampleBuffer(len={len(self._data)}, "
                f"sample_rate={self.sample_rate}, channels={self.channel_count})")

    @property
    def duration_secs(self) -> float:
        return len(self._data) / self.sample_rate

    def clamp_offset(self, offset: int) -> int:
        return max(0, min(int(offset), len(self._data)))

    def view(self, offset: int = 0) -> SampleView:
        """A zero-copy view starting at ``offset``."""
        return SampleView(self, offset)

    def slice(self, start: int, stop: Optional[int] = None) -> np.ndarray:
        """Samples in ``[start, stop)`` clamped to the buffer, as a view."""
        start = self.clamp_offset(start)
        stop = len(self._data) if stop is None else self.clamp_offset(stop)
        return self._data[start:max(start, stop)]

    def envelope(self, start: int, stop: int, buckets: int) -> np.ndarray:
        """
        Min/max envelope of ``[start, stop)`` for waveform drawing.

        Returns:
            Array of shape (n, 2) with per-bucket (min, max); n <= buckets.
        """
        segment = self.slice(start, stop)
        if len(segment) == 0 or buckets <= 0:
            return np.zeros((0, 2), dtype=np.float32)

        buckets = min(buckets, len(segment))
        per_bucket = len(segment) // buckets
        usable = segment[:per_bucket * buckets].reshape(buckets, per_bucket)
        return np.stack([usable.min(axis=1), usable.max(axis=1)], axis=1)


class SampleView:
    """
    A (buffer, offset) pair.

    Construction stores a reference and an integer; no samples are touched.
    Seeking produces a new view rather than mutating this one.
    """

    __slots__ = ('buffer', 'offset')

    def __init__(self, buffer: SampleBuffer, offset: int = 0):
        self.buffer = buffer
        self.offset = buffer.clamp_offset(offset)

    def __len__(self) -> int:
        return len(self.buffer) - self.offset

    def __repr__(self) -> str:
        return f"SampleView(offset={self.offset}, remaining={len(self)})"

    @property
    def sample_rate(self) -> int:
        return self.buffer.sample_rate

    @property
    def position_secs(self) -> float:
        return self.offset / self.buffer.sample_rate

    def seek(self, offset: int) -> SampleView:
        """Return a view of the same buffer at ``offset``."""
        return SampleView(self.buffer, offset)

    def advance(self, count: int) -> SampleView:
        return SampleView(self.buffer, self.offset + count)

    def samples(self) -> np.ndarray:
        """All samples from the offset to the end, as a view."""
        return self.buffer.data[self.offset:]

    def window(self, count: int) -> np.ndarray:
        """At most ``count`` samples from the offset, as a view."""
        return self.buffer.slice(self.offset, self.offset + max(0, count))
