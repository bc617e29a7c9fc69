"""Decoder parameters.

Dataclass holding the tunable inputs of one decode: line duration,
binarization threshold, decode window and output mode.
"""

from __future__ import annotations

import enum
import math
from dataclasses import dataclass, replace

from ..errors import (
    InvalidLineDurationError,
    InvalidThresholdError,
    InvalidWindowError,
)
from .constants import (
    BYTES_PER_PIXEL_GRAY,
    BYTES_PER_PIXEL_RGB,
    DEFAULT_DECODE_WINDOW_SECS,
    DEFAULT_LINE_DURATION_MS,
    DECODE_WINDOW_MAX_SECS,
    DEFAULT_THRESHOLD,
    IMAGE_WIDTH,
    LINE_DURATION_MAX_MS,
    LINE_DURATION_MIN_MS,
    THRESHOLD_MAX,
    THRESHOLD_MIN,
)


class DecoderMode(enum.Enum):
    """How decoded lines are laid out in the output raster."""
    BINARY_GRAYSCALE = 'binary_grayscale'  # 1 byte/pixel, 0 or 255
    PSEUDO_COLOR = 'pseudo_color'          # 3 lines folded into R, G, B

    @property
    def bytes_per_pixel(self) -> int:
        if self is DecoderMode.PSEUDO_COLOR:
            return BYTES_PER_PIXEL_RGB
        return BYTES_PER_PIXEL_GRAY

    @property
    def row_size(self) -> int:
        """Bytes in one output row."""
        return IMAGE_WIDTH * self.bytes_per_pixel

    @classmethod
    def parse(cls, value: str | DecoderMode) -> DecoderMode:
        """Accept an enum member, its value, or a loose name like 'color'."""
        if isinstance(value, cls):
            return value
        key = str(value).strip().lower().replace('-', '_')
        if key in ('gray', 'grayscale', 'binary', 'binary_grayscale'):
            return cls.BINARY_GRAYSCALE
        if key in ('color', 'colour', 'pseudocolor', 'pseudo_color'):
            return cls.PSEUDO_COLOR
        raise ValueError(f"Unknown decoder mode: {value!r}")


@dataclass(frozen=True)
class DecoderParams:
    """Inputs for a single decode.

    Attributes:
        line_duration_ms: Time allotted to one scan line (1-100 ms).
        threshold: Amplitude above which a sample counts as lit (0.0-1.0).
        decode_window_secs: Length of audio handed to the decoder per request
            (at most one hour).
        mode: Output layout.
    """
    line_duration_ms: float = DEFAULT_LINE_DURATION_MS
    threshold: float = DEFAULT_THRESHOLD
    decode_window_secs: float = DEFAULT_DECODE_WINDOW_SECS
    mode: DecoderMode = DecoderMode.BINARY_GRAYSCALE

    def validate(self) -> None:
        """Range-check every field, raising before anything is decoded."""
        duration = self.line_duration_ms
        if not (math.isfinite(duration)
                and LINE_DURATION_MIN_MS <= duration <= LINE_DURATION_MAX_MS):
            raise InvalidLineDurationError(duration)

        threshold = self.threshold
        if not (math.isfinite(threshold)
                and THRESHOLD_MIN <= threshold <= THRESHOLD_MAX):
            raise InvalidThresholdError(threshold)

        window = self.decode_window_secs
        if not (math.isfinite(window) and 0 < window <= DECODE_WINDOW_MAX_SECS):
            raise InvalidWindowError(window)

    def samples_per_line(self, sample_rate: int) -> int:
        return int(round(self.line_duration_ms / 1000.0 * sample_rate))

    def window_samples(self, sample_rate: int) -> int:
        return int(self.decode_window_secs * sample_rate)

    def with_changes(self, **changes) -> DecoderParams:
        return replace(self, **changes)

    def to_dict(self) -> dict:
        return {
            'line_duration_ms': self.line_duration_ms,
            'threshold': self.threshold,
            'decode_window_secs': self.decode_window_secs,
            'mode': self.mode.value,
        }

    @classmethod
    def from_dict(cls, data: dict, base: DecoderParams | None = None) -> DecoderParams:
        """Build params from a JSON-style dict, falling back to ``base`` fields."""
        base = base or cls()
        return cls(
            line_duration_ms=float(data.get('line_duration_ms', base.line_duration_ms)),
            threshold=float(data.get('threshold', base.threshold)),
            decode_window_secs=float(
                data.get('decode_window_secs', base.decode_window_secs)),
            mode=DecoderMode.parse(data.get('mode', base.mode)),
        )
