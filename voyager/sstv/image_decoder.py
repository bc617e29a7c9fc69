"""Line-by-line Golden Record image decoder.

Cuts a sample window into fixed-length scan lines, resamples each line onto
512 columns and binarizes it against the amplitude threshold. In pseudocolor
mode every three consecutive lines become the red, green and blue planes of a
single output line.
"""

from __future__ import annotations

from dataclasses import dataclass

import numpy as np
from PIL import Image

from .constants import (
    IMAGE_WIDTH,
    MAX_LINES,
    PIXEL_OFF,
    PIXEL_ON,
    PSEUDOCOLOR_GROUP,
)
from .dsp import resample_lines
from .params import DecoderMode, DecoderParams

# Lines resampled per numpy batch; bounds the float64 scratch at ~4 MB.
_RESAMPLE_BATCH = 1024


@dataclass(frozen=True)
class PipelineResult:
    """A decoded raster.

    Attributes:
        pixels: Row-major pixel bytes (1 byte/pixel grayscale, 3 bytes RGB).
        width: Columns per row, always 512.
        height: Number of rows.
        mode: Layout of ``pixels``.
    """
    pixels: bytes
    width: int
    height: int
    mode: DecoderMode

    @property
    def bytes_per_pixel(self) -> int:
        return self.mode.bytes_per_pixel

    @property
    def row_size(self) -> int:
        return self.width * self.bytes_per_pixel

    @property
    def pixel_count(self) -> int:
        return self.width * self.height

    def to_array(self) -> np.ndarray:
        """Pixels as a (height, width) or (height, width, 3) uint8 array."""
        flat = np.frombuffer(self.pixels, dtype=np.uint8)
        if self.mode is DecoderMode.PSEUDO_COLOR:
            return flat.reshape(self.height, self.width, 3)
        return flat.reshape(self.height, self.width)

    def to_image(self) -> Image.Image:
        """Convert to a Pillow image ('L' for grayscale, 'RGB' for pseudocolor)."""
        return Image.fromarray(self.to_array())

    def summary(self) -> dict:
        """JSON-friendly description without the pixel payload."""
        return {
            'width': self.width,
            'height': self.height,
            'mode': self.mode.value,
            'bytes': len(self.pixels),
        }


class LineDecoder:
    """Decode scan lines from raw amplitudes.

    Usage::

        decoder = LineDecoder()
        pixels = decoder.decode(samples, params, 44100)
    """

    def __init__(self, width: int = IMAGE_WIDTH, max_lines: int = MAX_LINES):
        self.width = width
        self.max_lines = max_lines

    def line_count(self, sample_count: int, samples_per_line: int) -> int:
        """Number of complete lines available, capped at ``max_lines``."""
        if samples_per_line <= 0:
            return 0
        return min(sample_count // samples_per_line, self.max_lines)

    def decode_lines(self, samples: np.ndarray, samples_per_line: int,
                     threshold: float) -> np.ndarray:
        """Decode every complete line to binary grayscale.

        Args:
            samples: Audio samples; only whole lines are used.
            samples_per_line: Source samples per scan line.
            threshold: Absolute amplitude above which a pixel is lit.

        Returns:
            uint8 array of shape (lines, width) holding only 0 and 255.
        """
        n_lines = self.line_count(len(samples), samples_per_line)
        out = np.empty((n_lines, self.width), dtype=np.uint8)
        if n_lines == 0:
            return out

        # Reshape of a contiguous prefix is a view, not a copy.
        lines = np.asarray(samples[:n_lines * samples_per_line]).reshape(
            n_lines, samples_per_line)

        for start in range(0, n_lines, _RESAMPLE_BATCH):
            stop = min(start + _RESAMPLE_BATCH, n_lines)
            columns = resample_lines(lines[start:stop], self.width)
            out[start:stop] = np.where(
                np.abs(columns) > threshold, PIXEL_ON, PIXEL_OFF)
        return out

    @staticmethod
    def pack_pseudocolor(gray_lines: np.ndarray) -> np.ndarray:
        """Fold grayscale lines into RGB lines.

        Lines ``3k``, ``3k+1`` and ``3k+2`` become the R, G and B planes of
        output line ``k``. A trailing group of one or two lines is dropped.

        Args:
            gray_lines: uint8 array of shape (lines, width).

        Returns:
            uint8 array of shape (lines // 3, width, 3).
        """
        groups = len(gray_lines) // PSEUDOCOLOR_GROUP
        width = gray_lines.shape[1]
        usable = gray_lines[:groups * PSEUDOCOLOR_GROUP]
        return usable.reshape(groups, PSEUDOCOLOR_GROUP, width).transpose(0, 2, 1)

    def decode(self, samples: np.ndarray, params: DecoderParams,
               sample_rate: int) -> np.ndarray:
        """Decode samples into a flat pixel array laid out for ``params.mode``.

        Parameters are assumed valid; :class:`DecodingPipeline` checks them.
        """
        gray = self.decode_lines(
            samples, params.samples_per_line(sample_rate), params.threshold)

        if params.mode is DecoderMode.PSEUDO_COLOR:
            return np.ascontiguousarray(self.pack_pseudocolor(gray)).ravel()
        return gray.ravel()
