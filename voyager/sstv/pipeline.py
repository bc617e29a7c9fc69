"""Decoding pipeline.

Wraps :class:`LineDecoder` with parameter validation, input checks and the
raster layout check, producing a :class:`PipelineResult` or raising a typed
:class:`~voyager.errors.DecodeError`.
"""

from __future__ import annotations

import logging

import numpy as np

from ..errors import InsufficientSamplesError, PixelLayoutError
from .constants import PSEUDOCOLOR_GROUP
from .image_decoder import LineDecoder, PipelineResult
from .params import DecoderMode, DecoderParams

logger = logging.getLogger('voyager.sstv.pipeline')


class DecodingPipeline:
    """Turn a window of samples into a fixed-width raster."""

    def __init__(self, decoder: LineDecoder | None = None):
        self.decoder = decoder or LineDecoder()

    @property
    def width(self) -> int:
        return self.decoder.width

    def process(self, samples: np.ndarray, params: DecoderParams,
                sample_rate: int) -> PipelineResult:
        """Decode ``samples`` with ``params``.

        Args:
            samples: Audio samples for the decode window.
            params: Decoder parameters, validated here before anything else.
            sample_rate: Sample rate (Hz).

        Returns:
            PipelineResult whose pixel count is a whole number of rows.

        Raises:
            InvalidParamsError: A parameter is out of range.
            InsufficientSamplesError: Empty input or less than one line.
            PixelLayoutError: Decoder produced a partial row (a defect).
        """
        params.validate()

        total = len(samples)
        if total == 0:
            raise InsufficientSamplesError(needed=1, actual=0)

        samples_per_line = params.samples_per_line(sample_rate)
        if samples_per_line == 0:
            raise InsufficientSamplesError(needed=1, actual=total)
        if samples_per_line > total:
            raise InsufficientSamplesError(needed=samples_per_line, actual=total)

        if params.mode is DecoderMode.PSEUDO_COLOR:
            needed = samples_per_line * PSEUDOCOLOR_GROUP
            if total < needed:
                raise InsufficientSamplesError(needed=needed, actual=total)

        pixels = self.decoder.decode(samples, params, sample_rate)

        row_size = self.width * params.mode.bytes_per_pixel
        if len(pixels) % row_size != 0:
            raise PixelLayoutError(len(pixels), row_size, params.mode.value)

        height = len(pixels) // row_size
        logger.debug(
            f"Decoded {height} rows ({params.mode.value}) from {total} samples"
        )
        return PipelineResult(
            pixels=pixels.tobytes(),
            width=self.width,
            height=height,
            mode=params.mode,
        )


def process(samples: np.ndarray, params: DecoderParams,
            sample_rate: int) -> PipelineResult:
    """One-shot decode with a fresh pipeline."""
    return DecodingPipeline().process(samples, params, sample_rate)


