"""
Voyager Golden Record image decoder.

Decodes the Golden Record's slow-scan image track into raster images and
keeps decoding off the interactive path: a supervised background worker
serves decode requests that reference one shared, read-only sample buffer.
"""

from .buffer import SampleBuffer, SampleView
from .errors import (
    DecodeError,
    InsufficientSamplesError,
    InvalidParamsError,
    PixelLayoutError,
    QueueFullError,
    VoyagerError,
    WorkerError,
    WorkerUnavailableError,
)
from .sstv import (
    DecoderMode,
    DecoderParams,
    DecodingPipeline,
    PipelineResult,
    SyncDetector,
)
from .supervisor import WorkerHealth, WorkerSupervisor
from .worker import DecodeRequest, DecodeResult, DecodeWorker, spawn_decode_worker

__version__ = '0.4.0'

__all__ = [
    # Shared buffers
    'SampleBuffer',
    'SampleView',

    # Decoding
    'DecoderMode',
    'DecoderParams',
    'DecodingPipeline',
    'PipelineResult',
    'SyncDetector',

    # Worker
    'DecodeRequest',
    'DecodeResult',
    'DecodeWorker',
    'spawn_decode_worker',
    'WorkerHealth',
    'WorkerSupervisor',

    # Errors
    'DecodeError',
    'InsufficientSamplesError',
    'InvalidParamsError',
    'PixelLayoutError',
    'QueueFullError',
    'VoyagerError',
    'WorkerError',
    'WorkerUnavailableError',
]
