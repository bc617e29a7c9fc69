"""Golden Record image decoding.

FFT-based sync tone detection and line-by-line reconstruction of the
Voyager Golden Record image track in binary grayscale or pseudocolor.
"""

from .constants import FFT_WINDOW, FREQ_SYNC, IMAGE_WIDTH, MAX_LINES
from .image_decoder import LineDecoder, PipelineResult
from .params import DecoderMode, DecoderParams
from .pipeline import DecodingPipeline
from .presets import PRESETS, DecoderPreset, find_preset, matches_preset
from .sync import SyncDetector, detect_tone, find_next, find_positions

__all__ = [
    'DecoderMode',
    'DecoderParams',
    'DecoderPreset',
    'DecodingPipeline',
    'FFT_WINDOW',
    'FREQ_SYNC',
    'IMAGE_WIDTH',
    'LineDecoder',
    'MAX_LINES',
    'PRESETS',
    'PipelineResult',
    'SyncDetector',
    'detect_tone',
    'find_next',
    'find_positions',
    'find_preset',
    'matches_preset',
]
