"""Named decoder parameter presets.

Starting points for the different kinds of Golden Record images: the
default calibration, finer and coarser line timings, pseudocolor, and a
low-threshold setting for faint recordings.
"""

from __future__ import annotations

from dataclasses import dataclass

from .params import DecoderMode, DecoderParams

PARAM_TOLERANCE = 0.001


@dataclass(frozen=True)
class DecoderPreset:
    name: str
    params: DecoderParams


PRESETS: tuple[DecoderPreset, ...] = (
    DecoderPreset('Voyager Default', DecoderParams(8.3, 0.2, 2.0)),
    DecoderPreset('High Resolution', DecoderParams(12.0, 0.15, 3.0)),
    DecoderPreset('Fast Scan', DecoderParams(5.0, 0.25, 1.5)),
    DecoderPreset(
        'Color (Pseudocolor)',
        DecoderParams(8.3, 0.2, 2.0, DecoderMode.PSEUDO_COLOR),
    ),
    DecoderPreset('Sensitive (Low Threshold)', DecoderParams(8.3, 0.1, 2.0)),
    DecoderPreset('Test Pattern', DecoderParams(10.0, 0.3, 2.5)),
)


def find_preset(name: str) -> DecoderPreset | None:
    """Look up a preset by exact name."""
    for preset in PRESETS:
        if preset.name == name:
            return preset
    return None


def params_equal(a: DecoderParams, b: DecoderParams,
                 tolerance: float = PARAM_TOLERANCE) -> bool:
    """Compare params, allowing float fields to differ by ``tolerance``."""
    return (
        abs(a.line_duration_ms - b.line_duration_ms) < tolerance
        and abs(a.threshold - b.threshold) < tolerance
        and abs(a.decode_window_secs - b.decode_window_secs) < tolerance
        and a.mode == b.mode
    )


def matches_preset(params: DecoderParams) -> str | None:
    """Name of the first preset equal to ``params``, if any."""
    for preset in PRESETS:
        if params_equal(preset.params, params):
            return preset.name
    return None
