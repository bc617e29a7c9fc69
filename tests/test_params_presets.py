"""Tests for decoder params, modes and presets."""

import pytest

from voyager.errors import InvalidWindowError
from voyager.sstv.params import DecoderMode, DecoderParams
from voyager.sstv.presets import (
    PRESETS,
    find_preset,
    matches_preset,
    params_equal,
)


class TestDecoderMode:
    """Tests for DecoderMode."""

    def test_row_sizes(self):
        assert DecoderMode.BINARY_GRAYSCALE.row_size == 512
        assert DecoderMode.PSEUDO_COLOR.row_size == 1536

    @pytest.mark.parametrize('value,expected', [
        ('gray', DecoderMode.BINARY_GRAYSCALE),
        ('Binary-Grayscale', DecoderMode.BINARY_GRAYSCALE),
        ('colour', DecoderMode.PSEUDO_COLOR),
        ('pseudo_color', DecoderMode.PSEUDO_COLOR),
        (DecoderMode.PSEUDO_COLOR, DecoderMode.PSEUDO_COLOR),
    ])
    def test_parse(self, value, expected):
        assert DecoderMode.parse(value) is expected

    def test_parse_unknown(self):
        with pytest.raises(ValueError):
            DecoderMode.parse('sepia')


class TestDecoderParams:
    """Tests for DecoderParams."""

    def test_defaults(self):
        params = DecoderParams()
        assert params.line_duration_ms == 8.3
        assert params.threshold == 0.2
        assert params.decode_window_secs == 2.0
        assert params.mode is DecoderMode.BINARY_GRAYSCALE
        params.validate()

    @pytest.mark.parametrize('window', [0.0, -1.0, float('nan'), 3600.5, 1e305, float('inf')])
    def test_window_out_of_range(self, window):
        with pytest.raises(InvalidWindowError):
            DecoderParams(decode_window_secs=window).validate()

    def test_hour_long_window_accepted(self):
        DecoderParams(decode_window_secs=3600.0).validate()

    def test_samples_per_line_rounds(self):
        assert DecoderParams(line_duration_ms=8.3).samples_per_line(44100) == 366
        assert DecoderParams(line_duration_ms=1.0).samples_per_line(8000) == 8

    def test_window_samples(self):
        assert DecoderParams(decode_window_secs=2.0).window_samples(44100) == 88200

    def test_dict_round_trip(self):
        params = DecoderParams(12.0, 0.15, 3.0, DecoderMode.PSEUDO_COLOR)
        assert DecoderParams.from_dict(params.to_dict()) == params

    def test_from_dict_uses_base(self):
        base = DecoderParams(threshold=0.5)
        params = DecoderParams.from_dict({'line_duration_ms': '20'}, base=base)
        assert params.line_duration_ms == 20.0
        assert params.threshold == 0.5

    def test_with_changes(self):
        params = DecoderParams().with_changes(threshold=0.9)
        assert params.threshold == 0.9
        assert DecoderParams().threshold == 0.2


class TestPresets:
    """Tests for named presets."""

    def test_all_presets_valid(self):
        for preset in PRESETS:
            preset.params.validate()

    def test_names_unique(self):
        names = [p.name for p in PRESETS]
        assert len(names) == len(set(names)) == 6

    def test_find_preset(self):
        preset = find_preset('High Resolution')
        assert preset.params.line_duration_ms == 12.0
        assert find_preset('nope') is None

    def test_default_params_match_default_preset(self):
        assert matches_preset(DecoderParams()) == 'Voyager Default'

    def test_color_preset_distinguished_by_mode(self):
        params = DecoderParams(mode=DecoderMode.PSEUDO_COLOR)
        assert matches_preset(params) == 'Color (Pseudocolor)'

    def test_tolerance(self):
        assert params_equal(DecoderParams(), DecoderParams(line_duration_ms=8.3005))
        assert not params_equal(DecoderParams(), DecoderParams(line_duration_ms=8.31))

    def test_custom_params_match_nothing(self):
        assert matches_preset(DecoderParams(line_duration_ms=42.0)) is None
