"""Tests for session persistence and display formatting."""

import json

import pytest

from voyager.formatting import format_duration, format_position
from voyager.session import SessionState
from voyager.sstv.params import DecoderMode, DecoderParams


class TestSessionState:
    """Tests for SessionState."""

    def test_round_trip(self, tmp_path):
        state = SessionState.from_params(
            DecoderParams(12.0, 0.15, 3.0), 'golden.wav', 44100, 'right')
        path = tmp_path / 'session.json'

        state.save(path)
        loaded = SessionState.load(path)

        assert loaded == state
        assert loaded.preset == 'High Resolution'
        assert loaded.to_params() == DecoderParams(12.0, 0.15, 3.0)

    def test_custom_params_have_no_preset(self):
        state = SessionState.from_params(DecoderParams(line_duration_ms=33.0))
        assert state.preset is None
        assert state.wav_path is None

    def test_mode_stored_as_string(self, tmp_path):
        state = SessionState.from_params(DecoderParams(mode=DecoderMode.PSEUDO_COLOR))
        path = tmp_path / 's.json'
        state.save(path)
        assert json.loads(path.read_text())['mode'] == 'pseudo_color'

    def test_unknown_keys_ignored(self, tmp_path):
        path = tmp_path / 's.json'
        path.write_text(json.dumps({'threshold': 0.4, 'theme': 'dark'}))
        state = SessionState.load(path)
        assert state.threshold == 0.4
        assert state.line_duration_ms == 8.3


class TestFormatting:
    """Tests for time formatting."""

    @pytest.mark.parametrize('secs,expected', [
        (0, '00:00.00'),
        (5.5, '00:05.50'),
        (65.25, '01:05.25'),
        (59.999, '01:00.00'),
        (3600, '60:00.00'),
        (-3, '00:00.00'),
    ])
    def test_format_duration(self, secs, expected):
        assert format_duration(secs) == expected

    def test_format_position(self):
        assert format_position(44100 * 90, 44100) == '01:30.00'
        assert format_position(100, 0) == '00:00.00'
