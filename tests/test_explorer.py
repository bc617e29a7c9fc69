"""Tests for the interactive exploration session."""

import numpy as np
import pytest
from scipy.io import wavfile

from helpers import wait_until
from voyager.audio import recording_from_array
from voyager.config import AppConfig
from voyager.errors import InvalidThresholdError, VoyagerError
from voyager.explorer import (
    MAX_KEPT_RESULTS,
    Explorer,
    NoRecordingError,
    get_explorer,
    reset_explorer,
)
from voyager.sstv.constants import FFT_WINDOW
from voyager.sstv.params import DecoderParams
from voyager.session import SessionState
from voyager.sstv.signals import sync_pattern

SAMPLE_RATE = 44100


@pytest.fixture
def pattern():
    return sync_pattern(SAMPLE_RATE, pulses=3)


@pytest.fixture
def explorer(pattern):
    samples, _ = pattern
    exp = Explorer(AppConfig())
    exp.set_recording(recording_from_array(samples, SAMPLE_RATE))
    yield exp
    exp.shutdown()


def collect(explorer, count):
    results = []
    wait_until(lambda: len(results.extend(explorer.tick()) or results) >= count)
    return results


class TestExplorer:
    """Tests for Explorer."""

    def test_requires_recording(self):
        exp = Explorer(AppConfig())
        try:
            with pytest.raises(NoRecordingError):
                exp.decode()
            with pytest.raises(NoRecordingError):
                exp.seek(10)
            assert exp.status()['recording'] is None
        finally:
            exp.shutdown()

    def test_seek_moves_cursor(self, explorer):
        view = explorer.seek(1000)
        assert view.offset == 1000
        assert explorer.cursor.buffer is explorer.recording.channel()

    def test_next_sync(self, explorer, pattern):
        _, starts = pattern
        first = explorer.next_sync(0)
        assert abs(first - starts[0]) < FFT_WINDOW
        assert explorer.next_sync(first) > first

    def test_decode_at_cursor(self, explorer):
        explorer.seek(0)
        request_id = explorer.decode(params=DecoderParams(decode_window_secs=0.5))

        results = collect(explorer, 1)

        assert results[0].id == request_id
        assert results[0].ok
        assert explorer.get_result(request_id) is results[0]
        assert explorer.latest_result() is results[0]

    def test_export(self, explorer, tmp_path):
        request_id = explorer.decode(params=DecoderParams(decode_window_secs=0.5))
        collect(explorer, 1)

        path = explorer.export(request_id, tmp_path / 'frame.png')

        assert path.exists()

    def test_export_unknown(self, explorer, tmp_path):
        with pytest.raises(VoyagerError):
            explorer.export(99, tmp_path / 'none.png')

    def test_kept_results_bounded(self, explorer):
        params = DecoderParams(decode_window_secs=0.05)
        for _ in range(4):
            ids = [explorer.decode(params=params) for _ in range(10)]
            collect(explorer, len(ids))
        assert explorer.get_result(1) is None
        assert explorer.get_result(40) is not None
        assert len(explorer._results) == MAX_KEPT_RESULTS

    def test_status(self, explorer):
        explorer.seek(SAMPLE_RATE)
        status = explorer.status()
        assert status['cursor']['position'] == '00:01.00'
        assert status['preset'] == 'Voyager Default'
        assert status['health']['healthy']

    def test_session_restore(self, explorer, tmp_path, pattern):
        samples, _ = pattern
        path = tmp_path / 'pattern.wav'
        wavfile.write(path, SAMPLE_RATE, samples)
        explorer.load(path)
        explorer.seek(5000)
        explorer.set_params(DecoderParams(line_duration_ms=12.0, threshold=0.15,
                                          decode_window_secs=3.0))
        state = explorer.session_state()

        other = Explorer(AppConfig())
        try:
            other.restore(state)
            assert other.cursor.offset == 5000
            assert other.params == DecoderParams(12.0, 0.15, 3.0)
            assert other.recording.path == path
        finally:
            other.shutdown()
        assert state.preset == 'High Resolution'

    def test_bad_session_changes_nothing(self, explorer, tmp_path, pattern):
        samples, _ = pattern
        path = tmp_path / 'other.wav'
        wavfile.write(path, SAMPLE_RATE, samples[:SAMPLE_RATE])
        recording = explorer.recording
        explorer.seek(2000)
        params = explorer.params

        with pytest.raises(InvalidThresholdError):
            explorer.restore(SessionState(wav_path=str(path), threshold=5.0))

        assert explorer.recording is recording
        assert explorer.params == params
        assert explorer.cursor.offset == 2000

    def test_new_recording_resets_cursor(self, explorer):
        explorer.seek(1000)
        explorer.set_recording(recording_from_array(np.zeros(8000, dtype=np.int16), 8000))
        assert explorer.cursor.offset == 0


class TestExplorerSingleton:
    """Tests for get_explorer / reset_explorer."""

    def test_shared_until_reset(self):
        try:
            first = get_explorer()
            assert get_explorer() is first

            reset_explorer()

            assert first.supervisor.worker is None
            assert get_explorer() is not first
        finally:
            reset_explorer()
