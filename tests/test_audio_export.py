"""Tests for WAV loading, PNG export and batch decoding."""

import numpy as np
import pytest
from PIL import Image
from scipy.io import wavfile

from voyager.audio import CHANNEL_RIGHT, load_wav, recording_from_array
from voyager.batch import main as batch_main
from voyager.batch import run_batch
from voyager.errors import AudioLoadError, ExportError
from voyager.export import save_png
from voyager.sstv.image_decoder import PipelineResult
from voyager.sstv.params import DecoderMode, DecoderParams
from voyager.sstv.pipeline import DecodingPipeline
from voyager.sstv.signals import square_wave

SAMPLE_RATE = 44100


@pytest.fixture
def stereo_wav(tmp_path):
    """One second of int16 stereo: loud square left, quiet right."""
    left = (square_wave(1000.0, 1.0, SAMPLE_RATE, amplitude=0.8) * 32767).astype(np.int16)
    right = np.full(SAMPLE_RATE, 3276, dtype=np.int16)
    path = tmp_path / 'golden.wav'
    wavfile.write(path, SAMPLE_RATE, np.stack([left, right], axis=1))
    return path


@pytest.fixture
def decoded():
    samples = square_wave(1000.0, 0.5, SAMPLE_RATE, amplitude=0.8)
    return DecodingPipeline().process(samples, DecoderParams(), SAMPLE_RATE)


class TestLoadWav:
    """Tests for load_wav."""

    def test_stereo_int16(self, stereo_wav):
        recording = load_wav(stereo_wav)

        assert recording.sample_rate == SAMPLE_RATE
        assert recording.channel_count == 2
        assert recording.duration_secs == pytest.approx(1.0)
        left = recording.channel()
        right = recording.channel(CHANNEL_RIGHT)
        assert left.data.dtype == np.float32
        assert np.abs(left.data).max() == pytest.approx(0.8, abs=1e-3)
        assert right.data[0] == pytest.approx(0.1, abs=1e-3)

    def test_mono_returns_only_channel(self, tmp_path):
        path = tmp_path / 'mono.wav'
        wavfile.write(path, 8000, np.zeros(800, dtype=np.float32))
        recording = load_wav(path)
        assert recording.channel(CHANNEL_RIGHT) is recording.channel()

    def test_missing_file(self, tmp_path):
        with pytest.raises(AudioLoadError):
            load_wav(tmp_path / 'missing.wav')

    def test_not_a_wav(self, tmp_path):
        path = tmp_path / 'junk.wav'
        path.write_bytes(b'this is not audio at all')
        with pytest.raises(AudioLoadError):
            load_wav(path)

    @pytest.mark.parametrize('rate', [4000, 384000])
    def test_sample_rate_range(self, rate):
        with pytest.raises(AudioLoadError):
            recording_from_array(np.zeros(100, dtype=np.int16), rate)

    def test_too_many_channels(self):
        with pytest.raises(AudioLoadError):
            recording_from_array(np.zeros((100, 4), dtype=np.int16), SAMPLE_RATE)

    def test_empty(self):
        with pytest.raises(AudioLoadError):
            recording_from_array(np.zeros(0, dtype=np.int16), SAMPLE_RATE)


class TestExport:
    """Tests for PNG export."""

    def test_grayscale_png(self, decoded, tmp_path):
        path = save_png(decoded, tmp_path / 'out' / 'image.png')

        with Image.open(path) as image:
            assert image.mode == 'L'
            assert image.size == (512, decoded.height)
            assert np.array_equal(np.asarray(image), decoded.to_array())

    def test_color_png(self, tmp_path):
        samples = np.full(441 * 6, 1.0, dtype=np.float32)
        params = DecoderParams(10.0, 0.5, 2.0, DecoderMode.PSEUDO_COLOR)
        result = DecodingPipeline().process(samples, params, SAMPLE_RATE)

        path = save_png(result, tmp_path / 'color.png')

        with Image.open(path) as image:
            assert image.mode == 'RGB'
            assert image.size == (512, 2)

    def test_suffix_forced(self, decoded, tmp_path):
        assert save_png(decoded, tmp_path / 'image.bmp').suffix == '.png'

    def test_empty_raster(self, tmp_path):
        empty = PipelineResult(b'', 512, 0, DecoderMode.BINARY_GRAYSCALE)
        with pytest.raises(ExportError):
            save_png(empty, tmp_path / 'empty.png')

    def test_empty_stem(self, decoded):
        with pytest.raises(ExportError):
            save_png(decoded, '/')


class TestBatch:
    """Tests for batch decoding."""

    def test_decodes_every_match(self, stereo_wav, tmp_path):
        out = tmp_path / 'png'

        report = run_batch(str(tmp_path / '*.wav'), out)

        assert report.written == [out / 'golden.png']
        assert not report.failed
        assert (out / 'golden.png').exists()

    def test_bad_file_does_not_stop_run(self, stereo_wav, tmp_path):
        (tmp_path / 'broken.wav').write_bytes(b'garbage')

        report = run_batch(str(tmp_path / '*.wav'), tmp_path / 'png')

        assert len(report.written) == 1
        assert list(report.failed) == [str(tmp_path / 'broken.wav')]

    def test_no_matches(self, tmp_path):
        report = run_batch(str(tmp_path / '*.wav'), tmp_path / 'png')
        assert report.written == [] and report.failed == {}

    def test_cli_exit_codes(self, stereo_wav, tmp_path):
        pattern = str(tmp_path / '*.wav')
        assert batch_main([pattern, str(tmp_path / 'a'), '--mode', 'color']) == 0
        assert batch_main([pattern, str(tmp_path / 'b'), '--threshold', '3']) == 2

        (tmp_path / 'broken.wav').write_bytes(b'garbage')
        assert batch_main([pattern, str(tmp_path / 'c')]) == 1
