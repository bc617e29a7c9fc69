"""Tests for configuration defaults and validation."""

import pytest

from voyager.config import (
    AppConfig,
    DecoderConfig,
    SyncConfig,
    WorkerConfig,
    _get_env_bool,
    _get_env_float,
    _get_env_int,
    load_config,
)
from voyager.errors import ConfigError
from voyager.sstv.params import DecoderMode


class TestDefaults:
    """Tests for the built-in defaults."""

    def test_load_config_validates(self):
        config = load_config()
        assert isinstance(config, AppConfig)

    def test_worker_config_valid(self):
        worker = WorkerConfig(
            max_queue_size=10, health_check_interval_ms=1000,
            max_unresponsive_ms=5000, auto_restart=True)
        AppConfig(worker=worker).validate()

    def test_default_params(self):
        params = DecoderConfig(line_duration_ms=10.0, threshold=0.3,
                               decode_window_secs=1.0, mode='color').default_params()
        assert params.line_duration_ms == 10.0
        assert params.mode is DecoderMode.PSEUDO_COLOR


class TestValidation:
    """Tests for AppConfig.validate."""

    @pytest.mark.parametrize('config', [
        AppConfig(decoder=DecoderConfig(line_duration_ms=0.5)),
        AppConfig(decoder=DecoderConfig(line_duration_ms=150.0)),
        AppConfig(decoder=DecoderConfig(threshold=1.5)),
        AppConfig(decoder=DecoderConfig(decode_window_secs=0.0)),
        AppConfig(decoder=DecoderConfig(decode_window_secs=1e305)),
        AppConfig(decoder=DecoderConfig(mode='sepia')),
        AppConfig(decoder=DecoderConfig(image_width=0)),
        AppConfig(sync=SyncConfig(fft_window=1000)),
        AppConfig(sync=SyncConfig(fft_window=0)),
        AppConfig(sync=SyncConfig(threshold_multiplier=0.0)),
        AppConfig(worker=WorkerConfig(max_queue_size=0)),
        AppConfig(worker=WorkerConfig(max_unresponsive_ms=0)),
    ])
    def test_rejected(self, config):
        with pytest.raises(ConfigError):
            config.validate()

    def test_power_of_two_window_accepted(self):
        AppConfig(sync=SyncConfig(fft_window=4096)).validate()


class TestEnvironment:
    """Tests for VOYAGER_* overrides."""

    def test_int(self, monkeypatch):
        monkeypatch.setenv('VOYAGER_TEST_INT', '42')
        assert _get_env_int('TEST_INT', 1) == 42

    def test_bad_int_falls_back(self, monkeypatch):
        monkeypatch.setenv('VOYAGER_TEST_INT', 'many')
        assert _get_env_int('TEST_INT', 7) == 7

    def test_float(self, monkeypatch):
        monkeypatch.setenv('VOYAGER_TEST_FLOAT', '0.35')
        assert _get_env_float('TEST_FLOAT', 0.2) == 0.35

    @pytest.mark.parametrize('value,expected', [
        ('1', True), ('true', True), ('YES', True), ('off', False), ('0', False),
    ])
    def test_bool(self, monkeypatch, value, expected):
        monkeypatch.setenv('VOYAGER_TEST_BOOL', value)
        assert _get_env_bool('TEST_BOOL', not expected) is expected

    def test_bool_unset_uses_default(self, monkeypatch):
        monkeypatch.delenv('VOYAGER_TEST_BOOL', raising=False)
        assert _get_env_bool('TEST_BOOL', True) is True
