"""
Decoder configuration.

Defaults can be overridden with ``VOYAGER_*`` environment variables. Values
are read once at import into module constants, and grouped into dataclasses
that callers pass around and validate.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field

from .errors import ConfigError
from .sstv.constants import (
    DECODE_WINDOW_MAX_SECS,
    DEFAULT_DECODE_WINDOW_SECS,
    DEFAULT_LINE_DURATION_MS,
    DEFAULT_THRESHOLD,
    FFT_WINDOW,
    FREQ_SYNC,
    IMAGE_WIDTH,
    LINE_DURATION_MAX_MS,
    LINE_DURATION_MIN_MS,
    MAX_LINES,
    SYNC_THRESHOLD_MULTIPLIER,
    THRESHOLD_MAX,
    THRESHOLD_MIN,
)
from .sstv.params import DecoderMode, DecoderParams


def _get_env(name: str, default: str) -> str:
    return os.environ.get(f'VOYAGER_{name}', default)


def _get_env_int(name: str, default: int) -> int:
    try:
        return int(_get_env(name, str(default)))
    except ValueError:
        return default


def _get_env_float(name: str, default: float) -> float:
    try:
        return float(_get_env(name, str(default)))
    except ValueError:
        return default


def _get_env_bool(name: str, default: bool) -> bool:
    value = _get_env(name, '').strip().lower()
    if not value:
        return default
    return value in ('1', 'true', 'yes', 'on')


# Decoder
DECODER_LINE_DURATION_MS = _get_env_float('LINE_DURATION_MS', DEFAULT_LINE_DURATION_MS)
DECODER_THRESHOLD = _get_env_float('THRESHOLD', DEFAULT_THRESHOLD)
DECODER_WINDOW_SECS = _get_env_float('DECODE_WINDOW_SECS', DEFAULT_DECODE_WINDOW_SECS)
DECODER_MODE = _get_env('MODE', DecoderMode.BINARY_GRAYSCALE.value)

# Sync detection
SYNC_FFT_WINDOW = _get_env_int('FFT_WINDOW', FFT_WINDOW)
SYNC_FREQ_HZ = _get_env_float('SYNC_FREQ_HZ', FREQ_SYNC)
SYNC_MULTIPLIER = _get_env_float('SYNC_MULTIPLIER', SYNC_THRESHOLD_MULTIPLIER)

# Worker supervision
WORKER_MAX_QUEUE_SIZE = _get_env_int('WORKER_MAX_QUEUE', 10)
WORKER_HEALTH_CHECK_INTERVAL_MS = _get_env_int('WORKER_HEALTH_INTERVAL_MS', 1000)
WORKER_MAX_UNRESPONSIVE_MS = _get_env_int('WORKER_MAX_UNRESPONSIVE_MS', 5000)
WORKER_AUTO_RESTART = _get_env_bool('WORKER_AUTO_RESTART', True)

# Logging
LOG_LEVEL = _get_env('LOG_LEVEL', 'INFO')
DEBUG = _get_env_bool('DEBUG', False)


@dataclass
class DecoderConfig:
    line_duration_ms: float = DECODER_LINE_DURATION_MS
    threshold: float = DECODER_THRESHOLD
    decode_window_secs: float = DECODER_WINDOW_SECS
    mode: str = DECODER_MODE
    image_width: int = IMAGE_WIDTH
    max_lines: int = MAX_LINES

    def default_params(self) -> DecoderParams:
        return DecoderParams(
            line_duration_ms=self.line_duration_ms,
            threshold=self.threshold,
            decode_window_secs=self.decode_window_secs,
            mode=DecoderMode.parse(self.mode),
        )


@dataclass
class SyncConfig:
    fft_window: int = SYNC_FFT_WINDOW
    target_freq_hz: float = SYNC_FREQ_HZ
    threshold_multiplier: float = SYNC_MULTIPLIER


@dataclass
class WorkerConfig:
    """
    Supervisor settings.

    Attributes:
        max_queue_size: Pending requests allowed before submit refuses.
        health_check_interval_ms: Suggested tick period for health checks.
        max_unresponsive_ms: Silence (with requests pending) before restart.
        auto_restart: Restart automatically from :meth:`WorkerSupervisor.tick`.
    """
    max_queue_size: int = WORKER_MAX_QUEUE_SIZE
    health_check_interval_ms: int = WORKER_HEALTH_CHECK_INTERVAL_MS
    max_unresponsive_ms: int = WORKER_MAX_UNRESPONSIVE_MS
    auto_restart: bool = WORKER_AUTO_RESTART


@dataclass
class AppConfig:
    decoder: DecoderConfig = field(default_factory=DecoderConfig)
    sync: SyncConfig = field(default_factory=SyncConfig)
    worker: WorkerConfig = field(default_factory=WorkerConfig)

    def validate(self) -> None:
        """Raise ConfigError on the first out-of-range value."""
        d = self.decoder
        if not LINE_DURATION_MIN_MS <= d.line_duration_ms <= LINE_DURATION_MAX_MS:
            raise ConfigError(
                f"Line duration {d.line_duration_ms}ms out of range 1-100ms")
        if not THRESHOLD_MIN <= d.threshold <= THRESHOLD_MAX:
            raise ConfigError(f"Threshold {d.threshold} out of range 0.0-1.0")
        if not 0 < d.decode_window_secs <= DECODE_WINDOW_MAX_SECS:
            raise ConfigError(
                f"Decode window {d.decode_window_secs}s out of range 0-3600s")
        try:
            DecoderMode.parse(d.mode)
        except ValueError as e:
            raise ConfigError(str(e)) from e
        if d.image_width <= 0:
            raise ConfigError("Image width must be > 0")

        n = self.sync.fft_window
        if n <= 0 or n & (n - 1):
            raise ConfigError(f"FFT chunk size {n} must be power of 2")
        if self.sync.threshold_multiplier <= 0:
            raise ConfigError("Sync threshold multiplier must be > 0")

        if self.worker.max_queue_size <= 0:
            raise ConfigError("Worker queue size must be > 0")
        if self.worker.max_unresponsive_ms <= 0:
            raise ConfigError("Worker unresponsive timeout must be > 0")


def load_config() -> AppConfig:
    """Build and validate the configuration from the environment."""
    config = AppConfig()
    config.validate()
    return config
