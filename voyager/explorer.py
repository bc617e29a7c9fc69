"""
Interactive exploration session.

Ties a loaded recording, a playback/decode cursor, the current decoder
parameters and the worker supervisor together for an interactive client.
The cursor is a :class:`SampleView`, so seeking is an O(1) update and
decode requests reference the recording without copying it.
"""

from __future__ import annotations

import logging
import threading
from collections import OrderedDict
from pathlib import Path
from typing import Optional

import numpy as np

from .audio import CHANNEL_LEFT, Recording, load_wav
from .buffer import SampleBuffer, SampleView
from .config import AppConfig, load_config
from .errors import VoyagerError
from .export import save_png
from .formatting import format_position
from .session import SessionState
from .sstv.dsp import compute_spectrum
from .sstv.params import DecoderParams
from .sstv.presets import matches_preset
from .sstv.sync import SyncDetector
from .supervisor import WorkerHealth, WorkerSupervisor
from .worker import DecodeResult

logger = logging.getLogger('voyager.explorer')

# Completed results kept for export / late retrieval
MAX_KEPT_RESULTS = 32


class NoRecordingError(VoyagerError):
    """An operation needs a loaded recording and there is none."""


class Explorer:
    """
    One user's exploration state.

    Thread-safe: every public method takes the instance lock, so a web
    server's request threads can share one explorer.
    """

    def __init__(self, config: Optional[AppConfig] = None,
                 supervisor: Optional[WorkerSupervisor] = None):
        self.config = config or load_config()
        self.supervisor = supervisor or WorkerSupervisor(self.config.worker)
        self.sync_detector = SyncDetector(
            target_freq=self.config.sync.target_freq_hz,
            window_size=self.config.sync.fft_window,
            threshold_multiplier=self.config.sync.threshold_multiplier,
        )
        self.params: DecoderParams = self.config.decoder.default_params()
        self.recording: Optional[Recording] = None
        self.channel = CHANNEL_LEFT
        self.cursor: Optional[SampleView] = None
        self._results: OrderedDict[int, DecodeResult] = OrderedDict()
        self._lock = threading.Lock()

    # ------------------------------------------------------------------
    # Recording and cursor
    # ------------------------------------------------------------------

    def load(self, path: str | Path) -> Recording:
        recording = load_wav(path)
        with self._lock:
            return self._set_recording(recording)

    def set_recording(self, recording: Recording) -> Recording:
        with self._lock:
            return self._set_recording(recording)

    def _set_recording(self, recording: Recording) -> Recording:
        # The previous recording's buffers stay alive only as long as
        # queued requests still reference them.
        self.recording = recording
        self.channel = CHANNEL_LEFT
        self.cursor = recording.channel(self.channel).view(0)
        self._results.clear()
        return recording

    def _buffer(self, channel: Optional[str] = None) -> SampleBuffer:
        if self.recording is None:
            raise NoRecordingError("No recording loaded")
        return self.recording.channel(channel or self.channel)

    def seek(self, offset: int, channel: Optional[str] = None) -> SampleView:
        with self._lock:
            if channel:
                self.channel = channel
            self.cursor = self._buffer().view(offset)
            return self.cursor

    def next_sync(self, offset: Optional[int] = None,
                  channel: Optional[str] = None) -> Optional[int]:
        """Find the next sync tone after ``offset`` (default: the cursor)."""
        with self._lock:
            buffer = self._buffer(channel)
            if offset is None:
                offset = self.cursor.offset if self.cursor else 0
            # Start one sample past the cursor so repeated calls advance.
            return self.sync_detector.find_next(
                buffer.data, offset + 1, buffer.sample_rate)

    def spectrum(self, offset: Optional[int] = None,
                 channel: Optional[str] = None) -> tuple[np.ndarray, np.ndarray]:
        """Display spectrum of one FFT window at ``offset`` (default: the cursor)."""
        with self._lock:
            buffer = self._buffer(channel)
            if offset is None:
                offset = self.cursor.offset if self.cursor else 0
            window = buffer.view(offset).window(self.sync_detector.window_size)
            return compute_spectrum(window, buffer.sample_rate,
                                    self.sync_detector.window_size)

    def waveform(self, start: int, stop: Optional[int], buckets: int,
                 channel: Optional[str] = None) -> np.ndarray:
        """Min/max envelope of ``[start, stop)`` (``stop=None``: to the end)."""
        with self._lock:
            buffer = self._buffer(channel)
            return buffer.envelope(start, len(buffer) if stop is None else stop, buckets)

    # ------------------------------------------------------------------
    # Decoding
    # ------------------------------------------------------------------

    def set_params(self, params: DecoderParams) -> None:
        params.validate()
        with self._lock:
            self.params = params

    def decode(self, offset: Optional[int] = None,
               params: Optional[DecoderParams] = None,
               channel: Optional[str] = None) -> int:
        """Submit a decode at ``offset`` (default: the cursor). Returns the request id."""
        with self._lock:
            buffer = self._buffer(channel)
            if offset is None:
                offset = self.cursor.offset if self.cursor else 0
            view = buffer.view(offset)
            return self.supervisor.submit(view, params=params or self.params)

    def tick(self) -> list[DecodeResult]:
        """Health check, restart if needed, and collect finished results."""
        with self._lock:
            results = self.supervisor.tick()
            for result in results:
                self._results[result.id] = result
                while len(self._results) > MAX_KEPT_RESULTS:
                    self._results.popitem(last=False)
            return results

    def get_result(self, request_id: int) -> Optional[DecodeResult]:
        with self._lock:
            return self._results.get(request_id)

    def latest_result(self) -> Optional[DecodeResult]:
        with self._lock:
            for result in reversed(self._results.values()):
                if result.ok:
                    return result
            return None

    def export(self, request_id: int, path: str | Path) -> Path:
        result = self.get_result(request_id)
        if result is None or result.result is None:
            raise VoyagerError(f"No decoded image for request {request_id}")
        return save_png(result.result, path)

    def health(self) -> WorkerHealth:
        with self._lock:
            return self.supervisor.health()

    def restart(self) -> None:
        with self._lock:
            self.supervisor.restart()

    def shutdown(self) -> None:
        with self._lock:
            self.supervisor.shutdown()

    # ------------------------------------------------------------------
    # Status / persistence
    # ------------------------------------------------------------------

    def status(self) -> dict:
        with self._lock:
            health = self.supervisor.health()
            recording = self.recording
            cursor = self.cursor
            return {
                'health': health.to_dict(),
                'metrics': self.supervisor.metrics.summary().to_dict(),
                'params': self.params.to_dict(),
                'preset': matches_preset(self.params),
                'last_error': self.supervisor.last_error,
                'recording': None if recording is None else {
                    'path': str(recording.path) if recording.path else None,
                    'sample_rate': recording.sample_rate,
                    'channels': recording.channel_count,
                    'duration_secs': recording.duration_secs,
                },
                'cursor': None if cursor is None else {
                    'offset': cursor.offset,
                    'channel': self.channel,
                    'position': format_position(cursor.offset, cursor.sample_rate),
                },
            }

    def session_state(self) -> SessionState:
        with self._lock:
            path = self.recording.path if self.recording else None
            offset = self.cursor.offset if self.cursor else 0
            return SessionState.from_params(self.params, path, offset, self.channel)

    def restore(self, state: SessionState) -> None:
        """Apply a saved session, reloading its recording when it has one.

        The saved params are validated first, so a bad session changes nothing.
        """
        params = state.to_params()
        params.validate()
        if state.wav_path:
            self.load(state.wav_path)
        self.set_params(params)
        if self.recording is not None:
            self.seek(state.position_samples, state.channel)


_explorer: Optional[Explorer] = None
_explorer_lock = threading.Lock()


def get_explorer() -> Explorer:
    """Process-wide explorer used by the web routes."""
    global _explorer
    with _explorer_lock:
        if _explorer is None:
            _explorer = Explorer()
        return _explorer


def reset_explorer() -> None:
    global _explorer
    with _explorer_lock:
        if _explorer is not None:
            _explorer.shutdown()
        _explorer = None
