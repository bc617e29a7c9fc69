"""
Exception hierarchy for the Voyager decoder.

Decode failures are ordinary exceptions raised by the pipeline and turned
into ``DecodeResult.error`` strings by the worker. Worker faults are never
reported through results; the supervisor finds them out-of-band.
"""

from __future__ import annotations

from typing import Optional


class VoyagerError(Exception):
    """Base class for all decoder errors."""


# =============================================================================
# Decode errors (per call, always recoverable by the caller)
# =============================================================================


class DecodeError(VoyagerError):
    """A single decode call failed."""

    def recovery_hint(self) -> Optional[str]:
        """Suggested user action, if there is one."""
        return None


class InvalidParamsError(DecodeError):
    """Decoder parameters were rejected before any processing."""

    def __init__(self, reason: str):
        super().__init__(f"Invalid decoder parameters: {reason}")
        self.reason = reason


class InvalidLineDurationError(InvalidParamsError):
    def __init__(self, duration_ms: float):
        super().__init__(
            f"line duration out of range: {duration_ms}ms (must be 1-100ms)"
        )
        self.duration_ms = duration_ms

    def recovery_hint(self) -> Optional[str]:
        return 'Try adjusting line duration between 1-100ms'


class InvalidThresholdError(InvalidParamsError):
    def __init__(self, threshold: float):
        super().__init__(
            f"threshold out of range: {threshold} (must be 0.0-1.0)"
        )
        self.threshold = threshold

    def recovery_hint(self) -> Optional[str]:
        return 'Try adjusting threshold between 0.0-1.0'


class InvalidWindowError(InvalidParamsError):
    def __init__(self, window_secs: float):
        super().__init__(
            f"decode window out of range: {window_secs}s (must be > 0 and at most 3600s)"
        )
        self.window_secs = window_secs


class InsufficientSamplesError(DecodeError):
    """Not enough audio to produce a single output line."""

    def __init__(self, needed: int, actual: int):
        super().__init__(
            f"Insufficient samples for decoding: needed {needed}, got {actual}"
        )
        self.needed = needed
        self.actual = actual

    def recovery_hint(self) -> Optional[str]:
        return 'Load a longer audio file or adjust decode window'


class PixelLayoutError(DecodeError):
    """Pixel count is not a whole number of rows. Indicates a decoder defect."""

    def __init__(self, pixel_count: int, row_size: int, mode: str):
        super().__init__(
            f"Pixel buffer length ({pixel_count}) not evenly divisible by "
            f"row size ({row_size}) for mode {mode}"
        )
        self.pixel_count = pixel_count
        self.row_size = row_size


# =============================================================================
# Worker errors (raised to the submitting caller)
# =============================================================================


class WorkerError(VoyagerError):
    """Problem talking to the decode worker."""


class WorkerUnavailableError(WorkerError):
    """The worker's request channel is closed."""


class QueueFullError(WorkerError):
    def __init__(self, queue_size: int):
        super().__init__(f"Worker queue full: {queue_size} pending requests")
        self.queue_size = queue_size


# =============================================================================
# Collaborator errors
# =============================================================================


class ConfigError(VoyagerError):
    """Configuration failed validation."""


class AudioLoadError(VoyagerError):
    """A recording could not be turned into sample buffers."""


class ExportError(VoyagerError):
    """A decoded raster could not be written out."""
