"""
Session state persistence.

Saves what is needed to pick an exploration session back up: which file was
loaded, where the cursor was, which channel, and the decoder settings.
Decoded images are never stored.
"""

from __future__ import annotations

import json
import logging
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Optional

from .audio import CHANNEL_LEFT
from .sstv.params import DecoderMode, DecoderParams
from .sstv.presets import matches_preset

logger = logging.getLogger('voyager.session')


@dataclass
class SessionState:
    wav_path: Optional[str] = None
    position_samples: int = 0
    channel: str = CHANNEL_LEFT
    line_duration_ms: float = 8.3
    threshold: float = 0.2
    decode_window_secs: float = 2.0
    mode: str = DecoderMode.BINARY_GRAYSCALE.value
    preset: Optional[str] = None

    @classmethod
    def from_params(
        cls,
        params: DecoderParams,
        wav_path: Optional[str | Path] = None,
        position_samples: int = 0,
        channel: str = CHANNEL_LEFT,
    ) -> SessionState:
        return cls(
            wav_path=str(wav_path) if wav_path is not None else None,
            position_samples=position_samples,
            channel=channel,
            line_duration_ms=params.line_duration_ms,
            threshold=params.threshold,
            decode_window_secs=params.decode_window_secs,
            mode=params.mode.value,
            preset=matches_preset(params),
        )

    def to_params(self) -> DecoderParams:
        return DecoderParams(
            line_duration_ms=self.line_duration_ms,
            threshold=self.threshold,
            decode_window_secs=self.decode_window_secs,
            mode=DecoderMode.parse(self.mode),
        )

    def save(self, path: str | Path) -> None:
        path = Path(path)
        path.write_text(json.dumps(asdict(self), indent=2))
        logger.info(f"Session saved to {path}")

    @classmethod
    def load(cls, path: str | Path) -> SessionState:
        path = Path(path)
        data = json.loads(path.read_text())
        known = {k: v for k, v in data.items() if k in cls.__dataclass_fields__}
        state = cls(**known)
        logger.info(f"Session loaded from {path}")
        return state
