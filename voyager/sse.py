"""Server-Sent Events helpers."""

from __future__ import annotations

import json
from typing import Any, Optional


def format_sse(data: Any, event: Optional[str] = None) -> str:
    """Format a payload as one SSE message."""
    payload = data if isinstance(data, str) else json.dumps(data)
    msg = f'data: {payload}\n\n'
    if event:
        msg = f'event: {event}\n{msg}'
    return msg


def keepalive() -> str:
    return ': keepalive\n\n'
