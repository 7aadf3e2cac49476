"""
Module: service.sse

Purpose:
    Server-sent event framing for progressive uploads.
"""

from __future__ import annotations

import json
from typing import Any, Mapping

START = "start"
PROGRESS = "progress"
COMPLETE = "complete"
ERROR = "error"


def format_sse(kind: str, payload: Mapping[str, Any]) -> str:
    """
    Frame one event.

    Example:
        >>> format_sse("progress", {"stage": "Rendering page 1 of 2..."})
        'event: progress\\ndata: {"stage":"Rendering page 1 of 2..."}\\n\\n'
    """
    data = json.dumps(payload, separators=(",", ":"))
    return f"event: {kind}\ndata: {data}\n\n"
