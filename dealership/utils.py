# utils.py — small request helpers shared by the routes
from __future__ import annotations

import re
from typing import Optional

from flask import request

_WS = re.compile(r"[ \t]{2,}")


def sanitize_user_input(text: str, max_length: Optional[int] = 2000) -> str:
    """Drop NULs, squeeze runs of spaces and cap the length (None: no cap)."""
    if not text:
        return ""
    s = str(text).replace("\x00", " ").strip()
    s = _WS.sub(" ", s)
    if max_length is not None:
        s = s[:max_length].strip()
    return s


def current_request_id() -> str:
    return getattr(request, "request_id", "unknown")
