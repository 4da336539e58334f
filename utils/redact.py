from __future__ import annotations

from typing import Any


def dest_hint(v: Any, keep: int = 4) -> str:
    # Last few characters only; phone numbers and request ids stay out of logs.
    v = str(v or "").strip()
    if not v:
        return ""
    if len(v) <= keep:
        return v
    return f"...{v[-keep:]}"
