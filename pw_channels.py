# pw_channels.py
from __future__ import annotations

from typing import Optional


MONO = "MONO"

STEREO_POSITIONS = ("FL", "FR")


def channels_match(a: Optional[str], b: Optional[str]) -> bool:
    if not a or not b:
        return False
    return a.strip().lower() == b.strip().lower()


def is_stereo_position(channel: Optional[str]) -> bool:
    c = (channel or "").strip().upper()
    return c in STEREO_POSITIONS
