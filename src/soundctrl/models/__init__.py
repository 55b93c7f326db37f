"""Data models for the sound catalog and synchronized snapshot."""

from soundctrl.models.snapshot import Snapshot
from soundctrl.models.sound import Sound

__all__ = [
    "Snapshot",
    "Sound",
]
