"""API client for the SoundByte HTTP server."""

from soundctrl.api.client import SoundByteClient
from soundctrl.api.protocol import (
    NetworkError,
    PlayResult,
    ProtocolError,
    SoundByteError,
    StopResult,
)

__all__ = [
    "SoundByteClient",
    "SoundByteError",
    "NetworkError",
    "ProtocolError",
    "PlayResult",
    "StopResult",
]
