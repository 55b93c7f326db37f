"""Response types and parsers for the SoundByte HTTP API."""

from dataclasses import dataclass
from typing import Any, cast

from soundctrl.models.sound import Sound


class SoundByteError(Exception):
    """Base class for all errors raised by the SoundByte client."""


class NetworkError(SoundByteError):
    """Request failed: timeout, connection refused or non-2xx status."""


class ProtocolError(SoundByteError):
    """Server answered with a malformed or unexpected response."""


@dataclass(frozen=True)
class PlayResult:
    """Outcome of a play/stop toggle request.

    Attributes:
        success: Whether the server accepted the request.
        action: Resulting action, "playing" or "stopped".
        name: Name of the toggled sound.
        message: Optional server message (usually set on failure).
    """

    success: bool
    action: str = ""
    name: str = ""
    message: str = ""

    @property
    def is_playing(self) -> bool:
        """Return True if the sound is playing after the toggle."""
        return self.action == "playing"

    @classmethod
    def from_dict(cls, data: object) -> "PlayResult":
        """Create result from JSON response."""
        body = _require_object(data, "play")
        return cls(
            success=bool(body.get("success", False)),
            action=str(body.get("action") or ""),
            name=str(body.get("name") or ""),
            message=str(body.get("message") or ""),
        )


@dataclass(frozen=True)
class StopResult:
    """Outcome of a stop-all request.

    Attributes:
        success: Whether the server accepted the request.
        message: Optional server message.
    """

    success: bool
    message: str = ""

    @classmethod
    def from_dict(cls, data: object) -> "StopResult":
        """Create result from JSON response."""
        body = _require_object(data, "stop")
        return cls(
            success=bool(body.get("success", False)),
            message=str(body.get("message") or ""),
        )


def _require_object(data: object, what: str) -> dict[str, Any]:
    if not isinstance(data, dict):
        raise ProtocolError(f"Expected JSON object in {what} response, got {type(data).__name__}")
    return cast(dict[str, Any], data)


def _parse_sound_id(raw: object) -> int:
    """Parse a sound ID, accepting integers and numeric strings."""
    if isinstance(raw, bool):
        raise ProtocolError(f"Invalid sound id: {raw!r}")
    if isinstance(raw, int):
        return raw
    if isinstance(raw, str) and raw.strip().lstrip("-").isdigit():
        return int(raw)
    raise ProtocolError(f"Invalid sound id: {raw!r}")


def parse_sound(data: object) -> Sound:
    """Parse one catalog entry.

    Args:
        data: Raw entry, e.g. {"id": 1, "name": "Boom", "shortName": "B"}.

    Returns:
        The parsed Sound.

    Raises:
        ProtocolError: If the entry is not an object or has no valid id.
    """
    entry = _require_object(data, "sound")
    if "id" not in entry:
        raise ProtocolError("Sound entry without id")
    return Sound(
        id=_parse_sound_id(entry["id"]),
        name=str(entry.get("name") or ""),
        short_name=str(entry.get("shortName") or ""),
        color=entry.get("color"),
        text_color=entry.get("textColor"),
    )


def parse_catalog(data: object) -> list[Sound]:
    """Parse the /api/sounds response into a list of sounds.

    Order is preserved as received.

    Raises:
        ProtocolError: If the response is not a list of valid entries.
    """
    if data is None:
        # An empty body is read as an empty catalog
        return []
    if not isinstance(data, list):
        raise ProtocolError(f"Expected JSON array of sounds, got {type(data).__name__}")
    return [parse_sound(item) for item in cast(list[object], data)]


def parse_status(data: object) -> bool:
    """Parse the /api/status/{id} response.

    A missing isPlaying field is read as not playing.

    Raises:
        ProtocolError: If the response is not a JSON object.
    """
    body = _require_object(data, "status")
    return bool(body.get("isPlaying", False))
