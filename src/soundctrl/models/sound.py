"""Sound model representing one entry of the server catalog."""

from dataclasses import dataclass

# Styling hints are passed through untouched (server decides the format)
StyleHint = str | int | None


@dataclass(frozen=True, slots=True)
class Sound:
    """A sound known to the SoundByte server.

    Attributes:
        id: Stable sound identifier from server (unique within catalog).
        name: Human-readable sound name.
        short_name: Optional short label for small buttons (empty if unset).
        color: Optional background color hint, opaque to the client.
        text_color: Optional text color hint, opaque to the client.
    """

    id: int
    name: str = ""
    short_name: str = ""
    color: StyleHint = None
    text_color: StyleHint = None

    @property
    def display_name(self) -> str:
        """Return short name or name as fallback for display."""
        return self.short_name or self.name

    @property
    def has_style(self) -> bool:
        """Return True if the server supplied any styling hint."""
        return self.color is not None or self.text_color is not None
