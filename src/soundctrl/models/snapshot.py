"""Snapshot model representing the synchronized view of the server."""

from collections.abc import Mapping
from dataclasses import dataclass, field
from types import MappingProxyType

from soundctrl.models.sound import Sound


def _empty_playing() -> Mapping[int, bool]:
    return MappingProxyType({})


@dataclass(frozen=True, slots=True)
class Snapshot:
    """Complete view of the sound server at a point in time.

    Snapshots are immutable. The store replaces its snapshot on every
    mutation, so a reference handed to the UI never changes under it.

    Attributes:
        connected: Whether the last connectivity probe succeeded.
        catalog: Sounds reported by the server, in server order.
        playing: Playback flag per sound ID. Keys are exactly the catalog IDs.
    """

    connected: bool = False
    catalog: tuple[Sound, ...] = ()
    playing: Mapping[int, bool] = field(default_factory=_empty_playing)

    @property
    def connection_status(self) -> str:
        """Return connection state as display text."""
        return "Connected" if self.connected else "Disconnected"

    @property
    def total_sounds(self) -> int:
        """Return number of sounds in the catalog."""
        return len(self.catalog)

    @property
    def playing_count(self) -> int:
        """Return number of sounds currently playing."""
        return sum(1 for value in self.playing.values() if value)

    @property
    def any_playing(self) -> bool:
        """Return True if at least one sound is playing."""
        return any(self.playing.values())

    @property
    def playing_names(self) -> list[str]:
        """Return display names of playing sounds in catalog order."""
        return [s.display_name for s in self.catalog if self.playing.get(s.id, False)]

    @property
    def currently_playing(self) -> str:
        """Return playing sound names joined for display, or "None"."""
        names = self.playing_names
        return ", ".join(names) if names else "None"

    def is_playing(self, sound_id: int) -> bool:
        """Return True if the given sound is playing (False if unknown)."""
        return self.playing.get(sound_id, False)

    def get_sound(self, sound_id: int) -> Sound | None:
        """Return sound by ID or None if not found."""
        for sound in self.catalog:
            if sound.id == sound_id:
                return sound
        return None

    def variables(self) -> dict[str, str | int]:
        """Return the values shown in button text variables.

        Returns:
            Dict with connection_status, total_sounds, playing_count
            and currently_playing.
        """
        return {
            "connection_status": self.connection_status,
            "total_sounds": self.total_sounds,
            "playing_count": self.playing_count,
            "currently_playing": self.currently_playing,
        }
