"""Snapshot store with a Qt signal for reactive UI updates.

The SnapshotStore holds the current synchronized view of the sound server
and emits a Qt signal when its owner decides a batch of changes is complete.
UI bindings connect to that signal and re-render from the snapshot.

Mutations never emit on their own: the polling engine and the command
executor apply all changes of one tick or command, then call notify() once.
This keeps a tick atomic from the consumer's point of view and avoids one
render per sound.
"""

import logging
from collections.abc import Callable, Iterable, Mapping
from dataclasses import replace
from types import MappingProxyType

from PySide6.QtCore import QObject, Signal

from soundctrl.models.snapshot import Snapshot
from soundctrl.models.sound import Sound

logger = logging.getLogger(__name__)

ChangeHandler = Callable[[Snapshot], None]


class SnapshotStore(QObject):
    """Central snapshot store emitting a Qt signal on notify.

    All mutations must come from a single owner (the worker event loop).
    Every mutation swaps in a new immutable Snapshot, so readers on other
    threads always see a complete view.

    Invariant: the keys of snapshot.playing are exactly the catalog IDs.
    Catalog replacement prunes IDs that disappeared and resets every known
    sound to not playing until the next status poll.

    Example:
        store = SnapshotStore()
        store.on_change(lambda snap: print(snap.currently_playing))

        store.replace_catalog([Sound(id=1, name="Boom")])
        store.set_playing(1, True)
        store.notify()  # prints "Boom"
    """

    # Emitted with the current Snapshot after a completed batch of changes
    changed = Signal(object)

    def __init__(self) -> None:
        """Initialize the store with an empty, disconnected snapshot."""
        super().__init__()
        self._snapshot = Snapshot()

    @property
    def snapshot(self) -> Snapshot:
        """Return the current immutable snapshot."""
        return self._snapshot

    @property
    def is_connected(self) -> bool:
        """Return True if the last connectivity probe succeeded."""
        return self._snapshot.connected

    @property
    def catalog(self) -> tuple[Sound, ...]:
        """Return the current catalog."""
        return self._snapshot.catalog

    def on_change(self, callback: ChangeHandler) -> None:
        """Register a consumer called with the snapshot after each change.

        Args:
            callback: Callable receiving the new Snapshot.
        """
        self.changed.connect(callback)

    def notify(self) -> None:
        """Emit the changed signal with the current snapshot."""
        logger.debug(
            "Snapshot changed: connected=%s sounds=%d playing=%d",
            self._snapshot.connected,
            self._snapshot.total_sounds,
            self._snapshot.playing_count,
        )
        self.changed.emit(self._snapshot)

    def replace_catalog(self, catalog: Iterable[Sound]) -> None:
        """Replace the catalog and reset playback state.

        Nothing is assumed to be playing after a catalog change; the next
        status poll fills in the real values.

        Args:
            catalog: New catalog in server order.
        """
        sounds = tuple(catalog)
        playing = {sound.id: False for sound in sounds}
        self._snapshot = replace(
            self._snapshot,
            catalog=sounds,
            playing=MappingProxyType(playing),
        )

    def set_playing(self, sound_id: int, playing: bool) -> bool:
        """Set the playback flag of one sound.

        Args:
            sound_id: ID of a sound in the catalog.
            playing: New playback state.

        Returns:
            True if the stored value changed. Unknown IDs are ignored.
        """
        return self.update_playing({sound_id: playing})

    def update_playing(self, states: Mapping[int, bool]) -> bool:
        """Set the playback flags of several sounds at once.

        Args:
            states: Playback state per sound ID.

        Returns:
            True if any stored value changed. Unknown IDs are ignored.
        """
        current = self._snapshot.playing
        updated = dict(current)
        changed = False
        for sound_id, playing in states.items():
            if sound_id not in current:
                logger.debug("Ignoring playback state for unknown sound %s", sound_id)
                continue
            if current[sound_id] != playing:
                updated[sound_id] = playing
                changed = True

        if changed:
            self._snapshot = replace(self._snapshot, playing=MappingProxyType(updated))
        return changed

    def set_all_stopped(self) -> bool:
        """Mark every known sound as not playing.

        Returns:
            True if at least one sound was playing.
        """
        return self.update_playing(dict.fromkeys(self._snapshot.playing, False))

    def set_connected(self, connected: bool) -> bool:
        """Set the connectivity flag.

        Returns:
            True if the flag changed.
        """
        if self._snapshot.connected == connected:
            return False
        self._snapshot = replace(self._snapshot, connected=connected)
        return True

    def clear(self) -> bool:
        """Reset to an empty, disconnected snapshot.

        Returns:
            True if anything was cleared.
        """
        empty = Snapshot()
        if self._snapshot == empty:
            return False
        self._snapshot = empty
        return True
