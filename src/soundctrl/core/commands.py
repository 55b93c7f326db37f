"""Command executor - turns user actions into API calls.

Commands update the SnapshotStore optimistically as soon as the server
accepts them, instead of waiting for the next playback poll. Failures are
logged and reported through a signal; they never raise into the UI, which
relies on the next poll to show the real state.
"""

import logging

from PySide6.QtCore import QObject, Signal

from soundctrl.api.client import SoundByteClient
from soundctrl.api.protocol import SoundByteError
from soundctrl.core.state import SnapshotStore

logger = logging.getLogger(__name__)


class CommandExecutor(QObject):
    """Execute toggle and stop-all commands against the sound server.

    Example:
        commands = CommandExecutor(client, store)
        commands.command_failed.connect(lambda msg: print(msg))

        # user presses a sound button:
        # -> CommandExecutor.toggle
        # -> SoundByteClient.play
        # -> SnapshotStore.set_playing (optimistic) + notify
        await commands.toggle(3)
    """

    # Emitted with a human-readable message when a command fails
    command_failed = Signal(str)

    def __init__(
        self,
        client: SoundByteClient,
        store: SnapshotStore,
        parent: QObject | None = None,
    ) -> None:
        """Initialize the executor.

        Args:
            client: The SoundByte API client.
            store: The snapshot store for optimistic updates.
            parent: Optional parent QObject.
        """
        super().__init__(parent)
        self._client = client
        self._store = store

    @property
    def client(self) -> SoundByteClient:
        """Return the current API client."""
        return self._client

    def set_client(self, client: SoundByteClient) -> None:
        """Use another API client (after a server change)."""
        self._client = client

    def _fail(self, message: str) -> None:
        logger.error(message)
        self.command_failed.emit(message)

    async def toggle(self, sound_id: int) -> bool:
        """Toggle playback of one sound.

        Args:
            sound_id: ID of the sound.

        Returns:
            True if the server accepted the toggle.
        """
        client = self._client
        try:
            result = await client.play(sound_id)
        except SoundByteError as e:
            self._fail(f"Failed to toggle sound {sound_id}: {e}")
            return False

        if not result.success:
            self._fail(f"Failed to toggle sound {sound_id}: {result.message or 'rejected'}")
            return False

        logger.info("%s sound: %s", result.action, result.name)
        if client is not self._client:
            # The server was switched while the request was in flight
            logger.debug("Dropping toggle result from previous server %s", client.base_url)
            return True
        if sound_id not in self._store.snapshot.playing:
            # The catalog loop will pick the sound up; the playback loop then fills it in
            logger.warning("Toggled sound %s is not in the catalog", sound_id)
            return True

        # Optimistic update
        self._store.set_playing(sound_id, result.is_playing)
        self._store.notify()
        return True

    async def stop_all(self) -> bool:
        """Stop every playing sound.

        Returns:
            True if the server accepted the request.
        """
        client = self._client
        try:
            result = await client.stop_all()
        except SoundByteError as e:
            self._fail(f"Failed to stop all sounds: {e}")
            return False

        if not result.success:
            self._fail(f"Failed to stop all sounds: {result.message or 'rejected'}")
            return False

        logger.info("All sounds stopped")
        if client is not self._client:
            logger.debug("Dropping stop-all result from previous server %s", client.base_url)
            return True
        # Optimistic update
        self._store.set_all_stopped()
        self._store.notify()
        return True
