"""QThread worker running the sync engine in a Qt application.

The engine and command executor are asyncio code. This worker runs their
event loop in a background thread, which makes that loop the single writer
of the SnapshotStore. Consumers on the main thread read immutable snapshots
and receive the store's changed signal as a queued Qt event.
"""

import asyncio
import logging
from collections.abc import Coroutine
from typing import Any

from PySide6.QtCore import QThread, Signal

from soundctrl.api.client import DEFAULT_HOST, DEFAULT_PORT, SoundByteClient
from soundctrl.core.commands import CommandExecutor
from soundctrl.core.engine import EngineState, PollingIntervals, SyncEngine
from soundctrl.core.state import ChangeHandler, SnapshotStore
from soundctrl.models.snapshot import Snapshot

logger = logging.getLogger(__name__)


class SyncWorker(QThread):
    """Background thread hosting the polling engine and command executor.

    This is the surface a UI binds to: read snapshot, register on_change,
    and forward button presses with request_toggle / request_stop_all.

    Example:
        worker = SyncWorker("192.168.1.50", 3000)
        worker.on_change(lambda snap: print(snap.variables()))
        worker.start()
        worker.request_toggle(1)
    """

    # Emitted with a message when a user command fails
    command_failed = Signal(str)

    # Emitted with the EngineState on every state transition
    engine_state_changed = Signal(object)

    # Emitted when the engine terminates with an unexpected exception
    error_occurred = Signal(object)

    def __init__(
        self,
        host: str = DEFAULT_HOST,
        port: int = DEFAULT_PORT,
        timeout: float = 1.0,
        intervals: PollingIntervals | None = None,
        store: SnapshotStore | None = None,
    ) -> None:
        """Initialize the worker.

        Args:
            host: Sound server hostname or IP.
            port: HTTP port (default 3000).
            timeout: Per-request timeout in seconds.
            intervals: Engine loop cadences (defaults if None).
            store: Snapshot store to sync into (a new one if None).
        """
        super().__init__()
        self._timeout = timeout
        self._store = store or SnapshotStore()
        client = SoundByteClient(host, port, timeout)
        self._engine = SyncEngine(client, self._store, intervals)
        self._commands = CommandExecutor(client, self._store)
        self._engine.state_changed.connect(self.engine_state_changed)
        self._commands.command_failed.connect(self.command_failed)
        self._loop: asyncio.AbstractEventLoop | None = None
        self._should_run = True

    @property
    def host(self) -> str:
        """Return sound server host."""
        return self._engine.client.host

    @property
    def port(self) -> int:
        """Return sound server port."""
        return self._engine.client.port

    @property
    def store(self) -> SnapshotStore:
        """Return the snapshot store."""
        return self._store

    @property
    def engine(self) -> SyncEngine:
        """Return the polling engine."""
        return self._engine

    @property
    def engine_state(self) -> EngineState:
        """Return the current engine state."""
        return self._engine.state

    @property
    def snapshot(self) -> Snapshot:
        """Return the current immutable snapshot."""
        return self._store.snapshot

    def on_change(self, callback: ChangeHandler) -> None:
        """Register a consumer called with the snapshot after each change."""
        self._store.on_change(callback)

    def _submit(self, coro: Coroutine[Any, Any, object], what: str) -> bool:
        """Schedule a coroutine on the worker loop (thread-safe)."""
        if self._loop is None or not self._loop.is_running():
            logger.warning("Cannot %s: sync worker is not running", what)
            coro.close()
            return False
        asyncio.run_coroutine_threadsafe(coro, self._loop)
        return True

    def request_toggle(self, sound_id: int) -> bool:
        """Toggle playback of one sound.

        Thread-safe call from main thread.

        Args:
            sound_id: ID of the sound.

        Returns:
            True if the command was scheduled.
        """
        return self._submit(self._commands.toggle(sound_id), f"toggle sound {sound_id}")

    def request_stop_all(self) -> bool:
        """Stop every playing sound.

        Thread-safe call from main thread.

        Returns:
            True if the command was scheduled.
        """
        return self._submit(self._commands.stop_all(), "stop all sounds")

    def set_server(self, host: str, port: int = DEFAULT_PORT) -> bool:
        """Switch to another sound server.

        Thread-safe call from main thread.

        Args:
            host: New server hostname or IP.
            port: New HTTP port.

        Returns:
            True if the switch was scheduled.
        """
        return self._submit(self._switch_server(host, port), f"switch to {host}:{port}")

    async def _switch_server(self, host: str, port: int) -> None:
        client = SoundByteClient(host, port, self._timeout)
        self._commands.set_client(client)
        await self._engine.reconfigure(client)

    def stop(self) -> None:
        """Signal the worker to stop (called from main thread)."""
        self._should_run = False
        if self._loop is not None and self._loop.is_running():
            self._loop.call_soon_threadsafe(self._engine.stop)

    async def _run_engine(self) -> None:
        # stop() may have landed before the loop was running
        if not self._should_run:
            return
        await self._engine.run()

    def run(self) -> None:
        """Run the worker thread (entry point)."""
        if not self._should_run:
            return

        # Create new event loop for this thread
        self._loop = asyncio.new_event_loop()
        asyncio.set_event_loop(self._loop)

        try:
            self._loop.run_until_complete(self._run_engine())
        except Exception as e:
            logger.exception("Sync engine failed")
            self.error_occurred.emit(e)
        finally:
            self._loop.run_until_complete(self._loop.shutdown_default_executor())
            self._loop.close()
            self._loop = None
            asyncio.set_event_loop(None)
