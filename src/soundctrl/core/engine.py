"""Polling engine keeping the snapshot in sync with the sound server.

Three loops run at independent cadences once the engine is connected:

- connection: cheap liveness probe, authoritative for the connected flag;
- catalog: frequent catalog fetch, replaced only when it actually changed;
- playback: one status request per sound, the most expensive loop.

Each loop applies all of its changes in one synchronous block and notifies
the store at most once, so consumers never see a half-applied tick.
"""

import asyncio
import logging
from collections.abc import Sequence
from contextlib import suppress
from dataclasses import dataclass
from enum import Enum

from PySide6.QtCore import QObject, Signal

from soundctrl.api.client import SoundByteClient
from soundctrl.api.protocol import SoundByteError
from soundctrl.core.catalog import has_catalog_changed
from soundctrl.core.state import SnapshotStore
from soundctrl.core.ticker import PeriodicLoop
from soundctrl.models.sound import Sound

logger = logging.getLogger(__name__)

DEFAULT_CONNECTION_INTERVAL = 0.5  # seconds
DEFAULT_CATALOG_INTERVAL = 0.1  # seconds
DEFAULT_PLAYBACK_INTERVAL = 0.25  # seconds
DEFAULT_RECONNECT_INTERVAL = 2.0  # seconds


class EngineState(Enum):
    """Connection state of the polling engine."""

    DISCONNECTED = "disconnected"
    CONNECTING = "connecting"
    CONNECTED = "connected"


@dataclass(frozen=True, slots=True)
class PollingIntervals:
    """Cadences of the engine loops, in seconds.

    Attributes:
        connection: Liveness probe interval.
        catalog: Catalog change check interval.
        playback: Playback status poll interval.
        reconnect: Delay between connect attempts before the first success.
    """

    connection: float = DEFAULT_CONNECTION_INTERVAL
    catalog: float = DEFAULT_CATALOG_INTERVAL
    playback: float = DEFAULT_PLAYBACK_INTERVAL
    reconnect: float = DEFAULT_RECONNECT_INTERVAL


class SyncEngine(QObject):
    """Poll the sound server and reconcile its state into a SnapshotStore.

    The engine starts disconnected and runs only the connect sequence until
    it succeeds. After that the three periodic loops take over; a failed
    liveness probe marks the snapshot disconnected but keeps the last known
    catalog and playback state visible until the server comes back.

    Must be driven from a single asyncio event loop, which makes it the only
    writer of the store.

    Example:
        engine = SyncEngine(SoundByteClient("192.168.1.50"), store)
        task = asyncio.create_task(engine.run())
        ...
        engine.stop()
        await task
    """

    # Emitted when the engine state changes
    # Parameter: EngineState
    state_changed = Signal(object)

    def __init__(
        self,
        client: SoundByteClient,
        store: SnapshotStore,
        intervals: PollingIntervals | None = None,
        parent: QObject | None = None,
    ) -> None:
        """Initialize the engine.

        Args:
            client: The SoundByte API client.
            store: The snapshot store to keep in sync.
            intervals: Loop cadences (defaults if None).
            parent: Optional parent QObject.
        """
        super().__init__(parent)
        self._client = client
        self._store = store
        self._intervals = intervals or PollingIntervals()
        self._state = EngineState.DISCONNECTED
        self._attempts = 0
        self._loops: list[PeriodicLoop] = []
        self._stopping = False
        self._wakeup: asyncio.Event | None = None

    @property
    def client(self) -> SoundByteClient:
        """Return the current API client."""
        return self._client

    @property
    def store(self) -> SnapshotStore:
        """Return the snapshot store."""
        return self._store

    @property
    def intervals(self) -> PollingIntervals:
        """Return loop cadences."""
        return self._intervals

    @property
    def state(self) -> EngineState:
        """Return the current engine state."""
        return self._state

    @property
    def is_connected(self) -> bool:
        """Return True if the engine is in the connected state."""
        return self._state is EngineState.CONNECTED

    @property
    def loops(self) -> list[PeriodicLoop]:
        """Return the periodic loops currently scheduled."""
        return list(self._loops)

    def _set_state(self, state: EngineState) -> None:
        if state is self._state:
            return
        logger.debug("Engine state %s -> %s", self._state.value, state.value)
        self._state = state
        self.state_changed.emit(state)

    def _is_stale(self, client: SoundByteClient) -> bool:
        """Return True if a result fetched with client must be dropped."""
        return self._stopping or client is not self._client

    # -- Lifecycle -------------------------------------------------------------

    async def run(self) -> None:
        """Connect, run the periodic loops, and return after stop().

        Connect attempts are retried at the fixed reconnect interval until
        one succeeds. No exception escapes: the engine is meant to outlive
        arbitrarily long server outages.
        """
        self._stopping = False
        self._wakeup = asyncio.Event()
        try:
            while not self._stopping:
                self._wakeup.clear()
                if self._loops:
                    # Loops are running; sleep until stop() or reconfigure()
                    await self._wakeup.wait()
                    continue
                if await self.connect():
                    if not self._stopping:
                        self._start_loops()
                    continue
                await self._sleep(self._intervals.reconnect)
        finally:
            await self._stop_loops()
            if self._state is EngineState.CONNECTING:
                self._set_state(EngineState.DISCONNECTED)
            self._wakeup = None
            logger.info("Sync engine stopped")

    def stop(self) -> None:
        """Stop scheduling ticks and make run() return.

        Must be called on the engine's event loop thread. In-flight requests
        finish in their executor threads and their results are discarded.
        """
        self._stopping = True
        if self._wakeup is not None:
            self._wakeup.set()

    async def reconfigure(self, client: SoundByteClient) -> None:
        """Switch to another server and run the connect sequence again.

        The new server gets first-attempt semantics: if it cannot be reached
        the snapshot is cleared instead of keeping the old server's data.

        Args:
            client: Client for the new server.
        """
        logger.info("Switching server to %s", client.base_url)
        await self._stop_loops()
        self._client = client
        self._attempts = 0
        self._set_state(EngineState.DISCONNECTED)
        if self._wakeup is not None:
            self._wakeup.set()

    async def _sleep(self, seconds: float) -> None:
        """Sleep, waking early on stop() or reconfigure()."""
        if self._wakeup is None:
            await asyncio.sleep(seconds)
            return
        with suppress(TimeoutError):
            await asyncio.wait_for(self._wakeup.wait(), timeout=seconds)

    def _start_loops(self) -> None:
        self._loops = [
            PeriodicLoop("connection", self._intervals.connection, self.check_connection),
            PeriodicLoop("catalog", self._intervals.catalog, self.check_catalog),
            PeriodicLoop("playback", self._intervals.playback, self.poll_playback),
        ]
        for loop in self._loops:
            loop.start()

    async def _stop_loops(self) -> None:
        loops, self._loops = self._loops, []
        for loop in loops:
            await loop.stop()

    # -- Connect sequence ------------------------------------------------------

    async def connect(self) -> bool:
        """Run the connect sequence once.

        Fetches the catalog, then the playback state of every sound, and
        only then publishes both together so the first rendered state is
        not a flash of "nothing playing".

        Returns:
            True if connected.
        """
        if self._state is EngineState.CONNECTING:
            logger.debug("Connect already in progress")
            return False

        client = self._client
        first_attempt = self._attempts == 0
        self._attempts += 1
        self._set_state(EngineState.CONNECTING)

        try:
            catalog = await client.fetch_catalog()
        except SoundByteError as e:
            if self._is_stale(client):
                return False
            logger.error("Failed to connect to SoundByte at %s: %s", client.base_url, e)
            self._set_state(EngineState.DISCONNECTED)
            if self._store.clear() or first_attempt:
                self._store.notify()
            return False

        statuses = await self._fetch_statuses(client, catalog)
        if self._is_stale(client):
            return False

        if has_catalog_changed(self._store.catalog, catalog):
            self._store.replace_catalog(catalog)
        self._store.set_connected(True)
        self._store.update_playing(statuses)
        self._set_state(EngineState.CONNECTED)
        logger.info(
            "Connected to SoundByte at %s - found %d sounds", client.base_url, len(catalog)
        )
        self._store.notify()
        return True

    async def _fetch_statuses(
        self, client: SoundByteClient, catalog: Sequence[Sound]
    ) -> dict[int, bool]:
        """Fetch playback state of every sound concurrently.

        A failed request reads as not playing: one unreachable status only
        degrades that sound, never the whole snapshot.
        """
        ids = [sound.id for sound in catalog]
        results = await asyncio.gather(
            *(client.fetch_playback_status(sound_id) for sound_id in ids),
            return_exceptions=True,
        )
        statuses: dict[int, bool] = {}
        for sound_id, result in zip(ids, results, strict=True):
            if isinstance(result, SoundByteError):
                logger.debug("Status check for sound %s failed: %s", sound_id, result)
                statuses[sound_id] = False
            elif isinstance(result, BaseException):
                raise result
            else:
                statuses[sound_id] = bool(result)
        return statuses

    # -- Periodic ticks --------------------------------------------------------

    async def check_connection(self) -> bool:
        """Probe the server and flip the connected flag on change.

        The fetched catalog is discarded; the catalog loop owns it.

        Returns:
            True if the connected flag changed (and a notification fired).
        """
        client = self._client
        try:
            await client.fetch_catalog()
        except SoundByteError as e:
            if self._is_stale(client):
                return False
            if not self._store.set_connected(False):
                return False
            logger.warning("Lost connection to SoundByte at %s: %s", client.base_url, e)
            self._set_state(EngineState.DISCONNECTED)
            self._store.notify()
            return True

        if self._is_stale(client) or not self._store.set_connected(True):
            return False
        logger.info("Connection to SoundByte at %s restored", client.base_url)
        self._set_state(EngineState.CONNECTED)
        self._store.notify()
        return True

    async def check_catalog(self) -> bool:
        """Fetch the catalog and replace it if it changed.

        Failures are ignored; the connection loop is authoritative for
        connectivity.

        Returns:
            True if the catalog was replaced.
        """
        if self._state is not EngineState.CONNECTED:
            return False

        client = self._client
        try:
            catalog = await client.fetch_catalog()
        except SoundByteError as e:
            logger.debug("Catalog check failed: %s", e)
            return False

        if self._is_stale(client) or self._state is not EngineState.CONNECTED:
            return False
        if not has_catalog_changed(self._store.catalog, catalog):
            return False

        logger.info("Catalog changed: %d sounds", len(catalog))
        self._store.replace_catalog(catalog)
        self._store.notify()
        return True

    async def poll_playback(self) -> bool:
        """Poll the playback state of every sound in the catalog.

        Returns:
            True if any sound changed (one notification for the whole pass).
        """
        if self._state is not EngineState.CONNECTED:
            return False

        catalog = self._store.catalog
        if not catalog:
            return False

        client = self._client
        statuses = await self._fetch_statuses(client, catalog)
        if self._is_stale(client) or self._state is not EngineState.CONNECTED:
            return False
        if not self._store.update_playing(statuses):
            return False

        self._store.notify()
        return True
