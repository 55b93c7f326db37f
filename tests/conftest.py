"""Test fixtures for soundctrl tests."""

from unittest.mock import AsyncMock, MagicMock

import pytest
from PySide6.QtCore import QCoreApplication

from soundctrl.api.client import SoundByteClient
from soundctrl.api.protocol import PlayResult, StopResult
from soundctrl.core.engine import PollingIntervals
from soundctrl.core.state import SnapshotStore
from soundctrl.models.snapshot import Snapshot
from soundctrl.models.sound import Sound

# Short cadences so loop tests finish quickly
FAST_INTERVALS = PollingIntervals(
    connection=0.01,
    catalog=0.01,
    playback=0.01,
    reconnect=0.01,
)


@pytest.fixture
def qapp() -> QCoreApplication:
    """Create a Qt application for testing."""
    app = QCoreApplication.instance()
    if app is None:
        app = QCoreApplication([])
    return app


@pytest.fixture
def fast_intervals() -> PollingIntervals:
    """Return short loop cadences."""
    return FAST_INTERVALS


@pytest.fixture
def sample_catalog() -> list[Sound]:
    """Return a sample catalog as reported by the server."""
    return [
        Sound(id=1, name="Boom", short_name="B", color="#ff0000", text_color="#ffffff"),
        Sound(id=2, name="Applause"),
        Sound(id=3, name="Drum Roll", short_name="Drums"),
    ]


@pytest.fixture
def store(qapp: QCoreApplication) -> SnapshotStore:
    """Return a fresh SnapshotStore for each test."""
    return SnapshotStore()


@pytest.fixture
def notifications(store: SnapshotStore) -> list[Snapshot]:
    """Collect every snapshot emitted by the store."""
    received: list[Snapshot] = []
    store.changed.connect(received.append)
    return received


@pytest.fixture
def mock_client() -> MagicMock:
    """Return a mocked SoundByteClient with an empty, reachable server."""
    client = MagicMock(spec=SoundByteClient)
    client.host = "192.168.1.50"
    client.port = 3000
    client.base_url = "http://192.168.1.50:3000"
    client.fetch_catalog = AsyncMock(return_value=[])
    client.fetch_playback_status = AsyncMock(return_value=False)
    client.play = AsyncMock(return_value=PlayResult(success=True, action="playing", name="Boom"))
    client.stop_all = AsyncMock(return_value=StopResult(success=True))
    return client
