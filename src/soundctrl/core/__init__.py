"""Core business logic layer.

This module contains the state synchronization engine that bridges the
async SoundByte API client with Qt consumers.

Classes:
    SnapshotStore: Snapshot store with a Qt change signal.
    SyncEngine: Polling loops reconciling server state into the store.
    CommandExecutor: Toggle and stop-all commands with optimistic updates.
    SyncWorker: QThread hosting the engine's event loop.
    ConfigManager: QSettings wrapper for configuration.
"""

from soundctrl.core.catalog import has_catalog_changed
from soundctrl.core.commands import CommandExecutor
from soundctrl.core.config import ConfigManager
from soundctrl.core.engine import EngineState, PollingIntervals, SyncEngine
from soundctrl.core.state import SnapshotStore
from soundctrl.core.ticker import PeriodicLoop
from soundctrl.core.worker import SyncWorker

__all__ = [
    "CommandExecutor",
    "ConfigManager",
    "EngineState",
    "PeriodicLoop",
    "PollingIntervals",
    "SnapshotStore",
    "SyncEngine",
    "SyncWorker",
    "has_catalog_changed",
]
