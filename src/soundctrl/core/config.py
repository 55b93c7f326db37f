"""Configuration manager using QSettings for persistent storage."""

import logging

from PySide6.QtCore import QSettings

from soundctrl.api.client import DEFAULT_HOST, DEFAULT_PORT
from soundctrl.core.engine import (
    DEFAULT_CATALOG_INTERVAL,
    DEFAULT_CONNECTION_INTERVAL,
    DEFAULT_PLAYBACK_INTERVAL,
    DEFAULT_RECONNECT_INTERVAL,
    PollingIntervals,
)

logger = logging.getLogger(__name__)

# Server
_KEY_HOST = "server/host"
_KEY_PORT = "server/port"
_KEY_TIMEOUT_MS = "server/timeout_ms"

# Polling
_KEY_CONNECTION_MS = "polling/connection_ms"
_KEY_CATALOG_MS = "polling/catalog_ms"
_KEY_PLAYBACK_MS = "polling/playback_ms"
_KEY_RECONNECT_MS = "polling/reconnect_ms"

_DEFAULT_TIMEOUT_MS = 1000
_MIN_TIMEOUT_MS = 100
_MAX_TIMEOUT_MS = 10_000

_MIN_INTERVAL_MS = 50
_MAX_INTERVAL_MS = 60_000


def _to_ms(seconds: float) -> int:
    return round(seconds * 1000)


class ConfigManager:
    """Wrapper around QSettings for type-safe config access.

    QSettings stores config in platform-specific locations:
    - Windows: HKEY_CURRENT_USER\\Software\\SoundCTRL\\SoundCTRL
    - macOS: ~/Library/Preferences/com.SoundCTRL.SoundCTRL.plist
    - Linux: ~/.config/SoundCTRL/SoundCTRL.conf

    Example:
        config = ConfigManager()
        client = SoundByteClient(config.get_host(), config.get_port())
        engine = SyncEngine(client, store, config.get_polling_intervals())
    """

    def __init__(self, organization: str = "SoundCTRL", application: str = "SoundCTRL") -> None:
        """Initialize the config manager.

        Args:
            organization: Organization name for QSettings.
            application: Application name for QSettings.
        """
        self._settings = QSettings(organization, application)

    @property
    def settings(self) -> QSettings:
        """Return the underlying QSettings instance."""
        return self._settings

    def _get_int(self, key: str, default: int, minimum: int, maximum: int) -> int:
        """Read an integer setting clamped to [minimum, maximum]."""
        value = self._settings.value(key, default)
        try:
            number = int(value)  # type: ignore[arg-type]
        except (TypeError, ValueError):
            logger.warning("Invalid value %r for setting %s, using %d", value, key, default)
            return default
        return max(minimum, min(maximum, number))

    # -- Server settings -------------------------------------------------------

    def get_host(self) -> str:
        """Return the sound server host.

        Returns:
            Hostname or IP (default "localhost").
        """
        value = self._settings.value(_KEY_HOST, DEFAULT_HOST, str)
        return str(value).strip() if value else DEFAULT_HOST

    def set_host(self, host: str) -> None:
        """Set the sound server host.

        Args:
            host: Hostname or IP.
        """
        self._settings.setValue(_KEY_HOST, host.strip())

    def get_port(self) -> int:
        """Return the sound server port.

        Returns:
            Port number (default 3000).
        """
        return self._get_int(_KEY_PORT, DEFAULT_PORT, 1, 65535)

    def set_port(self, port: int) -> None:
        """Set the sound server port.

        Args:
            port: Port number (1-65535).
        """
        self._settings.setValue(_KEY_PORT, max(1, min(65535, port)))

    def get_timeout(self) -> float:
        """Return the per-request timeout in seconds.

        Returns:
            Timeout in seconds (default 1.0).
        """
        ms = self._get_int(_KEY_TIMEOUT_MS, _DEFAULT_TIMEOUT_MS, _MIN_TIMEOUT_MS, _MAX_TIMEOUT_MS)
        return ms / 1000

    def set_timeout(self, seconds: float) -> None:
        """Set the per-request timeout.

        Args:
            seconds: Timeout in seconds (0.1-10).
        """
        ms = max(_MIN_TIMEOUT_MS, min(_MAX_TIMEOUT_MS, _to_ms(seconds)))
        self._settings.setValue(_KEY_TIMEOUT_MS, ms)

    # -- Polling settings ------------------------------------------------------

    def _get_interval(self, key: str, default_seconds: float) -> float:
        ms = self._get_int(key, _to_ms(default_seconds), _MIN_INTERVAL_MS, _MAX_INTERVAL_MS)
        return ms / 1000

    def get_polling_intervals(self) -> PollingIntervals:
        """Return the engine loop cadences.

        Returns:
            PollingIntervals in seconds (defaults 0.5 / 0.1 / 0.25 / 2.0).
        """
        return PollingIntervals(
            connection=self._get_interval(_KEY_CONNECTION_MS, DEFAULT_CONNECTION_INTERVAL),
            catalog=self._get_interval(_KEY_CATALOG_MS, DEFAULT_CATALOG_INTERVAL),
            playback=self._get_interval(_KEY_PLAYBACK_MS, DEFAULT_PLAYBACK_INTERVAL),
            reconnect=self._get_interval(_KEY_RECONNECT_MS, DEFAULT_RECONNECT_INTERVAL),
        )

    def set_polling_intervals(self, intervals: PollingIntervals) -> None:
        """Persist the engine loop cadences.

        Args:
            intervals: Cadences in seconds, each clamped to 0.05-60.
        """
        for key, seconds in (
            (_KEY_CONNECTION_MS, intervals.connection),
            (_KEY_CATALOG_MS, intervals.catalog),
            (_KEY_PLAYBACK_MS, intervals.playback),
            (_KEY_RECONNECT_MS, intervals.reconnect),
        ):
            ms = max(_MIN_INTERVAL_MS, min(_MAX_INTERVAL_MS, _to_ms(seconds)))
            self._settings.setValue(key, ms)

    # -- General settings ------------------------------------------------------

    def clear(self) -> None:
        """Clear all settings (useful for testing or reset)."""
        self._settings.clear()

    def sync(self) -> None:
        """Force settings to be written to disk."""
        self._settings.sync()
