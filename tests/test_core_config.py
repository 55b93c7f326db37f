"""Tests for ConfigManager using QSettings."""

import pytest

from soundctrl.core.config import ConfigManager
from soundctrl.core.engine import PollingIntervals


@pytest.fixture
def config() -> ConfigManager:
    """Return a fresh ConfigManager for each test."""
    # Use unique organization/app to avoid test interference
    config = ConfigManager("SoundCTRLTest", "TestConfig")
    config.clear()
    return config


class TestConfigManagerServer:
    """Test server settings."""

    def test_defaults(self, config: ConfigManager) -> None:
        """Test defaults when nothing is stored."""
        assert config.get_host() == "localhost"
        assert config.get_port() == 3000
        assert config.get_timeout() == 1.0

    def test_host_round_trip(self, config: ConfigManager) -> None:
        """Test saving the host strips whitespace."""
        config.set_host("  192.168.1.50 ")
        assert config.get_host() == "192.168.1.50"

    def test_empty_host_falls_back(self, config: ConfigManager) -> None:
        """Test an empty stored host reads as the default."""
        config.set_host("")
        assert config.get_host() == "localhost"

    def test_port(self, config: ConfigManager) -> None:
        """Test saving the port."""
        config.set_port(8080)
        assert config.get_port() == 8080

    def test_port_clamped(self, config: ConfigManager) -> None:
        """Test out-of-range ports are clamped."""
        config.set_port(70000)
        assert config.get_port() == 65535
        config.set_port(0)
        assert config.get_port() == 1

    def test_invalid_port_uses_default(self, config: ConfigManager) -> None:
        """Test a non-numeric stored port reads as the default."""
        config.settings.setValue("server/port", "not-a-port")
        assert config.get_port() == 3000

    def test_timeout(self, config: ConfigManager) -> None:
        """Test the timeout is stored in milliseconds."""
        config.set_timeout(2.5)
        assert config.get_timeout() == 2.5
        assert int(config.settings.value("server/timeout_ms")) == 2500

    def test_timeout_clamped(self, config: ConfigManager) -> None:
        """Test the timeout is clamped to 0.1-10 seconds."""
        config.set_timeout(0.001)
        assert config.get_timeout() == 0.1
        config.set_timeout(60)
        assert config.get_timeout() == 10.0


class TestConfigManagerPolling:
    """Test polling interval settings."""

    def test_defaults(self, config: ConfigManager) -> None:
        """Test default cadences."""
        assert config.get_polling_intervals() == PollingIntervals()

    def test_round_trip(self, config: ConfigManager) -> None:
        """Test saving and loading cadences."""
        intervals = PollingIntervals(connection=1.0, catalog=0.2, playback=0.5, reconnect=5.0)
        config.set_polling_intervals(intervals)
        assert config.get_polling_intervals() == intervals

    def test_clamped(self, config: ConfigManager) -> None:
        """Test cadences are clamped to 0.05-60 seconds."""
        config.set_polling_intervals(
            PollingIntervals(connection=0.001, catalog=0.1, playback=0.25, reconnect=3600)
        )
        loaded = config.get_polling_intervals()
        assert loaded.connection == 0.05
        assert loaded.reconnect == 60.0

    def test_out_of_range_stored_value_clamped(self, config: ConfigManager) -> None:
        """Test a hand-edited value outside the range is clamped on read."""
        config.settings.setValue("polling/playback_ms", 5)
        assert config.get_polling_intervals().playback == 0.05


class TestConfigManagerGeneral:
    """Test general operations."""

    def test_clear(self, config: ConfigManager) -> None:
        """Test clear restores defaults."""
        config.set_host("10.0.0.2")
        config.set_port(8080)
        config.clear()
        assert config.get_host() == "localhost"
        assert config.get_port() == 3000

    def test_persists_across_instances(self, config: ConfigManager) -> None:
        """Test values written by one manager are read by another."""
        config.set_host("10.0.0.2")
        config.sync()

        other = ConfigManager("SoundCTRLTest", "TestConfig")
        assert other.get_host() == "10.0.0.2"
