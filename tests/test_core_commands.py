"""Tests for CommandExecutor."""

from unittest.mock import AsyncMock, MagicMock

import pytest

from soundctrl.api.protocol import NetworkError, PlayResult, StopResult
from soundctrl.core.commands import CommandExecutor
from soundctrl.core.state import SnapshotStore
from soundctrl.models.snapshot import Snapshot
from soundctrl.models.sound import Sound


@pytest.fixture
def commands(mock_client: MagicMock, store: SnapshotStore) -> CommandExecutor:
    """Return an executor wired to the mocked client."""
    return CommandExecutor(mock_client, store)


@pytest.fixture
def failures(commands: CommandExecutor) -> list[str]:
    """Collect command failure messages."""
    received: list[str] = []
    commands.command_failed.connect(received.append)
    return received


@pytest.fixture
def loaded_store(store: SnapshotStore, sample_catalog: list[Sound]) -> SnapshotStore:
    """Return a connected store holding the sample catalog."""
    store.replace_catalog(sample_catalog)
    store.set_connected(True)
    return store


class TestToggle:
    """Tests for toggling one sound."""

    @pytest.mark.asyncio
    async def test_toggle_on(
        self,
        commands: CommandExecutor,
        mock_client: MagicMock,
        loaded_store: SnapshotStore,
        notifications: list[Snapshot],
    ) -> None:
        """Test a started sound is shown playing before the next poll."""
        assert await commands.toggle(1)

        mock_client.play.assert_awaited_once_with(1)
        assert loaded_store.snapshot.is_playing(1)
        assert len(notifications) == 1

    @pytest.mark.asyncio
    async def test_toggle_off(
        self,
        commands: CommandExecutor,
        mock_client: MagicMock,
        loaded_store: SnapshotStore,
    ) -> None:
        """Test a stopped sound is shown stopped."""
        loaded_store.set_playing(1, True)
        mock_client.play.return_value = PlayResult(success=True, action="stopped", name="Boom")

        assert await commands.toggle(1)

        assert not loaded_store.snapshot.is_playing(1)

    @pytest.mark.asyncio
    async def test_toggle_rejected(
        self,
        commands: CommandExecutor,
        mock_client: MagicMock,
        loaded_store: SnapshotStore,
        notifications: list[Snapshot],
        failures: list[str],
    ) -> None:
        """Test a rejected toggle leaves the snapshot alone."""
        mock_client.play.return_value = PlayResult(success=False, message="Sound not found")

        assert not await commands.toggle(1)

        assert not loaded_store.snapshot.is_playing(1)
        assert notifications == []
        assert failures == ["Failed to toggle sound 1: Sound not found"]

    @pytest.mark.asyncio
    async def test_toggle_network_error(
        self,
        commands: CommandExecutor,
        mock_client: MagicMock,
        loaded_store: SnapshotStore,
        notifications: list[Snapshot],
        failures: list[str],
    ) -> None:
        """Test a network failure is reported without raising."""
        mock_client.play.side_effect = NetworkError("connection refused")
        before = loaded_store.snapshot

        assert not await commands.toggle(2)

        assert loaded_store.snapshot is before
        assert notifications == []
        assert len(failures) == 1
        assert "connection refused" in failures[0]

    @pytest.mark.asyncio
    async def test_toggle_unknown_sound(
        self,
        commands: CommandExecutor,
        loaded_store: SnapshotStore,
        notifications: list[Snapshot],
    ) -> None:
        """Test a sound missing from the catalog is not added to the snapshot."""
        assert await commands.toggle(42)

        assert 42 not in loaded_store.snapshot.playing
        assert notifications == []

    @pytest.mark.asyncio
    async def test_set_client(
        self, commands: CommandExecutor, mock_client: MagicMock, loaded_store: SnapshotStore
    ) -> None:
        """Test commands go to the replacement client."""
        other = MagicMock()
        other.play = AsyncMock(
            return_value=PlayResult(success=True, action="playing", name="Applause")
        )
        commands.set_client(other)

        assert commands.client is other
        assert await commands.toggle(2)
        other.play.assert_awaited_once_with(2)
        mock_client.play.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_toggle_dropped_after_server_switch(
        self,
        commands: CommandExecutor,
        mock_client: MagicMock,
        loaded_store: SnapshotStore,
        notifications: list[Snapshot],
    ) -> None:
        """Test a toggle answered by the previous server does not touch the snapshot."""
        other = MagicMock()

        async def switch_during_play(sound_id: int) -> PlayResult:
            commands.set_client(other)
            return PlayResult(success=True, action="playing", name="Boom")

        mock_client.play.side_effect = switch_during_play

        assert await commands.toggle(1)

        assert not loaded_store.snapshot.is_playing(1)
        assert notifications == []


class TestStopAll:
    """Tests for stopping every sound."""

    @pytest.mark.asyncio
    async def test_stop_all(
        self,
        commands: CommandExecutor,
        mock_client: MagicMock,
        loaded_store: SnapshotStore,
        notifications: list[Snapshot],
    ) -> None:
        """Test every sound is shown stopped with one notification."""
        loaded_store.update_playing({1: True, 3: True})

        assert await commands.stop_all()

        mock_client.stop_all.assert_awaited_once()
        assert not loaded_store.snapshot.any_playing
        assert loaded_store.is_connected
        assert len(notifications) == 1

    @pytest.mark.asyncio
    async def test_stop_all_rejected(
        self,
        commands: CommandExecutor,
        mock_client: MagicMock,
        loaded_store: SnapshotStore,
        failures: list[str],
    ) -> None:
        """Test a rejected stop-all keeps playback flags."""
        loaded_store.set_playing(1, True)
        mock_client.stop_all.return_value = StopResult(success=False)

        assert not await commands.stop_all()

        assert loaded_store.snapshot.is_playing(1)
        assert failures == ["Failed to stop all sounds: rejected"]

    @pytest.mark.asyncio
    async def test_stop_all_network_error(
        self,
        commands: CommandExecutor,
        mock_client: MagicMock,
        loaded_store: SnapshotStore,
        notifications: list[Snapshot],
        failures: list[str],
    ) -> None:
        """Test a network failure is reported without raising."""
        loaded_store.set_playing(3, True)
        mock_client.stop_all.side_effect = NetworkError("timed out")

        assert not await commands.stop_all()

        assert loaded_store.snapshot.is_playing(3)
        assert notifications == []
        assert len(failures) == 1

    @pytest.mark.asyncio
    async def test_stop_all_dropped_after_server_switch(
        self,
        commands: CommandExecutor,
        mock_client: MagicMock,
        loaded_store: SnapshotStore,
        notifications: list[Snapshot],
    ) -> None:
        """Test a stop-all answered by the previous server keeps the new flags."""
        loaded_store.set_playing(2, True)
        other = MagicMock()

        async def switch_during_stop() -> StopResult:
            commands.set_client(other)
            return StopResult(success=True)

        mock_client.stop_all.side_effect = switch_during_stop

        assert await commands.stop_all()

        assert loaded_store.snapshot.is_playing(2)
        assert notifications == []
