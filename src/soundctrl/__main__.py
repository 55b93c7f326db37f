"""Main entry point for the SoundCTRL sync service."""

import argparse
import logging
import signal
import sys

from PySide6.QtCore import QCoreApplication, QTimer

from soundctrl.core.config import ConfigManager
from soundctrl.core.engine import EngineState
from soundctrl.core.worker import SyncWorker
from soundctrl.models.snapshot import Snapshot

logger = logging.getLogger(__name__)


def parse_args(argv: list[str]) -> argparse.Namespace:
    """Parse command line arguments.

    Args:
        argv: Arguments without the program name.
    """
    parser = argparse.ArgumentParser(
        prog="soundctrl",
        description="SoundCTRL - SoundByte state sync",
    )
    parser.add_argument(
        "host", nargs="?", default=None, help="sound server hostname or IP",
    )
    parser.add_argument(
        "port", nargs="?", type=int, default=None, help="HTTP port (default: 3000)",
    )
    parser.add_argument(
        "--host", dest="host_flag", default=None, help="sound server hostname or IP",
    )
    parser.add_argument(
        "--port", dest="port_flag", type=int, default=None, help="HTTP port",
    )
    parser.add_argument(
        "--debug", action="store_true", help="enable debug logging",
    )
    return parser.parse_args(argv)


def format_snapshot(snapshot: Snapshot) -> str:
    """Return a one-line summary of a snapshot for the log."""
    values = snapshot.variables()
    return (
        f"{values['connection_status']} - {values['total_sounds']} sounds, "
        f"{values['playing_count']} playing: {values['currently_playing']}"
    )


def main() -> int:
    """Run the SoundCTRL sync service.

    Returns:
        Exit code (0 for success).
    """
    QCoreApplication.setApplicationName("SoundCTRL")
    QCoreApplication.setOrganizationName("SoundCTRL")
    QCoreApplication.setOrganizationDomain("soundctrl.local")

    app = QCoreApplication(sys.argv)
    parsed = parse_args(app.arguments()[1:])

    logging.basicConfig(
        level=logging.DEBUG if parsed.debug else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    config = ConfigManager()

    # Command line overrides saved settings and becomes the new default
    host: str = parsed.host_flag or parsed.host or config.get_host()
    port_arg: int | None = parsed.port_flag if parsed.port_flag is not None else parsed.port
    port: int = port_arg if port_arg is not None else config.get_port()
    config.set_host(host)
    config.set_port(port)
    config.sync()

    worker = SyncWorker(
        host,
        port,
        timeout=config.get_timeout(),
        intervals=config.get_polling_intervals(),
    )

    def on_snapshot_changed(snapshot: object) -> None:
        if isinstance(snapshot, Snapshot):
            logger.info(format_snapshot(snapshot))

    def on_engine_state_changed(state: object) -> None:
        if isinstance(state, EngineState):
            logger.debug("Engine %s", state.value)

    def on_command_failed(message: str) -> None:
        logger.warning("Command failed: %s", message)

    worker.on_change(on_snapshot_changed)
    worker.engine_state_changed.connect(on_engine_state_changed)
    worker.command_failed.connect(on_command_failed)
    worker.error_occurred.connect(lambda e: logger.error("Sync worker error: %s", e))

    # Quit cleanly on Ctrl+C / SIGTERM
    signal.signal(signal.SIGINT, lambda *_: app.quit())
    signal.signal(signal.SIGTERM, lambda *_: app.quit())

    # Let the Python interpreter run signal handlers while Qt's loop is idle
    signal_timer = QTimer()
    signal_timer.timeout.connect(lambda: None)
    signal_timer.start(200)

    logger.info("Syncing with SoundByte at %s:%d", host, port)
    worker.start()

    # Run the application
    exit_code = app.exec()

    # Cleanup
    signal_timer.stop()
    worker.stop()
    worker.wait()

    return exit_code


if __name__ == "__main__":
    sys.exit(main())
