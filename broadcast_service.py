"""
Broadcast Service

Headless runner for one broadcast session.
Wires the orchestrator to a heartbeat file, a control file and signals.

Architecture:
- One asyncio event loop, no worker threads
- BroadcastSessionOrchestrator owns camera, publish, recording, schedule
- Control commands run as tasks so a slow handshake never blocks the loop
- Silent operation apart from logs and the scheduled-stream notification

State Flow:
    IDLE → CAMERA_ON → PUBLISHING
      ↑        ↑   ↓        ↓
      |        +---(UNPUBLISH / connection failed)
      +------------(CAMERA_OFF from any state)

Remote Control (echo "<COMMAND>" > CONTROL_FILE):
- CAMERA_ON / CAMERA_OFF: Camera preview on/off
- GO_LIVE: Camera on (if needed) + publish
- PUBLISH / UNPUBLISH: Publish with the camera already on
- TOGGLE: Go live, or stop everything when live
- RECORD / STOP_RECORD: Local recording
- SCHEDULE <epoch_ms> [title]: Arm the scheduled-stream reminder
- CANCEL_SCHEDULE, STATUS, SHUTDOWN
"""

import argparse
import asyncio
import json
import logging
import logging.handlers
import os
import signal
import sys
import time
from datetime import datetime
from pathlib import Path
from typing import Optional, Set

from collaborators.session_backend import SessionBackendClient
from config.settings import (
    CONTROL_FILE,
    HEARTBEAT_FILE,
    HEARTBEAT_INTERVAL,
    LOG_DIR,
    LOG_SERVICE_FILE,
    OPERATOR_DISPLAY_NAME,
    OPERATOR_EMAIL,
    OPERATOR_ID,
    WHIP_INGEST_URL,
)
from core.errors import BroadcastError
from core.orchestrator import BroadcastSessionOrchestrator, OrchestratorMode
from core.state_machine import InvalidTransitionError

OPERATOR_PROVIDER = "service"
SHUTDOWN_SIGNALS = (signal.SIGTERM, signal.SIGINT)


class BroadcastService:
    """
    Main service coordinator.

    Usage:
        service = BroadcastService(mode="auto")
        asyncio.run(service.run())  # Blocks until shutdown
    """

    def __init__(
        self,
        mode: OrchestratorMode = "auto",
        ingest_url: str = WHIP_INGEST_URL,
        heartbeat_file: str = HEARTBEAT_FILE,
        control_file: str = CONTROL_FILE,
        go_live: bool = False,
        orchestrator: Optional[BroadcastSessionOrchestrator] = None,
    ):
        """
        Initialize the service.

        Args:
            mode: Component backends ("auto", "real", "mock")
            ingest_url: WHIP endpoint used by GO_LIVE/PUBLISH
            heartbeat_file: JSON liveness file
            control_file: Command file polled by the main loop
            go_live: Go live as soon as the loop starts
            orchestrator: Prebuilt orchestrator (tests)
        """
        self.logger = logging.getLogger(__name__)
        self.logger.info("Initializing Broadcast Service...")

        self.start_time = time.time()
        self.running = False
        self.go_live = go_live
        self.error_count = 0

        self.heartbeat_file = Path(heartbeat_file)
        self.last_heartbeat = 0.0
        self.control_file = Path(control_file)

        if orchestrator is None:
            orchestrator = BroadcastSessionOrchestrator.create(
                mode=mode,
                ingest_url=ingest_url,
                session_backend=SessionBackendClient(),
            )
        elif orchestrator.session_backend is None:
            orchestrator.session_backend = SessionBackendClient()
        self.orchestrator = orchestrator
        self.session_backend = orchestrator.session_backend
        self.orchestrator.schedule_timer.on_fire = self._handle_schedule_fired

        self._command_tasks: Set[asyncio.Task] = set()
        self._stop_event: Optional[asyncio.Event] = None

        self.logger.info("Broadcast Service initialized successfully")

    async def run(self):
        """
        Main service loop.

        Runs until SHUTDOWN, SIGINT or SIGTERM.
        """
        self.running = True
        self._stop_event = asyncio.Event()
        self._install_signal_handlers()
        self.logger.info("Starting Broadcast Service main loop...")

        self._report_operator()

        if self.go_live:
            self.submit_command("GO_LIVE")

        # Main loop - 10Hz update rate
        try:
            while self.running:
                self._update_loop()
                try:
                    await asyncio.wait_for(self._stop_event.wait(), timeout=0.1)
                except asyncio.TimeoutError:
                    pass
        finally:
            await self._shutdown()

    def stop(self):
        """Ask the main loop to exit"""
        self.running = False
        if self._stop_event is not None:
            self._stop_event.set()

    def _update_loop(self):
        current_time = time.time()
        if current_time - self.last_heartbeat >= HEARTBEAT_INTERVAL:
            self._write_heartbeat()
            self.last_heartbeat = current_time

        self._check_control_commands()

    # =========================================================================
    # HEARTBEAT
    # =========================================================================

    def _write_heartbeat(self):
        """
        Write heartbeat for liveness detection.

        Atomic write (tmp file + rename) so readers never see partial JSON.
        """
        try:
            orchestrator = self.orchestrator
            heartbeat = {
                "timestamp": datetime.now().isoformat(),
                "uptime_seconds": time.time() - self.start_time,
                "state": orchestrator.state.value,
                "camera_on": orchestrator.is_camera_on,
                "publishing": orchestrator.is_publishing,
                "publish_in_flight": orchestrator.is_publish_in_flight,
                "recording_active": orchestrator.is_recording,
                "schedule_armed": orchestrator.schedule_timer.is_armed,
                "last_artifact": (
                    str(orchestrator.artifact.path or orchestrator.artifact.name)
                    if orchestrator.artifact
                    else None
                ),
                "last_error": orchestrator.last_error,
                "pid": os.getpid(),
                "error_count": self.error_count,
            }

            tmp_file = self.heartbeat_file.with_suffix(".tmp")
            tmp_file.write_text(json.dumps(heartbeat, indent=2))
            tmp_file.rename(self.heartbeat_file)

        except Exception as e:
            self.logger.warning(f"Failed to write heartbeat: {e}")

    # =========================================================================
    # REMOTE CONTROL
    # =========================================================================

    def _check_control_commands(self):
        """Read, delete and dispatch the pending control command, if any."""
        if not self.control_file.exists():
            return

        try:
            command = self.control_file.read_text().strip()
            self.control_file.unlink()
        except OSError as e:
            self.logger.error(f"Failed to read control command: {e}")
            try:
                self.control_file.unlink()
            except FileNotFoundError:
                pass
            return

        if command:
            self.logger.info(f"Remote command received: {command}")
            self.submit_command(command)

    def submit_command(self, command: str) -> asyncio.Task:
        """Run a command in the background (the main loop keeps ticking)"""
        task = asyncio.ensure_future(self.process_command(command))
        self._command_tasks.add(task)
        task.add_done_callback(self._command_tasks.discard)
        return task

    async def process_command(self, command: str) -> bool:
        """
        Execute one remote command.

        Args:
            command: Command line, e.g. "SCHEDULE 1760000000000 Morning show"

        Returns:
            True if the command was recognized and succeeded
        """
        parts = command.strip().split(maxsplit=2)
        if not parts:
            return False
        name = parts[0].upper()
        orchestrator = self.orchestrator

        try:
            if name == "CAMERA_ON":
                return await orchestrator.start_camera() is not None

            elif name == "CAMERA_OFF":
                artifact = await orchestrator.stop_camera()
                if artifact:
                    self.logger.info(f"Recording saved: {artifact.path or artifact.name}")
                return True

            elif name == "GO_LIVE":
                handle = await orchestrator.start_broadcast()
                if handle:
                    self.logger.info(f"Live: session {handle.session_id}")
                return handle is not None

            elif name == "PUBLISH":
                return await orchestrator.start_publish() is not None

            elif name == "UNPUBLISH":
                return await orchestrator.stop_publish(reason="remote unpublish")

            elif name == "TOGGLE":
                live = await orchestrator.toggle_broadcast()
                self.logger.info(f"Remote TOGGLE → {'live' if live else 'stopped'}")
                return True

            elif name == "RECORD":
                await orchestrator.start_recording()
                return orchestrator.is_recording

            elif name == "STOP_RECORD":
                artifact = await orchestrator.stop_recording()
                if artifact:
                    self.logger.info(f"Recording saved: {artifact.path or artifact.name}")
                return artifact is not None

            elif name == "SCHEDULE":
                if len(parts) < 2 or not parts[1].isdigit():
                    self.logger.warning("Usage: SCHEDULE <epoch_ms> [title]")
                    return False
                title = parts[2] if len(parts) > 2 else ""
                entry = orchestrator.schedule_session(title, int(parts[1]))
                self.logger.info(f"Remote SCHEDULE → {entry.fire_at_display}")
                return True

            elif name == "CANCEL_SCHEDULE":
                return orchestrator.cancel_schedule()

            elif name == "STATUS":
                self.logger.info(f"Remote STATUS → {json.dumps(orchestrator.get_status(), default=str)}")
                return True

            elif name == "SHUTDOWN":
                self.logger.info("Remote SHUTDOWN → stopping service")
                self.stop()
                return True

            else:
                self.logger.warning(f"Unknown remote command: {name}")
                return False

        except InvalidTransitionError as e:
            self.logger.warning(f"Remote {name} ignored - {e}")
            return False

        except BroadcastError as e:
            self.error_count += 1
            self.logger.error(f"Remote {name} failed: {e.user_message}")
            return False

    # =========================================================================
    # CALLBACKS
    # =========================================================================

    def _handle_schedule_fired(self, entry, channel):
        self.logger.info(f"Scheduled stream due ({channel.value}): {entry.message}")

    def _report_operator(self):
        """Report the operator login/profile to the session backend"""
        if not OPERATOR_ID:
            return

        self.session_backend.record_login_event(
            OPERATOR_PROVIDER, success=True, auth_user_id=OPERATOR_ID
        )
        self.session_backend.upsert_user_profile(
            OPERATOR_ID,
            email=OPERATOR_EMAIL or None,
            display_name=OPERATOR_DISPLAY_NAME or None,
        )

    # =========================================================================
    # SHUTDOWN HANDLING
    # =========================================================================

    def _install_signal_handlers(self):
        loop = asyncio.get_running_loop()
        for signum in SHUTDOWN_SIGNALS:
            try:
                loop.add_signal_handler(signum, self._signal_handler, signum)
            except (NotImplementedError, RuntimeError):
                # Not on the main thread or not supported by the loop
                self.logger.debug(f"Signal handler for {signum} not installed")

    def _remove_signal_handlers(self):
        loop = asyncio.get_running_loop()
        for signum in SHUTDOWN_SIGNALS:
            try:
                loop.remove_signal_handler(signum)
            except (NotImplementedError, RuntimeError):
                pass

    def _signal_handler(self, signum):
        signal_name = signal.Signals(signum).name
        self.logger.info(f"Received signal {signal_name}, shutting down...")
        self.stop()

    async def _shutdown(self):
        """
        Graceful shutdown.

        Cancels pending commands, then stops publish, recording and camera.
        """
        self.logger.info("Shutting down Broadcast Service...")

        pending = [t for t in self._command_tasks if not t.done()]
        for task in pending:
            task.cancel()
        if pending:
            await asyncio.wait(pending)

        await self.orchestrator.shutdown()
        self._remove_signal_handlers()
        self._write_heartbeat()

        self.logger.info("Broadcast Service shutdown complete")


def setup_logging():
    """
    Setup logging with rotation.

    Logs to both console and file with rotation:
    - Daily rotation
    - Keep 7 days of logs
    """
    logger = logging.getLogger()
    logger.setLevel(logging.INFO)

    log_format = logging.Formatter("%(message)s | %(name)s")

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(logging.INFO)
    console_handler.setFormatter(log_format)
    logger.addHandler(console_handler)

    log_file = Path(LOG_DIR) / LOG_SERVICE_FILE
    try:
        file_handler = logging.handlers.TimedRotatingFileHandler(
            str(log_file),
            when="midnight",
            interval=1,
            backupCount=7,
            encoding="utf-8",
        )
    except (PermissionError, FileNotFoundError):
        logs_dir = Path("logs")
        logs_dir.mkdir(exist_ok=True)

        fallback_log = logs_dir / "broadcast-service.log"
        logger.warning(f"Cannot write to {log_file}, using fallback: {fallback_log}")
        logger.info(
            f"To fix: sudo mkdir -p {LOG_DIR} && sudo chown $(whoami) {LOG_DIR}"
        )

        file_handler = logging.handlers.TimedRotatingFileHandler(
            str(fallback_log),
            when="midnight",
            interval=1,
            backupCount=7,
            encoding="utf-8",
        )

    file_handler.setLevel(logging.INFO)
    file_handler.setFormatter(log_format)
    logger.addHandler(file_handler)


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description="Broadcast session service")
    parser.add_argument(
        "--mock",
        action="store_true",
        help="Use mock camera, peer connection, encoder and notifier",
    )
    parser.add_argument(
        "--ingest-url",
        default=WHIP_INGEST_URL,
        help="WHIP endpoint (default: WHIP_INGEST_URL)",
    )
    parser.add_argument(
        "--go-live",
        action="store_true",
        help="Turn the camera on and publish immediately",
    )
    return parser.parse_args(argv)


def main(argv=None):
    """
    Main entry point for the service.

    Sets up logging and runs the service.
    """
    args = parse_args(argv)
    setup_logging()

    logger = logging.getLogger(__name__)
    logger.info("=" * 60)
    logger.info("Broadcast Service Starting")
    logger.info("=" * 60)

    try:
        service = BroadcastService(
            mode="mock" if args.mock else "auto",
            ingest_url=args.ingest_url,
            go_live=args.go_live,
        )
        asyncio.run(service.run())
    except Exception as e:
        logger.critical(f"Fatal error in main: {e}", exc_info=True)
        sys.exit(1)


if __name__ == "__main__":
    main()
