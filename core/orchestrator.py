"""
Broadcast Session Orchestrator

Top-level state machine composing capture, publish, recording and
scheduling.

States: IDLE -> CAMERA_ON -> PUBLISHING, with recording and the schedule
as orthogonal sub-states owned by Recorder and ScheduleTimer.

Ownership:
- The orchestrator is the only holder of the CaptureSource
- PublishSession and Recorder borrow it
- stop_camera() stops every borrower BEFORE the source is closed

Errors from the device and publish layers are re-raised to the caller
after the orchestrator is back in its last stable state (IDLE/CAMERA_ON).
"""

import asyncio
import logging
from pathlib import Path
from typing import Callable, Literal, Optional, Set

from capture.controllers.device_capture_manager import DeviceCaptureManager
from capture.factory import CaptureFactory
from capture.interfaces.device_interface import DeviceError
from capture.models.capture_source import CaptureConstraints, CaptureSource
from collaborators.channel_registry import ChannelRegistry
from collaborators.session_backend import SessionBackendClient
from config.settings import RECORDING_DOWNLOAD_DIR, WHIP_INGEST_URL
from core.errors import BroadcastError
from core.event_bus import ORCHESTRATOR_STATE, PUBLISH_CONNECTION_STATE, EventBus
from core.state_machine import BroadcastState, InvalidTransitionError, StateMachine
from publish.constants import CONNECTION_STATE_FAILED, PublishErrorKind
from publish.controllers.publish_session import PublishSession
from publish.factory import PublishFactory
from publish.interfaces.peer_connection_interface import (
    PeerConnectionInterface,
    PublishError,
)
from publish.models.publish_handle import PublishHandle
from recording.controllers.recorder import Recorder
from recording.factory import RecordingFactory
from recording.interfaces.encoder_interface import RecorderError
from recording.models.recording_artifact import RecordingArtifact
from scheduling.controllers.schedule_timer import ScheduleTimer
from scheduling.factory import SchedulingFactory
from scheduling.interfaces.notifier_interface import ScheduleError
from scheduling.models.schedule_entry import ScheduleEntry

OrchestratorMode = Literal["auto", "real", "mock"]


class BroadcastSessionOrchestrator:
    """
    Coordinates one broadcast session.

    Usage:
        orchestrator = BroadcastSessionOrchestrator.create(mode="auto")

        await orchestrator.start_camera()
        await orchestrator.start_publish()
        await orchestrator.start_recording()

        artifact = await orchestrator.stop_camera()  # cascades everything
    """

    def __init__(
        self,
        device_manager: DeviceCaptureManager,
        recorder: Recorder,
        schedule_timer: ScheduleTimer,
        peer_factory: Callable[[], PeerConnectionInterface],
        event_bus: Optional[EventBus] = None,
        ingest_url: str = WHIP_INGEST_URL,
        download_dir: Optional[Path] = RECORDING_DOWNLOAD_DIR,
        channel_registry: Optional[ChannelRegistry] = None,
        session_backend: Optional[SessionBackendClient] = None,
    ):
        """
        Initialize orchestrator.

        Args:
            device_manager: Owner of the capture device
            recorder: Local recorder
            schedule_timer: One-shot schedule timer
            peer_factory: Creates a peer connection per publish attempt
            event_bus: Bus shared with the components
            ingest_url: Default WHIP endpoint
            download_dir: Where finished recordings are written
                          (None keeps artifacts in memory only)
            channel_registry: Connected destination channels
            session_backend: Login/profile reporting client
        """
        self.logger = logging.getLogger(__name__)
        self.device_manager = device_manager
        self.recorder = recorder
        self.schedule_timer = schedule_timer
        self.peer_factory = peer_factory
        self.event_bus = event_bus or EventBus()
        self.ingest_url = ingest_url
        self.download_dir = download_dir
        self.channel_registry = channel_registry or ChannelRegistry()
        self.session_backend = session_backend

        self.state_machine = StateMachine()
        self.state_machine.on_state_change = self._on_state_change

        # Borrowed by publish/recording, closed only in stop_camera()
        self.source: Optional[CaptureSource] = None
        self.publish_session: Optional[PublishSession] = None
        self.publish_handle: Optional[PublishHandle] = None
        self.artifact: Optional[RecordingArtifact] = None
        self._last_error: Optional[BroadcastError] = None

        # Reentrancy guards
        self._publish_in_flight = False
        self._camera_starting = False
        self._camera_epoch = 0

        self._background_tasks: Set[asyncio.Task] = set()
        self.event_bus.subscribe(PUBLISH_CONNECTION_STATE, self._on_connection_state)

        self.logger.info(f"Broadcast orchestrator initialized (ingest: {ingest_url})")

    @classmethod
    def create(
        cls,
        mode: OrchestratorMode = "auto",
        ingest_url: str = WHIP_INGEST_URL,
        **kwargs,
    ) -> "BroadcastSessionOrchestrator":
        """
        Build an orchestrator with every component from its factory.

        Args:
            mode: "auto" (detect), "real" (force real backends), "mock"
            ingest_url: WHIP endpoint

        Example:
            orchestrator = BroadcastSessionOrchestrator.create(mode="mock")
        """
        event_bus = EventBus()
        notifier_mode = "mock" if mode == "mock" else "auto"

        return cls(
            device_manager=DeviceCaptureManager(
                CaptureFactory.create_device(mode), event_bus
            ),
            recorder=Recorder(RecordingFactory.create_encoder(mode), event_bus),
            schedule_timer=ScheduleTimer(
                SchedulingFactory.create_notifier(notifier_mode), event_bus=event_bus
            ),
            peer_factory=PublishFactory.peer_factory(mode),
            event_bus=event_bus,
            ingest_url=ingest_url,
            **kwargs,
        )

    # =========================================================================
    # STATE
    # =========================================================================

    @property
    def state(self) -> BroadcastState:
        return self.state_machine.current_state

    @property
    def is_camera_on(self) -> bool:
        return self.device_manager.is_on

    @property
    def is_publishing(self) -> bool:
        return self.state == BroadcastState.PUBLISHING

    @property
    def is_publish_in_flight(self) -> bool:
        return self._publish_in_flight

    @property
    def is_recording(self) -> bool:
        return self.recorder.is_recording

    @property
    def last_error(self) -> Optional[str]:
        """Human-readable cause of the most recent failure"""
        return self._last_error.user_message if self._last_error else None

    @property
    def last_exception(self) -> Optional[BroadcastError]:
        return self._last_error

    # =========================================================================
    # CAMERA
    # =========================================================================

    async def start_camera(
        self, constraints: Optional[CaptureConstraints] = None
    ) -> Optional[CaptureSource]:
        """
        IDLE -> CAMERA_ON.

        Returns:
            The live source, or None if stop_camera() ran during the open

        Raises:
            DeviceError: State stays IDLE
        """
        if self.device_manager.is_on:
            self.logger.debug("Camera already on")
            return self.source

        if self._camera_starting:
            self.logger.warning("Camera start already in progress")
            return None

        self._camera_starting = True
        self._last_error = None
        epoch = self._camera_epoch

        try:
            source = await self.device_manager.open(constraints)
        except DeviceError as e:
            self._record_error(e)
            raise
        finally:
            self._camera_starting = False

        if epoch != self._camera_epoch:
            self.logger.info("Camera stopped while opening, releasing it")
            self.device_manager.close(source)
            return None

        self.source = source
        self.state_machine.transition_to(BroadcastState.CAMERA_ON, "camera started")
        return source

    async def stop_camera(self) -> Optional[RecordingArtifact]:
        """
        Any state -> IDLE.

        Stops publishing and recording first, then closes the source. The
        source is closed and the state reaches IDLE even if a borrower
        fails to stop.

        Returns:
            The artifact of a recording that was running, else None
        """
        self._camera_epoch += 1

        try:
            await self.stop_publish(reason="camera stopped")
            artifact = await self.stop_recording()
        finally:
            source = self.source
            self.source = None
            self.device_manager.close(source)

            if self.state != BroadcastState.IDLE:
                self.state_machine.transition_to(BroadcastState.IDLE, "camera stopped")

        return artifact

    # =========================================================================
    # PUBLISH
    # =========================================================================

    async def start_publish(self, ingest_url: Optional[str] = None) -> Optional[PublishHandle]:
        """
        CAMERA_ON -> PUBLISHING.

        A call while another publish is in flight is a no-op returning None.

        Raises:
            InvalidTransitionError: If the camera is off
            PublishError: State returns to CAMERA_ON
        """
        if self._publish_in_flight:
            self.logger.warning("Publish already in flight, ignoring request")
            return None

        if self.state == BroadcastState.PUBLISHING:
            return self.publish_handle

        url = ingest_url or self.ingest_url
        if self.source is None or not self.state_machine.can_transition(BroadcastState.PUBLISHING):
            raise InvalidTransitionError("Turn the camera on before publishing")

        self._publish_in_flight = True
        self._last_error = None
        session = PublishSession(self.peer_factory, self.event_bus)
        self.publish_session = session

        try:
            handle = await session.publish(url, self.source)
        except PublishError as e:
            if self.publish_session is session:
                self.publish_session = None
            if e.kind != PublishErrorKind.ABORTED:
                self._record_error(e)
            raise
        except Exception:
            if self.publish_session is session:
                self.publish_session = None
            raise
        finally:
            self._publish_in_flight = False

        self.publish_handle = handle
        self.state_machine.transition_to(BroadcastState.PUBLISHING, f"publishing to {url}")
        return handle

    async def stop_publish(self, reason: str = "publish stopped") -> bool:
        """
        PUBLISHING -> CAMERA_ON. Also aborts a handshake in flight.

        Returns:
            True if a publish session was stopped
        """
        session = self.publish_session
        if session is None:
            return False

        self.publish_session = None
        self.publish_handle = None
        try:
            await session.stop()
        finally:
            if self.state == BroadcastState.PUBLISHING:
                self.state_machine.transition_to(BroadcastState.CAMERA_ON, reason)
        return True

    def _on_connection_state(self, event_type: str, data: dict) -> None:
        session = self.publish_session
        if session is None or data.get("session_id") != session.session_id:
            return

        if data.get("state") == CONNECTION_STATE_FAILED:
            self._record_error(
                PublishError("Connection to the ingest server failed", PublishErrorKind.NETWORK)
            )
            self._spawn(self.stop_publish(reason="connection failed"))

    # =========================================================================
    # RECORDING
    # =========================================================================

    async def start_recording(self) -> None:
        """
        Start recording the camera (orthogonal to publishing).

        Raises:
            RecorderError: NO_SOURCE when the camera is off, UNSUPPORTED
        """
        source = self.source if self.device_manager.is_on else None
        try:
            await self.recorder.start(source)
        except RecorderError as e:
            self._record_error(e)
            raise

    async def stop_recording(self) -> Optional[RecordingArtifact]:
        """
        Stop recording and keep the new artifact.

        The previous artifact is revoked only after the new one is assigned.

        Returns:
            The new artifact, or None if nothing was recording
        """
        artifact = await self.recorder.stop()
        if artifact is None:
            return None

        if self.download_dir is not None:
            try:
                artifact.materialize(self.download_dir)
            except OSError as e:
                self.logger.error(f"Could not write recording to {self.download_dir}: {e}")

        previous = self.artifact
        self.artifact = artifact
        if previous is not None and previous is not artifact:
            previous.revoke()

        return artifact

    # =========================================================================
    # SCHEDULE
    # =========================================================================

    def schedule_session(self, title: str, fire_at_epoch_ms: int) -> ScheduleEntry:
        """
        Arm the schedule (replaces any armed one).

        Raises:
            ScheduleError: TIME_IN_PAST
        """
        try:
            return self.schedule_timer.arm(title, fire_at_epoch_ms)
        except ScheduleError as e:
            self._record_error(e)
            raise

    def cancel_schedule(self) -> bool:
        return self.schedule_timer.cancel()

    # =========================================================================
    # COMPOSITE ACTIONS
    # =========================================================================

    async def start_broadcast(self, ingest_url: Optional[str] = None) -> Optional[PublishHandle]:
        """
        Turn the camera on (if needed) and publish.

        A publish failure leaves the camera previewing.

        Raises:
            DeviceError, PublishError
        """
        if not self.device_manager.is_on:
            if await self.start_camera() is None:
                return None
        return await self.start_publish(ingest_url)

    async def toggle_broadcast(self) -> bool:
        """
        Go live when not publishing, otherwise stop everything.

        Returns:
            True if live after the call
        """
        if self.is_publishing or self._publish_in_flight:
            await self.stop_camera()
            return False

        await self.start_broadcast()
        return self.is_publishing

    async def shutdown(self) -> None:
        """Stop everything and release all resources"""
        self.logger.info("Shutting down broadcast orchestrator...")

        self.cancel_schedule()
        await self.stop_camera()

        if self._background_tasks:
            await asyncio.wait(list(self._background_tasks))

        if self.session_backend is not None:
            await self.session_backend.close()

        self.event_bus.unsubscribe(PUBLISH_CONNECTION_STATE, self._on_connection_state)
        self.logger.info("Broadcast orchestrator shutdown complete")

    # =========================================================================
    # HELPERS
    # =========================================================================

    def _record_error(self, error: BroadcastError) -> None:
        self._last_error = error
        self.logger.error(f"{type(error).__name__}: {error.user_message}")

    def _spawn(self, coro) -> asyncio.Task:
        task = asyncio.ensure_future(coro)
        self._background_tasks.add(task)
        task.add_done_callback(self._background_tasks.discard)
        return task

    def _on_state_change(self, old: BroadcastState, new: BroadcastState, reason: str) -> None:
        self.event_bus.publish(
            ORCHESTRATOR_STATE, {"old": old, "new": new, "reason": reason}
        )

    def get_status(self) -> dict:
        return {
            **self.state_machine.get_status_info(),
            "camera_on": self.device_manager.is_on,
            "source": self.source.describe() if self.source else None,
            "publish": self.publish_session.get_status() if self.publish_session else None,
            "publish_in_flight": self._publish_in_flight,
            "recording": self.recorder.get_status(),
            "artifact": self.artifact.to_dict() if self.artifact else None,
            "schedule": self.schedule_timer.get_status(),
            "channels": self.channel_registry.connected_count,
            "last_error": self.last_error,
        }
