"""
Device Capture Manager

Acquires and releases the local audio+video source and owns its lifetime.

Responsibilities:
- Open the device with the requested constraints (via DeviceInterface)
- Hand out CaptureSource handles tagged with a generation number, each
  with its own MediaRelay so borrowers read independent proxies
- Close sources exactly once and invalidate every outstanding borrow
- Publish the camera on/off flag (single source of truth)

The manager never stops a source on its own: the orchestrator decides when
to close, after it has stopped every borrower.
"""

import logging
from typing import Callable, Optional

from aiortc.contrib.media import MediaRelay

from capture.constants import DeviceErrorKind, DeviceState
from capture.interfaces.device_interface import DeviceError, DeviceInterface
from capture.models.capture_source import CaptureConstraints, CaptureSource
from config.settings import CAMERA_MAX_HEIGHT, CAMERA_MAX_WIDTH
from core.event_bus import DEVICE_STATE, EventBus


class DeviceCaptureManager:
    """
    Owner of the capture device.

    Usage:
        manager = DeviceCaptureManager(device, event_bus)
        source = await manager.open(CaptureConstraints())
        ...
        manager.close(source)
        manager.close(source)  # no-op
    """

    def __init__(self, device: DeviceInterface, event_bus: Optional[EventBus] = None):
        """
        Initialize manager.

        Args:
            device: Capture backend (aiortc or mock)
            event_bus: Optional bus receiving device.state events
        """
        self.logger = logging.getLogger(__name__)
        self.device = device
        self.event_bus = event_bus

        # Arena-style bookkeeping. generation increases on every close so a
        # handle from an earlier open can never look current again.
        self._generation = 0
        self._handle_counter = 0
        self._current: Optional[CaptureSource] = None

        # Statistics
        self.open_count = 0
        self.close_count = 0

        # Callback: (new_state: DeviceState)
        self.on_state_change: Optional[Callable[[DeviceState], None]] = None

        self.logger.info("Device capture manager initialized")

    @property
    def is_on(self) -> bool:
        """Camera flag - True while a source is open"""
        return self._current is not None

    @property
    def current_source(self) -> Optional[CaptureSource]:
        return self._current

    @property
    def generation(self) -> int:
        return self._generation

    def is_current(self, source: CaptureSource) -> bool:
        """True if source is the open source of the current generation"""
        return (
            self._current is source
            and source.generation == self._generation
        )

    async def open(self, constraints: Optional[CaptureConstraints] = None) -> CaptureSource:
        """
        Open the camera/microphone.

        If a source is already open it is returned unchanged (the device can
        only be held once).

        Args:
            constraints: Requested resolution/frame-rate/audio policy
                         (defaults from config/settings.py)

        Returns:
            Live CaptureSource

        Raises:
            DeviceError: denied, not-found, busy, overconstrained or unknown
        """
        if self._current is not None:
            self.logger.warning("Capture source already open, reusing it")
            return self._current

        constraints = constraints or CaptureConstraints()
        self._validate_constraints(constraints)

        generation = self._generation
        self.logger.info(f"Opening capture device: {constraints.to_dict()}")

        tracks = await self.device.acquire(constraints)

        # Another open completed (or a close ran) while we were suspended
        if self._current is not None or generation != self._generation:
            self.logger.warning("Device state changed during open, discarding tracks")
            self.device.release(tracks)
            if self._current is not None:
                return self._current
            raise DeviceError("Device open was interrupted", DeviceErrorKind.UNKNOWN)

        self._handle_counter += 1
        source = CaptureSource(
            handle_id=self._handle_counter,
            generation=self._generation,
            tracks=tuple(tracks),
            constraints=constraints,
        )
        source._owner = self
        # Fans each device track out to every borrower
        source._relay = MediaRelay()

        self._current = source
        self.open_count += 1

        self.logger.info(f"Camera on: {source.describe()}")
        self._notify(DeviceState.ON)

        return source

    def close(self, source: Optional[CaptureSource]) -> bool:
        """
        Stop every track of the source.

        Idempotent: None, an already-closed source or a stale handle from an
        earlier open is a no-op.

        Returns:
            True if tracks were stopped by this call
        """
        if source is None or source.is_revoked:
            return False

        if not self.is_current(source):
            self.logger.debug(f"Ignoring close of stale {source.describe()}")
            return False

        source._revoked = True
        self._current = None
        self._generation += 1
        self.close_count += 1

        self.device.release(list(source.tracks))

        self.logger.info(f"Camera off: {source.describe()}")
        self._notify(DeviceState.OFF)

        return True

    def _validate_constraints(self, constraints: CaptureConstraints) -> None:
        """Reject requests the backend can never satisfy"""
        if not constraints.video and not constraints.audio:
            raise DeviceError(
                "At least one of audio or video must be requested",
                DeviceErrorKind.OVERCONSTRAINED,
            )

        if not (0 < constraints.width <= CAMERA_MAX_WIDTH) or not (
            0 < constraints.height <= CAMERA_MAX_HEIGHT
        ):
            raise DeviceError(
                f"Unsupported resolution {constraints.video_size}",
                DeviceErrorKind.OVERCONSTRAINED,
            )

        if not (0 < constraints.frame_rate <= constraints.max_frame_rate):
            raise DeviceError(
                f"Frame rate {constraints.frame_rate} outside "
                f"1..{constraints.max_frame_rate}",
                DeviceErrorKind.OVERCONSTRAINED,
            )

    def _notify(self, state: DeviceState) -> None:
        if self.event_bus:
            self.event_bus.publish(DEVICE_STATE, state)

        if self.on_state_change:
            try:
                self.on_state_change(state)
            except Exception as e:
                self.logger.error(f"Error in device state callback: {e}")

    def get_status(self) -> dict:
        return {
            "on": self.is_on,
            "generation": self._generation,
            "source": self._current.describe() if self._current else None,
            "open_count": self.open_count,
            "close_count": self.close_count,
            "device": self.device.get_device_info(),
        }

    def cleanup(self) -> None:
        """Close the current source if any"""
        self.logger.info("Cleaning up device capture manager...")
        self.close(self._current)
        self.logger.info("Device capture manager cleanup complete")
