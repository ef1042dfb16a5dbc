"""
Mock Device Implementation

Simulated camera/microphone for testing without hardware.

This is a "Fake" (test double) - the tracks are real aiortc synthetic
tracks (green frames + silence), so recorder and peer code run unchanged.
"""

import asyncio
import logging
from typing import Any, List, Optional

from aiortc.mediastreams import AudioStreamTrack, VideoStreamTrack

from capture.constants import DeviceErrorKind
from capture.interfaces.device_interface import DeviceError, DeviceInterface
from capture.models.capture_source import CaptureConstraints


class MockDevice(DeviceInterface):
    """
    Mock capture device for testing.

    Usage:
        device = MockDevice()
        device.simulate_failure(DeviceErrorKind.DENIED)
        await device.acquire(CaptureConstraints())  # raises DeviceError
    """

    def __init__(self, acquire_delay: float = 0.0):
        """
        Initialize mock device.

        Args:
            acquire_delay: Seconds acquire() suspends before returning,
                           to simulate a permission prompt
        """
        self.logger = logging.getLogger(__name__)
        self.acquire_delay = acquire_delay

        # Configuration for test scenarios
        self._failure_kind: Optional[DeviceErrorKind] = None

        # Counters for assertions
        self.acquire_count = 0
        self.release_count = 0
        self.released_tracks: List[Any] = []

        self.logger.info(f"Mock Device initialized (acquire_delay: {acquire_delay}s)")

    async def acquire(self, constraints: CaptureConstraints) -> List[Any]:
        self.acquire_count += 1

        if self.acquire_delay:
            await asyncio.sleep(self.acquire_delay)

        if self._failure_kind is not None:
            self.logger.error(f"[MOCK] Simulated device failure: {self._failure_kind.value}")
            raise DeviceError(kind=self._failure_kind)

        tracks: List[Any] = []
        if constraints.audio:
            tracks.append(AudioStreamTrack())
        if constraints.video:
            tracks.append(VideoStreamTrack())

        self.logger.info(f"[MOCK] Device acquired: {[t.kind for t in tracks]}")
        return tracks

    def release(self, tracks: List[Any]) -> None:
        self.release_count += 1
        for track in tracks:
            track.stop()
            self.released_tracks.append(track)
        self.logger.info(f"[MOCK] Device released ({len(tracks)} tracks)")

    def is_available(self) -> bool:
        return True

    def get_device_info(self) -> dict:
        return {
            "backend": "mock",
            "acquire_count": self.acquire_count,
            "release_count": self.release_count,
            "available": True,
        }

    # =========================================================================
    # TEST HELPERS
    # =========================================================================

    def simulate_failure(self, kind: DeviceErrorKind = DeviceErrorKind.DENIED) -> None:
        """Make every following acquire() raise DeviceError(kind)"""
        self._failure_kind = kind
        self.logger.info(f"[MOCK] Next acquires will fail with {kind.value}")

    def clear_failure(self) -> None:
        self._failure_kind = None
