"""
Capture Source Models

Data classes for capture constraints and the live capture handle.
"""

import time
from dataclasses import dataclass, field
from typing import Any, List, Optional, Tuple

from config.settings import (
    CAMERA_FACING_MODE,
    CAMERA_FRAME_RATE,
    CAMERA_HEIGHT,
    CAMERA_MAX_FRAME_RATE,
    CAMERA_WIDTH,
    CAPTURE_AUDIO,
)


@dataclass(frozen=True)
class CaptureConstraints:
    """
    Requested resolution/frame-rate/audio policy.

    Values are ideals; max_frame_rate is a hard upper bound.
    """

    width: int = CAMERA_WIDTH
    height: int = CAMERA_HEIGHT
    frame_rate: int = CAMERA_FRAME_RATE
    max_frame_rate: int = CAMERA_MAX_FRAME_RATE
    facing_mode: str = CAMERA_FACING_MODE
    audio: bool = CAPTURE_AUDIO
    video: bool = True

    @property
    def video_size(self) -> str:
        return f"{self.width}x{self.height}"

    def to_dict(self) -> dict:
        return {
            "width": self.width,
            "height": self.height,
            "frame_rate": self.frame_rate,
            "max_frame_rate": self.max_frame_rate,
            "facing_mode": self.facing_mode,
            "audio": self.audio,
            "video": self.video,
        }


@dataclass
class CaptureSource:
    """
    Opaque handle to a live audio+video feed.

    Owned by DeviceCaptureManager. Recorder and PublishSession only borrow
    it: each borrower reads its own relay proxies from subscribe() and stops
    only those. The device tracks are stopped by the owner alone.

    The (handle_id, generation) pair identifies one open. The manager bumps
    its generation on every close, so a borrower holding an old handle can
    detect the stale borrow with is_live.
    """

    handle_id: int
    generation: int
    tracks: Tuple[Any, ...]
    constraints: CaptureConstraints
    opened_at: float = field(default_factory=time.time)

    # Set by the owning manager
    _owner: Any = field(default=None, repr=False, compare=False)
    _revoked: bool = field(default=False, repr=False, compare=False)
    _relay: Any = field(default=None, repr=False, compare=False)

    @property
    def is_live(self) -> bool:
        """True while the owner reports on and this open is current"""
        if self._revoked or self._owner is None:
            return False
        return self._owner.is_current(self)

    @property
    def is_revoked(self) -> bool:
        return self._revoked

    @property
    def audio_track(self) -> Optional[Any]:
        return next((t for t in self.tracks if t.kind == "audio"), None)

    @property
    def video_track(self) -> Optional[Any]:
        return next((t for t in self.tracks if t.kind == "video"), None)

    @property
    def age_seconds(self) -> float:
        return time.time() - self.opened_at

    def subscribe(self) -> List[Any]:
        """
        One relay proxy per track for a single borrower.

        Every proxy receives every frame, so two borrowers never split the
        feed between them. Stopping a proxy ends only that borrow.

        Raises:
            ValueError: If the source is not live
        """
        if not self.is_live or self._relay is None:
            raise ValueError(f"Cannot subscribe to {self.describe()}, source is closed")
        return [self._relay.subscribe(track) for track in self.tracks]

    def describe(self) -> str:
        kinds = ",".join(t.kind for t in self.tracks)
        return f"source#{self.handle_id} gen={self.generation} [{kinds}]"
