"""
aiortc Device Implementation

Opens the local camera and microphone through aiortc's MediaPlayer,
which wraps FFmpeg device demuxers (v4l2/avfoundation/dshow + pulse).

Opening a device is blocking (FFmpeg probes the driver), so it runs in the
default executor and the event loop keeps serving other tasks.
"""

import asyncio
import logging
import platform
from pathlib import Path
from typing import Any, List, Optional

from aiortc.contrib.media import MediaPlayer

from capture.constants import (
    BUSY_ERRNOS,
    OVERCONSTRAINED_ERRNOS,
    VIDEO_INPUT_FORMATS,
    DeviceErrorKind,
)
from capture.interfaces.device_interface import DeviceError, DeviceInterface
from capture.models.capture_source import CaptureConstraints
from config.settings import (
    AUDIO_INPUT_FORMAT,
    DEFAULT_AUDIO_DEVICE,
    DEFAULT_CAMERA_DEVICE,
)


def classify_device_error(error: BaseException) -> DeviceErrorKind:
    """
    Map an exception raised while opening a device to a DeviceErrorKind.

    PyAV raises subclasses of the builtin OSError family (av.error.*), so
    the builtin hierarchy is enough to tell them apart.

    Example:
        classify_device_error(PermissionError(13, "denied"))
        # -> DeviceErrorKind.DENIED
    """
    if isinstance(error, PermissionError):
        return DeviceErrorKind.DENIED
    if isinstance(error, FileNotFoundError):
        return DeviceErrorKind.NOT_FOUND
    if isinstance(error, OSError):
        if error.errno in BUSY_ERRNOS:
            return DeviceErrorKind.BUSY
        if error.errno in OVERCONSTRAINED_ERRNOS:
            return DeviceErrorKind.OVERCONSTRAINED
    if isinstance(error, ValueError):
        return DeviceErrorKind.OVERCONSTRAINED
    return DeviceErrorKind.UNKNOWN


class AiortcDevice(DeviceInterface):
    """
    Camera/microphone backend built on aiortc.contrib.media.MediaPlayer.

    Usage:
        device = AiortcDevice()
        tracks = await device.acquire(CaptureConstraints())
        # ... tracks feed the recorder/peer connection ...
        device.release(tracks)
    """

    def __init__(
        self,
        camera_device: str = DEFAULT_CAMERA_DEVICE,
        audio_device: str = DEFAULT_AUDIO_DEVICE,
    ):
        self.logger = logging.getLogger(__name__)
        self.camera_device = camera_device
        self.audio_device = audio_device
        self.system = platform.system()

        self.logger.info(
            f"aiortc device initialized "
            f"(camera: {camera_device}, audio: {audio_device}, os: {self.system})"
        )

    async def acquire(self, constraints: CaptureConstraints) -> List[Any]:
        loop = asyncio.get_running_loop()
        players: List[MediaPlayer] = []

        try:
            if constraints.video:
                players.append(
                    await loop.run_in_executor(
                        None, self._open_video_player, constraints
                    )
                )
            if constraints.audio and self.system == "Linux":
                # avfoundation/dshow capture audio in the same player
                players.append(
                    await loop.run_in_executor(None, self._open_audio_player)
                )
        except Exception as e:
            # Release whatever was opened before the failure
            for player in players:
                self.release([t for t in (player.audio, player.video) if t])

            kind = classify_device_error(e)
            self.logger.error(f"Failed to open capture device ({kind.value}): {e}")
            raise DeviceError(kind=kind) from e

        tracks = []
        for player in players:
            if constraints.audio and player.audio:
                tracks.append(player.audio)
            if constraints.video and player.video:
                tracks.append(player.video)

        if constraints.video and not any(t.kind == "video" for t in tracks):
            self.release(tracks)
            raise DeviceError(
                f"No video track found on {self.camera_device}",
                kind=DeviceErrorKind.NOT_FOUND,
            )

        self.logger.info(
            f"Capture device opened: {[t.kind for t in tracks]} "
            f"({constraints.video_size}@{constraints.frame_rate}fps)"
        )
        return tracks

    def _open_video_player(self, constraints: CaptureConstraints) -> MediaPlayer:
        input_format = VIDEO_INPUT_FORMATS.get(self.system)
        options = {
            "video_size": constraints.video_size,
            "framerate": str(constraints.frame_rate),
        }
        return MediaPlayer(
            self._video_source(constraints),
            format=input_format,
            options=options,
        )

    def _open_audio_player(self) -> MediaPlayer:
        return MediaPlayer(self.audio_device, format=AUDIO_INPUT_FORMAT)

    def _video_source(self, constraints: CaptureConstraints) -> str:
        if self.system == "Windows":
            if constraints.audio and self.audio_device != "default":
                return f"video={self.camera_device}:audio={self.audio_device}"
            return f"video={self.camera_device}"
        if self.system == "Darwin":
            audio = "0" if constraints.audio else "none"
            return f"{self.camera_device}:{audio}"
        return self.camera_device

    def release(self, tracks: List[Any]) -> None:
        for track in tracks:
            try:
                track.stop()
            except Exception as e:
                self.logger.warning(f"Error stopping {track.kind} track: {e}")

    def is_available(self) -> bool:
        if self.system == "Linux":
            return Path(self.camera_device).exists()
        return True

    def get_device_info(self) -> dict:
        return {
            "backend": "aiortc",
            "os": self.system,
            "camera_device": self.camera_device,
            "audio_device": self.audio_device,
            "input_format": VIDEO_INPUT_FORMATS.get(self.system),
            "available": self.is_available(),
        }

    def describe_source(self) -> Optional[str]:
        return self.camera_device
