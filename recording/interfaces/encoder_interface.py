"""
Media Encoder Interface

Abstract interface for the encoder/muxer behind the Recorder.

The Recorder depends on this abstraction, not on PyAV directly, so its
chunking and artifact logic can be tested with MockEncoder.
"""

from abc import ABC, abstractmethod
from typing import Any, List

from core.errors import BroadcastError, ErrorCause
from recording.constants import RecorderErrorKind


class MediaEncoderInterface(ABC):
    """
    Abstract base class for media encoders.

    Bytes produced by flush() and stop() concatenated in call order form
    one valid container file.
    """

    @abstractmethod
    def is_type_supported(self, mime_type: str) -> bool:
        """
        Check if the container and codecs in mime_type can be encoded.

        Example:
            encoder.is_type_supported("video/webm;codecs=vp9,opus")
        """

    @abstractmethod
    async def start(self, tracks: List[Any], mime_type: str) -> None:
        """
        Start consuming tracks and encoding them into mime_type.

        Tracks are borrowed: the encoder reads frames but never stops them.

        Raises:
            RecorderError: If mime_type cannot be encoded
        """

    @abstractmethod
    async def flush(self) -> bytes:
        """Return bytes muxed since the previous flush (may be empty)"""

    @abstractmethod
    async def stop(self) -> bytes:
        """Drain encoders, finalize the container and return the tail bytes"""

    @abstractmethod
    def is_encoding(self) -> bool:
        """True between start() and stop()"""


class RecorderError(BroadcastError):
    """
    Exception raised when recording cannot start.

    Examples:
    - Camera is off (NO_SOURCE)
    - No container/codec from the preference list is available (UNSUPPORTED)
    """

    cause = ErrorCause.UNSUPPORTED

    def __init__(self, message: str, kind: RecorderErrorKind = RecorderErrorKind.UNSUPPORTED):
        super().__init__(message, kind)
        if kind == RecorderErrorKind.NO_SOURCE:
            # Camera off is a hardware cause
            self.cause = ErrorCause.HARDWARE
