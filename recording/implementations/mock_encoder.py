"""
Mock Media Encoder

Deterministic encoder for testing the recorder without PyAV or codecs.

Every flush() returns chunk_size bytes (the first one starts with the
EBML magic number, like a real WebM stream); stop() returns tail_size bytes.

With read_media=True it also pulls frames from its tracks like the real
encoder and keeps their timestamps for assertions.
"""

import asyncio
import logging
from typing import Any, Dict, Iterable, List, Optional

from aiortc.mediastreams import MediaStreamError

from recording.constants import EBML_MAGIC, MIME_CODECS, RecorderErrorKind
from recording.interfaces.encoder_interface import MediaEncoderInterface, RecorderError


class MockEncoder(MediaEncoderInterface):
    """
    Mock encoder.

    Usage:
        encoder = MockEncoder(supported_types=["video/webm"])
        await encoder.start(tracks, "video/webm")
        await encoder.flush()  # 1024 bytes
    """

    def __init__(
        self,
        chunk_size: int = 1024,
        tail_size: int = 256,
        supported_types: Optional[Iterable[str]] = None,
        read_media: bool = False,
    ):
        self.logger = logging.getLogger(__name__)
        self.chunk_size = chunk_size
        self.tail_size = tail_size
        self.read_media = read_media
        self.supported_types = set(
            MIME_CODECS if supported_types is None else supported_types
        )

        self._encoding = False
        self._chunk_index = 0
        self.mime_type: Optional[str] = None
        self.tracks: List[Any] = []
        self._reader_tasks: List[asyncio.Task] = []
        self._stop_error: Optional[Exception] = None

        # Counters for assertions
        self.received_pts: Dict[str, List[int]] = {}
        self.start_count = 0
        self.flush_count = 0
        self.stop_count = 0
        self.probed_types: List[str] = []

        self.logger.info(
            f"Mock Encoder initialized (chunk: {chunk_size} bytes, tail: {tail_size} bytes)"
        )

    def is_type_supported(self, mime_type: str) -> bool:
        self.probed_types.append(mime_type)
        return mime_type in self.supported_types

    def is_encoding(self) -> bool:
        return self._encoding

    async def start(self, tracks: List[Any], mime_type: str) -> None:
        if self._encoding:
            raise RuntimeError("Encoder already started")
        if mime_type not in self.supported_types:
            raise RecorderError(
                f"Encoding {mime_type} is not supported", RecorderErrorKind.UNSUPPORTED
            )

        self.start_count += 1
        self._encoding = True
        self._chunk_index = 0
        self.mime_type = mime_type
        self.tracks = list(tracks)
        if self.read_media:
            self.received_pts = {track.kind: [] for track in self.tracks}
            self._reader_tasks = [
                asyncio.ensure_future(self._read_track(track)) for track in self.tracks
            ]
        self.logger.info(f"[MOCK] Encoding {[t.kind for t in tracks]} as {mime_type}")

    async def _read_track(self, track: Any) -> None:
        while True:
            try:
                frame = await track.recv()
            except MediaStreamError:
                return
            self.received_pts[track.kind].append(frame.pts)

    async def flush(self) -> bytes:
        if not self._encoding:
            return b""
        self.flush_count += 1
        return self._next_chunk(self.chunk_size)

    async def stop(self) -> bytes:
        if not self._encoding:
            return b""
        self.stop_count += 1
        self._encoding = False
        for task in self._reader_tasks:
            task.cancel()
        if self._reader_tasks:
            await asyncio.wait(self._reader_tasks)
        self._reader_tasks = []
        self.tracks = []

        if self._stop_error is not None:
            error, self._stop_error = self._stop_error, None
            self.logger.error(f"[MOCK] Simulated encoder stop failure: {error}")
            raise error

        tail = self._next_chunk(self.tail_size)
        self.logger.info(f"[MOCK] Encoder stopped after {self._chunk_index} chunks")
        return tail

    def _next_chunk(self, size: int) -> bytes:
        if size <= 0:
            return b""
        if self._chunk_index == 0:
            payload = EBML_MAGIC + bytes(max(size - len(EBML_MAGIC), 0))
            payload = payload[:size]
        else:
            payload = bytes([self._chunk_index % 256]) * size
        self._chunk_index += 1
        return payload

    # =========================================================================
    # TEST HELPERS
    # =========================================================================

    def set_supported_types(self, mime_types: Iterable[str]) -> None:
        self.supported_types = set(mime_types)

    def simulate_stop_failure(self, error: Exception) -> None:
        """Make the next stop() raise error (the tail chunk is lost)"""
        self._stop_error = error
        self.logger.info(f"[MOCK] Next stop will fail with {type(error).__name__}")
