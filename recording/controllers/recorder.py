"""
Recorder

Consumes a borrowed capture source and produces a chunked, downloadable
recording artifact.

Responsibilities:
- Pick the first supported encoding from the preference list
- Pull one chunk from the encoder every chunk interval
- Finalize the chunks into one RecordingArtifact on stop

The recorder reads its own relay proxies of the source tracks and stops
only those; camera-stop is the orchestrator's job and happens after
recorder.stop().
"""

import asyncio
import logging
from datetime import datetime, timedelta, timezone
from typing import Any, Callable, List, Optional

from capture.models.capture_source import CaptureSource
from config.settings import RECORDING_CHUNK_INTERVAL, RECORDING_MIME_PREFERENCES
from core.event_bus import RECORDING_CHUNK, RECORDING_STATE, EventBus
from recording.constants import RecorderErrorKind, RecorderState
from recording.interfaces.encoder_interface import MediaEncoderInterface, RecorderError
from recording.models.chunk_stream import ChunkStream
from recording.models.recording_artifact import RecordingArtifact
from recording.utils.recording_utils import generate_artifact_name


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class Recorder:
    """
    Local recorder for one capture source at a time.

    Usage:
        recorder = Recorder(RecordingFactory.create_encoder())
        await recorder.start(source)
        ...
        artifact = await recorder.stop()
        artifact.materialize()
    """

    def __init__(
        self,
        encoder: MediaEncoderInterface,
        event_bus: Optional[EventBus] = None,
        chunk_interval: float = RECORDING_CHUNK_INTERVAL,
        mime_preferences: Optional[List[str]] = None,
        clock: Callable[[], datetime] = _utc_now,
    ):
        """
        Initialize recorder.

        Args:
            encoder: Encoder backend (PyAV or mock)
            event_bus: Optional bus receiving recording.* events
            chunk_interval: Seconds between chunks
            mime_preferences: Encodings to probe, most preferred first
            clock: Returns the stop time used to name artifacts
        """
        self.logger = logging.getLogger(__name__)
        self.encoder = encoder
        self.event_bus = event_bus
        self.chunk_interval = chunk_interval
        self.mime_preferences = list(mime_preferences or RECORDING_MIME_PREFERENCES)
        self.clock = clock

        self.state = RecorderState.IDLE
        self.mime_type: Optional[str] = None
        self._source: Optional[CaptureSource] = None
        self._chunks: Optional[ChunkStream] = None
        self._chunk_task: Optional[asyncio.Task] = None
        self._tracks: List[Any] = []
        self._started_at: Optional[datetime] = None
        self._last_name: Optional[str] = None

        # Callbacks
        self.on_chunk: Optional[Callable[[bytes], None]] = None
        self.on_state_change: Optional[Callable[[RecorderState], None]] = None

        self.logger.info(
            f"Recorder initialized (chunk interval: {chunk_interval}s, "
            f"preferences: {self.mime_preferences})"
        )

    @property
    def is_recording(self) -> bool:
        return self.state == RecorderState.RECORDING

    @property
    def source(self) -> Optional[CaptureSource]:
        """Borrowed source, None when not recording"""
        return self._source

    @property
    def chunks(self) -> Optional[ChunkStream]:
        """Chunk stream of the current (or last) recording"""
        return self._chunks

    def select_mime_type(self) -> str:
        """
        Probe the preference list.

        Raises:
            RecorderError: UNSUPPORTED if no encoding is available
        """
        for mime_type in self.mime_preferences:
            if self.encoder.is_type_supported(mime_type):
                return mime_type
        raise RecorderError(
            f"None of the recording formats are supported: {self.mime_preferences}",
            RecorderErrorKind.UNSUPPORTED,
        )

    async def start(self, source: Optional[CaptureSource]) -> None:
        """
        Start recording the source.

        Raises:
            RecorderError: NO_SOURCE if the camera is off,
                           UNSUPPORTED if no encoding is available
        """
        if self.state != RecorderState.IDLE:
            self.logger.warning(f"Cannot start recording - state is {self.state.value}")
            return

        if source is None or not source.is_live:
            raise RecorderError(
                "Cannot record without a live camera source - turn the camera on first",
                RecorderErrorKind.NO_SOURCE,
            )

        mime_type = self.select_mime_type()
        tracks = source.subscribe()
        try:
            await self.encoder.start(tracks, mime_type)
        except Exception:
            self._release_tracks(tracks)
            raise

        self._tracks = tracks
        self._source = source
        self.mime_type = mime_type
        self._chunks = ChunkStream()
        self._started_at = self.clock()
        self._set_state(RecorderState.RECORDING)

        self._chunk_task = asyncio.ensure_future(self._chunk_loop(self._chunks))

        self.logger.info(f"Recording started: {source.describe()} as {mime_type}")

    async def _chunk_loop(self, chunks: ChunkStream) -> None:
        while True:
            await asyncio.sleep(self.chunk_interval)

            if self._source is not None and not self._source.is_live:
                self.logger.warning("Recording source is no longer live")

            self._emit_chunk(chunks, await self.encoder.flush())

    def _emit_chunk(self, chunks: ChunkStream, data: bytes) -> None:
        if not data or not chunks.append(data):
            return

        if self.event_bus:
            self.event_bus.publish(RECORDING_CHUNK, len(data))

        if self.on_chunk:
            try:
                self.on_chunk(data)
            except Exception as e:
                self.logger.error(f"Error in chunk callback: {e}")

    async def stop(self) -> Optional[RecordingArtifact]:
        """
        Stop recording and finalize the artifact.

        An encoder failure while stopping is logged; the artifact then holds
        the chunks collected so far.

        Returns:
            RecordingArtifact, or None if not recording
        """
        if self.state != RecorderState.RECORDING:
            return None

        self._set_state(RecorderState.STOPPING)
        chunks = self._chunks

        if self._chunk_task and not self._chunk_task.done():
            self._chunk_task.cancel()
            await asyncio.wait([self._chunk_task])
        self._chunk_task = None

        try:
            self._emit_chunk(chunks, await self.encoder.flush())
            self._emit_chunk(chunks, await self.encoder.stop())
        except Exception as e:
            self.logger.error(
                f"Encoder failed while stopping, keeping {chunks.chunk_count} chunks: {e}"
            )
        finally:
            chunks.close()
            self._release_tracks(self._tracks)
            self._tracks = []
            self._source = None
            self._set_state(RecorderState.IDLE)

        artifact = RecordingArtifact(
            name=self._artifact_name(),
            mime_type=self.mime_type,
            data=chunks.join(),
            chunk_count=chunks.chunk_count,
        )

        self.logger.info(
            f"Recording stopped: {artifact.name} "
            f"({artifact.chunk_count} chunks, {artifact.size_bytes} bytes)"
        )
        return artifact

    @staticmethod
    def _release_tracks(tracks: List[Any]) -> None:
        """Stop our relay proxies (the source tracks stay live)"""
        for track in tracks:
            track.stop()

    def _artifact_name(self) -> str:
        stop_time = self.clock()
        name = generate_artifact_name(stop_time)
        # Two stops within the same millisecond
        while name == self._last_name:
            stop_time += timedelta(milliseconds=1)
            name = generate_artifact_name(stop_time)
        self._last_name = name
        return name

    def _set_state(self, state: RecorderState) -> None:
        self.state = state

        if self.event_bus:
            self.event_bus.publish(RECORDING_STATE, state)

        if self.on_state_change:
            try:
                self.on_state_change(state)
            except Exception as e:
                self.logger.error(f"Error in recorder state callback: {e}")

    def get_status(self) -> dict:
        return {
            "state": self.state.value,
            "mime_type": self.mime_type,
            "chunks": self._chunks.chunk_count if self._chunks else 0,
            "bytes": self._chunks.total_bytes if self._chunks else 0,
            "started_at": self._started_at.isoformat() if self._started_at else None,
        }

    async def cleanup(self) -> None:
        """Stop any recording in progress and drop its artifact"""
        self.logger.info("Cleaning up recorder...")
        await self.stop()
        self.logger.info("Recorder cleanup complete")
