"""
PyAV Media Encoder

Encodes aiortc tracks to WebM (VP9/VP8 + Opus/Vorbis) with PyAV, muxing
into an in-memory sink so the recorder can pull chunks while recording.

One reader task per track pulls frames with track.recv() and encodes them
on the event loop thread, so muxing never happens concurrently.
"""

import asyncio
import logging
from fractions import Fraction
from typing import Any, Dict, List, Optional

import av

from config.settings import CAMERA_FRAME_RATE, CAMERA_HEIGHT, CAMERA_WIDTH
from recording.constants import (
    AUDIO_FRAME_SIZES,
    AUDIO_LAYOUT,
    AUDIO_SAMPLE_FORMATS,
    AUDIO_SAMPLE_RATE,
    MIME_CODECS,
    RecorderErrorKind,
)
from recording.interfaces.encoder_interface import MediaEncoderInterface, RecorderError


class _ChunkSink:
    """Write-only file object collecting muxer output until flushed"""

    def __init__(self):
        self._buffer = bytearray()
        self.total_bytes = 0

    def write(self, data: bytes) -> int:
        self._buffer.extend(data)
        self.total_bytes += len(data)
        return len(data)

    def drain(self) -> bytes:
        data = bytes(self._buffer)
        self._buffer.clear()
        return data


class AvMediaEncoder(MediaEncoderInterface):
    """
    WebM encoder built on PyAV.

    Usage:
        encoder = AvMediaEncoder()
        if encoder.is_type_supported("video/webm;codecs=vp9,opus"):
            await encoder.start(source.subscribe(), "video/webm;codecs=vp9,opus")
        chunk = await encoder.flush()
        tail = await encoder.stop()
    """

    def __init__(
        self,
        width: int = CAMERA_WIDTH,
        height: int = CAMERA_HEIGHT,
        frame_rate: int = CAMERA_FRAME_RATE,
        video_bitrate: int = 2_500_000,
    ):
        """
        Initialize encoder.

        Args:
            width, height: Output size (frames are scaled to it)
            frame_rate: Output frame rate
            video_bitrate: Target video bitrate (bits/s)
        """
        self.logger = logging.getLogger(__name__)
        self.width = width
        self.height = height
        self.frame_rate = frame_rate
        self.video_bitrate = video_bitrate

        self._sink: Optional[_ChunkSink] = None
        self._container = None
        self._video_stream = None
        self._audio_stream = None
        self._resampler: Optional[av.AudioResampler] = None
        self._codecs: Optional[tuple] = None
        self._reader_tasks: List[asyncio.Task] = []

        # Counters
        self._video_frames = 0
        self._audio_samples = 0
        self._video_origin: Optional[Fraction] = None
        self._last_video_pts = -1

        self.logger.info("PyAV encoder initialized")

    # =========================================================================
    # CAPABILITY PROBING
    # =========================================================================

    @staticmethod
    def _codec_available(name: str) -> bool:
        try:
            av.Codec(name, "w")
            return True
        except (ValueError, av.FFmpegError):
            return False

    def is_type_supported(self, mime_type: str) -> bool:
        codecs = MIME_CODECS.get(mime_type.replace(" ", "").lower())
        if codecs is None:
            return False

        container, video_codec, audio_codec = codecs
        if container not in av.formats_available:
            return False
        return self._codec_available(video_codec) and self._codec_available(audio_codec)

    def is_encoding(self) -> bool:
        return self._container is not None

    # =========================================================================
    # LIFECYCLE
    # =========================================================================

    async def start(self, tracks: List[Any], mime_type: str) -> None:
        if self._container is not None:
            raise RuntimeError("Encoder already started")

        if not self.is_type_supported(mime_type):
            raise RecorderError(
                f"Encoding {mime_type} is not supported", RecorderErrorKind.UNSUPPORTED
            )

        self._codecs = MIME_CODECS[mime_type.replace(" ", "").lower()]
        container_format = self._codecs[0]

        self._sink = _ChunkSink()
        self._container = av.open(
            self._sink,
            mode="w",
            format=container_format,
            container_options={"live": "1"},
        )
        self._video_stream = None
        self._audio_stream = None
        self._resampler = None
        self._video_frames = 0
        self._audio_samples = 0
        self._video_origin = None
        self._last_video_pts = -1

        # Streams must exist before the first packet is muxed
        for track in tracks:
            if track.kind == "video":
                self._add_video_stream()
            elif track.kind == "audio":
                self._add_audio_stream()

        self._reader_tasks = [
            asyncio.ensure_future(self._read_track(track)) for track in tracks
        ]

        self.logger.info(
            f"Encoding {[t.kind for t in tracks]} as {mime_type} "
            f"(video: {self._codecs[1]}, audio: {self._codecs[2]})"
        )

    def _add_video_stream(self) -> None:
        stream = self._container.add_stream(self._codecs[1], rate=self.frame_rate)
        stream.pix_fmt = "yuv420p"
        stream.bit_rate = self.video_bitrate
        stream.width = self.width
        stream.height = self.height
        self._video_stream = stream

    def _add_audio_stream(self) -> None:
        audio_codec = self._codecs[2]
        stream = self._container.add_stream(audio_codec, rate=AUDIO_SAMPLE_RATE)
        stream.codec_context.layout = AUDIO_LAYOUT
        self._audio_stream = stream
        self._resampler = av.AudioResampler(
            format=AUDIO_SAMPLE_FORMATS.get(audio_codec, "s16"),
            layout=AUDIO_LAYOUT,
            rate=AUDIO_SAMPLE_RATE,
            frame_size=AUDIO_FRAME_SIZES.get(audio_codec),
        )

    async def _read_track(self, track: Any) -> None:
        while True:
            try:
                frame = await track.recv()
            except Exception as e:
                # MediaStreamError once the track has ended
                self.logger.info(f"{track.kind} track ended: {str(e) or type(e).__name__}")
                return

            if self._container is None:
                return

            try:
                if track.kind == "video":
                    self._encode_video(frame)
                else:
                    self._encode_audio(frame)
            except (av.FFmpegError, ValueError) as e:
                self.logger.error(f"Error encoding {track.kind} frame: {e}")

    def _encode_video(self, frame: av.VideoFrame) -> None:
        stream = self._video_stream
        if stream is None:
            return

        # The relay hands the same frame to every borrower: encode a copy
        own = frame.reformat(width=stream.width, height=stream.height, format="yuv420p")
        if own is frame:
            own = av.VideoFrame.from_ndarray(frame.to_ndarray(), format="yuv420p")

        own.pts = self._video_pts(frame)
        own.time_base = Fraction(1, self.frame_rate)
        self._video_frames += 1

        for packet in stream.encode(own):
            self._container.mux(packet)

    def _video_pts(self, frame: av.VideoFrame) -> int:
        """Output pts from the capture timestamp, strictly increasing"""
        pts = self._last_video_pts + 1
        if frame.pts is not None and frame.time_base:
            captured = frame.pts * frame.time_base
            if self._video_origin is None:
                self._video_origin = captured
            pts = max(pts, int((captured - self._video_origin) * self.frame_rate))
        self._last_video_pts = pts
        return pts

    def _encode_audio(self, frame: av.AudioFrame) -> None:
        stream = self._audio_stream
        if stream is None:
            return

        for resampled in self._resampler.resample(frame):
            resampled.pts = self._audio_samples
            resampled.time_base = Fraction(1, AUDIO_SAMPLE_RATE)
            self._audio_samples += resampled.samples

            for packet in stream.encode(resampled):
                self._container.mux(packet)

    async def flush(self) -> bytes:
        if self._sink is None:
            return b""
        return self._sink.drain()

    async def stop(self) -> bytes:
        if self._container is None:
            return b""

        for task in self._reader_tasks:
            task.cancel()
        if self._reader_tasks:
            await asyncio.wait(self._reader_tasks)
        self._reader_tasks = []

        container = self._container
        self._container = None

        try:
            for stream in (self._video_stream, self._audio_stream):
                if stream is None:
                    continue
                for packet in stream.encode(None):
                    container.mux(packet)
        except (av.FFmpegError, ValueError) as e:
            self.logger.warning(f"Error draining encoders: {e}")
        finally:
            container.close()

        tail = self._sink.drain()
        self.logger.info(
            f"Encoder stopped ({self._video_frames} video frames, "
            f"{self._audio_samples} audio samples, {self._sink.total_bytes} bytes)"
        )
        self._sink = None
        return tail

    def get_stats(self) -> Dict[str, Any]:
        return {
            "encoding": self.is_encoding(),
            "codecs": self._codecs,
            "video_frames": self._video_frames,
            "audio_samples": self._audio_samples,
            "bytes_written": self._sink.total_bytes if self._sink else 0,
        }
