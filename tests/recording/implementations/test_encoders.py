"""
Encoder Tests

Tests for the encoder backends showing:
- MockEncoder chunk shapes and test helpers
- PyAV capability probing
- A short real WebM encode of synthetic tracks (slow)
- Relay-shared frames left untouched by the encoder (slow)
- Factory mode selection

To run:
    pytest tests/recording/implementations/test_encoders.py -v
"""

import asyncio

import pytest
from aiortc.contrib.media import MediaRelay
from aiortc.mediastreams import (
    VIDEO_CLOCK_RATE,
    VIDEO_PTIME,
    AudioStreamTrack,
    MediaStreamError,
    VideoStreamTrack,
)

from recording.constants import EBML_MAGIC, RecorderErrorKind
from recording.factory import RecordingFactory
from recording.implementations.av_encoder import AvMediaEncoder
from recording.implementations.mock_encoder import MockEncoder
from recording.interfaces.encoder_interface import RecorderError

# =============================================================================
# MOCK ENCODER TESTS
# =============================================================================


@pytest.mark.unit
async def test_mock_encoder_chunks():
    """Test the first chunk carries the EBML magic and the tail is sized."""
    encoder = MockEncoder(chunk_size=32, tail_size=8)
    await encoder.start([VideoStreamTrack()], "video/webm")

    first = await encoder.flush()
    second = await encoder.flush()
    tail = await encoder.stop()

    assert first.startswith(EBML_MAGIC)
    assert len(first) == len(second) == 32
    assert len(tail) == 8
    assert encoder.is_encoding() is False


@pytest.mark.unit
async def test_mock_encoder_idle_flush_is_empty():
    """Test flush/stop before start return nothing."""
    encoder = MockEncoder()

    assert await encoder.flush() == b""
    assert await encoder.stop() == b""


@pytest.mark.unit
async def test_mock_encoder_unsupported_type():
    """Test start rejects types outside the supported set."""
    encoder = MockEncoder(supported_types=["video/webm"])

    with pytest.raises(RecorderError) as exc_info:
        await encoder.start([], "video/webm;codecs=vp9,opus")

    assert exc_info.value.kind == RecorderErrorKind.UNSUPPORTED


# =============================================================================
# PYAV ENCODER TESTS
# =============================================================================


@pytest.mark.unit
def test_av_encoder_rejects_unknown_types():
    """Test types outside the WebM table are never supported."""
    encoder = AvMediaEncoder()

    assert encoder.is_type_supported("video/mp4") is False
    assert encoder.is_type_supported("video/x-matroska;codecs=avc1") is False


@pytest.mark.unit
async def test_av_encoder_start_unsupported():
    """Test start refuses an unknown type."""
    encoder = AvMediaEncoder()

    with pytest.raises(RecorderError):
        await encoder.start([], "video/mp4")

    assert encoder.is_encoding() is False


@pytest.mark.slow
async def test_av_encoder_produces_webm():
    """Test a short encode of synthetic tracks yields a WebM byte stream."""
    encoder = AvMediaEncoder(width=320, height=240, frame_rate=15)
    mime_type = "video/webm;codecs=vp8,opus"
    if not encoder.is_type_supported(mime_type):
        pytest.skip("libvpx/libopus not available in this PyAV build")

    tracks = [AudioStreamTrack(), VideoStreamTrack()]
    await encoder.start(tracks, mime_type)
    await asyncio.sleep(0.5)

    data = await encoder.flush()
    data += await encoder.stop()

    assert data.startswith(EBML_MAGIC)
    assert encoder.get_stats()["video_frames"] > 0

    for track in tracks:
        track.stop()


@pytest.mark.slow
async def test_av_encoder_leaves_shared_frames_untouched():
    """Test encoding from a relay never rewrites frames another reader receives."""
    # Same size as the synthetic frames, so no reformat copy happens upstream
    encoder = AvMediaEncoder(width=640, height=480, frame_rate=30)
    mime_type = "video/webm;codecs=vp8,opus"
    if not encoder.is_type_supported(mime_type):
        pytest.skip("libvpx/libopus not available in this PyAV build")

    camera = VideoStreamTrack()
    relay = MediaRelay()
    recorded, sent = relay.subscribe(camera), relay.subscribe(camera)
    sent_pts = []

    async def send():
        while True:
            try:
                frame = await sent.recv()
            except MediaStreamError:
                return
            sent_pts.append(frame.pts)

    sender = asyncio.ensure_future(send())
    await encoder.start([recorded], mime_type)
    await asyncio.sleep(0.5)
    await encoder.stop()

    sender.cancel()
    await asyncio.wait([sender])
    camera.stop()

    step = int(VIDEO_PTIME * VIDEO_CLOCK_RATE)
    assert encoder.get_stats()["video_frames"] > 0
    assert len(sent_pts) > 1
    assert all(b - a == step for a, b in zip(sent_pts, sent_pts[1:]))


# =============================================================================
# FACTORY TESTS
# =============================================================================


@pytest.mark.unit
def test_factory_mock_mode():
    """Test mock mode returns MockEncoder."""
    encoder = RecordingFactory.create_encoder(mode="mock")

    assert isinstance(encoder, MockEncoder)
    assert RecordingFactory.supported_types(encoder) == [
        "video/webm;codecs=vp9,opus",
        "video/webm;codecs=vp8,opus",
        "video/webm",
    ]
