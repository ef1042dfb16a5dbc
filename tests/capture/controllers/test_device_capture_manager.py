"""
Device Capture Manager Tests

Tests for DeviceCaptureManager showing:
- Open/close lifecycle
- Idempotent close and stale handles
- Per-borrower track proxies
- Constraint validation
- Concurrent opens
- Device error propagation

To run:
    pytest tests/capture/controllers/test_device_capture_manager.py -v
"""

import asyncio

import pytest

from capture.constants import DeviceErrorKind, DeviceState
from capture.controllers.device_capture_manager import DeviceCaptureManager
from capture.interfaces.device_interface import DeviceError
from capture.models.capture_source import CaptureConstraints
from core.errors import ErrorCause
from core.event_bus import DEVICE_STATE, EventBus

# =============================================================================
# OPEN TESTS
# =============================================================================


@pytest.mark.unit
async def test_open_returns_live_source(device_manager):
    """Test opening the device yields a live audio+video source."""
    source = await device_manager.open()

    assert device_manager.is_on is True
    assert source.is_live is True
    assert source.audio_track is not None
    assert source.video_track is not None
    assert device_manager.current_source is source


@pytest.mark.unit
async def test_open_video_only(device_manager):
    """Test audio can be left out by the constraints."""
    source = await device_manager.open(CaptureConstraints(audio=False))

    assert [t.kind for t in source.tracks] == ["video"]


@pytest.mark.unit
async def test_open_twice_reuses_source(device_manager, mock_device):
    """Test a second open while on returns the same source."""
    first = await device_manager.open()
    second = await device_manager.open()

    assert second is first
    assert mock_device.acquire_count == 1


@pytest.mark.unit
async def test_concurrent_opens_share_one_source(slow_manager, slow_device):
    """Test two racing opens end with one source and no leaked tracks."""
    first, second = await asyncio.gather(slow_manager.open(), slow_manager.open())

    assert first is second
    assert slow_manager.open_count == 1
    # The loser's tracks were released immediately
    assert slow_device.release_count == 1


# =============================================================================
# CLOSE TESTS
# =============================================================================


@pytest.mark.unit
async def test_close_stops_tracks(device_manager, mock_device):
    """Test close stops every track and turns the flag off."""
    source = await device_manager.open()

    assert device_manager.close(source) is True

    assert device_manager.is_on is False
    assert source.is_live is False
    assert source.is_revoked is True
    assert all(t.readyState == "ended" for t in source.tracks)
    assert set(mock_device.released_tracks) == set(source.tracks)


@pytest.mark.unit
async def test_close_is_idempotent(device_manager, mock_device):
    """Test closing twice stops tracks once."""
    source = await device_manager.open()

    assert device_manager.close(source) is True
    assert device_manager.close(source) is False
    assert device_manager.close(None) is False

    assert mock_device.release_count == 1
    assert device_manager.close_count == 1


@pytest.mark.unit
async def test_stale_handle_cannot_close_new_source(device_manager):
    """Test a handle from an earlier open never closes a later one."""
    old = await device_manager.open()
    device_manager.close(old)
    new = await device_manager.open()

    assert new.generation > old.generation
    assert old.is_live is False
    assert device_manager.close(old) is False
    assert new.is_live is True


# =============================================================================
# SUBSCRIBE TESTS
# =============================================================================


async def read_pts(track, count):
    return [(await track.recv()).pts for _ in range(count)]


@pytest.mark.unit
async def test_every_borrower_gets_every_frame(device_manager):
    """Test two subscribers each receive the full video feed."""
    source = await device_manager.open(CaptureConstraints(audio=False))
    (first,) = source.subscribe()
    (second,) = source.subscribe()

    first_pts, second_pts = await asyncio.gather(
        read_pts(first, 3), read_pts(second, 3)
    )

    assert first is not second
    assert first_pts == second_pts
    assert len(set(first_pts)) == 3

    first.stop()
    second.stop()


@pytest.mark.unit
async def test_stopping_a_proxy_keeps_source_live(device_manager):
    """Test a borrower ending its proxies never stops the device tracks."""
    source = await device_manager.open()
    proxies = source.subscribe()

    for proxy in proxies:
        proxy.stop()

    assert source.is_live is True
    assert all(t.readyState == "live" for t in source.tracks)


@pytest.mark.unit
async def test_subscribe_to_closed_source(device_manager):
    """Test a closed source hands out no proxies."""
    source = await device_manager.open()
    device_manager.close(source)

    with pytest.raises(ValueError):
        source.subscribe()


# =============================================================================
# VALIDATION TESTS
# =============================================================================


@pytest.mark.unit
@pytest.mark.parametrize(
    "constraints",
    [
        CaptureConstraints(audio=False, video=False),
        CaptureConstraints(width=0),
        CaptureConstraints(width=10000),
        CaptureConstraints(frame_rate=120, max_frame_rate=60),
    ],
)
async def test_invalid_constraints_are_overconstrained(device_manager, mock_device, constraints):
    """Test impossible requests fail before touching the device."""
    with pytest.raises(DeviceError) as exc_info:
        await device_manager.open(constraints)

    assert exc_info.value.kind == DeviceErrorKind.OVERCONSTRAINED
    assert mock_device.acquire_count == 0
    assert device_manager.is_on is False


# =============================================================================
# ERROR TESTS
# =============================================================================


@pytest.mark.unit
@pytest.mark.parametrize(
    "kind",
    [
        DeviceErrorKind.DENIED,
        DeviceErrorKind.NOT_FOUND,
        DeviceErrorKind.BUSY,
        DeviceErrorKind.UNKNOWN,
    ],
)
async def test_device_failure_propagates_kind(device_manager, mock_device, kind):
    """Test each device failure reaches the caller with its kind."""
    mock_device.simulate_failure(kind)

    with pytest.raises(DeviceError) as exc_info:
        await device_manager.open()

    assert exc_info.value.kind == kind
    assert exc_info.value.cause == ErrorCause.HARDWARE
    assert device_manager.is_on is False


@pytest.mark.unit
async def test_open_after_failure_cleared(device_manager, mock_device):
    """Test the device can be opened once the failure is gone."""
    mock_device.simulate_failure(DeviceErrorKind.BUSY)
    with pytest.raises(DeviceError):
        await device_manager.open()

    mock_device.clear_failure()
    source = await device_manager.open()

    assert source.is_live is True


# =============================================================================
# EVENT TESTS
# =============================================================================


@pytest.mark.unit
async def test_state_events(mock_device, state_recorder):
    """Test on/off are published on the bus and the callback."""
    bus = EventBus()
    published = []
    bus.subscribe(DEVICE_STATE, lambda _event, state: published.append(state))

    manager = DeviceCaptureManager(mock_device, bus)
    manager.on_state_change = state_recorder.append

    source = await manager.open()
    manager.close(source)

    assert published == [DeviceState.ON, DeviceState.OFF]
    assert state_recorder == [DeviceState.ON, DeviceState.OFF]


@pytest.mark.unit
async def test_get_status(device_manager):
    """Test status reflects the open source."""
    await device_manager.open()

    status = device_manager.get_status()

    assert status["on"] is True
    assert status["open_count"] == 1
    assert status["device"]["backend"] == "mock"
