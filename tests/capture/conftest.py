"""
Capture Test Configuration and Fixtures

Shared fixtures for capture module tests.
"""

import pytest

from capture.controllers.device_capture_manager import DeviceCaptureManager
from capture.implementations.mock_device import MockDevice

# =============================================================================
# DEVICE FIXTURES
# =============================================================================


@pytest.fixture
def slow_device():
    """
    Provide MockDevice whose acquire() suspends (permission prompt).

    Usage:
        async def test_race(slow_device):
            await slow_device.acquire(CaptureConstraints())
    """
    return MockDevice(acquire_delay=0.05)


@pytest.fixture
def slow_manager(slow_device):
    """Provide DeviceCaptureManager over the slow mock device"""
    manager = DeviceCaptureManager(slow_device)
    yield manager
    manager.cleanup()


# =============================================================================
# CALLBACK TRACKING FIXTURES
# =============================================================================


@pytest.fixture
def state_recorder():
    """
    Collect every value passed to a callback.

    Usage:
        manager.on_state_change = state_recorder.append
    """
    return []
