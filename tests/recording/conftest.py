"""
Recording Test Configuration and Fixtures

Shared fixtures for recording module tests.
"""

from datetime import datetime, timezone

import pytest

from recording.controllers.recorder import Recorder
from recording.implementations.mock_encoder import MockEncoder

FIXED_STOP_TIME = datetime(2025, 1, 15, 14, 30, 22, 123000, tzinfo=timezone.utc)

# =============================================================================
# ENCODER FIXTURES
# =============================================================================


@pytest.fixture
def mock_encoder():
    """
    Provide MockEncoder (1024-byte chunks, 256-byte tail).

    Usage:
        def test_encoder(mock_encoder):
            mock_encoder.set_supported_types(["video/webm"])
    """
    return MockEncoder()


# =============================================================================
# RECORDER FIXTURES
# =============================================================================


@pytest.fixture
async def recorder(mock_encoder):
    """
    Provide a Recorder pulling a chunk every 10ms.

    Usage:
        async def test_record(recorder, live_source):
            await recorder.start(live_source)
    """
    rec = Recorder(mock_encoder, chunk_interval=0.01)
    yield rec
    await rec.cleanup()


@pytest.fixture
async def fixed_clock_recorder(mock_encoder):
    """Provide a Recorder whose clock never advances"""
    rec = Recorder(mock_encoder, chunk_interval=0.01, clock=lambda: FIXED_STOP_TIME)
    yield rec
    await rec.cleanup()


# =============================================================================
# CALLBACK TRACKING FIXTURES
# =============================================================================


@pytest.fixture
def chunk_sink():
    """Collect chunks passed to Recorder.on_chunk"""
    return []
