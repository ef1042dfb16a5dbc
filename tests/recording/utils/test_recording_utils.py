"""
Recording Utilities Tests

Tests for utility functions showing:
- Stop timestamp formatting
- Artifact name generation
- MIME type parsing

To run:
    pytest tests/recording/utils/test_recording_utils.py -v
"""

from datetime import datetime, timedelta, timezone

import pytest

from recording.utils.recording_utils import (
    format_stop_timestamp,
    generate_artifact_name,
    parse_mime_type,
)

# =============================================================================
# TIMESTAMP TESTS
# =============================================================================


@pytest.mark.unit
def test_format_stop_timestamp():
    """Test ':' and '.' are replaced and milliseconds kept."""
    stop = datetime(2025, 1, 15, 14, 30, 22, 123456, tzinfo=timezone.utc)

    assert format_stop_timestamp(stop) == "2025-01-15T14-30-22-123Z"


@pytest.mark.unit
def test_format_stop_timestamp_converts_to_utc():
    """Test a non-UTC time is normalized to UTC."""
    paris = timezone(timedelta(hours=1))
    stop = datetime(2025, 1, 15, 15, 30, 22, 5000, tzinfo=paris)

    assert format_stop_timestamp(stop) == "2025-01-15T14-30-22-005Z"


# =============================================================================
# NAME GENERATION TESTS
# =============================================================================


@pytest.mark.unit
def test_generate_artifact_name():
    """Test the default prefix and extension."""
    stop = datetime(2025, 1, 15, 14, 30, 22, 123000, tzinfo=timezone.utc)

    assert generate_artifact_name(stop) == "streammova-recording-2025-01-15T14-30-22-123Z.webm"


@pytest.mark.unit
def test_generate_artifact_name_custom():
    """Test custom prefix and extension."""
    stop = datetime(2025, 1, 15, tzinfo=timezone.utc)

    name = generate_artifact_name(stop, prefix="clip", extension=".mkv")

    assert name == "clip-2025-01-15T00-00-00-000Z.mkv"


@pytest.mark.unit
def test_generate_artifact_name_default_now():
    """Test the name is filesystem safe when generated from now."""
    name = generate_artifact_name()

    assert name.startswith("streammova-recording-")
    assert name.endswith("Z.webm")
    assert ":" not in name


# =============================================================================
# MIME TESTS
# =============================================================================


@pytest.mark.unit
@pytest.mark.parametrize(
    "mime_type, expected",
    [
        ("video/webm;codecs=vp9,opus", ("video/webm", ("vp9", "opus"))),
        ('video/webm; codecs="vp8, opus"', ("video/webm", ("vp8", "opus"))),
        ("video/webm", ("video/webm", ())),
        ("VIDEO/WEBM", ("video/webm", ())),
    ],
)
def test_parse_mime_type(mime_type, expected):
    """Test base type and codec list extraction."""
    assert parse_mime_type(mime_type) == expected
