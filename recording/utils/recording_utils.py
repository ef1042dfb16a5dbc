"""
Recording Utilities

Shared helpers for artifact naming and MIME handling.
"""

from datetime import datetime, timezone
from typing import Optional, Tuple

from config.settings import RECORDING_FILENAME_EXTENSION, RECORDING_FILENAME_PREFIX


def format_stop_timestamp(stop_time: datetime) -> str:
    """
    UTC ISO-8601 timestamp with millisecond precision, filename safe.

    ':' and '.' become '-'.

    Example:
        format_stop_timestamp(datetime(2025, 1, 15, 14, 30, 22, 123000, tzinfo=timezone.utc))
        # Returns: "2025-01-15T14-30-22-123Z"
    """
    if stop_time.tzinfo is None:
        stop_time = stop_time.astimezone()
    utc = stop_time.astimezone(timezone.utc)
    iso = utc.strftime("%Y-%m-%dT%H:%M:%S") + f".{utc.microsecond // 1000:03d}Z"
    return iso.replace(":", "-").replace(".", "-")


def generate_artifact_name(
    stop_time: Optional[datetime] = None,
    prefix: str = RECORDING_FILENAME_PREFIX,
    extension: str = RECORDING_FILENAME_EXTENSION,
) -> str:
    """
    Generate the artifact name from the recording stop time.

    Args:
        stop_time: When the recording stopped (default: now)
        prefix: Name prefix
        extension: File extension including the dot

    Returns:
        Deterministic name, unique per millisecond

    Example:
        generate_artifact_name(stop)
        # Returns: "streammova-recording-2025-01-15T14-30-22-123Z.webm"
    """
    stop_time = stop_time or datetime.now(timezone.utc)
    return f"{prefix}-{format_stop_timestamp(stop_time)}{extension}"


def parse_mime_type(mime_type: str) -> Tuple[str, Tuple[str, ...]]:
    """
    Split a MIME type into (base type, codecs).

    Example:
        parse_mime_type("video/webm;codecs=vp9,opus")
        # Returns: ("video/webm", ("vp9", "opus"))
    """
    base, _, params = mime_type.partition(";")
    codecs: Tuple[str, ...] = ()
    for param in params.split(";"):
        key, _, value = param.strip().partition("=")
        if key.lower() == "codecs":
            codecs = tuple(c.strip() for c in value.strip('"').split(",") if c.strip())
    return base.strip().lower(), codecs
