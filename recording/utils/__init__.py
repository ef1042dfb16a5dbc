"""Recording utility helpers."""

from recording.utils.recording_utils import (
    format_stop_timestamp,
    generate_artifact_name,
    parse_mime_type,
)

__all__ = ["format_stop_timestamp", "generate_artifact_name", "parse_mime_type"]
