"""Recording data models."""

from recording.models.chunk_stream import ChunkStream
from recording.models.recording_artifact import RecordingArtifact

__all__ = ["ChunkStream", "RecordingArtifact"]
