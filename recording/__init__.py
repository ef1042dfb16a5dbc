"""
Recording Module

Local recording of the capture source into a downloadable WebM artifact.

Provides automatic detection and graceful fallback between the PyAV
encoder and a mock encoder for testing.

Public API:
    - RecordingFactory: Factory for creating encoder implementations
    - Recorder: Chunked recording of a borrowed capture source
    - RecordingArtifact: Finalized recording (bytes + name + MIME type)
    - ChunkStream: Chunks produced while recording
    - MediaEncoderInterface: Encoder contract
    - RecorderError / RecorderErrorKind: Typed failures
    - RecorderState: State enumeration

Usage:
    from recording import Recorder, RecordingFactory

    recorder = Recorder(RecordingFactory.create_encoder())
    await recorder.start(source)
    artifact = await recorder.stop()
    artifact.materialize()
"""

from recording.constants import RecorderErrorKind, RecorderState
from recording.controllers.recorder import Recorder
from recording.factory import RecordingFactory
from recording.interfaces.encoder_interface import MediaEncoderInterface, RecorderError
from recording.models.chunk_stream import ChunkStream
from recording.models.recording_artifact import RecordingArtifact
from recording.utils.recording_utils import generate_artifact_name

__all__ = [
    "ChunkStream",
    "MediaEncoderInterface",
    "Recorder",
    "RecorderError",
    "RecorderErrorKind",
    "RecorderState",
    "RecordingArtifact",
    "RecordingFactory",
    "generate_artifact_name",
]
