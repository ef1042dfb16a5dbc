"""
Recording Constants

Enums and codec mappings for the local recorder.

Note: Chunk cadence, MIME preferences and file naming live in
config/settings.py. This file only holds enums and codec tables.
"""

from enum import Enum


class RecorderState(Enum):
    """
    States the recorder can be in.

    Lifecycle: IDLE -> RECORDING -> STOPPING -> IDLE
    """

    IDLE = "idle"  # No recording active
    RECORDING = "recording"  # Encoder running, chunks being produced
    STOPPING = "stopping"  # Finalizing container


class RecorderErrorKind(Enum):
    NO_SOURCE = "no-source"  # Camera is off
    UNSUPPORTED = "unsupported"  # No preferred encoding available


# MIME type -> (container, video encoder, audio encoder)
# Plain "video/webm" lets the container pick its classic pair (VP8 + Vorbis)
MIME_CODECS = {
    "video/webm;codecs=vp9,opus": ("webm", "libvpx-vp9", "libopus"),
    "video/webm;codecs=vp8,opus": ("webm", "libvpx", "libopus"),
    "video/webm": ("webm", "libvpx", "libvorbis"),
}

# Sample format each audio encoder accepts
AUDIO_SAMPLE_FORMATS = {
    "libopus": "s16",
    "libvorbis": "fltp",
}

AUDIO_SAMPLE_RATE = 48000
AUDIO_LAYOUT = "stereo"

# Samples per frame each audio encoder requires (20ms Opus, Vorbis block)
AUDIO_FRAME_SIZES = {
    "libopus": 960,
    "libvorbis": 64,
}

# Matroska/WebM files start with the EBML magic number
EBML_MAGIC = b"\x1a\x45\xdf\xa3"
