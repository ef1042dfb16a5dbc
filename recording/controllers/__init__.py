"""
Recording Controllers Package

High-level recorder driving the encoder.
"""

from recording.controllers.recorder import Recorder

# Public API
__all__ = [
    "Recorder",
]
