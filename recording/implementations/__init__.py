"""
Recording Implementations Package

Exposes concrete implementations of the encoder interface.
"""

from recording.implementations.av_encoder import AvMediaEncoder
from recording.implementations.mock_encoder import MockEncoder

# Public API
__all__ = [
    "AvMediaEncoder",
    "MockEncoder",
]
