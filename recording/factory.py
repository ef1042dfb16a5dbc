"""
Recording Factory

Factory pattern for creating encoder implementations.
Automatically selects PyAV or the mock based on codec availability.
"""

import logging
from typing import Literal

from config.settings import RECORDING_MIME_PREFERENCES
from recording.implementations.av_encoder import AvMediaEncoder
from recording.implementations.mock_encoder import MockEncoder
from recording.interfaces.encoder_interface import MediaEncoderInterface

EncoderMode = Literal["auto", "real", "mock"]


class RecordingFactory:
    """
    Factory for creating media encoders.

    Usage:
        # Auto-detect (PyAV if a preferred WebM encoding exists, mock otherwise)
        encoder = RecordingFactory.create_encoder()

        # Force mock mode (useful for testing)
        encoder = RecordingFactory.create_encoder(mode="mock")
    """

    _logger = logging.getLogger(__name__)

    @classmethod
    def create_encoder(cls, mode: EncoderMode = "auto") -> MediaEncoderInterface:
        """
        Create a media encoder.

        Args:
            mode: "auto" (detect), "real" (force PyAV), "mock" (force mock)

        Raises:
            RuntimeError: If mode="real" but no preferred encoding is available
        """
        if mode == "mock":
            cls._logger.info("Creating Mock Encoder")
            return MockEncoder()

        encoder = AvMediaEncoder()
        available = cls.supported_types(encoder)

        if mode == "real":
            if not available:
                raise RuntimeError("Real encoder requested but no WebM encoding is available")
            cls._logger.info(f"Creating PyAV Encoder (forced, supports {available})")
            return encoder

        if available:
            cls._logger.info(f"Creating PyAV Encoder (auto-detected, supports {available})")
            return encoder

        cls._logger.warning("No WebM encoding available in PyAV, using Mock Encoder")
        return MockEncoder()

    @classmethod
    def supported_types(cls, encoder: MediaEncoderInterface) -> list:
        """
        Preferred MIME types the encoder can produce.

        Useful for diagnostics and configuration display.
        """
        return [m for m in RECORDING_MIME_PREFERENCES if encoder.is_type_supported(m)]
