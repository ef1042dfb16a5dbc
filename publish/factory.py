"""
Publish Factory

Creates peer connections for publish sessions (aiortc or mock).
"""

import logging
from typing import Callable, Literal

from publish.implementations.aiortc_peer import AiortcPeerConnection
from publish.implementations.mock_peer import MockPeerConnection
from publish.interfaces.peer_connection_interface import PeerConnectionInterface

PeerMode = Literal["auto", "real", "mock"]


class PublishFactory:
    """
    Factory for peer connections.

    A PublishSession needs a fresh peer connection per attempt, so callers
    usually pass peer_factory(mode) instead of a single instance.

    Usage:
        pc = PublishFactory.create_peer_connection(mode="mock")
        session = PublishSession(PublishFactory.peer_factory("auto"))
    """

    _logger = logging.getLogger(__name__)

    @classmethod
    def create_peer_connection(cls, mode: PeerMode = "auto") -> PeerConnectionInterface:
        """
        Create a peer connection.

        Args:
            mode: "auto" (aiortc, mock if it cannot be created),
                  "real" (force aiortc), "mock" (force mock)

        Raises:
            RuntimeError: If mode="real" and aiortc fails to initialize
        """
        if mode == "mock":
            cls._logger.debug("Creating Mock Peer Connection")
            return MockPeerConnection()

        try:
            return AiortcPeerConnection()
        except Exception as e:
            if mode == "real":
                raise RuntimeError(f"Real peer connection not available: {e}") from e
            cls._logger.warning(
                f"aiortc peer connection not available ({e}), using Mock Peer Connection"
            )
            return MockPeerConnection()

    @classmethod
    def peer_factory(cls, mode: PeerMode = "auto") -> Callable[[], PeerConnectionInterface]:
        """Zero-argument callable creating a new peer connection per call"""
        return lambda: cls.create_peer_connection(mode)
