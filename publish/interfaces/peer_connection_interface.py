"""
Peer Connection Interface

Abstract interface for the send-only real-time peer connection used by the
publish handshake.

PublishSession drives the handshake through this interface so it can run
against aiortc or against MockPeerConnection in tests.
"""

from abc import ABC, abstractmethod
from typing import Any, Callable, Optional

from core.errors import BroadcastError, ErrorCause
from publish.constants import PublishErrorKind
from publish.models.session_description import SessionDescription

ConnectionStateCallback = Callable[[str], None]


class PeerConnectionInterface(ABC):
    """
    Abstract base class for peer connections.

    Implementations must call on_connection_state_change (if set) with the
    new state string on every transition:
    new, connecting, connected, disconnected, closed, failed.
    """

    on_connection_state_change: Optional[ConnectionStateCallback] = None

    @abstractmethod
    def add_outbound_track(self, track: Any) -> None:
        """Attach a track as send-only (no inbound media requested)"""

    @abstractmethod
    async def create_offer(self) -> SessionDescription:
        """Create an offer describing only outbound media"""

    @abstractmethod
    async def set_local_description(self, description: SessionDescription) -> None:
        """Apply the offer locally; starts ICE candidate gathering"""

    @abstractmethod
    async def wait_for_ice_gathering_complete(self, timeout: float) -> None:
        """
        Suspend until ICE gathering reaches "complete".

        Raises:
            asyncio.TimeoutError: If gathering does not finish in time
        """

    @property
    @abstractmethod
    def local_description(self) -> Optional[SessionDescription]:
        """Local description including every gathered candidate"""

    @abstractmethod
    async def set_remote_description(self, description: SessionDescription) -> None:
        """
        Apply the server's answer.

        Raises:
            ValueError: If the answer cannot be applied
        """

    @property
    @abstractmethod
    def connection_state(self) -> str:
        """Current connection state string"""

    @abstractmethod
    async def close(self) -> None:
        """Close the connection and release transports. Safe to call twice."""


class PublishError(BroadcastError):
    """
    Exception raised when publishing to the ingest endpoint fails.

    Attributes:
        status: HTTP status for HTTP_REJECTED, else None
        body: Response body text for HTTP_REJECTED, else None

    Example:
        PublishError("Ingest endpoint rejected offer: HTTP 403",
                     PublishErrorKind.HTTP_REJECTED, status=403, body="invalid app")
    """

    cause = ErrorCause.NETWORK

    def __init__(
        self,
        message: str,
        kind: PublishErrorKind = PublishErrorKind.NETWORK,
        status: Optional[int] = None,
        body: Optional[str] = None,
    ):
        super().__init__(message, kind)
        self.status = status
        self.body = body
