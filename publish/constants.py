"""
Publish Constants

Enums and protocol constants for the WHIP-style publish handshake.

Note: Ingest URL, ICE servers and timeouts live in config/settings.py.
"""

from enum import Enum


class PublishState(Enum):
    """
    Lifecycle of one publish session.

    idle -> connecting -> publishing -> stopped | failed
    """

    IDLE = "idle"
    CONNECTING = "connecting"  # Handshake in flight
    PUBLISHING = "publishing"  # Answer applied, media flowing
    STOPPED = "stopped"  # Closed by the caller
    FAILED = "failed"  # Handshake or connection failure


class PublishErrorKind(Enum):
    HTTP_REJECTED = "http-rejected"  # Non-2xx from the ingest endpoint
    NETWORK = "network"  # Endpoint unreachable / timeout
    PROTOCOL_VIOLATION = "protocol-violation"  # Bad answer or ICE not complete
    ABORTED = "aborted"  # stop() called during the handshake


# Peer connection states exposed to observers
CONNECTION_STATE_NEW = "new"
CONNECTION_STATE_CONNECTING = "connecting"
CONNECTION_STATE_CONNECTED = "connected"
CONNECTION_STATE_DISCONNECTED = "disconnected"
CONNECTION_STATE_CLOSED = "closed"
CONNECTION_STATE_FAILED = "failed"

# States after which no more transitions happen
TERMINAL_CONNECTION_STATES = {CONNECTION_STATE_CLOSED, CONNECTION_STATE_FAILED}

ICE_GATHERING_COMPLETE = "complete"

# WHIP request/response
SDP_CONTENT_TYPE = "application/sdp"
SDP_PREFIX = "v="

# Longest response body kept on a PublishError
MAX_ERROR_BODY_LENGTH = 2000
