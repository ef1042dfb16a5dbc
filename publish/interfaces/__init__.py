"""
Publish Interfaces Package

Exposes the peer connection contract and PublishError.
"""

from publish.interfaces.peer_connection_interface import (
    PeerConnectionInterface,
    PublishError,
)

# Public API
__all__ = [
    "PeerConnectionInterface",
    "PublishError",
]
