"""
Publish Implementations Package

Exposes concrete peer connection implementations.
"""

from publish.implementations.aiortc_peer import AiortcPeerConnection
from publish.implementations.mock_peer import MockPeerConnection

# Public API
__all__ = [
    "AiortcPeerConnection",
    "MockPeerConnection",
]
