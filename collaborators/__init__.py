"""
External Collaborators

Thin clients for services the broadcast core only reports to or reads
configuration from.

Public API:
    - SessionBackendClient: Fire-and-forget login/profile reporting
    - ChannelRegistry / ChannelRecord: Connected destination channels
"""

from collaborators.channel_registry import (
    AVAILABLE_PLATFORMS,
    ChannelRecord,
    ChannelRegistry,
    ChannelRegistryError,
)
from collaborators.session_backend import SessionBackendClient

__all__ = [
    "AVAILABLE_PLATFORMS",
    "ChannelRecord",
    "ChannelRegistry",
    "ChannelRegistryError",
    "SessionBackendClient",
]
