"""
Publish Controllers Package

WHIP publish handshake and session lifecycle.
"""

from publish.controllers.publish_session import PublishSession

# Public API
__all__ = [
    "PublishSession",
]
