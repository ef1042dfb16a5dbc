"""
Publish Module

Publishes a capture source to a media ingest endpoint with a WHIP-style
SDP offer/answer over HTTP.

Public API:
    - PublishSession: One handshake + connection lifetime
    - PublishFactory: Creates aiortc or mock peer connections
    - PublishHandle: Result of a successful publish
    - PublishError / PublishErrorKind: Typed failures
    - PublishState: Session lifecycle enum

Usage:
    from publish import PublishFactory, PublishSession

    session = PublishSession(PublishFactory.peer_factory())
    handle = await session.publish(ingest_url, source)
    await session.stop()
"""

from publish.constants import PublishErrorKind, PublishState
from publish.controllers.publish_session import PublishSession
from publish.factory import PublishFactory
from publish.interfaces.peer_connection_interface import (
    PeerConnectionInterface,
    PublishError,
)
from publish.models.publish_handle import PublishHandle
from publish.models.session_description import SessionDescription

__all__ = [
    "PeerConnectionInterface",
    "PublishError",
    "PublishErrorKind",
    "PublishFactory",
    "PublishHandle",
    "PublishSession",
    "PublishState",
    "SessionDescription",
]
