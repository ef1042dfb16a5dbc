"""
Publish Test Configuration and Fixtures

Shared fixtures for publish module tests.
"""

import pytest

from core.event_bus import EventBus
from publish.controllers.publish_session import PublishSession
from publish.implementations.mock_peer import MockPeerConnection

# =============================================================================
# PEER CONNECTION FIXTURES
# =============================================================================


@pytest.fixture
def peers():
    """
    Every MockPeerConnection created through peer_factory.

    Usage:
        def test_pc(peers, peer_factory):
            ...
            assert peers[0].is_closed
    """
    return []


@pytest.fixture
def peer_factory(peers):
    """Provide a peer factory creating fast mock peer connections"""

    def factory():
        pc = MockPeerConnection()
        peers.append(pc)
        return pc

    return factory


@pytest.fixture
def slow_peer_factory(peers):
    """Provide a peer factory whose ICE gathering takes a while"""

    def factory():
        pc = MockPeerConnection(gathering_delay=0.5)
        peers.append(pc)
        return pc

    return factory


# =============================================================================
# SESSION FIXTURES
# =============================================================================


@pytest.fixture
def event_bus():
    return EventBus()


@pytest.fixture
async def publish_session(peer_factory, event_bus):
    """
    Provide a PublishSession over mock peer connections.

    Usage:
        async def test_publish(publish_session, ingest_server, live_source):
            await publish_session.publish(ingest_server.url, live_source)
    """
    session = PublishSession(peer_factory, event_bus, http_timeout=5.0)
    yield session
    await session.stop()
