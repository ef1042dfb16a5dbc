"""
Core Test Configuration and Fixtures

Builds the orchestrator from mock components so each test can reach
into the device, peers, encoder and notifier directly.
"""

import pytest

from capture.controllers.device_capture_manager import DeviceCaptureManager
from capture.implementations.mock_device import MockDevice
from core.event_bus import EventBus
from core.orchestrator import BroadcastSessionOrchestrator
from publish.implementations.mock_peer import MockPeerConnection
from recording.controllers.recorder import Recorder
from recording.implementations.mock_encoder import MockEncoder
from scheduling.controllers.schedule_timer import ScheduleTimer
from scheduling.implementations.mock_notifier import MockNotifier


class MockStack:
    """Handles on the mock components behind one orchestrator"""

    def __init__(self, alerts):
        self.event_bus = EventBus()
        self.device = MockDevice()
        self.encoder = MockEncoder()
        self.notifier = MockNotifier()
        self.alerts = alerts
        self.peers = []
        # Peers consume their outbound tracks like an RTP sender
        self.read_media = False

    def create_peer(self) -> MockPeerConnection:
        peer = MockPeerConnection(read_media=self.read_media)
        self.peers.append(peer)
        return peer


@pytest.fixture
def stack():
    """Provide the mock components (not yet wired)"""
    return MockStack(alerts=[])


@pytest.fixture
async def orchestrator(stack, ingest_server, tmp_path):
    """
    Provide an orchestrator over mock components publishing to the local
    ingest server, writing recordings to tmp_path.

    Usage:
        async def test_live(orchestrator, ingest_server):
            await orchestrator.start_broadcast()
    """
    orchestrator = BroadcastSessionOrchestrator(
        device_manager=DeviceCaptureManager(stack.device, stack.event_bus),
        recorder=Recorder(stack.encoder, stack.event_bus, chunk_interval=0.01),
        schedule_timer=ScheduleTimer(
            stack.notifier,
            alert=stack.alerts.append,
            event_bus=stack.event_bus,
            min_lead_ms=0,
        ),
        peer_factory=stack.create_peer,
        event_bus=stack.event_bus,
        ingest_url=ingest_server.url,
        download_dir=tmp_path,
    )

    yield orchestrator

    await orchestrator.shutdown()
