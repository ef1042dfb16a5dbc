"""
Service Test Configuration and Fixtures
"""

import pytest

from broadcast_service import BroadcastService
from core.orchestrator import BroadcastSessionOrchestrator


@pytest.fixture
async def service(ingest_server, tmp_path):
    """
    Provide a BroadcastService over a mock orchestrator.

    Heartbeat and control files live in tmp_path; recordings land in
    tmp_path/recordings.

    Usage:
        async def test_command(service):
            assert await service.process_command("CAMERA_ON")
    """
    orchestrator = BroadcastSessionOrchestrator.create(
        mode="mock",
        ingest_url=ingest_server.url,
        download_dir=tmp_path / "recordings",
    )
    orchestrator.recorder.chunk_interval = 0.01

    service = BroadcastService(
        orchestrator=orchestrator,
        heartbeat_file=str(tmp_path / "heartbeat.json"),
        control_file=str(tmp_path / "control.cmd"),
    )

    yield service

    await orchestrator.shutdown()
