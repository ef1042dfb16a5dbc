"""
Shared Test Configuration and Fixtures

Fixtures used by more than one component:
- A local WHIP ingest server (aiohttp test server)
- A live capture source from the mock device
"""

import asyncio
from typing import List, Optional

import pytest
from aiohttp import web
from aiohttp.test_utils import TestServer

from capture.controllers.device_capture_manager import DeviceCaptureManager
from capture.implementations.mock_device import MockDevice

ANSWER_SDP = (
    "v=0\r\n"
    "o=- 1 1 IN IP4 127.0.0.1\r\n"
    "s=-\r\n"
    "t=0 0\r\n"
    "m=video 9 UDP/TLS/RTP/SAVPF 96\r\n"
    "a=recvonly\r\n"
)


# =============================================================================
# INGEST SERVER
# =============================================================================


class IngestServer:
    """
    Scriptable WHIP endpoint.

    Configure status/body/location before publishing. Set hold=True to
    keep the offer POST pending until release() (or fixture teardown).
    """

    path = "/rtc/v1/whip/"

    def __init__(self):
        self.status = 201
        self.body = ANSWER_SDP
        self.location: Optional[str] = "/rtc/v1/whip/resource/abc123"
        self.hold = False

        self.offers: List[dict] = []
        self.deletes: List[str] = []
        self.server: Optional[TestServer] = None
        self._released = asyncio.Event()

    @property
    def url(self) -> str:
        return str(self.server.make_url(self.path)) + "?app=live&stream=test"

    def release(self) -> None:
        self._released.set()

    async def handle_offer(self, request: web.Request) -> web.Response:
        self.offers.append(
            {
                "content_type": request.headers.get("Content-Type"),
                "accept": request.headers.get("Accept"),
                "query": dict(request.query),
                "sdp": await request.text(),
            }
        )

        if self.hold:
            await self._released.wait()

        headers = {}
        if self.location and 200 <= self.status < 300:
            headers["Location"] = self.location

        return web.Response(
            status=self.status,
            text=self.body,
            content_type="application/sdp" if self.status < 300 else "text/plain",
            headers=headers,
        )

    async def handle_delete(self, request: web.Request) -> web.Response:
        self.deletes.append(request.path)
        return web.Response(status=200)


@pytest.fixture
async def ingest_server():
    """
    Provide a running WHIP ingest server.

    Usage:
        async def test_publish(ingest_server):
            ingest_server.status = 403
            await session.publish(ingest_server.url, source)
    """
    ingest = IngestServer()

    app = web.Application()
    app.router.add_post(IngestServer.path, ingest.handle_offer)
    app.router.add_delete(IngestServer.path + "resource/{resource_id}", ingest.handle_delete)

    ingest.server = TestServer(app)
    await ingest.server.start_server()

    yield ingest

    ingest.release()
    await ingest.server.close()


# =============================================================================
# CAPTURE FIXTURES
# =============================================================================


@pytest.fixture
def mock_device():
    """Provide MockDevice without acquire delay"""
    return MockDevice()


@pytest.fixture
def device_manager(mock_device):
    """Provide DeviceCaptureManager over the mock device"""
    manager = DeviceCaptureManager(mock_device)
    yield manager
    manager.cleanup()


@pytest.fixture
async def live_source(device_manager):
    """
    Provide an open CaptureSource (audio + video).

    Usage:
        async def test_borrow(live_source):
            assert live_source.is_live
    """
    return await device_manager.open()
