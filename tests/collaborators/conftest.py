"""
Collaborators Test Configuration and Fixtures
"""

from typing import List, Tuple

import pytest
from aiohttp import web
from aiohttp.test_utils import TestServer

from collaborators.session_backend import LOGIN_EVENTS_PATH, USER_UPSERT_PATH


class BackendServer:
    """Records JSON posts; answers with the configured status"""

    def __init__(self):
        self.status = 200
        self.requests: List[Tuple[str, dict]] = []
        self.server = None

    @property
    def base_url(self) -> str:
        return f"http://{self.server.host}:{self.server.port}"

    async def handle(self, request: web.Request) -> web.Response:
        self.requests.append((request.path, await request.json()))
        if self.status >= 400:
            return web.Response(status=self.status, text="backend unavailable")
        return web.json_response({"ok": True}, status=self.status)


@pytest.fixture
async def backend_server():
    """
    Provide a running user/session backend.

    Usage:
        async def test_report(backend_server):
            client = SessionBackendClient(backend_server.base_url)
    """
    backend = BackendServer()

    app = web.Application()
    app.router.add_post(LOGIN_EVENTS_PATH, backend.handle)
    app.router.add_post(USER_UPSERT_PATH, backend.handle)

    backend.server = TestServer(app)
    await backend.server.start_server()

    yield backend

    await backend.server.close()
