"""
Session Backend Client

Best-effort reporting of login events and user profiles to the user/session
backend. Both calls are fire-and-forget: they return immediately, failures
are logged and never reach the caller.
"""

import asyncio
import logging
from typing import Optional, Set

import aiohttp

from config.settings import SESSION_BACKEND_TIMEOUT, SESSION_BACKEND_URL

LOGIN_EVENTS_PATH = "/api/auth/logins"
USER_UPSERT_PATH = "/api/users/upsert"


class SessionBackendClient:
    """
    Fire-and-forget client for the user/session backend.

    Disabled (every call is a no-op) when no base URL is configured.

    Usage:
        backend = SessionBackendClient("https://api.example.com")
        backend.record_login_event("google", success=True, auth_user_id="u1")
        backend.upsert_user_profile("u1", email="a@example.com")
        await backend.close()  # waits for pending reports
    """

    def __init__(
        self,
        base_url: str = SESSION_BACKEND_URL,
        timeout: float = SESSION_BACKEND_TIMEOUT,
        http_session: Optional[aiohttp.ClientSession] = None,
    ):
        self.logger = logging.getLogger(__name__)
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout

        self._http = http_session
        self._owns_http = http_session is None
        self._pending: Set[asyncio.Task] = set()

        # Statistics
        self.sent_count = 0
        self.failed_count = 0

        if not self.enabled:
            self.logger.info("Session backend not configured, reporting disabled")

    @property
    def enabled(self) -> bool:
        return bool(self.base_url)

    def record_login_event(
        self,
        provider_id: str,
        success: bool,
        reason: Optional[str] = None,
        auth_user_id: Optional[str] = None,
    ) -> Optional[asyncio.Task]:
        """Report a login attempt. Returns the background task, or None if disabled."""
        return self._submit(
            LOGIN_EVENTS_PATH,
            {
                "auth_user_id": auth_user_id,
                "provider": provider_id,
                "success": success,
                "failure_reason": reason,
            },
        )

    def upsert_user_profile(
        self,
        user_id: str,
        email: Optional[str] = None,
        display_name: Optional[str] = None,
        avatar_url: Optional[str] = None,
    ) -> Optional[asyncio.Task]:
        """Create or update the user's profile. Returns the background task, or None if disabled."""
        return self._submit(
            USER_UPSERT_PATH,
            {
                "auth_user_id": user_id,
                "email": email,
                "display_name": display_name,
                "avatar_url": avatar_url,
            },
        )

    def _submit(self, path: str, payload: dict) -> Optional[asyncio.Task]:
        if not self.enabled:
            return None

        task = asyncio.ensure_future(self._post(path, payload))
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)
        return task

    async def _post(self, path: str, payload: dict) -> bool:
        url = f"{self.base_url}{path}"
        try:
            async with self._get_http().post(
                url,
                json=payload,
                timeout=aiohttp.ClientTimeout(total=self.timeout),
            ) as response:
                if response.status >= 400:
                    text = await response.text()
                    self.failed_count += 1
                    self.logger.warning(
                        f"Backend rejected {path}: HTTP {response.status} {text[:200]}"
                    )
                    return False
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            self.failed_count += 1
            self.logger.warning(f"Backend call {path} failed: {str(e) or type(e).__name__}")
            return False

        self.sent_count += 1
        self.logger.debug(f"Backend call {path} succeeded")
        return True

    def _get_http(self) -> aiohttp.ClientSession:
        if self._http is None:
            self._http = aiohttp.ClientSession()
        return self._http

    async def drain(self) -> None:
        """Wait for every pending report"""
        if self._pending:
            await asyncio.wait(list(self._pending))

    async def close(self) -> None:
        await self.drain()
        if self._owns_http and self._http is not None:
            await self._http.close()
            self._http = None
