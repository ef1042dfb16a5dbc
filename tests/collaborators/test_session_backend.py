"""
Session Backend Client Tests

Tests for SessionBackendClient showing:
- Disabled client without a base URL
- Login event and profile payloads
- Failures logged and counted, never raised

To run:
    pytest tests/collaborators/test_session_backend.py -v
"""

import logging

import pytest

from collaborators.session_backend import (
    LOGIN_EVENTS_PATH,
    USER_UPSERT_PATH,
    SessionBackendClient,
)


@pytest.mark.unit
async def test_disabled_without_url():
    """Test every call is a no-op when no URL is configured."""
    client = SessionBackendClient(base_url="")

    assert client.enabled is False
    assert client.record_login_event("google", success=True) is None
    assert client.upsert_user_profile("u1") is None

    await client.close()


@pytest.mark.unit_integration
async def test_login_event_payload(backend_server):
    """Test a login event posts the expected JSON."""
    client = SessionBackendClient(backend_server.base_url)

    task = client.record_login_event("google", success=False, reason="popup closed", auth_user_id="u1")
    assert await task is True
    await client.close()

    assert backend_server.requests == [
        (
            LOGIN_EVENTS_PATH,
            {
                "auth_user_id": "u1",
                "provider": "google",
                "success": False,
                "failure_reason": "popup closed",
            },
        )
    ]
    assert client.sent_count == 1


@pytest.mark.unit_integration
async def test_upsert_profile_payload(backend_server):
    """Test a profile upsert posts the expected JSON."""
    client = SessionBackendClient(backend_server.base_url + "/")

    client.upsert_user_profile("u1", email="a@example.com", display_name="Ada")
    await client.close()

    path, payload = backend_server.requests[0]
    assert path == USER_UPSERT_PATH
    assert payload == {
        "auth_user_id": "u1",
        "email": "a@example.com",
        "display_name": "Ada",
        "avatar_url": None,
    }


@pytest.mark.unit_integration
async def test_rejected_call_is_logged(backend_server, caplog):
    """Test an HTTP error is counted and logged as a warning."""
    backend_server.status = 500
    client = SessionBackendClient(backend_server.base_url)

    with caplog.at_level(logging.WARNING, logger="collaborators.session_backend"):
        task = client.record_login_event("google", success=True)
        assert await task is False
        await client.close()

    assert client.failed_count == 1
    assert "HTTP 500" in caplog.text


@pytest.mark.unit
async def test_unreachable_backend_is_logged(caplog):
    """Test a connection error never reaches the caller."""
    client = SessionBackendClient("http://127.0.0.1:1", timeout=2)

    with caplog.at_level(logging.WARNING, logger="collaborators.session_backend"):
        client.record_login_event("google", success=True)
        await client.drain()
        await client.close()

    assert client.failed_count == 1
    assert client.sent_count == 0
    assert "failed" in caplog.text
