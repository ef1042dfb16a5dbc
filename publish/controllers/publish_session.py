"""
Publish Session

WHIP-style publish handshake against a media ingest endpoint.

Handshake:
1. Create a peer connection, attach every source track send-only
2. Create the offer (outbound media only)
3. Apply it locally and wait until ICE gathering is complete
4. POST the complete offer (application/sdp) to the ingest URL
5. Apply the response body as the remote answer
6. Report connection-state transitions as events

A session is single-use: one publish() per instance. The session sends
its own relay proxies of the CaptureSource tracks and stops only those.

Cancellation:
stop() may run while the handshake is suspended (ICE gathering, HTTP POST).
It bumps the generation, cancels the handshake task and closes the peer
connection. Every await in the handshake is followed by a generation check,
so a late answer is discarded instead of being applied to a closed
connection.
"""

import asyncio
import logging
import uuid
from typing import Any, Callable, List, Optional, Tuple
from urllib.parse import urljoin

import aiohttp

from capture.models.capture_source import CaptureSource
from config.settings import (
    ICE_GATHERING_TIMEOUT,
    PUBLISH_HTTP_TIMEOUT,
    PUBLISH_VERIFY_TLS,
)
from core.event_bus import PUBLISH_CONNECTION_STATE, PUBLISH_STATE, EventBus, EventStream
from publish.constants import (
    CONNECTION_STATE_FAILED,
    CONNECTION_STATE_NEW,
    MAX_ERROR_BODY_LENGTH,
    SDP_CONTENT_TYPE,
    SDP_PREFIX,
    PublishErrorKind,
    PublishState,
)
from publish.interfaces.peer_connection_interface import (
    PeerConnectionInterface,
    PublishError,
)
from publish.models.publish_handle import PublishHandle
from publish.models.session_description import SessionDescription


class PublishSession:
    """
    One publish attempt against one ingest endpoint.

    Usage:
        session = PublishSession(PublishFactory.peer_factory("auto"), event_bus)
        handle = await session.publish(WHIP_INGEST_URL, source)

        async for state in session.connection_states():
            print(state)

        await session.stop()
        await session.stop()  # no-op
    """

    def __init__(
        self,
        peer_factory: Callable[[], PeerConnectionInterface],
        event_bus: Optional[EventBus] = None,
        http_session: Optional[aiohttp.ClientSession] = None,
        http_timeout: float = PUBLISH_HTTP_TIMEOUT,
        ice_gathering_timeout: float = ICE_GATHERING_TIMEOUT,
        verify_tls: bool = PUBLISH_VERIFY_TLS,
    ):
        """
        Initialize publish session.

        Args:
            peer_factory: Creates the peer connection for this session
            event_bus: Optional bus receiving publish.* events
            http_session: Shared aiohttp session (created and owned here if None)
            http_timeout: Total timeout for the offer POST (seconds)
            ice_gathering_timeout: Max wait for ICE gathering (seconds)
            verify_tls: Verify the ingest server certificate
        """
        self.logger = logging.getLogger(__name__)
        self.session_id = uuid.uuid4().hex[:8]
        self.peer_factory = peer_factory
        self.event_bus = event_bus
        self.http_timeout = http_timeout
        self.ice_gathering_timeout = ice_gathering_timeout
        self.verify_tls = verify_tls

        self._http = http_session
        self._owns_http = http_session is None

        self.state = PublishState.IDLE
        self.ingest_url: Optional[str] = None
        self.handle: Optional[PublishHandle] = None
        self.error: Optional[PublishError] = None
        # Known as soon as the server accepted the offer
        self.resource_url: Optional[str] = None

        self._pc: Optional[PeerConnectionInterface] = None
        self._tracks: List[Any] = []
        self._handshake_task: Optional[asyncio.Task] = None
        self._generation = 0
        self._closed = False
        self._connection_states = EventStream()

        # Callbacks
        self.on_state_change: Optional[Callable[[PublishState], None]] = None
        self.on_connection_state_change: Optional[Callable[[str], None]] = None

    # =========================================================================
    # PUBLIC API
    # =========================================================================

    @property
    def is_active(self) -> bool:
        return self.state in (PublishState.CONNECTING, PublishState.PUBLISHING)

    @property
    def is_closed(self) -> bool:
        return self._closed

    @property
    def peer_connection(self) -> Optional[PeerConnectionInterface]:
        return self._pc

    def connection_states(self) -> EventStream:
        """
        Finite stream of connection states for this session.

        Ends when the session is stopped or fails. Not restartable: a new
        publish needs a new PublishSession.
        """
        return self._connection_states

    async def publish(self, ingest_url: str, source: CaptureSource) -> PublishHandle:
        """
        Run the publish handshake.

        Args:
            ingest_url: WHIP endpoint receiving the offer
            source: Borrowed live capture source

        Returns:
            PublishHandle once the answer is applied

        Raises:
            PublishError: http-rejected, network, protocol-violation, or
                          aborted when stop() runs before completion
            ValueError: If the source is not live
            RuntimeError: If publish() was already called on this session
        """
        if self._closed:
            raise PublishError("Publish session is closed", PublishErrorKind.ABORTED)
        if self.state != PublishState.IDLE:
            raise RuntimeError("publish() may only be called once per session")
        if source is None or not source.is_live:
            raise ValueError("Cannot publish without a live capture source")

        self.ingest_url = ingest_url
        self._set_state(PublishState.CONNECTING)
        self.logger.info(f"[{self.session_id}] Publishing {source.describe()} to {ingest_url}")

        self._handshake_task = asyncio.ensure_future(
            self._handshake(ingest_url, source, self._generation)
        )

        try:
            handle = await self._handshake_task
        except asyncio.CancelledError:
            if not self._closed:
                # Our caller was cancelled, not stop()
                await self._teardown(PublishState.FAILED)
                raise
            error = PublishError(
                "Publish aborted before the handshake completed",
                PublishErrorKind.ABORTED,
            )
            self.error = error
            raise error from None
        except PublishError as e:
            if e.kind != PublishErrorKind.ABORTED:
                self.logger.error(f"[{self.session_id}] Publish failed: {e.message}")
            self.error = e
            await self._teardown(PublishState.FAILED)
            raise
        except Exception as e:
            self.logger.error(f"[{self.session_id}] Unexpected publish failure: {e}")
            await self._teardown(PublishState.FAILED)
            raise

        self.logger.info(
            f"[{self.session_id}] Publishing "
            f"(resource: {handle.resource_url or 'none'})"
        )
        return handle

    async def stop(self, handle: Optional[PublishHandle] = None) -> bool:
        """
        Stop publishing and release the peer connection.

        Safe to call several times and before publish() resolves (the
        in-flight handshake is cancelled and publish() raises ABORTED).

        Args:
            handle: Optional handle; ignored unless it belongs to this session

        Returns:
            True if this call tore the session down
        """
        if handle is not None and handle.session_id != self.session_id:
            self.logger.warning(
                f"[{self.session_id}] Ignoring stop for foreign handle {handle.session_id}"
            )
            return False

        if self._closed:
            return False

        self.logger.info(f"[{self.session_id}] Stopping publish ({self.state.value})")
        await self._teardown(PublishState.STOPPED)
        return True

    # =========================================================================
    # HANDSHAKE
    # =========================================================================

    async def _handshake(
        self, ingest_url: str, source: CaptureSource, generation: int
    ) -> PublishHandle:
        pc = self.peer_factory()
        self._pc = pc
        pc.on_connection_state_change = self._handle_connection_state
        self._handle_connection_state(CONNECTION_STATE_NEW)

        self._tracks = source.subscribe()
        for track in self._tracks:
            pc.add_outbound_track(track)

        offer = await pc.create_offer()
        self._check_generation(generation)

        await pc.set_local_description(offer)
        try:
            await pc.wait_for_ice_gathering_complete(self.ice_gathering_timeout)
        except asyncio.TimeoutError:
            raise PublishError(
                f"ICE gathering did not complete within {self.ice_gathering_timeout}s",
                PublishErrorKind.PROTOCOL_VIOLATION,
            ) from None
        self._check_generation(generation)

        local = pc.local_description
        self.logger.debug(
            f"[{self.session_id}] Offer ready "
            f"({local.candidate_count} candidates, media: {local.media_kinds})"
        )

        answer_sdp, resource_url = await self._post_offer(ingest_url, local.sdp)
        # The server holds a resource from here on; teardown deletes it
        self.resource_url = resource_url
        # Discard a late answer if stop() ran during the POST
        self._check_generation(generation)

        try:
            await pc.set_remote_description(
                SessionDescription(sdp=answer_sdp, type="answer")
            )
        except Exception as e:
            raise PublishError(
                f"Server answer could not be applied: {e}",
                PublishErrorKind.PROTOCOL_VIOLATION,
            ) from e
        self._check_generation(generation)

        self.handle = PublishHandle(
            session_id=self.session_id,
            ingest_url=ingest_url,
            resource_url=resource_url,
            local_sdp=local.sdp,
            remote_sdp=answer_sdp,
        )
        self._set_state(PublishState.PUBLISHING)
        return self.handle

    async def _post_offer(self, ingest_url: str, offer_sdp: str) -> Tuple[str, Optional[str]]:
        """
        POST the offer and return (answer_sdp, resource_url).

        Raises:
            PublishError: HTTP_REJECTED, NETWORK or PROTOCOL_VIOLATION
        """
        http = self._get_http()
        headers = {"Content-Type": SDP_CONTENT_TYPE, "Accept": SDP_CONTENT_TYPE}

        try:
            async with http.post(
                ingest_url,
                data=offer_sdp.encode("utf-8"),
                headers=headers,
                timeout=aiohttp.ClientTimeout(total=self.http_timeout),
                ssl=self.verify_tls,
            ) as response:
                body = await response.text()
                status = response.status
                location = response.headers.get("Location")
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            raise PublishError(
                f"Ingest endpoint unreachable: {str(e) or type(e).__name__}",
                PublishErrorKind.NETWORK,
            ) from e

        if not 200 <= status < 300:
            raise PublishError(
                f"Ingest endpoint rejected offer: HTTP {status}",
                PublishErrorKind.HTTP_REJECTED,
                status=status,
                body=body[:MAX_ERROR_BODY_LENGTH],
            )

        if not body.lstrip().startswith(SDP_PREFIX):
            raise PublishError(
                "Ingest endpoint returned an empty or non-SDP answer",
                PublishErrorKind.PROTOCOL_VIOLATION,
                status=status,
                body=body[:MAX_ERROR_BODY_LENGTH],
            )

        resource_url = urljoin(ingest_url, location) if location else None
        return body, resource_url

    def _check_generation(self, generation: int) -> None:
        if self._closed or generation != self._generation:
            raise PublishError(
                "Publish aborted before the handshake completed",
                PublishErrorKind.ABORTED,
            )

    # =========================================================================
    # TEARDOWN
    # =========================================================================

    async def _teardown(self, final_state: PublishState) -> None:
        if self._closed:
            return
        self._closed = True
        self._generation += 1

        task = self._handshake_task
        if task and not task.done() and task is not asyncio.current_task():
            task.cancel()
            # asyncio.wait never raises the task's exception
            await asyncio.wait([task])

        if self.resource_url:
            await self._delete_resource(self.resource_url)

        if self._pc:
            try:
                await self._pc.close()
            except Exception as e:
                self.logger.warning(f"[{self.session_id}] Error closing peer connection: {e}")

        # Our relay proxies only, the source tracks stay live
        for track in self._tracks:
            track.stop()
        self._tracks = []

        if self._owns_http and self._http is not None:
            await self._http.close()
            self._http = None

        if self.state != PublishState.FAILED:
            self._set_state(final_state)
        self._connection_states.close()

        self.logger.info(f"[{self.session_id}] Publish session {self.state.value}")

    async def _delete_resource(self, resource_url: str) -> None:
        """Best-effort WHIP resource deletion"""
        try:
            async with self._get_http().delete(
                resource_url,
                timeout=aiohttp.ClientTimeout(total=self.http_timeout),
                ssl=self.verify_tls,
            ) as response:
                self.logger.debug(
                    f"[{self.session_id}] DELETE {resource_url}: HTTP {response.status}"
                )
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            self.logger.warning(f"[{self.session_id}] Failed to delete WHIP resource: {e}")

    def _get_http(self) -> aiohttp.ClientSession:
        if self._http is None:
            self._http = aiohttp.ClientSession()
        return self._http

    # =========================================================================
    # EVENTS
    # =========================================================================

    def _handle_connection_state(self, state: str) -> None:
        self._connection_states.put(state)

        if self.event_bus:
            self.event_bus.publish(
                PUBLISH_CONNECTION_STATE,
                {"session_id": self.session_id, "state": state},
            )

        if self.on_connection_state_change:
            try:
                self.on_connection_state_change(state)
            except Exception as e:
                self.logger.error(f"Error in connection state callback: {e}")

        if state == CONNECTION_STATE_FAILED and self.state == PublishState.PUBLISHING:
            self.logger.error(f"[{self.session_id}] Peer connection failed")
            self._set_state(PublishState.FAILED)

    def _set_state(self, state: PublishState) -> None:
        if state == self.state:
            return
        self.state = state

        if self.event_bus:
            self.event_bus.publish(
                PUBLISH_STATE, {"session_id": self.session_id, "state": state}
            )

        if self.on_state_change:
            try:
                self.on_state_change(state)
            except Exception as e:
                self.logger.error(f"Error in publish state callback: {e}")

    def get_status(self) -> dict:
        return {
            "session_id": self.session_id,
            "state": self.state.value,
            "ingest_url": self.ingest_url,
            "connection_state": self._pc.connection_state if self._pc else None,
            "handle": self.handle.to_dict() if self.handle else None,
            "error": self.error.user_message if self.error else None,
        }
