"""
Mock Peer Connection

Simulated peer connection for testing the publish handshake without ICE,
DTLS or a media server.

With read_media=True it pulls frames from its outbound tracks once the
answer is applied, the way an RTP sender does.
"""

import asyncio
import logging
from typing import Any, Dict, List, Optional

from aiortc.mediastreams import MediaStreamError

from publish.constants import (
    CONNECTION_STATE_CLOSED,
    CONNECTION_STATE_CONNECTED,
    CONNECTION_STATE_CONNECTING,
    CONNECTION_STATE_NEW,
    ICE_GATHERING_COMPLETE,
    SDP_PREFIX,
)
from publish.interfaces.peer_connection_interface import PeerConnectionInterface
from publish.models.session_description import SessionDescription


class MockPeerConnection(PeerConnectionInterface):
    """
    Mock peer connection.

    Produces a syntactically plausible offer with one send-only media
    section per track and one host candidate per section once gathering
    completes.

    Usage:
        pc = MockPeerConnection(gathering_delay=0.05)
        pc.add_outbound_track(track)
        offer = await pc.create_offer()
    """

    def __init__(
        self,
        gathering_delay: float = 0.0,
        auto_connect: bool = True,
        read_media: bool = False,
        answer_delay: float = 0.0,
    ):
        """
        Initialize mock peer connection.

        Args:
            gathering_delay: Seconds ICE gathering takes after set_local_description
            auto_connect: Move to "connected" as soon as the answer is applied
            read_media: Consume outbound tracks after the answer is applied
            answer_delay: Seconds set_remote_description suspends
        """
        self.logger = logging.getLogger(__name__)
        self.gathering_delay = gathering_delay
        self.auto_connect = auto_connect
        self.read_media = read_media
        self.answer_delay = answer_delay
        self.on_connection_state_change = None

        self.tracks: List[Any] = []
        self.remote_description: Optional[SessionDescription] = None
        self.ice_gathering_state = "new"
        self._local: Optional[SessionDescription] = None
        self._state = CONNECTION_STATE_NEW
        self._gathering_task: Optional[asyncio.Task] = None
        self._sender_tasks: List[asyncio.Task] = []

        # Counters for assertions
        self.close_count = 0
        self.sent_pts: Dict[str, List[int]] = {}

        self.logger.debug("[MOCK] Peer connection created")

    def add_outbound_track(self, track: Any) -> None:
        self.tracks.append(track)

    async def create_offer(self) -> SessionDescription:
        lines = ["v=0", "o=- 0 0 IN IP4 127.0.0.1", "s=-", "t=0 0"]
        for index, track in enumerate(self.tracks):
            lines += [
                f"m={track.kind} 9 UDP/TLS/RTP/SAVPF 96",
                "c=IN IP4 0.0.0.0",
                f"a=mid:{index}",
                "a=sendonly",
            ]
        return SessionDescription(sdp="\r\n".join(lines) + "\r\n", type="offer")

    async def set_local_description(self, description: SessionDescription) -> None:
        self._local = description
        self.ice_gathering_state = "gathering"
        self._gathering_task = asyncio.ensure_future(self._gather())

    async def _gather(self) -> None:
        if self.gathering_delay:
            await asyncio.sleep(self.gathering_delay)

        lines = []
        for line in self._local.sdp.splitlines():
            lines.append(line)
            if line == "a=sendonly":
                lines.append("a=candidate:1 1 udp 2130706431 127.0.0.1 50000 typ host")
        self._local = SessionDescription(
            sdp="\r\n".join(lines) + "\r\n", type=self._local.type
        )
        self.ice_gathering_state = ICE_GATHERING_COMPLETE
        self.logger.debug("[MOCK] ICE gathering complete")

    async def wait_for_ice_gathering_complete(self, timeout: float) -> None:
        if self._gathering_task is None:
            raise RuntimeError("set_local_description() not called")
        await asyncio.wait_for(asyncio.shield(self._gathering_task), timeout)

    @property
    def local_description(self) -> Optional[SessionDescription]:
        return self._local

    async def set_remote_description(self, description: SessionDescription) -> None:
        if self._state == CONNECTION_STATE_CLOSED:
            raise RuntimeError("Peer connection is closed")
        if not description.sdp.startswith(SDP_PREFIX):
            raise ValueError("Invalid SDP answer")

        if self.answer_delay:
            await asyncio.sleep(self.answer_delay)

        self.remote_description = description
        self._set_state(CONNECTION_STATE_CONNECTING)
        if self.auto_connect:
            self._set_state(CONNECTION_STATE_CONNECTED)

        if self.read_media:
            self.sent_pts = {track.kind: [] for track in self.tracks}
            self._sender_tasks = [
                asyncio.ensure_future(self._send_track(track)) for track in self.tracks
            ]

    async def _send_track(self, track: Any) -> None:
        while True:
            try:
                frame = await track.recv()
            except MediaStreamError:
                return
            self.sent_pts[track.kind].append(frame.pts)

    @property
    def connection_state(self) -> str:
        return self._state

    async def close(self) -> None:
        if self._state == CONNECTION_STATE_CLOSED:
            return
        self.close_count += 1
        if self._gathering_task and not self._gathering_task.done():
            self._gathering_task.cancel()
        for task in self._sender_tasks:
            task.cancel()
        if self._sender_tasks:
            await asyncio.wait(self._sender_tasks)
        self._sender_tasks = []
        self._set_state(CONNECTION_STATE_CLOSED)
        self.logger.debug("[MOCK] Peer connection closed")

    def _set_state(self, state: str) -> None:
        self._state = state
        if self.on_connection_state_change:
            self.on_connection_state_change(state)

    # =========================================================================
    # TEST HELPERS
    # =========================================================================

    def simulate_connection_state(self, state: str) -> None:
        """Force a transition (e.g. "disconnected", "failed")"""
        self.logger.info(f"[MOCK] Simulating connection state: {state}")
        self._set_state(state)

    @property
    def is_closed(self) -> bool:
        return self._state == CONNECTION_STATE_CLOSED
