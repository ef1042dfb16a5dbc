"""
aiortc Peer Connection

Send-only RTCPeerConnection used for the WHIP publish handshake.
"""

import asyncio
import logging
from typing import Any, List, Optional

from aiortc import (
    RTCConfiguration,
    RTCIceServer,
    RTCPeerConnection,
    RTCSessionDescription,
)

from config.settings import ICE_SERVERS
from publish.constants import ICE_GATHERING_COMPLETE
from publish.interfaces.peer_connection_interface import PeerConnectionInterface
from publish.models.session_description import SessionDescription


class AiortcPeerConnection(PeerConnectionInterface):
    """
    PeerConnectionInterface backed by aiortc.

    aiortc gathers candidates inside setLocalDescription, so the gathering
    wait usually returns immediately; it still checks the state so a future
    trickle-ICE implementation cannot send an incomplete offer.
    """

    def __init__(self, ice_servers: Optional[List[str]] = None):
        self.logger = logging.getLogger(__name__)

        urls = ICE_SERVERS if ice_servers is None else ice_servers
        configuration = RTCConfiguration(
            iceServers=[RTCIceServer(urls=url) for url in urls]
        )
        self._pc = RTCPeerConnection(configuration=configuration)
        self._gathering_complete = asyncio.Event()
        self.on_connection_state_change = None

        self._pc.on("connectionstatechange", self._handle_connection_state)
        self._pc.on("icegatheringstatechange", self._handle_gathering_state)

        self.logger.debug(f"Peer connection created (ice servers: {urls})")

    def _handle_connection_state(self) -> None:
        state = self._pc.connectionState
        self.logger.info(f"Connection state: {state}")
        if self.on_connection_state_change:
            self.on_connection_state_change(state)

    def _handle_gathering_state(self) -> None:
        self.logger.debug(f"ICE gathering state: {self._pc.iceGatheringState}")
        if self._pc.iceGatheringState == ICE_GATHERING_COMPLETE:
            self._gathering_complete.set()

    def add_outbound_track(self, track: Any) -> None:
        self._pc.addTransceiver(track, direction="sendonly")

    async def create_offer(self) -> SessionDescription:
        offer = await self._pc.createOffer()
        return SessionDescription(sdp=offer.sdp, type=offer.type)

    async def set_local_description(self, description: SessionDescription) -> None:
        await self._pc.setLocalDescription(
            RTCSessionDescription(sdp=description.sdp, type=description.type)
        )

    async def wait_for_ice_gathering_complete(self, timeout: float) -> None:
        if self._pc.iceGatheringState == ICE_GATHERING_COMPLETE:
            return
        await asyncio.wait_for(self._gathering_complete.wait(), timeout)

    @property
    def local_description(self) -> Optional[SessionDescription]:
        description = self._pc.localDescription
        if description is None:
            return None
        return SessionDescription(sdp=description.sdp, type=description.type)

    async def set_remote_description(self, description: SessionDescription) -> None:
        await self._pc.setRemoteDescription(
            RTCSessionDescription(sdp=description.sdp, type=description.type)
        )

    @property
    def connection_state(self) -> str:
        return self._pc.connectionState

    async def close(self) -> None:
        await self._pc.close()
