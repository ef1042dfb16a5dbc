"""
Channel Registry

In-memory list of destination channels the operator has connected.

Records are configuration data only: nothing here talks to the platforms,
and the broadcast itself still goes to the single ingest endpoint.
"""

import itertools
import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Dict, List, Optional

# Platform id -> display name
AVAILABLE_PLATFORMS: Dict[str, str] = {
    "youtube": "YouTube",
    "facebook": "Facebook",
    "instagram": "Instagram",
    "tiktok": "TikTok",
    "twitch": "Twitch",
    "twitter": "Twitter (X)",
}

CHANNEL_STATUS_CONNECTED = "connected"


class ChannelRegistryError(ValueError):
    """Raised when a channel cannot be added"""


@dataclass
class ChannelRecord:
    channel_id: int
    platform_id: str
    credential_ref: str = field(repr=False)
    title: str = ""
    status: str = CHANNEL_STATUS_CONNECTED
    added_at: str = field(
        default_factory=lambda: datetime.now(timezone.utc).isoformat()
    )

    @property
    def platform_name(self) -> str:
        return AVAILABLE_PLATFORMS.get(self.platform_id, self.platform_id)

    def to_dict(self) -> dict:
        """Serializable view (the credential is never included)"""
        return {
            "channel_id": self.channel_id,
            "platform_id": self.platform_id,
            "platform_name": self.platform_name,
            "title": self.title,
            "status": self.status,
            "added_at": self.added_at,
        }


class ChannelRegistry:
    """
    Connected destination channels, at most one per platform.

    Usage:
        registry = ChannelRegistry()
        record = registry.add("youtube", "stream-key-123", title="Morning show")
        registry.remove(record.channel_id)
    """

    def __init__(self):
        self.logger = logging.getLogger(__name__)
        self._channels: List[ChannelRecord] = []
        self._ids = itertools.count(1)

    def add(self, platform_id: str, credential_ref: str, title: str = "") -> ChannelRecord:
        """
        Register a channel.

        Raises:
            ChannelRegistryError: Unknown platform, missing credential or
                                  platform already connected
        """
        if platform_id not in AVAILABLE_PLATFORMS:
            raise ChannelRegistryError(f"Unknown platform: {platform_id}")

        if not credential_ref or not credential_ref.strip():
            raise ChannelRegistryError("Select a platform and enter a stream key/RTMP URL first.")

        if self.get(platform_id) is not None:
            raise ChannelRegistryError(
                f"{AVAILABLE_PLATFORMS[platform_id]} is already connected."
            )

        record = ChannelRecord(
            channel_id=next(self._ids),
            platform_id=platform_id,
            credential_ref=credential_ref.strip(),
            title=title.strip() or f"Stream to {AVAILABLE_PLATFORMS[platform_id]}",
        )
        self._channels.append(record)

        self.logger.info(f"Channel added: {record.platform_name} ({record.title})")
        return record

    def remove(self, channel_id: int) -> bool:
        for record in self._channels:
            if record.channel_id == channel_id:
                self._channels.remove(record)
                self.logger.info(f"Channel removed: {record.platform_name}")
                return True
        return False

    def get(self, platform_id: str) -> Optional[ChannelRecord]:
        return next((c for c in self._channels if c.platform_id == platform_id), None)

    def list(self) -> List[ChannelRecord]:
        return list(self._channels)

    @property
    def connected_count(self) -> int:
        return sum(1 for c in self._channels if c.status == CHANNEL_STATUS_CONNECTED)

    def __len__(self) -> int:
        return len(self._channels)
