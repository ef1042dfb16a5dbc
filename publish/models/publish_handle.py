"""
Publish Handle

Returned by PublishSession.publish() once the answer has been applied.
"""

import time
from dataclasses import dataclass, field
from typing import Optional


@dataclass(frozen=True)
class PublishHandle:
    """
    Identifies one established publish.

    Attributes:
        session_id: Id of the PublishSession that produced it
        ingest_url: Endpoint the offer was POSTed to
        resource_url: WHIP resource from the Location header (for DELETE)
        local_sdp: Offer sent, with all gathered candidates
        remote_sdp: Answer applied as remote description
    """

    session_id: str
    ingest_url: str
    resource_url: Optional[str]
    local_sdp: str
    remote_sdp: str
    started_at: float = field(default_factory=time.time)

    @property
    def duration(self) -> float:
        return time.time() - self.started_at

    def to_dict(self) -> dict:
        return {
            "session_id": self.session_id,
            "ingest_url": self.ingest_url,
            "resource_url": self.resource_url,
            "started_at": self.started_at,
            "duration": self.duration,
        }
