"""Session description (SDP) exchanged during the publish handshake."""

from dataclasses import dataclass


@dataclass(frozen=True)
class SessionDescription:
    sdp: str
    type: str  # "offer" or "answer"

    @property
    def candidate_count(self) -> int:
        """Number of ICE candidates embedded in the SDP"""
        return sum(
            1 for line in self.sdp.splitlines() if line.startswith("a=candidate:")
        )

    @property
    def media_kinds(self) -> list:
        """Media section kinds in order (audio/video)"""
        return [
            line[2:].split(" ", 1)[0]
            for line in self.sdp.splitlines()
            if line.startswith("m=")
        ]
