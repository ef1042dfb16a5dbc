import logging
import time
from enum import Enum
from typing import Callable, Dict, Optional, Set


class BroadcastState(Enum):
    IDLE = "idle"  # No camera
    CAMERA_ON = "camera_on"  # Previewing
    PUBLISHING = "publishing"  # Previewing and publishing to ingest


# Allowed transitions. Recording and scheduling are orthogonal and
# tracked by their own components, not here.
TRANSITIONS: Dict[BroadcastState, Set[BroadcastState]] = {
    BroadcastState.IDLE: {BroadcastState.CAMERA_ON},
    BroadcastState.CAMERA_ON: {BroadcastState.IDLE, BroadcastState.PUBLISHING},
    BroadcastState.PUBLISHING: {BroadcastState.IDLE, BroadcastState.CAMERA_ON},
}


class InvalidTransitionError(Exception):
    """Raised when a transition is not in the transition table"""


class StateMachine:
    """
    Authoritative state for a broadcast session.

    Replaces scattered "is camera on / is streaming" flags with one enum
    and guarded transitions.
    """

    def __init__(self):
        self.current_state = BroadcastState.IDLE
        self.previous_state: Optional[BroadcastState] = None
        self.state_start_time = time.time()
        self.logger = logging.getLogger(__name__)

        # Called with (old_state, new_state, reason)
        self.on_state_change: Optional[
            Callable[[BroadcastState, BroadcastState, str], None]
        ] = None

        self.logger.info("State machine initialized in IDLE state")

    def get_current_state(self) -> BroadcastState:
        """Get the current state"""
        return self.current_state

    def get_state_duration(self) -> float:
        """Get how long we've been in the current state (seconds)"""
        return time.time() - self.state_start_time

    def can_transition(self, new_state: BroadcastState) -> bool:
        return new_state in TRANSITIONS[self.current_state]

    def transition_to(self, new_state: BroadcastState, reason: str = "") -> bool:
        """
        Transition to a new state with logging and callback notification.

        Returns:
            True if the state changed, False if already in new_state

        Raises:
            InvalidTransitionError: If the transition is not allowed
        """
        if new_state == self.current_state:
            self.logger.debug(f"Already in state {new_state.value}")
            return False

        if not self.can_transition(new_state):
            raise InvalidTransitionError(
                f"{self.current_state.value} -> {new_state.value} not allowed"
            )

        old_state = self.current_state
        self.previous_state = old_state
        self.current_state = new_state
        self.state_start_time = time.time()

        log_msg = f"State transition: {old_state.value} -> {new_state.value}"
        if reason:
            log_msg += f" ({reason})"
        self.logger.info(log_msg)

        if self.on_state_change:
            try:
                self.on_state_change(old_state, new_state, reason)
            except Exception as e:
                self.logger.error(f"Error in state change callback: {e}")

        return True

    def get_status_info(self) -> Dict:
        """Get detailed status information for debugging/monitoring"""
        return {
            "current_state": self.current_state.value,
            "previous_state": (
                self.previous_state.value if self.previous_state else None
            ),
            "state_duration": self.get_state_duration(),
        }
