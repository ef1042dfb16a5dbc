"""
Core utilities and modules.

Public API:
    - BroadcastState / StateMachine: Orchestrator state tracking
    - EventBus / EventStream: State change subscription
    - BroadcastError: Base of all surfaced errors

The orchestrator itself lives in core.orchestrator (imported directly,
it depends on every component package).

Usage:
    from core.orchestrator import BroadcastSessionOrchestrator

    orchestrator = BroadcastSessionOrchestrator.create(mode="mock")
    await orchestrator.start_camera()
"""

from core.errors import BroadcastError, ErrorCause
from core.event_bus import EventBus, EventStream
from core.state_machine import BroadcastState, InvalidTransitionError, StateMachine

__all__ = [
    "BroadcastError",
    "BroadcastState",
    "ErrorCause",
    "EventBus",
    "EventStream",
    "InvalidTransitionError",
    "StateMachine",
]
