"""
State Machine Tests

Tests for the broadcast state machine showing:
- Allowed and rejected transitions
- State change callback
- Status reporting

To run:
    pytest tests/core/test_state_machine.py -v
"""

import pytest

from core.state_machine import BroadcastState, InvalidTransitionError, StateMachine


@pytest.fixture
def machine():
    """Provide a fresh StateMachine"""
    return StateMachine()


@pytest.mark.unit
def test_initial_state(machine):
    """Test a new machine starts IDLE."""
    assert machine.get_current_state() == BroadcastState.IDLE
    assert machine.previous_state is None


@pytest.mark.unit
def test_full_cycle(machine):
    """Test IDLE -> CAMERA_ON -> PUBLISHING -> CAMERA_ON -> IDLE."""
    assert machine.transition_to(BroadcastState.CAMERA_ON) is True
    assert machine.transition_to(BroadcastState.PUBLISHING) is True
    assert machine.transition_to(BroadcastState.CAMERA_ON) is True
    assert machine.transition_to(BroadcastState.IDLE) is True

    assert machine.previous_state == BroadcastState.CAMERA_ON


@pytest.mark.unit
def test_publishing_to_idle(machine):
    """Test the camera can be stopped while publishing."""
    machine.transition_to(BroadcastState.CAMERA_ON)
    machine.transition_to(BroadcastState.PUBLISHING)

    assert machine.transition_to(BroadcastState.IDLE) is True


@pytest.mark.unit
def test_idle_cannot_publish(machine):
    """Test publishing requires the camera."""
    assert machine.can_transition(BroadcastState.PUBLISHING) is False

    with pytest.raises(InvalidTransitionError):
        machine.transition_to(BroadcastState.PUBLISHING)

    assert machine.current_state == BroadcastState.IDLE


@pytest.mark.unit
def test_same_state_is_noop(machine):
    """Test transitioning to the current state returns False."""
    changes = []
    machine.on_state_change = lambda old, new, reason: changes.append(new)

    assert machine.transition_to(BroadcastState.IDLE) is False
    assert changes == []


@pytest.mark.unit
def test_callback_receives_reason(machine):
    """Test the callback gets old state, new state and reason."""
    changes = []
    machine.on_state_change = lambda old, new, reason: changes.append((old, new, reason))

    machine.transition_to(BroadcastState.CAMERA_ON, "camera started")

    assert changes == [(BroadcastState.IDLE, BroadcastState.CAMERA_ON, "camera started")]


@pytest.mark.unit
def test_callback_error_is_contained(machine):
    """Test a failing callback does not undo the transition."""

    def broken(old, new, reason):
        raise RuntimeError("boom")

    machine.on_state_change = broken

    assert machine.transition_to(BroadcastState.CAMERA_ON) is True
    assert machine.current_state == BroadcastState.CAMERA_ON


@pytest.mark.unit
def test_status_info(machine):
    """Test status info reports state names and duration."""
    machine.transition_to(BroadcastState.CAMERA_ON)

    info = machine.get_status_info()

    assert info["current_state"] == "camera_on"
    assert info["previous_state"] == "idle"
    assert info["state_duration"] >= 0
