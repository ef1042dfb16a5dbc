"""
Schedule Constants

Enums for the one-shot schedule timer and its notification channels.

Note: Lead time and notification texts live in config/settings.py.
"""

from enum import Enum


class ScheduleState(Enum):
    """
    Lifecycle: IDLE -> ARMED -> (FIRED | CANCELLED) -> ARMED ...
    """

    IDLE = "idle"  # Nothing armed yet
    ARMED = "armed"  # Waiting for the target time
    FIRED = "fired"  # Message delivered
    CANCELLED = "cancelled"  # Cancelled before firing


class ScheduleErrorKind(Enum):
    TIME_IN_PAST = "time-in-past"


class DeliveryChannel(Enum):
    """How the scheduled message reached the user"""

    NOTIFICATION = "notification"  # System notification
    ALERT = "alert"  # In-app fallback


# Status messages shown next to the schedule form
STATUS_SCHEDULED = "Scheduled for {when}"
STATUS_TRIGGERED = "Schedule triggered."
STATUS_CANCELLED = "Schedule cancelled."
TIME_IN_PAST_MESSAGE = "Choose a time at least a few seconds in the future."

# Format of the local time in STATUS_SCHEDULED
SCHEDULE_TIME_FORMAT = "%Y-%m-%d %H:%M:%S"
