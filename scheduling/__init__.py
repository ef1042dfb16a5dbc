"""
Scheduling Module

One-shot scheduled stream reminders with notification and alert fallback.

Public API:
    - ScheduleTimer: Arm/cancel a single delayed notification
    - SchedulingFactory: Picks desktop, spoken or no notification channel
    - ScheduleEntry / ScheduleStatus: Active schedule and its status line
    - ScheduleError: Raised for targets in the past
    - DeliveryChannel: Which channel delivered the message

Usage:
    from scheduling import ScheduleTimer, SchedulingFactory

    timer = ScheduleTimer(SchedulingFactory.create_notifier())
    timer.arm("Launch", fire_at_epoch_ms)
"""

from scheduling.constants import DeliveryChannel, ScheduleErrorKind, ScheduleState
from scheduling.controllers.schedule_timer import ScheduleTimer
from scheduling.factory import SchedulingFactory
from scheduling.interfaces.notifier_interface import (
    NotificationError,
    NotifierInterface,
    ScheduleError,
)
from scheduling.models.schedule_entry import ScheduleEntry, ScheduleStatus

__all__ = [
    "DeliveryChannel",
    "NotificationError",
    "NotifierInterface",
    "ScheduleEntry",
    "ScheduleError",
    "ScheduleErrorKind",
    "ScheduleState",
    "ScheduleStatus",
    "ScheduleTimer",
    "SchedulingFactory",
]
