"""
Schedule Interfaces Package

Exposes the notifier contract and schedule exceptions.
"""

from scheduling.interfaces.notifier_interface import (
    NotificationError,
    NotifierInterface,
    ScheduleError,
)

# Public API
__all__ = [
    "NotificationError",
    "NotifierInterface",
    "ScheduleError",
]
