"""
Scheduling Controllers Package

One-shot schedule timer.
"""

from scheduling.controllers.schedule_timer import ScheduleTimer

# Public API
__all__ = [
    "ScheduleTimer",
]
