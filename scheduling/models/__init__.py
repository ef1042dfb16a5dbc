"""Schedule data models."""

from scheduling.models.schedule_entry import ScheduleEntry, ScheduleStatus

__all__ = ["ScheduleEntry", "ScheduleStatus"]
