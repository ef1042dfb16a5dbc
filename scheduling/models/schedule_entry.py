"""
Schedule Entry

The one active schedule and the status line shown to the user.
"""

from dataclasses import dataclass
from datetime import datetime

from config.settings import NOTIFICATION_DEFAULT_BODY, NOTIFICATION_TITLED_BODY
from scheduling.constants import SCHEDULE_TIME_FORMAT


@dataclass(frozen=True)
class ScheduleEntry:
    title: str
    fire_at_epoch_ms: int

    @property
    def fire_at(self) -> datetime:
        """Target time in local time"""
        return datetime.fromtimestamp(self.fire_at_epoch_ms / 1000)

    @property
    def fire_at_display(self) -> str:
        return self.fire_at.strftime(SCHEDULE_TIME_FORMAT)

    @property
    def message(self) -> str:
        """Text delivered when the schedule fires"""
        title = self.title.strip()
        if title:
            return NOTIFICATION_TITLED_BODY.format(title=title)
        return NOTIFICATION_DEFAULT_BODY

    def delay_seconds(self, now_ms: int) -> float:
        return max(self.fire_at_epoch_ms - now_ms, 0) / 1000

    def to_dict(self) -> dict:
        return {
            "title": self.title,
            "fire_at_epoch_ms": self.fire_at_epoch_ms,
            "fire_at": self.fire_at_display,
        }


@dataclass(frozen=True)
class ScheduleStatus:
    active: bool = False
    message: str = ""

    def to_dict(self) -> dict:
        return {"active": self.active, "message": self.message}
