"""
Schedule Timer

One-shot, cancelable delayed notification.

On fire, the message goes to the system notification channel when
permission is granted; otherwise (or when delivery fails) it goes to the
synchronous in-app alert. The message is always delivered by one of them.
"""

import asyncio
import logging
import time
from typing import Callable, Optional

from config.settings import NOTIFICATION_TITLE, SCHEDULE_MIN_LEAD_MS
from core.event_bus import SCHEDULE_STATE, EventBus
from scheduling.constants import (
    STATUS_CANCELLED,
    STATUS_SCHEDULED,
    STATUS_TRIGGERED,
    DeliveryChannel,
    ScheduleState,
)
from scheduling.interfaces.notifier_interface import NotifierInterface, ScheduleError
from scheduling.models.schedule_entry import ScheduleEntry, ScheduleStatus

logger = logging.getLogger(__name__)


def now_ms() -> int:
    return int(time.time() * 1000)


def console_alert(message: str) -> None:
    """Default in-app alert: print to the console and log"""
    print(f"\n{'=' * 60}\n  {NOTIFICATION_TITLE}\n  {message}\n{'=' * 60}\n", flush=True)
    logger.warning(f"ALERT: {message}")


class ScheduleTimer:
    """
    Arms at most one delayed notification.

    Usage:
        timer = ScheduleTimer(SchedulingFactory.create_notifier())
        timer.arm("Launch", now_ms() + 60_000)
        timer.cancel()
        timer.cancel()  # no-op
    """

    def __init__(
        self,
        notifier: NotifierInterface,
        alert: Callable[[str], None] = console_alert,
        event_bus: Optional[EventBus] = None,
        min_lead_ms: int = SCHEDULE_MIN_LEAD_MS,
        clock_ms: Callable[[], int] = now_ms,
    ):
        """
        Initialize timer.

        Args:
            notifier: System notification channel
            alert: Synchronous in-app alert (fallback)
            event_bus: Optional bus receiving schedule.state events
            min_lead_ms: Minimum distance of the target into the future
            clock_ms: Returns the current epoch time in milliseconds
        """
        self.logger = logging.getLogger(__name__)
        self.notifier = notifier
        self.alert = alert
        self.event_bus = event_bus
        self.min_lead_ms = min_lead_ms
        self.clock_ms = clock_ms

        self.state = ScheduleState.IDLE
        self.entry: Optional[ScheduleEntry] = None
        self.status = ScheduleStatus()
        self.last_channel: Optional[DeliveryChannel] = None
        self._task: Optional[asyncio.Task] = None

        # Callback: (entry, channel) after delivery
        self.on_fire: Optional[Callable[[ScheduleEntry, DeliveryChannel], None]] = None

    @property
    def is_armed(self) -> bool:
        return self.state == ScheduleState.ARMED

    def arm(self, title: str, fire_at_epoch_ms: int) -> ScheduleEntry:
        """
        Arm the timer, replacing any armed schedule.

        Must be called from a running event loop.

        Raises:
            ScheduleError: TIME_IN_PAST if the target is too close or past
        """
        now = self.clock_ms()
        if fire_at_epoch_ms - now < self.min_lead_ms:
            self.logger.warning(
                f"Rejected schedule {fire_at_epoch_ms - now}ms from now "
                f"(minimum {self.min_lead_ms}ms)"
            )
            raise ScheduleError()

        if self.is_armed:
            self.logger.info("Replacing armed schedule")
            self._cancel_task()

        entry = ScheduleEntry(title=title.strip(), fire_at_epoch_ms=fire_at_epoch_ms)
        self.entry = entry
        self._task = asyncio.ensure_future(self._run(entry, entry.delay_seconds(now)))

        self._set_state(
            ScheduleState.ARMED,
            ScheduleStatus(True, STATUS_SCHEDULED.format(when=entry.fire_at_display)),
        )
        self.logger.info(f"Schedule armed: '{entry.title}' at {entry.fire_at_display}")
        return entry

    def cancel(self) -> bool:
        """
        Cancel the armed schedule. Idempotent.

        Returns:
            True if a schedule was cancelled
        """
        if not self.is_armed:
            return False

        self._cancel_task()
        self.logger.info(f"Schedule cancelled: '{self.entry.title}'")
        self.entry = None
        self._set_state(ScheduleState.CANCELLED, ScheduleStatus(False, STATUS_CANCELLED))
        return True

    def _cancel_task(self) -> None:
        if self._task and not self._task.done():
            self._task.cancel()
        self._task = None

    async def _run(self, entry: ScheduleEntry, delay: float) -> None:
        await asyncio.sleep(delay)
        channel = await self._deliver(entry.message)

        # A cancel() or re-arm during delivery replaced the entry
        if self.entry is not entry:
            return

        self.last_channel = channel
        self.entry = None
        self._task = None
        self._set_state(ScheduleState.FIRED, ScheduleStatus(False, STATUS_TRIGGERED))

        if self.on_fire:
            try:
                self.on_fire(entry, channel)
            except Exception as e:
                self.logger.error(f"Error in schedule fire callback: {e}")

    async def _deliver(self, message: str) -> DeliveryChannel:
        try:
            if await self.notifier.request_permission():
                await self.notifier.notify(NOTIFICATION_TITLE, message)
                return DeliveryChannel.NOTIFICATION
            self.logger.info("Notification permission denied, using alert")
        except Exception as e:
            self.logger.warning(f"Notification failed ({e}), using alert")

        self.alert(message)
        return DeliveryChannel.ALERT

    def _set_state(self, state: ScheduleState, status: ScheduleStatus) -> None:
        self.state = state
        self.status = status

        if self.event_bus:
            self.event_bus.publish(SCHEDULE_STATE, status)

    def get_status(self) -> dict:
        return {
            "state": self.state.value,
            **self.status.to_dict(),
            "entry": self.entry.to_dict() if self.entry else None,
            "last_channel": self.last_channel.value if self.last_channel else None,
            "notifier": self.notifier.get_info(),
        }
