"""
Scheduling Test Configuration and Fixtures

Shared fixtures for scheduling module tests.
"""

import pytest

from scheduling.controllers.schedule_timer import ScheduleTimer
from scheduling.implementations.mock_notifier import MockNotifier

# Frozen "now" for every timer built here (2025-01-15 14:30:00 UTC)
NOW_MS = 1_736_951_400_000


@pytest.fixture
def notifier():
    """Provide a MockNotifier that grants permission"""
    return MockNotifier()


@pytest.fixture
def alerts():
    """Collect messages sent to the in-app alert"""
    return []


@pytest.fixture
def make_timer(alerts):
    """
    Build ScheduleTimers with a frozen clock.

    Usage:
        def test_timer(make_timer, notifier):
            timer = make_timer(notifier, min_lead_ms=0)
            timer.arm("Launch", NOW_MS + 20)
    """
    timers = []

    def factory(notifier, min_lead_ms=500):
        timer = ScheduleTimer(
            notifier,
            alert=alerts.append,
            min_lead_ms=min_lead_ms,
            clock_ms=lambda: NOW_MS,
        )
        timers.append(timer)
        return timer

    yield factory

    for timer in timers:
        timer.cancel()


@pytest.fixture
def timer(make_timer, notifier):
    """Provide a ScheduleTimer with the default minimum lead"""
    return make_timer(notifier)


@pytest.fixture
def fast_timer(make_timer, notifier):
    """Provide a ScheduleTimer accepting targets a few ms ahead"""
    return make_timer(notifier, min_lead_ms=0)
