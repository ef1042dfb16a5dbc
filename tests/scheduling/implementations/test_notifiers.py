"""
Notifier Tests

Tests for the notification channels showing:
- Desktop notifications (plyer replaced by a recorder)
- pyttsx3 availability and speech (engine replaced by a fake)
- Factory selection and alert-only fallback

To run:
    pytest tests/scheduling/implementations/test_notifiers.py -v
"""

import pyttsx3
import pytest

from scheduling.factory import SchedulingFactory
from scheduling.implementations import desktop_notifier
from scheduling.implementations.desktop_notifier import SESSION_VARIABLES, DesktopNotifier
from scheduling.implementations.mock_notifier import MockNotifier
from scheduling.implementations.tts_notifier import TTSNotifier
from scheduling.interfaces.notifier_interface import NotificationError


class FakeNotification:
    """Stands in for plyer.notification"""

    def __init__(self, error=None):
        self.error = error
        self.calls = []

    def notify(self, **kwargs):
        if self.error:
            raise self.error
        self.calls.append(kwargs)


@pytest.fixture
def fake_notification(monkeypatch):
    """
    Replace plyer's notification facade and provide a graphical session.

    Usage:
        async def test_x(fake_notification):
            await DesktopNotifier().notify("title", "body")
            assert fake_notification.calls
    """
    fake = FakeNotification()
    monkeypatch.setattr(desktop_notifier, "notification", fake)
    monkeypatch.setenv("DISPLAY", ":0")
    return fake


@pytest.fixture
def no_session(monkeypatch):
    """Remove every graphical session variable and pretend to be Linux"""
    for name in SESSION_VARIABLES:
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setattr(desktop_notifier.sys, "platform", "linux")


def broken_init():
    raise RuntimeError("no driver")


# =============================================================================
# DESKTOP TESTS
# =============================================================================


@pytest.mark.unit
async def test_desktop_passes_title_and_body(fake_notification):
    """Test the title, body and display time reach plyer."""
    notifier = DesktopNotifier(timeout=5)

    assert await notifier.request_permission() is True
    await notifier.notify("StreamMova Scheduled Stream", "It's time to start: Launch")

    assert fake_notification.calls == [
        {
            "title": "StreamMova Scheduled Stream",
            "message": "It's time to start: Launch",
            "app_name": "StreamMova",
            "timeout": 5,
        }
    ]


@pytest.mark.unit
async def test_desktop_failure_raises(monkeypatch):
    """Test a missing plyer backend becomes NotificationError."""
    fake = FakeNotification(error=NotImplementedError("No usable implementation found!"))
    monkeypatch.setattr(desktop_notifier, "notification", fake)

    with pytest.raises(NotificationError, match="No usable implementation"):
        await DesktopNotifier().notify("title", "body")


@pytest.mark.unit
async def test_desktop_denied_without_session(no_session):
    """Test permission is refused without a graphical session."""
    notifier = DesktopNotifier()

    assert notifier.is_available() is False
    assert await notifier.request_permission() is False


@pytest.mark.unit
async def test_desktop_permission_is_cached(fake_notification, monkeypatch):
    """Test the permission answer does not change once given."""
    notifier = DesktopNotifier()
    assert await notifier.request_permission() is True

    monkeypatch.delenv("DISPLAY")

    assert await notifier.request_permission() is True


# =============================================================================
# TTS TESTS
# =============================================================================


class FakeEngine:
    def __init__(self):
        self.properties = {}
        self.spoken = []
        self.stopped = False

    def setProperty(self, name, value):
        self.properties[name] = value

    def say(self, text):
        self.spoken.append(text)

    def runAndWait(self):
        pass

    def stop(self):
        self.stopped = True


@pytest.mark.unit
async def test_tts_speaks_body(monkeypatch):
    """Test a fresh engine speaks the body and is stopped."""
    engines = []

    def fake_init():
        engine = FakeEngine()
        engines.append(engine)
        return engine

    monkeypatch.setattr(pyttsx3, "init", fake_init)
    notifier = TTSNotifier(rate=120, volume=0.5)

    assert await notifier.request_permission() is True
    await notifier.notify("title", "It's time to start streaming!")

    speaker = engines[-1]
    assert speaker.spoken == ["It's time to start streaming!"]
    assert speaker.properties == {"rate": 120, "volume": 0.5}
    assert speaker.stopped is True


@pytest.mark.unit
async def test_tts_unavailable(monkeypatch):
    """Test a broken speech driver denies permission."""
    monkeypatch.setattr(pyttsx3, "init", broken_init)
    notifier = TTSNotifier()

    assert notifier.is_available() is False
    assert await notifier.request_permission() is False


@pytest.mark.unit
async def test_tts_speech_failure_raises(monkeypatch):
    """Test a speech error becomes NotificationError."""

    class FailingEngine(FakeEngine):
        def runAndWait(self):
            raise RuntimeError("audio device gone")

    monkeypatch.setattr(pyttsx3, "init", FailingEngine)

    with pytest.raises(NotificationError):
        await TTSNotifier().notify("title", "body")


# =============================================================================
# FACTORY TESTS
# =============================================================================


@pytest.mark.unit
def test_factory_mock_mode():
    """Test mock mode grants permission."""
    notifier = SchedulingFactory.create_notifier(mode="mock")

    assert isinstance(notifier, MockNotifier)
    assert notifier.granted is True


@pytest.mark.unit
def test_factory_auto_prefers_desktop(fake_notification):
    """Test auto mode picks desktop notifications in a graphical session."""
    assert isinstance(SchedulingFactory.create_notifier(mode="auto"), DesktopNotifier)


@pytest.mark.unit
def test_factory_auto_without_channels(no_session, monkeypatch):
    """Test auto mode falls back to an alert-only notifier."""
    monkeypatch.setattr(pyttsx3, "init", broken_init)

    notifier = SchedulingFactory.create_notifier(mode="auto")

    assert isinstance(notifier, MockNotifier)
    assert notifier.granted is False


@pytest.mark.unit
def test_factory_forced_desktop_without_session(no_session):
    """Test forcing desktop mode without a session raises."""
    with pytest.raises(RuntimeError):
        SchedulingFactory.create_notifier(mode="desktop")
