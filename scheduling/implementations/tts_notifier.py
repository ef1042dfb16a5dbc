"""
pyttsx3 Notifier

Speaks the scheduled message aloud. Used on headless hosts where no
desktop notification daemon is running.

pyttsx3 is blocking and not thread safe, so each message gets a fresh
engine inside the default executor.
"""

import asyncio
import logging
import time
from typing import Optional

import pyttsx3

from config.settings import TTS_RATE, TTS_VOLUME
from scheduling.interfaces.notifier_interface import NotificationError, NotifierInterface


class TTSNotifier(NotifierInterface):
    """
    Spoken notification channel.

    Usage:
        notifier = TTSNotifier()
        if await notifier.request_permission():
            await notifier.notify("StreamMova Scheduled Stream", "It's time to start!")
    """

    def __init__(self, rate: int = TTS_RATE, volume: float = TTS_VOLUME):
        self.logger = logging.getLogger(__name__)
        self.rate = rate
        self.volume = volume
        self._permission: Optional[bool] = None

    def _create_engine(self) -> pyttsx3.Engine:
        engine = pyttsx3.init()
        engine.setProperty("rate", self.rate)
        engine.setProperty("volume", self.volume)
        # Engine reports ready before the audio driver is
        time.sleep(0.1)
        return engine

    def is_available(self) -> bool:
        try:
            pyttsx3.init()
            return True
        except Exception as e:
            self.logger.debug(f"pyttsx3 not usable: {e}")
            return False

    async def request_permission(self) -> bool:
        if self._permission is None:
            loop = asyncio.get_running_loop()
            self._permission = await loop.run_in_executor(None, self.is_available)
            self.logger.info(
                f"Spoken notifications {'available' if self._permission else 'unavailable'}"
            )
        return self._permission

    def _speak(self, text: str) -> None:
        engine = None
        try:
            engine = self._create_engine()
            engine.say(text)
            engine.runAndWait()
        except Exception as e:
            raise NotificationError(f"Speech failed: {e}") from e
        finally:
            if engine is not None:
                try:
                    engine.stop()
                except Exception as e:
                    self.logger.debug(f"Error stopping TTS engine: {e}")

    async def notify(self, title: str, body: str) -> None:
        loop = asyncio.get_running_loop()
        await loop.run_in_executor(None, self._speak, body)
        self.logger.info(f"Spoke notification: {body}")
