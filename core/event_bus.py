"""
Event Bus

Publish/subscribe for device and connection state changes, so the
orchestrator (and any UI layer) reacts to events instead of polling.

Two delivery styles:
- subscribe(): synchronous callbacks, called in publish order
- EventStream: finite async iterator for one session (not restartable)
"""

import asyncio
import logging
from typing import Any, Callable, Dict, List, Optional

EventCallback = Callable[[str, Any], None]

# Topics
DEVICE_STATE = "device.state"
PUBLISH_CONNECTION_STATE = "publish.connection_state"
PUBLISH_STATE = "publish.state"
RECORDING_STATE = "recording.state"
RECORDING_CHUNK = "recording.chunk"
SCHEDULE_STATE = "schedule.state"
ORCHESTRATOR_STATE = "orchestrator.state"


class EventBus:
    def __init__(self):
        self.logger = logging.getLogger(__name__)
        self.subscribers: Dict[str, List[EventCallback]] = {}

    def subscribe(self, event_type: str, callback: EventCallback) -> None:
        """Register a handler for an event type ("*" receives everything)"""
        self.subscribers.setdefault(event_type, []).append(callback)
        self.logger.debug(f"Subscribed to {event_type}")

    def unsubscribe(self, event_type: str, callback: EventCallback) -> bool:
        callbacks = self.subscribers.get(event_type, [])
        if callback in callbacks:
            callbacks.remove(callback)
            return True
        return False

    def publish(self, event_type: str, data: Any = None) -> int:
        """
        Send an event to subscribers.

        Handler errors are logged and never propagate to the publisher.

        Returns:
            Number of handlers called
        """
        handlers = list(self.subscribers.get(event_type, []))
        handlers += self.subscribers.get("*", [])

        for handler in handlers:
            try:
                handler(event_type, data)
            except Exception as e:
                self.logger.error(f"Error in {event_type} handler: {e}")

        return len(handlers)


class EventStream:
    """
    Finite async stream of events for a single session.

    Values are pushed with put(); iteration ends after close().
    Once closed, a stream cannot be reopened.

    Usage:
        async for state in session.connection_states():
            print(state)
    """

    _CLOSED = object()

    def __init__(self):
        self._queue: "asyncio.Queue[Any]" = asyncio.Queue()
        self._closed = False
        self.history: List[Any] = []

    @property
    def closed(self) -> bool:
        return self._closed

    def put(self, value: Any) -> bool:
        if self._closed:
            return False
        self.history.append(value)
        self._queue.put_nowait(value)
        return True

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        self._queue.put_nowait(self._CLOSED)

    def __aiter__(self):
        return self

    async def __anext__(self) -> Any:
        value = await self._queue.get()
        if value is self._CLOSED:
            # Leave the sentinel for any other consumer
            self._queue.put_nowait(self._CLOSED)
            raise StopAsyncIteration
        return value

    async def next(self, timeout: Optional[float] = None) -> Any:
        """Await the next value (helper for tests/UIs without async for)"""
        return await asyncio.wait_for(self.__anext__(), timeout)
