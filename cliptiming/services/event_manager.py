"""Lifecycle event emitter for edit sessions.

Hosts either register synchronous listeners (renderer, undo-stack UI) or
consume events asynchronously through subscribe().
"""

import asyncio
import logging
from collections import defaultdict
from collections.abc import AsyncGenerator, Callable
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any

from pydantic import BaseModel

from cliptiming.schemas.events import EditEvent

logger = logging.getLogger(__name__)

Listener = Callable[["EditEventRecord"], None]


@dataclass
class EditEventRecord:
    """Event data for one edit lifecycle notification."""

    event_type: EditEvent
    timestamp: str = field(default_factory=lambda: datetime.now(UTC).isoformat())
    data: dict[str, Any] | None = None

    def to_dict(self) -> dict[str, Any]:
        event_data: dict[str, Any] = {
            "type": self.event_type.value,
            "timestamp": self.timestamp,
        }
        if self.data:
            event_data["data"] = self.data
        return event_data


class EditEventEmitter:
    """Manages listeners and subscriptions for edit events."""

    def __init__(self) -> None:
        self._listeners: dict[EditEvent, list[Listener]] = defaultdict(list)
        self._subscribers: set[asyncio.Queue[EditEventRecord]] = set()

    def on(self, event_type: EditEvent, listener: Listener) -> None:
        self._listeners[event_type].append(listener)

    def off(self, event_type: EditEvent, listener: Listener) -> None:
        try:
            self._listeners[event_type].remove(listener)
        except ValueError:
            logger.debug(f"Listener not registered for {event_type.value}")

    async def subscribe(self) -> AsyncGenerator[EditEventRecord, None]:
        """Subscribe to every event emitted after this call.

        Yields:
            EditEventRecord objects as they are emitted
        """
        queue: asyncio.Queue[EditEventRecord] = asyncio.Queue()
        self._subscribers.add(queue)
        logger.info(f"New edit event subscriber. Total: {len(self._subscribers)}")

        try:
            while True:
                event = await queue.get()
                yield event
        except asyncio.CancelledError:
            logger.info("Edit event subscriber cancelled")
            raise
        finally:
            self._subscribers.discard(queue)
            logger.info(f"Edit event subscriber removed. Remaining: {len(self._subscribers)}")

    def emit(
        self,
        event_type: EditEvent,
        payload: BaseModel | dict[str, Any] | None = None,
    ) -> int:
        """Emit an event to listeners and subscribers.

        Listener failures are logged and do not stop delivery to the rest.

        Returns:
            Number of listeners and subscribers notified
        """
        if isinstance(payload, BaseModel):
            data = payload.model_dump(mode="json")
        else:
            data = payload
        event = EditEventRecord(event_type=event_type, data=data)

        notified = 0
        for listener in list(self._listeners.get(event_type, [])):
            try:
                listener(event)
                notified += 1
            except Exception:
                logger.exception(f"Listener for {event_type.value} raised")

        for queue in list(self._subscribers):
            try:
                queue.put_nowait(event)
                notified += 1
            except asyncio.QueueFull:
                logger.warning(f"Queue full for subscriber of {event_type.value}")

        logger.debug(f"Emitted {event_type.value} to {notified} receivers")
        return notified

    def get_subscriber_count(self) -> int:
        return len(self._subscribers)
