#!/usr/bin/env python3
"""
Lifecycle Events - broadcast of marketplace state changes.

Fire-and-forget: handlers are called synchronously after the change is
committed, queue subscribers receive events via put_nowait. A failing
handler or a full queue loses the event for that subscriber only; there is
no retry and no delivery guarantee. Consumers that must not miss a change
re-fetch from the record store.

Usage:
    bus = EventBus()
    bus.subscribe(lambda event: print(event.event_type))
    queue = bus.subscribe_queue()

    bus.publish(LifecycleEvent(EventType.CONVERSATION_CREATED, {"conversation_id": "..."}))
"""

import asyncio
import logging
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from threading import Lock
from typing import Any, Callable, Dict, List

from core.utils import utcnow

logger = logging.getLogger(__name__)


class EventType(Enum):
    CONVERSATION_CREATED = "conversation.created"
    CONVERSATION_CLOSED = "conversation.closed"
    CONVERSATION_DELETED = "conversation.deleted"
    MESSAGE_CREATED = "message.created"
    QUOTE_RESPONDED = "quote.responded"
    ENGAGEMENT_CREATED = "engagement.created"
    ENGAGEMENT_STATUS_CHANGED = "engagement.status_changed"
    RATING_CREATED = "rating.created"
    OFFERING_PUBLISHED = "offering.published"


@dataclass
class LifecycleEvent:
    """A single state change notification."""
    event_type: EventType
    payload: Dict[str, Any] = field(default_factory=dict)
    occurred_at: datetime = field(default_factory=utcnow)


EventHandler = Callable[[LifecycleEvent], None]


class EventBus:
    """Explicit subscription interface for lifecycle events."""

    def __init__(self, enabled: bool = True, queue_maxsize: int = 100):
        self.enabled = enabled
        self.queue_maxsize = queue_maxsize
        self._handlers: List[EventHandler] = []
        self._queues: List[asyncio.Queue] = []
        self._lock = Lock()

    def subscribe(self, handler: EventHandler) -> EventHandler:
        with self._lock:
            self._handlers.append(handler)
        return handler

    def unsubscribe(self, handler: EventHandler) -> None:
        with self._lock:
            if handler in self._handlers:
                self._handlers.remove(handler)

    def subscribe_queue(self) -> asyncio.Queue:
        """
        Subscribe with a bounded queue.

        Returns:
            asyncio.Queue receiving every published event until it is full.
        """
        queue = asyncio.Queue(maxsize=self.queue_maxsize)
        with self._lock:
            self._queues.append(queue)
        return queue

    def unsubscribe_queue(self, queue: asyncio.Queue) -> None:
        with self._lock:
            if queue in self._queues:
                self._queues.remove(queue)

    def publish(self, event: LifecycleEvent) -> None:
        if not self.enabled:
            return

        with self._lock:
            handlers = list(self._handlers)
            queues = list(self._queues)

        for handler in handlers:
            try:
                handler(event)
            except Exception as e:
                logger.error(f"Event handler failed for {event.event_type.value}: {e}", exc_info=True)

        for queue in queues:
            try:
                queue.put_nowait(event)
            except asyncio.QueueFull:
                logger.warning(f"Subscriber queue full, dropping {event.event_type.value}")

    def emit(self, event_type: EventType, **payload: Any) -> None:
        self.publish(LifecycleEvent(event_type=event_type, payload=payload))
