"""
Notification Module

Broadcast of marketplace lifecycle events to in-process subscribers.

Usage:
    from notification import EventBus, EventType

    bus = EventBus()
    bus.subscribe(handler)
    bus.emit(EventType.MESSAGE_CREATED, conversation_id="...", message_id="...")
"""

from notification.events import (
    EventBus,
    EventType,
    LifecycleEvent,
    EventHandler,
)

__all__ = [
    'EventBus',
    'EventType',
    'LifecycleEvent',
    'EventHandler',
]
