"""
Typed event bus for decoupled communication.

Uses Enums for event types so publishers and subscribers never agree on
magic strings. The battle core publishes lifecycle notifications here and
presentation layers (rendering, audio, achievement tracking) subscribe
without the core importing any of them.

Usage:
    class BattleEvent(Enum):
        TURN_START = auto()
        ACTION_EXECUTED = auto()

    # Subscribe
    event_bus.subscribe(BattleEvent.ACTION_EXECUTED, on_action_executed)

    # Publish
    event_bus.publish(BattleEvent.ACTION_EXECUTED, action=action, outcome=outcome)
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable
from weakref import WeakMethod, ref

logger = logging.getLogger(__name__)


@dataclass
class Event:
    """
    Event data container.

    Attributes:
        type: The event type (Enum member)
        data: Dictionary of event-specific data
        consumed: Whether the event has been handled
    """
    type: Enum
    data: dict[str, Any] = field(default_factory=dict)
    consumed: bool = False

    def consume(self) -> None:
        """Mark event as consumed (stops propagation)."""
        self.consumed = True

    def get(self, key: str, default: Any = None) -> Any:
        """Get event data by key."""
        return self.data.get(key, default)

    def __getitem__(self, key: str) -> Any:
        """Get event data by key (dict-style)."""
        return self.data[key]


# Type alias for event handlers
EventHandler = Callable[[Event], None]


@dataclass(eq=False)
class _Subscription:
    """A registered handler (possibly weakly referenced)."""
    priority: int
    handler_ref: Any
    one_shot: bool = False

    def resolve(self) -> EventHandler | None:
        if isinstance(self.handler_ref, (ref, WeakMethod)):
            return self.handler_ref()
        return self.handler_ref


class EventBus:
    """
    Central event bus for publish/subscribe messaging.

    Features:
    - Typed events (Enum-based)
    - Priority ordering
    - Weak references (auto-cleanup when handlers are deleted)
    - One-shot handlers
    - Event consumption (stops propagation)
    - Re-entrant publishing: events published from inside a handler are
      queued and dispatched after the current one finishes

    A handler that raises is logged and skipped; the remaining handlers
    still run and the publisher never sees the exception.
    """

    def __init__(self):
        self._subscriptions: dict[Enum, list[_Subscription]] = {}
        # Queue for events published during handling
        self._event_queue: list[Event] = []
        self._is_publishing = False

    def subscribe(
        self,
        event_type: Enum,
        handler: EventHandler,
        priority: int = 0,
        one_shot: bool = False,
        weak: bool = True,
    ) -> None:
        """
        Subscribe to an event type.

        Args:
            event_type: The event type to listen for
            handler: Callback function(event: Event)
            priority: Higher priority handlers are called first (default 0)
            one_shot: If True, handler is removed after first call
            weak: If True, use weak reference (handler auto-removed if deleted)
        """
        if weak:
            handler_ref = WeakMethod(handler) if hasattr(handler, '__self__') else ref(handler)
        else:
            handler_ref = handler

        subscriptions = self._subscriptions.setdefault(event_type, [])
        entry = _Subscription(priority=priority, handler_ref=handler_ref, one_shot=one_shot)

        # Highest priority first, equal priorities keep subscription order
        insert_idx = len(subscriptions)
        for i, existing in enumerate(subscriptions):
            if priority > existing.priority:
                insert_idx = i
                break
        subscriptions.insert(insert_idx, entry)

    def unsubscribe(self, event_type: Enum, handler: EventHandler) -> None:
        """
        Unsubscribe from an event type.

        Args:
            event_type: The event type
            handler: The handler to remove
        """
        if event_type not in self._subscriptions:
            return

        self._subscriptions[event_type] = [
            sub for sub in self._subscriptions[event_type]
            if sub.resolve() != handler
        ]

    def publish(self, event_type: Enum, **data: Any) -> Event:
        """
        Publish an event.

        Args:
            event_type: The event type
            **data: Event data as keyword arguments

        Returns:
            The Event object (check .consumed to see if it was handled)
        """
        event = Event(type=event_type, data=data)
        self.publish_event(event)
        return event

    def publish_event(self, event: Event) -> None:
        """
        Publish a pre-created event.

        Args:
            event: The event to publish
        """
        if self._is_publishing:
            self._event_queue.append(event)
        else:
            self._dispatch(event)

    def subscriber_count(self, event_type: Enum) -> int:
        """Number of live handlers for an event type."""
        return sum(
            1 for sub in self._subscriptions.get(event_type, [])
            if sub.resolve() is not None
        )

    def clear(self, event_type: Enum | None = None) -> None:
        """
        Clear handlers.

        Args:
            event_type: If specified, only clear handlers for this type.
                       If None, clear all handlers.
        """
        if event_type is None:
            self._subscriptions.clear()
        else:
            self._subscriptions.pop(event_type, None)

    def _dispatch(self, event: Event) -> None:
        """Dispatch event to handlers, then drain anything queued meanwhile."""
        self._is_publishing = True
        try:
            self._deliver(event)
            while self._event_queue:
                self._deliver(self._event_queue.pop(0))
        finally:
            self._is_publishing = False

    def _deliver(self, event: Event) -> None:
        subscriptions = self._subscriptions.get(event.type)
        if not subscriptions:
            return

        spent: list[_Subscription] = []
        for sub in list(subscriptions):
            handler = sub.resolve()
            if handler is None:
                # Weak reference was garbage collected
                spent.append(sub)
                continue

            try:
                handler(event)
            except Exception:
                logger.exception("Error in event handler for %s", event.type)

            if sub.one_shot:
                spent.append(sub)

            if event.consumed:
                break

        for sub in spent:
            if sub in subscriptions:
                subscriptions.remove(sub)
