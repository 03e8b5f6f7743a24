import gc
import logging
import pytest
from enum import Enum, auto
from engine.core.events import EventBus, Event

class MockEvent(Enum):
    TEST_EVENT = auto()
    OTHER_EVENT = auto()

def test_event_bus_subscribe_publish(event_bus):
    received = []
    def handler(event):
        received.append(event)

    event_bus.subscribe(MockEvent.TEST_EVENT, handler)
    event_bus.publish(MockEvent.TEST_EVENT, data="test")

    assert len(received) == 1
    assert received[0].type == MockEvent.TEST_EVENT
    assert received[0].data["data"] == "test"
    assert received[0]["data"] == "test"
    assert received[0].get("missing", 3) == 3

def test_event_bus_unsubscribe(event_bus):
    received = []
    def handler(event):
        received.append(event)

    event_bus.subscribe(MockEvent.TEST_EVENT, handler)
    event_bus.unsubscribe(MockEvent.TEST_EVENT, handler)
    event_bus.publish(MockEvent.TEST_EVENT)

    assert len(received) == 0

def test_event_types_are_isolated(event_bus):
    received = []
    event_bus.subscribe(MockEvent.TEST_EVENT, lambda e: received.append(e.type), weak=False)

    event_bus.publish(MockEvent.OTHER_EVENT)

    assert received == []

def test_event_priority(event_bus):
    order = []

    event_bus.subscribe(MockEvent.TEST_EVENT, lambda e: order.append("low"), priority=1, weak=False)
    event_bus.subscribe(MockEvent.TEST_EVENT, lambda e: order.append("high"), priority=10, weak=False)
    event_bus.subscribe(MockEvent.TEST_EVENT, lambda e: order.append("normal"), priority=5, weak=False)

    event_bus.publish(MockEvent.TEST_EVENT)

    assert order == ["high", "normal", "low"]

def test_equal_priority_keeps_subscription_order(event_bus):
    order = []

    event_bus.subscribe(MockEvent.TEST_EVENT, lambda e: order.append("first"), weak=False)
    event_bus.subscribe(MockEvent.TEST_EVENT, lambda e: order.append("second"), weak=False)

    event_bus.publish(MockEvent.TEST_EVENT)

    assert order == ["first", "second"]

def test_event_consumption(event_bus):
    received = []

    def consumer(event):
        received.append("consumer")
        event.consume()

    def later_handler(event):
        received.append("later")

    event_bus.subscribe(MockEvent.TEST_EVENT, consumer, priority=10)
    event_bus.subscribe(MockEvent.TEST_EVENT, later_handler, priority=5)

    event = event_bus.publish(MockEvent.TEST_EVENT)

    assert received == ["consumer"]
    assert event.consumed

def test_one_shot_handler(event_bus):
    calls = []
    event_bus.subscribe(MockEvent.TEST_EVENT, lambda e: calls.append(1), one_shot=True, weak=False)

    event_bus.publish(MockEvent.TEST_EVENT)
    event_bus.publish(MockEvent.TEST_EVENT)

    assert calls == [1]
    assert event_bus.subscriber_count(MockEvent.TEST_EVENT) == 0

def test_weak_handler_released(event_bus):
    class Listener:
        def __init__(self):
            self.calls = 0
        def on_event(self, event):
            self.calls += 1

    listener = Listener()
    event_bus.subscribe(MockEvent.TEST_EVENT, listener.on_event)
    assert event_bus.subscriber_count(MockEvent.TEST_EVENT) == 1

    del listener
    gc.collect()

    assert event_bus.subscriber_count(MockEvent.TEST_EVENT) == 0
    event_bus.publish(MockEvent.TEST_EVENT)

def test_publish_from_handler_is_queued(event_bus):
    order = []

    def first(event):
        order.append("test:start")
        event_bus.publish(MockEvent.OTHER_EVENT)
        order.append("test:end")

    def second(event):
        order.append("other")

    event_bus.subscribe(MockEvent.TEST_EVENT, first)
    event_bus.subscribe(MockEvent.OTHER_EVENT, second)

    event_bus.publish(MockEvent.TEST_EVENT)

    assert order == ["test:start", "test:end", "other"]

def test_failing_handler_is_logged_and_skipped(event_bus, caplog):
    received = []

    def broken(event):
        raise RuntimeError("boom")

    def healthy(event):
        received.append(event.type)

    event_bus.subscribe(MockEvent.TEST_EVENT, broken, priority=10)
    event_bus.subscribe(MockEvent.TEST_EVENT, healthy)

    with caplog.at_level(logging.ERROR, logger="engine.core.events"):
        event_bus.publish(MockEvent.TEST_EVENT)

    assert received == [MockEvent.TEST_EVENT]
    assert "Error in event handler" in caplog.text

def test_publish_prebuilt_event(event_bus):
    received = []
    def handler(event):
        received.append(event)

    event_bus.subscribe(MockEvent.TEST_EVENT, handler)
    event = Event(type=MockEvent.TEST_EVENT, data={"turn": 2})
    event_bus.publish_event(event)

    assert received == [event]

def test_clear(event_bus):
    event_bus.subscribe(MockEvent.TEST_EVENT, lambda e: None, weak=False)
    event_bus.subscribe(MockEvent.OTHER_EVENT, lambda e: None, weak=False)

    event_bus.clear(MockEvent.TEST_EVENT)
    assert event_bus.subscriber_count(MockEvent.TEST_EVENT) == 0
    assert event_bus.subscriber_count(MockEvent.OTHER_EVENT) == 1

    event_bus.clear()
    assert event_bus.subscriber_count(MockEvent.OTHER_EVENT) == 0
