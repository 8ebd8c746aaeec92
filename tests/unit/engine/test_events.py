"""
TEST DOC: UI Events

WHAT: Tests for the EventBus, the recorder and the UIEvent union
WHY: Events are the engine's only output channel
HOW: Subscribe plain callables and check what they receive

CASES:
- Fan-out to every subscriber, in subscription order
- Convenience emitters pick the right category
- UIEvent parses back to the right class from JSON

EDGE CASES:
- Unsubscribing an unknown handler is harmless
"""

from pydantic import TypeAdapter

from fiction_engine.engine.events import (
    DebugLogEvent,
    EventBus,
    EventRecorder,
    LocationDisplayData,
    LocationDisplayEvent,
    UIEvent,
)


class TestEventBus:
    """Tests for subscription and emission."""

    def test_fan_out(self):
        """Every subscriber sees every event."""
        bus = EventBus()
        first, second = EventRecorder(), EventRecorder()
        bus.subscribe(first)
        bus.subscribe(second)
        bus.message("hello")
        assert first.messages() == ["hello"]
        assert second.messages() == ["hello"]

    def test_unsubscribe(self):
        """Unsubscribed handlers stop receiving."""
        bus = EventBus()
        recorder = EventRecorder()
        bus.subscribe(recorder)
        bus.unsubscribe(recorder)
        bus.unsubscribe(recorder)
        bus.message("hello")
        assert recorder.events == []

    def test_categories(self):
        """error/success set the message category."""
        bus = EventBus()
        recorder = EventRecorder()
        bus.subscribe(recorder)
        bus.error("no")
        bus.success("yes")
        assert [e.data.category for e in recorder.events] == ["error", "success"]

    def test_debug_event(self):
        """debug() emits a debug_log event with its level."""
        bus = EventBus()
        recorder = EventRecorder()
        bus.subscribe(recorder)
        bus.debug("odd", "warn")
        event = recorder.of_type("debug_log")[0]
        assert isinstance(event, DebugLogEvent)
        assert event.data.level == "warn"


class TestUIEventUnion:
    """Tests for the discriminated union."""

    def test_parses_by_type(self):
        """A serialized event comes back as its own class."""
        event = LocationDisplayEvent(
            data=LocationDisplayData(id="hall", name="Hall", description="Big.", exits=["north"])
        )
        parsed = TypeAdapter(UIEvent).validate_json(event.model_dump_json())
        assert isinstance(parsed, LocationDisplayEvent)
        assert parsed.data.exits == ["north"]
        assert parsed.timestamp == event.timestamp
