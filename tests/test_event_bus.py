"""Tests for the negotiation event bus."""

import pytest

from parley.state.event_bus import (
    EventBus,
    EventType,
    NegotiationEvent,
    get_event_bus,
    reset_event_bus,
)
from parley.state.schema import NegotiationSession, NegotiationStatus


@pytest.fixture
def toll():
    return NegotiationSession(
        id="toll0001",
        name="Bridge Toll",
        npc_name="Baron Valtor",
        status=NegotiationStatus.ACTIVE,
        interest=3,
        patience=4,
    )


class TestEventBus:

    def test_event_snapshots_session(self, toll):
        bus = EventBus()
        received = []
        bus.on(EventType.ARGUMENT_RECORDED, received.append)

        bus.emit(EventType.ARGUMENT_RECORDED, toll, tier=2)

        event = received[0]
        assert event.session_id == "toll0001"
        assert event.status == NegotiationStatus.ACTIVE
        assert (event.interest, event.patience) == (3, 4)
        assert event.data == {"tier": 2}

    def test_snapshot_does_not_track_later_changes(self, toll):
        bus = EventBus()
        event = bus.emit(EventType.ARGUMENT_RECORDED, toll)

        toll.patience = 0

        assert event.patience == 4

    def test_events_are_immutable(self, toll):
        event = EventBus().emit(EventType.NEGOTIATION_STARTED, toll)

        with pytest.raises(AttributeError):
            event.interest = 5

    def test_handlers_only_get_their_type(self, toll):
        bus = EventBus()
        received = []
        bus.on(EventType.NEGOTIATION_COMPLETED, received.append)

        bus.emit(EventType.NEGOTIATION_STARTED, toll)

        assert received == []

    def test_duplicate_subscription_ignored(self):
        bus = EventBus()
        handler = lambda e: None
        bus.on(EventType.ARGUMENT_RECORDED, handler)
        bus.on(EventType.ARGUMENT_RECORDED, handler)

        assert bus.listener_count(EventType.ARGUMENT_RECORDED) == 1

    def test_off_unsubscribes(self, toll):
        bus = EventBus()
        received = []
        bus.on(EventType.ARGUMENT_RECORDED, received.append)
        bus.off(EventType.ARGUMENT_RECORDED, received.append)

        bus.emit(EventType.ARGUMENT_RECORDED, toll)

        assert received == []
        assert bus.listener_count(EventType.ARGUMENT_RECORDED) == 0

    def test_failing_handler_is_logged_and_isolated(self, toll, caplog):
        bus = EventBus()
        received = []

        def broken(event: NegotiationEvent):
            raise RuntimeError("boom")

        bus.on(EventType.NEGOTIATION_COMPLETED, broken)
        bus.on(EventType.NEGOTIATION_COMPLETED, received.append)

        bus.emit(EventType.NEGOTIATION_COMPLETED, toll)

        assert len(received) == 1
        assert "negotiation.completed" in caplog.text
        assert "toll0001" in caplog.text

    def test_str_shows_meters(self, toll):
        event = NegotiationEvent.from_session(EventType.NEGOTIATION_REOPENED, toll)
        assert str(event) == "[negotiation.reopened] toll0001 active interest=3 patience=4"


class TestHistory:

    def test_history_limit(self, toll):
        bus = EventBus(history_limit=10)
        for _ in range(12):
            bus.emit(EventType.ARGUMENT_RECORDED, toll)
        bus.emit(EventType.NEGOTIATION_COMPLETED, toll)

        assert len(bus.get_history()) == 10
        assert bus.get_history()[-1].type == EventType.NEGOTIATION_COMPLETED

    def test_filter_by_session_and_type(self, toll):
        other = NegotiationSession(id="ferry001", name="Ferry", npc_name="Ferryman")
        bus = EventBus()
        bus.emit(EventType.NEGOTIATION_STARTED, toll)
        bus.emit(EventType.NEGOTIATION_CREATED, other)
        bus.emit(EventType.ARGUMENT_RECORDED, toll)

        toll_events = bus.get_history(session_id="toll0001")
        assert [e.type for e in toll_events] == [
            EventType.NEGOTIATION_STARTED,
            EventType.ARGUMENT_RECORDED,
        ]
        assert bus.get_history(EventType.NEGOTIATION_CREATED, session_id="toll0001") == []
        assert len(bus.get_history(EventType.NEGOTIATION_CREATED)) == 1


class TestGlobalBus:

    def test_singleton_and_reset(self):
        bus = get_event_bus()
        assert get_event_bus() is bus

        reset_event_bus()

        assert get_event_bus() is not bus
