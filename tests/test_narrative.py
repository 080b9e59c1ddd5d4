"""Tests for narrative events built from finished negotiations."""

import pytest

from parley.errors import InvalidStateError
from parley.state.schema import NegotiationOutcome, RecordArgumentInput
from parley.systems.narrative import NarrativeLog, narrative_event_from_session


class TestNarrativeEventFromSession:

    def test_requires_completed_session(self, active_session):
        with pytest.raises(InvalidStateError):
            narrative_event_from_session(active_session)

    def test_captures_outcome_and_source(self, engine, active_session):
        active_session.npc_entity_id = "npc-valtor"
        engine.record_argument(
            active_session,
            RecordArgumentInput(type="motivation", tier=3, motivation_type="legacy"),
        )
        engine.complete(active_session)

        event = narrative_event_from_session(active_session)

        assert event.event_type == "negotiation"
        assert event.source_id == active_session.id
        assert event.name == "Bridge Toll"
        assert event.npc_name == "Baron Valtor"
        assert event.npc_entity_id == "npc-valtor"
        assert event.outcome == NegotiationOutcome.SUCCESS_FULL
        assert event.final_interest == 4
        assert event.arguments_made == 1
        assert event.timestamp == active_session.completed_at


class TestNarrativeLog:

    def test_callable_as_hook(self, engine, active_session):
        log = NarrativeLog()
        engine.complete(active_session)

        log(active_session)

        assert len(log.events) == 1
        assert log.for_session(active_session.id) == log.events
        assert log.for_session("other") == []
