"""
Narrative events from finished negotiations.

A completed session becomes a NarrativeEvent for the campaign timeline.
NarrativeLog collects them and can be passed to NegotiationManager as its
narrative_hook.
"""

from datetime import datetime

from pydantic import BaseModel, Field

from ..errors import InvalidStateError
from ..state.schema import (
    NegotiationOutcome,
    NegotiationSession,
    NegotiationStatus,
    generate_id,
)


class NarrativeEvent(BaseModel):
    """Timeline entry describing how a negotiation ended."""
    id: str = Field(default_factory=generate_id)
    event_type: str = "negotiation"
    source_id: str                       # Negotiation session id
    name: str
    description: str = ""
    npc_name: str
    npc_entity_id: str | None = None
    outcome: NegotiationOutcome
    final_interest: int
    arguments_made: int
    timestamp: datetime = Field(default_factory=datetime.now)


def narrative_event_from_session(session: NegotiationSession) -> NarrativeEvent:
    """
    Build a narrative event from a completed session.

    Raises:
        InvalidStateError: If the session is not completed
    """
    if session.status != NegotiationStatus.COMPLETED or session.outcome is None:
        raise InvalidStateError(session.status, "create a narrative event")

    return NarrativeEvent(
        source_id=session.id,
        name=session.name,
        description=session.description,
        npc_name=session.npc_name,
        npc_entity_id=session.npc_entity_id,
        outcome=session.outcome,
        final_interest=session.interest,
        arguments_made=len(session.arguments),
        timestamp=session.completed_at or datetime.now(),
    )


class NarrativeLog:
    """In-memory timeline of negotiation narrative events."""

    def __init__(self):
        self.events: list[NarrativeEvent] = []

    def __call__(self, session: NegotiationSession) -> NarrativeEvent:
        return self.record(session)

    def record(self, session: NegotiationSession) -> NarrativeEvent:
        event = narrative_event_from_session(session)
        self.events.append(event)
        return event

    def for_session(self, session_id: str) -> list[NarrativeEvent]:
        return [e for e in self.events if e.source_id == session_id]
