"""
Negotiation events.

Each event is stamped with where the session stood right after the
change (status, interest, patience), so a table display can redraw its
meters from the event alone. The bus keeps the most recent events so a
session's run of play can be read back in order.

Usage:
    bus = get_event_bus()
    bus.on(EventType.ARGUMENT_RECORDED, redraw_meters)

    def redraw_meters(event: NegotiationEvent):
        show(event.interest, event.patience)
"""

import logging
from collections import deque
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Callable

from .schema import NegotiationSession, NegotiationStatus

logger = logging.getLogger(__name__)

HISTORY_LIMIT = 100


class EventType(Enum):
    NEGOTIATION_CREATED = "negotiation.created"
    NEGOTIATION_UPDATED = "negotiation.updated"
    NEGOTIATION_DELETED = "negotiation.deleted"

    # Lifecycle
    NEGOTIATION_STARTED = "negotiation.started"
    NEGOTIATION_COMPLETED = "negotiation.completed"
    NEGOTIATION_REOPENED = "negotiation.reopened"

    # Play
    ARGUMENT_RECORDED = "negotiation.argument_recorded"
    MOTIVATION_REVEALED = "negotiation.motivation_revealed"
    PITFALL_REVEALED = "negotiation.pitfall_revealed"


@dataclass(frozen=True)
class NegotiationEvent:
    """
    A change to one session.

    status, interest and patience are the session's values after the
    change; data holds what is particular to the event type (the outcome
    for a completion, the argument deltas for a recorded argument).
    """

    type: EventType
    session_id: str
    status: NegotiationStatus
    interest: int
    patience: int
    data: dict = field(default_factory=dict)
    timestamp: datetime = field(default_factory=datetime.now)

    @classmethod
    def from_session(
        cls,
        event_type: EventType,
        session: NegotiationSession,
        **data,
    ) -> "NegotiationEvent":
        return cls(
            type=event_type,
            session_id=session.id,
            status=session.status,
            interest=session.interest,
            patience=session.patience,
            data=data,
        )

    def __str__(self) -> str:
        return (
            f"[{self.type.value}] {self.session_id} "
            f"{self.status.value} interest={self.interest} patience={self.patience}"
        )


EventHandler = Callable[[NegotiationEvent], None]


class EventBus:
    """
    Synchronous bus. Handlers run inside emit(); one that raises is
    logged and the remaining handlers still run.
    """

    def __init__(self, history_limit: int = HISTORY_LIMIT):
        self._handlers: dict[EventType, list[EventHandler]] = {}
        self._history: deque[NegotiationEvent] = deque(maxlen=history_limit)

    def on(self, event_type: EventType, handler: EventHandler) -> None:
        handlers = self._handlers.setdefault(event_type, [])
        if handler not in handlers:
            handlers.append(handler)

    def off(self, event_type: EventType, handler: EventHandler) -> None:
        handlers = self._handlers.get(event_type, [])
        if handler in handlers:
            handlers.remove(handler)

    def emit(
        self,
        event_type: EventType,
        session: NegotiationSession,
        **data,
    ) -> NegotiationEvent:
        """Snapshot the session into an event and deliver it."""
        event = NegotiationEvent.from_session(event_type, session, **data)
        self._history.append(event)

        for handler in list(self._handlers.get(event_type, [])):
            try:
                handler(event)
            except Exception:
                logger.exception(
                    f"Handler for {event_type.value} failed on negotiation {session.id}"
                )

        return event

    def get_history(
        self,
        event_type: EventType | None = None,
        session_id: str | None = None,
    ) -> list[NegotiationEvent]:
        """Retained events, oldest first, narrowed by type and/or session."""
        return [
            e for e in self._history
            if (event_type is None or e.type == event_type)
            and (session_id is None or e.session_id == session_id)
        ]

    def listener_count(self, event_type: EventType) -> int:
        return len(self._handlers.get(event_type, []))


_event_bus: EventBus | None = None


def get_event_bus() -> EventBus:
    """Process-wide bus, created on first use."""
    global _event_bus
    if _event_bus is None:
        _event_bus = EventBus()
    return _event_bus


def reset_event_bus() -> None:
    """Drop the process-wide bus and its handlers. Used between tests."""
    global _event_bus
    _event_bus = None
