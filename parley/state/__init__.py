"""State management for negotiation sessions."""

from .schema import (
    MAX_INTEREST,
    TIERS,
    ArgumentRecord,
    ArgumentType,
    CreateNegotiationInput,
    Motivation,
    MotivationInput,
    MotivationType,
    NegotiationOutcome,
    NegotiationSession,
    NegotiationStatus,
    Pitfall,
    PitfallInput,
    RecordArgumentInput,
    UpdateNegotiationInput,
)
from .store import SessionStore, JsonSessionStore, MemorySessionStore
from .event_bus import (
    EventBus,
    EventType,
    NegotiationEvent,
    get_event_bus,
    reset_event_bus,
)
from .manager import NegotiationManager

__all__ = [
    # Schema
    "MAX_INTEREST",
    "TIERS",
    "ArgumentRecord",
    "ArgumentType",
    "CreateNegotiationInput",
    "Motivation",
    "MotivationInput",
    "MotivationType",
    "NegotiationOutcome",
    "NegotiationSession",
    "NegotiationStatus",
    "Pitfall",
    "PitfallInput",
    "RecordArgumentInput",
    "UpdateNegotiationInput",
    # Store
    "SessionStore",
    "JsonSessionStore",
    "MemorySessionStore",
    # Event Bus
    "EventBus",
    "EventType",
    "NegotiationEvent",
    "get_event_bus",
    "reset_event_bus",
    # Manager
    "NegotiationManager",
]
