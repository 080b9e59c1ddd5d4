"""
Parley: negotiation tracker for tabletop campaigns.

Tracks an NPC's interest and patience through a negotiation, resolves
player arguments against a rules table, and classifies the result.
"""

from .errors import NegotiationError, ValidationError, InvalidStateError, NotFoundError
from .state import (
    NegotiationSession,
    NegotiationStatus,
    NegotiationOutcome,
    ArgumentType,
    ArgumentRecord,
    CreateNegotiationInput,
    UpdateNegotiationInput,
    RecordArgumentInput,
    NegotiationManager,
    MemorySessionStore,
    JsonSessionStore,
)
from .rules import classify, DEFAULT_RULES, RulesTable, load_rules_table
from .systems import NegotiationEngine, NarrativeLog

__version__ = "0.1.0"

__all__ = [
    "NegotiationError",
    "ValidationError",
    "InvalidStateError",
    "NotFoundError",
    "NegotiationSession",
    "NegotiationStatus",
    "NegotiationOutcome",
    "ArgumentType",
    "ArgumentRecord",
    "CreateNegotiationInput",
    "UpdateNegotiationInput",
    "RecordArgumentInput",
    "NegotiationManager",
    "MemorySessionStore",
    "JsonSessionStore",
    "classify",
    "DEFAULT_RULES",
    "RulesTable",
    "load_rules_table",
    "NegotiationEngine",
    "NarrativeLog",
]
