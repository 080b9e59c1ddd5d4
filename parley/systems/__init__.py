"""
Negotiation systems.

The engine sequences the rules over a session; narrative turns finished
sessions into timeline events.
"""

from .negotiation import NegotiationEngine, VALID_TRANSITIONS, SETUP_FIELDS
from .narrative import NarrativeEvent, NarrativeLog, narrative_event_from_session

__all__ = [
    "NegotiationEngine",
    "VALID_TRANSITIONS",
    "SETUP_FIELDS",
    "NarrativeEvent",
    "NarrativeLog",
    "narrative_event_from_session",
]
