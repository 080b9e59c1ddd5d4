"""
Pytest fixtures for negotiation tests.

Provides in-memory stores, a deterministic clock, and sample sessions.
"""

import itertools
from datetime import datetime, timedelta
from pathlib import Path

import pytest

# Add repo root to path for imports
import sys
sys.path.insert(0, str(Path(__file__).parent.parent))

from parley.state import (
    CreateNegotiationInput,
    MemorySessionStore,
    MotivationInput,
    NegotiationManager,
    PitfallInput,
    reset_event_bus,
)
from parley.systems import NegotiationEngine, NarrativeLog


class StepClock:
    """Clock that advances one second per call."""

    def __init__(self, start: datetime = datetime(2026, 1, 1, 12, 0, 0)):
        self.current = start

    def __call__(self) -> datetime:
        self.current += timedelta(seconds=1)
        return self.current


def counter_ids(prefix: str = "id"):
    """Id factory yielding id0001, id0002, ..."""
    counter = itertools.count(1)
    return lambda: f"{prefix}{next(counter):04d}"


@pytest.fixture(autouse=True)
def fresh_event_bus():
    """Each test gets its own global event bus."""
    reset_event_bus()
    yield
    reset_event_bus()


@pytest.fixture
def memory_store():
    """In-memory session store for testing."""
    return MemorySessionStore()


@pytest.fixture
def narrative_log():
    return NarrativeLog()


@pytest.fixture
def engine():
    """Engine with deterministic clock and ids."""
    return NegotiationEngine(clock=StepClock(), id_factory=counter_ids())


@pytest.fixture
def manager(memory_store, narrative_log):
    """Negotiation manager with in-memory store and a narrative log hook."""
    return NegotiationManager(
        memory_store,
        narrative_hook=narrative_log,
        clock=StepClock(),
        id_factory=counter_ids(),
    )


@pytest.fixture
def session_input():
    """Baron Valtor's toll negotiation, the usual sample setup."""
    return CreateNegotiationInput(
        name="Bridge Toll",
        npc_name="Baron Valtor",
        description="Convince the baron to waive the toll for the caravan.",
        interest=2,
        patience=5,
        impression=1,
        motivations=[
            MotivationInput(type="greed", description="Wants coin for the bridge repairs"),
            MotivationInput(type="legacy", description="Wants his name on the bridge"),
            MotivationInput(type="protection", description="Fears bandits on the road", is_known=True),
        ],
        pitfalls=[
            PitfallInput(description="Mentioning his late brother"),
            PitfallInput(description="Threats of violence"),
        ],
    )


@pytest.fixture
def session(engine, session_input):
    """Fresh PREPARING session built by the engine."""
    return engine.create(session_input)


@pytest.fixture
def active_session(engine, session):
    """Started session."""
    engine.start(session)
    return session


@pytest.fixture
def stored_session(manager, session_input):
    """Session created through the manager and persisted."""
    return manager.create(session_input)
