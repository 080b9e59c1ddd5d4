"""
Negotiation session lifecycle management.

The id-based operation surface the host application calls: every
operation loads a session from the store, runs the engine, saves, and
returns the session.
"""

import logging
from datetime import datetime
from pathlib import Path
from typing import Any, Callable, TypeVar

import pydantic

from ..errors import NotFoundError, ValidationError
from ..rules.arguments import DEFAULT_RULES, RulesTable
from ..systems.negotiation import NegotiationEngine
from .event_bus import EventBus, EventType, get_event_bus
from .schema import (
    CreateNegotiationInput,
    NegotiationSession,
    NegotiationStatus,
    RecordArgumentInput,
    UpdateNegotiationInput,
)
from .store import JsonSessionStore, SessionStore

logger = logging.getLogger(__name__)

NarrativeHook = Callable[[NegotiationSession], Any]
InputModel = TypeVar("InputModel", bound=pydantic.BaseModel)


def _coerce(model: type[InputModel], data: InputModel | dict) -> InputModel:
    """Accept either the input model or a plain dict of its fields."""
    if isinstance(data, model):
        return data
    try:
        return model.model_validate(data)
    except pydantic.ValidationError as e:
        raise ValidationError(f"Invalid {model.__name__}: {e}") from e


class NegotiationManager:
    """
    Manages negotiation sessions by id.

    Storage is delegated to a SessionStore implementation:
    - JsonSessionStore for production (file-based)
    - MemorySessionStore for testing (in-memory)

    The optional narrative_hook is called with the finished session each
    time a session enters COMPLETED, explicitly or by running out of
    patience. A failing hook is logged; the completion stands.
    """

    def __init__(
        self,
        store: SessionStore | Path | str = "negotiations",
        rules: RulesTable = DEFAULT_RULES,
        narrative_hook: NarrativeHook | None = None,
        clock: Callable[[], datetime] | None = None,
        id_factory: Callable[[], str] | None = None,
        bus: EventBus | None = None,
    ):
        """
        Initialize with a store.

        Args:
            store: SessionStore instance, or path for JsonSessionStore
            rules: Argument effect table
            narrative_hook: Called with each newly completed session
            clock: Timestamp source (defaults to datetime.now)
            id_factory: Id source for sessions and arguments
            bus: Event bus (defaults to the global bus)
        """
        if isinstance(store, (Path, str)):
            self.store = JsonSessionStore(store)
        else:
            self.store = store

        self._bus = bus or get_event_bus()
        self.narrative_hook = narrative_hook
        self.engine = NegotiationEngine(
            rules=rules,
            clock=clock,
            id_factory=id_factory,
            bus=self._bus,
        )

    @property
    def rules(self) -> RulesTable:
        return self.engine.rules

    # -------------------------------------------------------------------------
    # Storage helpers
    # -------------------------------------------------------------------------

    def _load(self, session_id: str) -> NegotiationSession:
        session = self.store.load(session_id)
        if session is None:
            raise NotFoundError(f"Negotiation session not found: {session_id}")
        return session

    def _save(self, session: NegotiationSession) -> NegotiationSession:
        self.store.save(session)
        return session

    def _notify_completed(self, session: NegotiationSession) -> None:
        if self.narrative_hook is None:
            return
        try:
            self.narrative_hook(session)
        except Exception:
            logger.exception(
                f"Narrative hook failed for negotiation {session.id}; completion kept"
            )

    # -------------------------------------------------------------------------
    # CRUD
    # -------------------------------------------------------------------------

    def create(self, data: CreateNegotiationInput | dict) -> NegotiationSession:
        """Create a session in PREPARING and persist it."""
        session = self.engine.create(_coerce(CreateNegotiationInput, data))
        logger.info(f"Created negotiation {session.id} with {session.npc_name}")
        return self._save(session)

    def get(self, session_id: str) -> NegotiationSession:
        return self._load(session_id)

    def list_sessions(
        self,
        status: NegotiationStatus | str | None = None,
    ) -> list[NegotiationSession]:
        """All sessions, most recently updated first, optionally by status."""
        sessions = self.store.list_all()
        if status is None:
            return sessions
        try:
            status = NegotiationStatus(status)
        except ValueError as e:
            raise ValidationError(f"Unknown negotiation status: {status}") from e
        return [s for s in sessions if s.status == status]

    def update(self, session_id: str, changes: UpdateNegotiationInput | dict) -> NegotiationSession:
        """Setup-time edits; only while PREPARING."""
        changes = _coerce(UpdateNegotiationInput, changes)
        session = self._load(session_id)
        self.engine.update(session, changes)
        return self._save(session)

    def delete(self, session_id: str) -> bool:
        """
        Delete a session by its full id. Returns False if it did not exist.

        The deletion event carries the session as it stood when removed.
        """
        if not self.store.exists(session_id):
            return False
        session = self.store.load(session_id)
        if not self.store.delete(session_id):
            return False

        logger.info(f"Deleted negotiation {session_id}")
        if session is not None:
            self._bus.emit(EventType.NEGOTIATION_DELETED, session)
        return True

    # -------------------------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------------------------

    def start(self, session_id: str) -> NegotiationSession:
        session = self._load(session_id)
        self.engine.start(session)
        return self._save(session)

    def complete(self, session_id: str) -> NegotiationSession:
        session = self._load(session_id)
        self.engine.complete(session)
        self._save(session)
        self._notify_completed(session)
        return session

    def reopen(self, session_id: str) -> NegotiationSession:
        session = self._load(session_id)
        self.engine.reopen(session)
        return self._save(session)

    # -------------------------------------------------------------------------
    # Play
    # -------------------------------------------------------------------------

    def record_argument(
        self,
        session_id: str,
        argument: RecordArgumentInput | dict,
    ) -> NegotiationSession:
        """
        Record an argument. The returned session may already be COMPLETED
        if the argument exhausted the NPC's patience.
        """
        argument = _coerce(RecordArgumentInput, argument)
        session = self._load(session_id)
        self.engine.record_argument(session, argument)
        self._save(session)
        if session.is_finished:
            self._notify_completed(session)
        return session

    def reveal_motivation(self, session_id: str, motivation_type: str) -> NegotiationSession:
        session = self._load(session_id)
        if self.engine.reveal_motivation(session, motivation_type):
            self._save(session)
        return session

    def reveal_pitfall(self, session_id: str, description: str) -> NegotiationSession:
        session = self._load(session_id)
        if self.engine.reveal_pitfall(session, description):
            self._save(session)
        return session
