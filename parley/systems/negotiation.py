"""
Negotiation engine: the session state machine.

Owns the status lifecycle and sequences the rules:
    PREPARING → ACTIVE → COMPLETED (→ ACTIVE via reopen)

- Every guard is checked and every input validated before the session
  is touched, so a failed call leaves the session unchanged.
- Recording an argument that exhausts patience completes the session in
  the same call.
- Each change emits an EventBus event stamped with the session's new state.

Usage:
    engine = NegotiationEngine()
    session = engine.create(CreateNegotiationInput(name="Toll", npc_name="Warden"))
    engine.start(session)
    engine.record_argument(session, RecordArgumentInput(type="pitfall", tier=1))
    engine.complete(session)
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Callable

from ..errors import InvalidStateError, ValidationError
from ..rules.arguments import DEFAULT_RULES, RulesTable, apply_argument
from ..rules.outcome import classify
from ..rules.reveal import reveal_motivation, reveal_pitfall
from ..state.event_bus import EventBus, EventType, get_event_bus
from ..state.schema import (
    MAX_INTEREST,
    ArgumentRecord,
    CreateNegotiationInput,
    Motivation,
    MotivationInput,
    NegotiationOutcome,
    NegotiationSession,
    NegotiationStatus,
    Pitfall,
    PitfallInput,
    RecordArgumentInput,
    UpdateNegotiationInput,
    generate_id,
)

logger = logging.getLogger(__name__)


# Each status maps to the statuses it may move to
VALID_TRANSITIONS: dict[NegotiationStatus, set[NegotiationStatus]] = {
    NegotiationStatus.PREPARING: {NegotiationStatus.ACTIVE},
    NegotiationStatus.ACTIVE: {NegotiationStatus.COMPLETED},
    NegotiationStatus.COMPLETED: {NegotiationStatus.ACTIVE},  # reopen
}

# Fields that may only change while preparing
SETUP_FIELDS = (
    "name",
    "npc_name",
    "description",
    "npc_entity_id",
    "interest",
    "patience",
    "impression",
    "motivations",
    "pitfalls",
)


def _build_motivations(inputs: list[MotivationInput]) -> list[Motivation]:
    types = [m.type for m in inputs]
    if any(not t for t in types):
        raise ValidationError("Motivation type cannot be empty")
    duplicates = sorted({t for t in types if types.count(t) > 1})
    if duplicates:
        raise ValidationError(f"Duplicate motivation types: {', '.join(duplicates)}")
    return [
        Motivation(type=m.type, description=m.description, is_known=m.is_known)
        for m in inputs
    ]


def _build_pitfalls(inputs: list[PitfallInput]) -> list[Pitfall]:
    descriptions = [p.description for p in inputs]
    if any(not d for d in descriptions):
        raise ValidationError("Pitfall description cannot be empty")
    duplicates = sorted({d for d in descriptions if descriptions.count(d) > 1})
    if duplicates:
        raise ValidationError(f"Duplicate pitfalls: {', '.join(duplicates)}")
    return [Pitfall(description=p.description, is_known=p.is_known) for p in inputs]


def _check_starting_values(interest: int, patience: int) -> None:
    if not 0 <= interest <= MAX_INTEREST:
        raise ValidationError(
            f"Starting interest must be between 0 and {MAX_INTEREST}, got {interest}"
        )
    if patience < 0:
        raise ValidationError(f"Starting patience cannot be negative, got {patience}")


class NegotiationEngine:
    """
    Runs negotiation sessions. Plain synchronous calls over plain data.

    Responsibilities:
    - Status state machine enforcement
    - Setup validation and setup-time edits
    - Argument recording with auto-termination
    - Event emission

    NOT responsible for:
    - Effect lookup and clamping (rules.arguments)
    - Outcome categories (rules.outcome)
    - Loading and saving sessions (NegotiationManager)
    """

    def __init__(
        self,
        rules: RulesTable = DEFAULT_RULES,
        clock: Callable[[], datetime] | None = None,
        id_factory: Callable[[], str] | None = None,
        bus: EventBus | None = None,
    ):
        self.rules = rules
        self._clock = clock or datetime.now
        self._id_factory = id_factory or generate_id
        self._bus = bus or get_event_bus()

    def _transition(self, session: NegotiationSession, to: NegotiationStatus, attempted: str) -> None:
        if to not in VALID_TRANSITIONS.get(session.status, set()):
            raise InvalidStateError(session.status, attempted)
        session.status = to

    def _require(self, session: NegotiationSession, status: NegotiationStatus, attempted: str) -> None:
        if session.status != status:
            raise InvalidStateError(session.status, attempted)

    # ─── Setup ───────────────────────────────────────────────────

    def create(self, data: CreateNegotiationInput) -> NegotiationSession:
        """
        Build a new session in PREPARING.

        The starting patience becomes the session's patience ceiling.

        Raises:
            ValidationError: Out-of-range starting values or duplicate keys
        """
        _check_starting_values(data.interest, data.patience)
        motivations = _build_motivations(data.motivations)
        pitfalls = _build_pitfalls(data.pitfalls)

        now = self._clock()
        session = NegotiationSession(
            id=self._id_factory(),
            name=data.name,
            npc_name=data.npc_name,
            description=data.description,
            npc_entity_id=data.npc_entity_id,
            interest=data.interest,
            patience=data.patience,
            max_patience=data.patience,
            impression=data.impression,
            motivations=motivations,
            pitfalls=pitfalls,
            created_at=now,
            updated_at=now,
        )

        self._bus.emit(
            EventType.NEGOTIATION_CREATED,
            session,
            npc_name=session.npc_name,
        )
        return session

    def update(self, session: NegotiationSession, changes: UpdateNegotiationInput) -> NegotiationSession:
        """
        Apply setup-time edits. Only allowed while PREPARING.

        Changing patience also resets the patience ceiling.

        Raises:
            InvalidStateError: If the session has left PREPARING
            ValidationError: Out-of-range values or duplicate keys
        """
        self._require(session, NegotiationStatus.PREPARING, "edit setup")

        fields = {
            name: getattr(changes, name)
            for name in SETUP_FIELDS
            if name in changes.model_fields_set
        }

        # Required text fields cannot be cleared
        for required in ("name", "npc_name"):
            if required in fields and fields[required] is None:
                raise ValidationError(f"{required} cannot be cleared")
        if fields.get("description", "") is None:
            fields["description"] = ""

        for numeric in ("interest", "patience", "impression"):
            if numeric in fields and fields[numeric] is None:
                raise ValidationError(f"{numeric} cannot be cleared")

        _check_starting_values(
            fields.get("interest", session.interest),
            fields.get("patience", session.patience),
        )
        if fields.get("motivations") is not None:
            fields["motivations"] = _build_motivations(fields["motivations"])
        elif "motivations" in fields:
            fields["motivations"] = []
        if fields.get("pitfalls") is not None:
            fields["pitfalls"] = _build_pitfalls(fields["pitfalls"])
        elif "pitfalls" in fields:
            fields["pitfalls"] = []

        # Validated; now apply
        for name, value in fields.items():
            setattr(session, name, value)
        if "patience" in fields:
            session.max_patience = fields["patience"]
        session.updated_at = self._clock()

        self._bus.emit(
            EventType.NEGOTIATION_UPDATED,
            session,
            fields=sorted(fields),
        )
        return session

    # ─── Lifecycle ───────────────────────────────────────────────

    def start(self, session: NegotiationSession) -> NegotiationSession:
        """
        PREPARING → ACTIVE. No resource changes.

        Raises:
            InvalidStateError: If not PREPARING
        """
        self._require(session, NegotiationStatus.PREPARING, "start")
        self._transition(session, NegotiationStatus.ACTIVE, "start")
        session.updated_at = self._clock()

        logger.info(f"Negotiation {session.id} with {session.npc_name} started")
        self._bus.emit(
            EventType.NEGOTIATION_STARTED,
            session,
        )
        return session

    def complete(self, session: NegotiationSession) -> NegotiationOutcome:
        """
        ACTIVE → COMPLETED, classifying the current interest.

        Returns:
            The outcome now stored on the session

        Raises:
            InvalidStateError: If not ACTIVE (including already COMPLETED)
        """
        self._require(session, NegotiationStatus.ACTIVE, "complete")
        return self._finish(session, automatic=False)

    def _finish(self, session: NegotiationSession, automatic: bool) -> NegotiationOutcome:
        outcome = classify(session.interest)
        self._transition(session, NegotiationStatus.COMPLETED, "complete")
        session.outcome = outcome
        session.completed_at = self._clock()
        session.updated_at = session.completed_at

        logger.info(
            f"Negotiation {session.id} {'auto-' if automatic else ''}completed: "
            f"{outcome.value} at interest {session.interest}"
        )
        self._bus.emit(
            EventType.NEGOTIATION_COMPLETED,
            session,
            outcome=outcome.value,
            automatic=automatic,
        )
        return outcome

    def reopen(self, session: NegotiationSession) -> NegotiationSession:
        """
        COMPLETED → ACTIVE. Discards the outcome; interest, patience,
        arguments and reveals carry on exactly where they were.

        Raises:
            InvalidStateError: If not COMPLETED
        """
        self._require(session, NegotiationStatus.COMPLETED, "reopen")
        previous = session.outcome
        self._transition(session, NegotiationStatus.ACTIVE, "reopen")
        session.outcome = None
        session.completed_at = None
        session.updated_at = self._clock()

        logger.info(f"Negotiation {session.id} reopened")
        self._bus.emit(
            EventType.NEGOTIATION_REOPENED,
            session,
            previous_outcome=previous.value if previous else None,
        )
        return session

    # ─── Play ────────────────────────────────────────────────────

    def record_argument(
        self,
        session: NegotiationSession,
        argument: RecordArgumentInput,
    ) -> ArgumentRecord:
        """
        Resolve an argument against an ACTIVE session.

        If patience ends at 0 the session is completed before returning;
        callers check session.is_finished rather than making a second call.

        Returns:
            The appended ArgumentRecord (post-clamp deltas)

        Raises:
            InvalidStateError: If not ACTIVE
            ValidationError: Bad tier or motivation reference
        """
        self._require(session, NegotiationStatus.ACTIVE, "record an argument")

        record = apply_argument(
            session,
            argument,
            rules=self.rules,
            now=self._clock,
            id_factory=self._id_factory,
        )
        session.updated_at = record.created_at

        self._bus.emit(
            EventType.ARGUMENT_RECORDED,
            session,
            argument_id=record.id,
            argument_type=record.type.value,
            tier=record.tier,
            interest_change=record.interest_change,
            patience_change=record.patience_change,
        )

        if session.patience <= 0:
            self._finish(session, automatic=True)

        return record

    def reveal_motivation(self, session: NegotiationSession, motivation_type: str) -> bool:
        """Mark a motivation known. Any status. Returns True if it changed."""
        changed = reveal_motivation(session, motivation_type)
        if changed:
            session.updated_at = self._clock()
            self._bus.emit(
                EventType.MOTIVATION_REVEALED,
                session,
                motivation_type=motivation_type,
            )
        return changed

    def reveal_pitfall(self, session: NegotiationSession, description: str) -> bool:
        """Mark a pitfall known. Any status. Returns True if it changed."""
        changed = reveal_pitfall(session, description)
        if changed:
            session.updated_at = self._clock()
            self._bus.emit(
                EventType.PITFALL_REVEALED,
                session,
                description=description,
            )
        return changed
