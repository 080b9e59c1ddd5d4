"""
Argument resolution as pure functions.

An argument's effect is a lookup keyed by (argument type, tier) in a
RulesTable. The table is data so alternate rule sets can be swapped in
without touching the state machine.
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, Callable

from pydantic import BaseModel, ConfigDict, model_validator

from ..errors import ValidationError
from ..state.schema import (
    MAX_INTEREST,
    TIERS,
    ArgumentRecord,
    ArgumentType,
    NegotiationSession,
    RecordArgumentInput,
    generate_id,
)

logger = logging.getLogger(__name__)


class ArgumentEffect(BaseModel):
    """Raw deltas for one (type, tier) cell. Accepts [interest, patience] pairs."""
    model_config = ConfigDict(frozen=True)

    interest: int
    patience: int

    @model_validator(mode="before")
    @classmethod
    def _from_pair(cls, data: Any) -> Any:
        if isinstance(data, (list, tuple)):
            if len(data) != 2:
                raise ValueError(f"Effect pair needs 2 values, got {len(data)}")
            return {"interest": data[0], "patience": data[1]}
        return data


class RulesTable(BaseModel):
    """Complete effect lookup: every argument type must define tiers 1-3."""
    model_config = ConfigDict(frozen=True)

    effects: dict[ArgumentType, dict[int, ArgumentEffect]]

    @model_validator(mode="after")
    def _check_complete(self) -> "RulesTable":
        missing = [
            f"{arg_type.value}/tier {tier}"
            for arg_type in ArgumentType
            for tier in TIERS
            if tier not in self.effects.get(arg_type, {})
        ]
        if missing:
            raise ValueError(f"Rules table is missing: {', '.join(missing)}")
        return self

    def effect_for(self, arg_type: ArgumentType, tier: int) -> ArgumentEffect:
        return self.effects[arg_type][tier]


DEFAULT_RULES = RulesTable(effects={
    ArgumentType.MOTIVATION: {
        1: ArgumentEffect(interest=1, patience=0),
        2: ArgumentEffect(interest=1, patience=0),
        3: ArgumentEffect(interest=2, patience=0),
    },
    ArgumentType.NO_MOTIVATION: {
        1: ArgumentEffect(interest=0, patience=-1),
        2: ArgumentEffect(interest=1, patience=-1),
        3: ArgumentEffect(interest=1, patience=-1),
    },
    ArgumentType.PITFALL: {
        1: ArgumentEffect(interest=-1, patience=-1),
        2: ArgumentEffect(interest=-1, patience=-1),
        3: ArgumentEffect(interest=-2, patience=-1),
    },
})


def clamp(value: int, low: int, high: int) -> int:
    return max(low, min(high, value))


def validate_argument(session: NegotiationSession, argument: RecordArgumentInput) -> None:
    """
    Check an argument against the session without touching it.

    Raises:
        ValidationError: Bad tier, or a motivation argument with a missing
            or unregistered motivation_type
    """
    if isinstance(argument.tier, bool) or argument.tier not in TIERS:
        raise ValidationError(f"Tier must be 1, 2, or 3, got {argument.tier!r}")

    if argument.type == ArgumentType.MOTIVATION:
        if not argument.motivation_type:
            raise ValidationError("Motivation arguments require a motivation_type")
        if session.get_motivation(argument.motivation_type) is None:
            raise ValidationError(
                f"Motivation '{argument.motivation_type}' is not one of "
                f"{session.npc_name}'s motivations"
            )


def resolve_deltas(
    rules: RulesTable,
    arg_type: ArgumentType,
    tier: int,
) -> ArgumentEffect:
    """Look up the raw (unclamped) deltas for an argument."""
    return rules.effect_for(arg_type, tier)


def apply_argument(
    session: NegotiationSession,
    argument: RecordArgumentInput,
    rules: RulesTable = DEFAULT_RULES,
    now: Callable[[], datetime] = datetime.now,
    id_factory: Callable[[], str] = generate_id,
) -> ArgumentRecord:
    """
    Resolve an argument and apply it to the session.

    Mutates the session in place: clamps interest and patience into their
    bounds, bumps times_used on the referenced motivation, and appends the
    record. Status and auto-termination are the state machine's concern.

    Args:
        session: The session to modify
        argument: The argument as presented
        rules: Effect lookup table
        now: Clock for the record timestamp
        id_factory: Id source for the record

    Returns:
        The appended ArgumentRecord, carrying post-clamp deltas

    Raises:
        ValidationError: See validate_argument
    """
    validate_argument(session, argument)

    effect = resolve_deltas(rules, argument.type, argument.tier)

    new_interest = clamp(session.interest + effect.interest, 0, MAX_INTEREST)
    new_patience = clamp(session.patience + effect.patience, 0, session.max_patience)

    record = ArgumentRecord(
        id=id_factory(),
        type=argument.type,
        tier=argument.tier,
        description=argument.description,
        motivation_type=argument.motivation_type,
        player_name=argument.player_name,
        notes=argument.notes,
        interest_change=new_interest - session.interest,
        patience_change=new_patience - session.patience,
        created_at=now(),
    )

    logger.debug(
        "Argument %s tier %d on %s: table %+d/%+d, applied %+d/%+d",
        argument.type.value,
        argument.tier,
        session.id,
        effect.interest,
        effect.patience,
        record.interest_change,
        record.patience_change,
    )

    session.interest = new_interest
    session.patience = new_patience

    if argument.type == ArgumentType.MOTIVATION:
        session.get_motivation(argument.motivation_type).times_used += 1

    session.arguments.append(record)
    return record
