"""
Pydantic models for negotiation sessions.

Sessions are plain data; the rules and the state machine operate on them
from outside. Designed to serialize to JSON for the session store.
"""

from datetime import datetime
from enum import Enum
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field


MAX_INTEREST = 5
TIERS = (1, 2, 3)


# -----------------------------------------------------------------------------
# Enums
# -----------------------------------------------------------------------------

class NegotiationStatus(str, Enum):
    PREPARING = "preparing"    # Setup phase, no arguments yet
    ACTIVE = "active"          # Arguments being recorded
    COMPLETED = "completed"    # Outcome decided (may be reopened)


class ArgumentType(str, Enum):
    MOTIVATION = "motivation"        # Appeals to one of the NPC's motivations
    NO_MOTIVATION = "no_motivation"  # Appeals to nothing the NPC cares about
    PITFALL = "pitfall"              # Triggers one of the NPC's pitfalls


class NegotiationOutcome(str, Enum):
    HOSTILE = "hostile"
    LESSER_OFFER = "lesser_offer"
    COMPROMISE = "compromise"
    SUCCESS_FULL = "success_full"
    SUCCESS_FULL_BONUS = "success_full_bonus"


class MotivationType(str, Enum):
    """Reference catalogue of NPC motivations. Sessions accept any string."""
    BENEVOLENCE = "benevolence"
    DISCOVERY = "discovery"
    FREEDOM = "freedom"
    GREED = "greed"
    HIGHER_AUTHORITY = "higher_authority"
    JUSTICE = "justice"
    LEGACY = "legacy"
    PEACE = "peace"
    POWER = "power"
    PROTECTION = "protection"
    REPUTATION = "reputation"
    REVELRY = "revelry"
    VENGEANCE = "vengeance"
    WEALTH = "wealth"


# -----------------------------------------------------------------------------
# Models
# -----------------------------------------------------------------------------

def generate_id() -> str:
    return str(uuid4())[:8]


class Motivation(BaseModel):
    """A lever that improves the NPC's response when appealed to."""
    type: str
    description: str = ""
    is_known: bool = False
    times_used: int = 0


class Pitfall(BaseModel):
    """A lever that sours the NPC when triggered. Keyed by description."""
    description: str
    is_known: bool = False


class ArgumentRecord(BaseModel):
    """
    A single argument made at the table.

    Immutable once appended. interest_change and patience_change are the
    deltas actually applied (after clamping), not the raw table values.
    """
    model_config = ConfigDict(frozen=True)

    id: str = Field(default_factory=generate_id)
    type: ArgumentType
    tier: int
    description: str = ""
    motivation_type: str | None = None
    player_name: str | None = None
    notes: str | None = None
    interest_change: int = 0
    patience_change: int = 0
    created_at: datetime = Field(default_factory=datetime.now)


class NegotiationSession(BaseModel):
    """The aggregate root for one negotiation with one NPC."""
    id: str = Field(default_factory=generate_id)
    name: str
    npc_name: str
    description: str = ""
    npc_entity_id: str | None = None  # Back-reference only, never dereferenced
    status: NegotiationStatus = NegotiationStatus.PREPARING

    interest: int = 2          # 0..MAX_INTEREST
    patience: int = 5          # 0..max_patience
    max_patience: int = 5      # Starting patience
    impression: int = 0        # Display only

    motivations: list[Motivation] = Field(default_factory=list)
    pitfalls: list[Pitfall] = Field(default_factory=list)
    arguments: list[ArgumentRecord] = Field(default_factory=list)

    outcome: NegotiationOutcome | None = None
    created_at: datetime = Field(default_factory=datetime.now)
    updated_at: datetime = Field(default_factory=datetime.now)
    completed_at: datetime | None = None

    def get_motivation(self, motivation_type: str) -> Motivation | None:
        return next((m for m in self.motivations if m.type == motivation_type), None)

    def get_pitfall(self, description: str) -> Pitfall | None:
        return next((p for p in self.pitfalls if p.description == description), None)

    @property
    def is_finished(self) -> bool:
        return self.status == NegotiationStatus.COMPLETED

    @property
    def interest_percent(self) -> float:
        """Interest as 0-100 for progress displays."""
        return self.interest / MAX_INTEREST * 100

    @property
    def patience_percent(self) -> float:
        """Patience as 0-100 of the starting patience."""
        if self.max_patience <= 0:
            return 0.0
        return self.patience / self.max_patience * 100

    @property
    def known_motivations(self) -> list[Motivation]:
        return [m for m in self.motivations if m.is_known]

    @property
    def known_pitfalls(self) -> list[Pitfall]:
        return [p for p in self.pitfalls if p.is_known]

    @property
    def unused_motivations(self) -> list[Motivation]:
        return [m for m in self.motivations if m.times_used == 0]

    @property
    def argument_history(self) -> list[ArgumentRecord]:
        """Arguments newest first, for display."""
        return list(reversed(self.arguments))


# -----------------------------------------------------------------------------
# Operation inputs
# -----------------------------------------------------------------------------

class MotivationInput(BaseModel):
    type: str
    description: str = ""
    is_known: bool = False


class PitfallInput(BaseModel):
    description: str
    is_known: bool = False


class CreateNegotiationInput(BaseModel):
    """Input for creating a session. Starting values follow the tabletop defaults."""
    name: str
    npc_name: str
    description: str = ""
    npc_entity_id: str | None = None
    interest: int = 2
    patience: int = 5
    impression: int = 0
    motivations: list[MotivationInput] = Field(default_factory=list)
    pitfalls: list[PitfallInput] = Field(default_factory=list)


class UpdateNegotiationInput(BaseModel):
    """
    Setup-time edits.

    Only fields explicitly passed are applied (model_fields_set), so
    npc_entity_id=None clears the back-reference while omitting it keeps it.
    """
    name: str | None = None
    npc_name: str | None = None
    description: str | None = None
    npc_entity_id: str | None = None
    interest: int | None = None
    patience: int | None = None
    impression: int | None = None
    motivations: list[MotivationInput] | None = None
    pitfalls: list[PitfallInput] | None = None


class RecordArgumentInput(BaseModel):
    """
    An argument as presented at the table.

    tier is range-checked by the engine, not here.
    """
    type: ArgumentType
    tier: int
    description: str = ""
    motivation_type: str | None = None
    player_name: str | None = None
    notes: str | None = None
