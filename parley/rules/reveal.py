"""
Reveal tracking as pure functions.

Marks NPC motivations and pitfalls as known to the players. Valid in any
session status and never touches interest, patience, or outcome.
"""

from __future__ import annotations
from typing import TYPE_CHECKING

from ..errors import NotFoundError

if TYPE_CHECKING:
    from ..state.schema import NegotiationSession


def reveal_motivation(session: "NegotiationSession", motivation_type: str) -> bool:
    """
    Mark a motivation as known.

    Mutates the session in place.

    Args:
        session: The session to modify
        motivation_type: The motivation's type key

    Returns:
        True if the motivation was hidden before, False if already known

    Raises:
        NotFoundError: If no motivation has that type
    """
    motivation = session.get_motivation(motivation_type)
    if motivation is None:
        raise NotFoundError(f"Motivation not found: {motivation_type}")

    if motivation.is_known:
        return False
    motivation.is_known = True
    return True


def reveal_pitfall(session: "NegotiationSession", description: str) -> bool:
    """
    Mark a pitfall as known. Same contract as reveal_motivation,
    keyed by the pitfall's description.
    """
    pitfall = session.get_pitfall(description)
    if pitfall is None:
        raise NotFoundError(f"Pitfall not found: {description}")

    if pitfall.is_known:
        return False
    pitfall.is_known = True
    return True
