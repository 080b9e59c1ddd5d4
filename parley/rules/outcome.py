"""
Outcome classification as a pure function.

Maps the NPC's interest at the moment a negotiation completes to the
offer they end up making.
"""

from ..errors import ValidationError
from ..state.schema import MAX_INTEREST, NegotiationOutcome


OUTCOME_BY_INTEREST: dict[int, NegotiationOutcome] = {
    0: NegotiationOutcome.HOSTILE,
    1: NegotiationOutcome.LESSER_OFFER,
    2: NegotiationOutcome.LESSER_OFFER,
    3: NegotiationOutcome.COMPROMISE,
    4: NegotiationOutcome.SUCCESS_FULL,
    5: NegotiationOutcome.SUCCESS_FULL_BONUS,
}


def classify(interest: int) -> NegotiationOutcome:
    """
    Classify a final interest level.

    Args:
        interest: Interest at completion, 0..MAX_INTEREST

    Returns:
        The outcome category

    Raises:
        ValidationError: If interest is outside 0..MAX_INTEREST
    """
    if not 0 <= interest <= MAX_INTEREST:
        raise ValidationError(
            f"Interest must be between 0 and {MAX_INTEREST}, got {interest}"
        )
    return OUTCOME_BY_INTEREST[interest]
