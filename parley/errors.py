"""
Error taxonomy for the negotiation engine.

All errors are raised before any state is touched, so the caller can
correct input or session state and retry.
"""


class NegotiationError(Exception):
    """Base class for negotiation engine errors."""
    pass


class ValidationError(NegotiationError, ValueError):
    """Malformed input: bad tier, unknown motivation reference, bad setup values."""
    pass


class InvalidStateError(NegotiationError):
    """Operation attempted in a status that forbids it."""
    def __init__(self, status, attempted: str):
        self.status = status
        self.attempted = attempted
        label = getattr(status, "value", status)
        super().__init__(f"Cannot {attempted} while negotiation is {label}.")


class NotFoundError(NegotiationError, LookupError):
    """Unknown session id, or unknown motivation/pitfall key on reveal."""
    pass
