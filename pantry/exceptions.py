"""
Error taxonomy for the inventory core.

Every failure carries a machine-readable kind and a human-readable message.
"""

from typing import Any, Dict, Optional


class PantryError(Exception):
    """Base class for all inventory errors."""

    kind = "internal"
    status_code = 500

    def __init__(self, message: str, details: Optional[Any] = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details

    def to_dict(self) -> Dict[str, Any]:
        """Convert error to a JSON-serializable payload."""
        payload: Dict[str, Any] = {"error": self.kind, "message": self.message}
        if self.details is not None:
            payload["details"] = self.details
        return payload


class UnauthenticatedError(PantryError):
    """No authenticated caller identity."""

    kind = "unauthenticated"
    status_code = 401


class InvalidArgumentError(PantryError):
    """Schema or shape violation, malformed id, zero delta, bad sort field."""

    kind = "invalid_argument"
    status_code = 400


class NotFoundError(PantryError):
    """Referenced item does not exist."""

    kind = "not_found"
    status_code = 404


class ConflictError(PantryError):
    """Another live item already has this name."""

    kind = "conflict"
    status_code = 409


class InvalidStateError(PantryError):
    """Operation would break an item invariant (e.g. negative stock)."""

    kind = "invalid_state"
    status_code = 400


class InternalError(PantryError):
    """Unexpected store failure."""

    kind = "internal"
    status_code = 500


class StoreTimeoutError(PantryError):
    """Store call did not complete within the allowed time."""

    kind = "timeout"
    status_code = 504
