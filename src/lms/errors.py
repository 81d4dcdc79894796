"""Typed failures raised by the engine.

Every public operation surfaces exactly one of these on failure. The HTTP
layer maps ``kind`` to a status code; nothing inside the engine retries.
"""

from __future__ import annotations

from typing import Any


class EngineError(Exception):
    """Base exception for engine failures."""

    kind = "error"

    def __init__(self, detail: str) -> None:
        super().__init__(detail)
        self.detail = detail

    def extras(self) -> dict[str, Any]:
        """Kind-specific payload fields beyond the message."""
        return {}


class NotFoundError(EngineError):
    """Raised when a referenced entity does not exist."""

    kind = "not_found"

    def __init__(self, detail: str, missing_ids: list[int] | None = None) -> None:
        super().__init__(detail)
        self.missing_ids = missing_ids or []

    def extras(self) -> dict[str, Any]:
        return {"missing_ids": self.missing_ids} if self.missing_ids else {}


class ConflictError(EngineError):
    """Raised on uniqueness or already-in-desired-state violations."""

    kind = "conflict"

    def __init__(self, detail: str, duplicate_ids: list[int] | None = None) -> None:
        super().__init__(detail)
        self.duplicate_ids = duplicate_ids or []

    def extras(self) -> dict[str, Any]:
        return {"duplicate_ids": self.duplicate_ids} if self.duplicate_ids else {}


class InvalidStateError(EngineError):
    """Raised when a business rule rejects the requested change."""

    kind = "invalid_state"


class AccessDeniedError(EngineError):
    """Raised when no qualifying enrollment scope grants access."""

    kind = "access_denied"


class AmbiguousScopeError(EngineError):
    """Raised when several domains qualify and the caller gave no hint."""

    kind = "ambiguous_scope"

    def __init__(self, detail: str, candidate_domain_ids: list[int]) -> None:
        super().__init__(detail)
        self.candidate_domain_ids = candidate_domain_ids

    def extras(self) -> dict[str, Any]:
        return {"candidate_domain_ids": self.candidate_domain_ids}


class RateLimitedError(EngineError):
    """Raised when a cooldown has not yet elapsed."""

    kind = "rate_limited"

    def __init__(self, detail: str, remaining_days: int) -> None:
        super().__init__(detail)
        self.remaining_days = remaining_days

    def extras(self) -> dict[str, Any]:
        return {"remaining_days": self.remaining_days}


class NotEnrolledError(EngineError):
    """Raised when a quiz is attempted without a prior enrollment."""

    kind = "not_enrolled"
