# bossofclean/core/exceptions.py
"""
Domain exceptions for the availability and booking flows.

Services raise these; the API layer turns them into JSON responses with
the matching status code. None of them is retried.
"""
from typing import Any, Dict, Optional


class DomainError(Exception):
    """Base exception for all domain-specific errors."""

    status_code: int = 500

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        self.message = message
        self.code = code or self.__class__.__name__
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "error": self.message,
            "code": self.code,
            "details": self.details,
        }


class ValidationError(DomainError):
    """Malformed input: bad date or time, non-positive duration, missing ids."""

    status_code = 400


class NotFoundError(DomainError):
    """Referenced cleaner, booking or blocked date does not exist."""

    status_code = 404


class ConflictError(DomainError):
    """Requested slot is taken, the date is not bookable, or the booking state forbids the change."""

    status_code = 409


class PolicyError(DomainError):
    """Change attempted outside what the booking policy allows (e.g. inside 24 hours)."""

    status_code = 403


SLOT_TAKEN_MESSAGE = "This time is no longer available - please choose another"
TOO_LATE_MESSAGE = "Changes must be made at least {hours} hours before the scheduled service"
