"""Exception hierarchy for content and navigation operations.

Each exception carries the caller-facing Outcome it maps to, so handlers can
translate any failure into the closed result set without inspecting messages.
"""

from docsnav.core.models import Outcome


class DocsNavError(RuntimeError):
    """Base exception for content core failures."""
    outcome = Outcome.internal_error


class NotFound(DocsNavError):
    """Raised when a project, document, section or navigation is missing."""
    outcome = Outcome.not_found


class Unauthorized(DocsNavError):
    """Raised when a mutating operation is attempted without an actor."""
    outcome = Outcome.unauthorized


class Forbidden(DocsNavError):
    """Raised when the actor lacks the required project role."""
    outcome = Outcome.forbidden


class ValidationFailure(DocsNavError):
    """Raised for malformed trees, payloads or missing required fields."""
    outcome = Outcome.bad_request


class NavigationConflict(DocsNavError):
    """Raised when a navigation write is based on a stale revision; retryable."""
    outcome = Outcome.conflict

    def __init__(self, message: str, *, expected: int | None = None, actual: int | None = None) -> None:
        super().__init__(message)
        self.expected = expected
        self.actual = actual


class StorageFailure(DocsNavError):
    """Raised when the underlying store fails during a write."""
