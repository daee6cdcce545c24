from __future__ import annotations

from typing import Optional, Sequence


class DomainError(Exception):
    """Base exception for business rule violations."""

    http_status = 400


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules.

    Carries one entry per offending field so the API can report them all at once.
    """

    def __init__(self, message: str, *, errors: Optional[Sequence[dict]] = None):
        super().__init__(message)
        self.errors = list(errors) if errors else [{"field": None, "message": message}]


class NotFoundError(DomainError):
    """Raised when a record is absent or not owned by the caller."""

    http_status = 404


class InsufficientAdvanceError(DomainError):
    """Raised when a deduction exceeds the worker's advance balance."""


class DuplicatePaymentError(DomainError):
    """Raised when a pay week has already been settled for a worker."""


class ConflictError(DomainError):
    """Raised when a record changed between read and conditional write."""

    http_status = 409


class AuthenticationError(DomainError):
    """Raised when credentials or bearer tokens are invalid."""

    http_status = 401


class PersistenceError(Exception):
    """Underlying storage failure. Never shown to API clients verbatim."""
