from __future__ import annotations

from typing import Optional


class DomainError(Exception):
    """Base exception for business rule violations."""


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""


class NotFoundError(DomainError):
    """Raised when a referenced entity does not exist."""


class ClientNotFound(NotFoundError):
    def __init__(self, client_id: object):
        super().__init__(f"Client ID {client_id} not found")
        self.client_id = client_id


class UniquenessViolation(DomainError):
    """Raised when a write collides with a storage uniqueness constraint."""

    def __init__(self, message: str, *, key: Optional[str] = None):
        super().__init__(message)
        self.key = key


class IdentifierCollision(UniquenessViolation):
    """Raised when an allocated human-facing number was taken concurrently."""

    def __init__(self, kind: object, number: int, *, key: Optional[str] = None):
        super().__init__(f"Identifier {number} already in use for {kind}", key=key)
        self.kind = kind
        self.number = number


class StorageUnavailable(Exception):
    """Raised when the database cannot be reached or fails mid-operation."""
