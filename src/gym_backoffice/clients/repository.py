from __future__ import annotations

from datetime import date, datetime
from typing import Any, Mapping, Optional, Protocol, Sequence

from .model import Client


class ClientRepository(Protocol):
    """Repository interface for clients.

    Services depend on this protocol, never on a concrete database.
    """

    def list_all(self) -> Sequence[Client]:
        """Clients holding a valid number, ordered by number."""

        raise NotImplementedError

    def list_expiring(self, *, start: date, end: date) -> Sequence[Client]:
        raise NotImplementedError

    def get_by_number(self, client_number: int) -> Optional[Client]:
        raise NotImplementedError

    def get_by_ref(self, client_ref: str) -> Optional[Client]:
        raise NotImplementedError

    def create(self, *, client_number: int, fields: Mapping[str, Any], now: datetime) -> Client:
        """Insert a client under client_number.

        Raises IdentifierCollision when client_number is already taken.
        """

        raise NotImplementedError

    def update(self, client_ref: str, *, fields: Mapping[str, Any], now: datetime) -> Optional[Client]:
        raise NotImplementedError

    def delete(self, client_ref: str) -> bool:
        raise NotImplementedError
