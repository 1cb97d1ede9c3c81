from __future__ import annotations

from typing import Protocol, Sequence

from ..core.enums import IdentifierKind
from .model import UnnumberedEntity


class IdentifierRepository(Protocol):
    """Read/write access to the human-facing numbers of one entity kind."""

    def list_identifiers(self, kind: IdentifierKind) -> Sequence[object]:
        """All numbers currently stored for kind, unfiltered (may hold NULLs)."""

        raise NotImplementedError

    def list_unnumbered(self, kind: IdentifierKind) -> Sequence[UnnumberedEntity]:
        raise NotImplementedError

    def assign_identifier(self, kind: IdentifierKind, *, ref: str, number: int) -> bool:
        raise NotImplementedError
