"""Dense human-facing number allocation.

Numbers start at 1 and the smallest number not currently in use is always
handed out, so numbers freed by deletions are reused.

Allocation is a full scan of the namespace followed by a linear gap scan,
O(n) per call. That is fine for a single gym (thousands of clients) but
does not scale horizontally. It is also a read-then-decide operation
without a lock: two concurrent creations can compute the same number. The
storage UNIQUE constraint makes the losing insert fail with
IdentifierCollision, and create_with_identifier() retries it once.
"""

from __future__ import annotations

import logging
from typing import Callable, Iterable, TypeVar

from ..core.enums import IdentifierKind
from ..core.exceptions import IdentifierCollision, ValidationError
from .model import RenumberedEntity
from .repository import IdentifierRepository

logger = logging.getLogger(__name__)

T = TypeVar("T")


def _valid_numbers(values: Iterable[object]) -> list[int]:
    # Upstream rows may hold NULLs, zeros or non-integral values.
    return sorted(
        {v for v in values if isinstance(v, int) and not isinstance(v, bool) and v > 0}
    )


def smallest_unused(values: Iterable[object]) -> int:
    """Smallest positive integer not present in values."""

    candidate = 1
    for number in _valid_numbers(values):
        if number == candidate:
            candidate += 1
        elif number > candidate:
            break
    return candidate


def _as_kind(kind: IdentifierKind | str) -> IdentifierKind:
    try:
        return IdentifierKind(kind)
    except ValueError:
        raise ValidationError(f"Unknown identifier kind: {kind!r}") from None


class IdentifierAllocator:
    def __init__(self, identifiers: IdentifierRepository, *, max_attempts: int = 2):
        self._identifiers = identifiers
        self._max_attempts = max(1, int(max_attempts))

    def allocate(self, kind: IdentifierKind | str) -> int:
        """Next number to assign within kind.

        Pure read + compute; the caller persists the entity with it.
        """

        kind = _as_kind(kind)
        return smallest_unused(self._identifiers.list_identifiers(kind))

    def create_with_identifier(self, kind: IdentifierKind | str, create: Callable[[int], T]) -> T:
        kind = _as_kind(kind)
        attempt = 1
        while True:
            number = self.allocate(kind)
            try:
                return create(number)
            except IdentifierCollision:
                if attempt >= self._max_attempts:
                    raise
                logger.warning("%s number %s was taken concurrently, allocating again", kind.value, number)
                attempt += 1

    def repair(self, kind: IdentifierKind | str) -> list[RenumberedEntity]:
        """Give every entity stored without a valid number the smallest free one."""

        kind = _as_kind(kind)
        broken = self._identifiers.list_unnumbered(kind)
        if not broken:
            return []

        in_use = set(_valid_numbers(self._identifiers.list_identifiers(kind)))
        fixed: list[RenumberedEntity] = []
        for entity in broken:
            number = smallest_unused(in_use)
            if not self._identifiers.assign_identifier(kind, ref=entity.ref, number=number):
                continue
            in_use.add(number)
            fixed.append(
                RenumberedEntity(ref=entity.ref, label=entity.label, old_value=entity.current_value, new_value=number)
            )

        logger.info("Renumbered %d %s record(s)", len(fixed), kind.value)
        return fixed
