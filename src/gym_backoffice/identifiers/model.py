from __future__ import annotations

from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True)
class UnnumberedEntity:
    """An entity stored without a valid human-facing number."""

    ref: str
    label: str
    current_value: Any = None


@dataclass(frozen=True)
class RenumberedEntity:
    ref: str
    label: str
    old_value: Any
    new_value: int
