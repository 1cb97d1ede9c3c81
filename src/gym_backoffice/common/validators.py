from __future__ import annotations

from typing import Any, Optional

from ..core.constants import MAX_HUMAN_ID
from ..core.exceptions import ValidationError


def require_non_empty(value: Any, field_name: str) -> str:
    if value is None or not str(value).strip():
        raise ValidationError(f"{field_name} is required")
    return str(value).strip()


def optional_text(value: Any) -> Optional[str]:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def optional_number(value: Any, field_name: str) -> Optional[float]:
    if value is None or value == "":
        return None
    if isinstance(value, bool):
        raise ValidationError(f"{field_name} must be a number")
    try:
        return float(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{field_name} must be a number") from None


def require_positive_int(value: Any, field_name: str) -> int:
    if isinstance(value, bool):
        raise ValidationError(f"{field_name} must be a positive integer")
    try:
        number = int(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{field_name} must be a positive integer") from None
    if number <= 0 or (isinstance(value, float) and not value.is_integer()):
        raise ValidationError(f"{field_name} must be a positive integer")
    return number


def parse_human_id(value: Any) -> Optional[int]:
    """Return the human-facing number encoded by value, if it is one.

    Only positive integers below MAX_HUMAN_ID qualify; other values are
    internal references and yield None.
    """
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        number = value
    else:
        text = str(value).strip()
        if not text.isdigit():
            return None
        number = int(text)
    if 0 < number < MAX_HUMAN_ID:
        return number
    return None


def parse_bool(value: Any, *, default: bool = False) -> bool:
    if value is None or value == "":
        return default
    if isinstance(value, bool):
        return value
    return str(value).strip().lower() in {"1", "true", "yes", "on"}
