from __future__ import annotations

from typing import Any, Optional

from ..core.exceptions import ValidationError


def require_non_empty(value: Optional[str], field_name: str) -> str:
    if not value or not str(value).strip():
        raise ValidationError(f"{field_name} is required")
    return str(value).strip()


def require_min_length(value: Optional[str], field_name: str, min_len: int) -> str:
    if value is None or len(value.strip()) < min_len:
        raise ValidationError(f"{field_name} must be at least {min_len} characters")
    return value.strip()


def optional_text(value: Optional[str]) -> Optional[str]:
    return (value or "").strip() or None


def require_int(value: Any, field_name: str, *, minimum: Optional[int] = None) -> int:
    try:
        number = int(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{field_name} must be a whole number")
    if minimum is not None and number < minimum:
        raise ValidationError(f"{field_name} must be >= {minimum}")
    return number


def optional_int(value: Any, field_name: str) -> Optional[int]:
    if value in (None, ""):
        return None
    return require_int(value, field_name)
