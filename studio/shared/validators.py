"""Shared validation utilities"""

import re
from datetime import datetime, timezone
from typing import Optional

CONTROL_CHARS = re.compile(r"[\x00-\x08\x0B\x0C\x0E-\x1F\x7F]")


def clean_label(value: Optional[str]) -> str:
    """Strip control characters and surrounding whitespace; used for lookups by label"""
    if value is None:
        return ""
    return CONTROL_CHARS.sub("", str(value)).strip()


def validate_label(value: Optional[str], field_name: str = "value", max_length: int = 255) -> str:
    """
    Validate a short human-readable label (task name, session type, actor id).

    Args:
        value: Input string
        field_name: Name used in error messages
        max_length: Maximum allowed length

    Returns:
        Stripped string without control characters

    Raises:
        ValueError: If the label is blank or too long
    """
    if value is None:
        raise ValueError(f"{field_name} is required")

    value = clean_label(value)

    if not value:
        raise ValueError(f"{field_name} must not be blank")

    if len(value) > max_length:
        raise ValueError(f"{field_name} exceeds maximum length of {max_length} characters")

    return value


def ensure_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Attach UTC to naive datetimes (SQLite drops tz info) and normalize aware ones"""
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)
