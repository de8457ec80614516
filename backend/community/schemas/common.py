from __future__ import annotations

from datetime import datetime, timezone
from typing import Dict, Optional

from pydantic import Field

SLUG_PATTERN = r"^[a-z0-9][a-z0-9-]{1,98}[a-z0-9]$"

VisibilityFlags = Dict[str, str]


def slug_field(**kwargs):
    return Field(pattern=SLUG_PATTERN, **kwargs)


def to_naive_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Stored times are naive UTC."""
    if value is None or value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)


def reject_null(value):
    """Updates may omit a required column but never clear it."""
    if value is None:
        raise ValueError("must not be null")
    return value
