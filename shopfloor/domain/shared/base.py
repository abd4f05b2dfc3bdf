"""Base classes for domain value objects."""

from datetime import datetime, timezone
from typing import Any

from pydantic import BaseModel, ConfigDict


def utc_now() -> datetime:
    """Current time as naive UTC, matching how timestamps are stored."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def as_naive_utc(value: datetime) -> datetime:
    """Normalise an aware timestamp to naive UTC; naive values pass through."""
    if value.tzinfo is not None:
        return value.astimezone(timezone.utc).replace(tzinfo=None)
    return value


class ValueObject(BaseModel):
    """Base class for value objects (immutable, defined by their values)."""

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    def replace(self, **changes: Any) -> "ValueObject":
        """Return a copy with the given fields changed."""
        return self.model_copy(update=changes)
