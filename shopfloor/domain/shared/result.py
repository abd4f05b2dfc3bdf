"""
Result envelope for component boundaries.

Application services return Ok(value) or Err(error) instead of raising, so the
terminal state machine can decide per call whether a failure blocks the
transition or is only logged. Inside a unit of work a caller may unwrap() to
turn an Err back into the carried DomainError and trigger a rollback.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Generic, TypeVar

from shopfloor.domain.shared.exceptions import DomainError

T = TypeVar("T")


@dataclass(frozen=True, slots=True)
class Ok(Generic[T]):
    """Successful result containing a value."""

    value: T

    def is_ok(self) -> bool:
        return True

    def is_err(self) -> bool:
        return False

    def unwrap(self) -> T:
        return self.value

    @property
    def error(self) -> None:
        return None


@dataclass(frozen=True, slots=True)
class Err(Generic[T]):
    """Failed result carrying the domain error."""

    error: DomainError

    def is_ok(self) -> bool:
        return False

    def is_err(self) -> bool:
        return True

    def unwrap(self) -> T:
        raise self.error

    @property
    def value(self) -> None:
        return None


Result = Ok[T] | Err[T]
