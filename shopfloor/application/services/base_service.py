"""
Base application service providing common functionality.

Services share input validation helpers and a transaction helper that either
joins a unit of work supplied by the caller or opens a new one.
"""

from abc import ABC
from collections.abc import Iterator
from contextlib import contextmanager

from shopfloor.core.unit_of_work import UnitOfWork, UnitOfWorkFactory
from shopfloor.domain.shared.exceptions import ValidationError


class ApplicationServiceBase(ABC):
    """
    Base class for application services.

    Provides validation helpers and transaction coordination across all
    application services.
    """

    def __init__(self, unit_of_work_factory: UnitOfWorkFactory = UnitOfWork):
        """
        Initialize the application service.

        Args:
            unit_of_work_factory: Factory for creating unit of work instances
        """
        self._uow_factory = unit_of_work_factory

    @contextmanager
    def transaction(self, uow: UnitOfWork | None = None) -> Iterator[UnitOfWork]:
        """
        Yield uow when given, otherwise a fresh unit of work.

        A joined unit of work is committed by its owner, not here.
        """
        if uow is not None:
            yield uow
            return
        with self._uow_factory() as new_uow:
            yield new_uow

    def validate_non_empty_string(self, value: str | None, field_name: str) -> str:
        """
        Validate that a string field is not empty.

        Returns:
            The stripped value

        Raises:
            ValidationError: If string is None or empty
        """
        if value is None or not str(value).strip():
            raise ValidationError(field_name, value, "cannot be empty")
        return str(value).strip()

    def validate_positive_number(self, value: float | None, field_name: str) -> None:
        """
        Validate that a number is positive.

        Raises:
            ValidationError: If number is not positive
        """
        if value is None or isinstance(value, bool) or value <= 0:
            raise ValidationError(field_name, value, "must be a positive number")

    def validate_non_negative_int(self, value: int | None, field_name: str) -> int:
        """
        Validate that a value is a whole number of zero or more.

        Raises:
            ValidationError: If value is missing, fractional or negative
        """
        if value is None or isinstance(value, bool) or not isinstance(value, int):
            raise ValidationError(field_name, value, "must be a whole number")
        if value < 0:
            raise ValidationError(field_name, value, "cannot be negative")
        return value
