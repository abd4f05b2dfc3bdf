"""
Job operation repository.

Queries job operations by lookup code and route card. Completion updates
load the row inside the caller's unit of work so the read and the write
share one transaction.
"""

from sqlmodel import col, select

from shopfloor.models import JobOperation, JobOperationCreate

from .base import BaseRepository


class JobOperationRepository(BaseRepository[JobOperation, JobOperationCreate]):
    """Repository for job operation rows."""

    @property
    def entity_class(self) -> type[JobOperation]:
        return JobOperation

    def find_by_lookup_code(self, lookup_code: str) -> JobOperation | None:
        """
        Find a job operation by its composite lookup code.

        Args:
            lookup_code: route_card-contract_number-op_code

        Returns:
            JobOperation if found, None otherwise

        Raises:
            PersistenceError: If database operation fails
        """
        statement = select(JobOperation).where(JobOperation.lookup_code == lookup_code)
        return self._first(statement)

    def find_by_route_card_and_op(
        self, route_card: str, op_code: str
    ) -> JobOperation | None:
        """Find the earliest-due operation op_code on route_card."""
        statement = (
            select(JobOperation)
            .where(JobOperation.route_card == route_card)
            .where(JobOperation.op_code == op_code)
            .order_by(col(JobOperation.due_date).asc(), col(JobOperation.id).asc())
        )
        return self._first(statement)

    def find_by_route_card(self, route_card: str) -> list[JobOperation]:
        """
        Find every operation assigned to a route card.

        Args:
            route_card: Route card text as scanned

        Returns:
            Operations ordered by op_code, empty if the route card is unknown
        """
        statement = (
            select(JobOperation)
            .where(JobOperation.route_card == route_card)
            .order_by(col(JobOperation.op_code).asc())
        )
        return self._all(statement)
