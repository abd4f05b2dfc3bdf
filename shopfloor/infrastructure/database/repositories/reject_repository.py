"""Reject and reject reason repositories."""

from sqlmodel import col, select

from shopfloor.models import (
    Operation,
    OperationReject,
    RejectCreate,
    RejectReason,
    RejectReasonCreate,
    RejectRecord,
)

from .base import BaseRepository


class RejectRepository(BaseRepository[RejectRecord, RejectCreate]):
    """Repository for remanufacture requests."""

    @property
    def entity_class(self) -> type[RejectRecord]:
        return RejectRecord

    def find(
        self,
        reject_id: int | None = None,
        contract_number: str | None = None,
        route_card: str | None = None,
        operation_code: str | None = None,
        limit: int = 10,
    ) -> list[RejectRecord]:
        """
        Find rejects matching every supplied filter, newest first.

        Raises:
            PersistenceError: If database operation fails
        """
        statement = select(RejectRecord)
        if reject_id is not None:
            statement = statement.where(RejectRecord.id == reject_id)
        if contract_number:
            statement = statement.where(RejectRecord.contract_number == contract_number)
        if route_card:
            statement = statement.where(RejectRecord.route_card == route_card)
        if operation_code:
            statement = statement.where(RejectRecord.operation_code == operation_code)
        statement = statement.order_by(
            col(RejectRecord.created_at).desc(), col(RejectRecord.id).desc()
        ).limit(limit)
        return self._all(statement)


class RejectReasonRepository(BaseRepository[RejectReason, RejectReasonCreate]):
    """Repository for reject reasons and their operation links."""

    @property
    def entity_class(self) -> type[RejectReason]:
        return RejectReason

    def find_by_name(self, name: str) -> RejectReason | None:
        return self._first(select(RejectReason).where(RejectReason.name == name))

    def find_operation(self, operation_code: str) -> Operation | None:
        return self._first(
            select(Operation).where(Operation.operation_code == operation_code)
        )

    def find_active_for_operation(self, operation_id: int) -> list[RejectReason]:
        """Active reasons linked to an operation, ordered by name."""
        statement = (
            select(RejectReason)
            .join(
                OperationReject,
                col(OperationReject.reject_reason_id) == col(RejectReason.id),
            )
            .where(OperationReject.operation_id == operation_id)
            .where(col(RejectReason.is_active).is_(True))
            .order_by(col(RejectReason.name).asc())
        )
        return self._all(statement)
