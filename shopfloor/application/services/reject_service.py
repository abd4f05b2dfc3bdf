"""
Reject Service

Persists remanufacture requests, then asks the notifier to email them. The
record is the source of truth: a failed email is reported through
email_sent and never undoes the insert.
"""

from shopfloor.core.config import settings
from shopfloor.core.observability import get_logger
from shopfloor.domain.shared.exceptions import (
    ConflictError,
    DomainError,
    NotFoundError,
    ValidationError,
)
from shopfloor.domain.shared.result import Err, Ok, Result
from shopfloor.domain.terminal.ports import Notifier, RemanufactureNotice
from shopfloor.domain.terminal.value_objects.lookup_code import LookupCode
from shopfloor.models import (
    RejectCreate,
    RejectCreated,
    RejectRead,
    RejectReason,
    RejectReasonCreate,
    RejectReasonRead,
    RejectRecord,
)

from .base_service import ApplicationServiceBase

logger = get_logger(__name__)

OTHER_REASON_NAME = "Other"

REQUIRED_REJECT_FIELDS = (
    "customer_name",
    "contract_number",
    "route_card",
    "part_number",
    "operator_id",
    "supervisor_id",
    "reason",
    "machine_id",
    "operation_code",
)


def validate_remanufacture_qty(quantity: int | None, job_quantity: int) -> int:
    """
    Check a remanufacture quantity against the job.

    Raises:
        ValidationError: Unless quantity is a whole number in 1..job_quantity
    """
    if quantity is None or isinstance(quantity, bool) or not isinstance(quantity, int):
        raise ValidationError("remanufacture_qty", quantity, "must be a whole number")
    if quantity <= 0:
        raise ValidationError("remanufacture_qty", quantity, "must be greater than zero")
    if quantity > job_quantity:
        raise ValidationError(
            "remanufacture_qty",
            quantity,
            f"cannot exceed job quantity ({job_quantity})",
        )
    return quantity


class RejectService(ApplicationServiceBase):
    """Application service for rejects and reject reasons."""

    def __init__(self, unit_of_work_factory, notifier: Notifier | None = None):
        super().__init__(unit_of_work_factory)
        self._notifier = notifier

    def create_reject(
        self,
        data: RejectCreate,
        operator_name: str | None = None,
        supervisor_name: str | None = None,
    ) -> Result[RejectCreated]:
        """
        Persist a remanufacture request and send its notification.

        Returns:
            Ok(RejectCreated) with email_sent reporting the notification,
            Err(ValidationError | NotFoundError | PersistenceError) if nothing
            was stored. The quantity is checked against the job operation
            the reject belongs to.
        """
        try:
            for field_name in REQUIRED_REJECT_FIELDS:
                self.validate_non_empty_string(getattr(data, field_name), field_name)
            self.validate_non_negative_int(data.qty_rejected, "qty_rejected")
            self.validate_positive_number(data.remanufacture_qty, "remanufacture_qty")

            with self.transaction() as uow:
                lookup_code = str(
                    LookupCode(
                        route_card=data.route_card,
                        contract_number=data.contract_number,
                        op_code=data.operation_code,
                    )
                )
                job = uow.jobs.find_by_lookup_code(lookup_code)
                if job is None:
                    raise NotFoundError("JobOperation", lookup_code)
                validate_remanufacture_qty(data.remanufacture_qty, job.quantity)
                record = uow.rejects.create(RejectRecord(**data.model_dump()))
                stored = RejectRead.model_validate(record)
        except DomainError as e:
            logger.warning("Reject not created", error=e.message)
            return Err(e)

        logger.info(
            "Reject created",
            reject_id=stored.id,
            route_card=stored.route_card,
            operation_code=stored.operation_code,
            remanufacture_qty=stored.remanufacture_qty,
        )

        email_sent = False
        message_id = None
        if self._notifier is not None:
            notification = self._notifier.send_remanufacture_email(
                RemanufactureNotice(
                    reject_id=stored.id,
                    operator_name=operator_name,
                    supervisor_name=supervisor_name,
                    **stored.model_dump(exclude={"id"}),
                )
            )
            email_sent = notification.success
            message_id = notification.message_id
            if not notification.success:
                logger.warning(
                    "Remanufacture email not sent",
                    reject_id=stored.id,
                    error=notification.error,
                )

        return Ok(
            RejectCreated(
                reject_id=stored.id,
                created_at=stored.created_at,
                email_sent=email_sent,
                message_id=message_id,
            )
        )

    def list_rejects(
        self,
        reject_id: int | None = None,
        contract_number: str | None = None,
        route_card: str | None = None,
        operation_code: str | None = None,
        limit: int | None = None,
    ) -> Result[list[RejectRead]]:
        try:
            with self.transaction() as uow:
                rows = uow.rejects.find(
                    reject_id=reject_id,
                    contract_number=contract_number,
                    route_card=route_card,
                    operation_code=operation_code,
                    limit=limit or settings.REJECT_QUERY_LIMIT,
                )
                return Ok([RejectRead.model_validate(r) for r in rows])
        except DomainError as e:
            return Err(e)

    def list_reasons(self, operation_code: str) -> Result[list[RejectReasonRead]]:
        """
        Active reasons offered for an operation, always ending with Other.

        An unknown operation yields only Other.
        """
        try:
            with self.transaction() as uow:
                reasons: list[RejectReasonRead] = []
                operation = uow.reasons.find_operation(operation_code)
                if operation is None:
                    logger.warning(
                        "No reject reasons configured for operation",
                        operation_code=operation_code,
                    )
                else:
                    reasons = [
                        RejectReasonRead.model_validate(r)
                        for r in uow.reasons.find_active_for_operation(operation.id)
                        if r.name != OTHER_REASON_NAME
                    ]
                other = uow.reasons.find_by_name(OTHER_REASON_NAME)
                reasons.append(
                    RejectReasonRead.model_validate(other)
                    if other
                    else RejectReasonRead(
                        id=settings.OTHER_REASON_ID,
                        name=OTHER_REASON_NAME,
                        description="Reason not listed",
                        is_active=True,
                    )
                )
                return Ok(reasons)
        except DomainError as e:
            return Err(e)

    def create_reason(self, data: RejectReasonCreate) -> Result[RejectReasonRead]:
        try:
            name = self.validate_non_empty_string(data.name, "name")
            with self.transaction() as uow:
                if uow.reasons.find_by_name(name) is not None:
                    raise ConflictError(
                        f"Reject reason '{name}' already exists", {"name": name}
                    )
                reason = uow.reasons.create(
                    RejectReason(name=name, description=data.description, is_active=True)
                )
                return Ok(RejectReasonRead.model_validate(reason))
        except DomainError as e:
            return Err(e)
