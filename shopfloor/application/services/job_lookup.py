"""
Job Lookup & Resolution

Resolves a scanned route card plus the terminal's operation code to a job
operation. A miss is a normal outcome split into two kinds: the route card
is unknown (NOT_FOUND) or it exists without this operation
(OPERATION_NOT_ASSIGNED), in which case the caller can offer add_operation.
"""

from enum import Enum

from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from shopfloor.core.observability import get_logger
from shopfloor.domain.shared.base import utc_now
from shopfloor.domain.shared.exceptions import (
    ConflictError,
    DomainError,
    NotFoundError,
    ValidationError,
)
from shopfloor.domain.shared.result import Err, Ok, Result
from shopfloor.domain.terminal.ports import JobNotFoundNotice, Notifier
from shopfloor.domain.terminal.value_objects.enums import JobStatus
from shopfloor.domain.terminal.value_objects.lookup_code import LookupCode, ScanCode
from shopfloor.models import AddOperationRequest, JobOperation, JobOperationRead

from .base_service import ApplicationServiceBase

logger = get_logger(__name__)


class LookupKind(str, Enum):
    FOUND = "FOUND"
    NOT_FOUND = "NOT_FOUND"
    OPERATION_NOT_ASSIGNED = "OPERATION_NOT_ASSIGNED"


class LookupOutcome(BaseModel):
    """Result of resolving a scan."""

    kind: LookupKind
    route_card: str
    operation_code: str
    contract_number: str | None = None
    job: JobOperationRead | None = None
    existing_operations: list[str] = []
    requires_confirmation: bool = False

    @property
    def found(self) -> bool:
        return self.kind == LookupKind.FOUND


class OperationSummary(BaseModel):
    op_code: str
    description: str | None = None
    contract_number: str


class RouteCardProbe(BaseModel):
    """Read-only view of which operations a route card carries."""

    route_card: str
    exists: bool
    contract_number: str | None = None
    operations: list[OperationSummary] = []


class ScanContext(BaseModel):
    """Where a scan happened, for the not-found notification."""

    terminal_id: str | None = None
    terminal_name: str | None = None
    user: str | None = None


def _parse_scan(scan: str | None) -> ScanCode:
    try:
        return ScanCode(raw=scan or "")
    except PydanticValidationError as e:
        raise ValidationError("scan", scan, "Scan code is required") from e


class JobLookupService(ApplicationServiceBase):
    """Application service resolving scans to job operations."""

    def __init__(self, unit_of_work_factory, notifier: Notifier | None = None):
        super().__init__(unit_of_work_factory)
        self._notifier = notifier

    def lookup_job(
        self,
        scan: str,
        operation_code: str,
        context: ScanContext | None = None,
    ) -> Result[LookupOutcome]:
        """
        Resolve a scan at a terminal bound to operation_code.

        A composite scan (route card and contract) matches by lookup code; a
        bare route card matches by route card and operation. Unresolved
        scans send a best-effort job-not-found email.

        Returns:
            Ok(LookupOutcome) for every resolution outcome, Err on invalid
            input or storage failure
        """
        try:
            scan_code = _parse_scan(scan)
            op_code = self.validate_non_empty_string(operation_code, "operation_code")
            outcome = self._resolve(scan_code, op_code)
        except DomainError as e:
            logger.warning("Job lookup failed", scan=scan, error=e.message)
            return Err(e)

        logger.info(
            "Job lookup resolved",
            scan=scan_code.raw,
            operation_code=op_code,
            kind=outcome.kind.value,
        )
        if outcome.kind == LookupKind.NOT_FOUND:
            self._notify_not_found(scan_code, op_code, context, outcome)
        return Ok(outcome)

    def _resolve(self, scan: ScanCode, op_code: str) -> LookupOutcome:
        with self.transaction() as uow:
            if scan.is_composite:
                job = uow.jobs.find_by_lookup_code(LookupCode.for_scan(scan, op_code))
            else:
                job = uow.jobs.find_by_route_card_and_op(scan.route_card, op_code)

            if job is not None:
                snapshot = JobOperationRead.model_validate(job)
                return LookupOutcome(
                    kind=LookupKind.FOUND,
                    route_card=snapshot.route_card,
                    operation_code=op_code,
                    contract_number=snapshot.contract_number,
                    job=snapshot,
                    requires_confirmation=snapshot.status == JobStatus.COMPLETE,
                )

            rows = [
                JobOperationRead.model_validate(r)
                for r in uow.jobs.find_by_route_card(scan.route_card)
            ]

        if not rows:
            return LookupOutcome(
                kind=LookupKind.NOT_FOUND,
                route_card=scan.route_card,
                operation_code=op_code,
                contract_number=scan.contract_number,
            )

        if scan.contract_number:
            rows = [r for r in rows if r.contract_number == scan.contract_number] or rows
        existing = sorted({r.op_code for r in rows})
        return LookupOutcome(
            kind=LookupKind.OPERATION_NOT_ASSIGNED,
            route_card=scan.route_card,
            operation_code=op_code,
            contract_number=scan.contract_number or rows[0].contract_number,
            existing_operations=existing,
        )

    def _notify_not_found(
        self,
        scan: ScanCode,
        op_code: str,
        context: ScanContext | None,
        outcome: LookupOutcome,
    ) -> None:
        if self._notifier is None:
            return
        context = context or ScanContext()
        result = self._notifier.send_job_not_found_email(
            JobNotFoundNotice(
                scan=scan.raw,
                operation_code=op_code,
                terminal_id=context.terminal_id,
                terminal_name=context.terminal_name,
                user=context.user,
                occurred_at=utc_now(),
                existing_operations=outcome.existing_operations,
            )
        )
        if not result.success:
            logger.warning(
                "Job not found email not sent", scan=scan.raw, error=result.error
            )

    def probe_route_card(self, route_card: str) -> Result[RouteCardProbe]:
        """
        Report whether a route card exists and which operations it carries.

        Read-only: never notifies.
        """
        try:
            scan_code = _parse_scan(route_card)
            with self.transaction() as uow:
                rows = uow.jobs.find_by_route_card(scan_code.route_card)
                operations = [
                    OperationSummary(
                        op_code=r.op_code,
                        description=r.description,
                        contract_number=r.contract_number,
                    )
                    for r in rows
                ]
        except DomainError as e:
            return Err(e)

        return Ok(
            RouteCardProbe(
                route_card=scan_code.route_card,
                exists=bool(operations),
                contract_number=operations[0].contract_number if operations else None,
                operations=operations,
            )
        )

    def refresh_job(self, job: JobOperationRead) -> Result[JobOperationRead]:
        """Re-read a job snapshot from storage."""
        try:
            with self.transaction() as uow:
                row = uow.jobs.find_by_lookup_code(job.lookup_code)
                if row is None:
                    raise NotFoundError("JobOperation", job.lookup_code)
                return Ok(JobOperationRead.model_validate(row))
        except DomainError as e:
            return Err(e)

    def add_operation(self, request: AddOperationRequest) -> Result[JobOperationRead]:
        """
        Add an operation to a route card by cloning an existing sibling.

        Returns:
            Ok(JobOperationRead) for the new row, Err(ConflictError) if the
            operation already exists, Err(NotFoundError) if the route card
            has no job to clone from
        """
        try:
            created = self._add_operation(request)
        except DomainError as e:
            logger.warning(
                "Add operation failed",
                route_card=request.route_card,
                operation_code=request.operation_code,
                error=e.message,
            )
            return Err(e)

        logger.info(
            "Operation added",
            lookup_code=created.lookup_code,
            added_by=created.added_by,
            one_off=created.one_off,
        )
        return Ok(created)

    def _add_operation(self, request: AddOperationRequest) -> JobOperationRead:
        route_card = self.validate_non_empty_string(request.route_card, "route_card")
        op_code = self.validate_non_empty_string(
            request.operation_code, "operation_code"
        )

        with self.transaction() as uow:
            if uow.jobs.find_by_route_card_and_op(route_card, op_code) is not None:
                raise ConflictError(
                    f"Operation {op_code} already exists for route card {route_card}",
                    {"route_card": route_card, "operation_code": op_code},
                )

            siblings = uow.jobs.find_by_route_card(route_card)
            if request.contract_number:
                siblings = [
                    s for s in siblings if s.contract_number == request.contract_number
                ] or siblings
            if not siblings:
                raise NotFoundError(
                    "RouteCard",
                    route_card,
                    f"No existing job found for route card {route_card}",
                )
            sibling = siblings[0]
            contract_number = request.contract_number or sibling.contract_number

            row = uow.jobs.create(
                JobOperation(
                    lookup_code=str(
                        LookupCode(
                            route_card=route_card,
                            contract_number=contract_number,
                            op_code=op_code,
                        )
                    ),
                    route_card=route_card,
                    contract_number=contract_number,
                    op_code=op_code,
                    part_number=sibling.part_number,
                    customer_name=sibling.customer_name,
                    description=f"User added operation: {op_code}",
                    due_date=sibling.due_date,
                    quantity=sibling.quantity,
                    completed_qty=0,
                    balance=sibling.balance,
                    status=JobStatus.READY.value,
                    user_added=True,
                    one_off=request.one_off,
                    replaces_operations=request.replaces_operations,
                    additional_operation=request.additional_operation,
                    added_by=request.added_by,
                    added_at=utc_now(),
                )
            )
            return JobOperationRead.model_validate(row)
