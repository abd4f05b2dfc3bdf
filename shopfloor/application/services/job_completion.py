"""
Job Completion / Balance Updater

Applies a completed-quantity change to a job operation and recomputes its
balance and status in the same write. Each update bumps the row version;
callers holding a version can pass it to detect a concurrent writer.
"""

from shopfloor.core.observability import get_logger
from shopfloor.core.unit_of_work import UnitOfWork
from shopfloor.domain.shared.exceptions import (
    ConflictError,
    DomainError,
    NotFoundError,
)
from shopfloor.domain.shared.result import Err, Ok, Result
from shopfloor.domain.terminal.value_objects.enums import JobStatus
from shopfloor.models import CompletionResult, JobOperationRead

from .base_service import ApplicationServiceBase

logger = get_logger(__name__)


def compute_balance(quantity: int, completed_qty: int) -> tuple[int, JobStatus]:
    """Remaining balance and resulting status for a completed quantity."""
    balance = max(0, quantity - completed_qty)
    status = JobStatus.COMPLETE if balance == 0 else JobStatus.WIP
    return balance, status


class JobCompletionService(ApplicationServiceBase):
    """Application service for completion and balance updates."""

    def update_job_completion(
        self,
        job: JobOperationRead | str,
        completed_qty: int,
        is_incremental: bool = True,
        expected_version: int | None = None,
        uow: UnitOfWork | None = None,
    ) -> Result[CompletionResult]:
        """
        Apply a completion update to a job operation.

        Args:
            job: Job snapshot or its lookup code
            completed_qty: Delta when incremental, new total otherwise
            is_incremental: Add to the stored total instead of replacing it
            expected_version: Fail if the stored version differs
            uow: Join this unit of work instead of committing separately

        Returns:
            Ok(CompletionResult) or Err(ValidationError | NotFoundError |
            ConflictError | PersistenceError)
        """
        lookup_code = job if isinstance(job, str) else job.lookup_code
        try:
            self.validate_non_empty_string(lookup_code, "lookup_code")
            self.validate_non_negative_int(completed_qty, "completed_qty")
            with self.transaction(uow) as tx:
                result = self._apply(
                    tx, lookup_code, completed_qty, is_incremental, expected_version
                )
        except DomainError as e:
            logger.warning(
                "Job completion update failed",
                lookup_code=lookup_code,
                completed_qty=completed_qty,
                error=e.message,
            )
            return Err(e)

        logger.info(
            "Job completion updated",
            lookup_code=lookup_code,
            previous_completed_qty=result.previous_completed_qty,
            completed_qty=result.completed_qty,
            balance=result.balance,
            status=result.status.value,
        )
        return Ok(result)

    def _apply(
        self,
        uow: UnitOfWork,
        lookup_code: str,
        completed_qty: int,
        is_incremental: bool,
        expected_version: int | None,
    ) -> CompletionResult:
        row = uow.jobs.find_by_lookup_code(lookup_code)
        if row is None:
            raise NotFoundError("JobOperation", lookup_code)
        if expected_version is not None and row.version != expected_version:
            raise ConflictError(
                f"Job {lookup_code} was modified by another terminal",
                {"expected_version": expected_version, "current_version": row.version},
            )

        previous = row.completed_qty or 0
        new_completed = previous + completed_qty if is_incremental else completed_qty
        balance, status = compute_balance(row.quantity, new_completed)

        row.completed_qty = new_completed
        row.balance = balance
        row.status = status.value
        row.version = (row.version or 0) + 1
        row = uow.jobs.save(row)

        return CompletionResult(
            lookup_code=lookup_code,
            completed_qty=new_completed,
            previous_completed_qty=previous,
            balance=balance,
            status=status,
            version=row.version,
        )
