"""
Log Ledger

Creates, closes and queries job log rows. Every operation returns a Result so
the terminal state machine decides whether a failure blocks a transition.
Operations accept an optional unit of work; when one is supplied the write
joins that transaction instead of committing on its own.
"""

from datetime import datetime

from shopfloor.core.observability import get_logger
from shopfloor.core.unit_of_work import UnitOfWork
from shopfloor.domain.shared.base import as_naive_utc, utc_now
from shopfloor.domain.shared.exceptions import (
    ConflictError,
    DomainError,
    NotFoundError,
    ValidationError,
)
from shopfloor.domain.shared.result import Err, Ok, Result
from shopfloor.domain.terminal.value_objects.enums import InspectionType, LogState
from shopfloor.models import JobLog, JobLogClose, JobLogCreate, JobLogRead

from .base_service import ApplicationServiceBase

logger = get_logger(__name__)

CLOSE_FIELDS = frozenset(
    {"end_time", "completed_qty", "comments", "inspection_passed", "inspection_qty"}
)


def abandon_comment(reason: str) -> str:
    return f"ABANDONED: {reason}"


class LogLedger(ApplicationServiceBase):
    """Application service for the job log ledger."""

    def _create(self, uow: UnitOfWork, data: JobLogCreate) -> JobLogRead:
        lookup_code = self.validate_non_empty_string(data.lookup_code, "lookup_code")
        user_id = self.validate_non_empty_string(data.user_id, "user_id")
        machine_id = self.validate_non_empty_string(data.machine_id, "machine_id")
        if data.state is None:
            raise ValidationError("state", None, "cannot be empty")
        state = LogState(data.state)

        log = uow.logs.create(
            JobLog(
                lookup_code=lookup_code,
                user_id=user_id,
                machine_id=machine_id,
                state=state.value,
                start_time=as_naive_utc(data.start_time) if data.start_time else utc_now(),
                comments=data.comments,
                inspection_type=(
                    InspectionType(data.inspection_type).value
                    if data.inspection_type
                    else None
                ),
                inspection_qty=data.inspection_qty,
            )
        )
        logger.info(
            "Job log opened",
            log_id=log.id,
            lookup_code=lookup_code,
            state=state.value,
            user_id=user_id,
            machine_id=machine_id,
        )
        return JobLogRead.model_validate(log)

    def _close(self, uow: UnitOfWork, log_id: int, fields: JobLogClose) -> JobLogRead:
        updates = {
            key: value
            for key, value in fields.model_dump(exclude_unset=True).items()
            if key in CLOSE_FIELDS and value is not None
        }
        if updates.get("end_time") is False:
            updates.pop("end_time")
        if not updates:
            raise ValidationError(
                "fields", None, "no valid fields to update", "NO_UPDATE_FIELDS"
            )

        log = uow.logs.get_by_id(log_id)
        if log is None:
            raise NotFoundError("JobLog", log_id)
        if log.end_time is not None:
            raise ConflictError(
                f"Job log {log_id} is already closed", {"log_id": log_id}
            )

        end_time = updates.get("end_time")
        if end_time is True:
            updates["end_time"] = utc_now()
        elif isinstance(end_time, datetime):
            updates["end_time"] = as_naive_utc(end_time)
            if updates["end_time"] < log.start_time:
                raise ValidationError(
                    "end_time",
                    updates["end_time"].isoformat(),
                    "precedes the log start time",
                    "NEGATIVE_DURATION",
                )

        for key, value in updates.items():
            setattr(log, key, value)
        log = uow.logs.save(log)
        logger.info(
            "Job log updated",
            log_id=log_id,
            state=LogState(log.state).value,
            closed=log.end_time is not None,
            completed_qty=log.completed_qty,
        )
        return JobLogRead.model_validate(log)

    def _result(self, operation: str, fn) -> Result:
        try:
            return Ok(fn())
        except DomainError as e:
            logger.warning(
                "Log ledger operation failed",
                operation=operation,
                error_type=e.error_type.value,
                error=e.message,
            )
            return Err(e)

    def create_log(
        self, data: JobLogCreate, uow: UnitOfWork | None = None
    ) -> Result[JobLogRead]:
        """
        Open a new log. start_time defaults to now.

        Returns:
            Ok(JobLogRead) or Err(ValidationError | PersistenceError)
        """

        def run() -> JobLogRead:
            with self.transaction(uow) as tx:
                return self._create(tx, data)

        return self._result("create_log", run)

    def close_log(
        self, log_id: int, fields: JobLogClose, uow: UnitOfWork | None = None
    ) -> Result[JobLogRead]:
        """
        Write the allow-listed close fields to an open log.

        Returns:
            Ok(JobLogRead) or Err(ValidationError | NotFoundError |
            ConflictError | PersistenceError)
        """

        def run() -> JobLogRead:
            with self.transaction(uow) as tx:
                return self._close(tx, log_id, fields)

        return self._result("close_log", run)

    def get_open_log(
        self,
        lookup_code: str,
        state: LogState | None = None,
        include_completed: bool = False,
        uow: UnitOfWork | None = None,
    ) -> Result[JobLogRead | None]:
        """
        Most recent open log for lookup_code, optionally of one state.

        Ok(None) when there is no such log.
        """

        def run() -> JobLogRead | None:
            with self.transaction(uow) as tx:
                log = tx.logs.find_latest(lookup_code, state, include_completed)
                return JobLogRead.model_validate(log) if log else None

        return self._result("get_open_log", run)

    def get_open_logs(self, lookup_code: str) -> Result[list[JobLogRead]]:
        def run() -> list[JobLogRead]:
            with self.transaction() as tx:
                return [JobLogRead.model_validate(log) for log in tx.logs.find_open(lookup_code)]

        return self._result("get_open_logs", run)

    def get_log_by_id(
        self, log_id: int, uow: UnitOfWork | None = None
    ) -> Result[JobLogRead]:
        def run() -> JobLogRead:
            with self.transaction(uow) as tx:
                return JobLogRead.model_validate(tx.logs.get_by_id_required(log_id))

        return self._result("get_log_by_id", run)

    def list_logs(self, lookup_code: str, limit: int = 50) -> Result[list[JobLogRead]]:
        def run() -> list[JobLogRead]:
            with self.transaction() as tx:
                return [
                    JobLogRead.model_validate(log)
                    for log in tx.logs.find_by_lookup_code(lookup_code, limit)
                ]

        return self._result("list_logs", run)

    # Lifecycle helpers used by the terminal state machine

    def start_setup_log(
        self,
        lookup_code: str,
        user_id: str,
        machine_id: str,
        uow: UnitOfWork | None = None,
    ) -> Result[JobLogRead]:
        return self.create_log(
            JobLogCreate(
                lookup_code=lookup_code,
                user_id=user_id,
                machine_id=machine_id,
                state=LogState.SETUP,
            ),
            uow,
        )

    def complete_setup_log(
        self, log_id: int, uow: UnitOfWork | None = None
    ) -> Result[JobLogRead]:
        return self.close_log(log_id, JobLogClose(end_time=True), uow)

    def record_inspection(
        self,
        lookup_code: str,
        user_id: str,
        machine_id: str,
        inspection_type: InspectionType,
        passed: bool,
        started_at: datetime | None = None,
        comments: str | None = None,
        inspection_qty: int | None = None,
        uow: UnitOfWork | None = None,
    ) -> Result[JobLogRead]:
        """
        Write a completed inspection: open the INSPECTION log at started_at
        and close it now with the outcome.

        A first-off inspection checks one piece unless told otherwise.
        """
        if inspection_qty is None and inspection_type == InspectionType.FIRST_OFF:
            inspection_qty = 1

        def run() -> JobLogRead:
            with self.transaction(uow) as tx:
                opened = self._create(
                    tx,
                    JobLogCreate(
                        lookup_code=lookup_code,
                        user_id=user_id,
                        machine_id=machine_id,
                        state=LogState.INSPECTION,
                        start_time=started_at,
                        inspection_type=inspection_type,
                        inspection_qty=inspection_qty,
                    ),
                )
                return self._close(
                    tx,
                    opened.id,
                    JobLogClose(
                        end_time=True,
                        inspection_passed=passed,
                        comments=comments,
                        inspection_qty=inspection_qty,
                    ),
                )

        return self._result("record_inspection", run)

    def start_running_log(
        self,
        lookup_code: str,
        user_id: str,
        machine_id: str,
        uow: UnitOfWork | None = None,
    ) -> Result[JobLogRead]:
        return self.create_log(
            JobLogCreate(
                lookup_code=lookup_code,
                user_id=user_id,
                machine_id=machine_id,
                state=LogState.RUNNING,
            ),
            uow,
        )

    def complete_running_log(
        self, log_id: int, completed_qty: int, uow: UnitOfWork | None = None
    ) -> Result[JobLogRead]:
        return self.close_log(
            log_id, JobLogClose(end_time=True, completed_qty=completed_qty), uow
        )

    def pause_running_log(
        self,
        log_id: int,
        completed_qty: int,
        reason: str,
        lookup_code: str,
        user_id: str,
        machine_id: str,
        uow: UnitOfWork | None = None,
    ) -> Result[tuple[JobLogRead, JobLogRead]]:
        """Close the RUNNING log with its quantity and open a PAUSED log."""

        def run() -> tuple[JobLogRead, JobLogRead]:
            with self.transaction(uow) as tx:
                closed = self._close(
                    tx, log_id, JobLogClose(end_time=True, completed_qty=completed_qty)
                )
                paused = self._create(
                    tx,
                    JobLogCreate(
                        lookup_code=lookup_code,
                        user_id=user_id,
                        machine_id=machine_id,
                        state=LogState.PAUSED,
                        comments=reason,
                    ),
                )
                return closed, paused

        return self._result("pause_running_log", run)

    def resume_from_pause(
        self,
        paused_log_id: int,
        lookup_code: str,
        user_id: str,
        machine_id: str,
        uow: UnitOfWork | None = None,
    ) -> Result[tuple[JobLogRead, JobLogRead]]:
        """Close the PAUSED log and open a RUNNING log."""

        def run() -> tuple[JobLogRead, JobLogRead]:
            with self.transaction(uow) as tx:
                closed = self._close(tx, paused_log_id, JobLogClose(end_time=True))
                running = self._create(
                    tx,
                    JobLogCreate(
                        lookup_code=lookup_code,
                        user_id=user_id,
                        machine_id=machine_id,
                        state=LogState.RUNNING,
                    ),
                )
                return closed, running

        return self._result("resume_from_pause", run)

    def abandon_log(
        self,
        log_id: int,
        reason: str,
        completed_qty: int | None = None,
        uow: UnitOfWork | None = None,
    ) -> Result[JobLogRead]:
        return self.close_log(
            log_id,
            JobLogClose(
                end_time=True,
                comments=abandon_comment(reason),
                completed_qty=completed_qty,
            ),
            uow,
        )
