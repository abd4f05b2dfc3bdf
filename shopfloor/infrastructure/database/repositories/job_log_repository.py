"""Job log repository."""

from sqlmodel import col, select

from shopfloor.domain.terminal.value_objects.enums import LogState
from shopfloor.models import JobLog, JobLogCreate

from .base import BaseRepository


class JobLogRepository(BaseRepository[JobLog, JobLogCreate]):
    """Repository for job log rows."""

    @property
    def entity_class(self) -> type[JobLog]:
        return JobLog

    def find_latest(
        self,
        lookup_code: str,
        state: LogState | None = None,
        include_completed: bool = False,
    ) -> JobLog | None:
        """
        Find the most recent log for a lookup code.

        Args:
            lookup_code: Job operation lookup code
            state: Only consider logs in this state
            include_completed: Also consider closed logs

        Returns:
            Most recent matching log by start_time, None if absent

        Raises:
            PersistenceError: If database operation fails
        """
        statement = select(JobLog).where(JobLog.lookup_code == lookup_code)
        if not include_completed:
            statement = statement.where(col(JobLog.end_time).is_(None))
        if state is not None:
            statement = statement.where(JobLog.state == state.value)
        statement = statement.order_by(
            col(JobLog.start_time).desc(), col(JobLog.id).desc()
        )
        return self._first(statement)

    def find_open(self, lookup_code: str) -> list[JobLog]:
        """All open logs for a lookup code, newest first."""
        statement = (
            select(JobLog)
            .where(JobLog.lookup_code == lookup_code)
            .where(col(JobLog.end_time).is_(None))
            .order_by(col(JobLog.start_time).desc())
        )
        return self._all(statement)

    def find_by_lookup_code(self, lookup_code: str, limit: int = 50) -> list[JobLog]:
        statement = (
            select(JobLog)
            .where(JobLog.lookup_code == lookup_code)
            .order_by(col(JobLog.start_time).desc(), col(JobLog.id).desc())
            .limit(limit)
        )
        return self._all(statement)
