"""Efficiency metric repository."""

from sqlmodel import col, select

from shopfloor.domain.terminal.value_objects.enums import MetricType
from shopfloor.models import EfficiencyMetric, EfficiencyMetricCreate

from .base import BaseRepository


class EfficiencyMetricRepository(
    BaseRepository[EfficiencyMetric, EfficiencyMetricCreate]
):
    """Repository for efficiency metric rows."""

    @property
    def entity_class(self) -> type[EfficiencyMetric]:
        return EfficiencyMetric

    def find_latest_for_log(self, job_log_id: int) -> EfficiencyMetric | None:
        statement = (
            select(EfficiencyMetric)
            .where(EfficiencyMetric.job_log_id == job_log_id)
            .order_by(
                col(EfficiencyMetric.created_at).desc(),
                col(EfficiencyMetric.id).desc(),
            )
        )
        return self._first(statement)

    def find(
        self,
        lookup_code: str | None = None,
        job_log_id: int | None = None,
        metric_type: MetricType | None = None,
        limit: int = 10,
    ) -> list[EfficiencyMetric]:
        """
        Find efficiency metrics, newest first.

        Args:
            lookup_code: Restrict to one job operation
            job_log_id: Restrict to one log
            metric_type: Restrict to SETUP or RUNNING
            limit: Maximum number of rows

        Raises:
            PersistenceError: If database operation fails
        """
        statement = select(EfficiencyMetric)
        if lookup_code:
            statement = statement.where(EfficiencyMetric.lookup_code == lookup_code)
        if job_log_id is not None:
            statement = statement.where(EfficiencyMetric.job_log_id == job_log_id)
        if metric_type is not None:
            statement = statement.where(
                EfficiencyMetric.metric_type == metric_type.value
            )
        statement = statement.order_by(
            col(EfficiencyMetric.created_at).desc(), col(EfficiencyMetric.id).desc()
        ).limit(limit)
        return self._all(statement)
