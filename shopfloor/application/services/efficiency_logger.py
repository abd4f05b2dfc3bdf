"""
Efficiency Logger

Bridges the efficiency calculator and storage: when a SETUP or RUNNING log
closes, compute its metrics and persist them as an efficiency record linked
to the log. Computed metrics are returned even if the record cannot be
stored; the storage error travels alongside them.
"""

from datetime import datetime

from pydantic import BaseModel, ConfigDict

from shopfloor.core.config import settings
from shopfloor.core.observability import get_logger, record_efficiency
from shopfloor.core.unit_of_work import UnitOfWork
from shopfloor.domain.shared.exceptions import DomainError, MissingDataError
from shopfloor.domain.shared.result import Err, Ok, Result
from shopfloor.domain.terminal.services.efficiency_calculator import (
    round_half_up,
    running_efficiency,
    setup_efficiency,
)
from shopfloor.domain.terminal.value_objects.efficiency import EfficiencyMetrics
from shopfloor.domain.terminal.value_objects.enums import MetricType
from shopfloor.models import EfficiencyMetric, EfficiencyMetricRead, JobOperationRead

from .base_service import ApplicationServiceBase

logger = get_logger(__name__)


class EfficiencyRequest(BaseModel):
    """Everything needed to compute and store metrics for one closed log."""

    job_log_id: int
    lookup_code: str
    log_type: MetricType
    start_time: datetime | str
    end_time: datetime | str
    job: JobOperationRead | None = None
    quantity: int | None = None
    operator_id: str | None = None
    machine_id: str | None = None


class EfficiencyOutcome(BaseModel):
    """Computed metrics plus the result of persisting them."""

    model_config = ConfigDict(arbitrary_types_allowed=True)

    metrics: EfficiencyMetrics
    record: EfficiencyMetricRead | None = None
    persistence_error: DomainError | None = None

    @property
    def persisted(self) -> bool:
        return self.record is not None


def to_metrics(record: EfficiencyMetricRead) -> EfficiencyMetrics:
    """Rebuild metrics from a stored record."""
    planned_per_item = None
    if record.planned_qty and record.completed_qty:
        # planned_time is already scaled to the completed quantity
        planned_per_item = round_half_up(record.planned_time / record.completed_qty, 2)
    return EfficiencyMetrics(
        planned=record.planned_time,
        actual=record.actual_time,
        efficiency=record.efficiency_percentage,
        time_saved=record.time_saved,
        quantity=record.completed_qty,
        planned_per_item=planned_per_item,
    )


class EfficiencyLogger(ApplicationServiceBase):
    """Application service computing and recording efficiency metrics."""

    def compute(self, request: EfficiencyRequest) -> EfficiencyMetrics:
        """
        Compute metrics for a closed log without storing them.

        Raises:
            MissingDataError: If job data is absent, or quantity for RUNNING
            ValidationError: If timestamps or planned values are invalid
        """
        job = request.job
        if job is None:
            raise MissingDataError("job", "Job data is required to compute efficiency")

        if request.log_type == MetricType.SETUP:
            return setup_efficiency(
                job.planned_setup_time, request.start_time, request.end_time
            )

        if request.quantity is None:
            raise MissingDataError(
                "quantity", "Quantity is required for RUNNING efficiency"
            )
        return running_efficiency(
            job.planned_run_time,
            job.quantity,
            request.quantity,
            request.start_time,
            request.end_time,
        )

    def log_efficiency(self, request: EfficiencyRequest) -> Result[EfficiencyOutcome]:
        """
        Compute metrics and persist an efficiency record.

        Returns:
            Err when metrics cannot be computed. Ok(EfficiencyOutcome)
            otherwise, with persistence_error set if storing failed.
        """
        metric_type = request.log_type.value
        try:
            metrics = self.compute(request)
        except DomainError as e:
            record_efficiency(metric_type, "invalid")
            logger.warning(
                "Efficiency could not be computed",
                job_log_id=request.job_log_id,
                lookup_code=request.lookup_code,
                metric_type=metric_type,
                error=e.message,
            )
            return Err(e)

        job = request.job
        planned_qty = job.quantity if request.log_type == MetricType.RUNNING else None
        try:
            with self.transaction() as uow:
                record = uow.efficiency.create(
                    EfficiencyMetric(
                        job_log_id=request.job_log_id,
                        lookup_code=request.lookup_code,
                        metric_type=metric_type,
                        planned_time=metrics.planned,
                        actual_time=metrics.actual,
                        efficiency_percentage=metrics.efficiency,
                        time_saved=metrics.time_saved,
                        planned_qty=planned_qty,
                        completed_qty=metrics.quantity,
                        operator_id=request.operator_id,
                        machine_id=request.machine_id,
                    )
                )
                stored = EfficiencyMetricRead.model_validate(record)
        except DomainError as e:
            record_efficiency(metric_type, "persist_failed")
            logger.error(
                "Efficiency record not stored",
                job_log_id=request.job_log_id,
                lookup_code=request.lookup_code,
                metric_type=metric_type,
                error=e.message,
            )
            return Ok(EfficiencyOutcome(metrics=metrics, persistence_error=e))

        record_efficiency(metric_type, "stored")
        logger.info(
            "Efficiency recorded",
            job_log_id=request.job_log_id,
            lookup_code=request.lookup_code,
            metric_type=metric_type,
            efficiency=metrics.efficiency,
            time_saved=metrics.time_saved,
        )
        return Ok(EfficiencyOutcome(metrics=metrics, record=stored))

    def get_efficiency_for_log(
        self, job_log_id: int, uow: UnitOfWork | None = None
    ) -> Result[EfficiencyMetricRead | None]:
        """Most recent record for a log, Ok(None) if there is none."""
        try:
            with self.transaction(uow) as tx:
                record = tx.efficiency.find_latest_for_log(job_log_id)
                return Ok(EfficiencyMetricRead.model_validate(record) if record else None)
        except DomainError as e:
            return Err(e)

    def get_efficiency_for_job(
        self,
        lookup_code: str,
        metric_type: MetricType | None = None,
        limit: int | None = None,
    ) -> Result[list[EfficiencyMetricRead]]:
        return self.list_efficiency(
            lookup_code=lookup_code, metric_type=metric_type, limit=limit
        )

    def list_efficiency(
        self,
        lookup_code: str | None = None,
        job_log_id: int | None = None,
        metric_type: MetricType | None = None,
        limit: int | None = None,
    ) -> Result[list[EfficiencyMetricRead]]:
        try:
            with self.transaction() as tx:
                records = tx.efficiency.find(
                    lookup_code=lookup_code,
                    job_log_id=job_log_id,
                    metric_type=metric_type,
                    limit=limit or settings.EFFICIENCY_QUERY_LIMIT,
                )
                return Ok([EfficiencyMetricRead.model_validate(r) for r in records])
        except DomainError as e:
            return Err(e)
