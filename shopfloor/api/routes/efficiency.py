"""Efficiency metric routes."""

from fastapi import APIRouter, HTTPException, Query, status
from pydantic import BaseModel

from shopfloor.api.deps import EfficiencyDep, unwrap_or_raise
from shopfloor.application.services import EfficiencyRequest
from shopfloor.domain.terminal.value_objects.efficiency import EfficiencyMetrics
from shopfloor.domain.terminal.value_objects.enums import MetricType
from shopfloor.models import EfficiencyMetricRead

router = APIRouter(prefix="/efficiency", tags=["efficiency"])


class EfficiencyRecorded(BaseModel):
    metrics: EfficiencyMetrics
    record: EfficiencyMetricRead | None = None
    persisted: bool
    persistence_error: str | None = None


@router.post(
    "/",
    summary="Compute and record efficiency for a closed log",
    response_model=EfficiencyRecorded,
    status_code=status.HTTP_201_CREATED,
    responses={400: {"description": "Missing job data, quantity or bad timestamps"}},
)
def record_efficiency(
    request: EfficiencyRequest, efficiency: EfficiencyDep
) -> EfficiencyRecorded:
    """
    Metrics are returned even when the record could not be stored; check
    persisted before assuming the row exists.
    """
    outcome = unwrap_or_raise(efficiency.log_efficiency(request))
    return EfficiencyRecorded(
        metrics=outcome.metrics,
        record=outcome.record,
        persisted=outcome.persisted,
        persistence_error=(
            outcome.persistence_error.message if outcome.persistence_error else None
        ),
    )


@router.get("/", response_model=list[EfficiencyMetricRead])
def list_efficiency(
    efficiency: EfficiencyDep,
    lookup_code: str | None = Query(None),
    job_log_id: int | None = Query(None),
    metric_type: MetricType | None = Query(None),
    limit: int | None = Query(None, ge=1, le=500),
) -> list[EfficiencyMetricRead]:
    return unwrap_or_raise(
        efficiency.list_efficiency(lookup_code, job_log_id, metric_type, limit)
    )


@router.get("/logs/{job_log_id}", response_model=EfficiencyMetricRead)
def get_efficiency_for_log(
    job_log_id: int, efficiency: EfficiencyDep
) -> EfficiencyMetricRead:
    record = unwrap_or_raise(efficiency.get_efficiency_for_log(job_log_id))
    if record is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"No efficiency record for log {job_log_id}",
        )
    return record
