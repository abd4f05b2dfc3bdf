"""Efficiency metric SQLModel: one row per closed SETUP or RUNNING log."""

from datetime import datetime

from sqlalchemy import String
from sqlmodel import Field, SQLModel

from shopfloor.domain.shared.base import utc_now
from shopfloor.domain.terminal.value_objects.enums import MetricType


class EfficiencyMetricBase(SQLModel):
    """Base efficiency metric fields."""

    job_log_id: int = Field(foreign_key="job_logs.id", index=True)
    lookup_code: str = Field(max_length=120, index=True)
    metric_type: MetricType = Field(sa_type=String(20))
    planned_time: float
    actual_time: float
    efficiency_percentage: int
    time_saved: float
    planned_qty: int | None = Field(default=None)
    completed_qty: int | None = Field(default=None)
    operator_id: str | None = Field(default=None, max_length=50)
    machine_id: str | None = Field(default=None, max_length=50)


class EfficiencyMetric(EfficiencyMetricBase, table=True):
    """Efficiency metric table model. Created once, never updated."""

    __tablename__ = "efficiency_metrics"

    id: int | None = Field(default=None, primary_key=True)
    created_at: datetime = Field(default_factory=utc_now, index=True)


class EfficiencyMetricCreate(EfficiencyMetricBase):
    pass


class EfficiencyMetricRead(EfficiencyMetricBase):
    id: int
    created_at: datetime
