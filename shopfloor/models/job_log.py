"""Job log SQLModel: one row per open-to-close activity interval."""

from datetime import datetime

from sqlalchemy import String
from sqlmodel import Field, SQLModel

from shopfloor.domain.shared.base import utc_now
from shopfloor.domain.terminal.value_objects.enums import InspectionType, LogState


class JobLogBase(SQLModel):
    """Base job log fields."""

    lookup_code: str = Field(max_length=120, index=True)
    user_id: str = Field(max_length=50)
    machine_id: str = Field(max_length=50)
    state: LogState = Field(sa_type=String(20))
    start_time: datetime
    end_time: datetime | None = Field(default=None, index=True)
    completed_qty: int | None = Field(default=None, ge=0)
    comments: str | None = Field(default=None)
    inspection_type: InspectionType | None = Field(
        default=None, sa_type=String(20)
    )
    inspection_passed: bool | None = Field(default=None)
    inspection_qty: int | None = Field(default=None, ge=0)


class JobLog(JobLogBase, table=True):
    """
    Job log table model.

    A log is open while end_time is null. Once end_time is set the row is
    never written again.
    """

    __tablename__ = "job_logs"

    id: int | None = Field(default=None, primary_key=True)
    created_at: datetime = Field(default_factory=utc_now)

    @property
    def is_open(self) -> bool:
        return self.end_time is None


class JobLogCreate(SQLModel):
    """Job log creation model. start_time defaults to now."""

    lookup_code: str
    user_id: str
    machine_id: str
    state: LogState
    start_time: datetime | None = None
    comments: str | None = None
    inspection_type: InspectionType | None = None
    inspection_qty: int | None = Field(default=None, ge=0)


class JobLogClose(SQLModel):
    """
    Fields that may be written when a log is closed.

    end_time=True stamps the current time.
    """

    end_time: datetime | bool | None = None
    completed_qty: int | None = Field(default=None, ge=0)
    comments: str | None = None
    inspection_passed: bool | None = None
    inspection_qty: int | None = Field(default=None, ge=0)


class JobLogRead(JobLogBase):
    """Job log read model."""

    id: int
    created_at: datetime

    @property
    def is_open(self) -> bool:
        return self.end_time is None
