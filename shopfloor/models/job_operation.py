"""Job operation SQLModel: one row per route card, contract and operation."""

from datetime import datetime

from sqlalchemy import String
from sqlmodel import Field, SQLModel

from shopfloor.domain.shared.base import utc_now
from shopfloor.domain.terminal.value_objects.enums import JobStatus


class JobOperationBase(SQLModel):
    """Base job operation fields."""

    lookup_code: str = Field(max_length=120, unique=True, index=True)
    route_card: str = Field(max_length=50, index=True)
    contract_number: str = Field(max_length=50)
    op_code: str = Field(max_length=20, index=True)
    part_number: str | None = Field(default=None, max_length=50)
    customer_name: str | None = Field(default=None, max_length=100)
    description: str | None = Field(default=None)
    due_date: datetime | None = Field(default=None)

    quantity: int = Field(default=0, ge=0, description="Total quantity required")
    completed_qty: int = Field(default=0, ge=0)
    balance: int = Field(default=0, ge=0)
    status: JobStatus = Field(
        default=JobStatus.UNSTARTED, sa_type=String(20)
    )

    # Planned minutes for the entire quantity
    planned_setup_time: float = Field(default=0, ge=0)
    planned_run_time: float = Field(default=0, ge=0)

    # Operations added at the terminal
    user_added: bool = Field(default=False)
    one_off: bool = Field(default=False)
    replaces_operations: str | None = Field(default=None)
    additional_operation: bool = Field(default=False)
    added_by: str | None = Field(default=None, max_length=50)
    added_at: datetime | None = Field(default=None)


class JobOperation(JobOperationBase, table=True):
    """
    Job operation table model.

    completed_qty, balance and status change only through completion updates.
    version increases on every such update.
    """

    __tablename__ = "job_operations"

    id: int | None = Field(default=None, primary_key=True)
    version: int = Field(default=1)
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(
        default_factory=utc_now, sa_column_kwargs={"onupdate": utc_now}
    )


class JobOperationCreate(JobOperationBase):
    """Job operation creation model."""

    pass


class JobOperationRead(JobOperationBase):
    """Job operation read model, also used as the terminal's job snapshot."""

    id: int
    version: int
    created_at: datetime
    updated_at: datetime


class AddOperationRequest(SQLModel):
    """Request to add a missing operation to an existing route card."""

    route_card: str = Field(min_length=1)
    contract_number: str | None = None
    operation_code: str = Field(min_length=1)
    one_off: bool = False
    replaces_operations: str | None = None
    additional_operation: bool = False
    added_by: str | None = None


class CompletionUpdate(SQLModel):
    """Completion update request."""

    lookup_code: str = Field(min_length=1)
    completed_qty: int
    is_incremental: bool = True
    expected_version: int | None = None


class CompletionResult(SQLModel):
    """Outcome of a completion update."""

    lookup_code: str
    completed_qty: int
    previous_completed_qty: int
    balance: int
    status: JobStatus
    version: int
