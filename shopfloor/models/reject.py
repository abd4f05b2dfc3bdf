"""Reject, reject reason and operation SQLModels."""

from datetime import datetime

from sqlmodel import Field, SQLModel

from shopfloor.domain.shared.base import utc_now


class RejectBase(SQLModel):
    """Base reject fields."""

    customer_name: str = Field(max_length=100)
    contract_number: str = Field(max_length=50, index=True)
    route_card: str = Field(max_length=50, index=True)
    part_number: str = Field(max_length=50)
    qty_rejected: int = Field(ge=0)
    operator_id: str = Field(max_length=50)
    supervisor_id: str = Field(max_length=50)
    reason: str
    remanufacture_qty: int = Field(gt=0)
    machine_id: str = Field(max_length=50)
    operation_code: str = Field(max_length=20, index=True)


class RejectRecord(RejectBase, table=True):
    """Remanufacture request table model. Immutable once created."""

    __tablename__ = "rejects"

    id: int | None = Field(default=None, primary_key=True)
    created_at: datetime = Field(default_factory=utc_now, index=True)


class RejectCreate(RejectBase):
    pass


class RejectRead(RejectBase):
    id: int
    created_at: datetime


class RejectCreated(SQLModel):
    """Outcome of creating a reject, including notification status."""

    reject_id: int
    created_at: datetime
    email_sent: bool
    message_id: str | None = None


class RejectReasonBase(SQLModel):
    name: str = Field(max_length=100, unique=True, index=True)
    description: str | None = Field(default=None)
    is_active: bool = Field(default=True)


class RejectReason(RejectReasonBase, table=True):
    __tablename__ = "reject_reasons"

    id: int | None = Field(default=None, primary_key=True)
    created_at: datetime = Field(default_factory=utc_now)


class RejectReasonCreate(SQLModel):
    name: str = Field(min_length=1, max_length=100)
    description: str | None = None


class RejectReasonRead(RejectReasonBase):
    id: int


class Operation(SQLModel, table=True):
    """Operation catalogue used to scope reject reasons."""

    __tablename__ = "operations"

    id: int | None = Field(default=None, primary_key=True)
    operation_code: str = Field(max_length=20, unique=True, index=True)
    description: str | None = Field(default=None)


class OperationReject(SQLModel, table=True):
    """Link between an operation and a reject reason offered for it."""

    __tablename__ = "operation_rejects"

    operation_id: int = Field(foreign_key="operations.id", primary_key=True)
    reject_reason_id: int = Field(foreign_key="reject_reasons.id", primary_key=True)
