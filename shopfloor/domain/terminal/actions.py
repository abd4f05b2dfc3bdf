"""
Terminal actions.

The closed set of things a terminal user can do. Each variant is tagged by
its kind; the state machine keeps exactly one handler per kind and checks
that coverage when it is built.
"""

from enum import Enum
from typing import Annotated, Literal, Union

from pydantic import BaseModel, Field


class ActionKind(str, Enum):
    SCAN_JOB = "SCAN_JOB"
    CLEAR_JOB = "CLEAR_JOB"
    START_SETUP = "START_SETUP"
    COMPLETE_SETUP = "COMPLETE_SETUP"
    BEGIN_INSPECTION = "BEGIN_INSPECTION"
    RECORD_INSPECTION = "RECORD_INSPECTION"
    CANCEL_INSPECTION = "CANCEL_INSPECTION"
    START_RUNNING = "START_RUNNING"
    PAUSE = "PAUSE"
    RESUME = "RESUME"
    COMPLETE_RUNNING = "COMPLETE_RUNNING"
    ABANDON = "ABANDON"


class ScanJob(BaseModel):
    kind: Literal["SCAN_JOB"] = "SCAN_JOB"
    scan: str
    confirm_complete: bool = False


class ClearJob(BaseModel):
    kind: Literal["CLEAR_JOB"] = "CLEAR_JOB"


class StartSetup(BaseModel):
    kind: Literal["START_SETUP"] = "START_SETUP"
    employee_id: str


class CompleteSetup(BaseModel):
    """Setup finished; a first-off inspection begins."""

    kind: Literal["COMPLETE_SETUP"] = "COMPLETE_SETUP"


class BeginInspection(BaseModel):
    """Start an in-process inspection."""

    kind: Literal["BEGIN_INSPECTION"] = "BEGIN_INSPECTION"


class RecordInspection(BaseModel):
    kind: Literal["RECORD_INSPECTION"] = "RECORD_INSPECTION"
    employee_id: str
    passed: bool
    comments: str | None = None
    inspection_qty: int | None = Field(default=None, ge=0)


class CancelInspection(BaseModel):
    kind: Literal["CANCEL_INSPECTION"] = "CANCEL_INSPECTION"


class StartRunning(BaseModel):
    kind: Literal["START_RUNNING"] = "START_RUNNING"
    employee_id: str


class Pause(BaseModel):
    kind: Literal["PAUSE"] = "PAUSE"
    completed_qty: int = 0
    reason: str


class Resume(BaseModel):
    kind: Literal["RESUME"] = "RESUME"
    employee_id: str


class CompleteRunning(BaseModel):
    kind: Literal["COMPLETE_RUNNING"] = "COMPLETE_RUNNING"
    completed_qty: int


class Abandon(BaseModel):
    kind: Literal["ABANDON"] = "ABANDON"
    reason: str = ""
    completed_qty: int = 0


AnyAction = Union[
    ScanJob,
    ClearJob,
    StartSetup,
    CompleteSetup,
    BeginInspection,
    RecordInspection,
    CancelInspection,
    StartRunning,
    Pause,
    Resume,
    CompleteRunning,
    Abandon,
]

TerminalAction = Annotated[AnyAction, Field(discriminator="kind")]
