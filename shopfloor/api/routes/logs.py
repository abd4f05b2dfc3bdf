"""Job log ledger routes."""

from fastapi import APIRouter, HTTPException, Query, status

from shopfloor.api.deps import LedgerDep, unwrap_or_raise
from shopfloor.domain.terminal.value_objects.enums import LogState
from shopfloor.models import JobLogClose, JobLogCreate, JobLogRead

router = APIRouter(prefix="/logs", tags=["logs"])


@router.post(
    "/",
    response_model=JobLogRead,
    status_code=status.HTTP_201_CREATED,
    responses={400: {"description": "Missing lookup code, user, machine or state"}},
)
def create_log(data: JobLogCreate, ledger: LedgerDep) -> JobLogRead:
    return unwrap_or_raise(ledger.create_log(data))


@router.get("/open", response_model=JobLogRead)
def get_open_log(
    ledger: LedgerDep,
    lookup_code: str = Query(...),
    state: LogState | None = Query(None),
    include_completed: bool = Query(False),
) -> JobLogRead:
    """Most recent open log for a lookup code; 404 when there is none."""
    log = unwrap_or_raise(ledger.get_open_log(lookup_code, state, include_completed))
    if log is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"No open log for {lookup_code}",
        )
    return log


@router.get("/", response_model=list[JobLogRead])
def list_logs(
    ledger: LedgerDep,
    lookup_code: str = Query(...),
    limit: int = Query(50, ge=1, le=500),
) -> list[JobLogRead]:
    return unwrap_or_raise(ledger.list_logs(lookup_code, limit))


@router.get("/{log_id}", response_model=JobLogRead)
def get_log(log_id: int, ledger: LedgerDep) -> JobLogRead:
    return unwrap_or_raise(ledger.get_log_by_id(log_id))


@router.patch(
    "/{log_id}",
    summary="Close a log",
    response_model=JobLogRead,
    responses={
        400: {"description": "No close fields, or end before start"},
        404: {"description": "Log not found"},
        409: {"description": "Log already closed"},
    },
)
def close_log(log_id: int, fields: JobLogClose, ledger: LedgerDep) -> JobLogRead:
    return unwrap_or_raise(ledger.close_log(log_id, fields))
