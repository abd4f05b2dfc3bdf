"""
Job API Routes.

Scan resolution, route-card probing, adding missing operations and
completion updates.
"""

from fastapi import APIRouter, Query, status

from shopfloor.api.deps import CompletionDep, LookupDep, unwrap_or_raise
from shopfloor.application.services import LookupOutcome, ScanContext
from shopfloor.application.services.job_lookup import RouteCardProbe
from shopfloor.models import (
    AddOperationRequest,
    CompletionResult,
    CompletionUpdate,
    JobOperationRead,
)

router = APIRouter(prefix="/jobs", tags=["jobs"])


@router.get(
    "/lookup",
    summary="Resolve a scan",
    response_model=LookupOutcome,
    responses={400: {"description": "Empty scan or operation code"}},
)
def lookup_job(
    lookup: LookupDep,
    scan: str = Query(..., description="Route card or route card-contract number"),
    operation_code: str = Query(..., description="Operation bound to the terminal"),
    terminal_id: str | None = Query(None),
    terminal_name: str | None = Query(None),
    user: str | None = Query(None),
) -> LookupOutcome:
    """
    Resolve a scanned value to a job operation.

    FOUND, NOT_FOUND and OPERATION_NOT_ASSIGNED are all 200 responses; the
    kind field tells them apart.
    """
    context = ScanContext(terminal_id=terminal_id, terminal_name=terminal_name, user=user)
    return unwrap_or_raise(lookup.lookup_job(scan, operation_code, context))


@router.get("/route-cards/{route_card}", response_model=RouteCardProbe)
def probe_route_card(route_card: str, lookup: LookupDep) -> RouteCardProbe:
    """Check whether a route card exists without sending any notification."""
    return unwrap_or_raise(lookup.probe_route_card(route_card))


@router.post(
    "/operations",
    summary="Add a missing operation",
    response_model=JobOperationRead,
    status_code=status.HTTP_201_CREATED,
    responses={
        404: {"description": "Route card has no operations to copy"},
        409: {"description": "Operation already exists"},
    },
)
def add_operation(request: AddOperationRequest, lookup: LookupDep) -> JobOperationRead:
    return unwrap_or_raise(lookup.add_operation(request))


@router.post(
    "/completion",
    summary="Update completed quantity",
    response_model=CompletionResult,
    responses={
        404: {"description": "Job not found"},
        409: {"description": "Job was modified concurrently"},
    },
)
def update_completion(
    update: CompletionUpdate, completion: CompletionDep
) -> CompletionResult:
    return unwrap_or_raise(
        completion.update_job_completion(
            update.lookup_code,
            update.completed_qty,
            is_incremental=update.is_incremental,
            expected_version=update.expected_version,
        )
    )
