"""Reject and reject-reason routes."""

from fastapi import APIRouter, Query, status

from shopfloor.api.deps import (
    RejectServiceDep,
    UserAuthDep,
    raise_http_error,
    unwrap_or_raise,
)
from shopfloor.domain.shared.exceptions import AuthenticationError
from shopfloor.domain.terminal.value_objects.enums import Role
from shopfloor.models import (
    RejectCreate,
    RejectCreated,
    RejectRead,
    RejectReasonCreate,
    RejectReasonRead,
)

router = APIRouter(prefix="/rejects", tags=["rejects"])


@router.post(
    "/",
    summary="Create a remanufacture request",
    response_model=RejectCreated,
    status_code=status.HTTP_201_CREATED,
    responses={
        400: {"description": "Missing fields or invalid quantity"},
        401: {"description": "Supervisor not found or inactive"},
        403: {"description": "Supervisor cannot authorize remanufacture"},
    },
)
def create_reject(
    data: RejectCreate, rejects: RejectServiceDep, authenticator: UserAuthDep
) -> RejectCreated:
    """
    Store the request and email it. The supervisor id must belong to a user
    allowed to authorize remanufacture.
    """
    supervisor = authenticator.authenticate(data.supervisor_id, Role.REMANUFACTURE)
    if not supervisor.success:
        raise_http_error(
            AuthenticationError(
                supervisor.error or "Authentication failed",
                Role.REMANUFACTURE.value,
                {"forbidden": supervisor.forbidden},
            )
        )
    return unwrap_or_raise(
        rejects.create_reject(data, supervisor_name=supervisor.name)
    )


@router.get("/", response_model=list[RejectRead])
def list_rejects(
    rejects: RejectServiceDep,
    reject_id: int | None = Query(None),
    contract_number: str | None = Query(None),
    route_card: str | None = Query(None),
    operation_code: str | None = Query(None),
    limit: int | None = Query(None, ge=1, le=500),
) -> list[RejectRead]:
    return unwrap_or_raise(
        rejects.list_rejects(reject_id, contract_number, route_card, operation_code, limit)
    )


@router.get("/reasons/{operation_code}", response_model=list[RejectReasonRead])
def list_reasons(operation_code: str, rejects: RejectServiceDep) -> list[RejectReasonRead]:
    """Active reasons for an operation; the last entry is always Other."""
    return unwrap_or_raise(rejects.list_reasons(operation_code))


@router.post(
    "/reasons",
    response_model=RejectReasonRead,
    status_code=status.HTTP_201_CREATED,
    responses={409: {"description": "Reason name already exists"}},
)
def create_reason(data: RejectReasonCreate, rejects: RejectServiceDep) -> RejectReasonRead:
    return unwrap_or_raise(rejects.create_reason(data))
