"""
Terminal API Routes.

A terminal logs in once, then drives its job lifecycle by posting actions.
The server keeps the current session per terminal and replaces it with the
session returned by each accepted transition.
"""

from typing import Annotated

from fastapi import APIRouter, Body, HTTPException, status
from pydantic import BaseModel

from shopfloor.api.deps import (
    RegistryDep,
    StateMachineDep,
    TerminalAuthDep,
    raise_http_error,
)
from shopfloor.application.services import LookupOutcome, TransitionResult
from shopfloor.core.observability import set_terminal_id
from shopfloor.domain.shared.exceptions import InvalidTransitionError
from shopfloor.domain.terminal.actions import ActionKind, AnyAction
from shopfloor.domain.terminal.entities import TerminalSession
from shopfloor.domain.terminal.value_objects.efficiency import EfficiencyMetrics
from shopfloor.models import CompletionResult, JobLogRead

router = APIRouter(prefix="/terminal", tags=["terminal"])


class TerminalLoginRequest(BaseModel):
    terminal_id: str
    password: str


class TransitionResponse(BaseModel):
    action: ActionKind
    session: TerminalSession
    warnings: list[str] = []
    closed_logs: list[JobLogRead] = []
    opened_log: JobLogRead | None = None
    efficiency: EfficiencyMetrics | None = None
    completion: CompletionResult | None = None
    lookup: LookupOutcome | None = None
    reject_required: bool = False
    remaining_balance: int | None = None

    @classmethod
    def from_result(cls, result: TransitionResult) -> "TransitionResponse":
        return cls(
            action=result.action,
            session=result.session,
            warnings=result.warnings,
            closed_logs=result.closed_logs,
            opened_log=result.opened_log,
            efficiency=result.efficiency,
            completion=result.completion,
            lookup=result.lookup,
            reject_required=result.reject_flow is not None,
            remaining_balance=(
                result.reject_flow.remaining_balance if result.reject_flow else None
            ),
        )


@router.post(
    "/login",
    response_model=TerminalSession,
    responses={401: {"description": "Unknown terminal, inactive or wrong password"}},
)
def login(
    request: TerminalLoginRequest,
    authenticator: TerminalAuthDep,
    registry: RegistryDep,
) -> TerminalSession:
    """Log a terminal in and return its session, resuming one already in progress."""
    result = authenticator.login(request.terminal_id, request.password)
    if not result.success:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=result.error or "Terminal login failed",
        )
    set_terminal_id(result.terminal_id)
    return registry.open(result)


@router.get("/{terminal_id}/session", response_model=TerminalSession)
def get_session(terminal_id: str, registry: RegistryDep) -> TerminalSession:
    if terminal_id not in registry:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Terminal {terminal_id} is not logged in",
        )
    return registry.get(terminal_id)


@router.post(
    "/{terminal_id}/actions",
    summary="Apply a terminal action",
    response_model=TransitionResponse,
    responses={
        400: {"description": "Invalid input for the action"},
        401: {"description": "Badge not recognised"},
        403: {"description": "Badge lacks the permission for this action"},
        404: {"description": "Terminal not logged in"},
        409: {"description": "Action not allowed in the current state"},
    },
)
def apply_action(
    terminal_id: str,
    registry: RegistryDep,
    machine: StateMachineDep,
    action: Annotated[AnyAction, Body(discriminator="kind")],
) -> TransitionResponse:
    """
    Apply one action to the terminal's session.

    A rejected action leaves the stored session untouched. When a run
    completes short, reject_required is set and the client continues with
    the reject endpoints.
    """
    if terminal_id not in registry:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Terminal {terminal_id} is not logged in",
        )
    set_terminal_id(terminal_id)
    result = machine.apply(registry.get(terminal_id), action)
    if not result.success:
        raise_http_error(result.error)
    registry.replace(result.session)
    return TransitionResponse.from_result(result)


@router.post(
    "/{terminal_id}/logout",
    status_code=status.HTTP_204_NO_CONTENT,
    responses={409: {"description": "A job log is still active"}},
)
def logout(terminal_id: str, registry: RegistryDep) -> None:
    """Forget the terminal's session once no job log is active."""
    try:
        registry.close(terminal_id)
    except InvalidTransitionError as e:
        raise_http_error(e)
