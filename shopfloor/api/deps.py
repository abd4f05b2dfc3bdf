"""
API dependencies.

Services are built per request from a unit-of-work factory and a notifier;
tests override get_uow_factory and get_notifier to point them at an
in-memory database and a recording fake.
"""

from typing import Annotated, NoReturn, TypeVar

from fastapi import Depends, HTTPException, status

from shopfloor.application.services import (
    EfficiencyLogger,
    JobCompletionService,
    JobLookupService,
    LogLedger,
    RejectService,
    SessionRegistry,
    TerminalAuthenticationService,
    TerminalStateMachine,
    UserAuthenticationService,
)
from shopfloor.core.observability import get_logger
from shopfloor.core.unit_of_work import UnitOfWork, UnitOfWorkFactory
from shopfloor.domain.shared.exceptions import DomainError, ErrorType
from shopfloor.domain.shared.result import Result
from shopfloor.domain.terminal.ports import Notifier
from shopfloor.infrastructure.notifications import EmailNotifier

logger = get_logger(__name__)

T = TypeVar("T")

ERROR_STATUS = {
    ErrorType.VALIDATION: status.HTTP_400_BAD_REQUEST,
    ErrorType.AUTHENTICATION: status.HTTP_401_UNAUTHORIZED,
    ErrorType.NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorType.CONFLICT: status.HTTP_409_CONFLICT,
    ErrorType.INVALID_TRANSITION: status.HTTP_409_CONFLICT,
    ErrorType.PERSISTENCE: status.HTTP_500_INTERNAL_SERVER_ERROR,
}


def raise_http_error(error: DomainError) -> NoReturn:
    """Translate a domain error into the matching HTTPException."""
    status_code = ERROR_STATUS.get(
        error.error_type, status.HTTP_500_INTERNAL_SERVER_ERROR
    )
    if error.error_type == ErrorType.AUTHENTICATION and error.details.get("forbidden"):
        status_code = status.HTTP_403_FORBIDDEN
    if status_code >= 500:
        logger.error("Request failed", error_type=error.error_type.value, error=error.message)
    raise HTTPException(status_code=status_code, detail=error.to_dict())


def unwrap_or_raise(result: Result[T]) -> T:
    if result.is_err():
        raise_http_error(result.error)
    return result.value


def get_uow_factory() -> UnitOfWorkFactory:
    return UnitOfWork


def get_notifier() -> Notifier:
    return EmailNotifier()


_registry = SessionRegistry()


def get_session_registry() -> SessionRegistry:
    return _registry


UowFactoryDep = Annotated[UnitOfWorkFactory, Depends(get_uow_factory)]
NotifierDep = Annotated[Notifier, Depends(get_notifier)]
RegistryDep = Annotated[SessionRegistry, Depends(get_session_registry)]


def get_log_ledger(factory: UowFactoryDep) -> LogLedger:
    return LogLedger(factory)


def get_efficiency_logger(factory: UowFactoryDep) -> EfficiencyLogger:
    return EfficiencyLogger(factory)


def get_job_lookup(factory: UowFactoryDep, notifier: NotifierDep) -> JobLookupService:
    return JobLookupService(factory, notifier)


def get_job_completion(factory: UowFactoryDep) -> JobCompletionService:
    return JobCompletionService(factory)


def get_reject_service(factory: UowFactoryDep, notifier: NotifierDep) -> RejectService:
    return RejectService(factory, notifier)


def get_user_authenticator(factory: UowFactoryDep) -> UserAuthenticationService:
    return UserAuthenticationService(factory)


def get_terminal_authenticator(factory: UowFactoryDep) -> TerminalAuthenticationService:
    return TerminalAuthenticationService(factory)


LedgerDep = Annotated[LogLedger, Depends(get_log_ledger)]
EfficiencyDep = Annotated[EfficiencyLogger, Depends(get_efficiency_logger)]
LookupDep = Annotated[JobLookupService, Depends(get_job_lookup)]
CompletionDep = Annotated[JobCompletionService, Depends(get_job_completion)]
RejectServiceDep = Annotated[RejectService, Depends(get_reject_service)]
UserAuthDep = Annotated[UserAuthenticationService, Depends(get_user_authenticator)]
TerminalAuthDep = Annotated[
    TerminalAuthenticationService, Depends(get_terminal_authenticator)
]


def get_state_machine(
    factory: UowFactoryDep,
    authenticator: UserAuthDep,
    ledger: LedgerDep,
    efficiency: EfficiencyDep,
    lookup: LookupDep,
    completion: CompletionDep,
    rejects: RejectServiceDep,
) -> TerminalStateMachine:
    return TerminalStateMachine(
        factory, authenticator, ledger, efficiency, lookup, completion, rejects
    )


StateMachineDep = Annotated[TerminalStateMachine, Depends(get_state_machine)]
