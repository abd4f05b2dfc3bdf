from .authentication import TerminalAuthenticationService, UserAuthenticationService
from .efficiency_logger import EfficiencyLogger, EfficiencyOutcome, EfficiencyRequest
from .job_completion import JobCompletionService, compute_balance
from .job_lookup import JobLookupService, LookupKind, LookupOutcome, ScanContext
from .log_ledger import LogLedger
from .reject_flow import RejectFlow, RejectStep
from .reject_service import RejectService
from .session_registry import SessionRegistry
from .terminal_state_machine import TerminalStateMachine, TransitionResult

__all__ = [
    "EfficiencyLogger",
    "EfficiencyOutcome",
    "EfficiencyRequest",
    "JobCompletionService",
    "JobLookupService",
    "LogLedger",
    "LookupKind",
    "LookupOutcome",
    "RejectFlow",
    "RejectService",
    "RejectStep",
    "ScanContext",
    "SessionRegistry",
    "TerminalAuthenticationService",
    "TerminalStateMachine",
    "TransitionResult",
    "UserAuthenticationService",
    "compute_balance",
]
