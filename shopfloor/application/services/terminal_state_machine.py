"""
Terminal State Machine

Drives one terminal through the job lifecycle. Each action is validated
against the current session, role-gated actions authenticate first, and the
log writes a transition needs (close the current log, open the next one,
update job completion) share one unit of work. A session is never mutated:
apply() returns a TransitionResult carrying either the next session or the
error that left the current one in place.

Efficiency records are written after the transition commits and are
advisory; a failure there becomes a warning, never a rollback.
"""

from collections.abc import Callable
from dataclasses import dataclass, field

from shopfloor.core.config import Settings, settings
from shopfloor.core.observability import get_logger, record_transition
from shopfloor.domain.shared.exceptions import (
    AuthenticationError,
    DomainError,
    InvalidTransitionError,
    ValidationError,
)
from shopfloor.domain.terminal.actions import (
    Abandon,
    ActionKind,
    BeginInspection,
    CancelInspection,
    ClearJob,
    CompleteRunning,
    CompleteSetup,
    Pause,
    RecordInspection,
    Resume,
    ScanJob,
    StartRunning,
    StartSetup,
)
from shopfloor.domain.terminal.entities import TerminalSession
from shopfloor.domain.terminal.ports import AuthResult, UserAuthenticator
from shopfloor.domain.terminal.value_objects.efficiency import EfficiencyMetrics
from shopfloor.domain.terminal.value_objects.enums import (
    InspectionType,
    LogState,
    MetricType,
    Role,
    TerminalState,
)
from shopfloor.models import CompletionResult, JobLogRead

from .efficiency_logger import EfficiencyLogger, EfficiencyRequest
from .job_completion import JobCompletionService
from .job_lookup import JobLookupService, LookupKind, LookupOutcome, ScanContext
from .log_ledger import LogLedger
from .reject_flow import RejectFlow
from .reject_service import RejectService

logger = get_logger(__name__)


@dataclass
class TransitionResult:
    """Outcome of applying one action to a terminal session."""

    action: ActionKind
    success: bool
    session: TerminalSession
    error: DomainError | None = None
    warnings: list[str] = field(default_factory=list)
    closed_logs: list[JobLogRead] = field(default_factory=list)
    opened_log: JobLogRead | None = None
    efficiency: EfficiencyMetrics | None = None
    completion: CompletionResult | None = None
    lookup: LookupOutcome | None = None
    reject_flow: RejectFlow | None = None


Handler = Callable[[TerminalSession, object], TransitionResult]


class TerminalStateMachine:
    """Applies terminal actions to immutable sessions."""

    def __init__(
        self,
        unit_of_work_factory,
        authenticator: UserAuthenticator,
        ledger: LogLedger,
        efficiency: EfficiencyLogger,
        lookup: JobLookupService,
        completion: JobCompletionService,
        rejects: RejectService,
        config: Settings | None = None,
    ):
        self._uow_factory = unit_of_work_factory
        self._authenticator = authenticator
        self._ledger = ledger
        self._efficiency = efficiency
        self._lookup = lookup
        self._completion = completion
        self._rejects = rejects
        self._settings = config or settings

        self._handlers: dict[ActionKind, Handler] = {
            ActionKind.SCAN_JOB: self._scan_job,
            ActionKind.CLEAR_JOB: self._clear_job,
            ActionKind.START_SETUP: self._start_setup,
            ActionKind.COMPLETE_SETUP: self._complete_setup,
            ActionKind.BEGIN_INSPECTION: self._begin_inspection,
            ActionKind.RECORD_INSPECTION: self._record_inspection,
            ActionKind.CANCEL_INSPECTION: self._cancel_inspection,
            ActionKind.START_RUNNING: self._start_running,
            ActionKind.PAUSE: self._pause,
            ActionKind.RESUME: self._resume,
            ActionKind.COMPLETE_RUNNING: self._complete_running,
            ActionKind.ABANDON: self._abandon,
        }
        missing = set(ActionKind) - set(self._handlers)
        if missing:
            raise RuntimeError(
                f"No handler for actions: {sorted(k.value for k in missing)}"
            )

    def apply(self, session: TerminalSession, action) -> TransitionResult:
        """
        Apply an action to a session.

        Returns:
            TransitionResult. On failure success is False, error is set and
            session is the unchanged input.
        """
        kind = ActionKind(action.kind)
        try:
            result = self._handlers[kind](session, action)
        except DomainError as e:
            record_transition(kind.value, e.error_type.value)
            logger.warning(
                "Terminal transition rejected",
                terminal_id=session.terminal_id,
                action=kind.value,
                state=session.terminal_state.value,
                error_type=e.error_type.value,
                error=e.message,
            )
            return TransitionResult(action=kind, success=False, session=session, error=e)

        record_transition(kind.value, "ok")
        logger.info(
            "Terminal transition applied",
            terminal_id=session.terminal_id,
            action=kind.value,
            from_state=session.terminal_state.value,
            to_state=result.session.terminal_state.value,
            lookup_code=result.session.lookup_code or session.lookup_code,
            warnings=len(result.warnings),
        )
        return result

    # Guards

    def _require_state(
        self, session: TerminalSession, action: ActionKind, *states: TerminalState
    ) -> None:
        if session.terminal_state not in states:
            raise InvalidTransitionError(action.value, session.terminal_state.value)

    def _require_job(self, session: TerminalSession, action: ActionKind) -> None:
        if session.current_job is None:
            raise InvalidTransitionError(
                action.value, session.terminal_state.value, "No job is loaded"
            )

    def _require_log(
        self, session: TerminalSession, action: ActionKind, state: LogState
    ) -> int:
        if session.active_log_id is None or session.active_log_state != state:
            raise InvalidTransitionError(
                action.value,
                session.terminal_state.value,
                f"No active {state.value} log",
            )
        return session.active_log_id

    def _require_no_inspection(
        self, session: TerminalSession, action: ActionKind
    ) -> None:
        if session.pending_inspection is not None:
            raise InvalidTransitionError(
                action.value,
                session.terminal_state.value,
                "Finish or cancel the inspection first",
            )

    def _require_no_open_log(
        self, session: TerminalSession, action: ActionKind, uow
    ) -> None:
        # Any terminal may hold the open log, not only this session.
        open_log = self._ledger.get_open_log(session.lookup_code, uow=uow).unwrap()
        if open_log is not None:
            raise InvalidTransitionError(
                action.value,
                session.terminal_state.value,
                f"Job {session.lookup_code} already has an open "
                f"{LogState(open_log.state).value} log",
            )

    def _authenticate(self, employee_id: str, role: Role) -> AuthResult:
        auth = self._authenticator.authenticate(employee_id, role)
        if not auth.success:
            raise AuthenticationError(
                auth.error or "Authentication failed",
                role.value,
                {"forbidden": auth.forbidden},
            )
        return auth

    def _operator_id(self, session: TerminalSession, action: ActionKind) -> str:
        if session.logged_in_user is None:
            raise InvalidTransitionError(
                action.value, session.terminal_state.value, "No user is logged in"
            )
        return session.logged_in_user.employee_id

    # Efficiency

    def _log_efficiency(
        self,
        session: TerminalSession,
        closed: JobLogRead,
        metric_type: MetricType,
        quantity: int | None,
        result: TransitionResult,
    ) -> None:
        outcome = self._efficiency.log_efficiency(
            EfficiencyRequest(
                job_log_id=closed.id,
                lookup_code=closed.lookup_code,
                log_type=metric_type,
                start_time=closed.start_time,
                end_time=closed.end_time,
                job=session.current_job,
                quantity=quantity,
                operator_id=closed.user_id,
                machine_id=session.terminal_id,
            )
        )
        if outcome.is_err():
            result.warnings.append(f"Efficiency not recorded: {outcome.error.message}")
            return
        result.efficiency = outcome.value.metrics
        if outcome.value.persistence_error is not None:
            result.warnings.append(
                f"Efficiency not saved: {outcome.value.persistence_error.message}"
            )

    # Handlers

    def _scan_job(self, session: TerminalSession, action: ScanJob) -> TransitionResult:
        kind = ActionKind.SCAN_JOB
        self._require_state(session, kind, TerminalState.IDLE)
        user = session.logged_in_user
        outcome = self._lookup.lookup_job(
            action.scan,
            session.operation_code,
            ScanContext(
                terminal_id=session.terminal_id,
                terminal_name=session.terminal_name,
                user=(user.name or user.employee_id) if user else None,
            ),
        ).unwrap()

        result = TransitionResult(action=kind, success=True, session=session, lookup=outcome)
        if outcome.kind != LookupKind.FOUND:
            return result
        if outcome.requires_confirmation and not action.confirm_complete:
            result.warnings.append(
                f"Job {outcome.job.lookup_code} is already complete; confirm to load it"
            )
            return result
        result.session = session.load_job(outcome.job)
        return result

    def _clear_job(self, session: TerminalSession, action: ClearJob) -> TransitionResult:
        self._require_state(session, ActionKind.CLEAR_JOB, TerminalState.IDLE)
        return TransitionResult(
            action=ActionKind.CLEAR_JOB, success=True, session=session.reset_job()
        )

    def _start_setup(
        self, session: TerminalSession, action: StartSetup
    ) -> TransitionResult:
        kind = ActionKind.START_SETUP
        self._require_state(session, kind, TerminalState.IDLE)
        self._require_job(session, kind)
        auth = self._authenticate(action.employee_id, Role.SETUP)

        with self._uow_factory() as uow:
            self._require_no_open_log(session, kind, uow)
            opened = self._ledger.start_setup_log(
                session.lookup_code, auth.employee_id, session.terminal_id, uow
            ).unwrap()

        next_session = (
            session.login(auth.employee_id, auth.name)
            .with_state(TerminalState.SETUP, kind.value)
            .set_active_log(opened.id, LogState.SETUP)
        )
        return TransitionResult(
            action=kind, success=True, session=next_session, opened_log=opened
        )

    def _complete_setup(
        self, session: TerminalSession, action: CompleteSetup
    ) -> TransitionResult:
        kind = ActionKind.COMPLETE_SETUP
        self._require_state(session, kind, TerminalState.SETUP)
        self._require_log(session, kind, LogState.SETUP)
        self._require_no_inspection(session, kind)
        return TransitionResult(
            action=kind,
            success=True,
            session=session.begin_inspection(InspectionType.FIRST_OFF),
        )

    def _begin_inspection(
        self, session: TerminalSession, action: BeginInspection
    ) -> TransitionResult:
        kind = ActionKind.BEGIN_INSPECTION
        self._require_state(
            session, kind, TerminalState.RUNNING, TerminalState.INSPECTION_REQUIRED
        )
        self._require_log(session, kind, LogState.RUNNING)
        self._require_no_inspection(session, kind)
        return TransitionResult(
            action=kind,
            success=True,
            session=session.begin_inspection(InspectionType.IN_PROCESS),
        )

    def _cancel_inspection(
        self, session: TerminalSession, action: CancelInspection
    ) -> TransitionResult:
        if session.pending_inspection is None:
            raise InvalidTransitionError(
                ActionKind.CANCEL_INSPECTION.value,
                session.terminal_state.value,
                "No inspection in progress",
            )
        return TransitionResult(
            action=ActionKind.CANCEL_INSPECTION,
            success=True,
            session=session.clear_inspection(),
        )

    def _record_inspection(
        self, session: TerminalSession, action: RecordInspection
    ) -> TransitionResult:
        kind = ActionKind.RECORD_INSPECTION
        pending = session.pending_inspection
        if pending is None:
            raise InvalidTransitionError(
                kind.value, session.terminal_state.value, "No inspection in progress"
            )
        self._require_job(session, kind)
        inspector = self._authenticate(action.employee_id, Role.INSPECT)
        first_off = pending.inspection_type == InspectionType.FIRST_OFF
        closes_setup = first_off and action.passed

        with self._uow_factory() as uow:
            inspection = self._ledger.record_inspection(
                session.lookup_code,
                inspector.employee_id,
                session.terminal_id,
                pending.inspection_type,
                action.passed,
                started_at=pending.started_at,
                comments=action.comments,
                inspection_qty=action.inspection_qty,
                uow=uow,
            ).unwrap()
            setup_closed = (
                self._ledger.complete_setup_log(session.active_log_id, uow).unwrap()
                if closes_setup
                else None
            )

        result = TransitionResult(
            action=kind,
            success=True,
            session=session.clear_inspection(),
            closed_logs=[inspection],
        )

        if first_off:
            if setup_closed is None:
                result.warnings.append("First-off inspection failed; setup continues")
                return result
            result.closed_logs.append(setup_closed)
            self._log_efficiency(session, setup_closed, MetricType.SETUP, None, result)
            result.session = (
                result.session.clear_active_log()
                .logout()
                .with_state(TerminalState.INSPECTION_REQUIRED, kind.value)
            )
            return result

        if not action.passed:
            result.warnings.append("In-process inspection failed")
            return result
        if session.terminal_state == TerminalState.INSPECTION_REQUIRED:
            result.session = result.session.with_state(TerminalState.RUNNING, kind.value)
        return result

    def _start_running(
        self, session: TerminalSession, action: StartRunning
    ) -> TransitionResult:
        kind = ActionKind.START_RUNNING
        self._require_state(session, kind, TerminalState.INSPECTION_REQUIRED)
        self._require_job(session, kind)
        if session.has_active_log:
            raise InvalidTransitionError(
                kind.value,
                session.terminal_state.value,
                "Complete the in-process inspection to resume running",
            )
        auth = self._authenticate(action.employee_id, Role.OPERATE)

        with self._uow_factory() as uow:
            self._require_no_open_log(session, kind, uow)
            opened = self._ledger.start_running_log(
                session.lookup_code, auth.employee_id, session.terminal_id, uow
            ).unwrap()

        next_session = (
            session.login(auth.employee_id, auth.name)
            .with_state(TerminalState.RUNNING, kind.value)
            .set_active_log(opened.id, LogState.RUNNING)
        )
        return TransitionResult(
            action=kind, success=True, session=next_session, opened_log=opened
        )

    def _pause(self, session: TerminalSession, action: Pause) -> TransitionResult:
        kind = ActionKind.PAUSE
        self._require_state(session, kind, TerminalState.RUNNING)
        log_id = self._require_log(session, kind, LogState.RUNNING)
        self._require_no_inspection(session, kind)
        if not action.reason or not action.reason.strip():
            raise ValidationError("reason", action.reason, "Please enter a pause reason")
        if action.completed_qty < 0:
            raise ValidationError(
                "completed_qty", action.completed_qty, "cannot be negative"
            )
        operator_id = self._operator_id(session, kind)

        with self._uow_factory() as uow:
            closed, paused = self._ledger.pause_running_log(
                log_id,
                action.completed_qty,
                action.reason.strip(),
                session.lookup_code,
                operator_id,
                session.terminal_id,
                uow,
            ).unwrap()
            completion = (
                self._completion.update_job_completion(
                    session.current_job, action.completed_qty, uow=uow
                ).unwrap()
                if action.completed_qty > 0
                else None
            )

        result = TransitionResult(
            action=kind,
            success=True,
            session=session,
            closed_logs=[closed],
            opened_log=paused,
            completion=completion,
        )
        self._log_efficiency(
            session, closed, MetricType.RUNNING, action.completed_qty, result
        )

        next_session = session
        if completion is not None:
            next_session = next_session.update_job(
                completed_qty=completion.completed_qty,
                balance=completion.balance,
                status=completion.status,
                version=completion.version,
            )
        result.session = (
            next_session.logout()
            .with_state(TerminalState.PAUSED, kind.value)
            .set_active_log(paused.id, LogState.PAUSED)
        )
        return result

    def _resume(self, session: TerminalSession, action: Resume) -> TransitionResult:
        kind = ActionKind.RESUME
        self._require_state(session, kind, TerminalState.PAUSED)
        log_id = self._require_log(session, kind, LogState.PAUSED)
        auth = self._authenticate(action.employee_id, Role.OPERATE)

        with self._uow_factory() as uow:
            closed, running = self._ledger.resume_from_pause(
                log_id, session.lookup_code, auth.employee_id, session.terminal_id, uow
            ).unwrap()

        result = TransitionResult(
            action=kind,
            success=True,
            session=session,
            closed_logs=[closed],
            opened_log=running,
        )

        next_session = session
        refreshed = self._lookup.refresh_job(session.current_job)
        if refreshed.is_ok():
            next_session = next_session.load_job(refreshed.value)
        else:
            result.warnings.append(f"Job details not refreshed: {refreshed.error.message}")

        target = (
            TerminalState.INSPECTION_REQUIRED
            if self._settings.RESUME_REQUIRES_INSPECTION
            else TerminalState.RUNNING
        )
        result.session = (
            next_session.login(auth.employee_id, auth.name)
            .with_state(target, kind.value)
            .set_active_log(running.id, LogState.RUNNING)
        )
        return result

    def _complete_running(
        self, session: TerminalSession, action: CompleteRunning
    ) -> TransitionResult:
        kind = ActionKind.COMPLETE_RUNNING
        self._require_state(session, kind, TerminalState.RUNNING)
        log_id = self._require_log(session, kind, LogState.RUNNING)
        self._require_no_inspection(session, kind)
        if action.completed_qty <= 0:
            raise ValidationError(
                "completed_qty", action.completed_qty, "must be greater than zero"
            )
        operator_id = self._operator_id(session, kind)

        with self._uow_factory() as uow:
            closed = self._ledger.complete_running_log(
                log_id, action.completed_qty, uow
            ).unwrap()
            completion = self._completion.update_job_completion(
                session.current_job, action.completed_qty, uow=uow
            ).unwrap()

        result = TransitionResult(
            action=kind,
            success=True,
            session=session.reset_job(),
            closed_logs=[closed],
            completion=completion,
        )
        self._log_efficiency(
            session, closed, MetricType.RUNNING, action.completed_qty, result
        )

        if completion.balance > 0:
            user = session.logged_in_user
            result.reject_flow = RejectFlow(
                job=session.current_job.model_copy(
                    update={
                        "completed_qty": completion.completed_qty,
                        "balance": completion.balance,
                        "status": completion.status,
                        "version": completion.version,
                    }
                ),
                remaining_balance=completion.balance,
                operator_id=operator_id,
                machine_id=session.terminal_id,
                authenticator=self._authenticator,
                service=self._rejects,
                operator_name=user.name if user else None,
            )
        return result

    def _abandon(self, session: TerminalSession, action: Abandon) -> TransitionResult:
        kind = ActionKind.ABANDON
        if not session.has_active_log:
            if session.terminal_state == TerminalState.IDLE and session.current_job is None:
                raise InvalidTransitionError(kind.value, session.terminal_state.value)
            return TransitionResult(action=kind, success=True, session=session.reset_job())

        if not action.reason or not action.reason.strip():
            raise ValidationError("reason", action.reason, "Please enter a reason")
        if action.completed_qty < 0:
            raise ValidationError(
                "completed_qty", action.completed_qty, "cannot be negative"
            )
        log_state = session.active_log_state
        counts_qty = log_state == LogState.RUNNING and action.completed_qty > 0

        with self._uow_factory() as uow:
            closed = self._ledger.abandon_log(
                session.active_log_id,
                action.reason.strip(),
                action.completed_qty if counts_qty else None,
                uow,
            ).unwrap()
            completion = (
                self._completion.update_job_completion(
                    session.current_job, action.completed_qty, uow=uow
                ).unwrap()
                if counts_qty
                else None
            )

        result = TransitionResult(
            action=kind,
            success=True,
            session=session.reset_job(),
            closed_logs=[closed],
            completion=completion,
        )
        if log_state == LogState.SETUP:
            self._log_efficiency(session, closed, MetricType.SETUP, None, result)
        elif counts_qty:
            self._log_efficiency(
                session, closed, MetricType.RUNNING, action.completed_qty, result
            )
        return result
