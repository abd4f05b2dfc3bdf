"""
Terminal session value.

A TerminalSession is immutable: every state-machine transition returns a new
session instead of mutating shared state. Helper methods build those copies
and refuse moves the terminal state graph does not allow.
"""

from datetime import datetime

from pydantic import Field

from shopfloor.domain.shared.base import ValueObject, utc_now
from shopfloor.domain.shared.exceptions import InvalidTransitionError
from shopfloor.domain.terminal.value_objects.enums import (
    InspectionType,
    LogState,
    TerminalState,
)
from shopfloor.models import JobOperationRead


class SessionUser(ValueObject):
    employee_id: str
    name: str | None = None


class PendingInspection(ValueObject):
    """An inspection wizard in progress; nothing is written until it commits."""

    inspection_type: InspectionType
    started_at: datetime


class TerminalSession(ValueObject):
    terminal_id: str
    terminal_name: str | None = None
    operation_code: str
    operation_id: int | None = None
    logged_in_user: SessionUser | None = None
    terminal_state: TerminalState = TerminalState.IDLE
    last_state_change: datetime = Field(default_factory=utc_now)
    current_job: JobOperationRead | None = None
    active_log_id: int | None = None
    active_log_state: LogState | None = None
    pending_inspection: PendingInspection | None = None

    @property
    def has_active_log(self) -> bool:
        return self.active_log_id is not None

    @property
    def lookup_code(self) -> str | None:
        return self.current_job.lookup_code if self.current_job else None

    def _copy(self, **changes) -> "TerminalSession":
        return self.model_copy(update=changes)

    def with_state(self, state: TerminalState, action: str) -> "TerminalSession":
        """Move to state, stamping last_state_change."""
        if not self.terminal_state.can_transition_to(state):
            raise InvalidTransitionError(action, self.terminal_state.value)
        if state == self.terminal_state:
            return self
        return self._copy(terminal_state=state, last_state_change=utc_now())

    def load_job(self, job: JobOperationRead) -> "TerminalSession":
        return self._copy(current_job=job)

    def update_job(self, **fields) -> "TerminalSession":
        if self.current_job is None:
            return self
        return self._copy(current_job=self.current_job.model_copy(update=fields))

    def login(self, employee_id: str, name: str | None = None) -> "TerminalSession":
        return self._copy(logged_in_user=SessionUser(employee_id=employee_id, name=name))

    def logout(self) -> "TerminalSession":
        return self._copy(logged_in_user=None)

    def set_active_log(self, log_id: int, state: LogState) -> "TerminalSession":
        return self._copy(active_log_id=log_id, active_log_state=state)

    def clear_active_log(self) -> "TerminalSession":
        return self._copy(active_log_id=None, active_log_state=None)

    def begin_inspection(self, inspection_type: InspectionType) -> "TerminalSession":
        return self._copy(
            pending_inspection=PendingInspection(
                inspection_type=inspection_type, started_at=utc_now()
            )
        )

    def clear_inspection(self) -> "TerminalSession":
        return self._copy(pending_inspection=None)

    def reset_state(self) -> "TerminalSession":
        """Back to IDLE keeping the loaded job; the active log pointer is dropped."""
        return self._copy(
            terminal_state=TerminalState.IDLE,
            last_state_change=utc_now(),
            active_log_id=None,
            active_log_state=None,
            pending_inspection=None,
        )

    def reset_job(self) -> "TerminalSession":
        """Back to IDLE with no job and no user."""
        return self.reset_state()._copy(current_job=None, logged_in_user=None)

    def reset_terminal(self) -> "TerminalSession":
        """Everything cleared except the terminal identity."""
        return TerminalSession(
            terminal_id=self.terminal_id,
            terminal_name=self.terminal_name,
            operation_code=self.operation_code,
            operation_id=self.operation_id,
        )
