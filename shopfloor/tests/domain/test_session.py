"""TerminalSession copies and reset variants."""

from datetime import datetime

import pytest
from pydantic import ValidationError as PydanticValidationError

from shopfloor.domain.shared.exceptions import InvalidTransitionError
from shopfloor.domain.terminal.entities import TerminalSession
from shopfloor.domain.terminal.value_objects.enums import (
    InspectionType,
    LogState,
    TerminalState,
)
from shopfloor.models import JobOperationRead


@pytest.fixture
def snapshot() -> JobOperationRead:
    return JobOperationRead(
        id=1,
        lookup_code="12345-C900-20",
        route_card="12345",
        contract_number="C900",
        op_code="20",
        quantity=10,
        balance=10,
        version=1,
        created_at=datetime(2026, 10, 1),
        updated_at=datetime(2026, 10, 1),
    )


@pytest.fixture
def busy(snapshot) -> TerminalSession:
    return (
        TerminalSession(terminal_id="T1", terminal_name="Lathe 1", operation_code="20")
        .load_job(snapshot)
        .login("S100", "Sam Setter")
        .with_state(TerminalState.SETUP, "start setup")
        .set_active_log(7, LogState.SETUP)
        .begin_inspection(InspectionType.FIRST_OFF)
    )


class TestTerminalSession:
    """Sessions are immutable; helpers return new copies."""

    def test_defaults(self):
        session = TerminalSession(terminal_id="T1", operation_code="20")

        assert session.terminal_state == TerminalState.IDLE
        assert session.current_job is None
        assert not session.has_active_log
        assert session.lookup_code is None

    def test_sessions_are_frozen(self):
        session = TerminalSession(terminal_id="T1", operation_code="20")
        with pytest.raises(PydanticValidationError):
            session.terminal_state = TerminalState.RUNNING

    def test_helpers_leave_original_untouched(self, snapshot):
        idle = TerminalSession(terminal_id="T1", operation_code="20")
        loaded = idle.load_job(snapshot)

        assert idle.current_job is None
        assert loaded.lookup_code == "12345-C900-20"

    def test_state_change_is_stamped(self, snapshot):
        idle = TerminalSession(terminal_id="T1", operation_code="20").load_job(snapshot)
        setup = idle.with_state(TerminalState.SETUP, "start setup")

        assert setup.terminal_state == TerminalState.SETUP
        assert setup.last_state_change >= idle.last_state_change

    def test_illegal_state_change_raises(self):
        idle = TerminalSession(terminal_id="T1", operation_code="20")
        with pytest.raises(InvalidTransitionError, match="while terminal is IDLE"):
            idle.with_state(TerminalState.RUNNING, "start running")

    def test_update_job_changes_only_named_fields(self, busy):
        updated = busy.update_job(completed_qty=4, balance=6)

        assert updated.current_job.completed_qty == 4
        assert updated.current_job.balance == 6
        assert updated.current_job.quantity == 10
        assert busy.current_job.completed_qty == 0


class TestResets:
    def test_reset_state_keeps_job(self, busy):
        session = busy.reset_state()

        assert session.terminal_state == TerminalState.IDLE
        assert session.current_job is not None
        assert session.logged_in_user is not None
        assert session.active_log_id is None
        assert session.pending_inspection is None

    def test_reset_job_clears_job_and_user(self, busy):
        session = busy.reset_job()

        assert session.terminal_state == TerminalState.IDLE
        assert session.current_job is None
        assert session.logged_in_user is None
        assert session.active_log_id is None

    def test_reset_terminal_keeps_identity_only(self, busy):
        session = busy.reset_terminal()

        assert session.terminal_id == "T1"
        assert session.terminal_name == "Lathe 1"
        assert session.operation_code == "20"
        assert session.current_job is None
        assert session.pending_inspection is None
