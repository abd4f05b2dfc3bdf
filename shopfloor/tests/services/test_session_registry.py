import pytest

from shopfloor.application.services.session_registry import SessionRegistry
from shopfloor.domain.shared.exceptions import InvalidTransitionError, NotFoundError
from shopfloor.domain.terminal.ports import TerminalLoginResult
from shopfloor.domain.terminal.value_objects.enums import LogState, TerminalState

LOGIN = TerminalLoginResult(
    success=True, terminal_id="T1", terminal_name="Lathe 1", operation_code="20"
)


@pytest.fixture
def registry() -> SessionRegistry:
    return SessionRegistry()


def test_open_starts_idle_session(registry):
    session = registry.open(LOGIN)

    assert session.terminal_state == TerminalState.IDLE
    assert registry.get("T1") is session


def test_open_again_keeps_job_in_progress(registry):
    first = registry.open(LOGIN)
    busy = registry.replace(
        first.with_state(TerminalState.SETUP, "START_SETUP").set_active_log(7, LogState.SETUP)
    )

    assert registry.open(LOGIN) is busy


def test_close_refused_while_log_active(registry):
    session = registry.open(LOGIN)
    registry.replace(session.set_active_log(7, LogState.RUNNING))

    with pytest.raises(InvalidTransitionError):
        registry.close("T1")
    assert "T1" in registry


def test_close_forgets_idle_session(registry):
    registry.open(LOGIN)

    registry.close("T1")

    assert "T1" not in registry
    with pytest.raises(NotFoundError):
        registry.get("T1")


def test_close_unknown_terminal_is_noop(registry):
    registry.close("T9")
