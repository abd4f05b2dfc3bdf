"""Process-local store of terminal sessions for the HTTP surface."""

from threading import Lock

from shopfloor.domain.shared.exceptions import InvalidTransitionError, NotFoundError
from shopfloor.domain.terminal.entities import TerminalSession
from shopfloor.domain.terminal.ports import TerminalLoginResult


class SessionRegistry:
    """
    Holds the current session per terminal id.

    Sessions are immutable, so the registry only swaps references; each
    accepted transition replaces the stored session with the result's.
    """

    def __init__(self):
        self._sessions: dict[str, TerminalSession] = {}
        self._lock = Lock()

    def open(self, login: TerminalLoginResult) -> TerminalSession:
        """
        Session for a terminal that has just logged in.

        A terminal logging in again picks up the session it already has, so
        a job in progress keeps its active log.
        """
        with self._lock:
            session = self._sessions.get(login.terminal_id)
            if session is None:
                session = TerminalSession(
                    terminal_id=login.terminal_id,
                    terminal_name=login.terminal_name,
                    operation_code=login.operation_code,
                    operation_id=login.operation_id,
                )
                self._sessions[session.terminal_id] = session
        return session

    def get(self, terminal_id: str) -> TerminalSession:
        with self._lock:
            session = self._sessions.get(terminal_id)
        if session is None:
            raise NotFoundError("TerminalSession", terminal_id)
        return session

    def replace(self, session: TerminalSession) -> TerminalSession:
        with self._lock:
            self._sessions[session.terminal_id] = session
        return session

    def close(self, terminal_id: str) -> None:
        """
        Forget a terminal's session.

        Raises:
            InvalidTransitionError: While the session has an active log
        """
        with self._lock:
            session = self._sessions.get(terminal_id)
            if session is not None and session.has_active_log:
                raise InvalidTransitionError(
                    "logout",
                    session.terminal_state.value,
                    "Complete or abandon the job before logging out",
                )
            self._sessions.pop(terminal_id, None)

    def __contains__(self, terminal_id: str) -> bool:
        return terminal_id in self._sessions
