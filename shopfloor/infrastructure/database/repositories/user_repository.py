"""User and terminal repositories."""

from sqlmodel import select

from shopfloor.models import Terminal, User

from .base import BaseRepository


class UserRepository(BaseRepository[User, User]):
    @property
    def entity_class(self) -> type[User]:
        return User

    def find_by_employee_id(self, employee_id: str) -> User | None:
        return self._first(select(User).where(User.employee_id == employee_id))


class TerminalRepository(BaseRepository[Terminal, Terminal]):
    @property
    def entity_class(self) -> type[Terminal]:
        return Terminal

    def find_by_terminal_id(self, terminal_id: str) -> Terminal | None:
        return self._first(select(Terminal).where(Terminal.terminal_id == terminal_id))
