"""User and terminal authentication backed by the users and terminals tables."""

from shopfloor.core.observability import get_logger
from shopfloor.core.security import verify_password
from shopfloor.domain.shared.exceptions import DomainError
from shopfloor.domain.terminal.ports import AuthResult, TerminalLoginResult
from shopfloor.domain.terminal.value_objects.enums import Role

from .base_service import ApplicationServiceBase

logger = get_logger(__name__)


class UserAuthenticationService(ApplicationServiceBase):
    """Checks an employee id against the users table and one role flag."""

    def authenticate(self, employee_id: str, role: Role) -> AuthResult:
        if not employee_id or not employee_id.strip():
            return AuthResult(success=False, error="Employee ID is required")
        employee_id = employee_id.strip()
        role = Role(role)

        try:
            with self.transaction() as uow:
                user = uow.users.find_by_employee_id(employee_id)
                if user is None:
                    result = AuthResult(success=False, error="User not found")
                elif not user.is_active:
                    result = AuthResult(success=False, error="User account is inactive")
                elif not getattr(user, role.value):
                    result = AuthResult(
                        success=False,
                        error=f"User does not have {role.value} permissions",
                        forbidden=True,
                    )
                else:
                    result = AuthResult(
                        success=True, employee_id=user.employee_id, name=user.name
                    )
        except DomainError as e:
            logger.error("User authentication failed", error=e.message)
            return AuthResult(success=False, error="Authentication unavailable")

        logger.info(
            "User authentication",
            employee_id=employee_id,
            role=role.value,
            success=result.success,
            error=result.error,
        )
        return result


class TerminalAuthenticationService(ApplicationServiceBase):
    """Logs a terminal in with its id and password."""

    def login(self, terminal_id: str, password: str) -> TerminalLoginResult:
        if not terminal_id or not password:
            return TerminalLoginResult(
                success=False, error="Terminal ID and password are required"
            )

        try:
            with self.transaction() as uow:
                terminal = uow.terminals.find_by_terminal_id(terminal_id)
                if terminal is None:
                    result = TerminalLoginResult(success=False, error="Terminal not found")
                elif not terminal.is_active:
                    result = TerminalLoginResult(
                        success=False, error="Terminal is inactive"
                    )
                elif not verify_password(password, terminal.hashed_password):
                    result = TerminalLoginResult(success=False, error="Invalid password")
                else:
                    result = TerminalLoginResult(
                        success=True,
                        terminal_id=terminal.terminal_id,
                        terminal_name=terminal.terminal_name,
                        operation_code=terminal.operation_code,
                        operation_id=terminal.operation_id,
                    )
        except DomainError as e:
            logger.error("Terminal login failed", error=e.message)
            return TerminalLoginResult(success=False, error="Authentication unavailable")

        logger.info(
            "Terminal login", terminal_id=terminal_id, success=result.success
        )
        return result
