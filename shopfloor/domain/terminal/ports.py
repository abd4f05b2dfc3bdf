"""
Collaborator contracts consumed by the terminal services.

Authentication and notification are reached through these protocols so the
state machine and reject flow can run against SQL-backed implementations in
production and in-memory fakes in tests.
"""

from datetime import datetime
from typing import Protocol

from pydantic import Field

from shopfloor.domain.shared.base import ValueObject
from shopfloor.domain.terminal.value_objects.enums import Role


class AuthResult(ValueObject):
    success: bool
    employee_id: str | None = None
    name: str | None = None
    error: str | None = None
    forbidden: bool = False


class TerminalLoginResult(ValueObject):
    success: bool
    terminal_id: str | None = None
    terminal_name: str | None = None
    operation_code: str | None = None
    operation_id: int | None = None
    error: str | None = None


class NotificationResult(ValueObject):
    success: bool
    message_id: str | None = None
    error: str | None = None


class RemanufactureNotice(ValueObject):
    """Content of a remanufacture request email."""

    reject_id: int
    customer_name: str
    contract_number: str
    route_card: str
    part_number: str
    operation_code: str
    machine_id: str
    qty_rejected: int
    remanufacture_qty: int
    reason: str
    operator_id: str
    operator_name: str | None = None
    supervisor_id: str
    supervisor_name: str | None = None
    created_at: datetime


class JobNotFoundNotice(ValueObject):
    """Content of a job-not-found email."""

    scan: str
    operation_code: str
    terminal_id: str | None = None
    terminal_name: str | None = None
    user: str | None = None
    occurred_at: datetime
    existing_operations: list[str] = Field(default_factory=list)


class UserAuthenticator(Protocol):
    def authenticate(self, employee_id: str, role: Role) -> AuthResult: ...


class TerminalAuthenticator(Protocol):
    def login(self, terminal_id: str, password: str) -> TerminalLoginResult: ...


class Notifier(Protocol):
    def send_remanufacture_email(
        self, notice: RemanufactureNotice
    ) -> NotificationResult: ...

    def send_job_not_found_email(self, notice: JobNotFoundNotice) -> NotificationResult: ...
