"""Authentication of employees by role flag and of terminals by password."""

import pytest

from shopfloor.domain.terminal.value_objects.enums import Role
from shopfloor.tests.factories import TerminalFactory


class TestUserAuthentication:
    def test_success_returns_name(self, authenticator, staff):
        result = authenticator.authenticate(staff["setter"], Role.SETUP)

        assert result.success
        assert result.employee_id == "S100"
        assert result.name == "Sam Setter"
        assert not result.forbidden

    def test_id_is_trimmed(self, authenticator, staff):
        assert authenticator.authenticate("  O300 ", Role.OPERATE).success

    @pytest.mark.parametrize(
        "employee_id, role, error",
        [
            ("", Role.OPERATE, "Employee ID is required"),
            ("NOPE", Role.OPERATE, "User not found"),
            ("X500", Role.OPERATE, "User account is inactive"),
            ("S100", Role.INSPECT, "User does not have can_inspect permissions"),
        ],
    )
    def test_failures(self, authenticator, staff, employee_id, role, error):
        result = authenticator.authenticate(employee_id, role)

        assert not result.success
        assert result.error == error

    def test_missing_flag_is_forbidden(self, authenticator, staff):
        assert authenticator.authenticate("O300", Role.REMANUFACTURE).forbidden
        assert not authenticator.authenticate("NOPE", Role.REMANUFACTURE).forbidden

    def test_role_value_accepted(self, authenticator, staff):
        assert authenticator.authenticate("I200", "can_inspect").success


class TestTerminalAuthentication:
    def test_login(self, terminal_authenticator, terminal):
        result = terminal_authenticator.login("T1", "secret")

        assert result.success
        assert result.terminal_name == "Lathe 1"
        assert result.operation_code == "20"

    @pytest.mark.parametrize(
        "terminal_id, password, error",
        [
            ("", "secret", "Terminal ID and password are required"),
            ("T9", "secret", "Terminal not found"),
            ("T1", "wrong", "Invalid password"),
        ],
    )
    def test_failures(self, terminal_authenticator, terminal, terminal_id, password, error):
        result = terminal_authenticator.login(terminal_id, password)

        assert not result.success
        assert result.error == error

    def test_inactive_terminal(self, terminal_authenticator, engine):
        TerminalFactory.create(engine, "T2", "Mill 2", is_active=False)

        result = terminal_authenticator.login("T2", "secret")

        assert result.error == "Terminal is inactive"
