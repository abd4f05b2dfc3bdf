"""Terminal enums, scan codes and lookup codes."""

import pytest
from pydantic import ValidationError as PydanticValidationError

from shopfloor.domain.terminal.value_objects.enums import (
    JobStatus,
    LogState,
    TerminalState,
)
from shopfloor.domain.terminal.value_objects.lookup_code import LookupCode, ScanCode


class TestTerminalState:
    @pytest.mark.parametrize(
        "current,target",
        [
            (TerminalState.IDLE, TerminalState.SETUP),
            (TerminalState.SETUP, TerminalState.INSPECTION_REQUIRED),
            (TerminalState.INSPECTION_REQUIRED, TerminalState.RUNNING),
            (TerminalState.RUNNING, TerminalState.PAUSED),
            (TerminalState.PAUSED, TerminalState.INSPECTION_REQUIRED),
            (TerminalState.PAUSED, TerminalState.RUNNING),
            (TerminalState.RUNNING, TerminalState.IDLE),
        ],
    )
    def test_allowed_transitions(self, current, target):
        assert current.can_transition_to(target)

    @pytest.mark.parametrize(
        "current,target",
        [
            (TerminalState.IDLE, TerminalState.RUNNING),
            (TerminalState.IDLE, TerminalState.PAUSED),
            (TerminalState.SETUP, TerminalState.RUNNING),
            (TerminalState.INSPECTION_REQUIRED, TerminalState.PAUSED),
        ],
    )
    def test_forbidden_transitions(self, current, target):
        assert not current.can_transition_to(target)

    def test_only_idle_is_inactive(self):
        assert [s for s in TerminalState if not s.is_active] == [TerminalState.IDLE]


class TestLogState:
    def test_measured_states(self):
        assert {s for s in LogState if s.is_measured} == {LogState.SETUP, LogState.RUNNING}


class TestJobStatus:
    def test_values_match_stored_text(self):
        assert [s.value for s in JobStatus] == ["Unstarted", "Ready", "WIP", "Complete"]
        assert JobStatus.COMPLETE.is_terminal
        assert not JobStatus.WIP.is_terminal


class TestScanCode:
    """A scan is a bare route card or route card-contract number."""

    def test_bare_route_card(self):
        scan = ScanCode(raw=" 12345 ")

        assert scan.raw == "12345"
        assert scan.route_card == "12345"
        assert scan.contract_number is None
        assert not scan.is_composite

    def test_composite_scan(self):
        scan = ScanCode(raw="12345-C900")

        assert scan.route_card == "12345"
        assert scan.contract_number == "C900"
        assert scan.is_composite

    def test_non_numeric_route_card_is_kept_as_text(self):
        assert ScanCode(raw="RC-A17").route_card == "RC"
        assert ScanCode(raw="ABC").route_card == "ABC"

    def test_trailing_dash_is_not_composite(self):
        assert not ScanCode(raw="12345-").is_composite

    @pytest.mark.parametrize("raw", ["", "   "])
    def test_empty_scan_is_rejected(self, raw):
        with pytest.raises(PydanticValidationError):
            ScanCode(raw=raw)


class TestLookupCode:
    def test_str_joins_parts(self):
        code = LookupCode(route_card="12345", contract_number="C900", op_code="20")
        assert str(code) == "12345-C900-20"

    def test_for_scan_appends_operation(self):
        assert LookupCode.for_scan(ScanCode(raw="12345-C900"), "20") == "12345-C900-20"
