import pytest
from pydantic import TypeAdapter
from pydantic import ValidationError as PydanticValidationError

from shopfloor.domain.terminal.actions import (
    ActionKind,
    Pause,
    RecordInspection,
    ScanJob,
    TerminalAction,
)

adapter = TypeAdapter(TerminalAction)


class TestTerminalAction:
    """Actions are parsed by their kind tag."""

    def test_parses_by_kind(self):
        action = adapter.validate_python(
            {"kind": "PAUSE", "completed_qty": 3, "reason": "Lunch"}
        )

        assert isinstance(action, Pause)
        assert action.completed_qty == 3

    def test_defaults(self):
        action = adapter.validate_python({"kind": "SCAN_JOB", "scan": "12345"})

        assert isinstance(action, ScanJob)
        assert action.confirm_complete is False

    def test_unknown_kind_is_rejected(self):
        with pytest.raises(PydanticValidationError):
            adapter.validate_python({"kind": "TELEPORT"})

    def test_inspection_quantity_cannot_be_negative(self):
        with pytest.raises(PydanticValidationError):
            RecordInspection(employee_id="I200", passed=True, inspection_qty=-1)

    def test_every_kind_has_a_variant(self):
        kinds = {
            adapter.validate_python(payload).kind
            for payload in [
                {"kind": "SCAN_JOB", "scan": "1"},
                {"kind": "CLEAR_JOB"},
                {"kind": "START_SETUP", "employee_id": "S"},
                {"kind": "COMPLETE_SETUP"},
                {"kind": "BEGIN_INSPECTION"},
                {"kind": "RECORD_INSPECTION", "employee_id": "I", "passed": True},
                {"kind": "CANCEL_INSPECTION"},
                {"kind": "START_RUNNING", "employee_id": "O"},
                {"kind": "PAUSE", "reason": "r"},
                {"kind": "RESUME", "employee_id": "O"},
                {"kind": "COMPLETE_RUNNING", "completed_qty": 1},
                {"kind": "ABANDON"},
            ]
        }
        assert kinds == set(ActionKind)
