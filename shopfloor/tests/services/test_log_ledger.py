"""
Log Ledger Tests

Opening, closing and querying job logs, and the lifecycle helpers the
terminal state machine composes.
"""

from datetime import datetime, timedelta

import pytest

from shopfloor.domain.shared.base import utc_now
from shopfloor.domain.shared.exceptions import (
    ConflictError,
    NotFoundError,
    ValidationError,
)
from shopfloor.domain.terminal.value_objects.enums import InspectionType, LogState
from shopfloor.models import JobLogClose, JobLogCreate

LOOKUP = "12345-C900-20"


def open_log(ledger, state=LogState.SETUP, start_time=None, **kwargs):
    return ledger.create_log(
        JobLogCreate(
            lookup_code=LOOKUP,
            user_id="S100",
            machine_id="T1",
            state=state,
            start_time=start_time,
            **kwargs,
        )
    ).unwrap()


class TestCreateLog:
    def test_start_time_defaults_to_now(self, ledger):
        before = utc_now()
        log = open_log(ledger)

        assert log.id is not None
        assert log.state == LogState.SETUP
        assert log.end_time is None
        assert before <= log.start_time <= utc_now()

    def test_explicit_start_time_is_kept(self, ledger):
        start = datetime(2026, 10, 19, 7, 30)
        assert open_log(ledger, start_time=start).start_time == start

    @pytest.mark.parametrize("field", ["lookup_code", "user_id", "machine_id"])
    def test_required_text_fields(self, ledger, field):
        data = {
            "lookup_code": LOOKUP,
            "user_id": "S100",
            "machine_id": "T1",
            "state": LogState.SETUP,
        }
        data[field] = "  "
        result = ledger.create_log(JobLogCreate(**data))

        assert result.is_err()
        assert isinstance(result.error, ValidationError)
        assert result.error.field_name == field


class TestCloseLog:
    """Close writes only allow-listed fields to an open log."""

    def test_close_with_end_time_now(self, ledger):
        log = open_log(ledger)
        closed = ledger.close_log(log.id, JobLogClose(end_time=True)).unwrap()

        assert closed.end_time is not None
        assert closed.end_time >= closed.start_time

    def test_close_with_quantity_and_comments(self, ledger):
        log = open_log(ledger, state=LogState.RUNNING)
        end = log.start_time + timedelta(minutes=30)
        closed = ledger.close_log(
            log.id, JobLogClose(end_time=end, completed_qty=4, comments="ok")
        ).unwrap()

        assert closed.end_time == end
        assert closed.completed_qty == 4
        assert closed.comments == "ok"

    def test_empty_close_is_rejected(self, ledger):
        log = open_log(ledger)
        result = ledger.close_log(log.id, JobLogClose())

        assert result.is_err()
        assert result.error.error_code == "NO_UPDATE_FIELDS"

    def test_end_before_start_is_rejected(self, ledger):
        log = open_log(ledger)
        result = ledger.close_log(
            log.id, JobLogClose(end_time=log.start_time - timedelta(minutes=1))
        )

        assert isinstance(result.error, ValidationError)
        assert result.error.error_code == "NEGATIVE_DURATION"

    def test_closed_log_cannot_be_closed_again(self, ledger):
        log = open_log(ledger)
        ledger.close_log(log.id, JobLogClose(end_time=True)).unwrap()
        result = ledger.close_log(log.id, JobLogClose(end_time=True))

        assert isinstance(result.error, ConflictError)

    def test_unknown_log(self, ledger):
        result = ledger.close_log(999, JobLogClose(end_time=True))
        assert isinstance(result.error, NotFoundError)


class TestQueries:
    def test_open_log_by_state(self, ledger):
        setup = open_log(ledger, state=LogState.SETUP)

        assert ledger.get_open_log(LOOKUP).unwrap().id == setup.id
        assert ledger.get_open_log(LOOKUP, LogState.SETUP).unwrap().id == setup.id
        assert ledger.get_open_log(LOOKUP, LogState.RUNNING).unwrap() is None

    def test_closed_logs_only_with_include_completed(self, ledger):
        log = open_log(ledger)
        ledger.close_log(log.id, JobLogClose(end_time=True)).unwrap()

        assert ledger.get_open_log(LOOKUP).unwrap() is None
        latest = ledger.get_open_log(LOOKUP, include_completed=True).unwrap()
        assert latest.id == log.id

    def test_most_recent_first(self, ledger):
        first = open_log(ledger, start_time=datetime(2026, 10, 19, 8, 0))
        ledger.close_log(first.id, JobLogClose(end_time=True)).unwrap()
        second = open_log(
            ledger, state=LogState.RUNNING, start_time=datetime(2026, 10, 19, 9, 0)
        )

        logs = ledger.list_logs(LOOKUP).unwrap()
        assert [log.id for log in logs] == [second.id, first.id]
        assert ledger.list_logs(LOOKUP, limit=1).unwrap()[0].id == second.id

    def test_get_log_by_id(self, ledger):
        log = open_log(ledger)
        assert ledger.get_log_by_id(log.id).unwrap().lookup_code == LOOKUP
        assert isinstance(ledger.get_log_by_id(404).error, NotFoundError)


class TestLifecycleHelpers:
    def test_pause_closes_running_and_opens_paused(self, ledger):
        running = ledger.start_running_log(LOOKUP, "O300", "T1").unwrap()
        closed, paused = ledger.pause_running_log(
            running.id, 3, "Tool change", LOOKUP, "O300", "T1"
        ).unwrap()

        assert closed.end_time is not None
        assert closed.completed_qty == 3
        assert paused.state == LogState.PAUSED
        assert paused.comments == "Tool change"
        assert [log.id for log in ledger.get_open_logs(LOOKUP).unwrap()] == [paused.id]

    def test_resume_closes_paused_and_opens_running(self, ledger):
        running = ledger.start_running_log(LOOKUP, "O300", "T1").unwrap()
        _, paused = ledger.pause_running_log(
            running.id, 0, "Break", LOOKUP, "O300", "T1"
        ).unwrap()
        closed, resumed = ledger.resume_from_pause(
            paused.id, LOOKUP, "O300", "T1"
        ).unwrap()

        assert closed.id == paused.id
        assert closed.end_time is not None
        assert resumed.state == LogState.RUNNING
        assert resumed.end_time is None

    def test_first_off_inspection_defaults_to_one_piece(self, ledger):
        started = utc_now() - timedelta(minutes=5)
        log = ledger.record_inspection(
            LOOKUP, "I200", "T1", InspectionType.FIRST_OFF, True, started_at=started
        ).unwrap()

        assert log.state == LogState.INSPECTION
        assert log.inspection_type == InspectionType.FIRST_OFF
        assert log.inspection_passed is True
        assert log.inspection_qty == 1
        assert log.start_time == started
        assert log.end_time is not None

    def test_in_process_inspection_has_no_default_quantity(self, ledger):
        log = ledger.record_inspection(
            LOOKUP,
            "I200",
            "T1",
            InspectionType.IN_PROCESS,
            False,
            comments="Burr on edge",
        ).unwrap()

        assert log.inspection_passed is False
        assert log.inspection_qty is None
        assert log.comments == "Burr on edge"

    def test_abandon_marks_comment(self, ledger):
        setup = ledger.start_setup_log(LOOKUP, "S100", "T1").unwrap()
        closed = ledger.abandon_log(setup.id, "Wrong fixture").unwrap()

        assert closed.comments == "ABANDONED: Wrong fixture"
        assert closed.completed_qty is None
        assert ledger.get_open_logs(LOOKUP).unwrap() == []

    def test_failed_step_rolls_back_shared_unit_of_work(self, ledger, uow_factory):
        """A close that fails inside a joined unit of work leaves nothing behind."""
        setup = ledger.start_setup_log(LOOKUP, "S100", "T1").unwrap()

        with pytest.raises(NotFoundError):
            with uow_factory() as uow:
                ledger.start_running_log(LOOKUP, "O300", "T1", uow).unwrap()
                ledger.complete_running_log(999, 1, uow).unwrap()

        open_logs = ledger.get_open_logs(LOOKUP).unwrap()
        assert [log.id for log in open_logs] == [setup.id]
