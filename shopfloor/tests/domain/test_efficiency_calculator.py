"""
Efficiency Calculator Tests

Setup and running metrics, the rounding contract, and input validation.
"""

from datetime import datetime, timedelta, timezone

import pytest

from shopfloor.domain.shared.exceptions import ValidationError
from shopfloor.domain.terminal.services.efficiency_calculator import (
    actual_minutes,
    round_half_up,
    running_efficiency,
    setup_efficiency,
)

START = datetime(2026, 10, 19, 8, 0, 0)


class TestRoundHalfUp:
    """Ties round toward positive infinity."""

    @pytest.mark.parametrize(
        "value,digits,expected",
        [
            (2.5, 0, 3),
            (-2.5, 0, -2),
            (2.4, 0, 2),
            (0.25, 1, 0.3),
            (-0.25, 1, -0.2),
            (6.0, 2, 6.0),
            (33.3333, 2, 33.33),
        ],
    )
    def test_rounding(self, value, digits, expected):
        assert round_half_up(value, digits) == pytest.approx(expected)


class TestActualMinutes:
    def test_elapsed_minutes(self):
        assert actual_minutes(START, START + timedelta(minutes=90)) == 90

    def test_accepts_iso_strings(self):
        assert actual_minutes("2026-10-19T08:00:00Z", "2026-10-19T08:30:00Z") == 30

    def test_aware_and_naive_timestamps_compare_in_utc(self):
        aware = datetime(2026, 10, 19, 10, 0, tzinfo=timezone(timedelta(hours=2)))
        assert actual_minutes(START, aware) == 0

    def test_end_before_start_is_rejected(self):
        with pytest.raises(ValidationError, match="precedes start_time") as exc:
            actual_minutes(START, START - timedelta(minutes=1))
        assert exc.value.error_code == "NEGATIVE_DURATION"

    def test_unparseable_timestamp_is_rejected(self):
        with pytest.raises(ValidationError, match="not a valid timestamp"):
            actual_minutes("yesterday", START)


class TestSetupEfficiency:
    """Planned setup time against the elapsed setup interval."""

    def test_faster_than_planned(self):
        metrics = setup_efficiency(30, START, START + timedelta(minutes=25))

        assert metrics.planned == 30.0
        assert metrics.actual == 25.0
        assert metrics.efficiency == 120
        assert metrics.time_saved == 5.0
        assert metrics.quantity is None
        assert metrics.planned_per_item is None

    def test_slower_than_planned(self):
        metrics = setup_efficiency(30, START, START + timedelta(minutes=45))

        assert metrics.efficiency == 67
        assert metrics.time_saved == -15.0

    def test_zero_elapsed_time_is_full_efficiency(self):
        metrics = setup_efficiency(30, START, START)

        assert metrics.actual == 0
        assert metrics.efficiency == 100

    def test_minutes_are_rounded_to_one_decimal(self):
        metrics = setup_efficiency(10, START, START + timedelta(seconds=370))

        assert metrics.actual == 6.2
        assert metrics.time_saved == 3.8

    @pytest.mark.parametrize("planned", [float("nan"), float("inf"), -1])
    def test_invalid_planned_time(self, planned):
        with pytest.raises(ValidationError):
            setup_efficiency(planned, START, START + timedelta(minutes=5))


class TestRunningEfficiency:
    """Planned run time is scaled to the completed quantity."""

    def test_partial_run(self):
        metrics = running_efficiency(60, 10, 5, START, START + timedelta(minutes=40))

        assert metrics.planned == 30.0
        assert metrics.actual == 40.0
        assert metrics.efficiency == 75
        assert metrics.time_saved == -10.0
        assert metrics.quantity == 5
        assert metrics.planned_per_item == 6.0

    def test_planned_per_item_has_two_decimals(self):
        metrics = running_efficiency(100, 3, 3, START, START + timedelta(minutes=100))

        assert metrics.planned_per_item == 33.33
        assert metrics.efficiency == 100

    def test_nothing_completed(self):
        metrics = running_efficiency(60, 10, 0, START, START + timedelta(minutes=10))

        assert metrics.planned == 0
        assert metrics.efficiency == 0
        assert metrics.time_saved == -10.0

    def test_zero_total_quantity_is_rejected(self):
        with pytest.raises(ValidationError, match="greater than zero") as exc:
            running_efficiency(60, 0, 0, START, START + timedelta(minutes=10))
        assert exc.value.error_code == "ZERO_QUANTITY"

    def test_negative_quantity_is_rejected(self):
        with pytest.raises(ValidationError, match="cannot be negative"):
            running_efficiency(60, 10, -1, START, START + timedelta(minutes=10))
