"""
Efficiency Calculator

Pure functions deriving performance metrics from log timestamps and job
planning data. Rounding is part of the contract: reports and terminals compare
these values directly, so percentages are whole numbers, minutes carry one
decimal and per-item planned time carries two.
"""

import math
from datetime import datetime

from shopfloor.domain.shared.base import as_naive_utc
from shopfloor.domain.shared.exceptions import ValidationError
from shopfloor.domain.terminal.value_objects.efficiency import EfficiencyMetrics

Timestamp = datetime | str


def round_half_up(value: float, digits: int = 0) -> float:
    """Round with ties toward positive infinity."""
    factor = 10**digits
    return math.floor(value * factor + 0.5) / factor


def _to_datetime(value: Timestamp, field_name: str) -> datetime:
    if isinstance(value, str):
        try:
            value = datetime.fromisoformat(value.replace("Z", "+00:00"))
        except ValueError as e:
            raise ValidationError(
                field_name, value, "not a valid timestamp", "INVALID_TIMESTAMP"
            ) from e
    if not isinstance(value, datetime):
        raise ValidationError(
            field_name, str(value), "not a valid timestamp", "INVALID_TIMESTAMP"
        )
    return as_naive_utc(value)


def _require_finite_non_negative(value: float | int | None, field_name: str) -> float:
    if value is None or isinstance(value, bool):
        raise ValidationError(field_name, value, "must be a number")
    try:
        number = float(value)
    except (TypeError, ValueError) as e:
        raise ValidationError(field_name, str(value), "must be a number") from e
    if math.isnan(number) or math.isinf(number):
        raise ValidationError(field_name, str(value), "must be a finite number")
    if number < 0:
        raise ValidationError(field_name, number, "cannot be negative")
    return number


def actual_minutes(start: Timestamp, end: Timestamp) -> float:
    """Elapsed minutes between start and end, unrounded.

    Raises:
        ValidationError: If a timestamp is invalid or end precedes start
    """
    start_dt = _to_datetime(start, "start_time")
    end_dt = _to_datetime(end, "end_time")
    elapsed = (end_dt - start_dt).total_seconds() / 60
    if elapsed < 0:
        raise ValidationError(
            "end_time",
            end_dt.isoformat(),
            f"precedes start_time {start_dt.isoformat()}",
            "NEGATIVE_DURATION",
        )
    return elapsed


def _efficiency_percentage(planned: float, actual: float) -> int:
    if actual == 0:
        return 100
    return int(round_half_up(planned / actual * 100))


def setup_efficiency(
    planned_minutes: float, start: Timestamp, end: Timestamp
) -> EfficiencyMetrics:
    """
    Compare planned setup time with the elapsed setup interval.

    Args:
        planned_minutes: Planned setup time in minutes
        start: When setup began
        end: When setup finished

    Returns:
        EfficiencyMetrics with planned, actual, efficiency and time_saved

    Raises:
        ValidationError: On NaN, negative or infinite input, or end before start
    """
    planned = _require_finite_non_negative(planned_minutes, "planned_minutes")
    actual = actual_minutes(start, end)

    return EfficiencyMetrics(
        planned=round_half_up(planned, 1),
        actual=round_half_up(actual, 1),
        efficiency=_efficiency_percentage(planned, actual),
        time_saved=round_half_up(planned - actual, 1),
    )


def running_efficiency(
    planned_minutes: float,
    total_qty: int,
    completed_qty: int,
    start: Timestamp,
    end: Timestamp,
) -> EfficiencyMetrics:
    """
    Compare the planned rate against the rate achieved during a run.

    The planned time covers the whole order, so it is scaled down to the
    quantity actually completed before comparing with elapsed time.

    Args:
        planned_minutes: Planned run time for the full job quantity
        total_qty: Full job quantity
        completed_qty: Quantity completed in this interval
        start: When the run began
        end: When the run ended

    Returns:
        EfficiencyMetrics including quantity and planned_per_item

    Raises:
        ValidationError: On invalid numbers, a zero total quantity, or end
            before start
    """
    planned = _require_finite_non_negative(planned_minutes, "planned_minutes")
    total = _require_finite_non_negative(total_qty, "total_qty")
    completed = _require_finite_non_negative(completed_qty, "completed_qty")
    if total == 0:
        raise ValidationError(
            "total_qty", total_qty, "must be greater than zero", "ZERO_QUANTITY"
        )

    actual = actual_minutes(start, end)
    planned_per_item = planned / total
    adjusted_planned = planned_per_item * completed

    return EfficiencyMetrics(
        planned=round_half_up(adjusted_planned, 1),
        actual=round_half_up(actual, 1),
        efficiency=_efficiency_percentage(adjusted_planned, actual),
        time_saved=round_half_up(adjusted_planned - actual, 1),
        quantity=int(completed),
        planned_per_item=round_half_up(planned_per_item, 2),
    )
