"""Efficiency metrics value object."""

from pydantic import Field

from shopfloor.domain.shared.base import ValueObject


class EfficiencyMetrics(ValueObject):
    """
    Result of comparing planned against actual time for one activity.

    planned and actual are minutes. For running metrics, planned is the
    planned time scaled to the completed quantity and quantity carries that
    completed quantity.
    """

    planned: float
    actual: float
    efficiency: int
    time_saved: float
    quantity: int | None = None
    planned_per_item: float | None = Field(default=None)
