from .efficiency import EfficiencyMetrics
from .enums import (
    InspectionType,
    JobStatus,
    LogState,
    MetricType,
    Role,
    TerminalState,
)
from .lookup_code import LookupCode, ScanCode

__all__ = [
    "EfficiencyMetrics",
    "InspectionType",
    "JobStatus",
    "LogState",
    "LookupCode",
    "MetricType",
    "Role",
    "ScanCode",
    "TerminalState",
]
