from .base import BaseRepository
from .efficiency_repository import EfficiencyMetricRepository
from .job_log_repository import JobLogRepository
from .job_operation_repository import JobOperationRepository
from .reject_repository import RejectReasonRepository, RejectRepository
from .user_repository import TerminalRepository, UserRepository

__all__ = [
    "BaseRepository",
    "EfficiencyMetricRepository",
    "JobLogRepository",
    "JobOperationRepository",
    "RejectReasonRepository",
    "RejectRepository",
    "TerminalRepository",
    "UserRepository",
]
