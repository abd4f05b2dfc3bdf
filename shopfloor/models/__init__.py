from .efficiency_metric import (
    EfficiencyMetric,
    EfficiencyMetricCreate,
    EfficiencyMetricRead,
)
from .job_log import JobLog, JobLogClose, JobLogCreate, JobLogRead
from .job_operation import (
    AddOperationRequest,
    CompletionResult,
    CompletionUpdate,
    JobOperation,
    JobOperationCreate,
    JobOperationRead,
)
from .reject import (
    Operation,
    OperationReject,
    RejectCreate,
    RejectCreated,
    RejectRead,
    RejectReason,
    RejectReasonCreate,
    RejectReasonRead,
    RejectRecord,
)
from .user import Terminal, User

__all__ = [
    "AddOperationRequest",
    "CompletionResult",
    "CompletionUpdate",
    "EfficiencyMetric",
    "EfficiencyMetricCreate",
    "EfficiencyMetricRead",
    "JobLog",
    "JobLogClose",
    "JobLogCreate",
    "JobLogRead",
    "JobOperation",
    "JobOperationCreate",
    "JobOperationRead",
    "Operation",
    "OperationReject",
    "RejectCreate",
    "RejectCreated",
    "RejectRead",
    "RejectReason",
    "RejectReasonCreate",
    "RejectReasonRead",
    "RejectRecord",
    "Terminal",
    "User",
]
