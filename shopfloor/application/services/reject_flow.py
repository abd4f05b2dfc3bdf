"""
Reject / Remanufacture Flow

A step-by-step wizard raised when a run completes short of the job quantity:
confirmation, supervisor authorization, reason, quantity, summary, submit.
Nothing is written until submit; cancel at any earlier step discards the
wizard.
"""

from enum import Enum

from shopfloor.domain.shared.exceptions import (
    AuthenticationError,
    InvalidTransitionError,
    ValidationError,
)
from shopfloor.domain.shared.result import Ok, Result
from shopfloor.domain.terminal.ports import UserAuthenticator
from shopfloor.domain.terminal.value_objects.enums import Role
from shopfloor.models import JobOperationRead, RejectCreate, RejectCreated, RejectReasonRead

from .reject_service import OTHER_REASON_NAME, RejectService, validate_remanufacture_qty


class RejectStep(str, Enum):
    CONFIRMATION = "CONFIRMATION"
    AUTHORIZATION = "AUTHORIZATION"
    REASON = "REASON"
    QUANTITY = "QUANTITY"
    SUMMARY = "SUMMARY"
    SUBMITTED = "SUBMITTED"
    CANCELLED = "CANCELLED"

    @property
    def is_final(self) -> bool:
        return self in {RejectStep.SUBMITTED, RejectStep.CANCELLED}


class RejectFlow:
    """Wizard state for one remanufacture request."""

    def __init__(
        self,
        job: JobOperationRead,
        remaining_balance: int,
        operator_id: str,
        machine_id: str,
        authenticator: UserAuthenticator,
        service: RejectService,
        operator_name: str | None = None,
    ):
        self.job = job
        self.remaining_balance = max(0, remaining_balance)
        self.operator_id = operator_id
        self.operator_name = operator_name
        self.machine_id = machine_id
        self._authenticator = authenticator
        self._service = service

        self.step = RejectStep.CONFIRMATION
        self.supervisor_id: str | None = None
        self.supervisor_name: str | None = None
        self.reason: str | None = None
        self.quantity: int | None = None
        self.result: RejectCreated | None = None

    def _require(self, step: RejectStep, action: str) -> None:
        if self.step != step:
            raise InvalidTransitionError(
                action,
                self.step.value,
                f"Cannot {action} at reject step {self.step.value}",
            )

    @property
    def default_quantity(self) -> int:
        return min(self.remaining_balance, self.job.quantity)

    def confirm(self, proceed: bool = True) -> RejectStep:
        """Answer whether the short quantity should be remanufactured."""
        self._require(RejectStep.CONFIRMATION, "confirm")
        self.step = RejectStep.AUTHORIZATION if proceed else RejectStep.CANCELLED
        return self.step

    def authorize(self, supervisor_id: str) -> RejectStep:
        """
        Authenticate the supervisor approving the request.

        Raises:
            AuthenticationError: If the supervisor lacks can_remanufacture;
                the wizard stays at AUTHORIZATION
        """
        self._require(RejectStep.AUTHORIZATION, "authorize")
        auth = self._authenticator.authenticate(supervisor_id, Role.REMANUFACTURE)
        if not auth.success:
            raise AuthenticationError(
                auth.error or "Authentication failed",
                Role.REMANUFACTURE.value,
                {"forbidden": auth.forbidden},
            )
        self.supervisor_id = auth.employee_id or supervisor_id
        self.supervisor_name = auth.name
        self.step = RejectStep.REASON
        return self.step

    def reasons(self) -> Result[list[RejectReasonRead]]:
        return self._service.list_reasons(self.job.op_code)

    def select_reason(self, reason: str, custom_text: str | None = None) -> RejectStep:
        """
        Choose a listed reason, or Other with free text.

        Raises:
            ValidationError: If no reason is given or Other has no text
        """
        self._require(RejectStep.REASON, "select a reason")
        if not reason or not reason.strip():
            raise ValidationError("reason", reason, "Please select a reason")
        if reason.strip() == OTHER_REASON_NAME:
            if not custom_text or not custom_text.strip():
                raise ValidationError(
                    "custom_text", custom_text, "Please describe the reason"
                )
            self.reason = custom_text.strip()
        else:
            self.reason = reason.strip()
        self.step = RejectStep.QUANTITY
        return self.step

    def confirm_quantity(self, quantity: int | None = None) -> RejectStep:
        """Accept the default quantity, or an edited one up to the job quantity."""
        self._require(RejectStep.QUANTITY, "confirm quantity")
        chosen = self.default_quantity if quantity is None else quantity
        self.quantity = validate_remanufacture_qty(chosen, self.job.quantity)
        self.step = RejectStep.SUMMARY
        return self.step

    def edit(self) -> RejectStep:
        """Go back from the summary to reason selection."""
        self._require(RejectStep.SUMMARY, "edit")
        self.step = RejectStep.REASON
        return self.step

    def submit(self) -> Result[RejectCreated]:
        """
        Create the reject record.

        On failure the wizard stays at SUMMARY so the request can be retried.
        """
        self._require(RejectStep.SUMMARY, "submit")
        result = self._service.create_reject(
            RejectCreate(
                customer_name=self.job.customer_name or "",
                contract_number=self.job.contract_number,
                route_card=self.job.route_card,
                part_number=self.job.part_number or "",
                qty_rejected=self.remaining_balance,
                operator_id=self.operator_id,
                supervisor_id=self.supervisor_id or "",
                reason=self.reason or "",
                remanufacture_qty=self.quantity or 0,
                machine_id=self.machine_id,
                operation_code=self.job.op_code,
            ),
            operator_name=self.operator_name,
            supervisor_name=self.supervisor_name,
        )
        if isinstance(result, Ok):
            self.result = result.value
            self.step = RejectStep.SUBMITTED
        return result

    def cancel(self) -> RejectStep:
        """Abandon the wizard without writing anything."""
        if self.step.is_final:
            raise InvalidTransitionError("cancel", self.step.value)
        self.step = RejectStep.CANCELLED
        return self.step

