"""
Reject Service and Reject Flow Tests

Remanufacture requests are stored first and emailed second. The wizard
only writes on submit.
"""

import pytest

from shopfloor.application.services import RejectFlow, RejectService, RejectStep
from shopfloor.application.services.reject_service import validate_remanufacture_qty
from shopfloor.core.config import settings
from shopfloor.domain.shared.exceptions import (
    AuthenticationError,
    ConflictError,
    InvalidTransitionError,
    NotFoundError,
    ValidationError,
)
from shopfloor.models import RejectCreate, RejectReasonCreate
from shopfloor.tests.factories import JobOperationFactory, RejectReasonFactory
from shopfloor.tests.fakes import RecordingNotifier


def reject_data(**overrides) -> RejectCreate:
    data = {
        "customer_name": "Acme Corp",
        "contract_number": "C900",
        "route_card": "12345",
        "part_number": "PART-100A",
        "qty_rejected": 3,
        "operator_id": "O300",
        "supervisor_id": "V400",
        "reason": "Scrap",
        "remanufacture_qty": 3,
        "machine_id": "T1",
        "operation_code": "20",
    }
    data.update(overrides)
    return RejectCreate(**data)


class TestCreateReject:
    def test_stores_and_emails(self, reject_service, notifier, job):
        created = reject_service.create_reject(
            reject_data(), operator_name="Otto Operator", supervisor_name="Vera"
        ).unwrap()

        assert created.reject_id is not None
        assert created.email_sent
        assert created.message_id == "rmf_test"
        notice = notifier.remanufacture[0]
        assert notice.reject_id == created.reject_id
        assert notice.operator_name == "Otto Operator"
        assert notice.remanufacture_qty == 3

    def test_email_failure_keeps_record(self, uow_factory, job):
        service = RejectService(uow_factory, RecordingNotifier(succeed=False))

        created = service.create_reject(reject_data()).unwrap()

        assert not created.email_sent
        assert [r.id for r in service.list_rejects().unwrap()] == [created.reject_id]

    @pytest.mark.parametrize("field", ["reason", "supervisor_id", "machine_id"])
    def test_required_fields(self, reject_service, notifier, field):
        result = reject_service.create_reject(reject_data(**{field: " "}))

        assert isinstance(result.error, ValidationError)
        assert notifier.remanufacture == []

    def test_quantity_cannot_exceed_job_quantity(self, reject_service, notifier, job):
        result = reject_service.create_reject(
            reject_data(qty_rejected=4, remanufacture_qty=job.quantity + 1)
        )

        assert isinstance(result.error, ValidationError)
        assert "cannot exceed job quantity (10)" in result.error.message
        assert reject_service.list_rejects().unwrap() == []
        assert notifier.remanufacture == []

    def test_full_job_quantity_is_accepted(self, reject_service, job):
        created = reject_service.create_reject(
            reject_data(remanufacture_qty=job.quantity)
        ).unwrap()

        assert created.reject_id is not None

    def test_unknown_job_operation(self, reject_service, job):
        result = reject_service.create_reject(reject_data(operation_code="99"))

        assert isinstance(result.error, NotFoundError)
        assert reject_service.list_rejects().unwrap() == []


class TestListRejects:
    def test_filters_and_newest_first(self, reject_service, job, engine):
        JobOperationFactory.create(engine, route_card="555")
        first = reject_service.create_reject(reject_data()).unwrap()
        second = reject_service.create_reject(reject_data(route_card="555")).unwrap()

        assert [r.id for r in reject_service.list_rejects().unwrap()] == [
            second.reject_id,
            first.reject_id,
        ]
        by_card = reject_service.list_rejects(route_card="555").unwrap()
        assert [r.id for r in by_card] == [second.reject_id]
        by_id = reject_service.list_rejects(reject_id=first.reject_id).unwrap()
        assert [r.route_card for r in by_id] == ["12345"]


class TestReasons:
    def test_active_reasons_sorted_with_other_last(self, reject_service, engine):
        RejectReasonFactory.create_for_operation(
            engine, "20", [("Scrap", True), ("Damaged", True), ("Retired", False)]
        )

        names = [r.name for r in reject_service.list_reasons("20").unwrap()]

        assert names == ["Damaged", "Scrap", "Other"]

    def test_unknown_operation_offers_only_other(self, reject_service):
        reasons = reject_service.list_reasons("99").unwrap()

        assert [r.name for r in reasons] == ["Other"]
        assert reasons[0].id != settings.OTHER_REASON_ID

    def test_create_reason(self, reject_service):
        reason = reject_service.create_reason(
            RejectReasonCreate(name="Porosity", description="Casting voids")
        ).unwrap()

        assert reason.is_active
        duplicate = reject_service.create_reason(RejectReasonCreate(name="Porosity"))
        assert isinstance(duplicate.error, ConflictError)


class TestValidateRemanufactureQty:
    @pytest.mark.parametrize("qty", [None, 0, -1, 11, 2.5])
    def test_invalid(self, qty):
        with pytest.raises(ValidationError):
            validate_remanufacture_qty(qty, 10)

    def test_bounds(self):
        assert validate_remanufacture_qty(1, 10) == 1
        assert validate_remanufacture_qty(10, 10) == 10


@pytest.fixture
def flow(job, staff, authenticator, reject_service) -> RejectFlow:
    return RejectFlow(
        job=job,
        remaining_balance=4,
        operator_id=staff["operator"],
        machine_id="T1",
        authenticator=authenticator,
        service=reject_service,
        operator_name="Otto Operator",
    )


class TestRejectFlow:
    """The wizard moves one step at a time and writes only on submit."""

    def test_happy_path(self, flow, staff, reject_service, notifier):
        flow.confirm()
        flow.authorize(staff["supervisor"])
        assert [r.name for r in flow.reasons().unwrap()][-1] == "Other"
        flow.select_reason("Scrap")
        flow.confirm_quantity()
        assert flow.quantity == 4

        created = flow.submit().unwrap()

        assert flow.step == RejectStep.SUBMITTED
        assert flow.result == created
        stored = reject_service.list_rejects().unwrap()[0]
        assert stored.qty_rejected == 4
        assert stored.remanufacture_qty == 4
        assert stored.supervisor_id == staff["supervisor"]
        assert notifier.remanufacture[0].supervisor_name == "Vera Supervisor"

    def test_declining_cancels_without_writing(self, flow, reject_service):
        assert flow.confirm(proceed=False) == RejectStep.CANCELLED
        assert reject_service.list_rejects().unwrap() == []

    def test_unauthorized_supervisor_stays_at_authorization(self, flow, staff):
        flow.confirm()

        with pytest.raises(AuthenticationError, match="can_remanufacture") as exc:
            flow.authorize(staff["operator"])

        assert exc.value.details["forbidden"] is True
        assert flow.step == RejectStep.AUTHORIZATION

    def test_other_requires_text(self, flow, staff):
        flow.confirm()
        flow.authorize(staff["supervisor"])

        with pytest.raises(ValidationError):
            flow.select_reason("Other")
        flow.select_reason("Other", "Chatter marks")

        assert flow.reason == "Chatter marks"

    def test_quantity_cannot_exceed_job_quantity(self, flow, staff):
        flow.confirm()
        flow.authorize(staff["supervisor"])
        flow.select_reason("Scrap")

        with pytest.raises(ValidationError):
            flow.confirm_quantity(11)
        assert flow.step == RejectStep.QUANTITY
        flow.confirm_quantity(10)
        assert flow.quantity == 10

    def test_edit_returns_to_reason(self, flow, staff):
        flow.confirm()
        flow.authorize(staff["supervisor"])
        flow.select_reason("Scrap")
        flow.confirm_quantity()

        assert flow.edit() == RejectStep.REASON
        flow.select_reason("Damaged")
        flow.confirm_quantity(2)
        flow.submit().unwrap()

    def test_steps_out_of_order_are_rejected(self, flow):
        with pytest.raises(InvalidTransitionError):
            flow.submit()

    def test_cancel_after_submit_is_rejected(self, flow, staff):
        flow.confirm()
        flow.authorize(staff["supervisor"])
        flow.select_reason("Scrap")
        flow.confirm_quantity()
        flow.submit().unwrap()

        with pytest.raises(InvalidTransitionError):
            flow.cancel()
