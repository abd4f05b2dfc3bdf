import os

os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("ENABLE_METRICS", "false")

from collections.abc import Generator

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.engine import Engine
from sqlalchemy.pool import StaticPool
from sqlmodel import Session, SQLModel, create_engine

from shopfloor.api.deps import get_notifier, get_session_registry, get_uow_factory
from shopfloor.application.services import (
    EfficiencyLogger,
    JobCompletionService,
    JobLookupService,
    LogLedger,
    RejectService,
    SessionRegistry,
    TerminalAuthenticationService,
    TerminalStateMachine,
    UserAuthenticationService,
)
from shopfloor.core.config import settings
from shopfloor.core.db import create_tables, init_db
from shopfloor.core.unit_of_work import UnitOfWorkFactory, unit_of_work_factory
from shopfloor.domain.terminal.entities import TerminalSession
from shopfloor.main import app
from shopfloor.tests.factories import (
    JobOperationFactory,
    TerminalFactory,
    UserFactory,
)
from shopfloor.tests.fakes import RecordingNotifier


@pytest.fixture
def engine() -> Generator[Engine, None, None]:
    """Fresh in-memory database per test."""
    test_engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    create_tables(test_engine)
    with Session(test_engine) as session:
        init_db(session)
    yield test_engine
    SQLModel.metadata.drop_all(test_engine)
    test_engine.dispose()


@pytest.fixture
def uow_factory(engine: Engine) -> UnitOfWorkFactory:
    return unit_of_work_factory(engine)


@pytest.fixture
def notifier() -> RecordingNotifier:
    return RecordingNotifier()


@pytest.fixture
def ledger(uow_factory) -> LogLedger:
    return LogLedger(uow_factory)


@pytest.fixture
def efficiency_logger(uow_factory) -> EfficiencyLogger:
    return EfficiencyLogger(uow_factory)


@pytest.fixture
def lookup(uow_factory, notifier) -> JobLookupService:
    return JobLookupService(uow_factory, notifier)


@pytest.fixture
def completion(uow_factory) -> JobCompletionService:
    return JobCompletionService(uow_factory)


@pytest.fixture
def reject_service(uow_factory, notifier) -> RejectService:
    return RejectService(uow_factory, notifier)


@pytest.fixture
def authenticator(uow_factory) -> UserAuthenticationService:
    return UserAuthenticationService(uow_factory)


@pytest.fixture
def terminal_authenticator(uow_factory) -> TerminalAuthenticationService:
    return TerminalAuthenticationService(uow_factory)


@pytest.fixture
def machine(
    uow_factory,
    authenticator,
    ledger,
    efficiency_logger,
    lookup,
    completion,
    reject_service,
) -> TerminalStateMachine:
    return TerminalStateMachine(
        uow_factory,
        authenticator,
        ledger,
        efficiency_logger,
        lookup,
        completion,
        reject_service,
        settings,
    )


@pytest.fixture
def staff(engine: Engine) -> dict[str, str]:
    """One user per role plus an inactive one, keyed by role."""
    users = {
        "setter": UserFactory.create(engine, "S100", "Sam Setter", can_setup=True),
        "inspector": UserFactory.create(
            engine, "I200", "Ivy Inspector", can_inspect=True
        ),
        "operator": UserFactory.create(
            engine, "O300", "Otto Operator", can_operate=True
        ),
        "supervisor": UserFactory.create(
            engine, "V400", "Vera Supervisor", can_remanufacture=True
        ),
        "inactive": UserFactory.create(
            engine, "X500", "Xander Former", can_operate=True, is_active=False
        ),
    }
    return {role: user.employee_id for role, user in users.items()}


@pytest.fixture
def job(engine: Engine):
    """A 10-piece job on operation 20 with 30 min setup and 60 min run planned."""
    return JobOperationFactory.create(
        engine,
        route_card="12345",
        contract_number="C900",
        op_code="20",
        quantity=10,
        planned_setup_time=30,
        planned_run_time=60,
    )


@pytest.fixture
def terminal(engine: Engine):
    return TerminalFactory.create(
        engine, "T1", "Lathe 1", operation_code="20", password="secret"
    )


@pytest.fixture
def session_at_terminal() -> TerminalSession:
    return TerminalSession(terminal_id="T1", terminal_name="Lathe 1", operation_code="20")


@pytest.fixture
def client(uow_factory, notifier) -> Generator[TestClient, None, None]:
    """API client bound to the test database; lifespan is not run."""
    registry = SessionRegistry()
    app.dependency_overrides[get_uow_factory] = lambda: uow_factory
    app.dependency_overrides[get_notifier] = lambda: notifier
    app.dependency_overrides[get_session_registry] = lambda: registry
    yield TestClient(app)
    app.dependency_overrides.clear()
