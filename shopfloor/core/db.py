from sqlalchemy.engine import Engine
from sqlmodel import Session, SQLModel, create_engine, select

from shopfloor.core.config import settings
from shopfloor.models import RejectReason

engine_kwargs: dict = {}

# SQLite (tests, local demos) uses its own pool implementation
if not settings.SQLALCHEMY_DATABASE_URI.startswith("sqlite"):
    engine_kwargs = {
        "pool_pre_ping": settings.DATABASE_POOL_PRE_PING,
        "pool_recycle": settings.DATABASE_POOL_RECYCLE,
        "pool_size": settings.DATABASE_POOL_SIZE,
        "max_overflow": 20,
    }

engine = create_engine(
    settings.SQLALCHEMY_DATABASE_URI, echo=settings.LOG_SQL, **engine_kwargs
)


# make sure all SQLModel models are imported (shopfloor.models) before
# initializing the DB, otherwise the metadata is incomplete


def create_tables(bind: Engine | None = None) -> None:
    SQLModel.metadata.create_all(bind or engine)


def init_db(session: Session) -> None:
    """Seed reference data needed by the reject flow."""
    other = session.exec(
        select(RejectReason).where(RejectReason.name == "Other")
    ).first()
    if not other:
        session.add(
            RejectReason(
                name="Other",
                description="Reason not listed",
                is_active=True,
            )
        )
        session.commit()
