"""
Base repository implementation providing generic persistence operations.

Repositories flush into the session they were given and leave commit or
rollback to the unit of work that owns it. Storage failures surface as
PersistenceError, duplicate keys as ConflictError.
"""

from abc import ABC, abstractmethod
from typing import Any, Generic, TypeVar

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlmodel import Session, SQLModel

from shopfloor.domain.shared.exceptions import (
    ConflictError,
    NotFoundError,
    PersistenceError,
)

# Type variables for generic repository
EntityType = TypeVar("EntityType", bound=SQLModel)
CreateType = TypeVar("CreateType", bound=SQLModel)


class BaseRepository(Generic[EntityType, CreateType], ABC):
    """
    Base repository class providing generic persistence operations.

    Concrete repositories inherit from this class and provide the
    entity_class property.
    """

    def __init__(self, session: Session):
        """
        Initialize repository with database session.

        Args:
            session: SQLModel database session owned by a unit of work
        """
        self.session = session

    @property
    @abstractmethod
    def entity_class(self) -> type[EntityType]:
        """Return the SQLModel entity class managed by this repository."""
        pass

    def _build(self, entity_data: CreateType | dict[str, Any] | EntityType) -> EntityType:
        if isinstance(entity_data, self.entity_class):
            return entity_data
        if isinstance(entity_data, dict):
            return self.entity_class(**entity_data)
        return self.entity_class(**entity_data.model_dump())

    def create(self, entity_data: CreateType | dict[str, Any]) -> EntityType:
        """
        Create a new entity.

        Args:
            entity_data: Data for creating the entity

        Returns:
            Created entity with its identity assigned

        Raises:
            ConflictError: If a unique constraint rejects the row
            PersistenceError: If database operation fails
        """
        entity = self._build(entity_data)
        try:
            self.session.add(entity)
            self.session.flush()
            self.session.refresh(entity)
            return entity

        except IntegrityError as e:
            raise ConflictError(
                f"{self.entity_class.__name__} already exists",
                {"reason": str(e.orig)},
            ) from e
        except SQLAlchemyError as e:
            raise PersistenceError(
                f"Database error during create: {e}", "create"
            ) from e

    def get_by_id(self, entity_id: int) -> EntityType | None:
        """
        Get entity by ID.

        Raises:
            PersistenceError: If database operation fails
        """
        try:
            return self.session.get(self.entity_class, entity_id)
        except SQLAlchemyError as e:
            raise PersistenceError(
                f"Database error during get_by_id: {e}", "get_by_id"
            ) from e

    def get_by_id_required(self, entity_id: int) -> EntityType:
        """
        Get entity by ID, raising exception if not found.

        Raises:
            NotFoundError: If entity not found
            PersistenceError: If database operation fails
        """
        entity = self.get_by_id(entity_id)
        if entity is None:
            raise NotFoundError(self.entity_class.__name__, entity_id)
        return entity

    def save(self, entity: EntityType) -> EntityType:
        """
        Flush changes made to a loaded entity.

        Raises:
            PersistenceError: If database operation fails
        """
        try:
            self.session.add(entity)
            self.session.flush()
            self.session.refresh(entity)
            return entity
        except IntegrityError as e:
            raise ConflictError(
                f"{self.entity_class.__name__} violates a unique constraint",
                {"reason": str(e.orig)},
            ) from e
        except SQLAlchemyError as e:
            raise PersistenceError(f"Database error during save: {e}", "save") from e

    def _all(self, statement) -> list[EntityType]:
        try:
            return list(self.session.exec(statement).all())
        except SQLAlchemyError as e:
            raise PersistenceError(f"Database error during query: {e}", "query") from e

    def _first(self, statement) -> EntityType | None:
        try:
            return self.session.exec(statement).first()
        except SQLAlchemyError as e:
            raise PersistenceError(f"Database error during query: {e}", "query") from e
