"""
Base repository pattern implementation.

Repositories are the data-access half of the hierarchy store: they read and
write rows but make no authorization decisions.
"""

from abc import ABC
from typing import TypeVar, Generic, Optional, Dict, Any, Type
from sqlalchemy.orm import Session
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy import inspect

# Type variable for generic entity type
T = TypeVar('T')


class RepositoryError(Exception):
    """Base exception for repository operations."""
    pass


class NotFoundError(RepositoryError):
    """Exception raised when entity is not found."""

    def __init__(self, entity_type: str, entity_id: Any):
        super().__init__(f"{entity_type} with id {entity_id} not found")
        self.entity_type = entity_type
        self.entity_id = entity_id


class DuplicateError(RepositoryError):
    """Exception raised when attempting to create duplicate entity."""

    def __init__(self, entity_type: str, criteria: Dict[str, Any]):
        super().__init__(f"{entity_type} already exists with criteria: {criteria}")
        self.entity_type = entity_type
        self.criteria = criteria


class BaseRepository(ABC, Generic[T]):
    """
    Abstract base repository providing common database operations.
    """

    def __init__(self, db: Session, model: Type[T]):
        """
        Initialize repository with database session and model class.

        Args:
            db: SQLAlchemy database session
            model: SQLAlchemy model class
        """
        self.db = db
        self.model = model

    def get_by_id(self, entity_id: Any) -> T:
        """
        Get entity by ID.

        Raises:
            NotFoundError: If entity not found
        """
        entity = self.get_by_id_optional(entity_id)
        if entity is None:
            raise NotFoundError(self.model.__name__, entity_id)
        return entity

    def get_by_id_optional(self, entity_id: Any) -> Optional[T]:
        """Get entity by ID, returning None if not found."""
        return self.db.get(self.model, entity_id)

    def create(self, entity: T) -> T:
        """
        Create a new entity.

        Args:
            entity: Entity instance to create

        Returns:
            Created entity with updated fields (e.g., ID)

        Raises:
            DuplicateError: If entity violates unique constraints
            RepositoryError: If database operation fails
        """
        try:
            self.db.add(entity)
            self.db.commit()
            self.db.refresh(entity)
            return entity
        except IntegrityError:
            self.db.rollback()
            raise DuplicateError(
                self.model.__name__,
                self._extract_entity_dict(entity)
            )
        except SQLAlchemyError as e:
            self.db.rollback()
            raise RepositoryError(f"Failed to create {self.model.__name__}: {str(e)}")

    def find_one_by(self, **criteria) -> Optional[T]:
        """Find single entity by criteria."""
        query = self.db.query(self.model)

        for key, value in criteria.items():
            if hasattr(self.model, key):
                query = query.filter(getattr(self.model, key) == value)

        return query.first()

    def _extract_entity_dict(self, entity: T) -> Dict[str, Any]:
        mapper = inspect(self.model)
        return {
            column.key: getattr(entity, column.key, None)
            for column in mapper.column_attrs
        }
