"""
Base Repository - Shared data access operations for the plugin's entities.
"""
from typing import Generic, TypeVar, Optional, Type
from sqlalchemy.orm import Session

from billing_contracts.models import Base

T = TypeVar('T', bound=Base)


class BaseRepository(Generic[T]):
    """
    Base repository holding the session and the managed model class.

    Type Parameters:
        T: The SQLAlchemy model type this repository manages
    """

    def __init__(self, session: Session, model_class: Type[T]):
        """
        Initialize the repository.

        Args:
            session: SQLAlchemy database session
            model_class: The model class this repository manages
        """
        self.session = session
        self.model_class = model_class

    def get_by_id(self, entity_id: int) -> Optional[T]:
        """
        Retrieve an entity by its primary key.

        Args:
            entity_id: Primary key value

        Returns:
            The entity if found, None otherwise
        """
        return self.session.query(self.model_class).filter(
            self.model_class.id == entity_id
        ).first()

    def add(self, entity: T) -> T:
        """Add a new entity to the session."""
        self.session.add(entity)
        return entity

    def delete(self, entity: T) -> None:
        """Mark an entity for deletion."""
        self.session.delete(entity)

    def flush(self) -> None:
        """Flush pending changes to the database."""
        self.session.flush()
