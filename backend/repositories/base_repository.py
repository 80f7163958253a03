"""
Base repository providing common query operations.
"""

from typing import Generic, TypeVar, Type
from sqlalchemy.orm import Query, Session

T = TypeVar('T')


class BaseRepository(Generic[T]):
    """
    Generic base repository providing common query operations.
    All specific repositories should inherit from this class.
    """

    def __init__(self, db: Session, model: Type[T]):
        """
        Initialize the repository.

        Args:
            db: SQLAlchemy database session
            model: SQLAlchemy model class
        """
        self.db = db
        self.model = model

    def query(self) -> Query:
        """Base query over the model"""
        return self.db.query(self.model)

    def count(self) -> int:
        """
        Count total records.

        Returns:
            Total number of records
        """
        return self.query().count()
