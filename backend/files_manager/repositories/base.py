"""Base repository with shared get-by-ID patterns.

Subclasses specify ``model_class`` and ``id_column``; the base provides
point lookups with optional equality filters (e.g. scoping by owner).
Override ``_base_query()`` to apply default filters.
"""

from typing import Any, TypeVar, Generic, Optional, Type
from sqlalchemy.orm import Session, Query

from ..database import Base

ModelT = TypeVar("ModelT", bound=Base)


class BaseRepository(Generic[ModelT]):
    """Shared repository logic for SQLAlchemy models.

    Class variables to set in subclasses:
        model_class:     The SQLAlchemy model (e.g., FileRecord)
        id_column:       Name of the primary-key column (default "id")
    """

    model_class: Type[ModelT]
    id_column: str = "id"

    def __init__(self, db: Session):
        self.db = db

    def _base_query(self) -> Query:
        return self.db.query(self.model_class)

    def get_by_id_optional(self, entity_id: str, **filters: Any) -> Optional[ModelT]:
        """Get entity by primary key, or None if not found.

        Extra keyword arguments become equality filters, so
        ``get_by_id_optional(id, user_id=owner)`` only matches the owner's row.
        """
        col = getattr(self.model_class, self.id_column)
        return self._base_query().filter(col == entity_id).filter_by(**filters).first()
