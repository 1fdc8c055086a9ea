"""File record repository.

Thin typed access to the ``files`` table. No validation happens here;
``FileService`` decides what may be written.
"""

from typing import List, Optional

from ..models.file import FileRecord
from .base import BaseRepository

# Fixed page size for listings.
PAGE_SIZE = 20


class FileRepository(BaseRepository[FileRecord]):
    """Repository for file and folder records."""

    model_class = FileRecord

    def insert_file(
        self,
        user_id: str,
        name: str,
        file_type: str,
        is_public: bool,
        parent_id: str,
        local_path: Optional[str],
    ) -> FileRecord:
        """Insert one record and return it with its generated id."""
        record = FileRecord(
            user_id=user_id,
            name=name,
            type=file_type,
            is_public=is_public,
            parent_id=parent_id,
            local_path=local_path,
        )
        self.db.add(record)
        self.db.commit()
        self.db.refresh(record)
        return record

    def find_by_id(self, file_id: str, **filters) -> Optional[FileRecord]:
        """Point lookup, optionally scoped (e.g. ``user_id=...``)."""
        return self.get_by_id_optional(file_id, **filters)

    def update_visibility(self, file_id: str, owner_id: str, is_public: bool) -> Optional[FileRecord]:
        """Set ``is_public`` on the owner's record in one UPDATE statement.

        Returns the updated record, or None when no row matched (missing
        or owned by someone else).
        """
        matched = (
            self._base_query()
            .filter(FileRecord.id == file_id, FileRecord.user_id == owner_id)
            .update({FileRecord.is_public: is_public}, synchronize_session=False)
        )
        self.db.commit()
        if not matched:
            return None
        record = self.find_by_id(file_id, user_id=owner_id)
        if record is not None:
            self.db.refresh(record)
        return record

    def list_page(
        self,
        owner_id: Optional[str] = None,
        parent_id: Optional[str] = None,
        page: int = 0,
    ) -> List[FileRecord]:
        """Return one page of records in insertion order.

        ``owner_id`` and ``parent_id`` are equality filters applied only when
        given. ``page`` is zero-based; pages past the end are empty.
        """
        query = self._base_query()
        if owner_id is not None:
            query = query.filter(FileRecord.user_id == owner_id)
        if parent_id is not None:
            query = query.filter(FileRecord.parent_id == parent_id)
        return (
            query.order_by(FileRecord.id.asc())
            .offset(max(page, 0) * PAGE_SIZE)
            .limit(PAGE_SIZE)
            .all()
        )
