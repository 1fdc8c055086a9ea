"""File record model.

Files, images and folders share one table. Records form a forest: a
``parent_id`` of ``"0"`` marks a top-level record, anything else is the id
of a folder record owned by the same user.
"""

from enum import Enum

from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Index, String, Text
from sqlalchemy.sql import func
from ..database import Base
from .ids import new_id

# Virtual root of the forest.
ROOT_PARENT_ID = "0"


class FileType(str, Enum):
    FILE = "file"
    FOLDER = "folder"
    IMAGE = "image"


class FileRecord(Base):
    """Metadata for one uploaded file, image or folder.

    ``local_path`` is the content blob for files and images and the
    directory itself for folders. ``user_id`` is set once at creation;
    ``is_public`` is the only column that changes afterwards.
    """

    __tablename__ = "files"
    __table_args__ = (
        Index("ix_files_user_parent", "user_id", "parent_id"),
    )

    id = Column(String(32), primary_key=True, default=new_id)
    user_id = Column(String(32), ForeignKey("users.user_id"), nullable=False)
    name = Column(String(255), nullable=False)
    type = Column(String(10), nullable=False)
    is_public = Column(Boolean, nullable=False, default=False)

    # Not a foreign key: "0" is the virtual root and out-of-band deletes
    # may leave a dangling reference.
    parent_id = Column(String(32), nullable=False, default=ROOT_PARENT_ID)
    local_path = Column(Text, nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())

    @property
    def is_folder(self) -> bool:
        return self.type == FileType.FOLDER.value
