"""Database models."""

from .user import User
from .file import FileRecord, FileType, ROOT_PARENT_ID
from .processing_job import ProcessingJob

__all__ = [
    "User",
    "FileRecord", "FileType", "ROOT_PARENT_ID",
    "ProcessingJob",
]
