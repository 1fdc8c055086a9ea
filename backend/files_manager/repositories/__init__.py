"""Data access repositories."""

from .base import BaseRepository
from .file_repository import FileRepository, PAGE_SIZE
from .user_repository import UserRepository

__all__ = [
    "BaseRepository",
    "FileRepository",
    "PAGE_SIZE",
    "UserRepository",
]
