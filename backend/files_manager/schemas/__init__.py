"""Pydantic schemas for API validation."""

from .auth import TokenResponse
from .file import FileUpload, FileProjection, to_projection

__all__ = [
    "TokenResponse",
    "FileUpload",
    "FileProjection",
    "to_projection",
]
