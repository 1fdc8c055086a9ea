"""Business logic services."""

from .file_service import FileService
from .job_service import JobService, ProcessingDispatcher
from .placement import PlacementPlanner
from .session_store import SessionStore

__all__ = [
    "FileService",
    "JobService",
    "ProcessingDispatcher",
    "PlacementPlanner",
    "SessionStore",
]
