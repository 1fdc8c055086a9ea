"""Placement planner: where new content lives on disk.

Top-level records go straight under the storage root; records inside a
folder go under that folder's directory, so the directory tree mirrors the
logical tree. Filenames are random and never derived from the display name.
"""

import logging
import uuid
from dataclasses import dataclass
from pathlib import Path

from ..exceptions import ParentNotFoundError, ParentNotAFolderError
from ..models.file import ROOT_PARENT_ID
from ..repositories.file_repository import FileRepository

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Placement:
    """Resolved storage location for one upload."""

    directory: Path
    filename: str

    @property
    def local_path(self) -> Path:
        return self.directory / self.filename


def ensure_directory(directory: Path) -> bool:
    """Create *directory* (and parents) if needed.

    Returns False and logs when creation fails; an existing directory is
    success.
    """
    try:
        directory.mkdir(parents=True, exist_ok=True)
        return True
    except OSError as e:
        logger.error(
            "Could not create storage directory",
            extra={"directory": str(directory), "error": str(e)},
        )
        return False


class PlacementPlanner:
    """Compute the directory and filename for a new record."""

    def __init__(self, file_repo: FileRepository, root_directory: str):
        self.file_repo = file_repo
        self.root_directory = Path(root_directory)

    def plan(self, parent_id: str, owner_id: str) -> Placement:
        """Resolve the target directory for a child of *parent_id*.

        Raises:
            ParentNotFoundError: parent missing or owned by another user.
            ParentNotAFolderError: parent is a file or image.
        """
        if parent_id == ROOT_PARENT_ID:
            directory = self.root_directory
        else:
            parent = self.file_repo.find_by_id(parent_id, user_id=owner_id)
            if parent is None:
                raise ParentNotFoundError()
            if not parent.is_folder:
                raise ParentNotAFolderError()
            directory = Path(parent.local_path) if parent.local_path else self.root_directory

        ensure_directory(directory)
        return Placement(directory=directory, filename=str(uuid.uuid4()))
