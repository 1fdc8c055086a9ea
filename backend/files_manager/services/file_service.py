"""File service: upload, lookup, listing, visibility and content retrieval.

Callers pass an already-resolved user id (see ``core.auth``). Reads are
strict: a failing query propagates. Side writes are best-effort: directory
creation, the content write and the processing enqueue are logged on
failure and never fail the request.

Upload ordering: content is written before the metadata insert, so a
record normally never exists without its bytes. If the write fails the
record is still inserted and content retrieval answers ``Not found``.
"""

import base64
import binascii
import logging
import mimetypes
from dataclasses import dataclass
from pathlib import Path
from typing import Any, List, Optional, Union

from ..exceptions import FolderHasNoContentError, NotFoundError, ValidationError
from ..models.file import FileType, ROOT_PARENT_ID
from ..repositories.file_repository import FileRepository
from ..schemas.file import FileProjection, FileUpload, to_projection
from .job_service import ProcessingDispatcher
from .placement import PlacementPlanner, ensure_directory

logger = logging.getLogger(__name__)

ALLOWED_TYPES = frozenset(t.value for t in FileType)
DEFAULT_CONTENT_TYPE = "application/octet-stream"


@dataclass(frozen=True)
class StoredContent:
    """Location and content type of a record's bytes."""

    path: Path
    media_type: str
    # Accepted for thumbnail variants; not used to pick a file yet.
    size: Optional[str] = None


def normalize_parent_id(value: Union[int, str, None]) -> str:
    """Map every spelling of "no parent" (None, 0, "0", "") to the root id."""
    if value is None:
        return ROOT_PARENT_ID
    text = str(value).strip()
    if text in ("", "0"):
        return ROOT_PARENT_ID
    return text


def parse_page(value: Union[int, str, None]) -> int:
    """Zero-based page number; anything unparsable or negative is page 0."""
    try:
        page = int(value) if value is not None else 0
    except (TypeError, ValueError):
        return 0
    return max(page, 0)


def _text(value: Any) -> Optional[str]:
    """Upload fields arrive untyped; anything but a string is missing."""
    return value if isinstance(value, str) else None


def decode_data(data: str) -> bytes:
    """Decode base64 upload content.

    Embedded whitespace is ignored and missing ``=`` padding is restored,
    so ``aGVsbG8`` and ``aGVsbG8=`` both decode to ``hello``.
    """
    compact = "".join(data.split())
    compact += "=" * (-len(compact) % 4)
    try:
        return base64.b64decode(compact, validate=True)
    except (binascii.Error, ValueError):
        raise ValidationError("Invalid data", field="data")


def guess_content_type(name: str) -> str:
    media_type, _ = mimetypes.guess_type(name)
    return media_type or DEFAULT_CONTENT_TYPE


class FileService:
    """All file and folder operations behind a narrow interface.

    Public methods:
        upload          -- validate, place, store, record, dispatch
        show            -- owner-scoped lookup
        index           -- owner-scoped page of records
        publish         -- make a record public
        unpublish       -- make a record private
        get_content     -- locate bytes, enforcing visibility
    """

    def __init__(
        self,
        file_repo: FileRepository,
        planner: PlacementPlanner,
        dispatcher: ProcessingDispatcher,
    ):
        self.file_repo = file_repo
        self.planner = planner
        self.dispatcher = dispatcher

    # ------------------------------------------------------------------
    # Upload
    # ------------------------------------------------------------------

    def upload(self, user_id: str, upload: FileUpload) -> FileProjection:
        """Create a file, image or folder record for *user_id*.

        Raises:
            ValidationError: missing/invalid name, type or data, or a bad parent.
        """
        name = _text(upload.name)
        file_type = _text(upload.type)
        data = _text(upload.data)

        if not name:
            raise ValidationError("Missing name", field="name")
        if not file_type or file_type not in ALLOWED_TYPES:
            raise ValidationError("Missing type", field="type")
        is_folder = file_type == FileType.FOLDER.value
        if not data and not is_folder:
            raise ValidationError("Missing data", field="data")

        content = None if is_folder else decode_data(data)
        parent_id = normalize_parent_id(upload.parent_id)

        placement = self.planner.plan(parent_id, user_id)
        local_path = placement.local_path

        if is_folder:
            ensure_directory(local_path)
        else:
            self._write_content(local_path, content)

        record = self.file_repo.insert_file(
            user_id=user_id,
            name=name,
            file_type=file_type,
            is_public=bool(upload.is_public),
            parent_id=parent_id,
            local_path=str(local_path),
        )
        logger.info(
            "Stored upload",
            extra={"file_id": record.id, "user_id": user_id, "type": record.type},
        )

        if record.type == FileType.IMAGE.value:
            self.dispatcher.dispatch(user_id, record.id)

        return to_projection(record)

    @staticmethod
    def _write_content(local_path: Path, content: bytes) -> None:
        try:
            local_path.write_bytes(content)
        except OSError as e:
            logger.error(
                "Could not write file content",
                extra={"path": str(local_path), "error": str(e)},
            )

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def show(self, user_id: str, file_id: str) -> FileProjection:
        record = self.file_repo.find_by_id(file_id, user_id=user_id)
        if record is None:
            raise NotFoundError(file_id)
        return to_projection(record)

    def index(
        self,
        user_id: str,
        parent_id: Union[int, str, None] = None,
        page: Union[int, str, None] = 0,
    ) -> List[FileProjection]:
        """List the caller's records, 20 per page.

        ``parent_id`` None lists everything the caller owns, ``0`` only
        top-level records, any other id the children of that folder.
        """
        parent_filter = None if parent_id is None else normalize_parent_id(parent_id)
        records = self.file_repo.list_page(
            owner_id=user_id,
            parent_id=parent_filter,
            page=parse_page(page),
        )
        return [to_projection(r) for r in records]

    # ------------------------------------------------------------------
    # Visibility
    # ------------------------------------------------------------------

    def publish(self, user_id: str, file_id: str) -> FileProjection:
        return self._set_visibility(user_id, file_id, True)

    def unpublish(self, user_id: str, file_id: str) -> FileProjection:
        return self._set_visibility(user_id, file_id, False)

    def _set_visibility(self, user_id: str, file_id: str, is_public: bool) -> FileProjection:
        record = self.file_repo.update_visibility(file_id, user_id, is_public)
        if record is None:
            raise NotFoundError(file_id)
        logger.info(
            "Visibility changed",
            extra={"file_id": file_id, "user_id": user_id, "is_public": is_public},
        )
        return to_projection(record)

    # ------------------------------------------------------------------
    # Content
    # ------------------------------------------------------------------

    def get_content(
        self,
        user_id: Optional[str],
        file_id: str,
        size: Optional[str] = None,
    ) -> StoredContent:
        """Locate the bytes of *file_id* for *user_id* (None = anonymous).

        Private records look missing to everyone but their owner.

        Raises:
            NotFoundError: no record, private and not owned, or bytes missing.
            FolderHasNoContentError: the record is a folder.
        """
        record = self.file_repo.find_by_id(file_id)
        if record is None:
            raise NotFoundError(file_id)
        if not record.is_public and record.user_id != user_id:
            raise NotFoundError(file_id)
        if record.is_folder:
            raise FolderHasNoContentError()

        path = Path(record.local_path) if record.local_path else None
        if path is None or not path.is_file():
            logger.warning("Content missing from storage", extra={"file_id": file_id})
            raise NotFoundError(file_id)

        return StoredContent(path=path, media_type=guess_content_type(record.name), size=size)
