"""File endpoints.

Endpoints are thin; FileService owns validation, placement, storage and
access checks. Every endpoint except content retrieval requires a session
token; content retrieval falls back to anonymous access for public files.
"""

from typing import List, Optional

from fastapi import APIRouter, Depends, Query, Request
from fastapi.responses import FileResponse
from sqlalchemy.orm import Session

from ..core.auth import AuthContext
from ..core.rate_limit import rate_limited_auth, rate_limited_optional_auth
from ..core.config import settings
from ..database import get_db
from ..repositories.file_repository import FileRepository
from ..schemas.file import FileProjection, FileUpload
from ..services import FileService, JobService, PlacementPlanner, ProcessingDispatcher

router = APIRouter(prefix="/files", tags=["files"])


def get_storage_root(request: Request) -> str:
    """Content root directory chosen at startup."""
    return getattr(request.app.state, "storage_root", settings.folder_path)


def get_file_service(
    db: Session = Depends(get_db),
    storage_root: str = Depends(get_storage_root),
) -> FileService:
    file_repo = FileRepository(db)
    return FileService(
        file_repo=file_repo,
        planner=PlacementPlanner(file_repo, storage_root),
        dispatcher=ProcessingDispatcher(JobService(db)),
    )


@router.post("", response_model=FileProjection, status_code=201)
def upload_file(
    upload: FileUpload,
    auth: AuthContext = Depends(rate_limited_auth),
    service: FileService = Depends(get_file_service),
):
    """Create a file, image or folder. Images are queued for processing."""
    return service.upload(auth.user_id, upload)


@router.get("", response_model=List[FileProjection])
def list_files(
    parent_id: Optional[str] = Query(None, alias="parentId"),
    page: Optional[str] = Query(None),
    auth: AuthContext = Depends(rate_limited_auth),
    service: FileService = Depends(get_file_service),
):
    """List the caller's records, 20 per page (zero-based ``page``)."""
    return service.index(auth.user_id, parent_id=parent_id, page=page)


@router.get("/{file_id}", response_model=FileProjection)
def show_file(
    file_id: str,
    auth: AuthContext = Depends(rate_limited_auth),
    service: FileService = Depends(get_file_service),
):
    return service.show(auth.user_id, file_id)


@router.put("/{file_id}/publish", response_model=FileProjection)
def publish_file(
    file_id: str,
    auth: AuthContext = Depends(rate_limited_auth),
    service: FileService = Depends(get_file_service),
):
    return service.publish(auth.user_id, file_id)


@router.put("/{file_id}/unpublish", response_model=FileProjection)
def unpublish_file(
    file_id: str,
    auth: AuthContext = Depends(rate_limited_auth),
    service: FileService = Depends(get_file_service),
):
    return service.unpublish(auth.user_id, file_id)


@router.get("/{file_id}/data", response_class=FileResponse)
def get_file_data(
    file_id: str,
    size: Optional[str] = Query(None),
    auth: Optional[AuthContext] = Depends(rate_limited_optional_auth),
    service: FileService = Depends(get_file_service),
):
    """Stream a record's bytes with a content type guessed from its name."""
    content = service.get_content(auth.user_id if auth else None, file_id, size=size)
    return FileResponse(content.path, media_type=content.media_type)
