"""File schemas: upload payload and the client-facing projection.

Every read path returns ``FileProjection`` built by ``to_projection``;
no other fields of a record (notably ``local_path``) ever leave the API.
Field names are camelCase on the wire.
"""

from typing import Any, Optional, Union

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from ..models.file import FileRecord, ROOT_PARENT_ID

_CAMEL = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class FileUpload(BaseModel):
    """Body of ``POST /files``.

    Everything is optional and untyped at the schema level so that the
    service answers with its own messages (``Missing name`` and so on)
    instead of a 422. A non-string name, type or data counts as missing.
    """

    model_config = _CAMEL

    name: Optional[Any] = None
    type: Optional[Any] = None
    parent_id: Optional[Union[int, str]] = None
    is_public: Optional[bool] = False
    data: Optional[Any] = None


class FileProjection(BaseModel):
    """Externally visible subset of a file record."""

    model_config = _CAMEL

    id: str
    user_id: str
    name: str
    type: str
    is_public: bool
    # 0 for top-level records, otherwise the parent folder's id
    parent_id: Union[int, str]


def to_projection(record: FileRecord) -> FileProjection:
    parent_id = record.parent_id
    return FileProjection(
        id=record.id,
        user_id=record.user_id,
        name=record.name,
        type=record.type,
        is_public=bool(record.is_public),
        parent_id=0 if parent_id in (None, ROOT_PARENT_ID) else parent_id,
    )
