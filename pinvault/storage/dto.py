# pinvault/storage/dto.py
import json
from pydantic import BaseModel, Field, field_validator
from typing import Any, Dict, Optional


class FileRecord(BaseModel):
    """
    A standardized Data Transfer Object for a pinned file, abstracting away
    the provider's listing row format.
    """

    id: str
    cid: str
    name: str = "Unnamed"
    size: int = 0
    created_at: str = ""
    mime_type: Optional[str] = None
    tags: Dict[str, Any] = Field(default_factory=dict)

    @field_validator("tags", mode="before")
    @classmethod
    def coerce_tags(cls, value):
        # Malformed tag bags (null, a list, undecodable JSON) become empty.
        if isinstance(value, str):
            try:
                value = json.loads(value)
            except ValueError:
                return {}
        if not isinstance(value, dict):
            return {}
        return {str(k): v for k, v in value.items()}

    @field_validator("name", mode="before")
    @classmethod
    def default_name(cls, value):
        return value or "Unnamed"

    @field_validator("size", mode="before")
    @classmethod
    def default_size(cls, value):
        return value or 0

    @field_validator("created_at", mode="before")
    @classmethod
    def default_created_at(cls, value):
        return value or ""

    @classmethod
    def from_api(cls, row: Dict[str, Any]) -> "FileRecord":
        """Builds a record from a Pinata v3 file row."""
        return cls(
            id=str(row.get("id") or ""),
            cid=str(row.get("cid") or ""),
            name=row.get("name"),
            size=row.get("size"),
            created_at=row.get("created_at"),
            mime_type=row.get("mime_type"),
            tags=row.get("keyvalues"),
        )


class VirtualMeta(BaseModel):
    """Virtual-folder descriptor derived from a record's tags."""

    folder: str = "root"
    path: str
    type: str = "file"
    uploaded_at: str = ""


class UploadItem(BaseModel):
    """
    One client-selected file. `relative_path` carries the directory-structure
    hint (e.g. "album/a.png") when the file came from a folder selection.
    """

    filename: str
    content: bytes
    relative_path: Optional[str] = None

    @property
    def size(self) -> int:
        return len(self.content)

    @property
    def directory_hint(self) -> Optional[str]:
        if self.relative_path and "/" in self.relative_path.strip("/"):
            return self.relative_path.strip("/")
        return None
