# uploads.py
import time
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from .exceptions import InvalidRequestError, UploadTooLargeError
from .folders import ROOT_FOLDER, normalize_folder
from .storage.dto import UploadItem


@dataclass
class PlannedUpload:
    """A file paired with the name and tags it will be uploaded with."""

    item: UploadItem
    name: str
    tags: Dict[str, Any]


@dataclass
class UploadPlan:
    folder: str
    is_folder_upload: bool
    uploads: List[PlannedUpload]


def check_batch_size(items: List[UploadItem], max_bytes: int):
    """Rejects a batch whose total size exceeds `max_bytes`."""
    total = sum(item.size for item in items)
    if total > max_bytes:
        raise UploadTooLargeError(
            f"Total size too large: {total / 1024 / 1024:.2f}MB "
            f"(max {max_bytes / 1024 / 1024:.0f}MB)"
        )


def derive_folder(
    items: List[UploadItem], folder_name: Optional[str] = None, now_ms: Optional[int] = None
) -> str:
    """
    Picks the shared folder for a folder upload: the explicit name, else the
    first segment of the first file's directory hint, else 'upload-<epoch ms>'.
    """
    if folder_name and folder_name.strip().strip("/"):
        return normalize_folder(folder_name)
    hint = items[0].directory_hint if items else None
    if hint:
        return hint.split("/", 1)[0]
    if now_ms is None:
        now_ms = int(time.time() * 1000)
    return f"upload-{now_ms}"


def plan_upload(
    items: List[UploadItem],
    folder_name: Optional[str] = None,
    now: Optional[datetime] = None,
) -> UploadPlan:
    """
    Decides the virtual folder and per-file tags for a batch.

    More than one file, or a first file carrying a directory hint, makes a
    folder upload: every file shares the derived folder and keeps its own
    relative path. A lone file without a hint goes straight into the
    explicit folder, or the root folder when none was given.
    """
    if not items:
        raise InvalidRequestError("No file provided")

    now = now or datetime.now(timezone.utc)
    uploaded_at = now.isoformat().replace("+00:00", "Z")
    is_folder_upload = len(items) > 1 or items[0].directory_hint is not None

    if is_folder_upload:
        folder = derive_folder(items, folder_name, int(now.timestamp() * 1000))
        upload_type = "folder"
    else:
        folder = normalize_folder(folder_name) if folder_name else ROOT_FOLDER
        upload_type = "file"

    uploads = []
    for item in items:
        hint = item.directory_hint
        name = hint.rsplit("/", 1)[-1] if hint else item.filename
        uploads.append(
            PlannedUpload(
                item=item,
                name=name,
                tags={
                    "folder": folder,
                    "path": hint or item.filename,
                    "type": upload_type,
                    "uploadedAt": uploaded_at,
                },
            )
        )
    return UploadPlan(folder=folder, is_folder_upload=is_folder_upload, uploads=uploads)
