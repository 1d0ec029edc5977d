"""
Virtual folders over a flat, tag-addressed listing.

Pinata has no folder concept, so every record carries `folder` and `path`
tags written at upload time. The functions here rebuild the hierarchy from a
listing snapshot without any I/O.
"""
import re
from dataclasses import dataclass, field
from typing import Any, Iterable, List

from .storage.dto import FileRecord, VirtualMeta

ROOT_FOLDER = "root"
THUMBNAIL_MARKER = "_thumbnail"
IMAGE_EXTENSIONS = frozenset({"jpg", "jpeg", "png", "gif", "webp", "svg"})

_LAST_EXTENSION = re.compile(r"\.[^/.]+$")


@dataclass
class FolderView:
    """What a single folder looks like: its primary files and child folders."""

    folder: str
    files: List[FileRecord] = field(default_factory=list)
    folders: List[str] = field(default_factory=list)


def normalize_folder(value: Any) -> str:
    """Strips surrounding slashes; anything blank is the root folder."""
    if not isinstance(value, str):
        return ROOT_FOLDER
    value = value.strip().strip("/")
    return value or ROOT_FOLDER


def base_name(name: str) -> str:
    """Drops the last extension: 'a.tar.gz' -> 'a.tar', 'README' -> 'README'."""
    return _LAST_EXTENSION.sub("", name or "")


def is_image(name: str) -> bool:
    if not name or "." not in name:
        return False
    return name.rsplit(".", 1)[1].lower() in IMAGE_EXTENSIONS


def is_thumbnail_name(name: str) -> bool:
    return THUMBNAIL_MARKER in (name or "").lower()


def _tag(tags: Any, key: str):
    value = tags.get(key) if isinstance(tags, dict) else None
    if isinstance(value, str) and value.strip():
        return value
    return None


def extract_meta(record: FileRecord) -> VirtualMeta:
    """
    Normalizes a record's tag bag into its virtual-folder descriptor.
    Never raises: missing or malformed tags fall back to defaults.
    """
    tags = getattr(record, "tags", None)
    name = getattr(record, "name", None) or ""
    return VirtualMeta(
        folder=normalize_folder(_tag(tags, "folder")),
        path=_tag(tags, "path") or name,
        type=_tag(tags, "type") or "file",
        uploaded_at=_tag(tags, "uploadedAt") or getattr(record, "created_at", "") or "",
    )


def child_folder(folder: str, parent: str):
    """
    Returns the first segment of `folder` below `parent`, or None when
    `folder` is not a descendant of `parent`.
    """
    if parent == ROOT_FOLDER:
        if folder == ROOT_FOLDER:
            return None
        return folder.split("/", 1)[0]
    prefix = parent + "/"
    if not folder.startswith(prefix):
        return None
    return folder[len(prefix):].split("/", 1)[0] or None


def reconcile(records: Iterable[FileRecord], folder: str = ROOT_FOLDER) -> FolderView:
    """
    Splits a full listing into the primary files of `folder` and the names of
    its immediate subfolders. Thumbnail files and `*_thumbnail` folders are
    left out of both.
    """
    current = normalize_folder(folder)
    view = FolderView(folder=current)
    seen = set()

    for record in records:
        record_folder = extract_meta(record).folder
        if record_folder == current and not is_thumbnail_name(record.name):
            view.files.append(record)

        child = child_folder(record_folder, current)
        if child and child not in seen and not child.endswith(THUMBNAIL_MARKER):
            seen.add(child)
            view.folders.append(child)

    return view
