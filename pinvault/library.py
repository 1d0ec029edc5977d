# library.py
import logging
from typing import Any, Dict, List, Optional

from .config import Settings
from .exceptions import InvalidRequestError, NotFoundError
from .folders import ROOT_FOLDER, extract_meta, is_image, reconcile
from .storage.base import StorageClient
from .storage.dto import FileRecord, UploadItem
from .thumbnails import resolve_thumbnails
from .uploads import check_batch_size, plan_upload

# Lookups by cid only search the first page of the listing.
LOOKUP_PAGE_SIZE = 100


def _require_cid(cid: Optional[str]) -> str:
    if not cid or not cid.strip():
        raise InvalidRequestError("CID parameter is required")
    return cid.strip()


def _find_record(client: StorageClient, cid: str) -> FileRecord:
    records = client.list_files(LOOKUP_PAGE_SIZE, 0)
    for record in records:
        if record.cid == cid:
            return record
    raise NotFoundError("File not found")


def list_folder(
    client: StorageClient,
    settings: Settings,
    folder: str = ROOT_FOLDER,
    limit: int = 100,
    offset: int = 0,
) -> Dict[str, Any]:
    """
    Fetches one listing snapshot and renders `folder` from it: the primary
    files with their thumbnail links, plus the immediate subfolders.
    """
    records = client.list_files(limit, offset)
    view = reconcile(records, folder)
    logging.info(
        f"Folder '{view.folder}': {len(view.files)} files, {len(view.folders)} subfolders "
        f"out of {len(records)} records."
    )

    thumbnails = resolve_thumbnails(
        client,
        view.files,
        view.folder,
        records,
        expires_in=settings.THUMBNAIL_EXPIRES_SECONDS,
        size=settings.THUMBNAIL_SIZE,
        max_workers=settings.THUMBNAIL_WORKERS,
    )

    files = []
    for record in view.files:
        meta = extract_meta(record)
        files.append(
            {
                "id": record.id,
                "ipfsHash": record.cid,
                "name": record.name,
                "size": record.size,
                "uploadedAt": meta.uploaded_at,
                "isImage": is_image(record.name),
                "folder": meta.folder,
                "path": meta.path,
                "thumbnail": thumbnails.get(record.id),
            }
        )

    return {
        "success": True,
        "count": len(files),
        "currentFolder": view.folder,
        "files": files,
        "folders": view.folders,
    }


def get_file(client: StorageClient, cid: str) -> Dict[str, Any]:
    """Describes a single record, looked up by content address."""
    cid = _require_cid(cid)
    record = _find_record(client, cid)
    meta = extract_meta(record)
    return {
        "success": True,
        "file": {
            "id": record.id,
            "ipfsHash": record.cid,
            "name": record.name,
            "size": record.size,
            "uploadedAt": meta.uploaded_at,
            "folder": meta.folder,
            "path": meta.path,
            "type": meta.type,
            "metadata": record.tags,
            "url": client.gateway_url(record.cid),
        },
    }


def upload_batch(
    client: StorageClient,
    settings: Settings,
    items: List[UploadItem],
    folder_name: Optional[str] = None,
) -> Dict[str, Any]:
    """
    Uploads a batch of files. The size ceiling is enforced before any
    provider call is made.
    """
    if not items:
        raise InvalidRequestError("No file provided")
    check_batch_size(items, settings.MAX_UPLOAD_BYTES)

    plan = plan_upload(items, folder_name)
    logging.info(
        f"Uploading {len(plan.uploads)} file(s) to folder '{plan.folder}' "
        f"({'folder' if plan.is_folder_upload else 'single'} upload)."
    )

    uploaded = [
        client.upload_file(upload.item.content, upload.name, upload.tags)
        for upload in plan.uploads
    ]

    if plan.is_folder_upload:
        return {
            "success": True,
            "folder": plan.folder,
            "count": len(uploaded),
            "files": [{"cid": record.cid} for record in uploaded],
        }
    record = uploaded[0]
    return {"success": True, "cid": record.cid, "url": client.gateway_url(record.cid)}


def create_signed_url(client: StorageClient, cid: str, expires_in: int) -> Dict[str, Any]:
    cid = _require_cid(cid)
    if expires_in <= 0:
        raise InvalidRequestError("expiresIn must be a positive number of seconds")
    url = client.create_access_link(cid, expires_in)
    logging.info(f"Created signed URL for CID: {cid}")
    return {"success": True, "url": url, "expiresIn": expires_in}


def delete_file(client: StorageClient, cid: str) -> Dict[str, Any]:
    """Unpins the record behind `cid`."""
    cid = _require_cid(cid)
    record = _find_record(client, cid)
    client.delete_file(record.id)
    logging.info(f"Unpinned {record.name} ({cid}).")
    return {"success": True, "cid": cid}
