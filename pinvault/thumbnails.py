# thumbnails.py
import logging
from concurrent.futures import ThreadPoolExecutor
from typing import Dict, List, Optional, Sequence, Tuple

from .folders import THUMBNAIL_MARKER, base_name, extract_meta, is_image, normalize_folder
from .storage.base import StorageClient
from .storage.dto import FileRecord


class ThumbnailIndex:
    """
    Lookup of (folder, lowercased base name) -> first record in listing order.
    Built once per listing so each image does not rescan the whole snapshot.
    """

    def __init__(self, records: Sequence[FileRecord]):
        self._index: Dict[Tuple[str, str], Tuple[int, FileRecord]] = {}
        for position, record in enumerate(records):
            key = (extract_meta(record).folder, base_name(record.name).lower())
            self._index.setdefault(key, (position, record))

    def find(self, image: FileRecord, current_folder: str) -> Optional[FileRecord]:
        """
        Finds the thumbnail for `image`: a record named '<base>_thumbnail.*'
        in either '<folder>_thumbnail' or the image's own folder. When both
        folders hold one, the earlier in listing order wins.
        """
        target = (base_name(image.name) + THUMBNAIL_MARKER).lower()
        current = normalize_folder(current_folder)
        matches = [
            self._index[key]
            for key in ((current + THUMBNAIL_MARKER, target), (current, target))
            if key in self._index
        ]
        if not matches:
            return None
        return min(matches, key=lambda match: match[0])[1]


def find_thumbnail(
    image: FileRecord, current_folder: str, records: Sequence[FileRecord]
) -> Optional[FileRecord]:
    """Single-image convenience wrapper around ThumbnailIndex."""
    return ThumbnailIndex(records).find(image, current_folder)


def _issue_link(
    client: StorageClient,
    image: FileRecord,
    thumbnail: Optional[FileRecord],
    expires_in: int,
    size: int,
) -> Optional[str]:
    try:
        if thumbnail is not None:
            return client.create_access_link(thumbnail.cid, expires_in)
        return client.create_access_link(
            image.cid,
            expires_in,
            image_options={"width": size, "height": size, "fit": "cover"},
        )
    except Exception as e:
        logging.warning(f"Could not create thumbnail link for {image.name} ({image.cid}): {e}")
        return None


def resolve_thumbnails(
    client: StorageClient,
    images: List[FileRecord],
    current_folder: str,
    records: Sequence[FileRecord],
    expires_in: int = 300,
    size: int = 50,
    max_workers: int = 8,
) -> Dict[str, Optional[str]]:
    """
    Issues a thumbnail link for every image, concurrently. Returns a mapping
    of image id -> link, with None for any image whose link request failed.
    Non-image records are ignored.
    """
    index = ThumbnailIndex(records)
    targets = [record for record in images if is_image(record.name)]
    if not targets:
        return {}

    links: Dict[str, Optional[str]] = {}
    with ThreadPoolExecutor(max_workers=max(1, min(max_workers, len(targets)))) as pool:
        futures = [
            (
                image,
                pool.submit(
                    _issue_link,
                    client,
                    image,
                    index.find(image, current_folder),
                    expires_in,
                    size,
                ),
            )
            for image in targets
        ]
        for image, future in futures:
            links[image.id] = future.result()

    found = sum(1 for link in links.values() if link)
    logging.info(f"Resolved {found}/{len(targets)} thumbnail links for '{current_folder}'.")
    return links
