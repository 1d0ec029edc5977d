# pinvault/storage/base.py
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional, Tuple
from .dto import FileRecord


class StorageClient(ABC):
    """
    Abstract base class for a pinning service client.
    Defines the common interface the listing, upload and preview code relies on,
    so that the pure folder logic can be exercised against a fake in tests.
    """

    @abstractmethod
    def list_files(self, limit: int = 100, offset: int = 0) -> List[FileRecord]:
        """
        Lists pinned files as one flat snapshot.

        :param limit: Maximum number of records to return.
        :param offset: Number of records to skip.
        :return: A list of standardized FileRecord DTOs, in provider order.
        """
        pass

    @abstractmethod
    def upload_file(
        self, content: bytes, filename: str, tags: Dict[str, Any]
    ) -> FileRecord:
        """
        Uploads a file and attaches tags to it.

        :param content: The raw bytes of the file.
        :param filename: The name to store the file under.
        :param tags: Key/value metadata attached to the record.
        :return: The created record.
        """
        pass

    @abstractmethod
    def create_access_link(
        self,
        cid: str,
        expires_in: int,
        image_options: Optional[Dict[str, Any]] = None,
    ) -> str:
        """
        Issues a short-lived URL for the content behind `cid`.

        :param cid: Content address of the file.
        :param expires_in: Validity of the link in seconds.
        :param image_options: Optional resize options (width, height, fit)
            asking the provider for a re-encoded rendition.
        """
        pass

    @abstractmethod
    def fetch_content(self, cid: str) -> Tuple[bytes, Optional[str]]:
        """
        Downloads the content behind `cid`.

        :return: A tuple of (bytes, content type reported by the gateway).
        """
        pass

    @abstractmethod
    def delete_file(self, file_id: str):
        """
        Unpins a file.

        :param file_id: The provider identifier (not the cid) of the file.
        """
        pass

    @abstractmethod
    def gateway_url(self, cid: str) -> str:
        """Returns the plain gateway URL for `cid`."""
        pass
