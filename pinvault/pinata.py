# pinata.py
import json
import logging
import time
from typing import Any, Dict, List, Optional, Tuple
from urllib.parse import urlencode

import requests

from .config import Settings
from .exceptions import ConfigurationError, UpstreamError
from .storage.base import StorageClient
from .storage.dto import FileRecord

# The v3 list endpoint caps a single page at 1000 rows.
MAX_PAGE_SIZE = 1000


def _error_message(response: requests.Response, fallback: str) -> str:
    """Pulls the provider's error text out of a failed response."""
    try:
        body = response.json()
    except ValueError:
        body = None
    if isinstance(body, dict):
        error = body.get("error")
        if isinstance(error, dict):
            error = error.get("message") or error.get("reason")
        message = error or body.get("message") or body.get("details")
        if message:
            return str(message)
    return f"{fallback} (HTTP {response.status_code})"


class PinataClient(StorageClient):
    """
    Client for the Pinata v3 REST API, implementing the StorageClient interface.
    """

    def __init__(self, settings: Settings, session: Optional[requests.Session] = None):
        if not settings.PINATA_JWT:
            raise ConfigurationError("Pinata JWT not configured")
        if not settings.PINATA_GATEWAY:
            raise ConfigurationError("Gateway configuration missing")

        self.jwt = settings.PINATA_JWT
        self.gateway = settings.PINATA_GATEWAY
        self.gateway_token = settings.GATEWAY_TOKEN
        self.network = settings.PINATA_NETWORK
        self.api_url = settings.PINATA_API_URL.rstrip("/")
        self.uploads_url = settings.PINATA_UPLOADS_URL.rstrip("/")
        self.timeout = settings.REQUEST_TIMEOUT_SECONDS

        self.session = session or requests.Session()
        self.session.headers.update({"Authorization": f"Bearer {self.jwt}"})
        logging.info(f"Pinata client initialized for gateway '{self.gateway}'.")

    def _request(self, method: str, url: str, fallback: str, **kwargs) -> requests.Response:
        """Sends a request and converts any failure into an UpstreamError."""
        kwargs.setdefault("timeout", self.timeout)
        try:
            response = self.session.request(method, url, **kwargs)
        except requests.RequestException as e:
            logging.error(f"{fallback}: {e}")
            raise UpstreamError(f"{fallback}: {e}") from e

        if not response.ok:
            message = _error_message(response, fallback)
            logging.error(f"{fallback}: {message}")
            raise UpstreamError(message)
        return response

    def list_files(self, limit: int = 100, offset: int = 0) -> List[FileRecord]:
        """
        Returns up to `limit` records after skipping `offset`, following the
        provider's page tokens until enough rows are collected.
        """
        wanted = max(limit, 0) + max(offset, 0)
        url = f"{self.api_url}/v3/files/{self.network}"
        rows: List[Dict[str, Any]] = []
        page_token = None

        logging.info(f"Listing up to {wanted} files from Pinata ({self.network})...")
        while len(rows) < wanted:
            params: Dict[str, Any] = {"limit": min(wanted - len(rows), MAX_PAGE_SIZE)}
            if page_token:
                params["pageToken"] = page_token
            response = self._request(
                "GET", url, "Failed to list files from Pinata", params=params
            )
            data = response.json().get("data") or {}
            page = data.get("files") or []
            rows.extend(page)
            page_token = data.get("next_page_token")
            if not page or not page_token:
                break
            logging.info("Found more files, continuing listing...")

        return [FileRecord.from_api(row) for row in rows[offset:offset + limit]]

    def upload_file(
        self, content: bytes, filename: str, tags: Dict[str, Any]
    ) -> FileRecord:
        """Uploads one file with its keyvalues as a multipart request."""
        logging.info(f"Uploading {filename} ({len(content)} bytes) to Pinata...")
        response = self._request(
            "POST",
            f"{self.uploads_url}/v3/files",
            "Failed to upload file to Pinata",
            files={"file": (filename, content)},
            data={
                "network": self.network,
                "name": filename,
                "keyvalues": json.dumps(tags),
            },
        )
        record = FileRecord.from_api(response.json().get("data") or {})
        logging.info(f"Uploaded {filename} as {record.cid}.")
        return record

    def create_access_link(
        self,
        cid: str,
        expires_in: int,
        image_options: Optional[Dict[str, Any]] = None,
    ) -> str:
        """
        Asks Pinata to sign a gateway URL. Image options are sent as the
        gateway's `img-*` query parameters so the signature covers them.
        """
        url = f"https://{self.gateway}/files/{cid}"
        if image_options:
            url = f"{url}?{urlencode({f'img-{k}': v for k, v in image_options.items()})}"

        response = self._request(
            "POST",
            f"{self.api_url}/v3/files/private/download_link",
            "Failed to create signed URL",
            json={
                "url": url,
                "expires": expires_in,
                "date": int(time.time()),
                "method": "GET",
            },
        )
        signed = response.json().get("data")
        if not signed:
            raise UpstreamError("Failed to create signed URL")
        return signed

    def fetch_content(self, cid: str) -> Tuple[bytes, Optional[str]]:
        """
        Downloads content through the gateway. A gateway token, when set,
        replaces the bearer header.
        """
        url = self.gateway_url(cid)
        fallback = "Failed to fetch content from gateway"
        try:
            if self.gateway_token:
                response = requests.get(
                    url,
                    params={"pinataGatewayToken": self.gateway_token},
                    timeout=self.timeout,
                )
            else:
                response = self.session.get(url, timeout=self.timeout)
        except requests.RequestException as e:
            logging.error(f"{fallback} for {cid}: {e}")
            raise UpstreamError(f"{fallback}: {e}") from e

        if not response.ok:
            logging.error(f"{fallback} for {cid}: HTTP {response.status_code}")
            raise UpstreamError(f"Pinata error {response.status_code}")
        return response.content, response.headers.get("content-type")

    def delete_file(self, file_id: str):
        """Unpins a file by its provider id."""
        logging.info(f"Unpinning file {file_id}...")
        self._request(
            "DELETE",
            f"{self.api_url}/v3/files/{self.network}/{file_id}",
            "Failed to unpin file from Pinata",
        )

    def gateway_url(self, cid: str) -> str:
        return f"https://{self.gateway}/ipfs/{cid}"
