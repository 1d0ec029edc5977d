# tests/conftest.py
import pytest
from unittest.mock import MagicMock

from pinvault.config import Settings, get_settings
from pinvault.storage.base import StorageClient
from pinvault.storage.dto import FileRecord


def make_record(name, folder=None, cid=None, record_id=None, size=10, **extra_tags):
    """Builds a FileRecord the way the provider listing would return it."""
    tags = dict(extra_tags)
    if folder is not None:
        tags["folder"] = folder
    cid = cid or f"cid-{folder or 'root'}-{name}"
    return FileRecord(
        id=record_id or f"id-{cid}",
        cid=cid,
        name=name,
        size=size,
        created_at="2024-05-01T10:00:00Z",
        tags=tags,
    )


class FakeStorageClient(StorageClient):
    """In-memory StorageClient recording every provider call."""

    def __init__(self, records=None):
        self.records = list(records or [])
        self.link_calls = []
        self.uploads = []
        self.deleted = []
        self.failing_cids = set()
        self.content = {}

    def list_files(self, limit=100, offset=0):
        return self.records[offset:offset + limit]

    def upload_file(self, content, filename, tags):
        record = FileRecord(
            id=f"id-{len(self.uploads)}",
            cid=f"bafy{len(self.uploads)}",
            name=filename,
            size=len(content),
            created_at="2024-05-01T10:00:00Z",
            tags=tags,
        )
        self.uploads.append(record)
        return record

    def create_access_link(self, cid, expires_in, image_options=None):
        self.link_calls.append((cid, expires_in, image_options))
        if cid in self.failing_cids:
            raise RuntimeError(f"link failure for {cid}")
        suffix = "?resized" if image_options else ""
        return f"https://signed.example/{cid}{suffix}"

    def fetch_content(self, cid):
        if cid not in self.content:
            raise RuntimeError("not reachable")
        return self.content[cid]

    def delete_file(self, file_id):
        self.deleted.append(file_id)

    def gateway_url(self, cid):
        return f"https://gateway.example/ipfs/{cid}"


@pytest.fixture
def settings():
    """Real settings object, isolated from the environment and any .env file."""
    return Settings(
        _env_file=None,
        PINATA_JWT="test-jwt",
        PINATA_GATEWAY="example.mypinata.cloud",
        PINATA_API_URL="https://api.test",
        PINATA_UPLOADS_URL="https://uploads.test",
        THUMBNAIL_WORKERS=4,
    )


@pytest.fixture
def fake_client():
    return FakeStorageClient()


@pytest.fixture
def mock_storage_client():
    """Fixture for a mock storage client."""
    return MagicMock(spec=StorageClient)


@pytest.fixture(autouse=True)
def clear_settings_cache():
    """Never let a settings instance cached by one test leak into another."""
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()
