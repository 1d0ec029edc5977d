# tests/test_library.py
import pytest

from pinvault import library
from pinvault.exceptions import InvalidRequestError, NotFoundError, UploadTooLargeError
from pinvault.storage.dto import UploadItem

from conftest import FakeStorageClient, make_record


@pytest.fixture
def docs_client():
    return FakeStorageClient(
        [
            make_record("photo.jpg", folder="docs"),
            make_record("photo_thumbnail.png", folder="docs"),
            make_record("scan.png", folder="docs"),
            make_record("notes.txt", folder="docs", path="notes.txt", uploadedAt="2024-06-01T00:00:00Z"),
            make_record("deep.txt", folder="docs/2024"),
            make_record("top.txt"),
        ]
    )


def test_list_folder_renders_files_folders_and_thumbnails(docs_client, settings):
    body = library.list_folder(docs_client, settings, "docs")

    assert body["success"] is True
    assert body["currentFolder"] == "docs"
    assert body["folders"] == ["2024"]
    assert body["count"] == 3
    by_name = {f["name"]: f for f in body["files"]}
    assert set(by_name) == {"photo.jpg", "scan.png", "notes.txt"}

    assert by_name["photo.jpg"]["thumbnail"] == "https://signed.example/cid-docs-photo_thumbnail.png"
    assert by_name["scan.png"]["thumbnail"] == "https://signed.example/cid-docs-scan.png?resized"
    assert by_name["notes.txt"]["thumbnail"] is None
    assert by_name["notes.txt"]["isImage"] is False
    assert by_name["notes.txt"]["uploadedAt"] == "2024-06-01T00:00:00Z"
    assert by_name["photo.jpg"]["ipfsHash"] == "cid-docs-photo.jpg"
    assert by_name["photo.jpg"]["path"] == "photo.jpg"


def test_list_folder_uses_thumbnail_settings(docs_client, settings):
    settings.THUMBNAIL_EXPIRES_SECONDS = 120
    settings.THUMBNAIL_SIZE = 64

    library.list_folder(docs_client, settings, "docs")

    assert (
        "cid-docs-scan.png",
        120,
        {"width": 64, "height": 64, "fit": "cover"},
    ) in docs_client.link_calls


def test_list_folder_degrades_failed_thumbnail(docs_client, settings):
    docs_client.failing_cids.add("cid-docs-photo_thumbnail.png")

    body = library.list_folder(docs_client, settings, "docs")

    thumbnails = {f["name"]: f["thumbnail"] for f in body["files"]}
    assert thumbnails["photo.jpg"] is None
    assert thumbnails["scan.png"] is not None


def test_get_file(docs_client):
    body = library.get_file(docs_client, "cid-docs-notes.txt")

    assert body["file"]["folder"] == "docs"
    assert body["file"]["type"] == "file"
    assert body["file"]["metadata"]["uploadedAt"] == "2024-06-01T00:00:00Z"
    assert body["file"]["url"] == "https://gateway.example/ipfs/cid-docs-notes.txt"


def test_get_file_not_found(docs_client):
    with pytest.raises(NotFoundError):
        library.get_file(docs_client, "missing")


def test_get_file_blank_cid(docs_client):
    with pytest.raises(InvalidRequestError, match="CID parameter is required"):
        library.get_file(docs_client, "  ")


def test_upload_batch_folder(fake_client, settings):
    items = [
        UploadItem(filename="a.png", content=b"1", relative_path="album/a.png"),
        UploadItem(filename="b.png", content=b"2", relative_path="album/b.png"),
        UploadItem(filename="c.png", content=b"3", relative_path="album/c.png"),
    ]

    body = library.upload_batch(fake_client, settings, items)

    assert body["folder"] == "album"
    assert body["count"] == 3
    assert body["files"] == [{"cid": "bafy0"}, {"cid": "bafy1"}, {"cid": "bafy2"}]
    assert [r.tags["path"] for r in fake_client.uploads] == ["album/a.png", "album/b.png", "album/c.png"]


def test_upload_batch_single(fake_client, settings):
    body = library.upload_batch(
        fake_client, settings, [UploadItem(filename="a.png", content=b"1")], "docs"
    )

    assert body == {"success": True, "cid": "bafy0", "url": "https://gateway.example/ipfs/bafy0"}
    assert fake_client.uploads[0].tags["folder"] == "docs"


def test_upload_batch_over_ceiling_makes_no_upload_call(mock_storage_client, settings):
    settings.MAX_UPLOAD_BYTES = 4
    items = [UploadItem(filename="a", content=b"123"), UploadItem(filename="b", content=b"45")]

    with pytest.raises(UploadTooLargeError):
        library.upload_batch(mock_storage_client, settings, items)

    mock_storage_client.upload_file.assert_not_called()


def test_create_signed_url(fake_client):
    body = library.create_signed_url(fake_client, "bafy1", 60)

    assert body == {"success": True, "url": "https://signed.example/bafy1", "expiresIn": 60}
    assert fake_client.link_calls == [("bafy1", 60, None)]


def test_create_signed_url_rejects_non_positive_expiry(fake_client):
    with pytest.raises(InvalidRequestError):
        library.create_signed_url(fake_client, "bafy1", 0)


def test_delete_file_resolves_cid_to_id(docs_client):
    body = library.delete_file(docs_client, "cid-root-top.txt")

    assert body == {"success": True, "cid": "cid-root-top.txt"}
    assert docs_client.deleted == ["id-cid-root-top.txt"]
