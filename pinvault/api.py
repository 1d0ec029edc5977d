# api.py
import logging
from functools import lru_cache
from typing import List, Optional

from fastapi import Depends, FastAPI, File, Form, Query, Request, UploadFile
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse, Response

from . import library
from .config import Settings, get_settings
from .exceptions import AccessDeniedError, PinvaultError, UpstreamError
from .folders import ROOT_FOLDER
from .pinata import PinataClient
from .storage.base import StorageClient
from .storage.dto import UploadItem


@lru_cache()
def _build_client() -> PinataClient:
    return PinataClient(get_settings())


def get_storage_client() -> StorageClient:
    """
    Returns the process-wide Pinata client. Construction fails with a
    ConfigurationError (rendered as a 500) when credentials are missing.
    """
    return _build_client()


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"success": False, "error": message})


def _to_upload_item(upload: UploadFile) -> UploadItem:
    # Folder pickers send the relative path ("album/a.png") as the filename.
    raw_name = (upload.filename or "").replace("\\", "/").strip("/")
    filename = raw_name.rsplit("/", 1)[-1] or "upload"
    return UploadItem(
        filename=filename,
        content=upload.file.read(),
        relative_path=raw_name if "/" in raw_name else None,
    )


def create_app() -> FastAPI:
    app = FastAPI(title="pinvault", description="Virtual folders over Pinata pins.")

    @app.exception_handler(PinvaultError)
    async def handle_pinvault_error(request: Request, exc: PinvaultError):
        if exc.status_code >= 500:
            logging.error(f"{request.method} {request.url.path} failed: {exc.message}")
        else:
            logging.warning(f"{request.method} {request.url.path} rejected: {exc.message}")
        return _error(exc.status_code, exc.message)

    @app.exception_handler(RequestValidationError)
    async def handle_validation_error(request: Request, exc: RequestValidationError):
        errors = exc.errors()
        message = errors[0].get("msg", "Invalid request") if errors else "Invalid request"
        return _error(400, message)

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        logging.critical(
            f"Unhandled error on {request.method} {request.url.path}: {exc}", exc_info=True
        )
        return _error(500, "Internal server error")

    @app.get("/health")
    def health():
        return {"success": True}

    @app.get("/files")
    def list_files(
        limit: int = Query(100, ge=1, le=1000),
        offset: int = Query(0, ge=0),
        folder: str = ROOT_FOLDER,
        client: StorageClient = Depends(get_storage_client),
        settings: Settings = Depends(get_settings),
    ):
        return library.list_folder(client, settings, folder, limit, offset)

    @app.get("/files/{cid}")
    def get_file(cid: str, client: StorageClient = Depends(get_storage_client)):
        return library.get_file(client, cid)

    @app.delete("/files/{cid}")
    def delete_file(cid: str, client: StorageClient = Depends(get_storage_client)):
        return library.delete_file(client, cid)

    @app.post("/upload")
    def upload(
        file: Optional[List[UploadFile]] = File(None),
        folderName: Optional[str] = Form(None),
        client: StorageClient = Depends(get_storage_client),
        settings: Settings = Depends(get_settings),
    ):
        items = [_to_upload_item(upload) for upload in file or []]
        return library.upload_batch(client, settings, items, folderName)

    @app.get("/image/{cid}")
    def image(cid: str, client: StorageClient = Depends(get_storage_client)):
        try:
            content, content_type = client.fetch_content(cid)
        except UpstreamError as e:
            raise AccessDeniedError("Private file not accessible") from e
        return Response(
            content=content,
            media_type=content_type or "image/jpeg",
            headers={"Cache-Control": "private, max-age=3600"},
        )

    @app.get("/signed-url/{cid}")
    def signed_url(
        cid: str,
        expiresIn: Optional[int] = None,
        client: StorageClient = Depends(get_storage_client),
        settings: Settings = Depends(get_settings),
    ):
        expires_in = expiresIn if expiresIn is not None else settings.SIGNED_URL_EXPIRES_SECONDS
        return library.create_signed_url(client, cid, expires_in)

    return app


app = create_app()
