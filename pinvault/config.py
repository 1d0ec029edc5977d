from pathlib import Path
from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import Optional
from functools import lru_cache


class Settings(BaseSettings):
    """
    Centralized application configuration with type validation.
    Automatically reads variables from the environment and the .env file.
    """

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", extra="ignore"
    )

    # --- General Settings ---
    LOG_LEVEL: str = "INFO"
    HOST: str = "127.0.0.1"
    PORT: int = 8000

    # --- Pinata Settings ---
    # The JWT is optional here so the app can start and report a clean 500;
    # PinataClient refuses to build without it.
    PINATA_JWT: Optional[str] = None
    PINATA_GATEWAY: str = "gateway.pinata.cloud"
    GATEWAY_TOKEN: Optional[str] = None
    PINATA_NETWORK: str = "private"  # "private" or "public"
    PINATA_API_URL: str = "https://api.pinata.cloud"
    PINATA_UPLOADS_URL: str = "https://uploads.pinata.cloud"
    REQUEST_TIMEOUT_SECONDS: float = 30.0

    # --- Listing / Thumbnail Settings ---
    THUMBNAIL_EXPIRES_SECONDS: int = 300
    THUMBNAIL_SIZE: int = 50
    THUMBNAIL_WORKERS: int = 8
    SIGNED_URL_EXPIRES_SECONDS: int = 60

    # --- Upload Settings ---
    MAX_UPLOAD_BYTES: int = 50 * 1024 * 1024  # 50 MiB

    # --- Constants and Computed Paths ---
    BASE_DIR: Path = Path(__file__).resolve().parent

    @field_validator("PINATA_GATEWAY", mode="before")
    @classmethod
    def strip_gateway_scheme(cls, value):
        """Accepts 'https://host/' as well as a bare hostname."""
        if isinstance(value, str):
            value = value.strip()
            for prefix in ("https://", "http://"):
                if value.startswith(prefix):
                    value = value[len(prefix):]
            value = value.rstrip("/")
        return value

    @field_validator("PINATA_JWT", "GATEWAY_TOKEN", mode="before")
    @classmethod
    def blank_to_none(cls, value):
        if isinstance(value, str) and not value.strip():
            return None
        return value

    @field_validator("PINATA_NETWORK")
    @classmethod
    def check_network(cls, value):
        if value not in ("private", "public"):
            raise ValueError("Invalid PINATA_NETWORK. Must be 'private' or 'public'.")
        return value

    @property
    def LOG_FILE(self) -> Path:
        return self.BASE_DIR / "app.log"


@lru_cache()
def get_settings() -> Settings:
    """
    Returns a cached instance of the application settings.
    The first call to this function will initialize the settings.
    """
    return Settings()
