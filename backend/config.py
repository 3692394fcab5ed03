"""Environment-driven settings for the blob-backed property repository."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional

from dotenv import load_dotenv

from .db.errors import ConfigurationError
from .utils.coerce import mebibytes, to_int

ENV_FILE = Path(__file__).resolve().parents[1] / ".env"

MB = 1024 * 1024
KB = 1024


@dataclass(frozen=True)
class Settings:
    blob_url: str
    sas_token: str
    max_download_size_bytes: int = 200 * MB
    streaming_threshold_bytes: int = 10 * MB
    chunk_size_bytes: int = 64 * KB
    download_timeout_seconds: float = 10 * 60
    cache_expiry_seconds: float = 30 * 60
    cache_byte_budget: int = 100 * MB
    max_record_bytes: int = 16 * MB

    def __post_init__(self) -> None:
        if not (self.blob_url or "").strip():
            raise ConfigurationError(
                "BLOB_URL is missing or empty. Provide the URL of the properties blob."
            )
        if not (self.sas_token or "").strip():
            raise ConfigurationError(
                "BLOB_SAS_TOKEN is missing or empty. Provide a SAS token for the properties blob."
            )
        if self.streaming_threshold_bytes > self.max_download_size_bytes:
            raise ConfigurationError("STREAMING_THRESHOLD_MB cannot exceed MAX_DOWNLOAD_SIZE_MB")
        if self.chunk_size_bytes <= 0:
            raise ConfigurationError("STREAM_CHUNK_KB must be positive")
        if self.max_record_bytes <= 0:
            raise ConfigurationError("MAX_RECORD_MB must be positive")

    @property
    def resolved_url(self) -> str:
        """Blob URL with the SAS token appended as its query string."""

        url = self.blob_url.strip()
        token = self.sas_token.strip()
        if not token.startswith("?"):
            token = f"?{token}"
        return f"{url}{token}"


def _env_int(name: str, default: int) -> int:
    value = to_int(os.getenv(name))
    return default if value is None else value


def allowed_origins() -> List[str]:
    """CORS origins from the comma-separated ``ALLOWED_ORIGINS`` variable."""

    raw = os.getenv("ALLOWED_ORIGINS", "http://localhost:8501")
    return [origin.strip() for origin in raw.split(",") if origin.strip()]


def load_settings(env_file: Optional[Path] = ENV_FILE) -> Settings:
    """Build :class:`Settings` from the process environment.

    Sizes are configured in MB/KB and times in minutes to match how operators
    think about the blob; everything is converted to bytes and seconds here.
    """

    if env_file is not None:
        load_dotenv(dotenv_path=env_file, override=False)

    return Settings(
        blob_url=os.getenv("BLOB_URL", ""),
        sas_token=os.getenv("BLOB_SAS_TOKEN", ""),
        max_download_size_bytes=mebibytes(_env_int("MAX_DOWNLOAD_SIZE_MB", 200)),
        streaming_threshold_bytes=mebibytes(_env_int("STREAMING_THRESHOLD_MB", 10)),
        chunk_size_bytes=_env_int("STREAM_CHUNK_KB", 64) * KB,
        download_timeout_seconds=_env_int("DOWNLOAD_TIMEOUT_MINUTES", 10) * 60.0,
        cache_expiry_seconds=_env_int("CACHE_EXPIRY_MINUTES", 30) * 60.0,
        cache_byte_budget=mebibytes(_env_int("CACHE_MAX_SIZE_MB", 100)),
        max_record_bytes=mebibytes(_env_int("MAX_RECORD_MB", 16)),
    )


__all__ = ["Settings", "allowed_origins", "load_settings", "MB", "KB"]
