"""Failure taxonomy for the blob download pipeline."""

from __future__ import annotations


class ConfigurationError(RuntimeError):
    """Raised when the blob location cannot be resolved from settings."""


class BlobError(Exception):
    """Base class for failures while probing, fetching or parsing the blob."""

    reason = "blob_error"


class BlobNotFoundError(BlobError):
    reason = "not_found"


class TransientIOError(BlobError):
    reason = "transient_io"


class FetchTimeoutError(BlobError):
    reason = "timeout"

    def __init__(self, timeout_seconds: float) -> None:
        super().__init__(f"Blob download timed out after {timeout_seconds / 60:.1f} minutes")
        self.timeout_seconds = timeout_seconds


class SizeLimitExceededError(BlobError):
    reason = "size_limit_exceeded"

    def __init__(self, size_bytes: int, limit_bytes: int) -> None:
        super().__init__(
            f"Blob size ({size_bytes / (1024 * 1024):.2f} MB) exceeds maximum allowed size "
            f"({limit_bytes / (1024 * 1024):.0f} MB)"
        )
        self.size_bytes = size_bytes
        self.limit_bytes = limit_bytes


class BlobParseError(BlobError):
    reason = "parse_error"


__all__ = [
    "ConfigurationError",
    "BlobError",
    "BlobNotFoundError",
    "TransientIOError",
    "FetchTimeoutError",
    "SizeLimitExceededError",
    "BlobParseError",
]
