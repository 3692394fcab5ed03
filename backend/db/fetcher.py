"""Size-gated download of the properties blob.

Small blobs are fetched in one call and parsed from memory; anything above the
streaming threshold is read chunk by chunk and parsed as it arrives. Both
paths run the same incremental parser, so the same bytes always produce the
same object graph. The probe is separate; the fetch and parse together run
under one deadline.
"""

from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Callable, Iterable, Iterator, List, Literal, Optional

from pydantic import ValidationError

from ..config import Settings
from ..models.property import Property
from ..utils.io import BufferStats, JSONStreamError, iter_json_array
from ..utils.logging import get_logger
from .blob_client import BlobClient, Deadline
from .errors import BlobParseError, SizeLimitExceededError
from .mappers import RecordShapeError, map_property

LOGGER = get_logger("db.fetcher")

FetchMode = Literal["direct", "streaming"]


@dataclass(frozen=True)
class FetchOutcome:
    properties: List[Property]
    mode: FetchMode
    size_bytes: int
    peak_buffered_chars: int


def parse_properties(
    chunks: Iterable[bytes],
    stats: Optional[BufferStats] = None,
    max_record_chars: Optional[int] = None,
) -> List[Property]:
    """Deserialize a JSON array of property records; all or nothing."""

    try:
        records = iter_json_array(chunks, stats, max_element_chars=max_record_chars)
        return [map_property(record) for record in records]
    except (JSONStreamError, RecordShapeError, ValidationError) as exc:
        raise BlobParseError(f"Failed to deserialize properties blob: {exc}") from exc


def _guarded(chunks: Iterable[bytes], deadline: Deadline) -> Iterator[bytes]:
    for chunk in chunks:
        deadline.check()
        yield chunk


class SizeGatedFetcher:
    def __init__(
        self,
        client: BlobClient,
        settings: Settings,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.client = client
        self.max_size = settings.max_download_size_bytes
        self.threshold = settings.streaming_threshold_bytes
        self.chunk_size = settings.chunk_size_bytes
        self.timeout = settings.download_timeout_seconds
        self.max_record = settings.max_record_bytes
        self._clock = clock

    def choose_mode(self, size_bytes: int) -> FetchMode:
        if size_bytes > self.max_size:
            raise SizeLimitExceededError(size_bytes, self.max_size)
        return "direct" if size_bytes <= self.threshold else "streaming"

    def fetch(self, size_bytes: int) -> FetchOutcome:
        """Download and parse a blob whose size was already probed."""

        mode = self.choose_mode(size_bytes)
        deadline = Deadline(self.timeout, self._clock)
        stats = BufferStats()
        LOGGER.info("blob_fetch mode=%s size_mb=%.2f", mode, size_bytes / (1024 * 1024))
        if mode == "direct":
            body = self.client.download(deadline)
            deadline.check()
            properties = parse_properties([body], stats, self.max_record)
        else:
            with self.client.open_stream(self.chunk_size, deadline) as chunks:
                properties = parse_properties(_guarded(chunks, deadline), stats, self.max_record)
        deadline.check()
        LOGGER.info(
            "blob_parsed mode=%s properties=%d peak_buffer_chars=%d",
            mode,
            len(properties),
            stats.peak_chars,
        )
        return FetchOutcome(properties, mode, size_bytes, stats.peak_chars)


__all__ = ["FetchOutcome", "SizeGatedFetcher", "parse_properties"]
