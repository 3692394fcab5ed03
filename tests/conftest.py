import json
from contextlib import contextmanager
from typing import Dict, List, Optional

import pytest

from backend.config import Settings
from backend.db.fetcher import SizeGatedFetcher
from backend.db.repo import BlobPropertyRepository
from backend.utils.caching import ResultCache


class FakeClock:
    def __init__(self, start: float = 1000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class FakeBlobClient:
    """Stands in for BlobClient and records every call it receives."""

    display_url = "https://example.blob.core.windows.net/data/properties.json"

    def __init__(self, body: bytes = b"[]", size: Optional[int] = None, clock: Optional[FakeClock] = None):
        self.body = body
        self.size = len(body) if size is None else size
        self.clock = clock
        self.probe_error: Optional[Exception] = None
        self.fetch_error: Optional[Exception] = None
        self.seconds_per_chunk = 0.0
        self.download_seconds = 0.0
        self.size_calls = 0
        self.download_calls = 0
        self.stream_calls = 0
        self.bytes_served = 0
        self.max_chunk = 0
        self.stream_closed: Optional[bool] = None
        self.last_deadline = None

    def get_size(self) -> int:
        self.size_calls += 1
        if self.probe_error is not None:
            raise self.probe_error
        return self.size

    def download(self, deadline) -> bytes:
        self.download_calls += 1
        self.last_deadline = deadline
        if self.fetch_error is not None:
            raise self.fetch_error
        if self.clock is not None:
            self.clock.advance(self.download_seconds)
        self.bytes_served += len(self.body)
        return self.body

    @contextmanager
    def open_stream(self, chunk_size: int, deadline):
        self.stream_calls += 1
        self.last_deadline = deadline
        if self.fetch_error is not None:
            raise self.fetch_error
        self.stream_closed = False
        try:
            yield self._chunks(chunk_size)
        finally:
            self.stream_closed = True

    def _chunks(self, chunk_size: int):
        for start in range(0, len(self.body), chunk_size):
            chunk = self.body[start:start + chunk_size]
            if self.clock is not None:
                self.clock.advance(self.seconds_per_chunk)
            self.bytes_served += len(chunk)
            self.max_chunk = max(self.max_chunk, len(chunk))
            yield chunk


def make_settings(**overrides) -> Settings:
    values = dict(
        blob_url="https://example.blob.core.windows.net/data/properties.json",
        sas_token="?sv=2024-01-01&sig=secret",
    )
    values.update(overrides)
    return Settings(**values)


def build_repo(client: FakeBlobClient, clock: Optional[FakeClock] = None, **overrides) -> BlobPropertyRepository:
    clock = clock or FakeClock()
    settings = make_settings(**overrides)
    return BlobPropertyRepository(
        settings,
        client=client,
        fetcher=SizeGatedFetcher(client, settings, clock=clock),
        cache=ResultCache(settings.cache_expiry_seconds, settings.cache_byte_budget, clock=clock),
    )


def rent_rows(*rents, months=("Jan", "Feb", "Mar", "Apr", "May", "Jun")) -> List[Dict]:
    return [{"Month": month, "Rent": rent} for month, rent in zip(months, rents)]


def property_record(pid: str, name: str, spaces: Optional[List[Dict]] = None, **extra) -> Dict:
    record = {
        "PropertyId": pid,
        "PropertyName": name,
        "Features": ["Parking"],
        "Highlights": ["Near transit"],
        "Transportation": [{"Type": "Bus", "Line": "Route 1", "Distance": "0.1 miles"}],
        "Spaces": spaces if spaces is not None else [
            {"SpaceId": f"{pid}-S1", "SpaceName": "Suite 100", "RentRoll": rent_rows(1000, 1100)},
        ],
    }
    record.update(extra)
    return record


def encode(records: List[Dict]) -> bytes:
    return json.dumps(records).encode("utf-8")


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()
