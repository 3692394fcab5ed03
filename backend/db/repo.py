"""Repository facade over the blob download pipeline and its cache."""

from __future__ import annotations

import dataclasses
from collections import Counter
from dataclasses import dataclass
from enum import Enum
from typing import List, Optional

from ..config import Settings, load_settings
from ..models.property import BlobHealth, Property, ResultSet, Space
from ..utils.caching import ResultCache
from ..utils.logging import get_logger
from .blob_client import BlobClient
from .errors import BlobError, BlobNotFoundError, ConfigurationError, SizeLimitExceededError
from .fallback import fallback_properties
from .fetcher import SizeGatedFetcher

LOGGER = get_logger("db.repo")


class RepositoryState(str, Enum):
    IDLE = "idle"
    PROBING = "probing"
    FETCHING = "fetching"
    CACHED = "cached"
    FALLBACK = "fallback"


@dataclass(frozen=True)
class PipelineResult:
    """Either the freshly parsed properties or the error that stopped the pipeline."""

    properties: Optional[List[Property]] = None
    error: Optional[BlobError] = None

    @property
    def ok(self) -> bool:
        return self.error is None


class BlobPropertyRepository:
    def __init__(
        self,
        settings: Settings,
        client: Optional[BlobClient] = None,
        fetcher: Optional[SizeGatedFetcher] = None,
        cache: Optional[ResultCache] = None,
    ) -> None:
        if settings is None:
            raise ConfigurationError("Repository settings are required")
        self.settings = settings
        self.client = client or BlobClient(settings.resolved_url)
        self.fetcher = fetcher or SizeGatedFetcher(self.client, settings)
        self.cache = cache or ResultCache(settings.cache_expiry_seconds, settings.cache_byte_budget)
        self.state = RepositoryState.IDLE
        LOGGER.info(
            "Repository initialised max_size_mb=%.0f stream_threshold_mb=%.0f timeout_min=%.1f",
            settings.max_download_size_bytes / (1024 * 1024),
            settings.streaming_threshold_bytes / (1024 * 1024),
            settings.download_timeout_seconds / 60,
        )

    # ------------------------------------------------------------------
    # Listings
    def list_all(self) -> ResultSet:
        """Return every property sorted by name, from cache when fresh.

        Probe, fetch and parse failures never escape: the caller gets the
        fallback portfolio with ``source="fallback"`` and the failure reason.
        """

        return self._sorted(self._load())

    def _load(self) -> ResultSet:
        cached = self.cache.get()
        if cached is not None:
            LOGGER.info("cache_hit properties=%d", len(cached.properties))
            self.state = RepositoryState.CACHED
            return cached

        LOGGER.info("cache_miss fetching=blob url=%s", self.client.display_url)
        result = self._run_pipeline()
        if result.ok:
            fresh = ResultSet(properties=result.properties or [], source="blob")
            stored = self.cache.put(fresh)
            self.state = RepositoryState.CACHED if stored else RepositoryState.IDLE
            return fresh

        error = result.error
        if isinstance(error, SizeLimitExceededError):
            LOGGER.error("size_limit_exceeded size_bytes=%d limit_bytes=%d serving=fallback",
                         error.size_bytes, error.limit_bytes)
        else:
            LOGGER.warning("blob_unavailable reason=%s error=%s serving=fallback", error.reason, error)
        self.state = RepositoryState.FALLBACK
        return ResultSet(
            properties=fallback_properties(),
            source="fallback",
            fallback_reason=error.reason,
        )

    def get_by_id(self, property_id: str) -> Optional[Property]:
        if not property_id or not property_id.strip():
            LOGGER.warning("get_by_id called with blank property_id")
            return None
        # source order, so duplicate ids resolve to the first one in the blob
        result = self._load()
        wanted = property_id.casefold()
        for prop in result.properties:
            if prop.id.casefold() == wanted:
                return prop
        LOGGER.info("property_not_found id=%s searched=%d", property_id, len(result.properties))
        return None

    def get_spaces(self, property_id: str) -> Optional[List[Space]]:
        prop = self.get_by_id(property_id)
        if prop is None:
            return None
        return list(prop.spaces)

    # ------------------------------------------------------------------
    # Health / admin
    def check_health(self) -> BlobHealth:
        """Probe the blob's metadata only; never downloads or touches the cache."""

        limit = self.settings.max_download_size_bytes
        try:
            size = self.client.get_size()
        except BlobNotFoundError:
            return BlobHealth(healthy=False, exists=False, max_size_bytes=limit, reason="not_found")
        except BlobError as exc:
            LOGGER.error("health_probe_failed reason=%s error=%s", exc.reason, exc)
            return BlobHealth(healthy=False, exists=False, max_size_bytes=limit, reason=exc.reason)
        healthy = size <= limit
        LOGGER.debug("health_probe size_bytes=%d healthy=%s", size, healthy)
        return BlobHealth(
            healthy=healthy,
            exists=True,
            size_bytes=size,
            max_size_bytes=limit,
            reason=None if healthy else SizeLimitExceededError.reason,
        )

    def is_healthy(self) -> bool:
        return self.check_health().healthy

    def invalidate_cache(self) -> None:
        self.cache.invalidate()
        self.state = RepositoryState.IDLE

    # ------------------------------------------------------------------
    def _run_pipeline(self) -> PipelineResult:
        try:
            self.state = RepositoryState.PROBING
            size = self.client.get_size()
            self.state = RepositoryState.FETCHING
            outcome = self.fetcher.fetch(size)
        except BlobError as exc:
            return PipelineResult(error=exc)
        self._warn_duplicates(outcome.properties)
        return PipelineResult(properties=outcome.properties)

    @staticmethod
    def _warn_duplicates(properties: List[Property]) -> None:
        counts = Counter(p.id.casefold() for p in properties)
        duplicates = sorted(pid for pid, n in counts.items() if n > 1)
        if duplicates:
            LOGGER.warning("duplicate_property_ids ids=%s lookup=first_match", ",".join(duplicates))

    @staticmethod
    def _sorted(result: ResultSet) -> ResultSet:
        return dataclasses.replace(result, properties=sorted(result.properties, key=lambda p: p.name))


_repo_singleton: BlobPropertyRepository | None = None


def get_repository() -> BlobPropertyRepository:
    global _repo_singleton
    if _repo_singleton is None:
        _repo_singleton = BlobPropertyRepository(load_settings())
    return _repo_singleton


def reset_repository() -> None:
    global _repo_singleton
    _repo_singleton = None
