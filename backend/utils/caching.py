"""Single-slot cache for the full property result set."""

from __future__ import annotations

import dataclasses
import threading
import time
from typing import Callable, Dict, Iterable, Optional

from ..models.property import Property, ResultSet
from .logging import get_logger

LOGGER = get_logger("utils.caching")

CACHE_KEY = "all_properties"

# Rough per-object costs used by estimate_size; strings are counted as UTF-8.
_OBJECT_OVERHEAD = 64
_REF_OVERHEAD = 8
_NUMBER_SIZE = 32


def _text(value: Optional[str]) -> int:
    return len(value.encode("utf-8")) + _REF_OVERHEAD if value else _REF_OVERHEAD


def estimate_size(properties: Iterable[Property]) -> int:
    """Approximate the in-memory footprint of a property graph in bytes."""

    total = 0
    for prop in properties:
        total += _OBJECT_OVERHEAD + _text(prop.id) + _text(prop.name) + _text(prop.address)
        total += sum(_text(f) for f in prop.features)
        total += sum(_text(h) for h in prop.highlights)
        for t in prop.transportation:
            total += _OBJECT_OVERHEAD + _text(t.type) + _text(t.line) + _text(t.station) + _text(t.distance)
        for space in prop.spaces:
            total += _OBJECT_OVERHEAD + _text(space.id) + _text(space.name) + _text(space.type) + _NUMBER_SIZE
            for entry in space.rent_roll:
                total += _OBJECT_OVERHEAD + _text(entry.month) + 2 * _NUMBER_SIZE
    return total


class ResultCache:
    """Holds at most one :class:`ResultSet` under :data:`CACHE_KEY`.

    Every read and write goes through one lock, so a reader never sees a
    timestamp from one result paired with the data of another.
    """

    def __init__(
        self,
        expiry_seconds: float,
        byte_budget: int,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.expiry_seconds = expiry_seconds
        self.byte_budget = byte_budget
        self._clock = clock
        self._lock = threading.Lock()
        self._slot: Dict[str, ResultSet] = {}
        self._stats = {"hits": 0, "misses": 0, "stores": 0, "declined": 0}

    def get(self) -> Optional[ResultSet]:
        with self._lock:
            entry = self._slot.get(CACHE_KEY)
            if entry is not None and self._clock() - entry.cached_at < self.expiry_seconds:
                self._stats["hits"] += 1
                return entry
            if entry is not None:
                del self._slot[CACHE_KEY]
            self._stats["misses"] += 1
            return None

    def put(self, result: ResultSet) -> bool:
        """Store ``result``; returns False when it is over the byte budget."""

        size = estimate_size(result.properties)
        if size > self.byte_budget:
            with self._lock:
                self._stats["declined"] += 1
            LOGGER.warning(
                "cache_declined size_bytes=%d budget_bytes=%d", size, self.byte_budget
            )
            return False
        with self._lock:
            self._slot[CACHE_KEY] = dataclasses.replace(
                result, cached_at=self._clock(), size_bytes=size
            )
            self._stats["stores"] += 1
        LOGGER.info(
            "cache_stored properties=%d size_bytes=%d expiry_s=%.0f",
            len(result.properties),
            size,
            self.expiry_seconds,
        )
        return True

    def invalidate(self) -> None:
        with self._lock:
            self._slot.pop(CACHE_KEY, None)
        LOGGER.info("cache_invalidated key=%s", CACHE_KEY)

    def stats(self) -> Dict[str, int]:
        with self._lock:
            return dict(self._stats)


__all__ = ["CACHE_KEY", "ResultCache", "estimate_size"]
