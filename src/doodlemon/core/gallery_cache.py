"""Gallery caching: a per-key TTL cache and the incremental gallery sync.

The gallery page reads one hot key, ``gallery:all``, holding every creature
newest-first. Instead of dropping that key whenever a creature changes, each
mutation patches the cached list in place of a full store re-scan:

- insert: prepend the new creature
- like: replace the matching creature, keeping its position
- delete: remove the matching creature

A patch only happens when the key is present. On a miss the next reader
repopulates it from the store. Patches read the whole list, build a new one
and write it back; nothing shared is mutated. Two concurrent patches are
last-write-wins, so one of them can be lost from the cache (never from the
store) until the key expires and is rebuilt.
"""

from __future__ import annotations

import logging
import threading
import time
from collections.abc import Callable, Sequence
from typing import Any, NamedTuple

from cachetools import TLRUCache

from doodlemon.core.creature_store import CreatureStore
from doodlemon.core.models import Creature

logger = logging.getLogger(__name__)

GALLERY_KEY = "gallery:all"

_MISS = object()


class _Entry(NamedTuple):
    value: Any
    ttl: float


def _entry_expiry(_key: str, entry: _Entry, now: float) -> float:
    return now + entry.ttl


class TTLStore:
    """Thread-safe key/value cache where every ``set`` carries its own TTL.

    ``get_or_set`` keeps one lock per key it has read through, until the key
    is deleted. Callers are expected to use a small, fixed set of keys.

    Args:
        maxsize: Maximum number of keys before least-recently-used eviction.
        timer: Clock used for expiry (injectable for tests).
    """

    def __init__(self, maxsize: int = 128, timer: Callable[[], float] = time.monotonic):
        self._cache: TLRUCache = TLRUCache(maxsize=maxsize, ttu=_entry_expiry, timer=timer)
        self._lock = threading.Lock()
        self._key_locks: dict[str, threading.Lock] = {}

    def get(self, key: str, default: Any = None) -> Any:
        """Return the cached value, or ``default`` on miss or expiry."""
        with self._lock:
            entry = self._cache.get(key, _MISS)
        if entry is _MISS:
            return default
        return entry.value

    def set(self, key: str, value: Any, ttl: float) -> None:
        """Store ``value`` under ``key`` for ``ttl`` seconds."""
        with self._lock:
            self._cache[key] = _Entry(value, ttl)

    def delete(self, key: str) -> None:
        """Drop ``key`` and its read-through lock."""
        with self._lock:
            self._cache.pop(key, None)
            self._key_locks.pop(key, None)

    def _lock_for(self, key: str) -> threading.Lock:
        with self._lock:
            return self._key_locks.setdefault(key, threading.Lock())

    def get_or_set(self, key: str, compute: Callable[[], Any], ttl: float) -> Any:
        """Read-through helper.

        On a miss, exactly one caller per key runs ``compute``; concurrent
        callers wait for it and then read the freshly stored value.
        """
        value = self.get(key, _MISS)
        if value is not _MISS:
            return value

        with self._lock_for(key):
            value = self.get(key, _MISS)
            if value is not _MISS:
                return value

            logger.debug(f"Cache miss: {key}")
            value = compute()
            self.set(key, value, ttl)
            return value


class GalleryCacheSync:
    """Keep the cached gallery list coherent with the creature store.

    Args:
        cache: The cache holding the gallery list.
        store: Source of truth used to populate the list on a miss.
        ttl: TTL in seconds applied on every write of the key.
    """

    def __init__(self, cache: TTLStore, store: CreatureStore, ttl: float = 300):
        self.cache = cache
        self.store = store
        self.ttl = ttl

    def get_gallery(self) -> list[Creature]:
        """Return all creatures newest-first, through the cache."""
        return list(self.cache.get_or_set(GALLERY_KEY, self.store.list, self.ttl))

    def _patch(
        self,
        transform: Callable[[list[Creature]], list[Creature] | None],
        action: str,
    ) -> None:
        """Apply ``transform`` to the cached list and write the result back.

        Does nothing when the key is missing, when it does not hold a
        sequence, or when ``transform`` returns ``None``. A failing cache is
        logged and left to expire.
        """
        try:
            cached = self.cache.get(GALLERY_KEY)
            if not isinstance(cached, Sequence) or isinstance(cached, (str, bytes)):
                logger.debug(f"Gallery cache not populated, skipping {action}")
                return

            updated = transform(list(cached))
            if updated is None:
                return

            self.cache.set(GALLERY_KEY, updated, self.ttl)
            logger.info(f"Cache updated: {GALLERY_KEY} ({action})")
        except Exception as e:
            logger.warning(f"Gallery cache update failed ({action}), will expire: {e}")

    def on_insert(self, creature: Creature) -> None:
        """Prepend a newly stored creature."""
        self._patch(lambda items: [creature, *items], f"insert #{creature.id}")

    def on_like(self, creature_id: int, updated: Creature) -> None:
        """Replace a creature in place after its likes changed."""
        self._replace(creature_id, updated, f"like #{creature_id}")

    def on_update(self, creature: Creature) -> None:
        """Replace a creature whose action images changed."""
        self._replace(creature.id, creature, f"update #{creature.id}")

    def _replace(self, creature_id: int, updated: Creature, action: str) -> None:
        def replace(items: list[Creature]) -> list[Creature] | None:
            index = _index_of(items, creature_id)
            if index is None:
                return None
            return [*items[:index], updated, *items[index + 1 :]]

        self._patch(replace, action)

    def on_delete(self, creature_id: int) -> None:
        """Remove a deleted creature."""

        def remove(items: list[Creature]) -> list[Creature] | None:
            index = _index_of(items, creature_id)
            if index is None:
                return None
            return [*items[:index], *items[index + 1 :]]

        self._patch(remove, f"delete #{creature_id}")


def _index_of(items: Sequence[Creature], creature_id: int) -> int | None:
    for index, item in enumerate(items):
        if item.id == creature_id:
            return index
    return None
