"""
Read-through cache with per-module invalidation.

Two backing stores are available per call:

- ``object``: an in-process dictionary of ``(value, expires_at)`` pairs.
- ``transient``: rows in the ``cache_entries`` table holding JSON values.

Every key lives under the ``ns_`` namespace and module-scoped keys are built
as ``ns_<module>_...`` so that a write to a module can drop all of its
entries with a single prefix match. There is no eviction beyond TTL expiry.
"""
from __future__ import annotations

import hashlib
import json
import logging
import re
import threading
import time
from typing import Any, Callable, Dict, Optional, Tuple

from sqlalchemy.exc import SQLAlchemyError

logger = logging.getLogger(__name__)

KEY_PREFIX = "ns_"
CACHE_GROUP = "nonprofitsuite"
DEFAULT_TTL = 300
STORE_OBJECT = "object"
STORE_TRANSIENT = "transient"

_MISSING = object()


def prefix_key(key: str) -> str:
    """Ensure ``key`` carries the ``ns_`` namespace exactly once."""
    if key.startswith(KEY_PREFIX):
        return key
    return f"{KEY_PREFIX}{key}"


def _pattern_regex(pattern: str) -> re.Pattern:
    parts = [re.escape(p) for p in prefix_key(pattern).split("*")]
    return re.compile("^" + ".*".join(parts) + "$")


def _pattern_like(pattern: str) -> str:
    escaped = prefix_key(pattern).replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    return escaped.replace("*", "%")


def format_bytes(size: int) -> str:
    if size >= 1048576:
        return f"{size / 1048576:.2f} MB"
    if size >= 1024:
        return f"{size / 1024:.2f} KB"
    return f"{size} B"


class ObjectStore:
    """Process-local store keyed by namespaced cache key."""

    def __init__(self, clock: Callable[[], float]):
        self._clock = clock
        self._entries: Dict[str, Tuple[Any, float]] = {}
        self._lock = threading.Lock()

    def get(self, key: str) -> Any:
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return _MISSING
            value, expires_at = entry
            if expires_at <= self._clock():
                del self._entries[key]
                return _MISSING
            return value

    def set(self, key: str, value: Any, ttl: int) -> None:
        with self._lock:
            self._entries[key] = (value, self._clock() + ttl)

    def delete(self, key: str) -> bool:
        with self._lock:
            return self._entries.pop(key, None) is not None

    def clear_pattern(self, pattern: str) -> int:
        rx = _pattern_regex(pattern)
        with self._lock:
            doomed = [k for k in self._entries if rx.match(k)]
            for k in doomed:
                del self._entries[k]
        return len(doomed)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def count(self) -> int:
        with self._lock:
            return len(self._entries)


class TransientStore:
    """Database-backed store; values must be JSON serializable."""

    def __init__(self, clock: Callable[[], float]):
        self._clock = clock

    def _session(self):
        from nonprofitsuite.db.database import SessionLocal

        return SessionLocal()

    def get(self, key: str) -> Any:
        from nonprofitsuite.db.models import CacheEntry

        db = self._session()
        try:
            row = db.query(CacheEntry).filter(CacheEntry.key == key).first()
            if row is None:
                return _MISSING
            if row.expires_at <= self._clock():
                db.delete(row)
                db.commit()
                return _MISSING
            return json.loads(row.value)
        finally:
            db.close()

    def set(self, key: str, value: Any, ttl: int) -> None:
        from nonprofitsuite.db.models import CacheEntry

        payload = json.dumps(value, default=str)
        db = self._session()
        try:
            row = db.get(CacheEntry, key)
            if row is None:
                row = CacheEntry(key=key)
                db.add(row)
            row.value = payload
            row.expires_at = self._clock() + ttl
            db.commit()
        except SQLAlchemyError:
            db.rollback()
            logger.warning("cache_transient_set_failed: key=%s", key, exc_info=True)
        finally:
            db.close()

    def delete(self, key: str) -> bool:
        from nonprofitsuite.db.models import CacheEntry

        db = self._session()
        try:
            removed = db.query(CacheEntry).filter(CacheEntry.key == key).delete(synchronize_session=False)
            db.commit()
            return bool(removed)
        finally:
            db.close()

    def clear_pattern(self, pattern: str) -> int:
        from nonprofitsuite.db.models import CacheEntry

        db = self._session()
        try:
            removed = (
                db.query(CacheEntry)
                .filter(CacheEntry.key.like(_pattern_like(pattern), escape="\\"))
                .delete(synchronize_session=False)
            )
            db.commit()
            return int(removed or 0)
        finally:
            db.close()

    def stats(self) -> Tuple[int, int]:
        from sqlalchemy import func
        from nonprofitsuite.db.models import CacheEntry

        db = self._session()
        try:
            count, size = db.query(
                func.count(CacheEntry.key), func.coalesce(func.sum(func.length(CacheEntry.value)), 0)
            ).one()
            return int(count or 0), int(size or 0)
        finally:
            db.close()


class Cache:
    """Read-through cache over the object and transient stores."""

    def __init__(self, clock: Callable[[], float] = time.time):
        self.clock = clock
        self.object_store = ObjectStore(self._now)
        self.transient_store = TransientStore(self._now)

    def _now(self) -> float:
        return self.clock()

    def _store(self, store: str):
        if store == STORE_TRANSIENT:
            return self.transient_store
        if store == STORE_OBJECT:
            return self.object_store
        raise ValueError(f"Unknown cache store: {store}")

    def get(self, key: str, store: str = STORE_OBJECT, default: Any = None) -> Any:
        value = self._store(store).get(prefix_key(key))
        return default if value is _MISSING else value

    def set(self, key: str, value: Any, ttl: int = DEFAULT_TTL, store: str = STORE_OBJECT) -> None:
        self._store(store).set(prefix_key(key), value, ttl)

    def delete(self, key: str, store: str = STORE_OBJECT) -> bool:
        return self._store(store).delete(prefix_key(key))

    def remember(
        self,
        key: str,
        producer: Callable[[], Any],
        ttl: int = DEFAULT_TTL,
        store: str = STORE_OBJECT,
    ) -> Any:
        """Return the cached value for ``key`` or compute, store and return it.

        A stored ``None`` counts as a hit. If ``producer`` raises, the
        exception propagates and nothing is stored.
        """
        backend = self._store(store)
        full_key = prefix_key(key)
        value = backend.get(full_key)
        if value is not _MISSING:
            return value
        logger.debug("cache_miss: key=%s store=%s", full_key, store)
        value = producer()
        backend.set(full_key, value, ttl)
        return value

    def clear_pattern(self, pattern: str) -> int:
        return self.object_store.clear_pattern(pattern) + self.transient_store.clear_pattern(pattern)

    def clear_all(self) -> int:
        self.object_store.clear()
        return self.transient_store.clear_pattern("*")

    def invalidate_module(self, module: str) -> int:
        return self.clear_pattern(f"{module}_*")

    def invalidate_item(self, module: str, item_id: Any) -> bool:
        key = item_key(module, item_id)
        removed_obj = self.object_store.delete(key)
        removed_tr = self.transient_store.delete(key)
        return removed_obj or removed_tr

    def invalidate_lists(self, module: str) -> int:
        return self.clear_pattern(f"{module}_list_*")

    def invalidate_related(self, module: str, item_id: Any = None) -> int:
        cleared = self.invalidate_lists(module)
        if item_id is not None and self.invalidate_item(module, item_id):
            cleared += 1
        if self.delete(stats_key(module)):
            cleared += 1
        return cleared

    def get_stats(self) -> Dict[str, Any]:
        count, size = self.transient_store.stats()
        return {
            "object_count": self.object_store.count(),
            "transient_count": count,
            "transient_size": format_bytes(size),
            "cache_group": CACHE_GROUP,
        }


def list_key(module: str, args: Optional[Dict[str, Any]] = None) -> str:
    """Key for a cached list query; args are hashed in canonical JSON form."""
    canonical = json.dumps(args or {}, sort_keys=True, default=str)
    digest = hashlib.md5(canonical.encode("utf-8")).hexdigest()
    return f"{KEY_PREFIX}{module}_list_{digest}"


def item_key(module: str, item_id: Any) -> str:
    return f"{KEY_PREFIX}{module}_item_{item_id}"


def stats_key(context: str) -> str:
    return f"{KEY_PREFIX}stats_{context}"


_cache = Cache()


def get_cache() -> Cache:
    return _cache


def remember(key: str, producer: Callable[[], Any], ttl: int = DEFAULT_TTL, store: str = STORE_OBJECT) -> Any:
    return _cache.remember(key, producer, ttl=ttl, store=store)


def get(key: str, store: str = STORE_OBJECT, default: Any = None) -> Any:
    return _cache.get(key, store=store, default=default)


def set(key: str, value: Any, ttl: int = DEFAULT_TTL, store: str = STORE_OBJECT) -> None:  # noqa: A001
    _cache.set(key, value, ttl=ttl, store=store)


def delete(key: str, store: str = STORE_OBJECT) -> bool:
    return _cache.delete(key, store=store)


def clear_pattern(pattern: str) -> int:
    return _cache.clear_pattern(pattern)


def clear_all() -> int:
    return _cache.clear_all()


def invalidate_module(module: str) -> int:
    return _cache.invalidate_module(module)


def invalidate_item(module: str, item_id: Any) -> bool:
    return _cache.invalidate_item(module, item_id)


def invalidate_lists(module: str) -> int:
    return _cache.invalidate_lists(module)


def invalidate_related(module: str, item_id: Any = None) -> int:
    return _cache.invalidate_related(module, item_id)


def get_stats() -> Dict[str, Any]:
    return _cache.get_stats()
