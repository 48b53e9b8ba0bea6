"""TTL-based response caching for TheTVDB API.

The gateway maps a structured :class:`CacheKey` to the raw response bytes and
the time they were fetched. Expired entries are revalidated with a conditional
request (ETag / Last-Modified); a "not modified" answer keeps the stored bytes
and only refreshes their timestamp.
"""

from __future__ import annotations

import base64
import json
import logging
import os
import shutil
import threading
from dataclasses import dataclass, replace
from datetime import UTC, datetime, timedelta
from pathlib import Path
from typing import Any, Callable, NamedTuple, Optional, Protocol

from .errors import TransportError
from .utils import ensure_directory, hash_text, language_code

LOGGER = logging.getLogger(__name__)

ONE_DAY = timedelta(days=1)
ONE_WEEK = timedelta(weeks=1)
ONE_MONTH = timedelta(days=30)

# Locale slot for requests that are not language specific
NO_LOCALE = "*"


class CacheKey(NamedTuple):
    namespace: str
    locale: str
    path: str

    @classmethod
    def for_request(cls, namespace: str, path: str, locale: Optional[str] = None) -> CacheKey:
        return cls(namespace, language_code(locale) or NO_LOCALE, path)

    def digest(self) -> str:
        return hash_text("\n".join(self))


@dataclass(frozen=True)
class CacheEntry:
    content: bytes
    fetched_at: datetime
    etag: Optional[str] = None
    last_modified: Optional[str] = None

    def is_fresh(self, ttl: timedelta, now: datetime) -> bool:
        return now - self.fetched_at <= ttl


@dataclass(frozen=True)
class FetchResult:
    """Body and validators of a successful (non-304) response."""

    content: bytes
    etag: Optional[str] = None
    last_modified: Optional[str] = None


# Receives the stale entry (or None) and returns a FetchResult, or None for 304
Supplier = Callable[[Optional[CacheEntry]], Optional[FetchResult]]


class CacheStore(Protocol):
    """Key/value store holding cache entries; each operation is atomic per key."""

    def get(self, key: CacheKey) -> Optional[CacheEntry]: ...

    def put(self, key: CacheKey, entry: CacheEntry) -> None: ...

    def remove(self, key: CacheKey) -> None: ...

    def clear(self) -> None: ...


class MemoryCacheStore:
    """Process-local store, mainly for tests and short-lived sessions."""

    def __init__(self) -> None:
        self._entries: dict[CacheKey, CacheEntry] = {}
        self._lock = threading.Lock()

    def get(self, key: CacheKey) -> Optional[CacheEntry]:
        with self._lock:
            return self._entries.get(key)

    def put(self, key: CacheKey, entry: CacheEntry) -> None:
        with self._lock:
            self._entries[key] = entry

    def remove(self, key: CacheKey) -> None:
        with self._lock:
            self._entries.pop(key, None)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)


class DirectoryCacheStore:
    """One JSON file per key under ``cache_dir``.

    File names are the SHA-256 digest of the key; the key itself is stored in
    the file and checked on load. Writes go to a temporary file that is then
    renamed into place, so readers never observe a partial entry.
    """

    def __init__(self, cache_dir: Path) -> None:
        self.cache_dir = cache_dir
        self._lock = threading.Lock()

    def _entry_path(self, key: CacheKey) -> Path:
        return self.cache_dir / f"{key.digest()}.json"

    def get(self, key: CacheKey) -> Optional[CacheEntry]:
        cache_file = self._entry_path(key)
        if not cache_file.exists():
            return None

        try:
            with cache_file.open("r", encoding="utf-8") as f:
                data = json.load(f)
        except (json.JSONDecodeError, OSError) as exc:
            LOGGER.warning("Failed to read cache file %s: %s", cache_file, exc)
            return None

        if not isinstance(data, dict) or data.get("key") != list(key):
            LOGGER.debug("Ignoring mismatched cache file %s", cache_file)
            return None

        try:
            fetched_at = datetime.fromisoformat(data["fetched_at"])
            if fetched_at.tzinfo is None:
                fetched_at = fetched_at.replace(tzinfo=UTC)
            content = base64.b64decode(data["content"])
        except (KeyError, TypeError, ValueError) as exc:
            LOGGER.warning("Failed to parse cache file %s: %s", cache_file, exc)
            return None

        return CacheEntry(
            content=content,
            fetched_at=fetched_at,
            etag=data.get("etag"),
            last_modified=data.get("last_modified"),
        )

    def put(self, key: CacheKey, entry: CacheEntry) -> None:
        cache_file = self._entry_path(key)
        payload: dict[str, Any] = {
            "key": list(key),
            "fetched_at": entry.fetched_at.isoformat(timespec="seconds"),
            "etag": entry.etag,
            "last_modified": entry.last_modified,
            "content": base64.b64encode(entry.content).decode("ascii"),
        }
        temp_file = cache_file.with_suffix(f".{os.getpid()}.tmp")
        with self._lock:
            try:
                ensure_directory(self.cache_dir)
                with temp_file.open("w", encoding="utf-8") as f:
                    json.dump(payload, f, ensure_ascii=False, indent=2)
                os.replace(temp_file, cache_file)
            except OSError as exc:
                LOGGER.warning("Failed to write cache file %s: %s", cache_file, exc)
                if temp_file.exists():
                    temp_file.unlink()

    def remove(self, key: CacheKey) -> None:
        with self._lock:
            self._entry_path(key).unlink(missing_ok=True)

    def clear(self) -> None:
        with self._lock:
            if self.cache_dir.exists():
                shutil.rmtree(self.cache_dir)


def _utc_now() -> datetime:
    return datetime.now(UTC)


class CacheGateway:
    """Serves responses from a :class:`CacheStore`, refetching expired entries."""

    def __init__(
        self,
        store: Optional[CacheStore] = None,
        clock: Callable[[], datetime] = _utc_now,
    ) -> None:
        self.store: CacheStore = store if store is not None else MemoryCacheStore()
        self._clock = clock

    def fetch(self, key: CacheKey, ttl: timedelta, supplier: Supplier) -> bytes:
        """Return the cached body for ``key``, calling ``supplier`` when it is missing or older than ``ttl``.

        Raises:
            TransportError: If the origin reports "not modified" for a key
                that has no cached entry. Supplier errors propagate unchanged.
        """
        entry = self.store.get(key)
        now = self._clock()

        if entry is not None and entry.is_fresh(ttl, now):
            LOGGER.debug("Using cached response (fresh): %s", key.path)
            return entry.content

        if entry is not None:
            LOGGER.debug("Cache expired, checking for updates: %s", key.path)

        result = supplier(entry)
        fetched_at = self._clock()

        if result is None:
            if entry is None:
                raise TransportError(f"Server reported not modified for uncached resource: {key.path}", 304)
            LOGGER.debug("Content unchanged (304), refreshing TTL: %s", key.path)
            self.store.put(key, replace(entry, fetched_at=fetched_at))
            return entry.content

        self.store.put(
            key,
            CacheEntry(
                content=result.content,
                fetched_at=fetched_at,
                etag=result.etag,
                last_modified=result.last_modified,
            ),
        )
        return result.content

    def invalidate(self, key: CacheKey) -> None:
        self.store.remove(key)

    def clear(self) -> None:
        self.store.clear()
