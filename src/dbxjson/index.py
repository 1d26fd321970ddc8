"""In-memory index of the cached documents."""

from __future__ import annotations

import posixpath
import threading
from collections.abc import Iterable
from dataclasses import dataclass
from pathlib import Path

from .catalog import CatalogItem


@dataclass(frozen=True, kw_only=True)
class CacheEntry:
    """
    What we know about one cached catalog item.

    Entries are immutable: updates replace the whole entry inside the
    index, so readers always observe a consistent (local_path, revision) pair.

    Attributes:
        item: the owning catalog item.
        remote_path: canonical lowercase remote path, or "" when the entry
            was loaded from disk and the remote has not confirmed it yet.
        local_path: path of the local copy.
        revision: remote revision tag, or "" when unknown.
        folder_path: remote folder of the catalog the item belongs to.
    """

    item: CatalogItem
    remote_path: str
    local_path: Path
    revision: str
    folder_path: str = ""

    @property
    def file_name(self) -> str:
        return self.item.file_name

    @property
    def confirmed(self) -> bool:
        """Whether a remote pass has confirmed the remote path."""
        return self.remote_path != ""

    @property
    def poll_path(self) -> str:
        """Return the remote path to check for new revisions."""
        if self.remote_path:
            return self.remote_path
        return posixpath.join(self.folder_path or "/", self.file_name).lower()


class CacheIndex:
    """
    Thread-safe mapping from file name to CacheEntry.

    The index lock only protects the dictionary and is never held while
    performing I/O. Use `entry_lock` to serialize refreshes of one key.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._entries: dict[str, CacheEntry] = {}
        self._key_locks: dict[str, threading.Lock] = {}

    def get(self, file_name: str) -> CacheEntry | None:
        with self._lock:
            return self._entries.get(file_name)

    def put(self, entry: CacheEntry) -> None:
        with self._lock:
            self._entries[entry.file_name] = entry

    def update(self, entries: Iterable[CacheEntry]) -> None:
        """Insert or replace all the given entries as a single step."""
        staged = {entry.file_name: entry for entry in entries}
        with self._lock:
            self._entries.update(staged)

    def snapshot(self) -> list[CacheEntry]:
        """Return a copy of the current entries."""
        with self._lock:
            return list(self._entries.values())

    def file_names(self) -> list[str]:
        with self._lock:
            return list(self._entries)

    def entry_lock(self, file_name: str) -> threading.Lock:
        """Return the lock serializing updates of the given key."""
        with self._lock:
            lock = self._key_locks.get(file_name)
            if lock is None:
                lock = self._key_locks[file_name] = threading.Lock()
            return lock

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def __contains__(self, file_name: object) -> bool:
        with self._lock:
            return file_name in self._entries
