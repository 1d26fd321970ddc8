"""Module polling the remote for new revisions of the cached documents."""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import replace
from enum import Enum

from .catalog import CatalogItem
from .channel import UpdateChannel
from .errors import StorageUnavailableError
from .index import CacheEntry, CacheIndex
from .remote import RemoteStore
from .store import LocalStore

log = logging.getLogger("dbxjson/poller")

DEFAULT_POLL_INTERVAL = 10.0


class PollerState(str, Enum):
    """Lifecycle state of the Poller."""

    STOPPED = "stopped"
    RUNNING = "running"


class Poller:
    """
    Periodically check every cached entry for a new remote revision.

    Each tick submits one independent task per entry to a thread pool.
    A failure only affects its own entry. Stopping prevents future ticks
    but lets the tasks of the current tick complete.
    """

    def __init__(
        self,
        *,
        index: CacheIndex,
        store: LocalStore,
        remote: RemoteStore | None,
        channel: UpdateChannel[CatalogItem],
        can_start: Callable[[], bool] = lambda: True,
        interval: float = DEFAULT_POLL_INTERVAL,
        max_workers: int = 8,
    ) -> None:
        self.index = index
        self.store = store
        self.remote = remote
        self.channel = channel
        self.can_start = can_start
        self.interval = interval
        self._executor = ThreadPoolExecutor(
            max_workers=max_workers, thread_name_prefix="dbxjson-poll"
        )
        self._lock = threading.Lock()
        self._stop_event: threading.Event | None = None
        self._thread: threading.Thread | None = None
        self._closed = False

    @property
    def state(self) -> PollerState:
        with self._lock:
            return PollerState.RUNNING if self._thread is not None else PollerState.STOPPED

    @property
    def closed(self) -> bool:
        with self._lock:
            return self._closed

    def start(self) -> bool:
        """Start ticking unless already running or not allowed; return whether running."""
        with self._lock:
            if self._closed:
                log.debug("not starting the poller: closed")
                return False
            if self._thread is not None:
                return True
            if self.remote is None or not self.can_start():
                log.debug("not starting the poller: content not prepared")
                return False
            self._stop_event = threading.Event()
            self._thread = threading.Thread(
                target=self._loop,
                args=(self._stop_event,),
                name="dbxjson-poller",
                daemon=True,
            )
            self._thread.start()
        log.info("poller started (interval=%ss)", self.interval)
        return True

    def stop(self) -> None:
        """Stop scheduling ticks. In-flight entry refreshes run to completion."""
        with self._lock:
            if self._thread is None:
                return
            assert self._stop_event is not None
            self._stop_event.set()
            self._thread = None
            self._stop_event = None
        log.info("poller stopped")

    def close(self) -> None:
        """
        Stop for good and wait for the in-flight refreshes.

        A closed poller never starts again and its ticks submit nothing.
        """
        self.stop()
        with self._lock:
            self._closed = True
        self._executor.shutdown(wait=True)

    def tick(self) -> list[Future[bool]]:
        """Submit a refresh of every entry currently in the index."""
        entries = self.index.snapshot()
        with self._lock:
            if self._closed:
                return []
            log.debug("poll tick over %d entries", len(entries))
            return [
                self._executor.submit(self.refresh_entry, entry.file_name) for entry in entries
            ]

    def refresh_entry(self, file_name: str) -> bool:
        """
        Refresh the entry if the remote revision changed and return whether
        it was refreshed. Failures are logged and reported as False, except
        StorageUnavailableError, which is logged and raised.
        """
        with self.index.entry_lock(file_name):
            entry = self.index.get(file_name)
            if entry is None:
                return False
            try:
                updated = self._refresh(entry)
            except StorageUnavailableError as exc:
                log.error("polling %s... failure: %s", file_name, exc)
                raise
            except Exception as exc:
                log.warning("polling %s... failure: %s", file_name, exc)
                return False
            if updated is None:
                return False
            self.index.put(updated)
        log.info("polling %s... updated to revision %s", file_name, updated.revision)
        self.channel.publish(updated.item)
        return True

    def _refresh(self, entry: CacheEntry) -> CacheEntry | None:
        assert self.remote is not None
        remote_path = entry.poll_path
        metadata = self.remote.get_metadata(remote_path)
        if metadata.rev == entry.revision:
            return None
        data = self.remote.download(metadata.path_lower)
        path = self.store.resolve(entry.file_name)
        self.store.write_atomic(path, data)
        return replace(
            entry,
            remote_path=metadata.path_lower,
            local_path=path,
            revision=metadata.rev,
        )

    def _loop(self, stop_event: threading.Event) -> None:
        while not stop_event.wait(self.interval):
            if self.closed:
                break
            self.tick()
        with self._lock:
            if self._thread is threading.current_thread():
                self._thread = None
                self._stop_event = None
