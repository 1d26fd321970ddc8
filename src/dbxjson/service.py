"""Module implementing JSONSyncService."""

from __future__ import annotations

import logging
from collections.abc import Callable
from pathlib import Path
from typing import Any, TypeVar

from .catalog import Catalog, CatalogItem
from .channel import Subscription, UpdateChannel
from .connectivity import ConnectivitySignal
from .decode import decode_as, decode_structured
from .engine import SyncEngine
from .index import CacheEntry, CacheIndex
from .poller import DEFAULT_POLL_INTERVAL, Poller, PollerState
from .remote import RemoteStore
from .store import STORE_DEFAULT_SUBDIR, LocalStore

T = TypeVar("T")

log = logging.getLogger("dbxjson/service")


class JSONSyncService:
    """
    Keep catalogs of remote JSON documents mirrored on local disk.

    Typical usage:

        with JSONSyncService(DropboxRemoteStore(token)) as service:
            catalog = Catalog.from_enum(JSONFile)
            service.load_local_files(catalog)
            service.prepare_content(catalog)
            genres = service.get_decoded(JSONFile.GENRES, list[Genre])

    Reads never touch the network. While the network is reachable and
    content has been prepared, a poller refreshes documents whose remote
    revision changed and publishes the corresponding items on `updates`.
    """

    def __init__(
        self,
        remote: RemoteStore | None = None,
        *,
        data_dir: str | Path | None = None,
        subdir: str = STORE_DEFAULT_SUBDIR,
        connectivity: ConnectivitySignal | None = None,
        poll_interval: float = DEFAULT_POLL_INTERVAL,
        max_workers: int = 8,
    ) -> None:
        """
        Initialize the service.

        Parameters:
            remote: the remote store or None to work with local files only.
            data_dir: directory holding the cache; defaults to .dbxjson/
                in the current working directory.
            subdir: name of the directory, inside data_dir, holding the documents.
            connectivity: optional reachability signal; without it we assume
                the network is reachable.
            poll_interval: seconds between two poll ticks.
            max_workers: maximum number of concurrent entry refreshes.
        """
        self.store = LocalStore(data_dir, subdir=subdir)
        self.index = CacheIndex()
        self.updates: UpdateChannel[CatalogItem] = UpdateChannel()
        self.engine = SyncEngine(
            store=self.store,
            remote=remote,
            index=self.index,
            on_prepared=self._on_prepared,
        )
        self.poller = Poller(
            index=self.index,
            store=self.store,
            remote=remote,
            channel=self.updates,
            can_start=lambda: self.engine.prepared,
            interval=poll_interval,
            max_workers=max_workers,
        )
        self.connectivity = connectivity
        self._unsubscribe: Callable[[], None] | None = None
        if connectivity is not None:
            self._unsubscribe = connectivity.subscribe(self._on_connectivity)

    @property
    def data_dir(self) -> Path:
        """Return the data directory used by the cache."""
        return self.store.data_dir

    @property
    def prepared(self) -> bool:
        return self.engine.prepared

    @property
    def poller_state(self) -> PollerState:
        return self.poller.state

    def load_local_files(self, catalog: Catalog) -> bool:
        """Index the local copies of the catalog; False if any is missing."""
        return self.engine.load_local_files(catalog)

    def prepare_content(self, catalog: Catalog) -> bool:
        """
        Download the catalog; remote failures are logged and reported as False.

        Raises:
            StorageUnavailableError: if the data directory cannot be used.
        """
        return self.engine.prepare_content(catalog)

    def get_entry(self, item: CatalogItem) -> CacheEntry:
        return self.engine.get(item)

    def get_raw(self, item: CatalogItem) -> bytes:
        """
        Return the cached bytes of the item.

        Raises:
            NotCachedError: if the item has not been loaded.
            FileNotFoundError: if the local copy vanished.
        """
        entry = self.engine.get(item)
        return self.store.read(entry.local_path)

    def get_decoded(self, item: CatalogItem, shape: type[T]) -> T:
        """
        Return the cached document decoded into shape (e.g., `list[Genre]`).

        Raises:
            NotCachedError: if the item has not been loaded.
            FileNotFoundError: if the local copy vanished.
            DecodeError: if the document is malformed or does not match shape.
        """
        return decode_as(self.get_raw(item), shape)

    def get_structured(self, item: CatalogItem) -> dict[str, Any]:
        """
        Return the cached document as a dictionary.

        Raises:
            NotCachedError: if the item has not been loaded.
            FileNotFoundError: if the local copy vanished.
            DecodeError: if the document is malformed.
            NotAnObjectError: if the document is not a JSON object.
        """
        return decode_structured(self.get_raw(item))

    def subscribe(self) -> Subscription[CatalogItem]:
        """Subscribe to the items updated from now on."""
        return self.updates.subscribe()

    def start_polling(self) -> bool:
        return self.poller.start()

    def stop_polling(self) -> None:
        self.poller.stop()

    def poll_once(self) -> int:
        """
        Run a poll tick, wait for it and return the number of refreshed entries.

        After close() this does nothing and returns 0.

        Raises:
            StorageUnavailableError: if the data directory cannot be used.
        """
        futures = self.poller.tick()
        return sum(1 for future in futures if future.result())

    def close(self) -> None:
        """Release the connectivity subscription and stop polling."""
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None
        self.poller.close()
        self.updates.close()

    def _on_prepared(self) -> None:
        if self.connectivity is None or self.connectivity.value is not False:
            self.poller.start()

    def _on_connectivity(self, reachable: bool) -> None:
        if reachable:
            self.poller.start()
        else:
            self.poller.stop()

    def __enter__(self) -> JSONSyncService:
        return self

    def __exit__(self, exc_type, exc_value, traceback) -> None:
        self.close()
