"""Module loading catalogs into the cache index.

Loading follows a local-first, remote-best-effort policy:

1. `load_local_files` indexes the documents already on disk, so the
   application can read them without any network access;

2. `prepare_content` downloads the catalog from the remote and, when
   the whole pass succeeds, marks the engine as prepared, which allows
   the poller to start.

A failing remote pass never raises: we log the reason and keep serving
whatever the index already contains. The only exception is
StorageUnavailableError: without a usable data directory there is
nothing left to serve.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable

from .catalog import Catalog, CatalogItem
from .errors import NotCachedError, StorageUnavailableError
from .index import CacheEntry, CacheIndex
from .remote import RemoteStore, list_all_files
from .store import LocalStore

log = logging.getLogger("dbxjson/engine")


class SyncEngine:
    """Populate and refresh the CacheIndex from local files and the remote."""

    def __init__(
        self,
        *,
        store: LocalStore,
        remote: RemoteStore | None = None,
        index: CacheIndex | None = None,
        on_prepared: Callable[[], None] | None = None,
    ) -> None:
        self.store = store
        self.remote = remote
        self.index = index if index is not None else CacheIndex()
        self.on_prepared = on_prepared
        self._prepared = threading.Event()

    @property
    def prepared(self) -> bool:
        """Whether at least one remote pass completed successfully."""
        return self._prepared.is_set()

    def remote_available(self) -> bool:
        """Whether we may attempt remote calls at all."""
        return self.remote is not None and self.remote.is_authorized()

    def load_local_files(self, catalog: Catalog) -> bool:
        """
        Index the local copy of every catalog item.

        This is all-or-nothing: when any file is missing we return False
        and the index is left untouched.
        """
        log.info("loading local files of %s... start", _describe(catalog))
        staged: list[CacheEntry] = []
        for item in catalog.items:
            path = self.store.resolve(item.file_name)
            if not self.store.exists(path):
                log.warning(
                    "loading local files of %s... missing %s", _describe(catalog), path
                )
                return False
            staged.append(
                CacheEntry(
                    item=item,
                    remote_path="",
                    local_path=path,
                    revision="",
                    folder_path=catalog.folder_path,
                )
            )
        self.index.update(staged)
        log.info("loading local files of %s... ok", _describe(catalog))
        return True

    def prepare_content(self, catalog: Catalog) -> bool:
        """
        Download the catalog from the remote and return whether we did it.

        Without an authorized remote this returns False immediately. On any
        remote or disk failure the pass is abandoned, nothing is committed
        to the index and False is returned; the failure is only logged.

        Raises:
            StorageUnavailableError: if the data directory cannot be used.
        """
        if not self.remote_available():
            log.info("prepare %s... skipped: remote not authorized", _describe(catalog))
            return False
        try:
            log.info("prepare %s... start", _describe(catalog))
            staged = self._prepare(catalog)
        except StorageUnavailableError as exc:
            log.error("prepare %s... failure: %s", _describe(catalog), exc)
            raise
        except Exception as exc:
            log.warning("prepare %s... failure: %s", _describe(catalog), exc)
            return False

        self.index.update(staged)
        self._prepared.set()
        log.info("prepare %s... ok (%d file(s))", _describe(catalog), len(staged))
        if self.on_prepared is not None:
            self.on_prepared()
        return True

    def _prepare(self, catalog: Catalog) -> list[CacheEntry]:
        assert self.remote is not None
        staged: list[CacheEntry] = []
        for remote_file in list_all_files(self.remote, catalog.folder_path):
            item = catalog.item_for(remote_file.name)
            if item is None:
                log.debug("ignoring %s: not in catalog", remote_file.path_lower)
                continue
            data = self.remote.download(remote_file.path_lower)
            path = self.store.resolve(item.file_name)
            self.store.write_atomic(path, data)
            staged.append(
                CacheEntry(
                    item=item,
                    remote_path=remote_file.path_lower,
                    local_path=path,
                    revision=remote_file.rev,
                    folder_path=catalog.folder_path,
                )
            )
        return staged

    def get(self, item: CatalogItem) -> CacheEntry:
        """
        Return the entry of the given item without touching the disk.

        Raises:
            NotCachedError: if the item has not been loaded yet.
        """
        entry = self.index.get(item.file_name)
        if entry is None:
            raise NotCachedError(item.file_name)
        return entry


def _describe(catalog: Catalog) -> str:
    return f"catalog {catalog.folder_path or '/'}"
