"""Local cache and sync layer for catalogs of remote JSON documents.

This library keeps a fixed set of named JSON documents stored in a remote
folder (e.g., on Dropbox) mirrored on local disk, decodes them on demand,
and notifies consumers when a remote document changes.
"""

from importlib.metadata import PackageNotFoundError, version

from .catalog import Catalog, CatalogEnum, CatalogItem, NamedItem
from .channel import Subscription, UpdateChannel
from .connectivity import ConnectivityProbe, ConnectivitySignal
from .errors import (
    ConfigError,
    DBXJSONError,
    DecodeError,
    NotAnObjectError,
    NotCachedError,
    StorageUnavailableError,
)
from .index import CacheEntry, CacheIndex
from .poller import PollerState
from .remote import (
    DropboxRemoteStore,
    LocalFolderRemoteStore,
    RemoteError,
    RemoteStore,
    UnauthorizedError,
)
from .service import JSONSyncService

try:
    __version__ = version("dbxjson")
except PackageNotFoundError:  # pragma: no cover - running from a source tree
    __version__ = "0.0.0"

__all__ = [
    "CacheEntry",
    "CacheIndex",
    "Catalog",
    "CatalogEnum",
    "CatalogItem",
    "ConfigError",
    "ConnectivityProbe",
    "ConnectivitySignal",
    "DBXJSONError",
    "DecodeError",
    "DropboxRemoteStore",
    "JSONSyncService",
    "LocalFolderRemoteStore",
    "NamedItem",
    "NotAnObjectError",
    "NotCachedError",
    "PollerState",
    "RemoteError",
    "RemoteStore",
    "StorageUnavailableError",
    "Subscription",
    "UnauthorizedError",
    "UpdateChannel",
    "__version__",
]
