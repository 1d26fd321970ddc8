"""
Remote stores holding the authoritative copy of the JSON documents.

The cache only needs a narrow contract from the remote (see `RemoteStore`):
listing a folder with pagination, reading the revision of a file and
downloading its bytes. `DropboxRemoteStore` implements it on top of the
Dropbox HTTP API v2:

    remote = DropboxRemoteStore(os.environ["DROPBOX_ACCESS_TOKEN"])

`LocalFolderRemoteStore` serves a local directory instead, which is
useful for development and testing. Any other object implementing the
protocol works as well.
"""

from .base import (
    ListFolderResult,
    RemoteError,
    RemoteFile,
    RemoteStore,
    UnauthorizedError,
    list_all_files,
)
from .dropbox import DropboxRemoteStore
from .local import LocalFolderRemoteStore

__all__ = [
    "DropboxRemoteStore",
    "ListFolderResult",
    "LocalFolderRemoteStore",
    "RemoteError",
    "RemoteFile",
    "RemoteStore",
    "UnauthorizedError",
    "list_all_files",
]
