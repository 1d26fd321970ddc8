"""Interface of the remote stores the cache synchronizes with."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Protocol

from ..errors import DBXJSONError


class RemoteError(DBXJSONError):
    """A remote listing, metadata or download request failed."""

    def __init__(self, message: str, *, status: int | None = None, summary: str = "") -> None:
        super().__init__(message)
        self.status = status
        self.summary = summary


class UnauthorizedError(RemoteError):
    """The remote refused our credentials or we do not have any."""


@dataclass(frozen=True, kw_only=True)
class RemoteFile:
    """
    Metadata of a single remote file.

    Attributes:
        name: the file name (last path component, original case).
        path_lower: the canonical lowercase path.
        rev: opaque revision tag; differs whenever the content may differ.
    """

    name: str
    path_lower: str
    rev: str


@dataclass(frozen=True, kw_only=True)
class ListFolderResult:
    """A page of a folder listing; cursor is None on the last page."""

    entries: list[RemoteFile] = field(default_factory=list)
    cursor: str | None = None


class RemoteStore(Protocol):
    """
    Represent the remote storage holding the authoritative copy
    of the JSON documents (e.g., a Dropbox folder).

    Methods:
        is_authorized: whether remote calls may be attempted at all.
        list_folder: return the first page of files inside a folder.
        list_folder_continue: return the page following the given cursor.
        get_metadata: return the metadata of a file.
        download: return the bytes of a file.
    """

    def is_authorized(self) -> bool: ...

    def list_folder(self, path: str) -> ListFolderResult: ...

    def list_folder_continue(self, cursor: str) -> ListFolderResult: ...

    def get_metadata(self, path: str) -> RemoteFile: ...

    def download(self, path: str) -> bytes: ...


def list_all_files(remote: RemoteStore, path: str) -> list[RemoteFile]:
    """List all the files inside a folder following the pagination cursor."""
    result = remote.list_folder(path)
    files = list(result.entries)
    while result.cursor:
        result = remote.list_folder_continue(result.cursor)
        files.extend(result.entries)
    return files
