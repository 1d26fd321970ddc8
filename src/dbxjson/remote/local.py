"""Local filesystem remote store useful for development and testing."""

from __future__ import annotations

import hashlib
from pathlib import Path, PurePosixPath

from .base import ListFolderResult, RemoteError, RemoteFile


class LocalFolderRemoteStore:
    """
    Treat a directory on the local filesystem as the remote.

    Remote paths are interpreted relative to the root directory. The
    revision of a file is the SHA256 of its content, so editing a file
    is enough to make the poller pick it up.
    """

    def __init__(self, root: str | Path, *, page_size: int = 100) -> None:
        self.root = Path(root).expanduser().resolve()
        if not self.root.is_dir():
            raise FileNotFoundError(f"Local folder does not exist: {self.root}")
        self.page_size = max(1, int(page_size))

    def is_authorized(self) -> bool:
        return True

    def list_folder(self, path: str) -> ListFolderResult:
        return self._page(path, 0)

    def list_folder_continue(self, cursor: str) -> ListFolderResult:
        path, _, offset = cursor.rpartition("#")
        try:
            return self._page(path, int(offset))
        except ValueError as exc:
            raise RemoteError(f"invalid cursor: {cursor!r}") from exc

    def get_metadata(self, path: str) -> RemoteFile:
        local = self._local_path(path)
        if not local.is_file():
            raise RemoteError(f"not found: {path}", summary="path/not_found/")
        return self._metadata(path, local)

    def download(self, path: str) -> bytes:
        local = self._local_path(path)
        if not local.is_file():
            raise RemoteError(f"not found: {path}", summary="path/not_found/")
        return local.read_bytes()

    def _page(self, path: str, offset: int) -> ListFolderResult:
        folder = self._local_path(path)
        if not folder.is_dir():
            raise RemoteError(f"not a folder: {path}", summary="path/not_folder/")
        files = sorted(child for child in folder.iterdir() if child.is_file())
        page = files[offset : offset + self.page_size]
        entries = [
            self._metadata(str(PurePosixPath(path or "/") / child.name), child) for child in page
        ]
        next_offset = offset + len(page)
        cursor = f"{path}#{next_offset}" if next_offset < len(files) else None
        return ListFolderResult(entries=entries, cursor=cursor)

    def _local_path(self, path: str) -> Path:
        # Canonical paths are lowercase while names on disk may not be.
        relative = PurePosixPath(path.lstrip("/"))
        if ".." in relative.parts:
            raise RemoteError(f"invalid path: {path}", summary="path/malformed_path/")
        candidate = self.root.joinpath(*relative.parts)
        if candidate.exists() or not relative.parts:
            return candidate
        return self._case_insensitive(relative) or candidate

    def _case_insensitive(self, relative: PurePosixPath) -> Path | None:
        current = self.root
        for part in relative.parts:
            if not current.is_dir():
                return None
            matches = [child for child in current.iterdir() if child.name.lower() == part.lower()]
            if not matches:
                return None
            current = matches[0]
        return current

    @staticmethod
    def _metadata(path: str, local: Path) -> RemoteFile:
        return RemoteFile(name=local.name, path_lower=path.lower(), rev=compute_sha256(local))


def compute_sha256(path: Path) -> str:
    """Compute SHA256 hash of a file."""
    sha256 = hashlib.sha256()
    with open(path, "rb") as fp:
        while chunk := fp.read(8192):
            sha256.update(chunk)
    return sha256.hexdigest()
