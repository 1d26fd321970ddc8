"""Module managing the on-disk copy of the cached JSON documents.

Directory layout:

    $datadir/json/<file_name>                one file per catalog item
    $datadir/state/locks/<file_name>.lock    per-file write locks

Where $datadir defaults to `.dbxjson` in the current working directory.
The `json` directory contains only documents: its contents are the whole
persisted state (revisions are kept in memory only).
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from tempfile import TemporaryDirectory
from typing import Final

from filelock import FileLock

from .errors import StorageUnavailableError

STORE_DEFAULT_DIRNAME: Final[str] = ".dbxjson"
STORE_DEFAULT_SUBDIR: Final[str] = "json"

log = logging.getLogger("dbxjson/store")


def data_dir_or_default(data_dir: str | Path | None) -> Path:
    """
    Return data_dir as a Path if not empty. Otherwise return the
    default value for the data_dir (i.e., `./.dbxjson` like git).
    """
    return Path.cwd() / STORE_DEFAULT_DIRNAME if data_dir is None else Path(data_dir)


class LocalStore:
    """Flat directory of JSON documents under the data directory."""

    def __init__(
        self,
        data_dir: str | Path | None = None,
        *,
        subdir: str = STORE_DEFAULT_SUBDIR,
    ) -> None:
        self.data_dir = data_dir_or_default(data_dir)
        self.cache_dir = self.data_dir / subdir
        self.locks_dir = self.data_dir / "state" / "locks"

    def resolve(self, file_name: str) -> Path:
        """
        Return the local path for the given file name, creating the
        cache directory on first use.

        Raises:
            ValueError: if the file name is not a plain file name.
            StorageUnavailableError: if the cache directory cannot be created.
        """
        if not file_name or Path(file_name).name != file_name or file_name in (".", ".."):
            raise ValueError(f"invalid file name: {file_name!r}")
        _ensure_dir(self.cache_dir)
        return self.cache_dir / file_name

    def exists(self, path: Path) -> bool:
        """Return whether the given file exists."""
        return path.is_file()

    def lock(self, path: Path) -> FileLock:
        """Return a FileLock serializing writers of the given file."""
        _ensure_dir(self.locks_dir)
        return FileLock(self.locks_dir / f"{path.name}.lock")

    def write_atomic(self, path: Path, data: bytes) -> None:
        """
        Replace the content of path with data. Either the whole new content
        becomes visible or the previous file is left untouched.
        """
        with self.lock(path):
            # Operate inside a temporary directory in the destination directory so
            # `os.replace()` is atomic and we avoid cross-filesystem moves.
            with TemporaryDirectory(dir=path.parent) as tmp_dir:
                tmp_file = Path(tmp_dir) / path.name
                with open(tmp_file, "wb") as filep:
                    filep.write(data)
                    filep.flush()
                    os.fsync(filep.fileno())
                os.replace(tmp_file, path)
        log.debug("wrote %d bytes to %s", len(data), path)

    def read(self, path: Path) -> bytes:
        """
        Return the content of the given file.

        Raises:
            FileNotFoundError: if the file has been removed.
        """
        with open(path, "rb") as filep:
            return filep.read()


def _ensure_dir(path: Path) -> None:
    try:
        path.mkdir(parents=True, exist_ok=True)
    except OSError as exc:
        raise StorageUnavailableError(f"cannot use storage directory {path}: {exc}") from exc
