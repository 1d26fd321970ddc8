"""Catalogs of named JSON documents living in a single remote folder.

A catalog tells the cache which documents to mirror. The usual way to
declare one is an enumeration whose values are the file names:

    class JSONFile(CatalogEnum):
        GENRES = "genres.json"

        @classmethod
        def folder_path(cls) -> str:
            return "/JSONs"

    catalog = Catalog.from_enum(JSONFile)

The enum members are the identities published on the update channel, so
the application can match them back against its own enum. Catalogs read
from configuration files use `NamedItem` instead.
"""

from __future__ import annotations

import posixpath
from collections.abc import Iterable
from dataclasses import dataclass, field
from enum import Enum
from pathlib import PurePosixPath
from typing import Protocol


class CatalogItem(Protocol):
    """Hashable identity of a single document inside a catalog."""

    @property
    def file_name(self) -> str: ...

    def __hash__(self) -> int: ...


class CatalogEnum(Enum):
    """
    Base class for enum-declared catalogs.

    Member values are the file names. Subclasses must override the
    `folder_path` classmethod to return the remote folder.
    """

    @classmethod
    def folder_path(cls) -> str:
        raise NotImplementedError(f"{cls.__name__} must define folder_path()")

    @property
    def file_name(self) -> str:
        return str(self.value)


@dataclass(frozen=True, kw_only=True)
class NamedItem:
    """Catalog item declared by name, e.g., from a configuration file."""

    name: str
    file_name: str

    def __str__(self) -> str:
        return self.name


@dataclass(frozen=True, kw_only=True)
class Catalog:
    """
    Descriptor of a logical group of documents.

    Attributes:
        folder_path: remote folder containing the files ("" is the root).
            "/" and trailing slashes are normalized away.
        items: the ordered, finite set of item identities.
    """

    folder_path: str
    items: tuple[CatalogItem, ...]
    _by_file_name: dict[str, CatalogItem] = field(
        init=False, repr=False, compare=False, hash=False
    )

    def __post_init__(self):
        if self.folder_path and not self.folder_path.startswith("/"):
            raise ValueError(f"folder path must be absolute: {self.folder_path!r}")
        # Dropbox names the root "" and rejects trailing slashes.
        object.__setattr__(self, "folder_path", self.folder_path.rstrip("/"))
        items = tuple(self.items)
        by_file_name: dict[str, CatalogItem] = {}
        for item in items:
            name = item.file_name
            if not name or "/" in name or name in (".", ".."):
                raise ValueError(f"invalid file name: {name!r}")
            if name in by_file_name:
                raise ValueError(f"duplicate file name in catalog: {name}")
            by_file_name[name] = item
        object.__setattr__(self, "items", items)
        object.__setattr__(self, "_by_file_name", by_file_name)

    @classmethod
    def from_enum(cls, enum_type: type[CatalogEnum]) -> Catalog:
        """Build a catalog from a `CatalogEnum` subclass."""
        return cls(folder_path=enum_type.folder_path(), items=tuple(enum_type))

    @classmethod
    def from_files(cls, folder_path: str, file_names: Iterable[str]) -> Catalog:
        """Build a catalog of `NamedItem` named after each file stem."""
        items = tuple(
            NamedItem(name=PurePosixPath(name).stem, file_name=name) for name in file_names
        )
        return cls(folder_path=folder_path, items=items)

    def file_names(self) -> list[str]:
        """Return the file names in catalog order."""
        return [item.file_name for item in self.items]

    def item_for(self, file_name: str) -> CatalogItem | None:
        """Return the item owning the given file name, if any."""
        return self._by_file_name.get(file_name)

    def remote_path_for(self, item: CatalogItem) -> str:
        """Return the canonical (lowercase) remote path where we expect the item."""
        return posixpath.join(self.folder_path or "/", item.file_name).lower()

    def __len__(self) -> int:
        return len(self.items)
