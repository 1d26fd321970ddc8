"""Shared pytest fixtures for dbxjson tests."""

from pathlib import Path

import pytest
from dbxjson_fakes import COUNTRIES_V1, GENRES_V1, FakeRemote, JSONFile

from dbxjson.catalog import Catalog


@pytest.fixture
def catalog() -> Catalog:
    """Return the catalog built from JSONFile."""
    return Catalog.from_enum(JSONFile)


@pytest.fixture
def fake_remote() -> FakeRemote:
    """Return a remote containing both JSONFile documents at revision rev1."""
    remote = FakeRemote()
    remote.put("/JSONs/genres.json", GENRES_V1, "rev1")
    remote.put("/JSONs/countries.json", COUNTRIES_V1, "rev1")
    return remote


@pytest.fixture
def empty_remote() -> FakeRemote:
    """Return an authorized remote without files."""
    return FakeRemote()


def write_local_files(data_dir: Path, files: dict[str, bytes]) -> None:
    cache_dir = data_dir / "json"
    cache_dir.mkdir(parents=True, exist_ok=True)
    for name, content in files.items():
        (cache_dir / name).write_bytes(content)


@pytest.fixture
def local_files():
    """Return a function writing documents into the cache directory of a data dir."""
    return write_local_files
