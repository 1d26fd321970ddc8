"""Tests for the dbxjson.catalog module."""

import pytest
from dbxjson_fakes import JSONFile

from dbxjson.catalog import Catalog, CatalogEnum, NamedItem


class TestCatalogFromEnum:
    """Tests for Catalog.from_enum."""

    def test_folder_and_items(self):
        """The enum members become the items, in declaration order."""
        catalog = Catalog.from_enum(JSONFile)
        assert catalog.folder_path == "/JSONs"
        assert catalog.items == (JSONFile.GENRES, JSONFile.COUNTRIES)
        assert catalog.file_names() == ["genres.json", "countries.json"]
        assert len(catalog) == 2

    def test_item_for(self):
        """We can map file names back to the enum members."""
        catalog = Catalog.from_enum(JSONFile)
        assert catalog.item_for("genres.json") is JSONFile.GENRES
        assert catalog.item_for("missing.json") is None

    def test_remote_path_is_lowercase(self):
        """The expected remote path is canonical (lowercase)."""
        catalog = Catalog.from_enum(JSONFile)
        assert catalog.remote_path_for(JSONFile.GENRES) == "/jsons/genres.json"

    def test_missing_folder_path(self):
        """Enums must define folder_path."""

        class NoFolder(CatalogEnum):
            A = "a.json"

        with pytest.raises(NotImplementedError, match="NoFolder"):
            Catalog.from_enum(NoFolder)


class TestCatalogValidation:
    """Tests for the Catalog invariants."""

    def test_relative_folder(self):
        with pytest.raises(ValueError, match="must be absolute"):
            Catalog.from_files("JSONs", ["genres.json"])

    def test_root_folder(self):
        """The empty folder is the remote root."""
        catalog = Catalog.from_files("", ["genres.json"])
        assert catalog.remote_path_for(catalog.items[0]) == "/genres.json"

    def test_slash_is_the_root(self):
        catalog = Catalog.from_files("/", ["genres.json"])
        assert catalog.folder_path == ""
        assert catalog.remote_path_for(catalog.items[0]) == "/genres.json"

    def test_trailing_slash(self):
        catalog = Catalog.from_files("/JSONs/", ["genres.json"])
        assert catalog.folder_path == "/JSONs"
        assert catalog.remote_path_for(catalog.items[0]) == "/jsons/genres.json"
        assert catalog == Catalog.from_files("/JSONs", ["genres.json"])

    def test_relative_folder_with_trailing_slash(self):
        with pytest.raises(ValueError, match="must be absolute"):
            Catalog.from_files("JSONs/", ["genres.json"])

    @pytest.mark.parametrize("name", ["", "a/b.json", "..", "."])
    def test_invalid_file_name(self, name):
        with pytest.raises(ValueError, match="invalid file name"):
            Catalog.from_files("/JSONs", [name])

    def test_duplicate_file_name(self):
        with pytest.raises(ValueError, match="duplicate file name"):
            Catalog.from_files("/JSONs", ["genres.json", "genres.json"])


class TestNamedItem:
    """Tests for NamedItem."""

    def test_from_files_uses_stem(self):
        catalog = Catalog.from_files("/JSONs", ["genres.json"])
        assert catalog.items == (NamedItem(name="genres", file_name="genres.json"),)
        assert str(catalog.items[0]) == "genres"

    def test_hashable_and_equal(self):
        """Items are usable as dictionary keys and compare by value."""
        a = NamedItem(name="genres", file_name="genres.json")
        b = NamedItem(name="genres", file_name="genres.json")
        assert a == b
        assert {a: 1}[b] == 1
