"""Tests for the dbxjson.cli.watch module."""

from pathlib import Path
from unittest.mock import patch

from click.testing import CliRunner
from dbxjson_fakes import COUNTRIES_V1, GENRES_V1, GENRES_V2, FakeRemote

from dbxjson.cli import cli
from dbxjson.service import JSONSyncService


def _write_config(data_dir: Path, lines: list[str]) -> None:
    data_dir.mkdir(parents=True, exist_ok=True)
    lines = ["version: 0", *lines]
    lines += ["catalogs:", "  - folder: /JSONs", "    files: [genres.json, countries.json]"]
    (data_dir / "dbxjson.yaml").write_text("\n".join(lines) + "\n")


class _ChangingRemote(FakeRemote):
    """Remote where genres.json changes right after the folder is listed."""

    def list_folder(self, path):
        result = super().list_folder(path)
        self.put("/JSONs/genres.json", GENRES_V2, "rev2")
        return result


class TestWatchOnce:
    """dbxjson watch --once prepares the catalogs and polls once."""

    def test_nothing_changed(self, tmp_path: Path):
        remote_root = tmp_path / "remote" / "JSONs"
        remote_root.mkdir(parents=True)
        (remote_root / "genres.json").write_bytes(GENRES_V1)
        (remote_root / "countries.json").write_bytes(COUNTRIES_V1)
        data_dir = tmp_path / "data"
        _write_config(data_dir, ["provider: local", "local:", f"  path: {tmp_path / 'remote'}"])
        runner = CliRunner()
        result = runner.invoke(cli, ["watch", "--once", "-d", str(data_dir)])
        assert result.exit_code == 0, result.output
        assert "Updated 0 file(s)." in result.output
        assert (data_dir / "json" / "genres.json").read_bytes() == GENRES_V1

    def test_prints_updated_files(self, tmp_path: Path):
        remote = _ChangingRemote()
        remote.put("/JSONs/genres.json", GENRES_V1, "rev1")
        remote.put("/JSONs/countries.json", COUNTRIES_V1, "rev1")
        data_dir = tmp_path / "data"
        _write_config(data_dir, [])

        def _build_service(data_dir, config, *, connectivity=None):
            assert connectivity is None
            return JSONSyncService(remote, data_dir=data_dir, poll_interval=3600)

        runner = CliRunner()
        with patch("dbxjson.cli.watch.build_service", side_effect=_build_service):
            result = runner.invoke(cli, ["watch", "--once", "-d", str(data_dir)])
        assert result.exit_code == 0, result.output
        assert "U genres.json" in result.output
        assert "U countries.json" not in result.output
        assert "Updated 1 file(s)." in result.output
        assert (data_dir / "json" / "genres.json").read_bytes() == GENRES_V2


class TestWatchFailures:
    """dbxjson watch fails when no catalog can be prepared."""

    def test_without_token(self, tmp_path: Path, monkeypatch):
        monkeypatch.delenv("DBXJSON_TEST_TOKEN", raising=False)
        data_dir = tmp_path / "data"
        _write_config(data_dir, ["dropbox:", "  token_env: DBXJSON_TEST_TOKEN"])
        runner = CliRunner()
        result = runner.invoke(cli, ["watch", "--once", "-d", str(data_dir)])
        assert result.exit_code != 0
        assert "Cannot download any catalog" in result.output

    def test_missing_config(self, tmp_path: Path):
        runner = CliRunner()
        result = runner.invoke(cli, ["watch", "--once", "-d", str(tmp_path)])
        assert result.exit_code != 0
        assert "Config not found" in result.output
