"""Tests for the dbxjson.remote.dropbox module."""

import json
from unittest.mock import MagicMock, patch

import pytest
import requests

from dbxjson.remote import DropboxRemoteStore, RemoteError, UnauthorizedError
from dbxjson.remote.dropbox import DROPBOX_API_URL, DROPBOX_CONTENT_URL


def _response(status=200, body=None, *, content=None, headers=None) -> requests.Response:
    response = requests.Response()
    response.status_code = status
    if content is None:
        content = json.dumps(body if body is not None else {}).encode()
    response._content = content
    response.headers.update(headers or {})
    return response


def _file(name, rev="rev1", folder="/jsons"):
    return {
        ".tag": "file",
        "name": name,
        "path_lower": f"{folder}/{name.lower()}",
        "path_display": f"{folder}/{name}",
        "rev": rev,
    }


@pytest.fixture
def session():
    return MagicMock(spec=requests.Session)


@pytest.fixture
def store(session):
    store = DropboxRemoteStore("token", session=session, timeout=7, max_retries=3)
    with patch.object(DropboxRemoteStore, "_sleep") as sleep:
        store.sleep = sleep
        yield store


class TestAuthorization:
    """Tests for the access token handling."""

    def test_authorized(self, store):
        assert store.is_authorized()

    @pytest.mark.parametrize("token", [None, ""])
    def test_without_token(self, session, token):
        store = DropboxRemoteStore(token, session=session)
        assert not store.is_authorized()
        with pytest.raises(UnauthorizedError, match="no Dropbox access token"):
            store.list_folder("/JSONs")
        session.post.assert_not_called()

    def test_http_401_is_not_retried(self, store, session):
        session.post.return_value = _response(401, {"error_summary": "expired_access_token/"})
        with pytest.raises(UnauthorizedError, match="expired_access_token") as info:
            store.get_metadata("/jsons/genres.json")
        assert info.value.status == 401
        assert session.post.call_count == 1


class TestListFolder:
    """Tests for list_folder and list_folder_continue."""

    def test_request(self, store, session):
        session.post.return_value = _response(200, {"entries": [], "has_more": False})
        store.list_folder("/JSONs")
        session.post.assert_called_once_with(
            f"{DROPBOX_API_URL}/files/list_folder",
            headers={"Authorization": "Bearer token"},
            timeout=7,
            json={"path": "/JSONs", "recursive": False, "include_deleted": False},
        )

    def test_files_only(self, store, session):
        folder = {".tag": "folder", "name": "old", "path_lower": "/jsons/old"}
        session.post.return_value = _response(
            200,
            {
                "entries": [_file("Genres.json"), folder, _file("countries.json", "rev7")],
                "cursor": "c1",
                "has_more": False,
            },
        )
        result = store.list_folder("/JSONs")
        assert [(f.name, f.path_lower, f.rev) for f in result.entries] == [
            ("Genres.json", "/jsons/genres.json", "rev1"),
            ("countries.json", "/jsons/countries.json", "rev7"),
        ]
        assert result.cursor is None

    def test_has_more(self, store, session):
        session.post.side_effect = [
            _response(200, {"entries": [_file("a.json")], "cursor": "c1", "has_more": True}),
            _response(200, {"entries": [_file("b.json")], "cursor": "c2", "has_more": False}),
        ]
        first = store.list_folder("/JSONs")
        assert first.cursor == "c1"
        second = store.list_folder_continue("c1")
        assert second.cursor is None
        assert [f.name for f in second.entries] == ["b.json"]
        url, kwargs = session.post.call_args.args[0], session.post.call_args.kwargs
        assert url == f"{DROPBOX_API_URL}/files/list_folder/continue"
        assert kwargs["json"] == {"cursor": "c1"}

    def test_path_not_found(self, store, session):
        session.post.return_value = _response(
            409, {"error_summary": "path/not_found/..", "error": {".tag": "path"}}
        )
        with pytest.raises(RemoteError, match="path/not_found") as info:
            store.list_folder("/Missing")
        assert info.value.status == 409
        assert info.value.summary == "path/not_found/.."
        assert session.post.call_count == 1

    def test_invalid_json(self, store, session):
        session.post.return_value = _response(200, content=b"<html>")
        with pytest.raises(RemoteError, match="invalid JSON response"):
            store.list_folder("/JSONs")

    def test_missing_metadata_field(self, store, session):
        session.post.return_value = _response(
            200, {"entries": [{".tag": "file", "name": "a.json"}], "has_more": False}
        )
        with pytest.raises(RemoteError, match="without 'path_lower'"):
            store.list_folder("/JSONs")


class TestGetMetadata:
    """Tests for get_metadata."""

    def test_file(self, store, session):
        session.post.return_value = _response(200, _file("genres.json", "rev2"))
        metadata = store.get_metadata("/jsons/genres.json")
        assert metadata.rev == "rev2"
        assert metadata.path_lower == "/jsons/genres.json"
        assert session.post.call_args.kwargs["json"] == {"path": "/jsons/genres.json"}

    def test_folder(self, store, session):
        session.post.return_value = _response(
            200, {".tag": "folder", "name": "jsons", "path_lower": "/jsons"}
        )
        with pytest.raises(RemoteError, match="not a file"):
            store.get_metadata("/jsons")


class TestDownload:
    """Tests for download."""

    def test_content(self, store, session):
        session.post.return_value = _response(200, content=b'[{"id": 1}]')
        assert store.download("/jsons/genres.json") == b'[{"id": 1}]'
        url = session.post.call_args.args[0]
        headers = session.post.call_args.kwargs["headers"]
        assert url == f"{DROPBOX_CONTENT_URL}/files/download"
        assert headers["Authorization"] == "Bearer token"
        assert json.loads(headers["Dropbox-API-Arg"]) == {"path": "/jsons/genres.json"}

    def test_non_ascii_path(self, store, session):
        session.post.return_value = _response(200, content=b"{}")
        store.download("/jsons/città.json")
        header = session.post.call_args.kwargs["headers"]["Dropbox-API-Arg"]
        assert header.isascii()
        assert json.loads(header) == {"path": "/jsons/città.json"}


class TestRetry:
    """Tests for the retry policy."""

    def test_server_error_then_success(self, store, session):
        session.post.side_effect = [
            _response(503, content=b"unavailable"),
            _response(200, content=b"{}"),
        ]
        assert store.download("/jsons/genres.json") == b"{}"
        assert session.post.call_count == 2
        store.sleep.assert_called_once_with(1.0)

    def test_connection_error_then_success(self, store, session):
        session.post.side_effect = [
            requests.ConnectionError("reset"),
            requests.Timeout("slow"),
            _response(200, _file("genres.json")),
        ]
        assert store.get_metadata("/jsons/genres.json").rev == "rev1"
        assert [c.args[0] for c in store.sleep.call_args_list] == [1.0, 2.0]

    def test_retry_after(self, store, session):
        session.post.side_effect = [
            _response(429, {"error_summary": "too_many_requests/"}, headers={"Retry-After": "4"}),
            _response(200, content=b"{}"),
        ]
        store.download("/jsons/genres.json")
        store.sleep.assert_called_once_with(4.0)

    def test_gives_up(self, store, session):
        session.post.return_value = _response(500, content=b"boom")
        with pytest.raises(RemoteError, match="HTTP 500: boom") as info:
            store.download("/jsons/genres.json")
        assert info.value.status == 500
        assert session.post.call_count == 3
        assert store.sleep.call_count == 2

    def test_gives_up_on_connection_errors(self, store, session):
        session.post.side_effect = requests.ConnectionError("unreachable")
        with pytest.raises(RemoteError, match="unreachable"):
            store.list_folder("/JSONs")
        assert session.post.call_count == 3
