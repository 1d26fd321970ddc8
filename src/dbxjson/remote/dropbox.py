"""Dropbox remote store speaking the Dropbox HTTP API v2."""

from __future__ import annotations

import json
import logging
import time
from collections.abc import Callable
from typing import Any, Final, TypeVar

import requests

from .base import ListFolderResult, RemoteError, RemoteFile, UnauthorizedError

DROPBOX_API_URL: Final[str] = "https://api.dropboxapi.com/2"
DROPBOX_CONTENT_URL: Final[str] = "https://content.dropboxapi.com/2"

log = logging.getLogger("dbxjson/remote/dropbox")

T = TypeVar("T")


class _RetryableError(Exception):
    """Internal marker for failures worth retrying."""

    def __init__(self, error: RemoteError, retry_after: float | None = None) -> None:
        super().__init__(str(error))
        self.error = error
        self.retry_after = retry_after


class DropboxRemoteStore:
    """
    Remote store backed by a Dropbox folder.

    This class implements the remote.RemoteStore protocol using a bearer
    access token. Obtaining and refreshing the token is up to the caller.
    """

    def __init__(
        self,
        access_token: str | None,
        *,
        session: requests.Session | None = None,
        timeout: float = 30.0,
        max_retries: int = 3,
        retry_initial_backoff: float = 1.0,
    ) -> None:
        self._access_token = access_token or None
        self._session = session or requests.Session()
        self._timeout = timeout
        self._max_retries = max(1, int(max_retries))
        self._retry_initial_backoff = max(0.1, float(retry_initial_backoff))

    def is_authorized(self) -> bool:
        return self._access_token is not None

    def list_folder(self, path: str) -> ListFolderResult:
        data = self._rpc(
            "files/list_folder",
            {"path": path, "recursive": False, "include_deleted": False},
        )
        return _parse_listing(data)

    def list_folder_continue(self, cursor: str) -> ListFolderResult:
        data = self._rpc("files/list_folder/continue", {"cursor": cursor})
        return _parse_listing(data)

    def get_metadata(self, path: str) -> RemoteFile:
        data = self._rpc("files/get_metadata", {"path": path})
        if data.get(".tag") != "file":
            raise RemoteError(f"not a file: {path}", summary=str(data.get(".tag", "")))
        return _parse_file(data)

    def download(self, path: str) -> bytes:
        # The argument travels in a header, hence it must be ASCII-only JSON.
        headers = {"Dropbox-API-Arg": json.dumps({"path": path}, ensure_ascii=True)}
        response = self._with_retry(
            lambda: self._post(f"{DROPBOX_CONTENT_URL}/files/download", headers=headers)
        )
        return response.content

    def _rpc(self, endpoint: str, body: dict[str, Any]) -> dict[str, Any]:
        response = self._with_retry(lambda: self._post(f"{DROPBOX_API_URL}/{endpoint}", json=body))
        try:
            data = response.json()
        except ValueError as exc:
            raise RemoteError(f"{endpoint}: invalid JSON response") from exc
        if not isinstance(data, dict):
            raise RemoteError(f"{endpoint}: unexpected response type {type(data).__name__}")
        return data

    def _post(self, url: str, **kwargs: Any) -> requests.Response:
        if self._access_token is None:
            raise UnauthorizedError("no Dropbox access token configured")
        headers = {"Authorization": f"Bearer {self._access_token}"}
        headers.update(kwargs.pop("headers", {}))
        try:
            response = self._session.post(url, headers=headers, timeout=self._timeout, **kwargs)
        except requests.RequestException as exc:
            raise _RetryableError(RemoteError(f"POST {url}: {exc}")) from exc
        if response.ok:
            return response

        summary = _error_summary(response)
        message = f"POST {url}: HTTP {response.status_code}: {summary}"
        if response.status_code == 401:
            raise UnauthorizedError(message, status=401, summary=summary)
        error = RemoteError(message, status=response.status_code, summary=summary)
        if response.status_code == 429 or response.status_code >= 500:
            raise _RetryableError(error, retry_after=_retry_after(response))
        raise error

    def _with_retry(self, operation: Callable[[], T]) -> T:
        delay = self._retry_initial_backoff
        for attempt in range(self._max_retries):
            try:
                return operation()
            except _RetryableError as exc:
                if attempt == self._max_retries - 1:
                    raise exc.error from exc.__cause__
                wait = exc.retry_after if exc.retry_after is not None else delay
                log.debug("retrying in %.1fs after: %s", wait, exc.error)
                self._sleep(wait)
                delay = min(delay * 2, 30.0)
        raise RuntimeError("Retry logic reached an unexpected state")  # pragma: no cover

    @staticmethod
    def _sleep(seconds: float) -> None:
        time.sleep(seconds)


def _parse_listing(data: dict[str, Any]) -> ListFolderResult:
    entries = [
        _parse_file(entry) for entry in data.get("entries", []) if entry.get(".tag") == "file"
    ]
    cursor = data.get("cursor") if data.get("has_more") else None
    return ListFolderResult(entries=entries, cursor=cursor)


def _parse_file(data: dict[str, Any]) -> RemoteFile:
    try:
        return RemoteFile(name=data["name"], path_lower=data["path_lower"], rev=data["rev"])
    except KeyError as exc:
        raise RemoteError(f"file metadata without {exc.args[0]!r}") from exc


def _error_summary(response: requests.Response) -> str:
    try:
        data = response.json()
    except ValueError:
        return response.text.strip()[:200]
    if isinstance(data, dict):
        return str(data.get("error_summary", data))
    return str(data)


def _retry_after(response: requests.Response) -> float | None:
    value = response.headers.get("Retry-After")
    if value is None:
        return None
    try:
        return max(0.0, float(value))
    except ValueError:
        return None
