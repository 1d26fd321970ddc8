"""Exceptions raised by the dbxjson library."""

from __future__ import annotations


class DBXJSONError(Exception):
    """Base class for all the dbxjson errors."""


class NotCachedError(DBXJSONError, LookupError):
    """The requested catalog item is not in the cache index."""

    def __init__(self, file_name: str) -> None:
        super().__init__(f"no cached data for {file_name}")
        self.file_name = file_name


class DecodeError(DBXJSONError, ValueError):
    """The cached bytes are not valid JSON or do not match the requested shape."""


class NotAnObjectError(DecodeError):
    """The cached JSON document is valid but its top-level value is not an object."""


class StorageUnavailableError(DBXJSONError, OSError):
    """The local storage root cannot be used; there is no way to recover from this."""


class ConfigError(DBXJSONError, ValueError):
    """The configuration file is missing or invalid."""
