"""Decoding of cached JSON documents into Python values."""

from __future__ import annotations

import dataclasses
import json
import types
from typing import Any, TypeVar, Union, get_args, get_origin

import dacite

from .errors import DecodeError, NotAnObjectError

T = TypeVar("T")


def _to_float(value: object) -> object:
    # JSON does not distinguish 1 and 1.0, so accept integers for float fields.
    if isinstance(value, int) and not isinstance(value, bool):
        return float(value)
    return value


DACITE_CONFIG = dacite.Config(type_hooks={float: _to_float})


def decode_json(data: bytes) -> Any:
    """Parse JSON bytes into plain Python values."""
    try:
        return json.loads(data)
    except (json.JSONDecodeError, UnicodeDecodeError) as exc:
        raise DecodeError(f"malformed JSON: {exc}") from exc


def decode_structured(data: bytes) -> dict[str, Any]:
    """Parse JSON bytes whose top-level value must be an object."""
    value = decode_json(data)
    if not isinstance(value, dict):
        raise NotAnObjectError(f"expected a JSON object, got {_json_type(value)}")
    return value


def decode_as(data: bytes, shape: type[T]) -> T:
    """
    Parse JSON bytes and convert them to the given shape.

    Supported shapes are dataclasses (converted using dacite), `list[X]`,
    `tuple[X, ...]`, `dict[str, X]`, `X | None`, `Any`, `object` and the
    JSON scalar types.

    Raises:
        DecodeError: if the bytes are not JSON or do not match the shape.
        TypeError: if the shape is not supported.
    """
    return _convert(shape, decode_json(data), "$")


def _convert(shape: Any, value: Any, where: str) -> Any:
    if shape is Any or shape is object:
        return value

    if dataclasses.is_dataclass(shape) and isinstance(shape, type):
        if not isinstance(value, dict):
            raise DecodeError(f"{where}: expected object, got {_json_type(value)}")
        try:
            return dacite.from_dict(shape, value, config=DACITE_CONFIG)
        except (dacite.DaciteError, TypeError, ValueError) as exc:
            raise DecodeError(f"{where}: cannot decode {shape.__name__}: {exc}") from exc

    origin = get_origin(shape)
    args = get_args(shape)

    if origin is Union or origin is types.UnionType:
        if value is None and type(None) in args:
            return None
        errors = []
        for option in args:
            if option is type(None):
                continue
            try:
                return _convert(option, value, where)
            except DecodeError as exc:
                errors.append(str(exc))
        raise DecodeError(f"{where}: no matching type in {shape}: {'; '.join(errors)}")

    if origin is list or shape is list:
        _expect(value, list, where)
        item_shape = args[0] if args else Any
        return [_convert(item_shape, item, f"{where}[{i}]") for i, item in enumerate(value)]

    if origin is tuple or shape is tuple:
        _expect(value, list, where)
        if not args or (len(args) == 2 and args[1] is Ellipsis):
            item_shape = args[0] if args else Any
            return tuple(_convert(item_shape, v, f"{where}[{i}]") for i, v in enumerate(value))
        if len(args) != len(value):
            raise DecodeError(f"{where}: expected {len(args)} items, got {len(value)}")
        return tuple(_convert(s, v, f"{where}[{i}]") for i, (s, v) in enumerate(zip(args, value)))

    if origin is dict or shape is dict:
        _expect(value, dict, where)
        value_shape = args[1] if len(args) == 2 else Any
        return {key: _convert(value_shape, item, f"{where}.{key}") for key, item in value.items()}

    if shape is float:
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            return float(value)
        raise DecodeError(f"{where}: expected number, got {_json_type(value)}")

    if shape is int:
        if isinstance(value, int) and not isinstance(value, bool):
            return value
        raise DecodeError(f"{where}: expected integer, got {_json_type(value)}")

    if shape is str or shape is bool:
        _expect(value, shape, where)
        return value

    if shape is type(None) or shape is None:
        if value is not None:
            raise DecodeError(f"{where}: expected null, got {_json_type(value)}")
        return None

    raise TypeError(f"unsupported decoding shape: {shape!r}")


def _expect(value: Any, kind: type, where: str) -> None:
    if not isinstance(value, kind):
        raise DecodeError(f"{where}: expected {_JSON_NAMES[kind]}, got {_json_type(value)}")


_JSON_NAMES: dict[type, str] = {
    dict: "object",
    list: "array",
    str: "string",
    bool: "boolean",
    int: "integer",
    float: "number",
    type(None): "null",
}


def _json_type(value: Any) -> str:
    return _JSON_NAMES.get(type(value), type(value).__name__)
