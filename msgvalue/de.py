"""Turning value trees into Python objects of a requested type, and back into values."""

from __future__ import annotations

import dataclasses
import types
from collections.abc import Mapping
from enum import Enum
from typing import Any, Union, get_args, get_origin

from msgvalue.errors import ConversionError, describe_unexpected
from msgvalue.scalars import I64_MIN, U64_MAX, Integer, Utf8String
from msgvalue.value import Kind, Value
from msgvalue.variants import split_enum, unit_variant

_NONE_TYPE = type(None)
_UNION_ORIGINS = (Union, types.UnionType)

# Annotations written as text are resolved only for these plain names;
# anything else falls back to plain data.
_NAMED_TYPES: dict[str, Any] = {
    "Any": Any,
    "object": object,
    "None": None,
    "bool": bool,
    "int": int,
    "float": float,
    "str": str,
    "bytes": bytes,
    "bytearray": bytearray,
    "list": list,
    "tuple": tuple,
    "set": set,
    "frozenset": frozenset,
    "dict": dict,
    "Value": Value,
}


def _invalid_type(val: Value, expected: str) -> ConversionError:
    return ConversionError(f"invalid type: {describe_unexpected(val)}, expected {expected}")


def _invalid_value(unexpected: str, expected: str) -> ConversionError:
    return ConversionError(f"invalid value: {unexpected}, expected {expected}")


def _invalid_length(length: int, expected: str) -> ConversionError:
    return ConversionError(f"invalid length {length}, expected {expected}")


def _hashable_dict(pairs: list[tuple[Any, Any]]) -> dict[Any, Any]:
    result: dict[Any, Any] = {}
    for key, item in pairs:
        try:
            result[key] = item
        except TypeError as exc:
            raise ConversionError(f"map key {key!r} cannot be used as a dict key") from exc
    return result


def _plain(val: Value) -> Any:
    kind = val.kind
    if kind is Kind.NIL:
        return None
    if kind is Kind.BOOLEAN:
        return val.as_bool()
    if kind is Kind.INTEGER:
        unsigned = val.as_u64()
        return unsigned if unsigned is not None else val.as_i64()
    if kind in (Kind.F32, Kind.F64):
        return val.as_f64()
    if kind is Kind.STRING:
        text = val.as_str()
        return text if text is not None else val.as_slice()
    if kind is Kind.BINARY:
        return val.as_slice()
    if kind is Kind.ARRAY:
        return [_plain(item) for item in val.as_array()]
    if kind is Kind.MAP:
        return _hashable_dict([(_plain(k), _plain(v)) for k, v in val.as_map()])
    raise ConversionError("extension values cannot be deserialized")


def _to_int(val: Value) -> int:
    if val.kind is not Kind.INTEGER:
        raise _invalid_type(val, "an integer")
    unsigned = val.as_u64()
    return unsigned if unsigned is not None else val.as_i64()


def _to_float(val: Value) -> float:
    number = val.as_f64()
    if number is None:
        raise _invalid_type(val, "a float")
    return number


def _to_str(val: Value) -> str:
    if val.kind is Kind.STRING:
        text = val.as_str()
        if text is None:
            raise _invalid_value("byte array", "a string")
        return text
    if val.kind is Kind.BINARY:
        try:
            return val.as_slice().decode("utf-8")
        except UnicodeDecodeError as exc:
            raise _invalid_value("byte array", "a string") from exc
    raise _invalid_type(val, "a string")


def _to_bytes(val: Value) -> bytes:
    raw = val.as_slice()
    if raw is None:
        raise _invalid_type(val, "a byte array")
    return raw


def _to_enum(val: Value, target: type[Enum]) -> Enum:
    index, payload = split_enum(val)
    unit_variant(payload)
    members = list(target)
    if index >= len(members):
        raise _invalid_value(
            f"integer `{index}`", f"variant index 0 <= i < {len(members)}"
        )
    return members[index]


def _field_name(key: Value, names: list[str]) -> str | None:
    text = key.as_str()
    if text is not None:
        return text if text in names else None
    index = key.as_u64()
    if index is not None:
        return names[index] if index < len(names) else None
    raise _invalid_type(key, "field identifier")


def _has_default(field: dataclasses.Field) -> bool:
    return (
        field.default is not dataclasses.MISSING
        or field.default_factory is not dataclasses.MISSING
    )


def _field_type(field: dataclasses.Field) -> Any:
    hint = field.type
    if isinstance(hint, str):
        return _NAMED_TYPES.get(hint.strip(), Any)
    return hint


def _to_dataclass(val: Value, target: type) -> Any:
    name = target.__name__
    fields = [f for f in dataclasses.fields(target) if f.init]
    hints = {f.name: _field_type(f) for f in fields}
    kwargs: dict[str, Any] = {}
    items = val.as_array()
    if items is not None:
        for position, field in enumerate(fields):
            if position >= len(items):
                if _has_default(field):
                    continue
                raise _invalid_length(position, f"struct {name} with {len(fields)} elements")
            kwargs[field.name] = _convert(items[position], hints[field.name])
        if len(items) > len(fields):
            raise _invalid_length(len(items), "fewer elements in array")
        return target(**kwargs)
    pairs = val.as_map()
    if pairs is None:
        raise _invalid_type(val, f"struct {name}")
    names = [f.name for f in fields]
    for key, item in pairs:
        field_name = _field_name(key, names)
        if field_name is None:
            continue
        if field_name in kwargs:
            raise ConversionError(f"duplicate field `{field_name}`")
        kwargs[field_name] = _convert(item, hints[field_name])
    for field in fields:
        if field.name not in kwargs and not _has_default(field):
            raise ConversionError(f"missing field `{field.name}`")
    return target(**kwargs)


def _to_tuple(val: Value, args: tuple[Any, ...]) -> tuple[Any, ...]:
    items = val.as_array()
    if not args or (len(args) == 2 and args[1] is Ellipsis):
        if items is None:
            raise _invalid_type(val, "a sequence")
        element = args[0] if args else Any
        return tuple(_convert(item, element) for item in items)
    expected = f"a tuple of size {len(args)}"
    if items is None:
        raise _invalid_type(val, expected)
    if len(items) < len(args):
        raise _invalid_length(len(items), expected)
    if len(items) > len(args):
        raise _invalid_length(len(items), "fewer elements in array")
    return tuple(_convert(item, arg) for item, arg in zip(items, args))


def _convert_generic(val: Value, target: Any, origin: Any) -> Any:
    args = get_args(target)
    if origin in _UNION_ORIGINS:
        others = [a for a in args if a is not _NONE_TYPE]
        if len(others) == len(args):
            raise TypeError(f"unsupported union target {target!r}")
        if val.is_nil():
            return None
        inner = others[0] if len(others) == 1 else Union[tuple(others)]
        return _convert(val, inner)
    if origin is tuple:
        return _to_tuple(val, args)
    if origin in (list, set, frozenset):
        items = val.as_array()
        if items is None:
            raise _invalid_type(val, "a sequence")
        element = args[0] if args else Any
        converted = [_convert(item, element) for item in items]
        if origin is list:
            return converted
        try:
            return origin(converted)
        except TypeError as exc:
            raise ConversionError("sequence elements cannot be stored in a set") from exc
    if origin is dict:
        pairs = val.as_map()
        if pairs is None:
            raise _invalid_type(val, "a map")
        key_type, item_type = args if args else (Any, Any)
        return _hashable_dict(
            [(_convert(k, key_type), _convert(v, item_type)) for k, v in pairs]
        )
    raise TypeError(f"unsupported target {target!r}")


def _convert(val: Value, target: Any) -> Any:
    if target is Any or target is object:
        return _plain(val)
    if target is Value:
        return val
    if target is None or target is _NONE_TYPE:
        if not val.is_nil():
            raise _invalid_type(val, "unit")
        return None
    origin = get_origin(target)
    if origin is not None:
        return _convert_generic(val, target, origin)
    if not isinstance(target, type):
        raise TypeError(f"unsupported target {target!r}")
    if issubclass(target, Enum):
        return _to_enum(val, target)
    if dataclasses.is_dataclass(target):
        return _to_dataclass(val, target)
    if target is bool:
        flag = val.as_bool()
        if flag is None:
            raise _invalid_type(val, "a boolean")
        return flag
    if target is int:
        return _to_int(val)
    if target is float:
        return _to_float(val)
    if target is str:
        return _to_str(val)
    if target in (bytes, bytearray):
        return target(_to_bytes(val))
    if target in (list, tuple, set, frozenset, dict):
        return _convert_generic(val, target, target)
    raise TypeError(f"unsupported target {target!r}")


def from_value(val: Any, target: Any = Any) -> Any:
    """Convert a value tree into an object of the target type.

    Supported targets are plain scalars, ``bytes``, ``list``/``tuple``/``set``/
    ``dict`` generics, optionals, dataclasses (from arrays of fields or maps of
    field names), enums (from ``[index]`` or ``[index, []]``) and ``Value``.
    With ``Any`` the tree becomes plain Python data.
    """
    if not isinstance(val, Value):
        val = value_from(val)
    return _convert(val, target)


def value_from(obj: Any) -> Value:
    """Build a value tree from plain Python data."""
    if isinstance(obj, Value):
        return obj
    if obj is None:
        return Value.nil()
    if isinstance(obj, bool):
        return Value.boolean(obj)
    if isinstance(obj, Integer):
        return Value.integer(obj)
    if isinstance(obj, int):
        if not I64_MIN <= obj <= U64_MAX:
            raise ConversionError(f"integer {obj} does not fit a MessagePack integer")
        return Value.integer(obj)
    if isinstance(obj, float):
        return Value.f64(obj)
    if isinstance(obj, Utf8String):
        return Value.string(obj) if obj.is_str() else Value.binary(obj.as_bytes())
    if isinstance(obj, str):
        return Value.string(obj)
    if isinstance(obj, (bytes, bytearray, memoryview)):
        return Value.binary(obj)
    if isinstance(obj, (list, tuple)):
        return Value.array([value_from(item) for item in obj])
    if isinstance(obj, Mapping):
        return Value.map([(value_from(k), value_from(v)) for k, v in obj.items()])
    raise ConversionError(f"cannot build a value from {type(obj).__name__}")