"""Turning plain Python objects into value trees."""

from __future__ import annotations

import dataclasses
from collections.abc import Mapping
from enum import Enum
from typing import Any

from msgvalue.errors import ConversionError
from msgvalue.scalars import I64_MIN, U64_MAX, Integer, Utf8String
from msgvalue.value import Kind, Value


def _unit_variant(member: Enum) -> Value:
    index = list(type(member)).index(member)
    return Value.array([Value.integer(index), Value.array([])])


def _from_value(val: Value) -> Value:
    kind = val.kind
    if kind is Kind.STRING:
        return val if val.is_str() else Value.binary(val.as_slice())
    if kind is Kind.ARRAY:
        return Value.array([_from_value(item) for item in val.as_array()])
    if kind is Kind.MAP:
        return Value.map([(_from_value(k), _from_value(v)) for k, v in val.as_map()])
    if kind is Kind.EXT:
        ty, data = val.as_ext()
        return Value.array([Value.integer(ty), Value.array([Value.integer(b) for b in data])])
    return val


def _convert(obj: Any) -> Value:
    if isinstance(obj, Value):
        return _from_value(obj)
    if obj is None:
        return Value.nil()
    if isinstance(obj, bool):
        return Value.boolean(obj)
    if isinstance(obj, Enum):
        return _unit_variant(obj)
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
    if dataclasses.is_dataclass(obj) and not isinstance(obj, type):
        return Value.array(
            [_convert(getattr(obj, field.name)) for field in dataclasses.fields(obj)]
        )
    if isinstance(obj, Mapping):
        return Value.map([(_convert(k), _convert(v)) for k, v in obj.items()])
    if isinstance(obj, (list, tuple, set, frozenset)):
        return Value.array([_convert(item) for item in obj])
    raise ConversionError(f"cannot serialize value of type {type(obj).__name__}")


def to_value(obj: Any) -> Value:
    """Convert an object into a value tree.

    Structs (dataclasses) become arrays of their field values, enum members
    become ``[index, []]`` and mappings keep their insertion order.
    """
    return _convert(obj)