"""Decoding enum variants stored as ``[index]`` or ``[index, payload]`` arrays."""

from __future__ import annotations

from typing import Any

from msgvalue.errors import ConversionError, describe_unexpected
from msgvalue.value import Value

_U32_MAX = 2**32 - 1
_UNIT_VARIANT = "unit variant"


def _as_value(obj: Any) -> Value:
    return obj if isinstance(obj, Value) else Value.of(obj)


def _invalid_type(unexpected: str, expected: str) -> ConversionError:
    return ConversionError(f"invalid type: {unexpected}, expected {expected}")


def _invalid_value(unexpected: str, expected: str) -> ConversionError:
    return ConversionError(f"invalid value: {unexpected}, expected {expected}")


def _invalid_length(length: int, expected: str) -> ConversionError:
    return ConversionError(f"invalid length {length}, expected {expected}")


def _variant_index(val: Value) -> int:
    unsigned = val.as_u64()
    if unsigned is not None:
        if unsigned > _U32_MAX:
            raise _invalid_value(describe_unexpected(val), "u32")
        return unsigned
    if val.as_i64() is not None:
        raise _invalid_value(describe_unexpected(val), "u32")
    raise _invalid_type(describe_unexpected(val), "u32")


def split_enum(val: Any) -> tuple[int, Value | None]:
    """Split an encoded variant into its index and optional payload."""
    val = _as_value(val)
    items = val.as_array()
    if items is None:
        raise _invalid_type(describe_unexpected(val), "array, map or int")
    if len(items) not in (1, 2):
        raise _invalid_length(len(items), "array with one or two elements")
    index = _variant_index(items[0])
    payload = items[1] if len(items) == 2 else None
    return index, payload


def unit_variant(payload: Any) -> None:
    """Check that a payload fits a unit variant: absent or an empty array."""
    if payload is None:
        return None
    payload = _as_value(payload)
    items = payload.as_array()
    if items is None:
        raise _invalid_value(describe_unexpected(payload), "empty array")
    if items:
        raise _invalid_value("sequence", "empty array")
    return None


def newtype_variant(payload: Any) -> Value:
    """The single value carried by a newtype variant.

    Accepts both ``[T]`` and a bare ``T``; an array of several elements is
    taken whole as the carried sequence.
    """
    if payload is None:
        raise _invalid_type(_UNIT_VARIANT, "newtype variant")
    payload = _as_value(payload)
    items = payload.as_array()
    if items is None:
        return payload
    if len(items) > 1:
        return Value.array(items)
    if not items:
        raise _invalid_value("sequence", "array with one element")
    return items[0]


def tuple_variant(payload: Any) -> list[Value]:
    """The fields of a tuple variant, which must be carried as an array."""
    if payload is None:
        raise _invalid_type(_UNIT_VARIANT, "tuple variant")
    payload = _as_value(payload)
    items = payload.as_array()
    if items is None:
        raise _invalid_type(describe_unexpected(payload), "tuple variant")
    return list(items)


def struct_variant(payload: Any) -> list[Value] | list[tuple[Value, Value]]:
    """The fields of a struct variant: an array of values or a map of pairs."""
    if payload is None:
        raise _invalid_type(_UNIT_VARIANT, "struct variant")
    payload = _as_value(payload)
    items = payload.as_array()
    if items is not None:
        return list(items)
    pairs = payload.as_map()
    if pairs is not None:
        return list(pairs)
    raise _invalid_type(describe_unexpected(payload), "struct variant")