"""The MessagePack value tree: construction, inspection and display."""

from __future__ import annotations

import math
import struct
from collections.abc import Iterable, Mapping
from decimal import Decimal
from enum import Enum
from typing import Any

from msgvalue.scalars import Integer, Utf8String

_EXT_TYPE_MIN = -128
_EXT_TYPE_MAX = 127


class Kind(Enum):
    """The kinds of value MessagePack can represent."""

    NIL = "nil"
    BOOLEAN = "boolean"
    INTEGER = "integer"
    F32 = "f32"
    F64 = "f64"
    STRING = "string"
    BINARY = "binary"
    ARRAY = "array"
    MAP = "map"
    EXT = "ext"


def _round_f32(v: float) -> float:
    try:
        return struct.unpack("<f", struct.pack("<f", v))[0]
    except OverflowError:
        return math.copysign(math.inf, v)


def _plain_decimal(digits: str) -> str:
    return format(Decimal(digits).normalize(), "f")


def _display_float(v: float, single: bool) -> str:
    if math.isnan(v):
        return "NaN"
    if math.isinf(v):
        return "inf" if v > 0 else "-inf"
    if single:
        digits = repr(v)
        for precision in range(1, 10):
            candidate = f"{v:.{precision}g}"
            if _round_f32(float(candidate)) == v:
                digits = candidate
                break
    else:
        digits = repr(v)
    return _plain_decimal(digits)


def _display_bytes(data: bytes) -> str:
    return "[" + ", ".join(str(b) for b in data) + "]"


class Value:
    """Any valid MessagePack value."""

    __slots__ = ("kind", "_payload")
    __hash__ = None  # type: ignore[assignment]

    def __init__(self, kind: Kind, payload: Any = None) -> None:
        self.kind = kind
        self._payload = payload

    # -- construction -------------------------------------------------

    @classmethod
    def nil(cls) -> Value:
        return cls(Kind.NIL)

    @classmethod
    def boolean(cls, v: bool) -> Value:
        if not isinstance(v, bool):
            raise TypeError(f"bool expected, got {type(v).__name__}")
        return cls(Kind.BOOLEAN, v)

    @classmethod
    def integer(cls, n: int | Integer) -> Value:
        return cls(Kind.INTEGER, n if isinstance(n, Integer) else Integer(n))

    @classmethod
    def f32(cls, v: float) -> Value:
        return cls(Kind.F32, _round_f32(float(v)))

    @classmethod
    def f64(cls, v: float) -> Value:
        return cls(Kind.F64, float(v))

    @classmethod
    def string(cls, s: str | bytes | Utf8String) -> Value:
        return cls(Kind.STRING, s if isinstance(s, Utf8String) else Utf8String(s))

    @classmethod
    def binary(cls, data: bytes | bytearray | memoryview) -> Value:
        if not isinstance(data, (bytes, bytearray, memoryview)):
            raise TypeError(f"bytes expected, got {type(data).__name__}")
        return cls(Kind.BINARY, bytes(data))

    @classmethod
    def array(cls, items: Iterable[Any]) -> Value:
        return cls(Kind.ARRAY, [cls.of(item) for item in items])

    @classmethod
    def map(cls, pairs: Iterable[tuple[Any, Any]] | Mapping[Any, Any]) -> Value:
        entries = pairs.items() if isinstance(pairs, Mapping) else pairs
        return cls(Kind.MAP, [(cls.of(k), cls.of(v)) for k, v in entries])

    @classmethod
    def ext(cls, ty: int, data: bytes | bytearray | memoryview) -> Value:
        if isinstance(ty, bool) or not isinstance(ty, int):
            raise TypeError(f"integer ext type expected, got {type(ty).__name__}")
        if not _EXT_TYPE_MIN <= ty <= _EXT_TYPE_MAX:
            raise ValueError(f"ext type {ty} does not fit a signed byte")
        if not isinstance(data, (bytes, bytearray, memoryview)):
            raise TypeError(f"bytes expected, got {type(data).__name__}")
        return cls(Kind.EXT, (ty, bytes(data)))

    @classmethod
    def of(cls, obj: Any) -> Value:
        """Build a value from a plain Python object."""
        if isinstance(obj, Value):
            return obj
        if obj is None:
            return cls.nil()
        if isinstance(obj, bool):
            return cls.boolean(obj)
        if isinstance(obj, (int, Integer)):
            return cls.integer(obj)
        if isinstance(obj, float):
            return cls.f64(obj)
        if isinstance(obj, (str, Utf8String)):
            return cls.string(obj)
        if isinstance(obj, (bytes, bytearray, memoryview)):
            return cls.binary(obj)
        if isinstance(obj, (list, tuple)):
            return cls.array(obj)
        if isinstance(obj, Mapping):
            return cls.map(obj)
        raise TypeError(f"cannot build a value from {type(obj).__name__}")

    # -- predicates ---------------------------------------------------

    def is_nil(self) -> bool:
        return self.kind is Kind.NIL

    def is_bool(self) -> bool:
        return self.kind is Kind.BOOLEAN

    def is_i64(self) -> bool:
        return self.kind is Kind.INTEGER and self._payload.is_i64()

    def is_u64(self) -> bool:
        return self.kind is Kind.INTEGER and self._payload.is_u64()

    def is_f32(self) -> bool:
        return self.kind is Kind.F32

    def is_f64(self) -> bool:
        return self.kind is Kind.F64

    def is_number(self) -> bool:
        return self.kind in (Kind.INTEGER, Kind.F32, Kind.F64)

    def is_str(self) -> bool:
        return self.as_str() is not None

    def is_bin(self) -> bool:
        return self.as_slice() is not None

    def is_array(self) -> bool:
        return self.kind is Kind.ARRAY

    def is_map(self) -> bool:
        return self.kind is Kind.MAP

    def is_ext(self) -> bool:
        return self.kind is Kind.EXT

    # -- accessors ----------------------------------------------------

    def as_bool(self) -> bool | None:
        return self._payload if self.kind is Kind.BOOLEAN else None

    def as_i64(self) -> int | None:
        return self._payload.as_i64() if self.kind is Kind.INTEGER else None

    def as_u64(self) -> int | None:
        return self._payload.as_u64() if self.kind is Kind.INTEGER else None

    def as_f64(self) -> float | None:
        if self.kind is Kind.INTEGER:
            return self._payload.as_f64()
        if self.kind in (Kind.F32, Kind.F64):
            return self._payload
        return None

    def as_str(self) -> str | None:
        return self._payload.as_str() if self.kind is Kind.STRING else None

    def as_slice(self) -> bytes | None:
        """The bytes of a binary or string value."""
        if self.kind is Kind.BINARY:
            return self._payload
        if self.kind is Kind.STRING:
            return self._payload.as_bytes()
        return None

    def as_array(self) -> list[Value] | None:
        return self._payload if self.kind is Kind.ARRAY else None

    def as_map(self) -> list[tuple[Value, Value]] | None:
        return self._payload if self.kind is Kind.MAP else None

    def as_ext(self) -> tuple[int, bytes] | None:
        return self._payload if self.kind is Kind.EXT else None

    # -- protocols ----------------------------------------------------

    def __getitem__(self, index: int) -> Value:
        """The array element at index, or nil when there is none."""
        if isinstance(index, bool) or not isinstance(index, int):
            raise TypeError(f"integer index expected, got {type(index).__name__}")
        items = self.as_array()
        if items is None or not 0 <= index < len(items):
            return _NIL
        return items[index]

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Value):
            return NotImplemented
        return self.kind is other.kind and self._payload == other._payload

    def __repr__(self) -> str:
        if self.kind is Kind.NIL:
            return "Value.nil()"
        return f"Value.{self.kind.name.lower()}({self._payload!r})"

    def __str__(self) -> str:
        kind, payload = self.kind, self._payload
        if kind is Kind.NIL:
            return "nil"
        if kind is Kind.BOOLEAN:
            return "true" if payload else "false"
        if kind is Kind.INTEGER:
            return str(payload)
        if kind is Kind.F32:
            return _display_float(payload, single=True)
        if kind is Kind.F64:
            return _display_float(payload, single=False)
        if kind is Kind.STRING:
            return str(payload)
        if kind is Kind.BINARY:
            return _display_bytes(payload)
        if kind is Kind.ARRAY:
            return "[" + ", ".join(str(item) for item in payload) + "]"
        if kind is Kind.MAP:
            return "{" + ", ".join(f"{k}: {v}" for k, v in payload) + "}"
        ty, data = payload
        return f"[{ty}, {_display_bytes(data)}]"


_NIL = Value.nil()