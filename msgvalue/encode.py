"""Writing MessagePack markers, scalars and whole value trees."""

from __future__ import annotations

import io
import struct
from enum import Enum
from typing import Any, Protocol

from msgvalue.scalars import I64_MAX, I64_MIN, U64_MAX
from msgvalue.value import Kind, Value

U8_MAX = 2**8 - 1
U16_MAX = 2**16 - 1
U32_MAX = 2**32 - 1

_MARKER_PART = "marker"
_DATA_PART = "data"


class _Writable(Protocol):
    def write(self, data: bytes) -> int | None: ...


class Marker(Enum):
    """MessagePack marker families, valued by their first marker byte."""

    FIX_POS = 0x00
    FIX_MAP = 0x80
    FIX_ARRAY = 0x90
    FIX_STR = 0xA0
    NULL = 0xC0
    RESERVED = 0xC1
    FALSE = 0xC2
    TRUE = 0xC3
    BIN8 = 0xC4
    BIN16 = 0xC5
    BIN32 = 0xC6
    EXT8 = 0xC7
    EXT16 = 0xC8
    EXT32 = 0xC9
    F32 = 0xCA
    F64 = 0xCB
    U8 = 0xCC
    U16 = 0xCD
    U32 = 0xCE
    U64 = 0xCF
    I8 = 0xD0
    I16 = 0xD1
    I32 = 0xD2
    I64 = 0xD3
    FIX_EXT1 = 0xD4
    FIX_EXT2 = 0xD5
    FIX_EXT4 = 0xD6
    FIX_EXT8 = 0xD7
    FIX_EXT16 = 0xD8
    STR8 = 0xD9
    STR16 = 0xDA
    STR32 = 0xDB
    ARRAY16 = 0xDC
    ARRAY32 = 0xDD
    MAP16 = 0xDE
    MAP32 = 0xDF
    FIX_NEG = 0xE0


class ValueWriteError(Exception):
    """Raised when a marker or the data following it cannot be written."""

    def __init__(self, part: str) -> None:
        self.part = part
        super().__init__(f"failed to write MessagePack {part}")


def _emit(wr: Any, data: bytes, part: str) -> None:
    if isinstance(wr, bytearray):
        wr.extend(data)
        return
    remaining = bytes(data)
    while remaining:
        try:
            written = wr.write(remaining)
        except InterruptedError:
            continue
        except OSError as exc:
            raise ValueWriteError(part) from exc
        if written is None:
            return
        if written == 0:
            raise ValueWriteError(part)
        remaining = remaining[written:]


def _marker(wr: Any, marker: Marker, payload: int = 0) -> Marker:
    _emit(wr, bytes([(marker.value | payload) & 0xFF]), _MARKER_PART)
    return marker


def _data(wr: Any, fmt: str, val: Any) -> None:
    _emit(wr, struct.pack(">" + fmt, val), _DATA_PART)


def _check_int(val: int, low: int, high: int, what: str) -> None:
    if isinstance(val, bool) or not isinstance(val, int):
        raise TypeError(f"integer expected, got {type(val).__name__}")
    if not low <= val <= high:
        raise ValueError(f"{val} is out of range for {what}")


def _check_len(length: int) -> None:
    _check_int(length, 0, U32_MAX, "a MessagePack length")


def write_nil(wr: Any) -> Marker:
    return _marker(wr, Marker.NULL)


def write_bool(wr: Any, val: bool) -> Marker:
    return _marker(wr, Marker.TRUE if val else Marker.FALSE)


def write_pfix(wr: Any, val: int) -> Marker:
    """Write a positive fixnum in 0..127."""
    _check_int(val, 0, 127, "a positive fixnum")
    return _marker(wr, Marker.FIX_POS, val)


def write_nfix(wr: Any, val: int) -> Marker:
    """Write a negative fixnum in -32..-1."""
    _check_int(val, -32, -1, "a negative fixnum")
    return _marker(wr, Marker.FIX_NEG, val & 0xFF)


def _write_fixed(wr: Any, marker: Marker, fmt: str, val: int, low: int, high: int) -> Marker:
    _check_int(val, low, high, marker.name)
    _marker(wr, marker)
    _data(wr, fmt, val)
    return marker


def write_u8(wr: Any, val: int) -> Marker:
    return _write_fixed(wr, Marker.U8, "B", val, 0, U8_MAX)


def write_u16(wr: Any, val: int) -> Marker:
    return _write_fixed(wr, Marker.U16, "H", val, 0, U16_MAX)


def write_u32(wr: Any, val: int) -> Marker:
    return _write_fixed(wr, Marker.U32, "I", val, 0, U32_MAX)


def write_u64(wr: Any, val: int) -> Marker:
    return _write_fixed(wr, Marker.U64, "Q", val, 0, U64_MAX)


def write_i8(wr: Any, val: int) -> Marker:
    return _write_fixed(wr, Marker.I8, "b", val, -(2**7), 2**7 - 1)


def write_i16(wr: Any, val: int) -> Marker:
    return _write_fixed(wr, Marker.I16, "h", val, -(2**15), 2**15 - 1)


def write_i32(wr: Any, val: int) -> Marker:
    return _write_fixed(wr, Marker.I32, "i", val, -(2**31), 2**31 - 1)


def write_i64(wr: Any, val: int) -> Marker:
    return _write_fixed(wr, Marker.I64, "q", val, I64_MIN, I64_MAX)


def write_uint(wr: Any, val: int) -> Marker:
    """Write an unsigned integer in its most compact form."""
    _check_int(val, 0, U64_MAX, "an unsigned 64-bit integer")
    if val < 128:
        return write_pfix(wr, val)
    if val <= U8_MAX:
        return write_u8(wr, val)
    if val <= U16_MAX:
        return write_u16(wr, val)
    if val <= U32_MAX:
        return write_u32(wr, val)
    return write_u64(wr, val)


def write_sint(wr: Any, val: int) -> Marker:
    """Write a signed integer in its most compact form; non-negative ones go unsigned."""
    _check_int(val, I64_MIN, I64_MAX, "a signed 64-bit integer")
    if -32 <= val < 0:
        return write_nfix(wr, val)
    if -128 <= val < -32:
        return write_i8(wr, val)
    if -32768 <= val < -128:
        return write_i16(wr, val)
    if -(2**31) <= val < -32768:
        return write_i32(wr, val)
    if val < -(2**31):
        return write_i64(wr, val)
    return write_uint(wr, val)


def write_f32(wr: Any, val: float) -> Marker:
    _marker(wr, Marker.F32)
    _data(wr, "f", float(val))
    return Marker.F32


def write_f64(wr: Any, val: float) -> Marker:
    _marker(wr, Marker.F64)
    _data(wr, "d", float(val))
    return Marker.F64


def write_str_len(wr: Any, length: int) -> Marker:
    _check_len(length)
    if length < 32:
        return _marker(wr, Marker.FIX_STR, length)
    if length <= U8_MAX:
        marker, fmt = Marker.STR8, "B"
    elif length <= U16_MAX:
        marker, fmt = Marker.STR16, "H"
    else:
        marker, fmt = Marker.STR32, "I"
    _marker(wr, marker)
    _data(wr, fmt, length)
    return marker


def write_str(wr: Any, data: str | bytes) -> Marker:
    raw = data.encode("utf-8") if isinstance(data, str) else bytes(data)
    marker = write_str_len(wr, len(raw))
    _emit(wr, raw, _DATA_PART)
    return marker


def write_bin_len(wr: Any, length: int) -> Marker:
    _check_len(length)
    if length <= U8_MAX:
        marker, fmt = Marker.BIN8, "B"
    elif length <= U16_MAX:
        marker, fmt = Marker.BIN16, "H"
    else:
        marker, fmt = Marker.BIN32, "I"
    _marker(wr, marker)
    _data(wr, fmt, length)
    return marker


def write_bin(wr: Any, data: bytes | bytearray | memoryview) -> Marker:
    raw = bytes(data)
    marker = write_bin_len(wr, len(raw))
    _emit(wr, raw, _DATA_PART)
    return marker


def _write_container_len(
    wr: Any, length: int, fix: Marker, mid: Marker, wide: Marker
) -> Marker:
    _check_len(length)
    if length < 16:
        return _marker(wr, fix, length)
    marker, fmt = (mid, "H") if length <= U16_MAX else (wide, "I")
    _marker(wr, marker)
    _data(wr, fmt, length)
    return marker


def write_array_len(wr: Any, length: int) -> Marker:
    return _write_container_len(wr, length, Marker.FIX_ARRAY, Marker.ARRAY16, Marker.ARRAY32)


def write_map_len(wr: Any, length: int) -> Marker:
    return _write_container_len(wr, length, Marker.FIX_MAP, Marker.MAP16, Marker.MAP32)


_FIX_EXT = {
    1: Marker.FIX_EXT1,
    2: Marker.FIX_EXT2,
    4: Marker.FIX_EXT4,
    8: Marker.FIX_EXT8,
    16: Marker.FIX_EXT16,
}


def write_ext_meta(wr: Any, length: int, ty: int) -> Marker:
    """Write the marker, length and type byte that precede extension data."""
    _check_len(length)
    _check_int(ty, -128, 127, "an ext type")
    marker = _FIX_EXT.get(length)
    if marker is not None:
        _marker(wr, marker)
    else:
        if length <= U8_MAX:
            marker, fmt = Marker.EXT8, "B"
        elif length <= U16_MAX:
            marker, fmt = Marker.EXT16, "H"
        else:
            marker, fmt = Marker.EXT32, "I"
        _marker(wr, marker)
        _data(wr, fmt, length)
    _data(wr, "b", ty)
    return marker


def write_value(wr: Any, val: Any) -> None:
    """Write the most compact encoding of a value tree."""
    if not isinstance(val, Value):
        val = Value.of(val)
    kind = val.kind
    if kind is Kind.NIL:
        write_nil(wr)
    elif kind is Kind.BOOLEAN:
        write_bool(wr, val.as_bool())
    elif kind is Kind.INTEGER:
        if val.is_u64():
            write_uint(wr, val.as_u64())
        else:
            write_sint(wr, val.as_i64())
    elif kind is Kind.F32:
        write_f32(wr, val.as_f64())
    elif kind is Kind.F64:
        write_f64(wr, val.as_f64())
    elif kind is Kind.STRING:
        text = val.as_str()
        if text is not None:
            write_str(wr, text)
        else:
            write_bin(wr, val.as_slice())
    elif kind is Kind.BINARY:
        write_bin(wr, val.as_slice())
    elif kind is Kind.ARRAY:
        items = val.as_array()
        write_array_len(wr, len(items))
        for item in items:
            write_value(wr, item)
    elif kind is Kind.MAP:
        pairs = val.as_map()
        write_map_len(wr, len(pairs))
        for key, item in pairs:
            write_value(wr, key)
            write_value(wr, item)
    else:
        ty, data = val.as_ext()
        write_ext_meta(wr, len(data), ty)
        _emit(wr, data, _DATA_PART)


def encode(val: Any) -> bytes:
    """Encode a value tree to bytes."""
    buf = io.BytesIO()
    write_value(buf, val)
    return buf.getvalue()