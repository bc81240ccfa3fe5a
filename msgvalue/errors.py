"""Conversion errors and descriptions of values that did not fit what was expected."""

from __future__ import annotations

import math
from decimal import Decimal
from typing import Any

from msgvalue.scalars import Integer, Utf8String

_DESCRIPTION = "error while decoding value"


class ConversionError(Exception):
    """Raised when a value cannot be converted to or from its structured form."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    def __str__(self) -> str:
        return f"{_DESCRIPTION}: {self.message}"


def _format_float(v: float) -> str:
    if math.isnan(v):
        return "NaN"
    if math.isinf(v):
        return "inf" if v > 0 else "-inf"
    text = repr(v)
    if "e" in text or "E" in text:
        text = format(Decimal(text), "f")
    if "." not in text:
        text += ".0"
    return text


def _quote(s: str) -> str:
    escaped = (
        s.replace("\\", "\\\\")
        .replace('"', '\\"')
        .replace("\n", "\\n")
        .replace("\r", "\\r")
        .replace("\t", "\\t")
    )
    return f'"{escaped}"'


def _describe_int(n: int) -> str:
    return f"integer `{n}`"


def _describe_value_like(val: Any) -> str:
    if val.is_nil():
        return "unit value"
    flag = val.as_bool()
    if flag is not None:
        return f"boolean `{'true' if flag else 'false'}`"
    unsigned = val.as_u64()
    if unsigned is not None:
        return _describe_int(unsigned)
    signed = val.as_i64()
    if signed is not None:
        return _describe_int(signed)
    number = val.as_f64()
    if number is not None:
        return f"floating point `{_format_float(number)}`"
    text = val.as_str()
    if text is not None:
        return f"string {_quote(text)}"
    if val.as_slice() is not None:
        return "byte array"
    if val.is_array() or val.is_ext():
        return "sequence"
    if val.is_map():
        return "map"
    raise TypeError(f"cannot describe {val!r}")


def describe_unexpected(val: Any) -> str:
    """Describe a value the way conversion errors report an unexpected one."""
    if val is None:
        return "unit value"
    if isinstance(val, Integer):
        return _describe_int(int(val))
    if isinstance(val, Utf8String):
        text = val.as_str()
        return "byte array" if text is None else f"string {_quote(text)}"
    if isinstance(val, bool):
        return f"boolean `{'true' if val else 'false'}`"
    if isinstance(val, int):
        return _describe_int(val)
    if isinstance(val, float):
        return f"floating point `{_format_float(val)}`"
    if isinstance(val, str):
        return f"string {_quote(val)}"
    if isinstance(val, (bytes, bytearray, memoryview)):
        return "byte array"
    if isinstance(val, (list, tuple)):
        return "sequence"
    if isinstance(val, dict):
        return "map"
    if callable(getattr(val, "is_nil", None)):
        return _describe_value_like(val)
    raise TypeError(f"cannot describe {val!r}")