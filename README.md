# msgvalue

`msgvalue` holds any MessagePack value in memory as a `Value` tree, writes that tree out in the
most compact MessagePack encoding, and converts Python objects to and from values.

## Installation

```
pip install msgvalue
```

To run the test suite, install the `test` extra and run `pytest`:

```
pip install msgvalue[test]
pytest
```

## Building values

```python
from msgvalue.value import Value

val = Value.array([Value.nil(), Value.of(42), Value.array([Value.string("le message")])])

val.is_array()        # True
val[1].as_i64()       # 42
val[7].is_nil()       # True: an index past the end gives nil
str(val)              # '[nil, 42, ["le message"]]'
```

Values are made with the class methods `nil`, `boolean`, `integer`, `f32`, `f64`, `string`,
`binary`, `array`, `map` and `ext`, or with `Value.of`, which picks the kind for a Python object:
`None` becomes nil, `bool` boolean, `int` integer, `float` f64, `str` string, `bytes` binary, a
list or tuple an array and a mapping a map. A `Value` passed to `Value.of` is returned as it is.
The kind of a value is in its `kind` attribute, a member of the `Kind` enum.

Each value answers `is_nil`, `is_bool`, `is_i64`, `is_u64`, `is_f32`, `is_f64`, `is_number`,
`is_str`, `is_bin`, `is_array`, `is_map` and `is_ext`, and the accessors `as_bool`, `as_i64`,
`as_u64`, `as_f64`, `as_str`, `as_slice`, `as_array`, `as_map` and `as_ext` return `None` when the
value is of another kind. `as_slice` gives the bytes of both binary and string values.

An integer value must lie between `-(2**63)` and `2**64 - 1`. `Integer` and `Utf8String` in
`msgvalue.scalars` hold integers and strings. A `Utf8String` built from bytes that are not valid
UTF-8 keeps them: `is_err()` is true, `as_str()` is `None` and `as_bytes()` gives back the
original bytes.

## Encoding

```python
from msgvalue.encode import encode, write_value

encode(Value.of("le message"))
# b'\xaale message'

with open("out.bin", "wb") as fh:
    write_value(fh, val)
```

`write_value` writes to a `bytearray` or to any object with a `write` method. A string holding
invalid UTF-8 is written as binary.

The low-level writers in `msgvalue.encode` (`write_nil`, `write_bool`, `write_pfix`, `write_nfix`,
`write_u8` to `write_u64`, `write_i8` to `write_i64`, `write_uint`, `write_sint`, `write_f32`,
`write_f64`, `write_str_len`, `write_str`, `write_bin_len`, `write_bin`, `write_array_len`,
`write_map_len` and `write_ext_meta`) each return the `Marker` they wrote. `write_uint` and
`write_sint` choose the shortest form; `write_sint` writes non-negative numbers as unsigned. A
number out of range for a writer raises `ValueError`; a stream that fails or takes no bytes raises
`ValueWriteError`.

## Converting Python objects

```python
from dataclasses import dataclass
from enum import Enum

from msgvalue.de import from_value, value_from
from msgvalue.ser import to_value


@dataclass
class Point:
    x: int
    y: int


class Color(Enum):
    RED = 1
    GREEN = 2


to_value("John Smith") == Value.of("John Smith")   # True
to_value(Point(1, 2))                               # the array [1, 2]
to_value(Color.GREEN)                               # the array [1, []]

from_value(to_value(Point(1, 2)), Point)            # Point(x=1, y=2)
from_value(to_value(Color.GREEN), Color)            # Color.GREEN
from_value(value_from([1, 2, 3]), list[int])        # [1, 2, 3]
from_value(value_from({"a": [1, None]}))            # {'a': [1, None]}
```

`to_value` turns dataclasses into arrays of their field values, enum members into
`[index, []]`, mappings into maps and lists, tuples and sets into arrays.

`from_value` builds an object of the target type: `bool`, `int`, `float`, `str`, `bytes`,
`list`, `tuple`, `set`, `frozenset` and `dict` with their generic forms, optionals, dataclasses
(from an array of fields or a map keyed by field name or index), enums (from `[index]` or
`[index, []]`) and `Value` itself. With no target the tree becomes plain Python data.
`value_from` builds a `Value` from plain data.

The helpers in `msgvalue.variants` read enum variants stored as `[index]` or `[index, payload]`:
`split_enum` gives the index and payload, and `unit_variant`, `newtype_variant`, `tuple_variant`
and `struct_variant` check and unpack the payload.

A failed conversion raises `msgvalue.errors.ConversionError`, whose message starts with
`error while decoding value:`.

## What it does not do

`msgvalue` only writes MessagePack. It has no reader: bytes cannot be decoded back into a `Value`
with this package. Extension values cannot be converted to Python objects by `from_value`; doing
so raises `ConversionError`.