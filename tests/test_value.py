import pytest
from hypothesis import given
from hypothesis import strategies as st

from msgvalue.scalars import Integer, Utf8String
from msgvalue.value import Kind, Value


def test_nil_is_nil():
    assert Value.nil().is_nil()
    assert not Value.boolean(False).is_nil()


def test_is_bool():
    assert Value.boolean(True).is_bool()
    assert not Value.nil().is_bool()


def test_is_i64():
    assert Value.of(42).is_i64()
    assert not Value.of(42.0).is_i64()
    assert not Value.integer(2**63).is_i64()


def test_is_u64():
    assert Value.of(42).is_u64()
    assert not Value.f32(42.0).is_u64()
    assert not Value.f64(42.0).is_u64()
    assert not Value.integer(-1).is_u64()


def test_is_f32_and_f64():
    assert Value.f32(42.0).is_f32()
    assert not Value.of(42).is_f32()
    assert not Value.f64(42.0).is_f32()
    assert Value.f64(42.0).is_f64()
    assert not Value.of(42).is_f64()
    assert not Value.f32(42.0).is_f64()


def test_is_number():
    assert Value.of(42).is_number()
    assert Value.f32(42.0).is_number()
    assert Value.f64(42.0).is_number()
    assert not Value.nil().is_number()


def test_is_str():
    assert Value.string("value").is_str()
    assert not Value.nil().is_str()


def test_as_bool():
    assert Value.boolean(True).as_bool() is True
    assert Value.nil().as_bool() is None


def test_as_i64():
    assert Value.of(42).as_i64() == 42
    assert Value.f64(42.0).as_i64() is None


def test_as_u64():
    assert Value.of(42).as_u64() == 42
    assert Value.of(-42).as_u64() is None
    assert Value.f64(42.0).as_u64() is None


def test_as_f64():
    assert Value.of(42).as_f64() == 42.0
    assert Value.f32(42.0).as_f64() == 42.0
    assert Value.f64(42.0).as_f64() == 42.0
    assert Value.of(2147483647).as_f64() == 2147483647.0
    assert Value.nil().as_f64() is None


def test_as_str():
    assert Value.string("le message").as_str() == "le message"
    assert Value.boolean(True).as_str() is None


def test_as_slice():
    assert Value.binary(bytes([1, 2, 3, 4, 5])).as_slice() == bytes([1, 2, 3, 4, 5])
    assert Value.string("le message").as_slice() == b"le message"
    assert Value.boolean(True).as_slice() is None


def test_as_array():
    val = Value.array([Value.nil(), Value.boolean(True)])
    assert val.as_array() == [Value.nil(), Value.boolean(True)]
    assert Value.nil().as_array() is None


def test_as_map():
    val = Value.map([(Value.nil(), Value.boolean(True))])
    assert val.as_map() == [(Value.nil(), Value.boolean(True))]
    assert Value.nil().as_map() is None


def test_as_ext():
    assert Value.ext(42, bytes([1, 2, 3, 4, 5])).as_ext() == (42, bytes([1, 2, 3, 4, 5]))
    assert Value.boolean(True).as_ext() is None


def test_ext_type_out_of_range():
    with pytest.raises(ValueError):
        Value.ext(128, b"")
    with pytest.raises(ValueError):
        Value.ext(-129, b"")


def test_integer_out_of_range():
    with pytest.raises(OverflowError):
        Value.integer(2**64)
    with pytest.raises(OverflowError):
        Value.integer(-(2**63) - 1)


def test_index():
    val = Value.array([Value.nil(), Value.of(42)])
    assert val[1] == Value.of(42)
    assert val[5].is_nil()
    assert val[-1].is_nil()
    assert Value.of(42)[0].is_nil()


def test_index_rejects_non_integers():
    with pytest.raises(TypeError):
        Value.array([])["a"]


def test_invalid_utf8_string_keeps_bytes():
    val = Value.string(b"\xc3\x28")
    assert val.as_str() is None
    assert not val.is_str()
    assert val.as_slice() == b"\xc3\x28"
    assert val.is_bin()


def test_f32_and_f64_are_different_values():
    assert not Value.f32(42.0) == Value.f64(42.0)
    assert Value.f32(42.0) == Value.f32(42.0)


def test_f32_rounds_to_single_precision():
    val = Value.f32(0.1)
    assert val.as_f64() == pytest.approx(0.1, abs=1e-8)
    assert val.as_f64() != 0.1


def test_of_converts_plain_objects():
    assert Value.of(None) == Value.nil()
    assert Value.of(True) == Value.boolean(True)
    assert Value.of("x") == Value.string("x")
    assert Value.of(b"x") == Value.binary(b"x")
    assert Value.of([1, None]) == Value.array([Value.integer(1), Value.nil()])
    assert Value.of({"a": 1}) == Value.map([(Value.string("a"), Value.integer(1))])
    assert Value.of(Integer(7)) == Value.integer(7)
    assert Value.of(Utf8String("s")) == Value.string("s")


def test_of_rejects_unknown_objects():
    with pytest.raises(TypeError):
        Value.of(object())


def test_kind_reports_variant():
    assert Value.ext(1, b"").kind is Kind.EXT
    assert Value.of([]).kind is Kind.ARRAY


def test_display_scalars():
    assert str(Value.nil()) == "nil"
    assert str(Value.boolean(True)) == "true"
    assert str(Value.boolean(False)) == "false"
    assert str(Value.integer(-5)) == "-5"
    assert str(Value.string("le message")) == '"le message"'


def test_display_floats():
    assert str(Value.f64(42.0)) == "42"
    assert str(Value.f32(0.1)) == "0.1"


def test_display_binary_and_ext():
    data = b"\x01\x02\x03"
    assert str(Value.binary(data)) == str(list(data))
    assert str(Value.ext(5, data)) == f"[5, {list(data)}]"


def test_display_containers():
    assert str(Value.array([Value.nil(), Value.of(42)])) == "[nil, 42]"
    assert str(Value.map([])) == "{}"
    assert str(Value.map([(Value.string("a"), Value.integer(1))])) == '{"a": 1}'


def test_display_nested_array_is_composed():
    inner = Value.array([Value.string("le message")])
    outer = Value.array([Value.nil(), inner])
    assert str(outer) == f"[nil, {inner}]"


@given(st.integers(min_value=-(2**63), max_value=2**64 - 1))
def test_integer_accessors(n):
    val = Value.integer(n)
    assert val.as_i64() == (n if n <= 2**63 - 1 else None)
    assert val.as_u64() == (n if n >= 0 else None)
    assert str(val) == str(n)


@given(st.floats(allow_nan=False, width=32))
def test_f32_display_round_trips(v):
    val = Value.f32(v)
    text = str(val)
    if text in ("inf", "-inf"):
        assert val.as_f64() == float(text)
    else:
        assert Value.f32(float(text)) == val


@given(st.floats(allow_nan=False, allow_infinity=False))
def test_f64_display_round_trips(v):
    assert float(str(Value.f64(v))) == v