import enum

import pytest
from hypothesis import given
from hypothesis import strategies as st

from msgvalue.errors import ConversionError
from msgvalue.ser import to_value
from msgvalue.value import Value
from msgvalue.variants import (
    newtype_variant,
    split_enum,
    struct_variant,
    tuple_variant,
    unit_variant,
)


class Color(enum.Enum):
    RED = "r"
    GREEN = "g"
    BLUE = "b"


def test_split_enum_index_only():
    assert split_enum(Value.array([1])) == (1, None)


def test_split_enum_with_payload():
    index, payload = split_enum(Value.array([2, [5]]))
    assert index == 2
    assert payload == Value.array([5])


def test_split_enum_accepts_plain_objects():
    assert split_enum([0, "x"]) == (0, Value.string("x"))


@pytest.mark.parametrize("member", list(Color))
def test_serialized_enum_round_trip(member):
    index, payload = split_enum(to_value(member))
    assert index == list(Color).index(member)
    assert payload == Value.array([])
    assert unit_variant(payload) is None


@pytest.mark.parametrize("items", [[], [1, 2, 3]])
def test_split_enum_bad_length(items):
    with pytest.raises(ConversionError, match="array with one or two elements"):
        split_enum(Value.array(items))


@pytest.mark.parametrize(
    "val", [Value.integer(1), Value.map([(1, 2)]), Value.ext(1, b"\x00"), Value.nil()]
)
def test_split_enum_not_array(val):
    with pytest.raises(ConversionError, match="array, map or int"):
        split_enum(val)


@pytest.mark.parametrize("ident", [-1, 2**32, "zero", 1.5])
def test_split_enum_index_must_be_u32(ident):
    with pytest.raises(ConversionError, match="u32"):
        split_enum(Value.array([ident]))


def test_error_message_has_description():
    with pytest.raises(ConversionError) as info:
        split_enum(Value.array([]))
    assert str(info.value).startswith("error while decoding value: ")


@given(st.integers(min_value=0, max_value=2**32 - 1))
def test_split_enum_any_u32(index):
    assert split_enum(Value.array([index])) == (index, None)


def test_unit_variant_accepts_absent_and_empty():
    assert unit_variant(None) is None
    assert unit_variant(Value.array([])) is None


def test_unit_variant_rejects_nonempty_array():
    with pytest.raises(ConversionError, match="empty array"):
        unit_variant(Value.array([1]))


def test_unit_variant_rejects_scalar():
    with pytest.raises(ConversionError, match="empty array"):
        unit_variant(Value.integer(3))


def test_newtype_variant_single_element():
    assert newtype_variant(Value.array(["inner"])) == Value.string("inner")


def test_newtype_variant_bare_value():
    assert newtype_variant(Value.integer(42)) == Value.integer(42)


def test_newtype_variant_many_elements():
    assert newtype_variant(Value.array([1, 2])) == Value.array([1, 2])


def test_newtype_variant_empty_array():
    with pytest.raises(ConversionError, match="array with one element"):
        newtype_variant(Value.array([]))


def test_newtype_variant_missing_payload():
    with pytest.raises(ConversionError, match="newtype variant"):
        newtype_variant(None)


def test_tuple_variant_items():
    assert tuple_variant(Value.array([1, "a", None])) == [
        Value.integer(1),
        Value.string("a"),
        Value.nil(),
    ]


def test_tuple_variant_rejects_scalar_and_missing():
    with pytest.raises(ConversionError, match="tuple variant"):
        tuple_variant(Value.boolean(True))
    with pytest.raises(ConversionError, match="tuple variant"):
        tuple_variant(None)


def test_struct_variant_array():
    assert struct_variant(Value.array([1, 2])) == [Value.integer(1), Value.integer(2)]


def test_struct_variant_map():
    assert struct_variant(Value.map([("k", 7)])) == [(Value.string("k"), Value.integer(7))]


def test_struct_variant_rejects_scalar_and_missing():
    with pytest.raises(ConversionError, match="struct variant"):
        struct_variant(Value.string("nope"))
    with pytest.raises(ConversionError, match="struct variant"):
        struct_variant(None)


def test_tuple_variant_through_split():
    _, payload = split_enum(Value.array([3, [True, False]]))
    assert tuple_variant(payload) == [Value.boolean(True), Value.boolean(False)]