import enum
from dataclasses import dataclass
from typing import NamedTuple

import pytest

from facetkit.shape import (
    Characteristic,
    EnumDef,
    FieldError,
    FieldFlags,
    ListDef,
    MapDef,
    ScalarDef,
    StructDef,
    StructKind,
    UninitializedFieldError,
    VariantKind,
    build_struct,
    sensitive_field,
    shape_of,
)
from facetkit.value import TypeNameOpts


@dataclass
class Blah:
    foo: int
    bar: str


@dataclass
class SensitiveBlah:
    foo: int
    bar: str = sensitive_field()


@dataclass
class Empty:
    pass


@dataclass
class FileInfo:
    path: str
    size: int


@dataclass
class WithDefault:
    name: str
    count: int = 5


class Point(NamedTuple):
    x: float
    y: float


class Color(enum.Enum):
    RED = 1
    GREEN = 2
    BLUE = 3


def test_simple_struct():
    shape = shape_of(Blah)
    assert str(shape) == "Blah"
    assert isinstance(shape.definition, StructDef)
    assert shape.definition.kind is StructKind.STRUCT
    fields = shape.definition.fields
    assert len(fields) == 2
    assert fields[0].name == "foo"
    assert fields[0].shape.is_type(int)
    assert fields[1].name == "bar"
    assert fields[1].shape.is_type(str)


def test_struct_with_sensitive_field():
    fields = shape_of(SensitiveBlah).definition.fields
    assert fields[1].name == "bar"
    assert FieldFlags.SENSITIVE not in fields[0].flags
    assert FieldFlags.SENSITIVE in fields[1].flags


def test_field_flags_display():
    fields = shape_of(SensitiveBlah).definition.fields
    assert str(fields[0].flags) == "none"
    assert str(fields[1].flags) == "sensitive"


def test_empty_struct():
    shape = shape_of(Empty)
    assert shape.definition == StructDef(StructKind.STRUCT, ())


def test_struct_with_str_and_int():
    names = [f.name for f in shape_of(FileInfo).definition.fields]
    assert names == ["path", "size"]


def test_named_tuple_is_tuple_struct():
    shape = shape_of(Point)
    assert shape.definition.kind is StructKind.TUPLE_STRUCT
    assert [f.name for f in shape.definition.fields] == ["x", "y"]
    assert shape.definition.fields[0].shape.is_type(float)


def test_tuple_shape():
    shape = shape_of(tuple[int, str])
    assert shape.definition.kind is StructKind.TUPLE
    assert [f.name for f in shape.definition.fields] == ["0", "1"]
    assert str(shape) == "tuple[int, str]"


def test_list_shape_and_names():
    shape = shape_of(list[list[int]])
    assert isinstance(shape.definition, ListDef)
    assert shape.definition.t == shape_of(list[int])
    assert shape.type_name() == "list[list[int]]"
    assert shape.type_name(TypeNameOpts.none()) == "list[…]"
    assert shape.type_name(TypeNameOpts.one()) == "list[list[…]]"


def test_dict_shape():
    shape = shape_of(dict[str, int])
    assert isinstance(shape.definition, MapDef)
    assert shape.definition.k.is_type(str)
    assert shape.definition.v.is_type(int)
    assert str(shape) == "dict[str, int]"


def test_enum_shape():
    shape = shape_of(Color)
    assert isinstance(shape.definition, EnumDef)
    assert [v.name for v in shape.definition.variants] == ["RED", "GREEN", "BLUE"]
    assert [v.discriminant for v in shape.definition.variants] == [1, 2, 3]
    assert all(v.kind is VariantKind.UNIT for v in shape.definition.variants)


def test_scalar_shape():
    shape = shape_of(int)
    assert shape.definition == ScalarDef(int)
    assert str(shape) == "int"


def test_characteristics_of_scalars():
    int_shape = shape_of(int)
    assert int_shape.is_copy()
    assert int_shape.is_hash()
    assert int_shape.is_eq()
    assert int_shape.is_ord()
    assert int_shape.is_default()
    assert int_shape.is_send() and int_shape.is_sync()
    float_shape = shape_of(float)
    assert not float_shape.is_eq()
    assert float_shape.is_partial_ord()
    assert not float_shape.is_ord()


def test_characteristics_of_containers_and_structs():
    list_shape = shape_of(list[int])
    assert not list_shape.is_hash()
    assert not list_shape.is_copy()
    assert list_shape.is_clone()
    assert list_shape.is_debug()
    assert list_shape.is_partial_eq()
    assert not shape_of(Blah).is_default()
    assert shape_of(Blah).has(Characteristic.PARTIAL_EQ)


def test_characteristic_all_any_none():
    shapes = [shape_of(int), shape_of(list[int])]
    assert Characteristic.HASH.any(shapes)
    assert not Characteristic.HASH.all(shapes)
    assert not Characteristic.HASH.none(shapes)
    assert Characteristic.COPY.none([shape_of(str), shape_of(list[int])])
    assert Characteristic.SEND.all(shapes)


def test_shape_equality_and_assert():
    assert shape_of(int).is_shape(shape_of(int))
    assert not shape_of(int).is_shape(shape_of(str))
    shape_of(Blah).assert_shape(shape_of(Blah))
    with pytest.raises(TypeError, match="Shape mismatch: expected str, found int"):
        shape_of(int).assert_shape(shape_of(str))


def test_field_by_name_and_index():
    shape = shape_of(Blah)
    index, fld = shape.field_by_name("bar")
    assert index == 1
    assert fld.name == "bar"
    assert shape.field_by_index(0).name == "foo"


def test_field_errors():
    with pytest.raises(FieldError) as info:
        shape_of(Blah).field_by_name("missing")
    assert info.value.reason == FieldError.NO_SUCH_STATIC_FIELD
    with pytest.raises(FieldError) as info:
        shape_of(Blah).field_by_index(2)
    assert str(info.value) == "Index out of bounds"
    with pytest.raises(FieldError) as info:
        shape_of(dict[str, int]).field_by_index(0)
    assert str(info.value) == "No static fields available"
    with pytest.raises(FieldError) as info:
        shape_of(int).field_by_name("x")
    assert str(info.value) == "Not a struct"


def test_build_struct():
    assert build_struct(shape_of(Blah), {"foo": 1, "bar": "x"}) == Blah(1, "x")
    assert build_struct(shape_of(tuple[int, str]), {"0": 3, "1": "y"}) == (3, "y")
    assert build_struct(shape_of(Point), {"x": 1.0, "y": 2.0}) == Point(1.0, 2.0)


def test_build_struct_uses_defaults():
    assert build_struct(shape_of(WithDefault), {"name": "a"}) == WithDefault("a", 5)


def test_build_struct_missing_field():
    with pytest.raises(UninitializedFieldError, match="Field 'bar' was not initialized"):
        build_struct(shape_of(Blah), {"foo": 1})


def test_build_struct_unknown_field():
    with pytest.raises(FieldError) as info:
        build_struct(shape_of(Blah), {"foo": 1, "bar": "x", "baz": 2})
    assert info.value.reason == FieldError.NO_SUCH_STATIC_FIELD


def test_unsupported_annotation():
    with pytest.raises(TypeError):
        shape_of(int | str)