# facetkit

`facetkit` describes Python types at runtime as *shapes*: what kind of
value a type is (scalar, struct, list, map or enum), which fields it has,
which of those fields are sensitive, and which capabilities the type offers
(equality, ordering, hashing, a default value and so on).

On top of those shapes it provides two small decoders that fill a class
from text:

- `facetkit.urlencoded.from_str` reads URL-encoded form data, including
  nested structures written in bracket notation (`user[address][city]=...`).
- `facetkit.yamlform.from_str` reads a single YAML document.

## Installation

```
pip install facetkit
```

The YAML decoder uses PyYAML, which is installed with the package.

## Decoding form data

```python
from dataclasses import dataclass

from facetkit.urlencoded import from_str


@dataclass
class SearchParams:
    query: str
    page: int


params = from_str(SearchParams, "query=rust+programming&page=2")
assert params == SearchParams(query="rust programming", page=2)
```

Percent-escapes and `+` are decoded as in an HTML form submission, and
blank values are kept as empty strings. Keys that do not match a field are
ignored (and logged as a warning through the `facetkit.urlencoded` logger).

Nested classes are filled from bracket notation, to any depth:

```python
@dataclass
class Address:
    street: str
    city: str


@dataclass
class User:
    name: str
    address: Address


user = from_str(
    User,
    "name=John+Doe&address[street]=123+Main+St&address[city]=Anytown",
)
assert user.address == Address(street="123 Main St", city="Anytown")
```

Field types may be `str`, `int` or another struct (a dataclass, a
named tuple or a tuple). An `int` field accepts only a non-negative
decimal integer below 2**64.

Errors are raised as subclasses of `UrlEncodedError` (itself a
`ValueError`):

- `InvalidNumberError` when an `int` field holds something that is not such
  a number; it has `field_name` and `value` attributes.
- `UnsupportedShapeError` when the target is not a struct, when a bracketed
  key names a field that is not a struct, or when a plain key names a field
  that is not a scalar.
- `UnsupportedTypeError` when a field has a scalar type other than `str`
  or `int`.

A required field that receives no value raises `UninitializedFieldError`
from `facetkit.shape`, whose message names the field, for example
`Field 'page' was not initialized`. Fields with a default may be left out.

## Decoding YAML

```python
from dataclasses import dataclass

from facetkit.yamlform import from_str


@dataclass
class Person:
    name: str
    age: int


person = from_str(Person, "name: Alice\nage: 30\n")
assert person == Person(name="Alice", age=30)
```

The text must hold exactly one YAML document, and a struct must be given
as a mapping with string keys. An `int` field accepts a YAML integer
(taken modulo 2**64), a boolean (`1` or `0`) or a string of decimal digits;
a `str` field accepts only a YAML string. Timestamps are kept as plain
strings.

Malformed YAML, a document count other than one, keys that name no field
and values of the wrong kind raise `YamlError`, whose message says which
field failed, for example
`Error deserializing field 'age': Failed to parse string as u64`.
A missing required field raises `UninitializedFieldError`.

## Inspecting shapes

`facetkit.shape.shape_of` returns the `Shape` of a type or type annotation:
dataclasses and named tuples become structs, `tuple[...]` a tuple struct,
`list[...]` and `tuple[X, ...]` lists, `dict[...]` maps, `enum.Enum`
subclasses enums, and every other class a scalar.

```python
from dataclasses import dataclass

from facetkit.shape import FieldFlags, StructKind, sensitive_field, shape_of
from facetkit.value import TypeNameOpts


@dataclass
class Account:
    login: str
    secret: str = sensitive_field(default="")


shape = shape_of(Account)
assert str(shape) == "Account"
assert shape.definition.kind is StructKind.STRUCT

index, secret_field = shape.field_by_name("secret")
assert index == 1
assert FieldFlags.SENSITIVE in secret_field.flags
assert str(secret_field.flags) == "sensitive"

nested = shape_of(dict[str, list[int]])
assert nested.type_name() == "dict[str, list[int]]"
assert nested.type_name(TypeNameOpts.one()) == "dict[str, list[…]]"
assert nested.type_name(TypeNameOpts.none()) == "dict[…]"
```

A shape's `definition` is a `StructDef`, `ListDef`, `MapDef`, `EnumDef` or
`ScalarDef`. Each `Field` carries its name, its own shape, its
`FieldFlags` and whether it is required. `Shape.field_by_name` and
`Shape.field_by_index` raise `FieldError` when the shape is not a struct,
when it is a list or map (which have no static fields), or when the field
does not exist.

Capabilities are checked with `is_eq()`, `is_hash()`, `is_ord()`,
`is_default()` and their siblings, or with `has(Characteristic.HASH)`;
`Characteristic.all`, `Characteristic.any` and `Characteristic.none` check
one capability across several shapes. `Shape.assert_shape` raises
`TypeError` when two shapes differ, and `build_struct` constructs a value
of a struct shape from a mapping of field names to values.

The operations behind these checks live in a `ValueVTable`
(`facetkit.value.vtable_for`), and list and map shapes carry a `ListVTable`
or `MapVTable` (`facetkit.containers.python_list_vtable` and
`python_dict_vtable`) backed by Python's built-in `list` and `dict`.

## What it does not do

- There is no encoder: values cannot be written back out as form data or
  YAML.
- The decoders handle only `str` and `int` scalars and nested structs; list,
  map and enum fields are not decoded.
- There is no command-line tool; the package is used as a library.

## Running the tests

```
pip install "facetkit[test]"
pytest
```