"""Shapes: reflection descriptions of Python types and their structure."""

from __future__ import annotations

import dataclasses
import enum
import typing
from dataclasses import dataclass
from typing import Any, Callable, Iterable, Mapping, Optional, Tuple, Union

from facetkit.containers import ListVTable, MapVTable, python_dict_vtable, python_list_vtable
from facetkit.value import MarkerTraits, TypeNameOpts, ValueVTable, vtable_for

SENSITIVE_METADATA_KEY = "sensitive"


class FieldError(LookupError):
    """Raised when a field lookup on a shape fails."""

    NO_STATIC_FIELDS = "No static fields available"
    NO_SUCH_STATIC_FIELD = "No such static field"
    INDEX_OUT_OF_BOUNDS = "Index out of bounds"
    NOT_A_STRUCT = "Not a struct"

    def __init__(self, reason: str) -> None:
        self.reason = reason
        super().__init__(reason)


class UninitializedFieldError(ValueError):
    """Raised when a struct is built without a value for a required field."""

    def __init__(self, field_name: str) -> None:
        self.field_name = field_name
        super().__init__(f"Field '{field_name}' was not initialized")


class StructKind(enum.Enum):
    """The kind of struct a shape describes."""

    STRUCT = "struct"
    TUPLE_STRUCT = "tuple_struct"
    TUPLE = "tuple"


class FieldFlags(enum.Flag):
    """Flags that modify how a field is treated."""

    EMPTY = 0
    SENSITIVE = 1 << 0

    def __str__(self) -> str:
        names = [name for flag, name in ((FieldFlags.SENSITIVE, "sensitive"),) if flag in self]
        return ", ".join(names) if names else "none"


@dataclass(frozen=True)
class Field:
    """A field of a struct, tuple or enum variant."""

    name: str
    shape: "Shape"
    flags: FieldFlags = FieldFlags.EMPTY
    required: bool = True


@dataclass(frozen=True)
class StructDef:
    """Struct-like definition: its kind and its fields in declaration order."""

    kind: StructKind
    fields: Tuple[Field, ...]


@dataclass(frozen=True)
class MapDef:
    """Map definition: a vtable and the shapes of keys and values."""

    vtable: MapVTable
    k: "Shape"
    v: "Shape"


@dataclass(frozen=True)
class ListDef:
    """List definition: a vtable and the shape of the items."""

    vtable: ListVTable
    t: "Shape"


class EnumRepr(enum.Enum):
    """Representation of an enum's discriminant."""

    DEFAULT = "default"
    U8 = "u8"
    U16 = "u16"
    U32 = "u32"
    U64 = "u64"
    USIZE = "usize"
    I8 = "i8"
    I16 = "i16"
    I32 = "i32"
    I64 = "i64"
    ISIZE = "isize"


class VariantKind(enum.Enum):
    """The kind of an enum variant."""

    UNIT = "unit"
    TUPLE = "tuple"
    STRUCT = "struct"


@dataclass(frozen=True)
class Variant:
    """A variant of an enum."""

    name: str
    discriminant: Optional[int]
    kind: VariantKind = VariantKind.UNIT
    fields: Tuple[Field, ...] = ()


@dataclass(frozen=True)
class EnumDef:
    """Enum definition: its representation and variants."""

    repr: EnumRepr
    variants: Tuple[Variant, ...]


@dataclass(frozen=True)
class ScalarDef:
    """Definition of a scalar, which is not composed of other shapes."""

    tp: Any


Def = Union[ScalarDef, StructDef, MapDef, ListDef, EnumDef]


class Characteristic(enum.Enum):
    """A characteristic a shape can have."""

    SEND = "send"
    SYNC = "sync"
    COPY = "copy"
    EQ = "eq"
    CLONE = "clone"
    DEBUG = "debug"
    PARTIAL_EQ = "partial_eq"
    PARTIAL_ORD = "partial_ord"
    ORD = "ord"
    HASH = "hash"
    DEFAULT = "default"

    def all(self, shapes: Iterable["Shape"]) -> bool:
        """Whether every shape has this characteristic."""
        return all(shape.has(self) for shape in shapes)

    def any(self, shapes: Iterable["Shape"]) -> bool:
        """Whether at least one shape has this characteristic."""
        return any(shape.has(self) for shape in shapes)

    def none(self, shapes: Iterable["Shape"]) -> bool:
        """Whether no shape has this characteristic."""
        return not any(shape.has(self) for shape in shapes)


_MARKERS = {
    Characteristic.SEND: MarkerTraits.SEND,
    Characteristic.SYNC: MarkerTraits.SYNC,
    Characteristic.COPY: MarkerTraits.COPY,
    Characteristic.EQ: MarkerTraits.EQ,
}

_OPERATIONS = {
    Characteristic.CLONE: "clone",
    Characteristic.DEBUG: "debug",
    Characteristic.PARTIAL_EQ: "eq",
    Characteristic.PARTIAL_ORD: "partial_ord",
    Characteristic.ORD: "ord",
    Characteristic.HASH: "hash",
    Characteristic.DEFAULT: "default",
}


@dataclass(frozen=True, eq=False)
class Shape:
    """Reflection schema of a type: its vtable and its definition."""

    tp: Any
    vtable: ValueVTable
    definition: Def

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Shape):
            return NotImplemented
        return self.tp == other.tp and self.definition == other.definition

    def __hash__(self) -> int:
        return hash((self.tp, self.definition))

    def __str__(self) -> str:
        return self.type_name()

    def __repr__(self) -> str:
        return f"Shape({self.type_name()})"

    def has(self, characteristic: Characteristic) -> bool:
        """Whether this shape has the given characteristic."""
        marker = _MARKERS.get(characteristic)
        if marker is not None:
            return marker in self.vtable.marker_traits
        return getattr(self.vtable, _OPERATIONS[characteristic]) is not None

    def is_send(self) -> bool:
        return self.has(Characteristic.SEND)

    def is_sync(self) -> bool:
        return self.has(Characteristic.SYNC)

    def is_copy(self) -> bool:
        return self.has(Characteristic.COPY)

    def is_eq(self) -> bool:
        return self.has(Characteristic.EQ)

    def is_clone(self) -> bool:
        return self.has(Characteristic.CLONE)

    def is_debug(self) -> bool:
        return self.has(Characteristic.DEBUG)

    def is_partial_eq(self) -> bool:
        return self.has(Characteristic.PARTIAL_EQ)

    def is_partial_ord(self) -> bool:
        return self.has(Characteristic.PARTIAL_ORD)

    def is_ord(self) -> bool:
        return self.has(Characteristic.ORD)

    def is_hash(self) -> bool:
        return self.has(Characteristic.HASH)

    def is_default(self) -> bool:
        return self.has(Characteristic.DEFAULT)

    def type_name(self, opts: Optional[TypeNameOpts] = None) -> str:
        """The name of this type, formatted according to ``opts``."""
        return self.vtable.type_name(opts if opts is not None else TypeNameOpts())

    def is_type(self, tp: Any) -> bool:
        """Whether this shape describes the given Python type."""
        return self.tp == tp

    def is_shape(self, other: "Shape") -> bool:
        """Whether this shape equals another."""
        return self == other

    def assert_shape(self, other: "Shape") -> None:
        """Raise TypeError unless this shape equals ``other``."""
        if not self.is_shape(other):
            raise TypeError(f"Shape mismatch: expected {other}, found {self}")

    def field_by_name(self, name: str) -> Tuple[int, Field]:
        """Index and description of the named field."""
        fields = self._static_fields()
        for index, fld in enumerate(fields):
            if fld.name == name:
                return index, fld
        raise FieldError(FieldError.NO_SUCH_STATIC_FIELD)

    def field_by_index(self, index: int) -> Field:
        """Description of the field at ``index``."""
        fields = self._static_fields()
        if not 0 <= index < len(fields):
            raise FieldError(FieldError.INDEX_OUT_OF_BOUNDS)
        return fields[index]

    def _static_fields(self) -> Tuple[Field, ...]:
        if isinstance(self.definition, StructDef):
            return self.definition.fields
        if isinstance(self.definition, (MapDef, ListDef)):
            raise FieldError(FieldError.NO_STATIC_FIELDS)
        raise FieldError(FieldError.NOT_A_STRUCT)


def sensitive_field(**kwargs: Any) -> Any:
    """A dataclass field marked as holding sensitive data."""
    metadata = dict(kwargs.pop("metadata", None) or {})
    metadata[SENSITIVE_METADATA_KEY] = True
    return dataclasses.field(metadata=metadata, **kwargs)


_CACHE: dict = {}


def shape_of(tp: Any) -> Shape:
    """The shape describing a Python type or type annotation."""
    if tp is Any:
        tp = object
    cached = _CACHE.get(tp)
    if cached is not None:
        return cached
    shape = _build_shape(tp)
    _CACHE[tp] = shape
    return shape


def _generic_name(base: str, children: Tuple[Shape, ...]) -> Callable[[TypeNameOpts], str]:
    def name(opts: TypeNameOpts) -> str:
        child_opts = opts.for_children()
        if child_opts is None:
            return f"{base}[…]"
        if not children:
            return f"{base}[()]"
        return f"{base}[{', '.join(c.type_name(child_opts) for c in children)}]"

    return name


def _type_hints(tp: type) -> dict:
    hints: dict = {}
    for klass in reversed(tp.__mro__):
        hints.update(vars(klass).get("__annotations__", {}))
    return hints


def _resolved(hint: Any, owner: type, name: str) -> Any:
    if isinstance(hint, str):
        raise TypeError(f"cannot resolve annotation {hint!r} of field '{name}' in {owner.__name__}")
    return hint


def _dataclass_shape(tp: type) -> Shape:
    hints = _type_hints(tp)
    fields = []
    for f in dataclasses.fields(tp):
        if not f.init:
            continue
        hint = _resolved(hints.get(f.name, f.type), tp, f.name)
        flags = FieldFlags.SENSITIVE if f.metadata.get(SENSITIVE_METADATA_KEY) else FieldFlags.EMPTY
        required = f.default is dataclasses.MISSING and f.default_factory is dataclasses.MISSING
        fields.append(Field(f.name, shape_of(hint), flags, required))
    return Shape(tp, vtable_for(tp), StructDef(StructKind.STRUCT, tuple(fields)))


def _namedtuple_shape(tp: type) -> Shape:
    hints = _type_hints(tp)
    defaults = getattr(tp, "_field_defaults", {})
    fields = tuple(
        Field(name, shape_of(_resolved(hints.get(name, Any), tp, name)), required=name not in defaults)
        for name in tp._fields
    )
    return Shape(tp, vtable_for(tp), StructDef(StructKind.TUPLE_STRUCT, fields))


def _enum_shape(tp: type) -> Shape:
    variants = tuple(
        Variant(member.name, member.value if isinstance(member.value, int) else None)
        for member in tp
    )
    return Shape(tp, vtable_for(tp), EnumDef(EnumRepr.DEFAULT, variants))


def _build_shape(tp: Any) -> Shape:
    origin = typing.get_origin(tp)
    args = typing.get_args(tp)

    if origin is list or tp is list:
        item = shape_of(args[0] if args else object)
        return Shape(tp, vtable_for(list, _generic_name("list", (item,))), ListDef(python_list_vtable(), item))

    if origin is dict or tp is dict:
        k = shape_of(args[0] if args else object)
        v = shape_of(args[1] if len(args) > 1 else object)
        return Shape(tp, vtable_for(dict, _generic_name("dict", (k, v))), MapDef(python_dict_vtable(), k, v))

    if origin is tuple:
        if len(args) == 2 and args[1] is Ellipsis:
            item = shape_of(args[0])
            name = _generic_name("tuple", (item,))
            return Shape(tp, vtable_for(tuple, lambda o: name(o)[:-1] + ", ...]"), ListDef(python_list_vtable(), item))
        children = tuple(shape_of(a) for a in args if a != ())
        fields = tuple(Field(str(i), s) for i, s in enumerate(children))
        return Shape(tp, vtable_for(tuple, _generic_name("tuple", children)), StructDef(StructKind.TUPLE, fields))

    if not isinstance(tp, type):
        raise TypeError(f"unsupported type annotation: {tp!r}")

    if dataclasses.is_dataclass(tp):
        return _dataclass_shape(tp)
    if issubclass(tp, tuple) and hasattr(tp, "_fields"):
        return _namedtuple_shape(tp)
    if issubclass(tp, enum.Enum):
        return _enum_shape(tp)
    return Shape(tp, vtable_for(tp), ScalarDef(tp))


def build_struct(shape: Shape, values: Mapping[str, Any]) -> Any:
    """Construct a value of a struct shape from field values keyed by name."""
    if not isinstance(shape.definition, StructDef):
        raise FieldError(FieldError.NOT_A_STRUCT)
    known = {f.name for f in shape.definition.fields}
    for key in values:
        if key not in known:
            raise FieldError(FieldError.NO_SUCH_STATIC_FIELD)
    for fld in shape.definition.fields:
        if fld.required and fld.name not in values:
            raise UninitializedFieldError(fld.name)
    if shape.definition.kind is StructKind.TUPLE:
        return tuple(values[f.name] for f in shape.definition.fields)
    return shape.tp(**dict(values))