"""Deserialization of URL-encoded form data into struct-shaped Python types."""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from typing import Any, Dict, Type, TypeVar
from urllib.parse import parse_qsl

from facetkit.shape import FieldError, ScalarDef, Shape, StructDef, build_struct, shape_of

log = logging.getLogger(__name__)

T = TypeVar("T")

_U64_RE = re.compile(r"\+?[0-9]+", re.ASCII)
_U64_LIMIT = 1 << 64


class UrlEncodedError(ValueError):
    """Base class for errors raised while deserializing URL-encoded data."""


class InvalidNumberError(UrlEncodedError):
    """A field value could not be parsed as a number."""

    def __init__(self, field_name: str, value: str) -> None:
        self.field_name = field_name
        self.value = value
        super().__init__(f"Invalid number for field '{field_name}': '{value}'")


class UnsupportedShapeError(UrlEncodedError):
    """The shape cannot be deserialized from URL-encoded data."""

    def __init__(self, detail: str) -> None:
        self.detail = detail
        super().__init__(f"Unsupported shape: {detail}")


class UnsupportedTypeError(UrlEncodedError):
    """The scalar type cannot be deserialized from URL-encoded data."""

    def __init__(self, type_name: str) -> None:
        self.type_name = type_name
        super().__init__(f"Unsupported type: {type_name}")


@dataclass
class _NestedValues:
    """Form values grouped by bracket notation: ``user[address][city]``."""

    flat: Dict[str, str] = field(default_factory=dict)
    nested: Dict[str, "_NestedValues"] = field(default_factory=dict)

    def insert(self, key: str, value: str) -> None:
        open_bracket = key.find("[")
        close_bracket = key.find("]")
        if 0 <= open_bracket < close_bracket:
            parent_key = key[:open_bracket]
            nested_key = key[open_bracket + 1 : close_bracket]
            remainder = key[close_bracket + 1 :]
            nested = self.nested.setdefault(parent_key, _NestedValues())
            if remainder:
                nested.insert(nested_key + remainder, value)
            else:
                nested.flat[nested_key] = value
            return
        self.flat[key] = value


def from_str(cls: Type[T], urlencoded: str) -> T:
    """Deserialize URL-encoded form data into an instance of ``cls``.

    Nested structs are filled from bracket notation such as ``user[name]=x``.
    Unknown fields are ignored; missing required fields raise
    :class:`~facetkit.shape.UninitializedFieldError`.
    """
    log.debug("Starting URL encoded form data deserialization")
    values = _NestedValues()
    for key, value in parse_qsl(urlencoded, keep_blank_values=True):
        values.insert(key, value)
    return _deserialize_value(shape_of(cls), values)


def _deserialize_value(shape: Shape, values: _NestedValues) -> Any:
    if not isinstance(shape.definition, StructDef):
        log.error("Unsupported root type")
        raise UnsupportedShapeError("Unsupported root type")

    fields: Dict[str, Any] = {}
    for key, value in values.flat.items():
        try:
            _, fld = shape.field_by_name(key)
        except FieldError:
            log.warning("Unknown field: %s", key)
            continue
        fields[key] = _deserialize_scalar(key, value, fld.shape)

    for key, nested in values.nested.items():
        try:
            _, fld = shape.field_by_name(key)
        except FieldError:
            log.warning("Unknown nested field: %s", key)
            continue
        if not isinstance(fld.shape.definition, StructDef):
            raise UnsupportedShapeError(f"Expected struct for nested field '{key}'")
        fields[key] = _deserialize_value(fld.shape, nested)

    return build_struct(shape, fields)


def _deserialize_scalar(key: str, value: str, shape: Shape) -> Any:
    if not isinstance(shape.definition, ScalarDef):
        log.error("Expected scalar field")
        raise UnsupportedShapeError(f"Expected scalar for field '{key}'")
    if shape.is_type(str):
        return value
    if shape.is_type(int):
        if _U64_RE.fullmatch(value):
            number = int(value)
            if number < _U64_LIMIT:
                return number
        raise InvalidNumberError(key, value)
    log.warning("Unsupported scalar type: %s", shape)
    raise UnsupportedTypeError(str(shape))