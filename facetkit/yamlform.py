"""Deserialization of YAML documents into struct-shaped Python types."""

from __future__ import annotations

import re
from typing import Any, Type, TypeVar

import yaml

from facetkit.shape import FieldError, ScalarDef, Shape, StructDef, build_struct, shape_of

T = TypeVar("T")

_U64_RE = re.compile(r"\+?[0-9]+", re.ASCII)
_U64_LIMIT = 1 << 64


class YamlError(ValueError):
    """Raised when a YAML document cannot be deserialized."""

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class _Loader(yaml.SafeLoader):
    """Safe loader that keeps timestamps as plain strings."""


_Loader.add_constructor(
    "tag:yaml.org,2002:timestamp",
    lambda loader, node: loader.construct_scalar(node),
)


def _yaml_type(value: Any) -> str:
    if isinstance(value, bool):
        return "boolean"
    if isinstance(value, int):
        return "integer"
    if isinstance(value, float):
        return "real number"
    if isinstance(value, str):
        return "string"
    if isinstance(value, list):
        return "array"
    if isinstance(value, dict):
        return "hash/map"
    if value is None:
        return "null"
    return "bad value"


def _parse_u64(text: str) -> int:
    if not _U64_RE.fullmatch(text):
        raise ValueError(text)
    number = int(text)
    if number >= _U64_LIMIT:
        raise ValueError(text)
    return number


def _yaml_to_u64(value: Any) -> int:
    if isinstance(value, bool):
        return 1 if value else 0
    if isinstance(value, int):
        return value % _U64_LIMIT
    if isinstance(value, float):
        raise YamlError("Failed to parse real as u64")
    if isinstance(value, str):
        try:
            return _parse_u64(value)
        except ValueError:
            raise YamlError("Failed to parse string as u64") from None
    raise YamlError(f"Cannot convert {_yaml_type(value)} to u64")


def from_str(cls: Type[T], text: str) -> T:
    """Deserialize a single YAML document into an instance of ``cls``."""
    try:
        docs = list(yaml.load_all(text, Loader=_Loader))
    except yaml.YAMLError as exc:
        raise YamlError(str(exc)) from exc
    if len(docs) != 1:
        raise YamlError("Expected exactly one YAML document")
    return _deserialize_value(shape_of(cls), docs[0])


def _deserialize_value(shape: Shape, value: Any) -> Any:
    definition = shape.definition
    if isinstance(definition, ScalarDef):
        if shape.is_type(int):
            return _yaml_to_u64(value)
        if shape.is_type(str):
            if not isinstance(value, str):
                raise YamlError(f"Expected string, got: {_yaml_type(value)}")
            return value
        raise YamlError(f"Unsupported scalar type: {shape}")

    if isinstance(definition, StructDef):
        if not isinstance(value, dict):
            raise YamlError(f"Expected a YAML hash, got: {value!r}")
        fields = {}
        for key, item in value.items():
            if not isinstance(key, str):
                raise YamlError(f"Expected string key, got: {_yaml_type(key)}")
            try:
                _, fld = shape.field_by_name(key)
            except FieldError as exc:
                raise YamlError(f"Field '{key}' error: {exc}") from exc
            try:
                fields[key] = _deserialize_value(fld.shape, item)
            except YamlError as exc:
                raise YamlError(f"Error deserializing field '{key}': {exc}") from exc
        return build_struct(shape, fields)

    raise YamlError(f"Unsupported shape: {shape}")