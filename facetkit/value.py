"""Value-level type information: naming options, conversion errors and value vtables."""

from __future__ import annotations

import copy
import enum
import operator
import re
from dataclasses import dataclass, field
from typing import Any, Callable, Optional, Union

TypeNameFn = Callable[["TypeNameOpts"], str]


@dataclass(frozen=True)
class TypeNameOpts:
    """Options for formatting the name of a type.

    While ``recurse_ttl`` is positive, type parameters keep being formatted;
    at zero they are rendered as an ellipsis; a negative value formats all.
    """

    recurse_ttl: int = -1

    @classmethod
    def none(cls) -> "TypeNameOpts":
        """Options under which no type parameters are formatted."""
        return cls(0)

    @classmethod
    def one(cls) -> "TypeNameOpts":
        """Options under which only direct children are formatted."""
        return cls(1)

    @classmethod
    def infinite(cls) -> "TypeNameOpts":
        """Options under which all type parameters are formatted."""
        return cls(-1)

    def for_children(self) -> Optional["TypeNameOpts"]:
        """Options for formatting type parameters, or None if they should be elided."""
        if self.recurse_ttl > 0:
            return TypeNameOpts(self.recurse_ttl - 1)
        if self.recurse_ttl < 0:
            return TypeNameOpts(self.recurse_ttl)
        return None


class ParseError(ValueError):
    """Raised when a value cannot be parsed from a string."""

    def __init__(self, message: str = "failed to parse string") -> None:
        self.message = message
        super().__init__(f"Parse failed: {message}")


class TryFromError(Exception):
    """Raised when converting a value from another shape fails."""

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(f"Conversion failed: {message}")


class UnimplementedConversionError(TryFromError):
    """The target shape implements no conversions at all."""

    def __init__(self, shape: Any) -> None:
        self.shape = shape
        super().__init__(
            f"Shape {shape} doesn't implement any conversions (no try_from function)"
        )


class IncompatibleConversionError(TryFromError):
    """The target shape cannot be converted from this particular source shape."""

    def __init__(self, source: Any, target: Any) -> None:
        self.source = source
        self.target = target
        super().__init__(f"Cannot convert from shape {source} to shape {target}")


class MarkerTraits(enum.Flag):
    """Marker traits a type may carry."""

    EQ = 1 << 0
    SEND = 1 << 1
    SYNC = 1 << 2
    COPY = 1 << 3


_NO_TRAITS = MarkerTraits(0)


@dataclass(frozen=True)
class ValueVTable:
    """Operations available on values of one shape; absent operations are None."""

    type_name: TypeNameFn
    display: Optional[Callable[[Any], str]] = None
    debug: Optional[Callable[[Any], str]] = None
    default: Optional[Callable[[], Any]] = None
    clone: Optional[Callable[[Any], Any]] = None
    marker_traits: MarkerTraits = field(default=_NO_TRAITS)
    eq: Optional[Callable[[Any, Any], bool]] = None
    partial_ord: Optional[Callable[[Any, Any], Optional[int]]] = None
    ord: Optional[Callable[[Any, Any], int]] = None
    hash: Optional[Callable[[Any], int]] = None
    parse: Optional[Callable[[str], Any]] = None
    try_from: Optional[Callable[[Any, Any], Any]] = None

    def is_eq(self) -> bool:
        """Whether the type carries the Eq marker."""
        return MarkerTraits.EQ in self.marker_traits

    def is_send(self) -> bool:
        """Whether the type carries the Send marker."""
        return MarkerTraits.SEND in self.marker_traits

    def is_sync(self) -> bool:
        """Whether the type carries the Sync marker."""
        return MarkerTraits.SYNC in self.marker_traits

    def is_copy(self) -> bool:
        """Whether the type carries the Copy marker."""
        return MarkerTraits.COPY in self.marker_traits


_INT_RE = re.compile(r"[+-]?[0-9]+", re.ASCII)
_FLOAT_RE = re.compile(
    r"[+-]?(?:inf|infinity|nan|(?:[0-9]+\.?[0-9]*|\.[0-9]+)(?:[eE][+-]?[0-9]+)?)",
    re.ASCII | re.IGNORECASE,
)


def _parse_int(s: str) -> int:
    if not _INT_RE.fullmatch(s):
        raise ParseError()
    return int(s)


def _parse_float(s: str) -> float:
    if not _FLOAT_RE.fullmatch(s):
        raise ParseError()
    return float(s)


def _parse_bool(s: str) -> bool:
    if s == "true":
        return True
    if s == "false":
        return False
    raise ParseError()


def _parse_str(s: str) -> str:
    return s


_PARSERS: dict[type, Callable[[str], Any]] = {
    bool: _parse_bool,
    int: _parse_int,
    float: _parse_float,
    str: _parse_str,
}

_COPY_TYPES = (bool, int, float)


def _defines(tp: type, name: str) -> bool:
    return getattr(tp, name, None) is not getattr(object, name, None)


def _partial_cmp(a: Any, b: Any) -> Optional[int]:
    if a < b:
        return -1
    if a > b:
        return 1
    if a == b:
        return 0
    return None


def _cmp(a: Any, b: Any) -> int:
    return -1 if a < b else (1 if a > b else 0)


def _default_factory(tp: type) -> Optional[Callable[[], Any]]:
    try:
        tp()
    except Exception:
        return None
    return tp


def _parser_for(tp: type) -> Optional[Callable[[str], Any]]:
    for base in tp.__mro__:
        parser = _PARSERS.get(base)
        if parser is not None:
            if base is tp:
                return parser
            return lambda s, _p=parser: tp(_p(s))
    return None


def vtable_for(tp: type, type_name: Union[str, TypeNameFn, None] = None) -> ValueVTable:
    """Build a vtable describing the operations a Python type supports."""
    if type_name is None:
        name = tp.__name__
        name_fn: TypeNameFn = lambda opts: name
    elif isinstance(type_name, str):
        fixed = type_name
        name_fn = lambda opts: fixed
    else:
        name_fn = type_name

    hashable = getattr(tp, "__hash__", None) is not None
    orderable = _defines(tp, "__lt__") and _defines(tp, "__gt__")
    total_eq = hashable and not issubclass(tp, float)

    traits = MarkerTraits.SEND | MarkerTraits.SYNC
    if total_eq:
        traits |= MarkerTraits.EQ
    if issubclass(tp, _COPY_TYPES):
        traits |= MarkerTraits.COPY

    return ValueVTable(
        type_name=name_fn,
        display=str,
        debug=repr,
        default=_default_factory(tp),
        clone=copy.copy,
        marker_traits=traits,
        eq=operator.eq,
        partial_ord=_partial_cmp if orderable else None,
        ord=_cmp if orderable and total_eq else None,
        hash=hash if hashable else None,
        parse=_parser_for(tp),
    )