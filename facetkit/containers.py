"""Vtables for list-like and map-like values."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Iterator, Optional, Tuple

ListInitWithCapacityFn = Callable[[int], Any]
ListPushFn = Callable[[Any, Any], None]
ListLenFn = Callable[[Any], int]
ListGetItemFn = Callable[[Any, int], Any]

MapInitWithCapacityFn = Callable[[int], Any]
MapInsertFn = Callable[[Any, Any, Any], None]
MapLenFn = Callable[[Any], int]
MapContainsKeyFn = Callable[[Any, Any], bool]
MapGetValueFn = Callable[[Any, Any], Optional[Any]]
MapIterFn = Callable[[Any], Any]
MapIterNextFn = Callable[[Any], Optional[Tuple[Any, Any]]]
MapIterDeallocFn = Callable[[Any], None]


@dataclass(frozen=True)
class ListVTable:
    """Operations on a list-like value (a growable, indexable sequence)."""

    init_with_capacity: ListInitWithCapacityFn
    push: ListPushFn
    len: ListLenFn
    get_item: ListGetItemFn


@dataclass(frozen=True)
class MapIterVTable:
    """Operations on an iterator over a map's entries."""

    next: MapIterNextFn
    dealloc: MapIterDeallocFn


@dataclass(frozen=True)
class MapVTable:
    """Operations on a map-like value."""

    init_with_capacity: MapInitWithCapacityFn
    insert: MapInsertFn
    len: MapLenFn
    contains_key: MapContainsKeyFn
    get_value: MapGetValueFn
    iter: MapIterFn
    iter_vtable: MapIterVTable


def _check_capacity(capacity: int) -> None:
    if capacity < 0:
        raise ValueError(f"capacity must be non-negative, got {capacity}")


def _list_init(capacity: int) -> list:
    _check_capacity(capacity)
    return []


def _list_push(items: list, item: Any) -> None:
    items.append(item)


def _list_get_item(items: list, index: int) -> Any:
    if not 0 <= index < len(items):
        raise IndexError(f"index {index} out of bounds for list of length {len(items)}")
    return items[index]


def python_list_vtable() -> ListVTable:
    """A list vtable backed by Python's built-in list."""
    return ListVTable(
        init_with_capacity=_list_init,
        push=_list_push,
        len=len,
        get_item=_list_get_item,
    )


def _dict_init(capacity: int) -> dict:
    _check_capacity(capacity)
    return {}


def _dict_insert(mapping: dict, key: Any, value: Any) -> None:
    mapping[key] = value


def _dict_contains_key(mapping: dict, key: Any) -> bool:
    return key in mapping


def _dict_get_value(mapping: dict, key: Any) -> Optional[Any]:
    return mapping.get(key)


def _dict_iter(mapping: dict) -> Iterator[Tuple[Any, Any]]:
    yield from mapping.items()


def _dict_iter_next(it: Iterator[Tuple[Any, Any]]) -> Optional[Tuple[Any, Any]]:
    return next(it, None)


def _dict_iter_dealloc(it: Any) -> None:
    close = getattr(it, "close", None)
    if close is not None:
        close()


def python_dict_vtable() -> MapVTable:
    """A map vtable backed by Python's built-in dict."""
    return MapVTable(
        init_with_capacity=_dict_init,
        insert=_dict_insert,
        len=len,
        contains_key=_dict_contains_key,
        get_value=_dict_get_value,
        iter=_dict_iter,
        iter_vtable=MapIterVTable(next=_dict_iter_next, dealloc=_dict_iter_dealloc),
    )