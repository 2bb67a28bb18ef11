"""Generic conversion between bound and erased representations.

A storable value is any value whose extent-tagged components can be
re-threaded through another extent without touching anything else. Two
single-dispatch functions carry that machinery:

  rebind(value, extent)         -> copy of value with every extent tag replaced
  collect_extents(value, ...)   -> every extent-like tag reachable from value

Built-in containers (and their subclasses), NamedTuples and dataclasses are
traversed structurally and rebuilt with their own type.
Other types opt in either by registering with both functions or by defining
``__rebind__(self, extent)`` and ``__extents__(self)``; the latter returns the
sub-values that may carry tags. Anything else is treated as extent-free and
shared unchanged between representations.

Bound values are expected to be trees: ``rebind`` does not preserve sharing
and does not terminate on cyclic containers.
"""

from __future__ import annotations

import copy
import dataclasses
from functools import singledispatch

_MISSING = object()


def _is_dataclass_instance(value) -> bool:
    return dataclasses.is_dataclass(value) and not isinstance(value, type)


def _rebind_dataclass(value, extent):
    # Field-wise copy: __init__ and __post_init__ are not re-run, so init=False
    # fields and InitVar-derived state survive.
    new = copy.copy(value)
    for f in dataclasses.fields(value):
        item = getattr(value, f.name, _MISSING)
        if item is not _MISSING:
            object.__setattr__(new, f.name, rebind(item, extent))
    return new


@singledispatch
def rebind(value, extent):
    """Return ``value`` with every extent tag it carries replaced by ``extent``."""
    hook = getattr(type(value), "__rebind__", None)
    if hook is not None:
        return hook(value, extent)
    if _is_dataclass_instance(value):
        return _rebind_dataclass(value, extent)
    return value


@rebind.register(tuple)
def _rebind_tuple(value: tuple, extent):
    items = [rebind(item, extent) for item in value]
    if type(value) is tuple:
        return tuple(items)
    if hasattr(value, "_fields"):
        return type(value)(*items)
    return type(value)(items)


@rebind.register(list)
def _rebind_list(value: list, extent):
    items = [rebind(item, extent) for item in value]
    if type(value) is list:
        return items
    new = copy.copy(value)
    new[:] = items
    return new


@rebind.register(dict)
def _rebind_dict(value: dict, extent):
    items = [(rebind(k, extent), rebind(v, extent)) for k, v in value.items()]
    if type(value) is dict:
        return dict(items)
    # copy keeps subclass state such as defaultdict.default_factory
    new = copy.copy(value)
    new.clear()
    new.update(items)
    return new


@rebind.register(set)
@rebind.register(frozenset)
def _rebind_set(value, extent):
    return type(value)(rebind(item, extent) for item in value)


@singledispatch
def collect_extents(value, out: list, seen: set) -> None:
    """Append every extent-like tag reachable from ``value`` to ``out``."""
    hook = getattr(type(value), "__extents__", None)
    if hook is not None:
        if id(value) in seen:
            return
        seen.add(id(value))
        for item in hook(value):
            collect_extents(item, out, seen)
        return
    if _is_dataclass_instance(value):
        if id(value) in seen:
            return
        seen.add(id(value))
        for f in dataclasses.fields(value):
            collect_extents(getattr(value, f.name, None), out, seen)


@collect_extents.register(tuple)
@collect_extents.register(list)
@collect_extents.register(set)
@collect_extents.register(frozenset)
def _collect_items(value, out: list, seen: set) -> None:
    if id(value) in seen:
        return
    seen.add(id(value))
    for item in value:
        collect_extents(item, out, seen)


@collect_extents.register(dict)
def _collect_dict(value: dict, out: list, seen: set) -> None:
    if id(value) in seen:
        return
    seen.add(id(value))
    for k, v in value.items():
        collect_extents(k, out, seen)
        collect_extents(v, out, seen)


def extents_in(value) -> tuple:
    """Return the distinct extent-like tags reachable from ``value``."""
    out: list = []
    collect_extents(value, out, set())
    unique = []
    for tag in out:
        if not any(tag is u for u in unique):
            unique.append(tag)
    return tuple(unique)


__all__ = [
    "rebind",
    "collect_extents",
    "extents_in",
]
