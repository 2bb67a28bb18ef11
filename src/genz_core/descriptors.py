"""Logical-type descriptors.

A descriptor is the stable, hashable identity of a logical type. It is only
ever compared for equality: the prover uses it to decide whether a requested
type tuple is pairwise distinct, and brand checks use it to tell markers for
different types apart inside one extent.

Python already has runtime type identity, so the common case is a class, a
``typing.NewType`` or a generic alias. Any other hashable key (an enum member,
a string tag) may stand in for a logical type when the caller wants explicit,
registered keys instead.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Hashable, Iterable, TypeAlias

LogicalType: TypeAlias = Hashable


@dataclass(frozen=True, slots=True)
class TypeDescriptor:
    key: Hashable
    name: str = field(default="", compare=False)

    def __str__(self) -> str:
        return self.name or repr(self.key)


def _type_name(logical_type) -> str:
    name = getattr(logical_type, "__qualname__", None)
    if isinstance(name, str) and not hasattr(logical_type, "__origin__"):
        return name
    name = getattr(logical_type, "__name__", None)
    if isinstance(name, str) and not hasattr(logical_type, "__origin__"):
        return name
    return repr(logical_type)


def descriptor_of(logical_type: LogicalType) -> TypeDescriptor:
    if isinstance(logical_type, TypeDescriptor):
        return logical_type
    try:
        hash(logical_type)
    except TypeError:
        raise TypeError(
            f"logical type {logical_type!r} is not hashable"
        ) from None
    return TypeDescriptor(key=logical_type, name=_type_name(logical_type))


def descriptors_of(logical_types: Iterable[LogicalType]) -> tuple[TypeDescriptor, ...]:
    return tuple(descriptor_of(t) for t in logical_types)


__all__ = [
    "LogicalType",
    "TypeDescriptor",
    "descriptor_of",
    "descriptors_of",
]
