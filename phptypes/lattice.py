"""
phptypes/lattice.py
═══════════════════

Lattice view of :class:`~phptypes.types.Type` used by the reconstructor to
merge the answers of several producing operations.

Theory
──────
``(Type, ⊑, ⊥, ⊤, ⊔)`` with

- ``⊥ = unknown``     (nothing inferred)
- ``⊤ = mixed``       (any value)
- ``a ⊔ b = a.union_with(b)``
- ``a ⊑ b`` iff ``resolves(a, b)`` under the current hierarchy

``unknown`` is treated as the identity of ``⊔`` so an unresolved
contribution never pollutes a merge.
"""

from __future__ import annotations

import abc
from typing import Generic, Iterable, Optional, TypeVar

from phptypes.resolver import TypeResolver
from phptypes.types import Type

L = TypeVar("L")


class Lattice(abc.ABC, Generic[L]):
    """Abstract lattice ``(L, ⊑, ⊥, ⊤, ⊔)``."""

    @abc.abstractmethod
    def bottom(self) -> L:
        """Return the least element ⊥."""

    @abc.abstractmethod
    def top(self) -> L:
        """Return the greatest element ⊤."""

    @abc.abstractmethod
    def join(self, a: L, b: L) -> L:
        """Return the least upper bound ``a ⊔ b``."""

    @abc.abstractmethod
    def leq(self, a: L, b: L) -> bool:
        """Return ``True`` iff ``a ⊑ b``."""

    def join_all(self, values: Iterable[L]) -> L:
        result = self.bottom()
        for v in values:
            result = self.join(result, v)
        return result


class TypeLattice(Lattice[Type]):
    """The PHP type lattice over a hierarchy-aware resolver."""

    def __init__(self, resolver: Optional[TypeResolver] = None) -> None:
        self.resolver = resolver if resolver is not None else TypeResolver()

    def bottom(self) -> Type:
        return Type.unknown()

    def top(self) -> Type:
        return Type.mixed()

    def join(self, a: Type, b: Type) -> Type:
        if a.is_unknown():
            return b
        if b.is_unknown():
            return a
        return a.union_with(b)

    def leq(self, a: Type, b: Type) -> bool:
        if a.is_unknown():
            return True
        if b.is_unknown():
            return False
        return self.resolver.resolves(a, b)
