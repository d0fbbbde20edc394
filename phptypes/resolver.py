"""
phptypes/resolver.py
════════════════════

Hierarchy-aware subtype check.

``resolves(a, b)`` answers "is a value of type *a* acceptable where *b* is
expected?", consulting a :class:`~phptypes.hierarchy.HierarchyClosure` for
nominal object types.
"""

from __future__ import annotations

from typing import Optional

from phptypes.hierarchy import HierarchyClosure
from phptypes.types import Type, TypeKind


class TypeResolver:
    """Subtype oracle bound to one hierarchy closure."""

    def __init__(self, closure: Optional[HierarchyClosure] = None) -> None:
        self.closure = closure if closure is not None else HierarchyClosure()

    def resolves(self, a: Type, b: Type) -> bool:
        if a.equals(b):
            return True
        if b.kind == TypeKind.UNION:
            if a.kind == TypeKind.UNION:
                return all(self.resolves(sub, b) for sub in a.subtypes)
            return any(self.resolves(a, sub) for sub in b.subtypes)
        if a.kind == TypeKind.UNION:
            return all(self.resolves(sub, b) for sub in a.subtypes)
        if b.kind == TypeKind.INTERSECTION:
            return all(self.resolves(a, sub) for sub in b.subtypes)
        if a.kind == TypeKind.INTERSECTION:
            return any(self.resolves(sub, b) for sub in a.subtypes)
        if a.kind != b.kind:
            return False
        if a.kind == TypeKind.OBJECT:
            if b.user_type is None:
                return True
            if a.user_type is None:
                return False
            return self.closure.is_subtype(a.user_type, b.user_type)
        if a.kind == TypeKind.ARRAY:
            if b.element_type is None:
                return True
            if a.element_type is None:
                return False
            return self.resolves(a.element_type, b.element_type)
        return True

    def allows_null(self, t: Type) -> bool:
        return self.resolves(Type.null_type(), t)
