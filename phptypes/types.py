"""
phptypes/types.py
═════════════════

The type lattice for reconstructed PHP values.

Theory
──────
A reconstructed type is a term of the algebra::

    τ ::= unknown                       (nothing inferred yet)
        | null | bool | int | float | string | callable
        | object                        (any object)
        | object(C)                     (nominal, case-insensitive C)
        | array | array(τ)              (untyped / homogeneous array)
        | τ₁ | … | τₙ      (n ≥ 2)      (union)
        | τ₁ & … & τₙ      (n ≥ 2)      (intersection)

``mixed`` is the union of every primitive and ``numeric`` is ``int|float``.

Equality is structural: nominal objects compare case-insensitively and
compound types compare as multisets of their subtypes, so order never
matters.  ``simplify`` flattens nested compounds of the same kind
(associativity) and is idempotent.

Canonical primitive instances are built exactly once, at import, into an
immutable registry (``PRIMITIVES``) and handed out by reference.  Every
factory that produces a plain primitive returns the shared instance, which
keeps the ``is`` fast path in :meth:`Type.equals` cheap.

Public API
──────────
    TypeKind            - discriminant enum
    Type                - the immutable type value
    PRIMITIVES          - registry of cached primitive instances
"""

from __future__ import annotations

import enum
from dataclasses import dataclass
from types import MappingProxyType
from typing import Iterable, List, Mapping, Optional, Tuple, Union

from phptypes.errors import StructuralTypeError, UnsupportedLiteral


# ═════════════════════════════════════════════════════════════════════════
#  PART 1: DISCRIMINANT
# ═════════════════════════════════════════════════════════════════════════

class TypeKind(enum.IntEnum):
    """Discriminant for the type term algebra."""
    UNKNOWN = -1
    NULL = 1
    BOOL = 2
    INT = 3
    FLOAT = 4
    STRING = 5
    OBJECT = 6
    ARRAY = 7
    CALLABLE = 8
    UNION = 10
    INTERSECTION = 11


# Rendering order doubles as the member order of ``mixed``.
_PRIMITIVE_NAMES: Mapping[TypeKind, str] = MappingProxyType({
    TypeKind.NULL: "null",
    TypeKind.BOOL: "bool",
    TypeKind.INT: "int",
    TypeKind.FLOAT: "float",
    TypeKind.STRING: "string",
    TypeKind.OBJECT: "object",
    TypeKind.ARRAY: "array",
    TypeKind.CALLABLE: "callable",
})

_COMPOUND_KINDS = frozenset({TypeKind.UNION, TypeKind.INTERSECTION})
_SUBTYPED_KINDS = frozenset({TypeKind.ARRAY, TypeKind.UNION, TypeKind.INTERSECTION})


def _fold_name(name: Optional[str]) -> str:
    return name.lower() if name else ""


# ═════════════════════════════════════════════════════════════════════════
#  PART 2: TYPE VALUE
# ═════════════════════════════════════════════════════════════════════════

@dataclass(frozen=True, eq=False)
class Type:
    """
    An immutable node of the type algebra.

    - OBJECT:        ``user_type`` = nominal class name, or ``None`` for any object
    - ARRAY:         ``subtypes`` = ``()`` (untyped) or ``(element,)``
    - UNION / INTERSECTION: ``subtypes`` = two or more members, in order
    """

    kind: TypeKind
    subtypes: Tuple["Type", ...] = ()
    user_type: Optional[str] = None

    def __post_init__(self) -> None:
        subtypes = tuple(self.subtypes)
        for sub in subtypes:
            if not isinstance(sub, Type):
                raise StructuralTypeError("Subtypes must be Type instances")
        if self.kind == TypeKind.OBJECT:
            if self.user_type is not None and not isinstance(self.user_type, str):
                raise StructuralTypeError("Expected user type to be None or str")
        elif self.user_type is not None:
            raise StructuralTypeError("Only objects can have a user type")
        if self.kind in _COMPOUND_KINDS:
            if len(subtypes) < 2:
                raise StructuralTypeError(
                    "Compound types must combine at least 2 subtypes"
                )
        elif self.kind == TypeKind.ARRAY:
            if len(subtypes) > 1:
                raise StructuralTypeError("Array type must have at most 1 subtype")
        elif subtypes:
            raise StructuralTypeError(f"Type {self.kind.name} cannot have subtypes")
        object.__setattr__(self, "kind", TypeKind(self.kind))
        object.__setattr__(self, "subtypes", subtypes)

    # ── Factory methods ──────────────────────────────────────────────

    @classmethod
    def unknown(cls) -> Type:
        return PRIMITIVES[TypeKind.UNKNOWN]

    @classmethod
    def null_type(cls) -> Type:
        return PRIMITIVES[TypeKind.NULL]

    @classmethod
    def bool_type(cls) -> Type:
        return PRIMITIVES[TypeKind.BOOL]

    @classmethod
    def int_type(cls) -> Type:
        return PRIMITIVES[TypeKind.INT]

    @classmethod
    def float_type(cls) -> Type:
        return PRIMITIVES[TypeKind.FLOAT]

    @classmethod
    def string_type(cls) -> Type:
        return PRIMITIVES[TypeKind.STRING]

    @classmethod
    def object_type(cls) -> Type:
        return PRIMITIVES[TypeKind.OBJECT]

    @classmethod
    def array_type(cls) -> Type:
        return PRIMITIVES[TypeKind.ARRAY]

    @classmethod
    def callable_type(cls) -> Type:
        return PRIMITIVES[TypeKind.CALLABLE]

    @classmethod
    def numeric(cls) -> Type:
        return PRIMITIVES["numeric"]

    @classmethod
    def mixed(cls) -> Type:
        return PRIMITIVES["mixed"]

    @classmethod
    def primitive(cls, kind: TypeKind) -> Type:
        """Return the shared instance for a subtype-free kind."""
        if kind in _COMPOUND_KINDS:
            raise StructuralTypeError(f"{TypeKind(kind).name} is not a primitive")
        return PRIMITIVES[TypeKind(kind)]

    @classmethod
    def object_of(cls, name: Optional[str]) -> Type:
        if name is None:
            return cls.object_type()
        return cls(TypeKind.OBJECT, (), name)

    @classmethod
    def array_of(cls, element: Optional[Type] = None) -> Type:
        if element is None:
            return cls.array_type()
        return cls(TypeKind.ARRAY, (element,))

    @classmethod
    def from_value(cls, value: object) -> Type:
        """Map a literal scalar to its primitive type."""
        # bool first: it is a subclass of int
        if isinstance(value, bool):
            return cls.bool_type()
        if isinstance(value, int):
            return cls.int_type()
        if isinstance(value, float):
            return cls.float_type()
        if isinstance(value, str):
            return cls.string_type()
        if value is None:
            return cls.null_type()
        raise UnsupportedLiteral(value)

    @classmethod
    def parse_decl(cls, decl: Union[str, Type]) -> Type:
        """Parse declaration text; raises ``InvalidDeclaration``."""
        from phptypes.declparser import parse_decl
        return parse_decl(decl)

    @classmethod
    def from_decl(cls, decl: Union[str, Type, None]) -> Type:
        """Parse declaration text, falling back to ``mixed`` when malformed."""
        from phptypes.declparser import from_decl
        return from_decl(decl)

    # ── Predicates ───────────────────────────────────────────────────

    def is_compound(self) -> bool:
        return self.kind in _COMPOUND_KINDS

    def has_subtypes(self) -> bool:
        return self.kind in _SUBTYPED_KINDS

    def is_unknown(self) -> bool:
        return self.kind == TypeKind.UNKNOWN

    def allows_null(self) -> bool:
        if self.kind == TypeKind.NULL:
            return True
        if self.kind == TypeKind.UNION:
            return any(sub.allows_null() for sub in self.subtypes)
        if self.kind == TypeKind.INTERSECTION:
            return all(sub.allows_null() for sub in self.subtypes)
        return False

    @property
    def element_type(self) -> Optional[Type]:
        if self.kind == TypeKind.ARRAY and self.subtypes:
            return self.subtypes[0]
        return None

    # ── Algebra ──────────────────────────────────────────────────────

    def simplify(self) -> Type:
        """Flatten nested compounds of the same kind.

        Returns ``self`` when nothing changes, so cached instances survive.
        """
        if self.kind == TypeKind.ARRAY:
            if not self.subtypes:
                return self
            element = self.subtypes[0].simplify()
            if element is self.subtypes[0]:
                return self
            return Type(TypeKind.ARRAY, (element,))
        if self.kind not in _COMPOUND_KINDS:
            return self
        flattened: List[Type] = []
        changed = False
        for sub in self.subtypes:
            simple = sub.simplify()
            if simple.kind == self.kind:
                flattened.extend(simple.subtypes)
                changed = True
            else:
                flattened.append(simple)
                changed = changed or simple is not sub
        if not changed:
            return self
        return Type(self.kind, tuple(flattened))

    def equals(self, other: Type) -> bool:
        if other is self:
            return True
        if not isinstance(other, Type) or other.kind != self.kind:
            return False
        if self.kind == TypeKind.OBJECT:
            return _fold_name(self.user_type) == _fold_name(other.user_type)
        if self.kind in _SUBTYPED_KINDS:
            if len(self.subtypes) != len(other.subtypes):
                return False
            remaining = list(other.subtypes)
            for mine in self.subtypes:
                for index, theirs in enumerate(remaining):
                    if mine.equals(theirs):
                        del remaining[index]
                        break
                else:
                    return False
            return not remaining
        return True

    def union_with(self, other: Type) -> Type:
        if self.equals(other):
            return self
        mine = self.subtypes if self.kind == TypeKind.UNION else (self,)
        theirs = other.subtypes if other.kind == TypeKind.UNION else (other,)
        members = Type.unique(mine + theirs)
        if len(members) == 1:
            return members[0]
        return Type(TypeKind.UNION, tuple(members))

    def intersection_with(self, other: Type) -> Type:
        if self.equals(other):
            return self
        mine = self.subtypes if self.kind == TypeKind.INTERSECTION else (self,)
        theirs = other.subtypes if other.kind == TypeKind.INTERSECTION else (other,)
        members = Type.unique(mine + theirs)
        if len(members) == 1:
            return members[0]
        return Type(TypeKind.INTERSECTION, tuple(members))

    def remove_type(self, to_remove: Type) -> Type:
        """Drop every member equal to *to_remove* from a union.

        Nothing left yields ``null``; a single survivor is returned
        unwrapped; non-unions are returned unchanged.
        """
        if self.equals(to_remove):
            return Type.null_type()
        if self.kind != TypeKind.UNION:
            return self
        kept = [sub for sub in self.subtypes if not sub.equals(to_remove)]
        if not kept:
            return Type.null_type()
        if len(kept) == 1:
            return kept[0]
        if len(kept) == len(self.subtypes):
            return self
        return Type(TypeKind.UNION, tuple(kept))

    # ── Sequence helpers ─────────────────────────────────────────────

    @staticmethod
    def unique(types: Iterable[Type]) -> List[Type]:
        """Deduplicate structurally-equal types, keeping first-seen order."""
        result: List[Type] = []
        for candidate in types:
            if not any(candidate.equals(seen) for seen in result):
                result.append(candidate)
        return result

    @staticmethod
    def union_of(types: Iterable[Type]) -> Optional[Type]:
        result: Optional[Type] = None
        for t in types:
            result = t if result is None else result.union_with(t)
        return result

    @staticmethod
    def intersection_of(types: Iterable[Type]) -> Optional[Type]:
        result: Optional[Type] = None
        for t in types:
            result = t if result is None else result.intersection_with(t)
        return result

    # ── Rendering ────────────────────────────────────────────────────

    def render(self) -> str:
        if self.kind == TypeKind.UNKNOWN:
            return "unknown"
        if self.kind in _PRIMITIVE_NAMES:
            if self.kind == TypeKind.OBJECT and self.user_type is not None:
                return self.user_type
            if self.kind == TypeKind.ARRAY and self.subtypes:
                return _render_member(self.subtypes[0]) + "[]"
            return _PRIMITIVE_NAMES[self.kind]
        glue = "|" if self.kind == TypeKind.UNION else "&"
        return glue.join(_render_member(sub) for sub in self.subtypes)

    def __str__(self) -> str:
        return self.render()

    def __repr__(self) -> str:
        return f"Type({self.render()!r})"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Type):
            return NotImplemented
        return self.equals(other)

    def __hash__(self) -> int:
        if self.kind == TypeKind.OBJECT:
            return hash((self.kind, _fold_name(self.user_type)))
        if self.subtypes:
            return hash((self.kind, frozenset(hash(sub) for sub in self.subtypes)))
        return hash(self.kind)


def _render_member(sub: Type) -> str:
    text = sub.render()
    return f"({text})" if len(sub.subtypes) >= 2 else text


# ═════════════════════════════════════════════════════════════════════════
#  PART 3: CANONICAL PRIMITIVES
# ═════════════════════════════════════════════════════════════════════════

class _PrimitiveRegistry:
    """Read-only table of the shared primitive instances."""

    __slots__ = ("_table",)

    def __init__(self) -> None:
        table = {TypeKind.UNKNOWN: Type(TypeKind.UNKNOWN)}
        for kind in _PRIMITIVE_NAMES:
            table[kind] = Type(kind)
        table["numeric"] = Type(
            TypeKind.UNION, (table[TypeKind.INT], table[TypeKind.FLOAT])
        )
        table["mixed"] = Type(
            TypeKind.UNION, tuple(table[kind] for kind in _PRIMITIVE_NAMES)
        )
        self._table = MappingProxyType(table)

    def __getitem__(self, key: Union[TypeKind, str]) -> Type:
        return self._table[key]

    def __contains__(self, key: object) -> bool:
        return key in self._table


PRIMITIVES = _PrimitiveRegistry()
