"""
phptypes/declarations.py
════════════════════════

Declaration Index: class-likes, functions and constants grouped by name.

Every table maps a name to an ordered *list* of definitions, because
conditional declaration can define the same name more than once and
every definition has to be considered.  Class-like, member and function
names are case-insensitive (lowercased keys); global constant names are
case-sensitive.
"""

from __future__ import annotations

import logging
from typing import Dict, Iterable, List, Sequence

from phptypes.graph import (
    ClassConstStmt,
    ClassLikeStmt,
    ClassMethod,
    ClassStmt,
    ConstStmt,
    FunctionStmt,
    InterfaceStmt,
    PropertyStmt,
    TraitStmt,
)

logger = logging.getLogger(__name__)


class MemberTable:
    """Methods, properties and class constants of one class-like."""

    __slots__ = ("methods", "properties", "constants")

    def __init__(self) -> None:
        self.methods: Dict[str, List[ClassMethod]] = {}
        self.properties: Dict[str, List[PropertyStmt]] = {}
        self.constants: Dict[str, List[ClassConstStmt]] = {}


class DeclarationIndex:
    """Name-keyed lookups over one analysis run's declarations."""

    def __init__(
        self,
        classes: Sequence[ClassStmt] = (),
        interfaces: Sequence[InterfaceStmt] = (),
        traits: Sequence[TraitStmt] = (),
        functions: Sequence[FunctionStmt] = (),
        constants: Sequence[ConstStmt] = (),
    ) -> None:
        self.classes = list(classes)
        self.interfaces = list(interfaces)
        self.traits = list(traits)
        self.functions = list(functions)
        self.constants = list(constants)

        self.class_lookup: Dict[str, List[ClassLikeStmt]] = {}
        self.function_lookup: Dict[str, List[FunctionStmt]] = {}
        self.constant_lookup: Dict[str, List[ConstStmt]] = {}
        self._members: Dict[int, MemberTable] = {}

        self._index_class_likes(self.interfaces)
        self._index_class_likes(self.classes)
        self._index_class_likes(self.traits)
        for function in self.functions:
            self.function_lookup.setdefault(function.func.name.lower(), []).append(function)
        for constant in self.constants:
            self.constant_lookup.setdefault(constant.const_name, []).append(constant)

        logger.info(
            "Indexed %d classes, %d interfaces, %d traits, %d functions, %d constants",
            len(self.classes), len(self.interfaces), len(self.traits),
            len(self.functions), len(self.constants),
        )

    def _index_class_likes(self, class_likes: Iterable[ClassLikeStmt]) -> None:
        for class_like in class_likes:
            table = MemberTable()
            for stmt in class_like.stmts.children:
                if isinstance(stmt, ClassMethod):
                    table.methods.setdefault(stmt.func.name.lower(), []).append(stmt)
                elif isinstance(stmt, PropertyStmt):
                    table.properties.setdefault(stmt.prop_name.lower(), []).append(stmt)
                elif isinstance(stmt, ClassConstStmt):
                    table.constants.setdefault(stmt.const_name.lower(), []).append(stmt)
            self.class_lookup.setdefault(class_like.class_name.lower(), []).append(class_like)
            self._members[id(class_like)] = table

    # ── Lookups ──────────────────────────────────────────────────────

    def lookup_class(self, name: str) -> List[ClassLikeStmt]:
        return self.class_lookup.get(name.lower(), [])

    def lookup_function(self, name: str) -> List[FunctionStmt]:
        return self.function_lookup.get(name.lower(), [])

    def lookup_constant(self, name: str) -> List[ConstStmt]:
        return self.constant_lookup.get(name, [])

    def members_of(self, class_like: ClassLikeStmt) -> MemberTable:
        return self._members[id(class_like)]

    def methods_of(self, class_like: ClassLikeStmt, name: str) -> List[ClassMethod]:
        return self.members_of(class_like).methods.get(name.lower(), [])

    def properties_of(self, class_like: ClassLikeStmt, name: str) -> List[PropertyStmt]:
        return self.members_of(class_like).properties.get(name.lower(), [])

    def constants_of(self, class_like: ClassLikeStmt, name: str) -> List[ClassConstStmt]:
        return self.members_of(class_like).constants.get(name.lower(), [])

    def all_properties(self) -> Iterable[PropertyStmt]:
        for table in self._members.values():
            for defs in table.properties.values():
                yield from defs

    def class_likes(self) -> Iterable[ClassLikeStmt]:
        yield from self.interfaces
        yield from self.classes
        yield from self.traits
