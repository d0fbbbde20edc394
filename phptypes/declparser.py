"""
phptypes/declparser.py
══════════════════════

Parser for textual PHP type declarations (``?Foo``, ``int|string[]``,
``(A&B)|null``, ``\\Vendor\\Thing`` …) into :class:`~phptypes.types.Type`.

Combinators are right-nested from the leftmost unparenthesized ``|`` or
``&``: ``a|b&c`` reads as ``a|(b&c)`` while ``a&b|c`` reads as
``a&(b|c)``.  A leading ``?`` wraps the whole remainder as nullable and a
trailing ``[]`` wraps only the operand it follows.

Usage::

    from phptypes.declparser import parse_decl, from_decl

    parse_decl("?Foo")          # Foo|null
    from_decl("what is this")   # mixed, malformed input never escapes
"""

from __future__ import annotations

import functools
import logging
from typing import Callable, Dict, Union

from parsimonious.exceptions import ParseError, VisitationError
from parsimonious.grammar import Grammar
from parsimonious.nodes import NodeVisitor

from phptypes.errors import InvalidDeclaration
from phptypes.types import Type, TypeKind

logger = logging.getLogger(__name__)


# ═══════════════════════════════════════════════════════════════════
#  PART 1: GRAMMAR
# ═══════════════════════════════════════════════════════════════════

DECL_GRAMMAR = Grammar(r'''
    decl            = nullable / compound
    nullable        = "?" decl
    compound        = operand (combinator decl)?
    combinator      = "|" / "&"
    operand         = array / atom
    array           = atom array_suffix+
    array_suffix    = "[]"
    atom            = group / name
    group           = "(" decl ")"
    name            = ~r"\\?[a-zA-Z_\x7f-\uffff][a-zA-Z0-9_\x7f-\uffff]*(?:\\[a-zA-Z_\x7f-\uffff][a-zA-Z0-9_\x7f-\uffff]*)*"
''')


_KEYWORDS: Dict[str, Callable[[], Type]] = {
    "bool": Type.bool_type,
    "boolean": Type.bool_type,
    "true": Type.bool_type,
    "false": Type.bool_type,
    "int": Type.int_type,
    "integer": Type.int_type,
    "float": Type.float_type,
    "double": Type.float_type,
    "real": Type.float_type,
    "string": Type.string_type,
    "array": Type.array_type,
    "callable": Type.callable_type,
    "null": Type.null_type,
    "void": Type.null_type,
    "numeric": Type.numeric,
    "mixed": Type.mixed,
    "object": Type.object_type,
}


# ═══════════════════════════════════════════════════════════════════
#  PART 2: PARSE TREE → Type
# ═══════════════════════════════════════════════════════════════════

class DeclBuilder(NodeVisitor):
    """Folds a declaration parse tree into a ``Type``."""

    grammar = DECL_GRAMMAR
    unwrapped_exceptions = (InvalidDeclaration,)

    def generic_visit(self, node, visited_children):
        return visited_children or node

    def visit_decl(self, node, visited_children):
        return visited_children[0]

    def visit_nullable(self, node, visited_children):
        _, inner = visited_children
        return Type(TypeKind.UNION, (inner, Type.null_type())).simplify()

    def visit_compound(self, node, visited_children):
        left, tail = visited_children
        if not isinstance(tail, list):
            return left
        combinator, right = tail[0]
        kind = TypeKind.UNION if combinator == "|" else TypeKind.INTERSECTION
        return Type(kind, (left, right))

    def visit_combinator(self, node, visited_children):
        return node.text

    def visit_operand(self, node, visited_children):
        return visited_children[0]

    def visit_array(self, node, visited_children):
        element, suffixes = visited_children
        for _ in suffixes:
            element = Type.array_of(element)
        return element

    def visit_array_suffix(self, node, visited_children):
        return node.text

    def visit_atom(self, node, visited_children):
        return visited_children[0]

    def visit_group(self, node, visited_children):
        return visited_children[1]

    def visit_name(self, node, visited_children):
        name = node.text.lstrip("\\")
        factory = _KEYWORDS.get(name.lower())
        if factory is not None:
            return factory()
        return Type.object_of(name)


_BUILDER = DeclBuilder()


# ═══════════════════════════════════════════════════════════════════
#  PART 3: PUBLIC API
# ═══════════════════════════════════════════════════════════════════

@functools.lru_cache(maxsize=1024)
def _parse_text(text: str) -> Type:
    try:
        tree = DECL_GRAMMAR.parse(text)
    except ParseError as exc:
        raise InvalidDeclaration(text, f"unexpected input at column {exc.pos + 1}") from exc
    try:
        return _BUILDER.visit(tree).simplify()
    except VisitationError as exc:
        raise InvalidDeclaration(text, str(exc.original_class.__name__)) from exc


def parse_decl(decl: Union[str, Type]) -> Type:
    """Parse a declaration; raises :class:`InvalidDeclaration` when malformed."""
    if isinstance(decl, Type):
        return decl
    if not isinstance(decl, str):
        raise InvalidDeclaration(decl, "declaration is not a string")
    text = decl.strip()
    if not text:
        raise InvalidDeclaration(decl, "empty declaration")
    return _parse_text(text)


def from_decl(decl: Union[str, Type, None]) -> Type:
    """Like :func:`parse_decl` but malformed input degrades to ``mixed``."""
    try:
        return parse_decl(decl)
    except InvalidDeclaration as exc:
        logger.debug("Falling back to mixed: %s", exc.message)
        return Type.mixed()
