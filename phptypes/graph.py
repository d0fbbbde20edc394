"""
phptypes/graph.py
═════════════════

The program graph consumed by type reconstruction.

A front end (CFG builder) lowers PHP source into this model; the
reconstructor only reads it, except for attaching one final
:class:`~phptypes.types.Type` to each operand.

Design invariants
─────────────────
* An :class:`Operand` is a value-producing site.  ``operand.ops`` lists the
  operations that write it and ``operand.usages`` those that read it; both
  are maintained by :class:`Op` at construction time.
* Every :class:`Op` carries an :class:`OpKind` tag, its read operands as
  named slots (``left``, ``right``, ``expr``, ``var``, ``name``, ``class_``,
  ``ns_name``, ``default_var``, ``args``, ``values``, ``vars``) and an
  optional ``result`` operand.
* Declarations (classes, interfaces, traits, functions, methods,
  properties, constants) are ops too and live in :class:`Block` lists, so
  one traversal finds both declarations and dataflow.
* Operand identity is a process-wide increasing integer, so arenas can be
  keyed by ``operand.id``.

Module layout
─────────────
§1  Source location
§2  Operands
§3  Operations
§4  Assertions
§5  Declarations, functions, blocks, scripts
"""

from __future__ import annotations

import enum
import itertools
from dataclasses import dataclass
from typing import Any, Dict, Iterator, List, Optional, Sequence, Union

from phptypes.types import Type

# ════════════════════════════════════════════════════════════════════════
# §1  Source location
# ════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True)
class SourceLoc:
    """Position of an op in the analysed PHP file."""

    file: str = "<unknown>"
    line: int = 0

    def __str__(self) -> str:
        return f"{self.file}:{self.line}"


# ════════════════════════════════════════════════════════════════════════
# §2  Operands
# ════════════════════════════════════════════════════════════════════════

_operand_ids = itertools.count(1)


class Operand:
    """A value-producing site in the dataflow graph."""

    def __init__(self) -> None:
        self.id: int = next(_operand_ids)
        self.ops: List[Op] = []
        self.usages: List[Op] = []
        self.type: Type = Type.unknown()

    def __repr__(self) -> str:
        return f"{type(self).__name__}#{self.id}"


class Temporary(Operand):
    """An anonymous intermediate value."""

    def __init__(self, original: Optional[Operand] = None) -> None:
        super().__init__()
        self.original = original


class Variable(Operand):
    """A named local variable (one SSA version of it)."""

    def __init__(self, name: str) -> None:
        super().__init__()
        self.name = name

    def __repr__(self) -> str:
        return f"Variable(${self.name}#{self.id})"


class Literal(Operand):
    """A compile-time constant scalar."""

    def __init__(self, value: Any) -> None:
        super().__init__()
        self.value = value

    def __repr__(self) -> str:
        return f"Literal({self.value!r}#{self.id})"


class BoundScope(enum.Enum):
    OBJECT = "object"
    FUNCTION = "function"
    LOCAL = "local"
    GLOBAL = "global"


class BoundVariable(Variable):
    """A variable bound by the engine: ``$this``, globals, static locals.

    For ``OBJECT`` scope, ``extra`` holds a literal with the declared class
    name of ``$this``.
    """

    def __init__(
        self,
        name: str,
        scope: BoundScope = BoundScope.LOCAL,
        extra: Optional[Literal] = None,
        by_ref: bool = False,
    ) -> None:
        super().__init__(name)
        self.scope = scope
        self.extra = extra
        self.by_ref = by_ref


# ════════════════════════════════════════════════════════════════════════
# §3  Operations
# ════════════════════════════════════════════════════════════════════════


class OpKind(str, enum.Enum):
    """Operation tags understood by the reconstructor."""

    # comparisons and boolean logic
    INSTANCEOF = "instanceof"
    EQUAL = "equal"
    NOT_EQUAL = "not_equal"
    GREATER = "greater"
    GREATER_OR_EQUAL = "greater_or_equal"
    IDENTICAL = "identical"
    NOT_IDENTICAL = "not_identical"
    SMALLER = "smaller"
    SMALLER_OR_EQUAL = "smaller_or_equal"
    LOGICAL_AND = "logical_and"
    LOGICAL_OR = "logical_or"
    LOGICAL_XOR = "logical_xor"
    BOOLEAN_NOT = "boolean_not"
    CAST_BOOL = "cast_bool"
    EMPTY = "empty"
    ISSET = "isset"

    # bitwise
    BITWISE_AND = "bitwise_and"
    BITWISE_OR = "bitwise_or"
    BITWISE_XOR = "bitwise_xor"
    BITWISE_NOT = "bitwise_not"

    # arithmetic
    PLUS = "plus"
    MINUS = "minus"
    MUL = "mul"
    DIV = "div"
    MOD = "mod"
    SHIFT_LEFT = "shift_left"
    SHIFT_RIGHT = "shift_right"
    UNARY_MINUS = "unary_minus"
    UNARY_PLUS = "unary_plus"

    # strings and casts
    CONCAT = "concat"
    CONCAT_LIST = "concat_list"
    CAST_STRING = "cast_string"
    CAST_INT = "cast_int"
    CAST_DOUBLE = "cast_double"
    CAST_ARRAY = "cast_array"
    CAST_OBJECT = "cast_object"

    # values
    ARRAY = "array"
    ARRAY_DIM_FETCH = "array_dim_fetch"
    ASSIGN = "assign"
    ASSIGN_REF = "assign_ref"
    CLONE = "clone"
    CLOSURE = "closure"
    PRINT = "print"
    EXIT = "exit"

    # calls and construction
    FUNC_CALL = "func_call"
    NS_FUNC_CALL = "ns_func_call"
    METHOD_CALL = "method_call"
    STATIC_CALL = "static_call"
    NEW = "new"
    PARAM = "param"

    # members and constants
    PROPERTY_FETCH = "property_fetch"
    STATIC_PROPERTY_FETCH = "static_property_fetch"
    CONST_FETCH = "const_fetch"
    CLASS_CONST_FETCH = "class_const_fetch"
    STATIC_VAR = "static_var"

    # control flow
    ASSERTION = "assertion"
    PHI = "phi"
    ITERATOR_KEY = "iterator_key"
    ITERATOR_RESET = "iterator_reset"
    ITERATOR_VALID = "iterator_valid"
    ITERATOR_VALUE = "iterator_value"

    # dynamic targets
    EVAL = "eval"
    INCLUDE = "include"
    YIELD = "yield"

    # declarations
    CLASS = "class"
    INTERFACE = "interface"
    TRAIT = "trait"
    FUNCTION = "function"
    CLASS_METHOD = "class_method"
    PROPERTY = "property"
    CLASS_CONST = "class_const"
    CONST = "const"


OperandSlot = Union[Operand, Sequence[Operand], None]

OPERAND_SLOTS = (
    "left", "right", "expr", "var", "name", "class_", "ns_name",
    "default_var", "args", "values", "vars",
)


class Op:
    """One operation of the dataflow graph.

    ``operands`` are keyword arguments naming read slots; each value is an
    operand or a sequence of operands.  ``result`` (if any) is the operand
    this op writes.
    """

    left: Optional[Operand] = None
    right: Optional[Operand] = None
    expr: Optional[Operand] = None
    var: Optional[Operand] = None
    name: Optional[Operand] = None
    class_: Optional[Operand] = None
    ns_name: Optional[Operand] = None
    default_var: Optional[Operand] = None
    args: Sequence[Operand] = ()
    values: Sequence[Operand] = ()
    vars: Sequence[Operand] = ()

    def __init__(
        self,
        kind: Union[OpKind, str],
        *,
        result: Optional[Operand] = None,
        attributes: Optional[Dict[str, Any]] = None,
        loc: Optional[SourceLoc] = None,
        **operands: OperandSlot,
    ) -> None:
        self.kind = OpKind(kind)
        self.attributes: Dict[str, Any] = dict(attributes or {})
        self.loc = loc or SourceLoc()
        self._slots: List[str] = []
        for slot, value in operands.items():
            if slot not in OPERAND_SLOTS:
                raise TypeError(f"{type(self).__name__} got unknown operand slot {slot!r}")
            if isinstance(value, (list, tuple)):
                value = tuple(value)
            setattr(self, slot, value)
            self._slots.append(slot)
            for operand in _flatten(value):
                operand.usages.append(self)
        self.result = result
        if result is not None:
            result.ops.append(self)

    def operands(self) -> Iterator[Operand]:
        """Every operand this op reads, in slot order."""
        for slot in self._slots:
            yield from _flatten(getattr(self, slot))

    def written(self) -> Iterator[Operand]:
        if self.result is not None:
            yield self.result

    def doc_comment(self) -> Optional[str]:
        return self.attributes.get("doccomment")

    @property
    def location(self) -> str:
        return str(self.loc)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.kind.value}@{self.loc})"


def _flatten(value: OperandSlot) -> Iterator[Operand]:
    if value is None:
        return
    if isinstance(value, Operand):
        yield value
    else:
        for item in value:
            if item is not None:
                yield item


class Param(Op):
    """A function parameter; its ``result`` is the parameter variable."""

    def __init__(
        self,
        name: str,
        result: Operand,
        declared_type: Optional[str] = None,
        default_var: Optional[Operand] = None,
        by_ref: bool = False,
        variadic: bool = False,
        loc: Optional[SourceLoc] = None,
    ) -> None:
        slots = {"default_var": default_var} if default_var is not None else {}
        super().__init__(OpKind.PARAM, result=result, loc=loc, **slots)
        self.param_name = name
        self.declared_type = declared_type
        self.by_ref = by_ref
        self.variadic = variadic
        self.func: Optional[Func] = None

    def has_null_default(self) -> bool:
        """True when the default value is the literal ``null``."""
        default = self.default_var
        if default is None:
            return False
        if isinstance(default, Literal) and default.value is None:
            return True
        for producer in default.ops:
            name = producer.name
            if (
                producer.kind == OpKind.CONST_FETCH
                and isinstance(name, Literal)
                and isinstance(name.value, str)
                and name.value.lower() == "null"
            ):
                return True
        return False


class ClosureExpr(Op):
    """An anonymous function expression producing a ``Closure`` object."""

    def __init__(self, func: Func, result: Operand, loc: Optional[SourceLoc] = None) -> None:
        super().__init__(OpKind.CLOSURE, result=result, loc=loc)
        self.func = func


# ════════════════════════════════════════════════════════════════════════
# §4  Assertions
# ════════════════════════════════════════════════════════════════════════


class AssertionMode(enum.Enum):
    NONE = "none"
    UNION = "union"
    INTERSECTION = "intersection"


class Assertion:
    mode: AssertionMode = AssertionMode.NONE


class TypeAssertion(Assertion):
    """``value`` is a class-name literal / type operand, or nested assertions."""

    def __init__(
        self,
        value: Union[Operand, Sequence[TypeAssertion]],
        mode: AssertionMode = AssertionMode.NONE,
    ) -> None:
        if not isinstance(value, Operand):
            value = list(value)
            if mode == AssertionMode.NONE:
                raise ValueError("Nested type assertions need a union or intersection mode")
        self.value = value
        self.mode = mode


class NegatedAssertion(Assertion):
    """Negation of the first wrapped assertion."""

    def __init__(self, value: Sequence[Assertion]) -> None:
        self.value = list(value)
        if not self.value:
            raise ValueError("NegatedAssertion needs at least one assertion")


class AssertionOp(Op):
    """Narrowing of ``expr`` under ``assertion`` (``instanceof``, ``is_*``)."""

    def __init__(
        self,
        expr: Operand,
        assertion: Assertion,
        result: Operand,
        loc: Optional[SourceLoc] = None,
    ) -> None:
        super().__init__(OpKind.ASSERTION, result=result, loc=loc, expr=expr)
        self.assertion = assertion


# ════════════════════════════════════════════════════════════════════════
# §5  Declarations, functions, blocks, scripts
# ════════════════════════════════════════════════════════════════════════


class Block:
    """A basic block: an ordered list of ops."""

    def __init__(self, children: Optional[Sequence[Op]] = None) -> None:
        self.children: List[Op] = list(children or [])

    def append(self, op: Op) -> Op:
        self.children.append(op)
        return op

    def __iter__(self) -> Iterator[Op]:
        return iter(self.children)


class Func:
    """A function body: params, declared return type and blocks."""

    def __init__(
        self,
        name: str,
        params: Optional[Sequence[Param]] = None,
        return_type: Optional[str] = None,
        blocks: Optional[Sequence[Block]] = None,
        doc_comment: Optional[str] = None,
        class_name: Optional[str] = None,
        by_ref: bool = False,
    ) -> None:
        self.name = name
        self.params: List[Param] = list(params or [])
        self.return_type = return_type
        self.blocks: List[Block] = list(blocks or [])
        self.doc_comment = doc_comment
        self.class_name = class_name
        self.by_ref = by_ref
        for param in self.params:
            param.func = self

    def ops(self) -> Iterator[Op]:
        for block in self.blocks:
            yield from block.children

    def __repr__(self) -> str:
        owner = f"{self.class_name}::" if self.class_name else ""
        return f"Func({owner}{self.name})"


class FunctionStmt(Op):
    def __init__(self, func: Func, doc_comment: Optional[str] = None,
                 loc: Optional[SourceLoc] = None) -> None:
        super().__init__(OpKind.FUNCTION, loc=loc,
                         attributes={"doccomment": doc_comment or func.doc_comment})
        self.func = func


class ClassMethod(Op):
    def __init__(
        self,
        func: Func,
        static: bool = False,
        visibility: str = "public",
        abstract: bool = False,
        doc_comment: Optional[str] = None,
        loc: Optional[SourceLoc] = None,
    ) -> None:
        super().__init__(OpKind.CLASS_METHOD, loc=loc,
                         attributes={"doccomment": doc_comment or func.doc_comment})
        self.func = func
        self.static = static
        self.visibility = visibility
        self.abstract = abstract


class PropertyStmt(Op):
    """A declared property; ``type`` is filled by the property pass."""

    def __init__(
        self,
        name: str,
        declared_type: Optional[str] = None,
        default_var: Optional[Operand] = None,
        static: bool = False,
        visibility: str = "public",
        doc_comment: Optional[str] = None,
        loc: Optional[SourceLoc] = None,
    ) -> None:
        slots = {"default_var": default_var} if default_var is not None else {}
        super().__init__(OpKind.PROPERTY, loc=loc,
                         attributes={"doccomment": doc_comment}, **slots)
        self.prop_name = name
        self.declared_type = declared_type
        self.static = static
        self.visibility = visibility
        self.type: Optional[Type] = None


class ClassConstStmt(Op):
    """``const NAME = value;`` inside a class-like."""

    def __init__(self, name: str, value: Operand, loc: Optional[SourceLoc] = None) -> None:
        super().__init__(OpKind.CLASS_CONST, loc=loc, expr=value)
        self.const_name = name
        self.value = value


class ConstStmt(Op):
    """A global ``const NAME = value;`` / ``define()``."""

    def __init__(self, name: str, value: Operand, loc: Optional[SourceLoc] = None) -> None:
        super().__init__(OpKind.CONST, loc=loc, expr=value)
        self.const_name = name
        self.value = value


class ClassLikeStmt(Op):
    """Common shape of class, interface and trait declarations."""

    def __init__(
        self,
        kind: OpKind,
        name: str,
        stmts: Optional[Union[Block, Sequence[Op]]] = None,
        doc_comment: Optional[str] = None,
        loc: Optional[SourceLoc] = None,
    ) -> None:
        super().__init__(kind, loc=loc, attributes={"doccomment": doc_comment})
        self.class_name = name
        if stmts is None:
            stmts = Block()
        elif not isinstance(stmts, Block):
            stmts = Block(stmts)
        self.stmts: Block = stmts

    def parents(self) -> List[str]:
        """Names of every direct supertype."""
        return []


class ClassStmt(ClassLikeStmt):
    def __init__(
        self,
        name: str,
        stmts: Optional[Union[Block, Sequence[Op]]] = None,
        extends: Optional[str] = None,
        implements: Sequence[str] = (),
        uses: Sequence[str] = (),
        abstract: bool = False,
        final: bool = False,
        doc_comment: Optional[str] = None,
        loc: Optional[SourceLoc] = None,
    ) -> None:
        super().__init__(OpKind.CLASS, name, stmts, doc_comment, loc)
        self.extends = extends
        self.implements = list(implements)
        self.uses = list(uses)
        self.abstract = abstract
        self.final = final

    def parents(self) -> List[str]:
        direct = [self.extends] if self.extends else []
        return direct + self.implements + self.uses


class InterfaceStmt(ClassLikeStmt):
    def __init__(
        self,
        name: str,
        stmts: Optional[Union[Block, Sequence[Op]]] = None,
        extends: Sequence[str] = (),
        doc_comment: Optional[str] = None,
        loc: Optional[SourceLoc] = None,
    ) -> None:
        super().__init__(OpKind.INTERFACE, name, stmts, doc_comment, loc)
        self.extends = list(extends)

    def parents(self) -> List[str]:
        return list(self.extends)


class TraitStmt(ClassLikeStmt):
    def __init__(
        self,
        name: str,
        stmts: Optional[Union[Block, Sequence[Op]]] = None,
        uses: Sequence[str] = (),
        doc_comment: Optional[str] = None,
        loc: Optional[SourceLoc] = None,
    ) -> None:
        super().__init__(OpKind.TRAIT, name, stmts, doc_comment, loc)
        self.uses = list(uses)

    def parents(self) -> List[str]:
        return list(self.uses)


class Script:
    """One analysed file: a top-level pseudo-function plus declarations."""

    def __init__(self, file: str, main: Optional[Func] = None,
                 functions: Optional[Sequence[Func]] = None) -> None:
        self.file = file
        self.main = main or Func("{main}")
        self.functions: List[Func] = list(functions or [])
