"""
phptypes/reconstructor.py
═════════════════════════

Fixed-point type reconstruction over a :class:`~phptypes.state.State`.

Theory
──────
Every operand is tracked in a :class:`ResolutionArena` keyed by operand id
with one of three statuses:

``UNRESOLVED``
    nothing known yet (reads as ``unknown``);
``PROVISIONAL(τ)``
    best guess so far, recorded by phi merges whose incoming values are
    not all known and by any rule that read a provisional input; the
    operand stays on the worklist;
``RESOLVED(τ)``
    final.

Initially resolved: operands that already carry a non-unknown type,
``$this``-like bound variables with a declared class, and literals.

Each round tries every pending operand.  For each producing op a transfer
rule returns a list of types, or ``None`` for "not yet".  The operand
resolves only when *all* producers answer, to the lattice join of their
answers.  Rounds repeat until nothing is pending or a round makes no
progress (no new resolution and no provisional change).  At that point
the provisional guesses are a stable fixed point and are promoted to
resolved.  Operands still unresolved finalize as ``unknown``; that is
valid output, not an error.

Transfer rules are registered per :class:`~phptypes.graph.OpKind` with the
``@transfer`` decorator.  An op kind without a rule raises
:class:`~phptypes.errors.UnhandledOperation`.

Member lookups (methods, properties, class constants) expand the receiver
class through every descendant in the hierarchy closure, so a call
through a supertype accounts for every override.  Within one class,
inherited members are found by walking ``use``d traits and then the
direct ``extends`` chain.

Usage::

    from phptypes import State, TypeReconstructor

    state = State(scripts)
    result = TypeReconstructor().reconstruct(state)
    result.type_of(some_operand)
"""

from __future__ import annotations

import enum
import logging
import time
from dataclasses import dataclass, field
from typing import Callable, Dict, Iterable, List, Optional, Set

from phptypes.config import ReconstructorConfig
from phptypes.declparser import from_decl
from phptypes.doccomment import extract_type_from_comment
from phptypes.errors import PhpTypesError, ReconstructionError, UnhandledOperation
from phptypes.graph import (
    AssertionMode,
    AssertionOp,
    BoundScope,
    BoundVariable,
    ClassMethod,
    ClassStmt,
    InterfaceStmt,
    Literal,
    NegatedAssertion,
    Op,
    OpKind,
    Operand,
    Param,
    PropertyStmt,
    TypeAssertion,
)
from phptypes.lattice import TypeLattice
from phptypes.state import State
from phptypes.types import Type, TypeKind

logger = logging.getLogger(__name__)

TypeList = Optional[List[Type]]


# ═════════════════════════════════════════════════════════════════════════
#  PART 1: RESOLUTION ARENA
# ═════════════════════════════════════════════════════════════════════════

class ResolutionStatus(enum.Enum):
    UNRESOLVED = "unresolved"
    PROVISIONAL = "provisional"
    RESOLVED = "resolved"


@dataclass
class Resolution:
    status: ResolutionStatus = ResolutionStatus.UNRESOLVED
    type: Type = field(default_factory=Type.unknown)


class ResolutionArena:
    """Per-operand resolution status, keyed by ``operand.id``."""

    def __init__(self) -> None:
        self._entries: Dict[int, Resolution] = {}
        self._operands: Dict[int, Operand] = {}
        self._provisional_changes = 0

    def add(self, operand: Operand) -> None:
        self._operands.setdefault(operand.id, operand)
        self._entries.setdefault(operand.id, Resolution())

    def resolve(self, operand: Operand, t: Type) -> None:
        self.add(operand)
        self._entries[operand.id] = Resolution(ResolutionStatus.RESOLVED, t)

    def provisional(self, operand: Operand, t: Type) -> None:
        entry = self._entries.get(operand.id)
        if entry is not None and entry.status == ResolutionStatus.RESOLVED:
            return
        if entry is None or entry.status == ResolutionStatus.UNRESOLVED or not entry.type.equals(t):
            self._provisional_changes += 1
        self.add(operand)
        self._entries[operand.id] = Resolution(ResolutionStatus.PROVISIONAL, t)

    def status(self, operand: Operand) -> ResolutionStatus:
        entry = self._entries.get(operand.id)
        return entry.status if entry is not None else ResolutionStatus.UNRESOLVED

    def resolved(self, operand: Operand) -> Optional[Type]:
        entry = self._entries.get(operand.id)
        if entry is None or entry.status != ResolutionStatus.RESOLVED:
            return None
        return entry.type

    def known(self, operand: Optional[Operand]) -> Optional[Type]:
        """Resolved or provisional type, else ``None``."""
        if operand is None:
            return None
        entry = self._entries.get(operand.id)
        if entry is None or entry.status == ResolutionStatus.UNRESOLVED:
            return None
        return entry.type

    def pending(self) -> List[Operand]:
        return [
            self._operands[key]
            for key, entry in self._entries.items()
            if entry.status != ResolutionStatus.RESOLVED
        ]

    def take_provisional_changes(self) -> int:
        changes, self._provisional_changes = self._provisional_changes, 0
        return changes

    def promote_provisional(self) -> int:
        """Make every provisional guess final; returns how many were promoted."""
        promoted = 0
        for key, entry in self._entries.items():
            if entry.status == ResolutionStatus.PROVISIONAL:
                self._entries[key] = Resolution(ResolutionStatus.RESOLVED, entry.type)
                promoted += 1
        return promoted

    def final(self, operand: Operand) -> Type:
        return self.resolved(operand) or Type.unknown()

    def __len__(self) -> int:
        return len(self._entries)


@dataclass
class ReconstructionResult:
    """Outcome of one reconstruction run.

    Attributes
    ----------
    types : dict
        Operand → final Type (``unknown`` for operands that never resolved).
    rounds : int
        Number of fixed-point rounds performed.
    converged : bool
        ``False`` only when ``max_rounds`` cut the loop short.
    """
    types: Dict[Operand, Type] = field(default_factory=dict)
    rounds: int = 0
    resolved: int = 0
    unresolved: int = 0
    converged: bool = True
    elapsed_seconds: float = 0.0

    def type_of(self, operand: Operand) -> Type:
        return self.types.get(operand, Type.unknown())

    def unknown_operands(self) -> List[Operand]:
        return [op for op, t in self.types.items() if t.is_unknown()]


# ═════════════════════════════════════════════════════════════════════════
#  PART 2: RULE REGISTRATION
# ═════════════════════════════════════════════════════════════════════════

def transfer(*kinds: OpKind) -> Callable:
    """Register a method as the transfer rule for *kinds*.

    The method is called as ``rule(self, operand, op)`` and returns a list of
    types, or ``None`` while its inputs are not known.
    """
    def decorator(method: Callable) -> Callable:
        method._transfer_kinds = kinds
        return method
    return decorator


_BOOL_RESULT = (
    OpKind.INSTANCEOF, OpKind.EQUAL, OpKind.NOT_EQUAL, OpKind.GREATER,
    OpKind.GREATER_OR_EQUAL, OpKind.IDENTICAL, OpKind.NOT_IDENTICAL,
    OpKind.SMALLER, OpKind.SMALLER_OR_EQUAL, OpKind.LOGICAL_AND,
    OpKind.LOGICAL_OR, OpKind.LOGICAL_XOR, OpKind.BOOLEAN_NOT,
    OpKind.CAST_BOOL, OpKind.EMPTY, OpKind.ISSET, OpKind.ITERATOR_VALID,
)


# ═════════════════════════════════════════════════════════════════════════
#  PART 3: RECONSTRUCTOR
# ═════════════════════════════════════════════════════════════════════════

class TypeReconstructor:
    """Monotone fixed-point solver attaching a Type to every operand."""

    def __init__(self, config: Optional[ReconstructorConfig] = None) -> None:
        self.config = config or ReconstructorConfig()
        self._rules: Dict[OpKind, Callable[[Operand, Op], TypeList]] = {}
        for attr in dir(type(self)):
            method = getattr(type(self), attr)
            for kind in getattr(method, "_transfer_kinds", ()):
                self._rules[kind] = getattr(self, attr)
        self.state: Optional[State] = None
        self.arena = ResolutionArena()
        self.lattice = TypeLattice()
        self._read_provisional = False

    def handles(self, kind: OpKind) -> bool:
        return kind in self._rules

    # ── Driver ───────────────────────────────────────────────────────

    def reconstruct(self, state: State) -> ReconstructionResult:
        started = time.perf_counter()
        self.state = state
        self.arena = ResolutionArena()
        self.lattice = TypeLattice(state.resolver)

        self._resolve_properties()
        self._seed(state.variables)

        rounds = 0
        converged = True
        while self.arena.pending():
            if rounds >= self.config.max_rounds:
                logger.warning(
                    "Stopped after %d rounds with %d operands pending",
                    rounds, len(self.arena.pending()),
                )
                converged = False
                break
            rounds += 1
            newly = 0
            for operand in self.arena.pending():
                t = self._resolve_operand(operand)
                if t is not None:
                    self.arena.resolve(operand, t)
                    newly += 1
            changes = self.arena.take_provisional_changes()
            logger.debug(
                "Round %d: %d resolved, %d provisional updates, %d pending",
                rounds, newly, changes, len(self.arena.pending()),
            )
            if not newly and not changes:
                promoted = self.arena.promote_provisional()
                if promoted:
                    logger.debug("Round %d: promoted %d provisional operands", rounds, promoted)
                break

        result = ReconstructionResult(rounds=rounds, converged=converged)
        for operand in state.variables:
            final = self.arena.final(operand)
            operand.type = final
            result.types[operand] = final
            if final.is_unknown():
                result.unresolved += 1
            else:
                result.resolved += 1
        result.elapsed_seconds = time.perf_counter() - started
        logger.info(
            "Reconstructed %d operands in %d rounds (%d unknown)",
            len(result.types), rounds, result.unresolved,
        )
        return result

    def _seed(self, operands: Iterable[Operand]) -> None:
        for operand in operands:
            if not operand.type.is_unknown():
                self.arena.resolve(operand, operand.type)
            elif (
                isinstance(operand, BoundVariable)
                and operand.scope == BoundScope.OBJECT
                and operand.extra is not None
            ):
                self.arena.resolve(operand, from_decl(operand.extra.value))
            elif isinstance(operand, Literal):
                self.arena.resolve(operand, Type.from_value(operand.value))
            else:
                self.arena.add(operand)

    def _resolve_properties(self) -> None:
        for prop in self.state.index.all_properties():
            prop.type = self._property_decl_type(prop)

    def _property_decl_type(self, prop: PropertyStmt) -> Optional[Type]:
        declared = from_decl(prop.declared_type) if prop.declared_type else None
        if not self.config.property_doc_types:
            return declared
        doc = extract_type_from_comment("var", prop.doc_comment())
        if declared is None:
            return doc
        if not doc.equals(Type.mixed()) and self.state.resolver.resolves(doc, declared):
            return doc
        return declared

    def _resolve_operand(self, operand: Operand) -> Optional[Type]:
        self._read_provisional = False
        types: List[Type] = []
        for op in operand.ops:
            answer = self._apply(operand, op)
            if not answer:
                return None
            types.extend(answer)
        if not types:
            return None
        joined = self.lattice.join_all(types)
        if self._read_provisional:
            self.arena.provisional(operand, joined)
            return None
        return joined

    def _apply(self, operand: Operand, op: Op) -> TypeList:
        rule = self._rules.get(op.kind)
        if rule is None:
            raise UnhandledOperation(op.kind.value, op.location)
        try:
            return rule(operand, op)
        except PhpTypesError:
            raise
        except Exception as exc:
            raise ReconstructionError(op.kind.value, op.location, exc) from exc

    def _known(self, operand: Optional[Operand]) -> Optional[Type]:
        if operand is not None and self.arena.status(operand) == ResolutionStatus.PROVISIONAL:
            self._read_provisional = True
        return self.arena.known(operand)

    # ── Scalar rules ─────────────────────────────────────────────────

    @transfer(*_BOOL_RESULT)
    def _bool_result(self, operand: Operand, op: Op) -> TypeList:
        return [Type.bool_type()]

    @transfer(OpKind.BITWISE_AND, OpKind.BITWISE_OR, OpKind.BITWISE_XOR)
    def _bitwise(self, operand: Operand, op: Op) -> TypeList:
        left, right = self._known(op.left), self._known(op.right)
        if left is None or right is None:
            return None
        if left.kind == TypeKind.STRING and right.kind == TypeKind.STRING:
            return [Type.string_type()]
        return [Type.int_type()]

    @transfer(OpKind.BITWISE_NOT)
    def _bitwise_not(self, operand: Operand, op: Op) -> TypeList:
        expr = self._known(op.expr)
        if expr is None:
            return None
        if expr.kind == TypeKind.STRING:
            return [Type.string_type()]
        return [Type.int_type()]

    @transfer(OpKind.PLUS, OpKind.MINUS, OpKind.MUL, OpKind.DIV)
    def _arithmetic(self, operand: Operand, op: Op) -> TypeList:
        left, right = self._known(op.left), self._known(op.right)
        if left is None or right is None:
            return None
        kinds = (left.kind, right.kind)
        if kinds == (TypeKind.INT, TypeKind.INT):
            return [Type.int_type()]
        if set(kinds) <= {TypeKind.INT, TypeKind.FLOAT}:
            return [Type.float_type()]
        if kinds == (TypeKind.ARRAY, TypeKind.ARRAY):
            element = Type.union_of(left.subtypes + right.subtypes)
            return [Type.array_of(element)]
        return [Type.mixed()]

    @transfer(OpKind.CONCAT, OpKind.CONCAT_LIST, OpKind.CAST_STRING)
    def _string_result(self, operand: Operand, op: Op) -> TypeList:
        return [Type.string_type()]

    @transfer(OpKind.MOD, OpKind.SHIFT_LEFT, OpKind.SHIFT_RIGHT, OpKind.CAST_INT, OpKind.PRINT)
    def _int_result(self, operand: Operand, op: Op) -> TypeList:
        return [Type.int_type()]

    @transfer(OpKind.CAST_DOUBLE)
    def _float_result(self, operand: Operand, op: Op) -> TypeList:
        return [Type.float_type()]

    @transfer(OpKind.UNARY_MINUS, OpKind.UNARY_PLUS)
    def _unary_sign(self, operand: Operand, op: Op) -> TypeList:
        expr = self._known(op.expr)
        if expr is None:
            return None
        if expr.kind in (TypeKind.INT, TypeKind.FLOAT):
            return [expr]
        return [Type.numeric()]

    @transfer(OpKind.EXIT, OpKind.ITERATOR_RESET)
    def _null_result(self, operand: Operand, op: Op) -> TypeList:
        return [Type.null_type()]

    @transfer(OpKind.EVAL, OpKind.INCLUDE, OpKind.YIELD, OpKind.ITERATOR_KEY)
    def _never(self, operand: Operand, op: Op) -> TypeList:
        return None

    @transfer(OpKind.ITERATOR_VALUE)
    def _iterator_value(self, operand: Operand, op: Op) -> TypeList:
        iterable = self._known(op.var)
        if iterable is None or iterable.element_type is None:
            return None
        return [iterable.element_type]

    # ── Value rules ──────────────────────────────────────────────────

    @transfer(OpKind.ARRAY)
    def _array(self, operand: Operand, op: Op) -> TypeList:
        types = []
        for value in op.values:
            t = self._known(value)
            if t is None:
                return None
            types.append(t)
        return [Type.array_of(Type.union_of(types))]

    @transfer(OpKind.CAST_ARRAY)
    def _cast_array(self, operand: Operand, op: Op) -> TypeList:
        return [Type.array_type()]

    @transfer(OpKind.ARRAY_DIM_FETCH)
    def _array_dim_fetch(self, operand: Operand, op: Op) -> TypeList:
        container = self._known(op.var)
        if container is None:
            return None
        if container.element_type is not None:
            return [container.element_type]
        if container.kind == TypeKind.STRING:
            return [container]
        return [Type.mixed()]

    @transfer(OpKind.ASSIGN, OpKind.ASSIGN_REF, OpKind.CLONE)
    def _copy(self, operand: Operand, op: Op) -> TypeList:
        source = self._known(op.expr)
        return [source] if source is not None else None

    @transfer(OpKind.CAST_OBJECT)
    def _cast_object(self, operand: Operand, op: Op) -> TypeList:
        source = self._known(op.expr)
        if source is None:
            return None
        if self.state.resolver.resolves(source, Type.object_type()):
            return [source]
        return [Type.object_of("stdClass")]

    @transfer(OpKind.CLOSURE)
    def _closure(self, operand: Operand, op: Op) -> TypeList:
        return [Type.object_of("Closure")]

    @transfer(OpKind.STATIC_VAR)
    def _static_var(self, operand: Operand, op: Op) -> TypeList:
        if op.default_var is None:
            return [Type.null_type()]
        default = self._known(op.default_var)
        return [default] if default is not None else None

    @transfer(OpKind.PHI)
    def _phi(self, operand: Operand, op: Op) -> TypeList:
        types = []
        complete = True
        for incoming in op.vars:
            t = self._known(incoming)
            if t is None:
                complete = False
            else:
                types.append(t)
        if not types:
            return None
        merged = Type.union_of(types)
        if complete:
            return [merged]
        self.arena.provisional(operand, merged)
        return None

    @transfer(OpKind.ASSERTION)
    def _assertion(self, operand: Operand, op: AssertionOp) -> TypeList:
        t = self._process_assertion(op.assertion, op.expr)
        return [t] if t is not None else None

    def _process_assertion(self, assertion, source: Operand) -> Optional[Type]:
        if isinstance(assertion, TypeAssertion):
            return self._process_type_assertion(assertion)
        if isinstance(assertion, NegatedAssertion):
            asserted = self._process_assertion(assertion.value[0], source)
            if asserted is None:
                return None
            current = self._known(source)
            return (current or Type.mixed()).remove_type(asserted)
        return None

    def _process_type_assertion(self, assertion: TypeAssertion) -> Optional[Type]:
        if isinstance(assertion.value, Operand):
            if isinstance(assertion.value, Literal):
                return from_decl(assertion.value.value)
            return self._known(assertion.value)
        types = []
        for sub in assertion.value:
            t = self._process_type_assertion(sub)
            if t is None:
                return None
            types.append(t)
        if assertion.mode == AssertionMode.UNION:
            return Type.union_of(types)
        return Type.intersection_of(types)

    # ── Constants and parameters ─────────────────────────────────────

    @transfer(OpKind.CONST_FETCH)
    def _const_fetch(self, operand: Operand, op: Op) -> TypeList:
        if not isinstance(op.name, Literal):
            return None
        name = op.name.value
        lowered = name.lower()
        if lowered in ("true", "false"):
            return [Type.bool_type()]
        if lowered == "null":
            return [Type.null_type()]
        definitions = self.state.index.lookup_constant(name)
        if not definitions:
            return None
        types = []
        for definition in definitions:
            t = self._known(definition.value)
            if t is None:
                return None
            types.append(t)
        return types

    @transfer(OpKind.PARAM)
    def _param(self, operand: Operand, op: Param) -> TypeList:
        comment = op.func.doc_comment if op.func is not None else None
        doc = extract_type_from_comment("param", comment, op.param_name)
        if not op.declared_type:
            return [doc]
        declared = from_decl(op.declared_type)
        if op.has_null_default():
            declared = declared.union_with(Type.null_type())
        if not doc.equals(Type.mixed()) and self.state.resolver.resolves(doc, declared):
            return [doc]
        return [declared]

    @transfer(OpKind.NEW)
    def _new(self, operand: Operand, op: Op) -> TypeList:
        target = op.class_
        if isinstance(target, Literal) and isinstance(target.value, str):
            return [Type.object_of(target.value)]
        if (
            isinstance(target, BoundVariable)
            and target.scope == BoundScope.OBJECT
            and target.extra is not None
        ):
            return [from_decl(target.extra.value)]
        known = self._known(target)
        if known is not None and known.kind == TypeKind.OBJECT:
            return [known]
        return [Type.object_type()]

    # ── Function calls ───────────────────────────────────────────────

    @transfer(OpKind.FUNC_CALL)
    def _func_call(self, operand: Operand, op: Op) -> TypeList:
        if not isinstance(op.name, Literal):
            return None
        name = op.name.value
        functions = self.state.index.lookup_function(name)
        if functions:
            return self._function_types(functions)
        return self._builtin_function(name)

    @transfer(OpKind.NS_FUNC_CALL)
    def _ns_func_call(self, operand: Operand, op: Op) -> TypeList:
        if not isinstance(op.name, Literal) or not isinstance(op.ns_name, Literal):
            return None
        functions = (
            self.state.index.lookup_function(op.ns_name.value)
            or self.state.index.lookup_function(op.name.value)
        )
        if functions:
            return self._function_types(functions)
        return self._builtin_function(op.name.value)

    def _function_types(self, functions) -> List[Type]:
        types = []
        for function in functions:
            if function.func.return_type:
                types.append(from_decl(function.func.return_type))
            else:
                types.append(extract_type_from_comment("return", function.doc_comment()))
        return types

    def _builtin_function(self, name: str) -> TypeList:
        t = self.state.builtins.function_return(name)
        return [t] if t is not None else None

    # ── Class names ──────────────────────────────────────────────────

    def resolve_class_names(self, operand: Optional[Operand]) -> List[str]:
        """Lowercase class names the operand may denote."""
        t = self._known(operand)
        if t is None:
            return []
        if t.kind == TypeKind.STRING:
            if isinstance(operand, Literal) and isinstance(operand.value, str):
                return [operand.value.lower()]
            return []
        return self._class_names_of(t)

    def _class_names_of(self, t: Type) -> List[str]:
        if t.kind == TypeKind.OBJECT:
            return [t.user_type.lower()] if t.user_type else []
        if t.kind == TypeKind.UNION:
            names: List[str] = []
            for sub in t.subtypes:
                names.extend(self._class_names_of(sub))
            return names
        return []

    def _descendants(self, class_name: str) -> List[str]:
        return sorted(self.state.closure.descendants(class_name))

    # ── Methods ──────────────────────────────────────────────────────

    @transfer(OpKind.METHOD_CALL)
    def _method_call(self, operand: Operand, op: Op) -> TypeList:
        return self._call(op.name, op.var, static=False)

    @transfer(OpKind.STATIC_CALL)
    def _static_call(self, operand: Operand, op: Op) -> TypeList:
        return self._call(op.name, op.class_, static=True)

    def _call(self, name: Optional[Operand], receiver: Optional[Operand], static: bool) -> TypeList:
        if not isinstance(name, Literal):
            return None
        types: List[Type] = []
        for class_name in self.resolve_class_names(receiver):
            types.extend(self.resolve_polymorphic_method(class_name, name.value, static))
        return types or None

    def resolve_polymorphic_method(self, class_name: str, method: str, static: bool = False) -> List[Type]:
        """Return types of *method* over every class that may receive the call."""
        magic = "__callstatic" if static else "__call"
        types: List[Type] = []
        for candidate in self._descendants(class_name):
            found = self.resolve_method(candidate, method)
            if not found:
                found = self.resolve_method(candidate, magic)
            types.extend(found)
        return types

    def resolve_method(self, class_name: str, method: str, _seen: Optional[Set[str]] = None) -> List[Type]:
        key = class_name.lower()
        seen = _seen if _seen is not None else set()
        if key in seen:
            return []
        seen.add(key)
        index = self.state.index
        types: List[Type] = []
        for class_like in index.lookup_class(key):
            methods = index.methods_of(class_like, method)
            if methods:
                types.extend(self._method_return(m) for m in methods)
                continue
            types.extend(self._inherited(class_like, seen, lambda n, s: self.resolve_method(n, method, s)))
        builtin = self.state.builtins.method_return(key, method)
        if builtin is not None:
            types.append(builtin)
        return types

    def _method_return(self, method: ClassMethod) -> Type:
        doc = extract_type_from_comment("return", method.doc_comment())
        if not method.func.return_type:
            return doc
        declared = from_decl(method.func.return_type)
        if self.state.resolver.resolves(doc, declared):
            return doc
        return declared

    def _inherited(self, class_like, seen: Set[str], lookup) -> List[Type]:
        types: List[Type] = []
        if self.config.resolve_trait_members:
            for trait in getattr(class_like, "uses", ()):
                types.extend(lookup(trait, seen))
        if types:
            return types
        if isinstance(class_like, ClassStmt) and class_like.extends:
            types.extend(lookup(class_like.extends, seen))
        elif isinstance(class_like, InterfaceStmt):
            for parent in class_like.extends:
                types.extend(lookup(parent, seen))
        return types

    # ── Properties ───────────────────────────────────────────────────

    @transfer(OpKind.PROPERTY_FETCH)
    def _property_fetch(self, operand: Operand, op: Op) -> TypeList:
        return self._fetch_property(op.name, op.var, static=False)

    @transfer(OpKind.STATIC_PROPERTY_FETCH)
    def _static_property_fetch(self, operand: Operand, op: Op) -> TypeList:
        return self._fetch_property(op.name, op.class_, static=True)

    def _fetch_property(self, name: Optional[Operand], receiver: Optional[Operand], static: bool) -> TypeList:
        if not isinstance(name, Literal):
            return None
        types: List[Type] = []
        for class_name in self.resolve_class_names(receiver):
            types.extend(self.resolve_polymorphic_property(class_name, name.value, static))
        return types or None

    def resolve_polymorphic_property(self, class_name: str, prop: str, static: bool = False) -> List[Type]:
        types: List[Type] = []
        for candidate in self._descendants(class_name):
            found = self.resolve_property(candidate, prop)
            if found:
                types.extend(found)
            elif not static:
                types.extend(self.resolve_method(candidate, "__get"))
        return types

    def resolve_property(self, class_name: str, prop: str, _seen: Optional[Set[str]] = None) -> List[Type]:
        key = class_name.lower()
        seen = _seen if _seen is not None else set()
        if key in seen:
            return []
        seen.add(key)
        index = self.state.index
        types: List[Type] = []
        for class_like in index.lookup_class(key):
            props = index.properties_of(class_like, prop)
            if props:
                types.extend(p.type for p in props if p.type is not None)
                continue
            types.extend(self._inherited(class_like, seen, lambda n, s: self.resolve_property(n, prop, s)))
        builtin = self.state.builtins.property_type(key, prop)
        if builtin is not None:
            types.append(builtin)
        return types

    # ── Class constants ──────────────────────────────────────────────

    @transfer(OpKind.CLASS_CONST_FETCH)
    def _class_const_fetch(self, operand: Operand, op: Op) -> TypeList:
        if not isinstance(op.name, Literal):
            return None
        types: List[Type] = []
        for class_name in self.resolve_class_names(op.class_):
            found = self.resolve_polymorphic_class_constant(class_name, op.name.value)
            if found is None:
                return None
            types.extend(found)
        return types or None

    def resolve_polymorphic_class_constant(self, class_name: str, const: str) -> TypeList:
        types: List[Type] = []
        for candidate in self._descendants(class_name):
            found = self.resolve_class_constant(candidate, const)
            if found is None:
                return None
            types.extend(found)
        return types

    def resolve_class_constant(self, class_name: str, const: str, _seen: Optional[Set[str]] = None) -> TypeList:
        """Constant types along the direct ``extends`` chain; ``None`` if a value is pending."""
        key = class_name.lower()
        seen = _seen if _seen is not None else set()
        if key in seen:
            return []
        seen.add(key)
        index = self.state.index
        types: List[Type] = []
        for class_like in index.lookup_class(key):
            constants = index.constants_of(class_like, const)
            if constants:
                for constant in constants:
                    t = self._known(constant.value)
                    if t is None:
                        return None
                    types.append(t)
                continue
            if isinstance(class_like, ClassStmt):
                parents = [class_like.extends] if class_like.extends else []
            elif isinstance(class_like, InterfaceStmt):
                parents = class_like.extends
            else:
                parents = []
            for parent in parents:
                found = self.resolve_class_constant(parent, const, seen)
                if found is None:
                    return None
                types.extend(found)
        builtin = self.state.builtins.class_constant_type(key, const)
        if builtin is not None:
            types.append(builtin)
        return types
