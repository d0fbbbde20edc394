"""
phptypes/visitor.py
═══════════════════

Traversal of :class:`~phptypes.graph.Script` graphs plus the three stock
finders that feed :class:`~phptypes.state.State`.

Provides:
- ``GraphVisitor``: base class; handlers are registered per op kind with
  the ``@visiting`` decorator and ``generic_visit`` catches the rest
- ``Traverser``: walks scripts, function bodies, class bodies and
  closures exactly once, driving any number of visitors
- ``DeclarationFinder``, ``CallFinder``, ``VariableFinder``
"""

from __future__ import annotations

from typing import Any, Callable, Dict, Iterable, List, Optional, Set

from phptypes.graph import (
    ClassLikeStmt,
    ClassMethod,
    ClassStmt,
    ClosureExpr,
    ConstStmt,
    Func,
    FunctionStmt,
    InterfaceStmt,
    Op,
    OpKind,
    Operand,
    Script,
    TraitStmt,
)

__all__ = [
    "GraphVisitor",
    "Traverser",
    "DeclarationFinder",
    "CallFinder",
    "VariableFinder",
    "visiting",
]


def visiting(*kinds: OpKind) -> Callable:
    """Decorator to register a method as handling specific op kinds.

    Usage:
        class MyVisitor(GraphVisitor):
            @visiting(OpKind.FUNC_CALL, OpKind.NS_FUNC_CALL)
            def on_call(self, op):
                ...
    """
    def decorator(method: Callable) -> Callable:
        method._visiting_kinds = kinds
        return method
    return decorator


class GraphVisitor:
    """Base visitor dispatching on ``op.kind``."""

    _handlers: Dict[OpKind, str] = {}

    def __init_subclass__(cls, **kwargs: Any) -> None:
        super().__init_subclass__(**kwargs)
        handlers = dict(getattr(cls, "_handlers", {}))
        for attr, member in vars(cls).items():
            for kind in getattr(member, "_visiting_kinds", ()):
                handlers[kind] = attr
        cls._handlers = handlers

    def enter_script(self, script: Script) -> None:
        pass

    def enter_func(self, func: Func) -> None:
        pass

    def leave_func(self, func: Func) -> None:
        pass

    def visit_op(self, op: Op) -> None:
        handler = self._handlers.get(op.kind)
        if handler is None:
            self.generic_visit(op)
        else:
            getattr(self, handler)(op)

    def generic_visit(self, op: Op) -> None:
        pass


class Traverser:
    """Walks every reachable op once, calling each registered visitor."""

    def __init__(self, visitors: Optional[Iterable[GraphVisitor]] = None) -> None:
        self.visitors: List[GraphVisitor] = list(visitors or [])
        self._seen_funcs: Set[int] = set()

    def traverse(self, script: Script) -> None:
        for visitor in self.visitors:
            visitor.enter_script(script)
        self._traverse_func(script.main)
        for func in script.functions:
            self._traverse_func(func)

    def _traverse_func(self, func: Func) -> None:
        if id(func) in self._seen_funcs:
            return
        self._seen_funcs.add(id(func))
        for visitor in self.visitors:
            visitor.enter_func(func)
        for param in func.params:
            self._traverse_op(param)
        for block in func.blocks:
            for op in block.children:
                self._traverse_op(op)
        for visitor in self.visitors:
            visitor.leave_func(func)

    def _traverse_op(self, op: Op) -> None:
        for visitor in self.visitors:
            visitor.visit_op(op)
        if isinstance(op, ClassLikeStmt):
            for stmt in op.stmts.children:
                self._traverse_op(stmt)
        elif isinstance(op, (FunctionStmt, ClassMethod, ClosureExpr)):
            self._traverse_func(op.func)


class DeclarationFinder(GraphVisitor):
    """Collects every declaration, in source order."""

    def __init__(self) -> None:
        self.classes: List[ClassStmt] = []
        self.interfaces: List[InterfaceStmt] = []
        self.traits: List[TraitStmt] = []
        self.functions: List[FunctionStmt] = []
        self.methods: List[ClassMethod] = []
        self.constants: List[ConstStmt] = []

    @visiting(OpKind.CLASS)
    def on_class(self, op: ClassStmt) -> None:
        self.classes.append(op)

    @visiting(OpKind.INTERFACE)
    def on_interface(self, op: InterfaceStmt) -> None:
        self.interfaces.append(op)

    @visiting(OpKind.TRAIT)
    def on_trait(self, op: TraitStmt) -> None:
        self.traits.append(op)

    @visiting(OpKind.FUNCTION)
    def on_function(self, op: FunctionStmt) -> None:
        self.functions.append(op)

    @visiting(OpKind.CLASS_METHOD)
    def on_method(self, op: ClassMethod) -> None:
        self.methods.append(op)

    @visiting(OpKind.CONST)
    def on_const(self, op: ConstStmt) -> None:
        self.constants.append(op)


class CallFinder(GraphVisitor):
    """Collects call sites and object constructions."""

    def __init__(self) -> None:
        self.func_calls: List[Op] = []
        self.ns_func_calls: List[Op] = []
        self.method_calls: List[Op] = []
        self.static_calls: List[Op] = []
        self.new_calls: List[Op] = []

    @visiting(OpKind.FUNC_CALL)
    def on_func_call(self, op: Op) -> None:
        self.func_calls.append(op)

    @visiting(OpKind.NS_FUNC_CALL)
    def on_ns_func_call(self, op: Op) -> None:
        self.ns_func_calls.append(op)

    @visiting(OpKind.METHOD_CALL)
    def on_method_call(self, op: Op) -> None:
        self.method_calls.append(op)

    @visiting(OpKind.STATIC_CALL)
    def on_static_call(self, op: Op) -> None:
        self.static_calls.append(op)

    @visiting(OpKind.NEW)
    def on_new(self, op: Op) -> None:
        self.new_calls.append(op)


class VariableFinder(GraphVisitor):
    """Collects every operand read or written by a reachable op."""

    def __init__(self) -> None:
        self._variables: Dict[int, Operand] = {}

    def generic_visit(self, op: Op) -> None:
        for operand in op.operands():
            self._variables.setdefault(operand.id, operand)
        for operand in op.written():
            self._variables.setdefault(operand.id, operand)

    @property
    def variables(self) -> List[Operand]:
        return list(self._variables.values())
