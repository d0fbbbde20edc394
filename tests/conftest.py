# tests/conftest.py
"""
Shared helpers for building small program graphs by hand.

``ScriptBuilder`` emits ops into a single top-level block so the stock
finders see every operand; ``reconstruct`` runs State + TypeReconstructor
over the result.
"""

from __future__ import annotations

from typing import Optional, Sequence, Tuple

import pytest

from phptypes.builtins import BuiltinSignatures
from phptypes.config import ReconstructorConfig
from phptypes.graph import (
    Block,
    ClassConstStmt,
    ClassMethod,
    ClassStmt,
    Func,
    FunctionStmt,
    InterfaceStmt,
    Literal,
    Op,
    OpKind,
    Operand,
    Param,
    PropertyStmt,
    Script,
    SourceLoc,
    Temporary,
    TraitStmt,
)
from phptypes.reconstructor import ReconstructionResult, TypeReconstructor
from phptypes.state import State


class ScriptBuilder:
    """Assemble a one-block script op by op."""

    def __init__(self, file: str = "test.php") -> None:
        self.file = file
        self.block = Block()
        self._line = 0

    def _loc(self) -> SourceLoc:
        self._line += 1
        return SourceLoc(self.file, self._line)

    def emit(self, kind: OpKind, *, result: Optional[Operand] = None, **slots) -> Operand:
        """Append an op writing *result* (a fresh temporary by default)."""
        if result is None:
            result = Temporary()
        self.block.append(Op(kind, result=result, loc=self._loc(), **slots))
        return result

    def add(self, op: Op) -> Op:
        return self.block.append(op)

    def param(self, name: str, declared_type: Optional[str] = None,
              default: Optional[Operand] = None, doc: Optional[str] = None) -> Tuple[Param, Operand]:
        """A parameter of a throwaway function carrying *doc*."""
        var = Temporary()
        param = Param(name, var, declared_type=declared_type, default_var=default, loc=self._loc())
        Func("f", params=[param], doc_comment=doc)
        self.block.append(param)
        return param, var

    def klass(self, name: str, members: Sequence[Op] = (), extends: Optional[str] = None,
              implements: Sequence[str] = (), uses: Sequence[str] = ()) -> ClassStmt:
        return self.add(ClassStmt(name, list(members), extends=extends,
                                  implements=implements, uses=uses))

    def interface(self, name: str, members: Sequence[Op] = (),
                  extends: Sequence[str] = ()) -> InterfaceStmt:
        return self.add(InterfaceStmt(name, list(members), extends=extends))

    def trait(self, name: str, members: Sequence[Op] = ()) -> TraitStmt:
        return self.add(TraitStmt(name, list(members)))

    def function(self, name: str, return_type: Optional[str] = None,
                 doc: Optional[str] = None) -> FunctionStmt:
        return self.add(FunctionStmt(Func(name, return_type=return_type, doc_comment=doc)))

    def build(self) -> Script:
        return Script(self.file, Func("{main}", blocks=[self.block]))


def method(name: str, return_type: Optional[str] = None, doc: Optional[str] = None,
           static: bool = False) -> ClassMethod:
    return ClassMethod(Func(name, return_type=return_type, doc_comment=doc), static=static)


def prop(name: str, declared_type: Optional[str] = None, doc: Optional[str] = None,
         static: bool = False) -> PropertyStmt:
    return PropertyStmt(name, declared_type=declared_type, doc_comment=doc, static=static)


def class_const(name: str, value) -> ClassConstStmt:
    return ClassConstStmt(name, value if isinstance(value, Operand) else Literal(value))


def reconstruct(*scripts: Script, config: Optional[ReconstructorConfig] = None,
                builtins: Optional[BuiltinSignatures] = None) -> Tuple[State, ReconstructionResult]:
    state = State(scripts, builtins=builtins, config=config)
    result = TypeReconstructor(config).reconstruct(state)
    return state, result


@pytest.fixture
def builder() -> ScriptBuilder:
    return ScriptBuilder()


@pytest.fixture(scope="session")
def builtins() -> BuiltinSignatures:
    return BuiltinSignatures.load()
