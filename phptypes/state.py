"""
phptypes/state.py
═════════════════

Everything one analysis run knows before reconstruction starts: the
operands to type, the Declaration Index, the Hierarchy Closure (seeded
with the built-in hierarchy), the resolver over it, the built-in
signature base and the call-site inventory.

Built once per run and read-only afterwards.
"""

from __future__ import annotations

import logging
from typing import Iterable, List, Optional

from phptypes.builtins import BuiltinSignatures
from phptypes.config import ReconstructorConfig
from phptypes.declarations import DeclarationIndex
from phptypes.graph import Op, Operand, Script
from phptypes.hierarchy import HierarchyClosure
from phptypes.resolver import TypeResolver
from phptypes.visitor import CallFinder, DeclarationFinder, Traverser, VariableFinder

logger = logging.getLogger(__name__)


class State:
    """Analysis-run state over a set of scripts."""

    def __init__(
        self,
        scripts: Iterable[Script],
        builtins: Optional[BuiltinSignatures] = None,
        config: Optional[ReconstructorConfig] = None,
    ) -> None:
        self.config = config or ReconstructorConfig()
        self.scripts: List[Script] = list(scripts)
        if builtins is None:
            builtins = BuiltinSignatures.load(self.config.builtins_path)
        self.builtins = builtins

        declarations = DeclarationFinder()
        calls = CallFinder()
        variables = VariableFinder()
        traverser = Traverser([declarations, calls, variables])
        for script in self.scripts:
            traverser.traverse(script)

        self.variables: List[Operand] = variables.variables
        self.index = DeclarationIndex(
            classes=declarations.classes,
            interfaces=declarations.interfaces,
            traits=declarations.traits,
            functions=declarations.functions,
            constants=declarations.constants,
        )
        self.methods = declarations.methods

        self.func_calls: List[Op] = calls.func_calls
        self.ns_func_calls: List[Op] = calls.ns_func_calls
        self.method_calls: List[Op] = calls.method_calls
        self.static_calls: List[Op] = calls.static_calls
        self.new_calls: List[Op] = calls.new_calls

        self.closure = self._compute_closure()
        self.resolver = TypeResolver(self.closure)

        logger.info(
            "Loaded %d scripts: %d operands, %d names in hierarchy",
            len(self.scripts), len(self.variables), len(self.closure),
        )

    def _compute_closure(self) -> HierarchyClosure:
        closure = HierarchyClosure.seeded(self.builtins.baseline_hierarchy())
        for class_like in self.index.class_likes():
            closure.add_name(class_like.class_name)
        for class_like in self.index.class_likes():
            closure.add_edges(class_like.class_name, class_like.parents())
        closure.close()
        return closure
