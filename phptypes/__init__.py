"""
phptypes: Static Type Reconstruction for PHP Program Graphs
============================================================

Given the declarations and dataflow graph of a PHP program, infer a
concrete or compound type for every value in it.

Core modules
------------
types
    The type lattice: primitives, nominal objects, arrays, unions,
    intersections.
declparser
    Parser for textual declarations such as ``?Foo`` or ``int|string[]``.
doccomment
    ``@var`` / ``@return`` / ``@param`` extraction.
graph
    The program graph (operands, ops, declarations) consumed by the solver.
declarations
    Declaration Index over classes, interfaces, traits and functions.
hierarchy
    Transitive closure of extends / implements / uses.
resolver
    Hierarchy-aware subtype check.
builtins
    Signature base for PHP's built-in functions and classes.
state
    Everything one analysis run knows before solving.
reconstructor
    The fixed-point solver.

Quick start
-----------
>>> from phptypes import Type
>>> t = Type.parse_decl("int|float")
>>> print(t.remove_type(Type.int_type()))
float

Package layout
--------------
::

    phptypes/
    ├── __init__.py            ← this file
    ├── errors.py
    ├── types.py
    ├── declparser.py
    ├── doccomment.py
    ├── lattice.py
    ├── graph.py
    ├── visitor.py
    ├── declarations.py
    ├── hierarchy.py
    ├── resolver.py
    ├── builtins.py
    ├── data/builtins.json
    ├── state.py
    ├── reconstructor.py
    ├── config.py
    ├── cli.py
    └── __main__.py
"""

from __future__ import annotations

import importlib
import logging
import sys
from typing import TYPE_CHECKING, List

# ---------------------------------------------------------------------------
# Package metadata
# ---------------------------------------------------------------------------

__version__ = "0.1.0"
__license__ = "MIT"
__all__: List[str] = []          # populated incrementally below

_log = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Internal registry: module_name -> names to re-export
# ---------------------------------------------------------------------------

_CORE_MODULES = {
    "errors": [
        "PhpTypesError",
        "InvalidDeclaration",
        "UnsupportedLiteral",
        "StructuralTypeError",
        "UnhandledOperation",
        "ReconstructionError",
        "ErrorCodes",
    ],
    "types": [
        "Type",
        "TypeKind",
        "PRIMITIVES",
    ],
    "declparser": [
        "parse_decl",
        "from_decl",
    ],
    "doccomment": [
        "extract_type_from_comment",
    ],
    "lattice": [
        "TypeLattice",
    ],
    "hierarchy": [
        "HierarchyClosure",
    ],
    "resolver": [
        "TypeResolver",
    ],
    "declarations": [
        "DeclarationIndex",
    ],
    "builtins": [
        "BuiltinSignatures",
    ],
    "config": [
        "ReconstructorConfig",
    ],
    "state": [
        "State",
    ],
    "reconstructor": [
        "TypeReconstructor",
        "ReconstructionResult",
        "ResolutionStatus",
    ],
}


def _import_names(module_rel_name: str, names: List[str]) -> None:
    """Import *names* from a submodule and bind them in the package namespace."""
    fq_name = f"{__name__}.{module_rel_name}"
    try:
        mod = importlib.import_module(fq_name)
    except ImportError as exc:
        raise ImportError(
            f"phptypes: required submodule '{module_rel_name}' failed to import: {exc}"
        ) from exc

    current_module = sys.modules[__name__]
    for name in names:
        obj = getattr(mod, name, None)
        if obj is None:
            raise AttributeError(f"phptypes.{module_rel_name} does not export '{name}'")
        setattr(current_module, name, obj)
        __all__.append(name)

    setattr(current_module, module_rel_name, mod)
    if module_rel_name not in __all__:
        __all__.append(module_rel_name)


for _mod, _names in _CORE_MODULES.items():
    _import_names(_mod, _names)

del _mod, _names


# ---------------------------------------------------------------------------
# Package-level utilities
# ---------------------------------------------------------------------------

def list_submodules() -> List[str]:
    """Return the names of all re-exported submodules."""
    return sorted(_CORE_MODULES)


def package_info() -> dict:
    """Return a dict of metadata about the installed package."""
    loaded = [m for m in list_submodules() if f"{__name__}.{m}" in sys.modules]
    return {
        "package": __name__,
        "version": __version__,
        "python": sys.version,
        "loaded_submodules": loaded,
        "all_exports": list(__all__),
    }


__all__ += ["list_submodules", "package_info", "__version__"]

# ---------------------------------------------------------------------------
# Static re-exports for type checkers
# ---------------------------------------------------------------------------

if TYPE_CHECKING:
    from .errors import (
        PhpTypesError as PhpTypesError,
        InvalidDeclaration as InvalidDeclaration,
        UnsupportedLiteral as UnsupportedLiteral,
        StructuralTypeError as StructuralTypeError,
        UnhandledOperation as UnhandledOperation,
        ReconstructionError as ReconstructionError,
        ErrorCodes as ErrorCodes,
    )
    from .types import (
        Type as Type,
        TypeKind as TypeKind,
        PRIMITIVES as PRIMITIVES,
    )
    from .declparser import (
        parse_decl as parse_decl,
        from_decl as from_decl,
    )
    from .doccomment import extract_type_from_comment as extract_type_from_comment
    from .lattice import TypeLattice as TypeLattice
    from .hierarchy import HierarchyClosure as HierarchyClosure
    from .resolver import TypeResolver as TypeResolver
    from .declarations import DeclarationIndex as DeclarationIndex
    from .builtins import BuiltinSignatures as BuiltinSignatures
    from .config import ReconstructorConfig as ReconstructorConfig
    from .state import State as State
    from .reconstructor import (
        TypeReconstructor as TypeReconstructor,
        ReconstructionResult as ReconstructionResult,
        ResolutionStatus as ResolutionStatus,
    )
