"""
phptypes/builtins.py
════════════════════

Read-only signature base for PHP's built-in functions and classes.

The packaged ``data/builtins.json`` has the shape::

    {
      "functions": {"strlen": "int", "var_dump": null, ...},
      "classes": {
        "ArrayIterator": {
          "extends": null,
          "implements": ["SeekableIterator", "ArrayAccess", "Countable"],
          "methods": {"current": "mixed", ...},
          "properties": {...},
          "constants": {...}
        }
      }
    }

Values are declaration texts understood by
:func:`~phptypes.declparser.from_decl`; ``null`` means "known, but no
return type recorded".  All names are looked up case-insensitively.
Member lookups walk the built-in ``extends`` chain.  A second file can be
merged over the packaged one (``ReconstructorConfig.builtins_path``).
"""

from __future__ import annotations

import json
import logging
from importlib import resources
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Set, Union

from phptypes.declparser import from_decl
from phptypes.hierarchy import HierarchyClosure
from phptypes.types import Type

logger = logging.getLogger(__name__)

_MISSING = object()


class BuiltinSignatures:
    """Lowercased tables of built-in return / member types."""

    def __init__(self, data: Optional[Mapping[str, Any]] = None) -> None:
        self.functions: Dict[str, Optional[str]] = {}
        self.methods: Dict[str, Dict[str, Optional[str]]] = {}
        self.properties: Dict[str, Dict[str, Optional[str]]] = {}
        self.class_constants: Dict[str, Dict[str, Optional[str]]] = {}
        self.class_extends: Dict[str, str] = {}
        self.class_implements: Dict[str, List[str]] = {}
        self.class_names: Dict[str, str] = {}
        if data:
            self.merge(data)

    # ── Loading ──────────────────────────────────────────────────────

    @classmethod
    def load(cls, extra_path: Optional[Union[str, Path]] = None) -> BuiltinSignatures:
        """Load the packaged base, optionally merging *extra_path* over it."""
        source = resources.files("phptypes") / "data" / "builtins.json"
        signatures = cls(json.loads(source.read_text(encoding="utf-8")))
        if extra_path is not None:
            path = Path(extra_path)
            with path.open(encoding="utf-8") as fh:
                signatures.merge(json.load(fh))
            logger.info("Merged built-in signatures from %s", path)
        logger.debug(
            "Loaded %d built-in functions and %d built-in classes",
            len(signatures.functions), len(signatures.class_names),
        )
        return signatures

    def merge(self, data: Mapping[str, Any]) -> None:
        for name, decl in (data.get("functions") or {}).items():
            self.functions[name.lower()] = decl
        for name, info in (data.get("classes") or {}).items():
            key = name.lower()
            self.class_names[key] = name
            info = info or {}
            parent = info.get("extends")
            if parent:
                self.class_extends[key] = parent.lower()
            if info.get("implements"):
                self.class_implements[key] = [i.lower() for i in info["implements"]]
            for table, field in (
                (self.methods, "methods"),
                (self.properties, "properties"),
                (self.class_constants, "constants"),
            ):
                members = info.get(field) or {}
                if members:
                    target = table.setdefault(key, {})
                    for member, decl in members.items():
                        target[member.lower()] = decl

    # ── Lookups ──────────────────────────────────────────────────────

    def has_function(self, name: str) -> bool:
        return name.lower() in self.functions

    def function_return(self, name: str) -> Optional[Type]:
        decl = self.functions.get(name.lower())
        if not decl:
            return None
        return from_decl(decl)

    def method_return(self, class_name: str, method: str) -> Optional[Type]:
        return self._member(self.methods, class_name, method)

    def property_type(self, class_name: str, prop: str) -> Optional[Type]:
        return self._member(self.properties, class_name, prop)

    def class_constant_type(self, class_name: str, const: str) -> Optional[Type]:
        return self._member(self.class_constants, class_name, const)

    def _member(
        self,
        table: Mapping[str, Mapping[str, Optional[str]]],
        class_name: str,
        member: str,
    ) -> Optional[Type]:
        key = class_name.lower()
        member = member.lower()
        seen: Set[str] = set()
        while key and key not in seen:
            seen.add(key)
            decl = table.get(key, {}).get(member, _MISSING)
            if decl is not _MISSING:
                return from_decl(decl) if decl else None
            key = self.class_extends.get(key)
        return None

    def is_builtin_class(self, name: str) -> bool:
        return name.lower() in self.class_names

    # ── Hierarchy seed ───────────────────────────────────────────────

    def baseline_hierarchy(self) -> HierarchyClosure:
        """Closed hierarchy over every built-in class and interface."""
        closure = HierarchyClosure()
        for key in self.class_names:
            closure.add_name(key)
        for child, parent in self.class_extends.items():
            closure.add_edge(child, parent)
        for child, interfaces in self.class_implements.items():
            closure.add_edges(child, interfaces)
        closure.close()
        return closure
