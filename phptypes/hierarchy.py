"""
phptypes/hierarchy.py
═════════════════════

Transitive closure of the class / interface / trait hierarchy.

Two mappings over lowercase type names are maintained:

``resolves[name]``
    every name reachable by following ``extends`` / ``implements`` /
    ``uses`` edges upward, including ``name`` itself;
``resolved_by[name]``
    the inverse relation, also reflexive for declared names.

The invariant ``b ∈ resolves[a] ⇔ a ∈ resolved_by[b]`` holds after every
mutation because edges are only ever added through :meth:`_link`, which
updates both sides.

Closure
───────
A FIFO worklist is seeded with every known name.  Processing ``n`` unions
the ancestor set of each *declared* direct ancestor into ``n``'s set
(upward pass) and the descendant set of each descendant into ``n``'s
descendants (downward pass).  Whenever a link is added, the child's
descendants and the parent's ancestors are re-enqueued.  Each step grows
a finite relation bounded by ``|names|²``, so the loop terminates, and the
fixed point does not depend on processing order.

Names referenced as parents but never declared are recorded as edges and
never expanded upward.
"""

from __future__ import annotations

import logging
from collections import deque
from typing import Deque, Dict, FrozenSet, Iterable, Mapping, Optional, Set

logger = logging.getLogger(__name__)


class HierarchyClosure:
    """Ancestor / descendant index over case-insensitive type names."""

    def __init__(self) -> None:
        self.resolves: Dict[str, Set[str]] = {}
        self.resolved_by: Dict[str, Set[str]] = {}
        self._declared: Set[str] = set()

    # ── Construction ─────────────────────────────────────────────────

    @classmethod
    def seeded(cls, baseline: Optional[HierarchyClosure]) -> HierarchyClosure:
        """Start from a copy of *baseline* (built-in hierarchy) or empty."""
        if baseline is None:
            return cls()
        return baseline.copy()

    def copy(self) -> HierarchyClosure:
        other = HierarchyClosure()
        other.resolves = {k: set(v) for k, v in self.resolves.items()}
        other.resolved_by = {k: set(v) for k, v in self.resolved_by.items()}
        other._declared = set(self._declared)
        return other

    def add_name(self, name: str) -> str:
        """Declare *name*, giving it reflexive entries in both mappings."""
        key = name.lower()
        self._declared.add(key)
        self.resolves.setdefault(key, set()).add(key)
        self.resolved_by.setdefault(key, set()).add(key)
        return key

    def add_edge(self, child: str, parent: str) -> None:
        """Record a direct ``child → parent`` edge."""
        self._link(child.lower(), parent.lower())

    def add_edges(self, child: str, parents: Iterable[str]) -> None:
        for parent in parents:
            self.add_edge(child, parent)

    def _link(self, child: str, ancestor: str) -> bool:
        ancestors = self.resolves.setdefault(child, set())
        if ancestor in ancestors:
            return False
        ancestors.add(ancestor)
        self.resolved_by.setdefault(ancestor, set()).add(child)
        return True

    # ── Closure ──────────────────────────────────────────────────────

    def close(self) -> int:
        """Compute the transitive closure in place.

        Returns the number of worklist items processed.
        """
        queue: Deque[str] = deque(self.resolves)
        queued: Set[str] = set(queue)
        steps = 0

        def enqueue(names: Iterable[str]) -> None:
            for name in names:
                if name not in queued:
                    queued.add(name)
                    queue.append(name)

        while queue:
            name = queue.popleft()
            queued.discard(name)
            steps += 1

            # upward: n inherits the ancestors of each declared ancestor
            for parent in list(self.resolves.get(name, ())):
                if parent == name or parent not in self._declared:
                    continue
                for ancestor in list(self.resolves[parent]):
                    if self._link(name, ancestor):
                        enqueue(self.resolved_by.get(name, ()))
                        enqueue(self.resolves.get(ancestor, ()))

            # downward: n gains the descendants of each descendant
            for child in list(self.resolved_by.get(name, ())):
                if child == name:
                    continue
                for descendant in list(self.resolved_by.get(child, ())):
                    if self._link(descendant, name):
                        enqueue(self.resolved_by.get(descendant, ()))
                        enqueue(self.resolves.get(name, ()))

        logger.debug(
            "Hierarchy closure converged after %d steps over %d names",
            steps, len(self.resolves),
        )
        return steps

    # ── Queries ──────────────────────────────────────────────────────

    def is_declared(self, name: str) -> bool:
        return name.lower() in self._declared

    def ancestors(self, name: str) -> FrozenSet[str]:
        return frozenset(self.resolves.get(name.lower(), ()))

    def descendants(self, name: str) -> FrozenSet[str]:
        return frozenset(self.resolved_by.get(name.lower(), ()))

    def is_subtype(self, child: str, parent: str) -> bool:
        return parent.lower() in self.resolves.get(child.lower(), ())

    def check_invariant(self) -> bool:
        """True iff both mappings are mutual inverses and declared names are reflexive."""
        for child, ancestors in self.resolves.items():
            for ancestor in ancestors:
                if child not in self.resolved_by.get(ancestor, ()):
                    return False
        for parent, descendants in self.resolved_by.items():
            for descendant in descendants:
                if parent not in self.resolves.get(descendant, ()):
                    return False
        return all(
            name in self.resolves[name] and name in self.resolved_by[name]
            for name in self._declared
        )

    def as_dict(self) -> Mapping[str, Mapping[str, list]]:
        return {
            "resolves": {k: sorted(v) for k, v in sorted(self.resolves.items())},
            "resolved_by": {k: sorted(v) for k, v in sorted(self.resolved_by.items())},
        }

    def __len__(self) -> int:
        return len(self.resolves)

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and name.lower() in self.resolves
