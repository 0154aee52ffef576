"""
Requires-graph primitives (``activation_kernel.domain.graph``).

Responsibility
--------------
Graph algorithms over a ``requires`` adjacency mapping (module -> direct
dependencies): first-discovered breadth-first reachability, reverse-edge
derivation, and cycle detection.  Everything above this module (catalog,
closure engine, cascade planner) expresses its traversal through these
functions.

Architecture position
---------------------
**Kernel domain layer** -- pure functions.  ZERO I/O.  Operates on plain
mappings so that ``ModuleCatalog.build`` can use it before a catalog exists.

Invariants enforced
-------------------
* ``walk_requires`` visits every node at most once (visited-set), so shared
  dependencies reached through several paths are not re-walked.
* ``find_cycle`` uses ``graphlib.TopologicalSorter``; it reports one cycle
  when any exists.
"""

from __future__ import annotations

from collections import deque
from collections.abc import Iterable, Mapping
from graphlib import CycleError, TopologicalSorter

RequiresGraph = Mapping[str, tuple[str, ...]]


def walk_requires(requires: RequiresGraph, start: str) -> tuple[str, ...]:
    """
    Return every node reachable from ``start`` along requires edges.

    ``start`` itself comes first; the rest follow in breadth-first,
    first-discovered order.  Edges to nodes absent from ``requires`` are
    followed but not expanded.

    Preconditions:
        - ``requires`` is acyclic, or the caller accepts that a cycle is
          walked once (the visited-set still guarantees termination).
    """
    order: list[str] = [start]
    seen: set[str] = {start}
    queue: deque[str] = deque([start])
    while queue:
        node = queue.popleft()
        for dep in requires.get(node, ()):
            if dep not in seen:
                seen.add(dep)
                order.append(dep)
                queue.append(dep)
    return tuple(order)


def reverse_edges(requires: RequiresGraph) -> dict[str, tuple[str, ...]]:
    """
    Derive the direct dependents of every node.

    The result has an entry for every key of ``requires``; dependents are
    listed in the iteration order of ``requires``.
    """
    dependents: dict[str, list[str]] = {node: [] for node in requires}
    for node, deps in requires.items():
        for dep in deps:
            if dep in dependents and node not in dependents[dep]:
                dependents[dep].append(node)
    return {node: tuple(items) for node, items in dependents.items()}


def find_cycle(requires: RequiresGraph) -> tuple[str, ...] | None:
    """
    Return one dependency cycle, or None if the graph is acyclic.

    The returned path starts and ends on the same node, e.g.
    ``("a", "b", "a")``.  Self-references are reported as ``("a", "a")``.
    """
    for node, deps in requires.items():
        if node in deps:
            return (node, node)

    sorter = TopologicalSorter({node: deps for node, deps in requires.items()})
    try:
        sorter.prepare()
    except CycleError as exc:
        # graphlib reports [n1, ..., nk, n1] following dependency edges
        # backwards; present it in requires direction.
        cycle = list(exc.args[1])
        return tuple(reversed(cycle))
    return None


def missing_dependencies(
    requires: RequiresGraph, members: Iterable[str]
) -> list[tuple[str, str]]:
    """
    Return every (member, dependency) pair whose dependency is not a member.

    Pairs come in member iteration order, then requires declaration order.
    """
    member_list = list(members)
    present = set(member_list)
    return [
        (node, dep)
        for node in member_list
        for dep in requires.get(node, ())
        if dep not in present
    ]
