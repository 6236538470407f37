"""Cycle detection for directed graphs."""

from __future__ import annotations

from enum import IntEnum, StrEnum
from typing import TYPE_CHECKING, TypeVar

if TYPE_CHECKING:
    from collections.abc import Hashable

    from ._digraph import DiGraph

T = TypeVar("T", bound="Hashable")


class OnCycle(StrEnum):
    """What to do when inserting an edge would close a cycle."""

    ABORT = "abort"
    SKIP_AND_WARN = "skip-and-warn"


class _Color(IntEnum):
    WHITE = 0  # unvisited
    GRAY = 1  # on the current DFS path
    BLACK = 2  # fully explored


def find_cycle(graph: DiGraph[T]) -> list[T] | None:
    """Find a cycle in the graph using a three-color depth-first search.

    The traversal is iterative so deep dependency chains do not hit the
    recursion limit.

    Args:
        graph: The graph to inspect.

    Returns:
        The nodes of the first cycle found, with the first node repeated
        at the end (e.g. ``['a', 'b', 'a']``), or None if the graph is acyclic.

    Example:
        >>> from featurelevels._graph import DiGraph
        >>> find_cycle(DiGraph.from_edges([("a", "b"), ("b", "a")]))
        ['a', 'b', 'a']

    """
    color: dict[T, _Color] = dict.fromkeys(graph.iter_nodes(), _Color.WHITE)

    for start in graph.iter_nodes():
        if color[start] is not _Color.WHITE:
            continue

        path: list[T] = [start]
        stack = [graph.iter_successors(start)]
        color[start] = _Color.GRAY

        while stack:
            for successor in stack[-1]:
                if color[successor] is _Color.GRAY:
                    # Back edge onto the current path
                    return [*path[path.index(successor) :], successor]
                if color[successor] is _Color.WHITE:
                    color[successor] = _Color.GRAY
                    path.append(successor)
                    stack.append(graph.iter_successors(successor))
                    break
            else:
                color[path.pop()] = _Color.BLACK
                stack.pop()

    return None


def has_cycle(graph: DiGraph[T]) -> bool:
    """Check if the graph contains a cycle, self-loops included."""
    return find_cycle(graph) is not None


def creates_cycle(graph: DiGraph[T], source: T, target: T) -> bool:
    """Check whether adding source -> target to an acyclic graph would close a cycle.

    This is the incremental counterpart of :func:`has_cycle`: on a graph
    that is currently acyclic, the new edge closes a cycle exactly when
    ``source`` is already reachable from ``target``.

    Args:
        graph: The graph before the insertion. Must be acyclic.
        source: The depending node of the prospective edge.
        target: The node depended upon.

    Returns:
        True if the graph would contain a cycle after the insertion.

    """
    if source == target:
        return True
    if source not in graph or target not in graph:
        return False

    visited: set[T] = {target}
    stack = [target]
    while stack:
        current = stack.pop()
        for successor in graph.iter_successors(current):
            if successor == source:
                return True
            if successor not in visited:
                visited.add(successor)
                stack.append(successor)
    return False
