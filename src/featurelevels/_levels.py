"""Level sorting of dependency graphs.

Levels identify the sets of nodes that can be handled independently of
each other. Level 1 holds the nodes nothing depends on; a node always sits
on a deeper level than every node that depends on it, except for bottom
feeders, which are sunk to the deepest level after the sort.

The sort is Kahn's (1962) breadth-first topological sort with depth
tracking: the current and next BFS frontiers are kept as separate lists so
each frontier is exactly one level.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Callable, Hashable
from typing import TYPE_CHECKING, Generic, TypeVar

from ._errors import NotADagError
from ._graph import find_cycle

if TYPE_CHECKING:
    from ._graph import DiGraph

T = TypeVar("T", bound="Hashable")

logger = logging.getLogger(__name__)

NodePredicate = Callable[[str], bool]


def match_nothing(_label: str) -> bool:
    """Predicate that matches no node."""
    return False


def regex_predicate(pattern: str | None) -> NodePredicate:
    """Build a predicate that searches node labels for a regular expression.

    Plain strings work as substring matches. ``None`` or an empty pattern
    yields a predicate that matches nothing.
    """
    if not pattern:
        return match_nothing
    compiled = re.compile(pattern)
    return lambda label: compiled.search(label) is not None


def reclassify_bottom_feeders(
    level_map: dict[int, frozenset[T]],
    graph: DiGraph[T],
    is_excluded: NodePredicate = match_nothing,
) -> dict[int, frozenset[T]]:
    """Move terminal and excluded nodes to the deepest level.

    A node is a bottom feeder when, in the original graph, it has no
    successors, its label matches ``is_excluded``, or all of its successors
    match ``is_excluded``. Bottom feeders are merged into the deepest level.
    Levels left empty are dropped and the remaining levels renumbered from 1.

    Args:
        level_map: Mapping from level to the nodes on it, as computed by the sort.
        graph: The graph the level map was computed from.
        is_excluded: Predicate on a node's label marking infrastructure nodes.

    Returns:
        A new level map. The input is not modified.

    """
    if not level_map:
        return {}

    def is_bottom_feeder(node: T) -> bool:
        successors = graph.successors(node)
        if not successors or is_excluded(str(node)):
            return True
        return all(is_excluded(str(successor)) for successor in successors)

    bottom_feeders: set[T] = set()
    kept: dict[int, set[T]] = {}
    for level in sorted(level_map):
        kept[level] = set()
        for node in level_map[level]:
            if is_bottom_feeder(node):
                bottom_feeders.add(node)
            else:
                kept[level].add(node)

    logger.debug("Bottom feeders: %s", bottom_feeders)

    deepest = max(kept)
    kept[deepest] |= bottom_feeders

    non_empty = [nodes for _, nodes in sorted(kept.items()) if nodes]
    return {level: frozenset(nodes) for level, nodes in enumerate(non_empty, start=1)}


class LevelSorter(Generic[T]):
    """Sorts a DAG topologically and partitions its nodes into levels.

    The sorter keeps the level map of its last run. Every call to
    :meth:`sort` rebuilds that state from scratch, so an instance can be
    reused for several graphs one after the other, but not from several
    threads at once.

    Example:
        >>> from featurelevels._graph import DiGraph
        >>> graph = DiGraph.from_edges([("a", "b"), ("a", "c"), ("b", "d")])
        >>> sorter = LevelSorter()
        >>> sorter.sort(graph)
        ['a', 'b', 'c', 'd']
        >>> sorter.level_map[1]
        frozenset({'a'})

    """

    def __init__(self, *, is_excluded: NodePredicate | None = None) -> None:
        self._is_excluded: NodePredicate = is_excluded or match_nothing
        self._level_map: dict[int, frozenset[T]] = {}

    @property
    def level_map(self) -> dict[int, frozenset[T]]:
        """Level map computed by the last successful sort."""
        return dict(self._level_map)

    def levels(self) -> list[frozenset[T]]:
        """Nodes per level, in ascending level order."""
        return [self._level_map[level] for level in sorted(self._level_map)]

    def level_of(self, node: T) -> int:
        """Return the level a node was assigned to.

        Raises:
            KeyError: If the node was not part of the last sorted graph.

        """
        for level, nodes in self._level_map.items():
            if node in nodes:
                return level
        raise KeyError(node)

    def sort(self, graph: DiGraph[T]) -> list[T]:
        """Sort the graph and compute its level map.

        Args:
            graph: Dependency graph; must be directed and acyclic.

        Returns:
            Nodes in the order they became free of dependents, so for each
            edge (u, v), u comes before v.

        Raises:
            NotADagError: If the graph is not directed or contains a cycle.

        """
        self._level_map = {}

        if not graph.is_directed:
            msg = "Input graph must be directed and acyclic: graph is undirected"
            raise NotADagError(msg)
        cycle = find_cycle(graph)
        if cycle is not None:
            msg = f"Input graph must be directed and acyclic: found cycle {' -> '.join(map(str, cycle))}"
            raise NotADagError(msg)

        # The graph itself is never mutated; in-degrees are tracked here.
        degree: dict[T, int] = {node: graph.in_degree(node) for node in graph.iter_nodes()}

        current = [node for node, deg in degree.items() if deg == 0]
        order: list[T] = list(current)
        level_map: dict[int, frozenset[T]] = {}
        level = 1

        while current:
            logger.debug("Level %d queue=%s", level, current)
            level_map[level] = frozenset(current)

            following: list[T] = []
            for node in current:
                logger.debug("node:%s successors:%s", node, list(graph.iter_successors(node)))
                for successor in graph.iter_successors(node):
                    remaining = degree[successor]
                    degree[successor] = max(remaining - 1, 0)
                    if remaining == 1:
                        logger.debug("Adding %s to queue and output", successor)
                        following.append(successor)
                        order.append(successor)

            current = following
            level += 1

        logger.debug("All nodes visited after %d levels", len(level_map))

        self._level_map = reclassify_bottom_feeders(level_map, graph, self._is_excluded)
        return order
