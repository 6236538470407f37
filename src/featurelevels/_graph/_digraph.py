"""Generic mutable directed graph."""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass, field

from featurelevels._errors import InvalidEdgeError
from typing import Generic, TypeVar

T = TypeVar("T")


@dataclass(slots=True)
class DiGraph(Generic[T]):
    """A simple directed graph over hashable nodes.

    An edge (a, b) means "a depends on b". Parallel edges are not
    representable; adding an existing edge is a no-op. Nodes and
    adjacencies iterate in insertion order, so every traversal over
    the graph is deterministic.

    Attributes:
        allows_self_loops: Whether an edge (a, a) may be added.
        _successors: Mapping from node to the nodes it depends on.
        _predecessors: Mapping from node to the nodes that depend on it.

    """

    allows_self_loops: bool = False
    _successors: dict[T, dict[T, None]] = field(default_factory=dict)
    _predecessors: dict[T, dict[T, None]] = field(default_factory=dict)

    @classmethod
    def from_edges(cls, edges: list[tuple[T, T]], *, allows_self_loops: bool = False) -> DiGraph[T]:
        """Build a graph from a list of (source, target) edges.

        Example:
            >>> graph = DiGraph.from_edges([("a", "b"), ("b", "c")])
            >>> graph.successors("a")
            frozenset({'b'})

        """
        graph: DiGraph[T] = cls(allows_self_loops=allows_self_loops)
        for src, dst in edges:
            graph.add_edge(src, dst)
        return graph

    @property
    def is_directed(self) -> bool:
        return True

    @property
    def nodes(self) -> frozenset[T]:
        """All nodes in the graph."""
        return frozenset(self._successors)

    def add_node(self, node: T) -> bool:
        """Add a node. Returns False if it was already present."""
        if node in self._successors:
            return False
        self._successors[node] = {}
        self._predecessors[node] = {}
        return True

    def add_edge(self, source: T, target: T) -> bool:
        """Add the edge source -> target, adding missing endpoints.

        Args:
            source: The depending node.
            target: The node depended upon.

        Returns:
            True if the edge is new, False if it was already present.

        Raises:
            InvalidEdgeError: If source equals target and self-loops are forbidden.

        """
        if source == target and not self.allows_self_loops:
            msg = f"Cannot add self-loop on '{source}': graph does not allow self-loops"
            raise InvalidEdgeError(msg)
        self.add_node(source)
        self.add_node(target)
        if target in self._successors[source]:
            return False
        self._successors[source][target] = None
        self._predecessors[target][source] = None
        return True

    def has_edge(self, source: T, target: T) -> bool:
        return target in self._successors.get(source, {})

    def iter_nodes(self) -> Iterator[T]:
        """Iterate over nodes in insertion order."""
        return iter(self._successors)

    def iter_successors(self, node: T) -> Iterator[T]:
        """Iterate over the direct dependencies of a node in insertion order."""
        return iter(self._successors.get(node, {}))

    def successors(self, node: T) -> frozenset[T]:
        """Get direct dependencies of a node (nodes it points to)."""
        return frozenset(self._successors.get(node, {}))

    def predecessors(self, node: T) -> frozenset[T]:
        """Get direct dependents of a node (nodes pointing to it)."""
        return frozenset(self._predecessors.get(node, {}))

    def in_degree(self, node: T) -> int:
        return len(self._predecessors.get(node, {}))

    def out_degree(self, node: T) -> int:
        return len(self._successors.get(node, {}))

    def edges(self) -> list[tuple[T, T]]:
        """All edges as (source, target) pairs in insertion order."""
        return [(src, dst) for src, targets in self._successors.items() for dst in targets]

    def edge_count(self) -> int:
        return sum(len(targets) for targets in self._successors.values())

    def __len__(self) -> int:
        """Return the number of nodes in the graph."""
        return len(self._successors)

    def __contains__(self, node: object) -> bool:
        """Check if a node is in the graph."""
        return node in self._successors
