"""Rendering of level maps and graphs as text, Rich tables and DOT."""

from __future__ import annotations

from collections.abc import Hashable
from typing import TYPE_CHECKING, TypeVar

from rich.table import Table

from ._levels import match_nothing

if TYPE_CHECKING:
    from rich.console import Console

    from ._graph import DiGraph
    from ._levels import NodePredicate

T = TypeVar("T", bound="Hashable")

DOT_PREAMBLE = """\
digraph G {
graph [style="rounded, filled", fontsize=10];
rankdir=LR;
node [shape=box, style="rounded,filled"]
"""

HIGHLIGHT_COLOR = "darkseagreen"


def _sorted_labels(nodes: frozenset[Hashable]) -> list[str]:
    return sorted(str(node) for node in nodes)


def format_level_listing(level_map: dict[int, frozenset[T]]) -> str:
    """Format a level map as one ``<level> -> [<members>]`` line per level.

    Example:
        >>> print(format_level_listing({1: frozenset({"a"}), 2: frozenset({"c", "b"})}))
        1 -> [a]
        2 -> [b, c]

    """
    return "\n".join(
        f"{level} -> [{', '.join(_sorted_labels(level_map[level]))}]" for level in sorted(level_map)
    )


def render_level_table(level_map: dict[int, frozenset[T]], console: Console) -> None:
    """Render a level map as a Rich table.

    Args:
        level_map: Mapping from level to nodes.
        console: Rich Console to output to.

    """
    if not level_map:
        console.print("[dim]No nodes in graph[/dim]")
        return

    table = Table(show_header=True, header_style="bold cyan")
    table.add_column("Level", justify="right", style="bold")
    table.add_column("Count", justify="right")
    table.add_column("Nodes")

    for level in sorted(level_map):
        nodes = level_map[level]
        table.add_row(str(level), str(len(nodes)), "\n".join(_sorted_labels(nodes)))

    console.print(table)
    total = sum(len(nodes) for nodes in level_map.values())
    console.print(f"\n[dim]Total: {total} nodes in {len(level_map)} levels[/dim]")


def _quote(label: str) -> str:
    escaped = label.replace("\\", "\\\\").replace('"', '\\"')
    return f'"{escaped}"'


def generate_dot(
    graph: DiGraph[T],
    level_map: dict[int, frozenset[T]],
    highlight: NodePredicate | None = None,
) -> str:
    """Generate a Graphviz DOT document with one cluster per level.

    Highlighted nodes get their style line before the level clusters, and
    all edge statements follow the clusters.

    Args:
        graph: The graph whose edges are drawn.
        level_map: Level map computed from the same graph.
        highlight: Predicate on node labels selecting nodes to color.

    Returns:
        The DOT document.

    """
    highlight = highlight or match_nothing
    lines = [DOT_PREAMBLE]

    for level in sorted(level_map):
        for label in _sorted_labels(level_map[level]):
            if highlight(label):
                lines.append(f"{_quote(label)} [ color={HIGHLIGHT_COLOR} ];")
    lines.append("")

    for level in sorted(level_map):
        members = " ".join(_quote(label) for label in _sorted_labels(level_map[level]))
        lines.append(
            f'\tsubgraph cluster_{level} {{ label="Level {level}"; shape=box; style=rounded; '
            f"node [style=rounded];\n{members} }}\n",
        )

    lines.extend(f"\t{_quote(str(src))} -> {_quote(str(dst))};" for src, dst in graph.edges())
    lines.append("}")
    return "\n".join(lines)


def format_ordering(graph: DiGraph[T], ordering: list[T]) -> str:
    """Format a topological ordering with each node's direct dependencies.

    The listing ends with a node and edge count summary.
    """
    lines = [
        f"{node!s:<50} -> [{', '.join(str(s) for s in graph.iter_successors(node))}]" for node in ordering
    ]
    lines.append(f"{len(graph)} nodes, {graph.edge_count()} edges.")
    return "\n".join(lines)
