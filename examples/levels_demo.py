"""Level sort of a small integer graph.

Run with:
    python examples/levels_demo.py
"""

from rich.console import Console

import featurelevels as fl

graph = fl.DiGraph.from_edges(
    [
        (1, 2),
        (1, 3),
        (2, 4),
        (2, 5),
        (3, 6),
        (3, 7),
        (1, 7),
        (2, 7),
        (8, 3),
        (8, 5),
        (8, 9),
        (9, 10),
        (10, 11),
        (6, 12),
        (11, 6),
    ],
)

if __name__ == "__main__":
    console = Console()
    sorter = fl.LevelSorter()
    ordering = sorter.sort(graph)

    console.print("Topologically sorted, for dependency build order reverse the list")
    console.print(ordering)
    console.print()
    console.print(fl.generate_dot(graph, sorter.level_map, fl.regex_predicate("^1$")), markup=False)
    console.print()
    fl.render_level_table(sorter.level_map, console)
