import logging
import re
from pathlib import Path
from typing import Annotated

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape

from featurelevels._builder import FeatureGraphs, build_graphs
from featurelevels._catalog import DEFAULT_VERSION, load_catalog
from featurelevels._errors import FeatureLevelsError
from featurelevels._graph import OnCycle
from featurelevels._levels import LevelSorter, regex_predicate
from featurelevels._render import format_level_listing, format_ordering, generate_dot, render_level_table

from .config import FeatureLevelsConfig, get_config

app = typer.Typer()

logger = logging.getLogger(__name__)
# Console for stderr (info/errors)
err_console = Console(stderr=True)
# Console for stdout (results)
out_console = Console()

DEFAULT_CATALOG = Path("features.toml")


@app.callback()
def callback(
    *,
    verbose: bool = typer.Option(default=False, help="Enable verbose output"),
) -> None:
    """Dependency-level reports for feature graphs."""
    log_level = logging.DEBUG if verbose else logging.INFO

    # Configure rich logging handler to output to stderr
    logging.basicConfig(
        level=log_level,
        format="%(message)s",
        handlers=[
            RichHandler(
                console=err_console,
                show_time=False,
                show_path=verbose,
                rich_tracebacks=True,
            ),
        ],
        force=True,
    )


def _print_plain(text: str) -> None:
    out_console.print(text, markup=False, emoji=False, highlight=False, soft_wrap=True)


def _check_pattern(option: str, pattern: str | None) -> None:
    if pattern is None:
        return
    try:
        re.compile(pattern)
    except re.error as e:
        err_console.print(f"[red]Error: Invalid {option} pattern '{escape(pattern)}': {e}[/red]")
        raise typer.Exit(code=1) from e


def _load_graphs(
    config: FeatureLevelsConfig,
    name: str,
    version: str | None,
    catalog: Path | None,
    on_cycle: OnCycle | None,
    *,
    compact: bool,
) -> FeatureGraphs:
    catalog_path = catalog or config.catalog or DEFAULT_CATALOG
    err_console.print(f"[cyan]Loading feature catalog from:[/cyan] {catalog_path}")
    provider = load_catalog(catalog_path)

    err_console.print(
        f"[cyan]Computing feature graph for[/cyan] [bold]{escape(name)}[/bold] {escape(version or DEFAULT_VERSION)}",
    )
    graphs = build_graphs(
        provider,
        name,
        version,
        on_cycle=on_cycle or config.on_cycle,
        compact_repositories=compact and config.compact_repositories,
    )
    err_console.print(
        f"[cyan]Feature graph:[/cyan] {len(graphs.feature_graph)} nodes, "
        f"{graphs.feature_graph.edge_count()} edges; "
        f"[cyan]repository graph:[/cyan] {len(graphs.repository_graph)} nodes, "
        f"{graphs.repository_graph.edge_count()} edges",
    )
    err_console.print()
    return graphs


NameArgument = Annotated[str, typer.Argument(help="Feature name")]
VersionArgument = Annotated[
    str | None,
    typer.Argument(help=f"The version of the feature (defaults to {DEFAULT_VERSION}, any version)"),
]
CatalogOption = Annotated[
    Path | None,
    typer.Option("-c", "--catalog", help="Path to the feature catalog TOML file"),
]
FeatureOption = Annotated[
    bool,
    typer.Option("--feature", help="Select feature graph (default is repository graph)"),
]
OnCycleOption = Annotated[
    OnCycle | None,
    typer.Option("--on-cycle", help="What to do when a circular dependency is found"),
]
NoCompactOption = Annotated[
    bool,
    typer.Option("--no-compact", help="Keep full repository URLs in the repository graph"),
]


@app.command()
def graph(  # noqa: PLR0913
    name: NameArgument,
    version: VersionArgument = None,
    *,
    catalog: CatalogOption = None,
    feature: FeatureOption = False,
    dot: Annotated[
        bool,
        typer.Option("--dot", help="Generate DOT output of the graph for GraphViz"),
    ] = False,
    table: Annotated[
        bool,
        typer.Option("--table", help="Show the levels as a table"),
    ] = False,
    node_pattern: Annotated[
        str | None,
        typer.Option("--node-pattern", help="Pattern selecting node names to highlight in DOT output"),
    ] = None,
    exclude: Annotated[
        str | None,
        typer.Option("--exclude", help="Pattern selecting infrastructure nodes to sink to the deepest level"),
    ] = None,
    on_cycle: OnCycleOption = None,
    no_compact: NoCompactOption = False,
) -> None:
    """Generate a dependency levelized report of the repositories (or features) needed by a feature."""
    _check_pattern("--node-pattern", node_pattern)
    _check_pattern("--exclude", exclude)

    try:
        config = get_config()
        graphs = _load_graphs(config, name, version, catalog, on_cycle, compact=not no_compact)
        selected = graphs.feature_graph if feature else graphs.repository_graph

        sorter = LevelSorter(is_excluded=regex_predicate(exclude or config.exclude))
        ordering = sorter.sort(selected)
        logger.debug(f"Topological order: {ordering}")
    except FeatureLevelsError as e:
        err_console.print(f"[red]✗ {escape(str(e))}[/red]")
        raise typer.Exit(code=1) from e

    if dot:
        highlight = regex_predicate(node_pattern or config.node_pattern)
        _print_plain(generate_dot(selected, sorter.level_map, highlight))
    elif table:
        render_level_table(sorter.level_map, out_console)
    else:
        _print_plain(format_level_listing(sorter.level_map))


@app.command()
def order(
    name: NameArgument,
    version: VersionArgument = None,
    *,
    catalog: CatalogOption = None,
    feature: FeatureOption = False,
    on_cycle: OnCycleOption = None,
    no_compact: NoCompactOption = False,
) -> None:
    """List the graph in topological order with each node's direct dependencies."""
    try:
        config = get_config()
        graphs = _load_graphs(config, name, version, catalog, on_cycle, compact=not no_compact)
        selected = graphs.feature_graph if feature else graphs.repository_graph
        ordering = LevelSorter().sort(selected)
    except FeatureLevelsError as e:
        err_console.print(f"[red]✗ {escape(str(e))}[/red]")
        raise typer.Exit(code=1) from e

    _print_plain(format_ordering(selected, ordering))


def main() -> None:
    app()
