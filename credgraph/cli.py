"""CLI for credgraph."""

import json
import logging
from pathlib import Path

import click

from .attribution.config import DEFAULT_PAGERANK_OPTIONS, PagerankOptions
from .attribution.pagerank import pagerank
from .attribution.report import decomposition_to_json, render_decomposition
from .attribution.weight_config import DEFAULT_WEIGHT_CONFIG, load_weight_config
from .errors import CredGraphError
from .graph.address import NodeAddress
from .graph.graph import AddressableGraph, Direction
from .graph.serialization import load_graph

log = logging.getLogger(__name__)


@click.group()
@click.option("--log-level", default="WARNING", help="Logging level")
def cli(log_level: str):
    """credgraph - explainable cred scores for addressable graphs."""
    logging.basicConfig(
        level=log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def _load(graph_file: Path) -> AddressableGraph:
    try:
        return load_graph(graph_file)
    except (CredGraphError, ValueError, OSError) as exc:
        raise click.ClickException(f"Failed to load {graph_file}: {exc}") from exc


@cli.command()
@click.argument("graph_file", type=click.Path(exists=True, path_type=Path))
@click.option(
    "--weights",
    "-w",
    type=click.Path(exists=True, path_type=Path),
    default=None,
    help="YAML weight configuration",
)
@click.option(
    "--self-loop-weight",
    type=float,
    default=DEFAULT_PAGERANK_OPTIONS.self_loop_weight,
    show_default=True,
)
@click.option(
    "--convergence-threshold",
    type=float,
    default=DEFAULT_PAGERANK_OPTIONS.convergence_threshold,
    show_default=True,
)
@click.option(
    "--max-iterations",
    type=int,
    default=DEFAULT_PAGERANK_OPTIONS.max_iterations,
    show_default=True,
)
@click.option("--verbose", "-v", is_flag=True, help="Log every iteration")
@click.option("--prefix", "-p", default="", help="Only show nodes under a/b/c")
@click.option("--limit", "-n", type=int, default=25, help="Number of nodes to show")
@click.option(
    "--contributions", "-c", type=int, default=3, help="Contributions per node"
)
@click.option("--json", "as_json", is_flag=True, help="Emit JSON instead of a table")
def rank(
    graph_file: Path,
    weights: Path | None,
    self_loop_weight: float,
    convergence_threshold: float,
    max_iterations: int,
    verbose: bool,
    prefix: str,
    limit: int,
    contributions: int,
    as_json: bool,
):
    """Compute cred for every node of a graph."""
    if verbose:
        logging.getLogger("credgraph").setLevel(logging.INFO)

    graph = _load(graph_file)
    try:
        config = load_weight_config(weights) if weights else DEFAULT_WEIGHT_CONFIG
        options = PagerankOptions(
            self_loop_weight=self_loop_weight,
            convergence_threshold=convergence_threshold,
            max_iterations=max_iterations,
            verbose=verbose,
        )
        decomposition = pagerank(graph, config.edge_evaluator(), options)
    except (CredGraphError, ValueError, OSError) as exc:
        raise click.ClickException(str(exc)) from exc

    node_prefix = NodeAddress.parse(prefix) if prefix else None
    if as_json:
        click.echo(
            json.dumps(
                decomposition_to_json(decomposition, prefix=node_prefix), indent=2
            )
        )
        return

    click.echo(
        render_decomposition(
            decomposition,
            prefix=node_prefix,
            limit=limit,
            contributions=contributions,
        )
    )


@cli.command()
@click.argument("graph_file", type=click.Path(exists=True, path_type=Path))
def stats(graph_file: Path):
    """Show node and edge counts by top-level namespace."""
    graph = _load(graph_file)
    click.echo(str(graph.get_stats()))


@cli.command()
@click.argument("graph_file", type=click.Path(exists=True, path_type=Path))
@click.argument("node", type=str)
def inspect(graph_file: Path, node: str):
    """Inspect a node's connections in the graph (NODE as a/b/c)."""
    graph = _load(graph_file)
    address = NodeAddress.parse(node)
    if not graph.has_node(address):
        click.echo(f"Node not found: {address}")
        return

    click.echo(f"\nNode: {address}")
    neighbors = list(graph.neighbors(address, Direction.BOTH))
    if not neighbors:
        click.echo("No neighbors.")
        return

    click.echo(f"\nNeighbors ({len(neighbors)}):")
    for n in neighbors:
        arrow = "->" if n.edge.src == address else "<-"
        click.echo(f"  {arrow} [{n.edge.address}] {n.node}")


if __name__ == "__main__":
    cli()
