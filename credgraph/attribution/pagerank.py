"""Cred attribution entry point: graph in, explained scores out."""

import logging

from ..graph.graph import AddressableGraph
from .config import DEFAULT_PAGERANK_OPTIONS, PagerankOptions
from .decomposition import PagerankNodeDecomposition, decompose
from .graph_to_markov_chain import (
    create_contributions,
    create_ordered_sparse_markov_chain,
    distribution_to_node_distribution,
)
from .markov_chain import find_stationary_distribution
from .weights import EdgeEvaluator

log = logging.getLogger(__name__)


def pagerank(
    graph: AddressableGraph,
    edge_evaluator: EdgeEvaluator,
    options: PagerankOptions | None = None,
) -> PagerankNodeDecomposition:
    """Compute cred for every node of ``graph`` along with its decomposition."""
    options = options or DEFAULT_PAGERANK_OPTIONS

    contributions = create_contributions(
        graph, edge_evaluator, options.self_loop_weight
    )
    osmc = create_ordered_sparse_markov_chain(contributions)
    stationary = find_stationary_distribution(
        osmc.chain,
        convergence_threshold=options.convergence_threshold,
        max_iterations=options.max_iterations,
        verbose=options.verbose,
    )
    log.info(
        f"PageRank over {len(osmc.node_order)} nodes: "
        f"iterations={stationary.iterations} converged={stationary.converged}"
    )

    pi = distribution_to_node_distribution(osmc.node_order, stationary.pi)
    return decompose(pi, contributions)
