"""Turn a weighted addressable graph into a sparse Markov chain.

Every node receives a small synthetic self-loop so that nodes without real
edges still have somewhere to send their score, and every edge contributes
in both directions according to the edge evaluator. The raw contributions
are kept for explanation; the chain holds them normalized per source.
"""

import logging
import math
from dataclasses import dataclass

import numpy as np

from ..errors import EmptyGraph, InvariantViolation, UnweightableEdge
from ..graph.address import NodeAddress
from ..graph.graph import AddressableGraph, Edge
from .markov_chain import SparseMarkovChain, SparseRow
from .weights import EdgeEvaluator

log = logging.getLogger(__name__)

SYNTHETIC_LOOP_KEY = "[synthetic loop]"


@dataclass(frozen=True)
class InEdge:
    """Score flowing into the edge's dst from its src."""

    edge: Edge


@dataclass(frozen=True)
class OutEdge:
    """Score flowing back into the edge's src from its dst."""

    edge: Edge


@dataclass(frozen=True)
class SyntheticLoop:
    pass


Contributor = InEdge | OutEdge | SyntheticLoop


@dataclass(frozen=True)
class Contribution:
    contributor: Contributor
    weight: float


ContributionTable = dict[NodeAddress, tuple[Contribution, ...]]


@dataclass(frozen=True)
class OrderedSparseMarkovChain:
    node_order: tuple[NodeAddress, ...]
    chain: SparseMarkovChain


def contributor_source(target: NodeAddress, contributor: Contributor) -> NodeAddress:
    """Resolve the node whose score a contribution to ``target`` draws on."""
    if isinstance(contributor, InEdge):
        if contributor.edge.dst != target:
            raise InvariantViolation(
                f"IN_EDGE {contributor.edge.address} does not end at {target}"
            )
        return contributor.edge.src
    if isinstance(contributor, OutEdge):
        if contributor.edge.src != target:
            raise InvariantViolation(
                f"OUT_EDGE {contributor.edge.address} does not start at {target}"
            )
        return contributor.edge.dst
    if isinstance(contributor, SyntheticLoop):
        return target
    raise TypeError(f"Unknown contributor: {contributor!r}")


def contributor_kind(contributor: Contributor) -> str:
    if isinstance(contributor, InEdge):
        return "IN_EDGE"
    if isinstance(contributor, OutEdge):
        return "OUT_EDGE"
    if isinstance(contributor, SyntheticLoop):
        return "SYNTHETIC_LOOP"
    raise TypeError(f"Unknown contributor: {contributor!r}")


def contributor_key(contributor: Contributor) -> str:
    """Stable string used to break ties between equal contributions."""
    if isinstance(contributor, (InEdge, OutEdge)):
        return str(contributor.edge.address)
    if isinstance(contributor, SyntheticLoop):
        return SYNTHETIC_LOOP_KEY
    raise TypeError(f"Unknown contributor: {contributor!r}")


def _checked_weight(value: float, edge: Edge, direction: str) -> float:
    try:
        weight = float(value)
    except (TypeError, ValueError) as exc:
        raise UnweightableEdge(
            f"{direction} weight for {edge.address} is not a number: {value!r}"
        ) from exc
    if not math.isfinite(weight) or weight < 0:
        raise UnweightableEdge(
            f"{direction} weight for {edge.address} must be finite and "
            f"non-negative, got {weight}"
        )
    return weight


def create_contributions(
    graph: AddressableGraph,
    edge_evaluator: EdgeEvaluator,
    self_loop_weight: float,
) -> ContributionTable:
    """Collect raw contributions for every node of ``graph``.

    Raises:
        EmptyGraph: if the graph has no nodes.
        UnweightableEdge: if the evaluator returns a negative weight.
    """
    if not self_loop_weight > 0:
        raise ValueError(f"self_loop_weight must be positive, got {self_loop_weight}")

    contributions: dict[NodeAddress, list[Contribution]] = {
        node: [Contribution(contributor=SyntheticLoop(), weight=self_loop_weight)]
        for node in graph.nodes()
    }
    if not contributions:
        raise EmptyGraph("Cannot compute a distribution over a graph with no nodes")

    for edge in graph.edges():
        weights = edge_evaluator(edge)
        forward = _checked_weight(weights.forward_weight, edge, "forward")
        backward = _checked_weight(weights.backward_weight, edge, "backward")
        contributions[edge.dst].append(
            Contribution(contributor=InEdge(edge), weight=forward)
        )
        contributions[edge.src].append(
            Contribution(contributor=OutEdge(edge), weight=backward)
        )

    log.debug(
        f"Created contributions for {len(contributions)} nodes "
        f"and {graph.edge_count()} edges"
    )
    return {node: tuple(items) for node, items in contributions.items()}


def total_out_weights(contributions: ContributionTable) -> dict[NodeAddress, float]:
    """Sum of raw weight each node hands out, its own synthetic loop included."""
    totals: dict[NodeAddress, float] = {node: 0.0 for node in contributions}
    for target, items in contributions.items():
        for contribution in items:
            source = contributor_source(target, contribution.contributor)
            if source not in totals:
                raise InvariantViolation(
                    f"Contribution to {target} draws on unknown node {source}"
                )
            totals[source] += contribution.weight
    return totals


def create_ordered_sparse_markov_chain(
    contributions: ContributionTable,
) -> OrderedSparseMarkovChain:
    """Normalize raw contributions into a column-stochastic chain.

    Node ``i`` of the chain is the ``i``-th key of ``contributions``.
    """
    node_order = tuple(contributions)
    index = {node: i for i, node in enumerate(node_order)}
    totals = total_out_weights(contributions)

    chain: list[SparseRow] = []
    for target in node_order:
        neighbors: list[int] = []
        weights: list[float] = []
        for contribution in contributions[target]:
            source = contributor_source(target, contribution.contributor)
            neighbors.append(index[source])
            weights.append(contribution.weight / totals[source])
        chain.append(
            SparseRow(
                neighbor=np.array(neighbors, dtype=np.int64),
                weight=np.array(weights, dtype=np.float64),
            )
        )
    return OrderedSparseMarkovChain(node_order=node_order, chain=tuple(chain))


def distribution_to_node_distribution(
    node_order: tuple[NodeAddress, ...], pi: np.ndarray
) -> dict[NodeAddress, float]:
    if len(node_order) != len(pi):
        raise InvariantViolation(
            f"Distribution has {len(pi)} entries for {len(node_order)} nodes"
        )
    return {node: float(pi[i]) for i, node in enumerate(node_order)}
