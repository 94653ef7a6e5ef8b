"""Node and edge weight evaluators.

An ``EdgeEvaluator`` tells the chain builder how much endorsement flows
along an edge in each direction. Node evaluators are folded into edge
evaluators with ``lift_node_evaluator``.
"""

from dataclasses import dataclass
from typing import Callable, Sequence

from ..graph.address import EdgeAddress, NodeAddress
from ..graph.graph import Edge


@dataclass(frozen=True)
class EdgeWeight:
    """Endorsement flowing src -> dst (forward) and dst -> src (backward)."""

    forward_weight: float
    backward_weight: float


NodeEvaluator = Callable[[NodeAddress], float]
EdgeEvaluator = Callable[[Edge], EdgeWeight]


@dataclass(frozen=True)
class NodeWeightRule:
    prefix: NodeAddress
    weight: float


@dataclass(frozen=True)
class EdgeWeightRule:
    prefix: EdgeAddress
    weight: float
    directionality: float = 0.5

    def __post_init__(self) -> None:
        if not 0.0 <= self.directionality <= 1.0:
            raise ValueError(
                f"directionality for {self.prefix} must be in [0, 1], "
                f"got {self.directionality}"
            )


def lift_node_evaluator(
    node_evaluator: NodeEvaluator, edge_evaluator: EdgeEvaluator
) -> EdgeEvaluator:
    """Scale each direction of an edge by the weight of the node it flows into."""

    def evaluator(edge: Edge) -> EdgeWeight:
        base = edge_evaluator(edge)
        return EdgeWeight(
            forward_weight=base.forward_weight * node_evaluator(edge.dst),
            backward_weight=base.backward_weight * node_evaluator(edge.src),
        )

    return evaluator


def compose_node_evaluators(*evaluators: NodeEvaluator) -> NodeEvaluator:
    """Sum several node evaluators, e.g. a base weight plus a heuristic bonus."""
    if not evaluators:
        raise ValueError("compose_node_evaluators needs at least one evaluator")

    def evaluator(node: NodeAddress) -> float:
        return sum(e(node) for e in evaluators)

    return evaluator


def _longest_match(rules: Sequence, address):
    best = None
    for rule in rules:
        if address.has_prefix(rule.prefix):
            if best is None or len(rule.prefix) > len(best.prefix):
                best = rule
    return best


def node_by_prefix(
    rules: Sequence[NodeWeightRule], default: float | None = None
) -> NodeEvaluator:
    """Weight nodes by the longest matching prefix rule."""
    rules = tuple(rules)

    def evaluator(node: NodeAddress) -> float:
        rule = _longest_match(rules, node)
        if rule is not None:
            return rule.weight
        if default is None:
            raise ValueError(f"No weight rule matches {node}")
        return default

    return evaluator


def edge_by_prefix(
    rules: Sequence[EdgeWeightRule], default: EdgeWeightRule | None = None
) -> EdgeEvaluator:
    """Weight edges by the longest matching prefix rule.

    A rule with weight ``w`` and directionality ``d`` sends ``w * d`` forward
    and ``w * (1 - d)`` backward.
    """
    rules = tuple(rules)

    def evaluator(edge: Edge) -> EdgeWeight:
        rule = _longest_match(rules, edge.address) or default
        if rule is None:
            raise ValueError(f"No weight rule matches {edge.address}")
        return EdgeWeight(
            forward_weight=rule.weight * rule.directionality,
            backward_weight=rule.weight * (1.0 - rule.directionality),
        )

    return evaluator


def uniform_edge_evaluator(
    forward_weight: float = 1.0, backward_weight: float = 1.0
) -> EdgeEvaluator:
    weight = EdgeWeight(forward_weight=forward_weight, backward_weight=backward_weight)

    def evaluator(edge: Edge) -> EdgeWeight:
        return weight

    return evaluator
