"""Shared graphs for attribution tests."""

import pytest

from credgraph.attribution.weights import EdgeWeight
from credgraph.graph.address import EdgeAddress, NodeAddress
from credgraph.graph.graph import AddressableGraph, Edge

A = NodeAddress.from_parts(["src", "a"])
B = NodeAddress.from_parts(["src", "b"])
C = NodeAddress.from_parts(["src", "c"])
D = NodeAddress.from_parts(["src", "d"])
ISOLATED = NodeAddress.from_parts(["src", "isolated"])

# edge name -> (src, dst, forward, backward)
ADVANCED_EDGES = {
    "ab": (A, B, 1.0, 0.5),
    "bc": (B, C, 2.0, 1.0),
    "ca": (C, A, 1.0, 1.0),
    "ad": (A, D, 0.5, 0.25),
    "dd": (D, D, 1.0, 1.0),
    "ab2": (A, B, 3.0, 0.0),
}


def edge_address(name: str) -> EdgeAddress:
    return EdgeAddress.from_parts(["edge", name])


def _advanced_weight(edge: Edge) -> EdgeWeight:
    _, _, forward, backward = ADVANCED_EDGES[edge.address.parts[-1]]
    return EdgeWeight(forward_weight=forward, backward_weight=backward)


@pytest.fixture
def advanced_evaluator():
    return _advanced_weight


@pytest.fixture
def advanced_graph() -> AddressableGraph:
    """A triangle plus a pendant node with a loop, a parallel edge and an isolated node."""
    graph = AddressableGraph(check_invariants=True)
    for node in (A, B, C, D, ISOLATED):
        graph.add_node(node)
    for name, (src, dst, _, _) in ADVANCED_EDGES.items():
        graph.add_edge(Edge(address=edge_address(name), src=src, dst=dst))
    return graph


@pytest.fixture
def cycle_graph() -> AddressableGraph:
    """A -> B -> C -> A."""
    graph = AddressableGraph()
    for node in (A, B, C):
        graph.add_node(node)
    graph.add_edge(Edge(edge_address("ab"), A, B))
    graph.add_edge(Edge(edge_address("bc"), B, C))
    graph.add_edge(Edge(edge_address("ca"), C, A))
    return graph
