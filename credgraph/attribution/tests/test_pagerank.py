"""End-to-end properties of the cred computation."""

from dataclasses import replace

import pytest

from credgraph.attribution.config import DEFAULT_PAGERANK_OPTIONS, PagerankOptions
from credgraph.attribution.graph_to_markov_chain import InEdge, SyntheticLoop
from credgraph.attribution.pagerank import pagerank
from credgraph.attribution.weights import EdgeWeight, uniform_edge_evaluator
from credgraph.errors import EmptyGraph
from credgraph.graph.address import EdgeAddress, NodeAddress
from credgraph.graph.graph import AddressableGraph, Edge

TIGHT = PagerankOptions(convergence_threshold=1e-13, max_iterations=10_000)


def forward_only(edge):
    return EdgeWeight(forward_weight=1.0, backward_weight=0.0)


def test_default_options():
    assert DEFAULT_PAGERANK_OPTIONS.self_loop_weight == 1e-3
    assert DEFAULT_PAGERANK_OPTIONS.convergence_threshold == 1e-7
    assert DEFAULT_PAGERANK_OPTIONS.max_iterations == 255
    assert DEFAULT_PAGERANK_OPTIONS.verbose is False


def test_scores_sum_to_one(advanced_graph, advanced_evaluator):
    result = pagerank(advanced_graph, advanced_evaluator)

    assert set(result) == set(advanced_graph.nodes())
    assert sum(entry.score for entry in result.values()) == pytest.approx(1.0, abs=1e-9)


def test_decomposition_partitions_each_score(advanced_graph, advanced_evaluator):
    result = pagerank(advanced_graph, advanced_evaluator, TIGHT)

    for node, entry in result.items():
        total = sum(s.contribution_score for s in entry.scored_contributions)
        assert total == pytest.approx(entry.score, rel=1e-6), node


def test_contributions_sorted_by_score(advanced_graph, advanced_evaluator):
    result = pagerank(advanced_graph, advanced_evaluator)

    for entry in result.values():
        scores = [s.contribution_score for s in entry.scored_contributions]
        assert all(a >= b for a, b in zip(scores, scores[1:]))


def test_zero_iterations_gives_uniform_scores(advanced_graph, advanced_evaluator):
    result = pagerank(
        advanced_graph, advanced_evaluator, PagerankOptions(max_iterations=0)
    )

    for entry in result.values():
        assert entry.score == pytest.approx(1 / 5)


@pytest.mark.parametrize("max_iterations", [1, 2, 255])
def test_isolated_nodes_stay_uniform(max_iterations):
    graph = AddressableGraph()
    for i in range(4):
        graph.add_node(NodeAddress.from_parts(["n", str(i)]))

    result = pagerank(
        graph, uniform_edge_evaluator(), PagerankOptions(max_iterations=max_iterations)
    )

    for entry in result.values():
        assert entry.score == pytest.approx(0.25)
        assert len(entry.scored_contributions) == 1
        assert isinstance(
            entry.scored_contributions[0].contribution.contributor, SyntheticLoop
        )


def test_cycle_is_symmetric(cycle_graph):
    result = pagerank(cycle_graph, forward_only)

    for entry in result.values():
        assert entry.score == pytest.approx(1 / 3, abs=1e-3)


def test_cycle_contribution_comes_from_predecessor(cycle_graph):
    result = pagerank(cycle_graph, forward_only)
    b = NodeAddress.from_parts(["src", "b"])
    a = NodeAddress.from_parts(["src", "a"])

    top = result[b].scored_contributions[0]
    assert isinstance(top.contribution.contributor, InEdge)
    assert top.source == a
    assert top.contribution_score == pytest.approx(
        result[a].score * 1.0 / (1.0 + 1e-3)
    )


def test_all_zero_weights_flow_only_through_loops(advanced_graph):
    result = pagerank(advanced_graph, uniform_edge_evaluator(0.0, 0.0))

    for entry in result.values():
        assert entry.score == pytest.approx(1 / 5)
        loop = [
            s
            for s in entry.scored_contributions
            if isinstance(s.contribution.contributor, SyntheticLoop)
        ]
        assert loop[0].contribution_score == pytest.approx(entry.score)
        assert sum(s.contribution_score for s in entry.scored_contributions) == (
            pytest.approx(entry.score)
        )


def test_sink_collects_score():
    a = NodeAddress.from_parts(["a"])
    b = NodeAddress.from_parts(["b"])
    graph = AddressableGraph().add_node(a).add_node(b)
    graph.add_edge(Edge(EdgeAddress.from_parts(["ab"]), a, b))

    result = pagerank(graph, forward_only)

    assert result[b].score > 0.99
    assert result[a].score < 0.01


def test_deterministic(advanced_graph, advanced_evaluator):
    first = pagerank(advanced_graph, advanced_evaluator)
    second = pagerank(advanced_graph.copy(), advanced_evaluator)

    assert first == second


def test_self_loop_weight_changes_result(advanced_graph, advanced_evaluator):
    light = pagerank(advanced_graph, advanced_evaluator)
    heavy = pagerank(
        advanced_graph,
        advanced_evaluator,
        replace(DEFAULT_PAGERANK_OPTIONS, self_loop_weight=10.0),
    )

    a = NodeAddress.from_parts(["src", "a"])
    assert light[a].score != pytest.approx(heavy[a].score)


def test_empty_graph_is_rejected():
    with pytest.raises(EmptyGraph):
        pagerank(AddressableGraph(), uniform_edge_evaluator())


def test_package_exports_entry_point(cycle_graph):
    import credgraph.attribution as attribution

    assert attribution.pagerank is pagerank
    assert attribution.DEFAULT_PAGERANK_OPTIONS is DEFAULT_PAGERANK_OPTIONS
    result = attribution.pagerank(cycle_graph, forward_only)
    assert isinstance(next(iter(result.values())), attribution.NodeDecomposition)
